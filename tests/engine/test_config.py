# SPDX-License-Identifier: MIT
"""Tests for environment-driven settings."""

from pathlib import Path

from discovery.config import AgentSettings, APISettings, GeminiSettings, RegistrySettings


class TestGeminiSettings:
    """Test the grounding service settings."""

    def test_defaults(self, monkeypatch):
        for name in ("GEMINI_API_KEY", "GOOGLE_API_KEY", "API_KEY", "GEMINI_MODEL"):
            monkeypatch.delenv(name, raising=False)
        settings = GeminiSettings(_env_file=None)
        assert settings.api_key == ""
        assert settings.model == "gemini-3-flash-preview"
        assert settings.max_known_patterns == 20

    def test_api_key_aliases(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.setenv("GOOGLE_API_KEY", "google-key")
        assert GeminiSettings(_env_file=None).api_key == "google-key"

        monkeypatch.setenv("GEMINI_API_KEY", "gemini-key")
        assert GeminiSettings(_env_file=None).api_key == "gemini-key"

    def test_model_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")
        assert GeminiSettings(_env_file=None).model == "gemini-2.5-flash"


class TestAgentSettings:
    """Test agent settings."""

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("AGENT_SEED_QUERY", "judi bola")
        monkeypatch.setenv("AGENT_CYCLE_DELAY", "30")
        monkeypatch.setenv("AGENT_EXPORT_DIR", "/tmp/filters")

        settings = AgentSettings(_env_file=None)

        assert settings.seed_query == "judi bola"
        assert settings.cycle_delay == 30
        assert settings.export_dir == Path("/tmp/filters")


class TestAPISettings:
    """Test API settings."""

    def test_cors_origins_list(self):
        settings = APISettings(_env_file=None, cors_origins=" http://a.test , ,http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]


class TestRegistrySettings:
    def test_memory_only_by_default(self, monkeypatch):
        monkeypatch.delenv("REGISTRY_DATABASE_URL", raising=False)
        assert RegistrySettings(_env_file=None).database_url is None
