# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for GamblShield Discovery tests."""

import os
import random
from datetime import UTC, datetime
from typing import Generator

import pytest

# Set test environment variables before importing app
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DISABLE_LOGGING", "1")
os.environ.pop("REGISTRY_DATABASE_URL", None)

from discovery.agent import DiscoveryAgent
from discovery.config import AgentSettings
from discovery.models import DiscoveryResult, GamblingSite, SiteStatus


class FakeSearchClient:
    """Stands in for GroundedSearchClient; replays queued results or errors."""

    model = "fake-grounding-model"

    def __init__(self, results=None):
        self.results = list(results or [])
        self.calls: list[tuple[str, list[str]]] = []

    def queue(self, result) -> None:
        self.results.append(result)

    async def perform_discovery(self, query, known_patterns=None):
        self.calls.append((query, list(known_patterns or [])))
        if not self.results:
            return DiscoveryResult()
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio for async tests."""
    return "asyncio"


@pytest.fixture
def make_site():
    """Factory for registry records."""
    def _make_site(
        name: str,
        signature: str | None = None,
        confidence: float = 0.9,
        status: SiteStatus = SiteStatus.ACTIVE,
        sources: list[str] | None = None,
        seen: datetime | None = None,
    ) -> GamblingSite:
        seen = seen or datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        sources = sources if sources is not None else ["https://example.com/a"]
        return GamblingSite(
            site_name=name,
            normalized_name=signature or name.lower().replace(".", ""),
            first_seen=seen,
            last_seen=seen,
            confidence_score=confidence,
            status=status,
            source_count=len(sources),
            sources=sources,
        )
    return _make_site


@pytest.fixture
def fake_client() -> FakeSearchClient:
    return FakeSearchClient()


@pytest.fixture
def agent_settings() -> AgentSettings:
    """Agent settings with no learning-phase delay and a short cycle delay."""
    return AgentSettings(analysis_delay=0, cycle_delay=2, seed_query="situs slot gacor terbaru 2024")


@pytest.fixture
def agent(fake_client, agent_settings) -> DiscoveryAgent:
    return DiscoveryAgent(
        client=fake_client,
        agent_settings=agent_settings,
        rng=random.Random(7),
        tick_interval=0.05,
    )


@pytest.fixture
def test_client(agent) -> Generator:
    """Create a test client for the FastAPI application, wired to the test agent."""
    from fastapi.testclient import TestClient
    from api.main import app
    from api.services import get_agent

    app.dependency_overrides[get_agent] = lambda: agent
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
