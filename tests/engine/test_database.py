# SPDX-License-Identifier: MIT
"""Tests for the SQLite-backed registry snapshot."""

import pytest

from discovery.database import RegistryStore, get_store
from discovery.models import DiscoveryResult, SiteStatus


@pytest.fixture
def store(tmp_path):
    store = get_store(f"sqlite:///{tmp_path / 'registry.db'}")
    yield store
    store.engine.dispose()


class TestGetStore:
    """Test store construction."""

    def test_no_url_means_memory_only(self):
        assert get_store(None) is None
        assert get_store("") is None

    def test_creates_tables(self, store):
        assert isinstance(store, RegistryStore)
        assert store.load() == []


class TestSnapshot:
    """Test save and load."""

    def test_round_trip_keeps_order_and_fields(self, store, make_site):
        sites = [
            make_site("newest.com", confidence=0.4, sources=["https://a", "https://b"]),
            make_site("older.com", status=SiteStatus.FALSE_POSITIVE, sources=[]),
        ]

        store.save(sites)
        loaded = store.load()

        assert [s.normalized_name for s in loaded] == ["newestcom", "oldercom"]
        assert loaded[0].id == sites[0].id
        assert loaded[0].sources == ["https://a", "https://b"]
        assert loaded[0].confidence_score == 0.4
        assert loaded[1].status == SiteStatus.FALSE_POSITIVE
        assert loaded[0].first_seen == sites[0].first_seen
        assert loaded[0].first_seen.tzinfo is not None

    def test_save_replaces_previous_snapshot(self, store, make_site):
        store.save([make_site("a.com"), make_site("b.com")])
        store.save([make_site("c.com")])

        assert [s.normalized_name for s in store.load()] == ["ccom"]


class TestAgentPersistence:
    """Test the agent writing through to the store."""

    @pytest.mark.anyio
    async def test_cycle_and_review_are_persisted(self, store, agent, fake_client, make_site):
        agent.store = store
        fake_client.queue(DiscoveryResult(sites=[make_site("gacor88.com")]))

        await agent.run_discovery()
        site = agent.registry.list_sites()[0]
        agent.toggle_status(site.id)

        loaded = store.load()
        assert [s.normalized_name for s in loaded] == ["gacor88com"]
        assert loaded[0].status == SiteStatus.FALSE_POSITIVE

    def test_load_restores_registry(self, store, agent, make_site):
        store.save([make_site("a.com"), make_site("b.com")])
        agent.store = store

        assert agent.load() == 2
        assert agent.registry.known_patterns() == ["acom", "bcom"]
