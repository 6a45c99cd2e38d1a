# SPDX-License-Identifier: MIT
"""Tests for the in-memory site registry."""

import random
from datetime import UTC, datetime

import pytest

from discovery.exceptions import SiteNotFoundError
from discovery.models import SiteStatus
from discovery.registry import SiteRegistry


class TestMerge:
    """Test SiteRegistry.merge deduplication."""

    def test_new_sites_are_prepended_in_batch_order(self, make_site):
        registry = SiteRegistry([make_site("old.com")])
        added = registry.merge([make_site("first.com"), make_site("second.com")])

        assert [s.normalized_name for s in added] == ["firstcom", "secondcom"]
        assert registry.known_patterns() == ["firstcom", "secondcom", "oldcom"]

    def test_merge_is_idempotent(self, make_site):
        registry = SiteRegistry()
        batch = [make_site("a.com", sources=["u1", "u2"]), make_site("b.com")]

        assert len(registry.merge(batch)) == 2
        once = [site.model_dump() for site in registry]

        assert registry.merge(batch) == []
        assert [site.model_dump() for site in registry] == once

    def test_repeated_resightings_do_not_accumulate(self, make_site):
        registry = SiteRegistry()
        for _ in range(4):
            registry.merge([make_site("gacor88.com", sources=["https://a", "https://b"])])

        assert len(registry) == 1
        record = registry.list_sites()[0]
        assert record.source_count == 2
        assert record.sources == ["https://a", "https://b"]

    def test_duplicates_within_batch_keep_first(self, make_site):
        registry = SiteRegistry()
        first = make_site("Gacor.com", signature="gacorcom", confidence=0.9)
        second = make_site("GACOR.COM", signature="gacorcom", confidence=0.2)

        added = registry.merge([first, second])

        assert added == [first]
        assert registry.list_sites()[0].confidence_score == 0.9

    def test_existing_record_wins_and_absorbs_resighting(self, make_site):
        original = make_site("hoki.com", sources=["https://a.example"])
        original.status = SiteStatus.FALSE_POSITIVE
        registry = SiteRegistry([original])

        later = datetime(2024, 7, 1, tzinfo=UTC)
        resighted = make_site("hoki.com", sources=["https://b.example", "https://a.example"], seen=later)
        added = registry.merge([resighted])

        assert added == []
        record = registry.list_sites()[0]
        assert record.id == original.id
        assert record.status == SiteStatus.FALSE_POSITIVE
        assert record.first_seen < record.last_seen == later
        assert record.source_count == 2
        assert record.sources == ["https://a.example", "https://b.example"]

    def test_sources_capped(self, make_site):
        registry = SiteRegistry([make_site("x.com", sources=["u1", "u2", "u3"])], max_sources_per_site=3)
        registry.merge([make_site("x.com", sources=["u4"])])
        assert registry.list_sites()[0].sources == ["u1", "u2", "u3"]

    def test_empty_signature_is_skipped(self, make_site):
        registry = SiteRegistry()
        site = make_site("???")
        site.normalized_name = ""
        assert registry.merge([site]) == []
        assert len(registry) == 0


class TestStatus:
    """Test review status changes."""

    def test_toggle_flips_between_two_values(self, make_site):
        site = make_site("slot.com")
        registry = SiteRegistry([site])

        assert registry.toggle_status(site.id).status == SiteStatus.FALSE_POSITIVE
        assert registry.toggle_status(site.id).status == SiteStatus.ACTIVE

    def test_toggle_flagged_restores_active(self, make_site):
        site = make_site("slot.com", status=SiteStatus.FLAGGED)
        registry = SiteRegistry([site])
        assert registry.toggle_status(site.id).status == SiteStatus.ACTIVE

    def test_unknown_id_raises(self):
        registry = SiteRegistry()
        with pytest.raises(SiteNotFoundError):
            registry.toggle_status("missing")

    def test_set_status(self, make_site):
        site = make_site("slot.com")
        registry = SiteRegistry([site])
        registry.set_status(site.id, SiteStatus.FLAGGED)
        assert registry.list_sites(SiteStatus.FLAGGED) == [site]


class TestViews:
    """Test derived views of the registry."""

    def test_cleaned_list_excludes_false_positives(self, make_site):
        registry = SiteRegistry([
            make_site("a.com"),
            make_site("b.com", status=SiteStatus.FALSE_POSITIVE),
            make_site("c.com", status=SiteStatus.FLAGGED),
        ])
        assert registry.cleaned_list() == ["acom", "ccom"]

    def test_counts_by_status(self, make_site):
        registry = SiteRegistry([
            make_site("a.com"),
            make_site("b.com", status=SiteStatus.FALSE_POSITIVE),
        ])
        assert registry.counts_by_status() == {"active": 1, "flagged": 0, "false_positive": 1}

    def test_random_site(self, make_site):
        assert SiteRegistry().random_site(random.Random(1)) is None
        site = make_site("only.com")
        assert SiteRegistry([site]).random_site(random.Random(1)) is site

    def test_replace_drops_duplicates(self, make_site):
        registry = SiteRegistry()
        registry.replace([make_site("a.com"), make_site("a.com"), make_site("b.com")])
        assert registry.known_patterns() == ["acom", "bcom"]
