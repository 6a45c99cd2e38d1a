"""
In-memory registry of discovered sites.

Records are kept newest first and are unique by normalized_name.
"""

import random
from typing import Iterator, Optional

from loguru import logger

from discovery.exceptions import SiteNotFoundError
from discovery.models import GamblingSite, SiteStatus


class SiteRegistry:
    """Ordered, deduplicated list of GamblingSite records."""

    def __init__(self, sites: Optional[list[GamblingSite]] = None, max_sources_per_site: int = 3):
        self._sites: list[GamblingSite] = []
        self.max_sources_per_site = max_sources_per_site
        if sites:
            self.replace(sites)

    def __len__(self) -> int:
        return len(self._sites)

    def __iter__(self) -> Iterator[GamblingSite]:
        return iter(list(self._sites))

    def _index(self) -> dict[str, GamblingSite]:
        return {site.normalized_name: site for site in self._sites}

    def merge(self, new_sites: list[GamblingSite]) -> list[GamblingSite]:
        """
        Merge a batch into the registry by normalized_name, keeping first occurrence.

        Existing records win: their id, status and first_seen are kept. A
        re-sighting only applies idempotent updates: the later last_seen, the
        larger source_count and unseen URIs up to the cap. New records are
        prepended in batch order, so merging the same batch twice is a no-op.

        Returns:
            The records that were actually added
        """
        existing = self._index()
        added: list[GamblingSite] = []
        seen_in_batch: set[str] = set()

        for site in new_sites:
            key = site.normalized_name
            if not key or key in seen_in_batch:
                continue
            seen_in_batch.add(key)

            known = existing.get(key)
            if known is None:
                added.append(site)
                continue

            known.last_seen = max(known.last_seen, site.last_seen)
            known.source_count = max(known.source_count, site.source_count)
            for uri in site.sources:
                if len(known.sources) >= self.max_sources_per_site:
                    break
                if uri not in known.sources:
                    known.sources.append(uri)

        if added:
            self._sites = added + self._sites
            logger.debug(f"Registry merge: +{len(added)} (total {len(self._sites)})")
        return added

    def get(self, site_id: str) -> GamblingSite:
        for site in self._sites:
            if site.id == site_id:
                return site
        raise SiteNotFoundError(site_id)

    def list_sites(self, status: Optional[SiteStatus] = None) -> list[GamblingSite]:
        if status is None:
            return list(self._sites)
        return [site for site in self._sites if site.status == status]

    def toggle_status(self, site_id: str) -> GamblingSite:
        """Flip a record between active and false_positive (anything else becomes active)."""
        site = self.get(site_id)
        if site.status == SiteStatus.ACTIVE:
            site.status = SiteStatus.FALSE_POSITIVE
        else:
            site.status = SiteStatus.ACTIVE
        return site

    def set_status(self, site_id: str, status: SiteStatus) -> GamblingSite:
        site = self.get(site_id)
        site.status = status
        return site

    def known_patterns(self) -> list[str]:
        """Normalized names, newest first."""
        return [site.normalized_name for site in self._sites]

    def cleaned_list(self) -> list[str]:
        """Normalized names of every record not marked false positive."""
        return [
            site.normalized_name
            for site in self._sites
            if site.status != SiteStatus.FALSE_POSITIVE
        ]

    def counts_by_status(self) -> dict[str, int]:
        counts = {status.value: 0 for status in SiteStatus}
        for site in self._sites:
            counts[site.status.value] += 1
        return counts

    def random_site(self, rng: Optional[random.Random] = None) -> Optional[GamblingSite]:
        if not self._sites:
            return None
        return (rng or random).choice(self._sites)

    def replace(self, sites: list[GamblingSite]) -> None:
        """Load a snapshot, dropping later duplicates."""
        self._sites = []
        self.merge(sites)
