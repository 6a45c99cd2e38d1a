"""Query evolution for autonomous mode: seed the next search from a known site."""

import random
from typing import Optional

from discovery.registry import SiteRegistry
from discovery.utils.text import brand_stem

QUERY_STRATEGIES = [
    lambda name: f"link alternatif {name}",
    lambda name: f"situs serupa {name}",
    lambda name: f"daftar agen {brand_stem(name)}",
    lambda name: f"promo terbaru {name}",
]


def evolve_query(
    registry: SiteRegistry,
    seed_query: str,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a random known site and a random strategy; fall back to the seed query."""
    rng = rng or random.Random()
    site = registry.random_site(rng)
    if site is None:
        return seed_query

    strategy = rng.choice(QUERY_STRATEGIES)
    return strategy(site.site_name)
