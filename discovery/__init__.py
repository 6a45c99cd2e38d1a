"""
GamblShield Discovery engine.

Grounded-search extraction of gambling-site identifiers, a deduplicated
registry, and an autonomous hunting loop.
"""

from discovery.config import APP_VERSION

__version__ = APP_VERSION
