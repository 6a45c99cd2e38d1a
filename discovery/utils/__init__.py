"""Utility modules for the discovery engine."""

from discovery.utils.logging import setup_logging
from discovery.utils.text import brand_stem, normalize_signature

__all__ = [
    # Logging
    "setup_logging",
    # Text utilities
    "normalize_signature",
    "brand_stem",
]
