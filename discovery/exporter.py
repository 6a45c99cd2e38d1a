"""Filter-list export: space-separated signatures for chat moderation tools."""

from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from loguru import logger

from discovery.models import GamblingSite, SiteStatus


def build_filter_text(sites: Iterable[GamblingSite]) -> str:
    """Space-join the signatures of every record not marked false positive."""
    return " ".join(
        site.normalized_name
        for site in sites
        if site.status != SiteStatus.FALSE_POSITIVE
    )


def filter_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"gambling_filter_{today.isoformat()}.txt"


def write_filter_file(
    sites: Iterable[GamblingSite],
    directory: Path,
    today: Optional[date] = None,
) -> Path:
    """Write the filter list into directory and return the file path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    path = directory / filter_filename(today)
    content = build_filter_text(sites)
    path.write_text(content, encoding="utf-8")

    logger.info(f"Wrote filter list to {path} ({len(content.split())} signatures)")
    return path
