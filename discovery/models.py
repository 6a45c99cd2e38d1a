"""
Data models for the discovery engine.

GamblingSite is the registry record; ExtractionPayload is the JSON shape
requested from the grounding service.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class SiteStatus(str, Enum):
    """Review status of a registry record."""

    ACTIVE = "active"
    FLAGGED = "flagged"
    FALSE_POSITIVE = "false_positive"


LogType = Literal["info", "success", "warning", "error"]


def new_site_id() -> str:
    """Short random id for a registry record."""
    return uuid.uuid4().hex[:9]


def utc_now() -> datetime:
    return datetime.now(UTC)


class GamblingSite(BaseModel):
    """A discovered gambling-site identifier."""

    id: str = Field(default_factory=new_site_id)
    site_name: str
    normalized_name: str
    first_seen: datetime = Field(default_factory=utc_now)
    last_seen: datetime = Field(default_factory=utc_now)
    confidence_score: float = 0.0
    status: SiteStatus = SiteStatus.ACTIVE
    source_count: int = 0
    sources: list[str] = []

    @field_validator("confidence_score", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        """Keep confidence within 0.0 - 1.0."""
        try:
            v = float(v)
        except (TypeError, ValueError):
            return 0.0
        return min(1.0, max(0.0, v))

    @property
    def confidence_tier(self) -> str:
        if self.confidence_score > 0.8:
            return "high"
        if self.confidence_score > 0.5:
            return "medium"
        return "low"


class AgentLog(BaseModel):
    """One line of the on-screen activity stream."""

    timestamp: str
    message: str
    type: LogType = "info"


class DiscoveryResult(BaseModel):
    """Records and grounding sources produced by one service call."""

    sites: list[GamblingSite] = []
    sources: list[str] = []


# =============================================================================
# Grounding service response schema
# =============================================================================

class ExtractedSite(BaseModel):
    """A site as reported by the model, before normalization."""

    site_name: str
    normalized_name: str | None = None
    confidence_score: float | None = None


class ExtractionPayload(BaseModel):
    """Top-level JSON object returned by the model."""

    extracted_sites: list[ExtractedSite] = []
