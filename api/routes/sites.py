"""
Registry API Routes.

List discovered sites, review them (toggle / set status) and export the
cleaned signature list.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from api.services import get_agent
from discovery.agent import DiscoveryAgent
from discovery.exceptions import SiteNotFoundError
from discovery.models import GamblingSite, SiteStatus

logger = logging.getLogger(__name__)
router = APIRouter()


class SiteResponse(BaseModel):
    """Registry record as shown in the dashboard table."""
    id: str
    site_name: str
    normalized_name: str
    first_seen: datetime
    last_seen: datetime
    confidence_score: float
    confidence_tier: str
    status: SiteStatus
    source_count: int
    sources: list[str] = []

    @classmethod
    def from_site(cls, site: GamblingSite) -> "SiteResponse":
        return cls(**site.model_dump(), confidence_tier=site.confidence_tier)


class SiteListResponse(BaseModel):
    count: int
    sites: list[SiteResponse]


class StatusUpdateRequest(BaseModel):
    """Explicit status assignment."""
    status: SiteStatus


class KeywordsResponse(BaseModel):
    keywords: str
    count: int


@router.get("", response_model=SiteListResponse)
async def list_sites(
    status: Optional[SiteStatus] = Query(None, description="Only records with this status"),
    agent: DiscoveryAgent = Depends(get_agent),
):
    """Get the registry, newest first."""
    sites = agent.registry.list_sites(status)
    return SiteListResponse(count=len(sites), sites=[SiteResponse.from_site(s) for s in sites])


@router.get("/export", response_class=PlainTextResponse)
async def export_sites(agent: DiscoveryAgent = Depends(get_agent)):
    """Download the cleaned signature list (false positives excluded)."""
    filename, content = agent.export_filter()
    return PlainTextResponse(
        content=content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/keywords", response_model=KeywordsResponse)
async def get_keywords(agent: DiscoveryAgent = Depends(get_agent)):
    """Cleaned signature list for clipboard copy."""
    keywords = agent.keywords()
    return KeywordsResponse(keywords=keywords, count=len(keywords.split()))


@router.get("/{site_id}", response_model=SiteResponse)
async def get_site(site_id: str, agent: DiscoveryAgent = Depends(get_agent)):
    """Get a single registry record."""
    try:
        return SiteResponse.from_site(agent.registry.get(site_id))
    except SiteNotFoundError:
        raise HTTPException(status_code=404, detail="Site not found")


@router.post("/{site_id}/toggle", response_model=SiteResponse)
async def toggle_site_status(site_id: str, agent: DiscoveryAgent = Depends(get_agent)):
    """Flag a record as false positive, or restore it."""
    try:
        site = agent.toggle_status(site_id)
    except SiteNotFoundError:
        raise HTTPException(status_code=404, detail="Site not found")
    return SiteResponse.from_site(site)


@router.put("/{site_id}/status", response_model=SiteResponse)
async def update_site_status(
    site_id: str,
    request: StatusUpdateRequest,
    agent: DiscoveryAgent = Depends(get_agent),
):
    """Set a record's review status explicitly."""
    try:
        site = agent.set_status(site_id, request.status)
    except SiteNotFoundError:
        raise HTTPException(status_code=404, detail="Site not found")
    return SiteResponse.from_site(site)
