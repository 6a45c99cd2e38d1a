"""
Discovery Agent API Routes.

Manual discovery cycles, autonomous mode, the seed query and the
activity stream shown on the dashboard.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from api.services import get_agent
from discovery.agent import DiscoveryAgent
from discovery.exceptions import AgentBusyError
from discovery.models import AgentLog

logger = logging.getLogger(__name__)
router = APIRouter()


class DiscoveryRequest(BaseModel):
    """Manual discovery; query defaults to the current seed query."""
    query: str | None = Field(None, max_length=500)


class DiscoveryResponse(BaseModel):
    query: str
    added: int
    sources: list[str] = []
    total: int
    error: str | None = None


class SeedQueryRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)


class AutonomousRequest(BaseModel):
    enabled: bool


class ClipboardReport(BaseModel):
    """Outcome of a dashboard clipboard copy."""
    success: bool


class AgentStatusResponse(BaseModel):
    total_learned: int
    cycle_count: int
    countdown: int
    is_searching: bool
    is_analyzing: bool
    is_autonomous: bool
    search_query: str
    status_label: str
    engine: str
    version: str


@router.get("/status", response_model=AgentStatusResponse)
async def get_status(agent: DiscoveryAgent = Depends(get_agent)):
    """Agent state: counters, countdown and mode flags."""
    return agent.status()


@router.get("/logs", response_model=list[AgentLog])
async def get_logs(agent: DiscoveryAgent = Depends(get_agent)):
    """Activity stream, newest first."""
    return agent.activity.entries()


@router.post("/run", response_model=DiscoveryResponse)
async def run_discovery(request: DiscoveryRequest, agent: DiscoveryAgent = Depends(get_agent)):
    """
    Run one manual discovery cycle.

    Service errors are reported in the response (and the activity stream),
    not as HTTP errors. Returns 409 while a cycle is running or autonomous
    mode is active.
    """
    try:
        outcome = await agent.run_manual(request.query)
    except AgentBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return DiscoveryResponse(
        query=outcome.query,
        added=len(outcome.added),
        sources=outcome.sources,
        total=len(agent.registry),
        error=outcome.error,
    )


@router.put("/query", response_model=AgentStatusResponse)
async def set_seed_query(request: SeedQueryRequest, agent: DiscoveryAgent = Depends(get_agent)):
    """Update the seed query used by manual cycles and as the autonomous fallback."""
    if not request.query.strip():
        raise HTTPException(status_code=422, detail="Query must not be blank")
    agent.search_query = request.query.strip()
    return agent.status()


@router.post("/autonomous", response_model=AgentStatusResponse)
async def set_autonomous(request: AutonomousRequest, agent: DiscoveryAgent = Depends(get_agent)):
    """Turn autonomous mode on or off."""
    agent.set_autonomous(request.enabled)
    logger.info(f"Autonomous mode {'enabled' if request.enabled else 'disabled'} via API")
    return agent.status()


@router.post("/clipboard", status_code=204)
async def report_clipboard(report: ClipboardReport, agent: DiscoveryAgent = Depends(get_agent)):
    """Record a dashboard clipboard copy in the activity stream."""
    agent.record_clipboard(report.success)
