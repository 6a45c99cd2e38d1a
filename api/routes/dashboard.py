"""
Dashboard Route.

Serves the single-page dashboard. The page polls the agent and registry
endpoints; all state lives in the API process.
"""

import logging
from functools import lru_cache
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

logger = logging.getLogger(__name__)
router = APIRouter()

DASHBOARD_PATH = Path(__file__).parent.parent / "static" / "dashboard.html"


@lru_cache()
def _load_dashboard() -> str:
    return DASHBOARD_PATH.read_text(encoding="utf-8")


@router.get("", response_class=HTMLResponse)
async def get_dashboard():
    """Single-page dashboard."""
    return HTMLResponse(content=_load_dashboard())
