"""
GamblShield Discovery API.

FastAPI backend and single-page dashboard for the discovery agent.

Run with:
    uvicorn api.main:app --reload --port 8000
"""

from api.main import app

__version__ = "2.6.0"

__all__ = ["app"]
