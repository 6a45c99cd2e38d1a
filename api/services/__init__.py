"""
Services for the GamblShield Discovery API.

Wires the discovery agent into the FastAPI application.
"""

from .agent_service import create_agent, get_agent

__all__ = [
    "create_agent",
    "get_agent",
]
