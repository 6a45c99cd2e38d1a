"""
Agent wiring for the API.

The DiscoveryAgent lives on app.state for the lifetime of the process;
routes receive it through the get_agent dependency.
"""

import logging

from fastapi import Request

from discovery.agent import DiscoveryAgent
from discovery.config import get_settings
from discovery.database import get_store

logger = logging.getLogger(__name__)


def create_agent() -> DiscoveryAgent:
    """Build the agent from settings and load any persisted registry."""
    settings = get_settings()
    agent = DiscoveryAgent(store=get_store(settings.registry.database_url))
    loaded = agent.load()
    if loaded:
        logger.info(f"Restored {loaded} registry records")
    return agent


def get_agent(request: Request) -> DiscoveryAgent:
    """Dependency for FastAPI to get the running agent."""
    return request.app.state.agent
