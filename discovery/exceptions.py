"""Exceptions raised by the discovery engine."""


class DiscoveryError(Exception):
    """Base class for discovery engine errors."""


class ConfigurationError(DiscoveryError):
    """Required configuration (e.g. the Gemini API key) is missing."""


class DiscoveryServiceError(DiscoveryError):
    """The grounding service call failed."""


class SiteNotFoundError(DiscoveryError, KeyError):
    """No registry record has the requested id."""

    def __init__(self, site_id: str):
        super().__init__(site_id)
        self.site_id = site_id

    def __str__(self) -> str:
        return f"Site not found: {self.site_id}"


class AgentBusyError(DiscoveryError):
    """A discovery cycle cannot start right now."""
