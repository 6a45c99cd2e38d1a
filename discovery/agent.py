"""
Discovery agent: manual cycles and the autonomous hunting loop.

One cycle = learning phase (prime the prompt with known signatures),
grounded search, merge into the registry. In autonomous mode the agent
evolves its own query from a random known site, runs a cycle, waits
`cycle_delay` seconds and repeats. Failed cycles are retried after the
same fixed delay.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from discovery.activity import ActivityLog
from discovery.config import APP_VERSION, AgentSettings, settings
from discovery.database import RegistryStore
from discovery.exceptions import AgentBusyError
from discovery.exporter import build_filter_text, filter_filename
from discovery.gemini import GroundedSearchClient
from discovery.models import GamblingSite, SiteStatus
from discovery.registry import SiteRegistry
from discovery.strategies import evolve_query


@dataclass
class DiscoveryOutcome:
    """What a single cycle produced."""
    query: str
    added: list[GamblingSite] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DiscoveryAgent:
    """Owns the registry, the activity stream and the autonomous loop."""

    def __init__(
        self,
        client: Optional[GroundedSearchClient] = None,
        registry: Optional[SiteRegistry] = None,
        activity: Optional[ActivityLog] = None,
        store: Optional[RegistryStore] = None,
        agent_settings: Optional[AgentSettings] = None,
        rng: Optional[random.Random] = None,
        tick_interval: float = 1.0,
    ):
        self.settings = agent_settings or settings.agent
        self.client = client or GroundedSearchClient(min_confidence=self.settings.min_confidence)
        self.registry = registry or SiteRegistry(max_sources_per_site=settings.gemini.max_sources_per_site)
        self.activity = activity or ActivityLog(limit=self.settings.log_limit)
        self.store = store
        self.tick_interval = tick_interval
        self._rng = rng or random.Random()

        self.search_query = self.settings.seed_query
        self.is_searching = False
        self.is_analyzing = False
        self.is_autonomous = False
        self.cycle_count = 0
        self.countdown = 0
        self._task: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> int:
        """Load the persisted registry, if a store is configured."""
        if self.store is None:
            return 0
        self.registry.replace(self.store.load())
        return len(self.registry)

    def _persist(self) -> None:
        if self.store is None:
            return
        try:
            self.store.save(self.registry.list_sites())
        except SQLAlchemyError:
            logger.exception("Failed to persist registry snapshot")

    # ------------------------------------------------------------------
    # Discovery cycle
    # ------------------------------------------------------------------

    def start_countdown(self) -> None:
        self.countdown = self.settings.cycle_delay

    async def run_discovery(self, query: Optional[str] = None) -> Optional[DiscoveryOutcome]:
        """
        Run one discovery cycle.

        Returns None without doing anything when the query is blank or a
        cycle is already running.
        """
        query_to_use = query or self.search_query
        if not query_to_use.strip() or self.is_searching:
            return None

        self.is_searching = True
        try:
            # Learning phase
            self.is_analyzing = True
            self.activity.add("Analyzing current registry for existing patterns...", "info")
            known_patterns = self.registry.known_patterns()
            if known_patterns:
                self.activity.add(
                    f"Knowledge base primed with {len(known_patterns)} existing entries.", "success"
                )
            await asyncio.sleep(self.settings.analysis_delay)
            self.is_analyzing = False

            # Discovery phase
            self.activity.add(f'Initiating context-aware search for: "{query_to_use}"', "info")
            try:
                result = await self.client.perform_discovery(query_to_use, known_patterns)

                if result.sources:
                    self.activity.add(f"Successfully indexed {len(result.sources)} public sources.", "success")

                added = self.registry.merge(result.sites)
                if added:
                    self.activity.add(f"Learned {len(added)} new unique site signatures.", "success")
                else:
                    self.activity.add("No new unique signatures found in this cycle.", "warning")
                self._persist()
            except Exception as e:
                message = str(e) or "Unknown error"
                logger.opt(exception=e).debug(f"Discovery cycle for '{query_to_use}' failed")
                self.activity.add(f"Error during discovery: {message}", "error")
                if self.is_autonomous:
                    self.start_countdown()
                return DiscoveryOutcome(query=query_to_use, error=message)

            self.activity.add("Discovery cycle complete.", "success")
            if self.is_autonomous:
                self.cycle_count += 1
                self.start_countdown()

            return DiscoveryOutcome(query=query_to_use, added=added, sources=result.sources)
        finally:
            self.is_analyzing = False
            self.is_searching = False

    async def run_manual(self, query: Optional[str] = None) -> DiscoveryOutcome:
        """Operator-triggered cycle. Raises AgentBusyError instead of silently skipping."""
        if self.is_autonomous:
            raise AgentBusyError("Manual discovery is disabled while autonomous mode is active")
        if self.is_searching:
            raise AgentBusyError("A discovery cycle is already running")
        if query is not None and query.strip():
            self.search_query = query.strip()
        if not self.search_query.strip():
            raise AgentBusyError("Search query is empty")

        outcome = await self.run_discovery()
        if outcome is None:
            raise AgentBusyError("A discovery cycle is already running")
        return outcome

    # ------------------------------------------------------------------
    # Autonomous mode
    # ------------------------------------------------------------------

    async def _autonomous_loop(self) -> None:
        while self.is_autonomous:
            if not self.is_searching and self.countdown == 0:
                next_query = evolve_query(self.registry, self.search_query, self._rng)
                self.activity.add(f'Autonomous trigger: Evolving search based on "{next_query}"', "info")
                outcome = await self.run_discovery(next_query)
                if outcome is None:
                    self.start_countdown()
                continue

            await asyncio.sleep(self.tick_interval)
            if self.is_autonomous and self.countdown > 0:
                self.countdown -= 1

    def set_autonomous(self, enabled: bool) -> None:
        """Turn autonomous mode on or off. Must be called from the running event loop."""
        if enabled == self.is_autonomous:
            return

        self.is_autonomous = enabled
        if enabled:
            self.activity.add("Autonomous Mode ACTIVATED. Agent will now evolve self-queries.", "warning")
            if self._task is None or self._task.done():
                self._task = asyncio.create_task(self._autonomous_loop())
                self._task.add_done_callback(self._on_loop_done)
        else:
            self.activity.add("Autonomous Mode DEACTIVATED.", "info")
            # An in-flight cycle finishes; the loop exits on its next check
            if self._task is not None and not self.is_searching:
                self._task.cancel()
                self._task = None

    def _on_loop_done(self, task: asyncio.Task) -> None:
        """Leave autonomous mode if the loop task died with an exception."""
        if task.cancelled() or task.exception() is None:
            return
        error = task.exception()
        logger.opt(exception=error).error("Autonomous loop stopped unexpectedly")
        if self._task is task:
            self._task = None
        self.is_autonomous = False
        self.activity.add(f"Autonomous Mode DEACTIVATED after error: {error}", "error")

    def toggle_autonomous(self) -> bool:
        self.set_autonomous(not self.is_autonomous)
        return self.is_autonomous

    async def shutdown(self) -> None:
        self.is_autonomous = False
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            # A crashed loop was already reported by _on_loop_done
            await asyncio.gather(task, return_exceptions=True)

    # ------------------------------------------------------------------
    # Review and export
    # ------------------------------------------------------------------

    def toggle_status(self, site_id: str) -> GamblingSite:
        site = self.registry.toggle_status(site_id)
        logger.info(f"Site {site.normalized_name} is now {site.status.value}")
        self._persist()
        return site

    def set_status(self, site_id: str, status: SiteStatus) -> GamblingSite:
        site = self.registry.set_status(site_id, status)
        logger.info(f"Site {site.normalized_name} set to {site.status.value}")
        self._persist()
        return site

    def export_filter(self) -> tuple[str, str]:
        """Return (filename, content) for the filter download."""
        content = build_filter_text(self.registry.list_sites())
        self.activity.add(f"Exported {len(self.registry)} sites to filter.txt", "success")
        return filter_filename(), content

    def keywords(self) -> str:
        return build_filter_text(self.registry.list_sites())

    def record_clipboard(self, success: bool) -> None:
        """Report the outcome of a dashboard clipboard copy."""
        if success:
            self.activity.add(f"Copied {len(self.registry)} keywords to clipboard.", "success")
        else:
            self.activity.add("Failed to copy to clipboard.", "error")

    def status(self) -> dict:
        return {
            "total_learned": len(self.registry),
            "cycle_count": self.cycle_count,
            "countdown": self.countdown,
            "is_searching": self.is_searching,
            "is_analyzing": self.is_analyzing,
            "is_autonomous": self.is_autonomous,
            "search_query": self.search_query,
            "status_label": "Autonomous Hunting" if self.is_autonomous else "Active - Ready",
            "engine": self.client.model,
            "version": APP_VERSION,
        }
