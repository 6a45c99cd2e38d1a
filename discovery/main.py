#!/usr/bin/env python3
"""
GamblShield Discovery - Command Line Entry Point

Run discovery cycles from the terminal, hunt autonomously, export the
filter list, or start the dashboard API.

Usage:
    python -m discovery.main discover "situs slot gacor terbaru"
    python -m discovery.main hunt --cycles 5
    python -m discovery.main export --output ./exports
    python -m discovery.main serve
"""

import asyncio
from pathlib import Path
from typing import Optional

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from discovery.agent import DiscoveryAgent
from discovery.config import APP_NAME, APP_VERSION, settings
from discovery.database import get_store
from discovery.exporter import write_filter_file
from discovery.models import GamblingSite, SiteStatus
from discovery.registry import SiteRegistry

console = Console()

_CONFIDENCE_COLORS = {"high": "green", "medium": "yellow", "low": "dim"}


def build_agent() -> DiscoveryAgent:
    """Agent wired from settings, with the persisted registry loaded."""
    agent = DiscoveryAgent(store=get_store(settings.registry.database_url))
    agent.load()
    return agent


def render_registry(sites: list[GamblingSite]) -> Table:
    table = Table(title=f"Evolving Registry ({len(sites)} identified)")
    table.add_column("Platform Identifier")
    table.add_column("Keyword Signature", style="magenta")
    table.add_column("Confidence", justify="center")
    table.add_column("Context", justify="center")
    table.add_column("Status")
    table.add_column("Discovered")

    for site in sites:
        color = _CONFIDENCE_COLORS[site.confidence_tier]
        status = (
            "[green]active[/green]" if site.status == SiteStatus.ACTIVE
            else f"[red]{site.status.value}[/red]"
        )
        table.add_row(
            site.site_name.upper(),
            site.normalized_name,
            f"[{color}]{site.confidence_score * 100:.0f}%[/{color}]",
            str(site.source_count),
            status,
            site.first_seen.astimezone().strftime("%H:%M:%S"),
        )
    return table


def print_activity(agent: DiscoveryAgent) -> None:
    styles = {"success": "green", "error": "red", "warning": "magenta", "info": "white"}
    for entry in reversed(agent.activity.entries()):
        style = styles.get(entry.type, "white")
        console.print(f"[dim][{entry.timestamp}][/dim] [{style}]{entry.message}[/{style}]")


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug):
    """GamblShield Discovery - gambling-site signature hunter"""
    if debug:
        from discovery.utils.logging import setup_logging
        setup_logging(level="DEBUG")


@cli.command()
@click.argument("query", required=False)
def discover(query: Optional[str]):
    """
    Run a single manual discovery cycle.

    QUERY defaults to the configured seed query (AGENT_SEED_QUERY).
    """
    console.print(f"\n[bold green]{APP_NAME}[/bold green] v{APP_VERSION}\n")
    agent = build_agent()

    outcome = asyncio.run(agent.run_discovery(query))
    print_activity(agent)

    if outcome is None:
        console.print("[yellow]Nothing to do: empty query.[/yellow]")
        return
    if not outcome.ok:
        raise click.ClickException(outcome.error)

    console.print()
    console.print(render_registry(agent.registry.list_sites()))


@cli.command()
@click.option("--cycles", type=int, default=0, help="Stop after N successful cycles (0 = run until Ctrl+C)")
@click.option("--delay", type=int, default=None, help="Seconds between cycles (default: AGENT_CYCLE_DELAY)")
def hunt(cycles: int, delay: Optional[int]):
    """Run autonomous mode in the terminal."""
    console.print(f"\n[bold magenta]{APP_NAME} - Autonomous Hunting[/bold magenta]\n")
    agent = build_agent()
    if delay is not None:
        agent.settings = agent.settings.model_copy(update={"cycle_delay": delay})

    async def _hunt():
        agent.set_autonomous(True)
        try:
            while agent.is_autonomous:
                await asyncio.sleep(1)
                if cycles and agent.cycle_count >= cycles:
                    agent.set_autonomous(False)
        finally:
            await agent.shutdown()

    try:
        asyncio.run(_hunt())
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping autonomous mode")

    print_activity(agent)
    console.print()
    console.print(render_registry(agent.registry.list_sites()))
    console.print(f"\nSelf-cycles: [bold]{agent.cycle_count}[/bold]")


@cli.command()
@click.option("--output", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Directory for the filter file (default: AGENT_EXPORT_DIR)")
def export(output: Optional[Path]):
    """Write the persisted registry as a filter list."""
    store = get_store(settings.registry.database_url)
    if store is None:
        raise click.ClickException("REGISTRY_DATABASE_URL is not set; nothing to export")

    registry = SiteRegistry(store.load())
    path = write_filter_file(registry.list_sites(), output or settings.agent.export_dir)
    console.print(f"[green]✓[/green] Exported {len(registry.cleaned_list())} signatures to {path}")


@cli.command()
@click.option("--host", default=None, help="Bind host (default: API_HOST)")
@click.option("--port", type=int, default=None, help="Bind port (default: API_PORT)")
def serve(host: Optional[str], port: Optional[int]):
    """Start the dashboard API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=host or settings.api.host,
        port=port or settings.api.port,
        reload=settings.api.reload,
    )


if __name__ == "__main__":
    cli()
