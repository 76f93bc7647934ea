"""Console front end: one-shot queries and a simple line-by-line session"""

import argparse
import asyncio
import logging
import sys
from typing import Iterable, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import Settings, get_config
from .main import configure_logging
from .models.routing import ConnectionState, ProviderState
from .services.coordinator import ExecutionCoordinator, OutcomeKind, QueryOutcome
from .services.error_handler import ConfigurationError
from .services.llm_client import LLMClient
from .services.providers import get_profile

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "quit"}

_STATUS_STYLES = {
    ConnectionState.CONNECTED: "green",
    ConnectionState.FAILED: "red",
    ConnectionState.PENDING: "yellow",
    ConnectionState.NOT_TESTED: "dim",
}

_OUTCOME_STYLES = {
    OutcomeKind.EXECUTED: "green",
    OutcomeKind.GENERAL: "cyan",
    OutcomeKind.NO_MATCH: "yellow",
    OutcomeKind.TOOL_FAILED: "red",
    OutcomeKind.UNAVAILABLE: "red",
    OutcomeKind.DEGRADED: "magenta",
}


def provider_table(states: Iterable[ProviderState]) -> Table:
    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Status")
    table.add_column("Tools", style="magenta", justify="right")
    for state in states:
        style = _STATUS_STYLES[state.status.state]
        table.add_row(
            get_profile(state.provider).display_name,
            f"[{style}]{state.status.describe()}[/{style}]",
            str(len(state.tools)),
        )
    return table


def outcome_panel(outcome: QueryOutcome) -> Panel:
    title = outcome.provider.value if outcome.provider is not None else outcome.decision.state.value
    return Panel(
        outcome.text,
        title=f"{title} ({outcome.kind.value})",
        border_style=_OUTCOME_STYLES[outcome.kind],
    )


async def run_once(coordinator: ExecutionCoordinator, query: str, console: Console) -> QueryOutcome:
    console.print(f"\n🔍 Query: '{query}'")
    outcome = await coordinator.process_query(query)
    console.print(outcome_panel(outcome))
    return outcome


async def run_session(
    coordinator: ExecutionCoordinator,
    console: Console,
    lines: Optional[Iterable[str]] = None,
) -> List[QueryOutcome]:
    """Test every provider, then answer queries until exit/quit or end of input.

    ``lines`` replaces interactive input when given.
    """
    console.print("[bold green]codepilot[/bold green] - ask about Linear, GitHub or Supabase\n")
    console.print("[yellow]Testing provider connections...[/yellow]")
    for report in await coordinator.initialize_providers():
        console.print(f"  {report.message}")
    console.print(provider_table(coordinator.provider_states()))

    source = iter(lines) if lines is not None else None
    outcomes = []
    while True:
        try:
            if source is not None:
                line = next(source)
            else:
                # Blocking read, kept off the event loop
                line = await asyncio.to_thread(console.input, "[bold cyan]> [/bold cyan]")
        except (EOFError, StopIteration):
            break
        query = line.strip()
        if not query:
            continue
        if query.lower() in EXIT_COMMANDS:
            break
        outcomes.append(await run_once(coordinator, query, console))

    console.print("\n[bold]Goodbye![/bold]")
    return outcomes


async def _run(settings: Settings, query: Optional[str], console: Console) -> None:
    llm = LLMClient.from_settings(settings)
    coordinator = ExecutionCoordinator(settings, llm)
    try:
        if query:
            await run_once(coordinator, query, console)
        else:
            logger.info("Starting interactive session")
            await run_session(coordinator, console)
    finally:
        await coordinator.aclose()
        await llm.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codepilot",
        description="Route natural-language requests to Linear, GitHub and Supabase MCP tools",
    )
    parser.add_argument("query", nargs="*", help="Run a single query and exit")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_config()

    configure_logging(settings, args.log_level)

    console = Console()
    try:
        settings.validate_credentials()
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        return 1

    query = " ".join(args.query).strip() or None
    try:
        asyncio.run(_run(settings, query, console))
    except KeyboardInterrupt:
        console.print("\n[bold]Interrupted[/bold]")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
