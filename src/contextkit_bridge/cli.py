import asyncio
import logging
import sys
from dataclasses import dataclass, replace
from typing import TextIO

import click
from dotenv import load_dotenv

from .bridge import Bridge
from .config import BridgeConfig
from .host.terminal import TerminalHost
from .server import build_server
from .workflows import (
    QueryOutcome,
    call_graph,
    find_symbol,
    index_workspace,
    repo_map,
    select_context,
    select_from_selection,
    show_status,
)

logger = logging.getLogger(__name__)


@dataclass
class CliState:
    bridge: Bridge
    host: TerminalHost


def _exit_for(outcome: QueryOutcome) -> None:
    if not outcome.ok:
        sys.exit(1)


@click.group()
@click.option(
    "--workspace",
    "-w",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    default=None,
    help="Workspace root (default: CONTEXTKIT_BASE_DIR, else the current directory)",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Accept remediation prompts")
@click.option("--verbose", "-v", is_flag=True, help="Echo the contextkit output log to stderr")
@click.pass_context
def cli(ctx: click.Context, workspace: str | None, assume_yes: bool, verbose: bool) -> None:
    """Drive the contextkit CLI with auto-initialize and auto-index recovery."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    if isinstance(ctx.obj, Bridge):
        bridge = ctx.obj
    else:
        try:
            bridge = Bridge(BridgeConfig.from_env())
        except RuntimeError as exc:
            raise click.ClickException(str(exc)) from exc
    host = TerminalHost(
        workspace,
        assume_yes=assume_yes,
        interactive=sys.stdin.isatty(),
        verbose=verbose,
    )
    if workspace:
        bridge.config = replace(bridge.config, base_dir=workspace)
    ctx.obj = CliState(bridge=bridge, host=host)


@cli.command("select")
@click.argument("query")
@click.option("--budget", type=click.IntRange(min=1), default=None, help="Token ceiling")
@click.pass_obj
def select_command(state: CliState, query: str, budget: int | None) -> None:
    """Select context for QUERY and print it as markdown."""
    ctx = state.bridge.context(state.host)
    _exit_for(asyncio.run(select_context(ctx, query, budget=budget)))


@cli.command("related")
@click.argument("selection", type=click.File("r"), default="-")
@click.option("--budget", type=click.IntRange(min=1), default=None, help="Token ceiling")
@click.pass_obj
def related_command(state: CliState, selection: TextIO, budget: int | None) -> None:
    """Find code related to a snippet read from SELECTION (default: stdin)."""
    ctx = state.bridge.context(state.host)
    _exit_for(asyncio.run(select_from_selection(ctx, selection.read(), budget=budget)))


@cli.command("symbol")
@click.argument("name")
@click.pass_obj
def symbol_command(state: CliState, name: str) -> None:
    """Look up symbol NAME."""
    ctx = state.bridge.context(state.host)
    _exit_for(asyncio.run(find_symbol(ctx, name)))


@cli.command("graph")
@click.argument("function_name")
@click.pass_obj
def graph_command(state: CliState, function_name: str) -> None:
    """Print the call graph of FUNCTION_NAME."""
    ctx = state.bridge.context(state.host)
    _exit_for(asyncio.run(call_graph(ctx, function_name)))


@cli.command("map")
@click.argument("query")
@click.option("--budget", type=click.IntRange(min=1), default=None, help="Token ceiling")
@click.pass_obj
def map_command(state: CliState, query: str, budget: int | None) -> None:
    """Print a repository map focused on QUERY."""
    ctx = state.bridge.context(state.host)
    _exit_for(asyncio.run(repo_map(ctx, query, budget=budget)))


@cli.command("index")
@click.option(
    "--force/--no-force",
    default=True,
    show_default=True,
    help="Re-index even when the workspace is already indexed",
)
@click.pass_obj
def index_command(state: CliState, force: bool) -> None:
    """Initialize (if needed) and index the workspace."""
    ctx = state.bridge.context(state.host)
    outcome = asyncio.run(index_workspace(ctx, force=force))
    if not outcome.ok:
        sys.exit(1)


@cli.command("status")
@click.pass_obj
def status_command(state: CliState) -> None:
    """Show the contextkit doctor report."""
    ctx = state.bridge.context(state.host)
    result = asyncio.run(show_status(ctx))
    if result is None or not result.ok:
        sys.exit(1)


@cli.command("serve")
@click.pass_obj
def serve_command(state: CliState) -> None:
    """Run the MCP server over stdio."""
    bridge = state.bridge
    if bridge.config.auto_index:
        asyncio.run(bridge.activate(state.host))
    build_server(bridge=bridge).run()


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
