import asyncio
import logging
from typing import Any

from dotenv import load_dotenv
from fastmcp import Context, FastMCP

from .bridge import Bridge
from .config import LOG_LEVEL, BridgeConfig
from .host.mcp import McpHost
from .observability import clear_context
from .workflows import (
    call_graph,
    find_symbol,
    index_workspace,
    repo_map,
    select_context,
    select_from_selection,
    show_status,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "ContextKit Bridge"


def _respond(host: McpHost, payload: dict[str, Any]) -> dict[str, Any]:
    # Each tool call starts its own trace; drop it before the next request.
    clear_context()
    return payload | host.response_extras()


def register_tools(mcp: FastMCP, bridge: Bridge) -> None:
    """Expose the bridge workflows as MCP tools."""

    @mcp.tool(name="select_context")
    async def select_context_tool(
        ctx: Context, query: str, budget: int | None = None
    ) -> dict[str, Any]:
        """Select the most relevant code for a natural-language query.

        Returns ranked context as markdown under "content". The query is passed to
        contextkit verbatim as a single argument.

        Args:
            query: What code you are looking for, e.g. "how does authentication work".
            budget: Token ceiling for the returned context (default from config).
        """
        host = McpHost(ctx)
        outcome = await select_context(bridge.context(host), query, budget=budget)
        return _respond(host, outcome.to_dict())

    @mcp.tool(name="select_related")
    async def select_related_tool(
        ctx: Context, selection: str, budget: int | None = None
    ) -> dict[str, Any]:
        """Find code related to a snippet (first 500 characters are used)."""
        host = McpHost(ctx)
        outcome = await select_from_selection(bridge.context(host), selection, budget=budget)
        return _respond(host, outcome.to_dict())

    @mcp.tool(name="find_symbol")
    async def find_symbol_tool(ctx: Context, name: str) -> dict[str, Any]:
        """Look up a symbol by name in the contextkit index."""
        host = McpHost(ctx)
        outcome = await find_symbol(bridge.context(host), name)
        return _respond(host, outcome.to_dict())

    @mcp.tool(name="call_graph")
    async def call_graph_tool(ctx: Context, function_name: str) -> dict[str, Any]:
        """Show callers and callees of a function."""
        host = McpHost(ctx)
        outcome = await call_graph(bridge.context(host), function_name)
        return _respond(host, outcome.to_dict())

    @mcp.tool(name="repo_map")
    async def repo_map_tool(
        ctx: Context, query: str, budget: int | None = None
    ) -> dict[str, Any]:
        """Return a structural map of the code relevant to a query."""
        host = McpHost(ctx)
        outcome = await repo_map(bridge.context(host), query, budget=budget)
        return _respond(host, outcome.to_dict())

    @mcp.tool(name="index_workspace")
    async def index_workspace_tool(ctx: Context, force: bool = True) -> dict[str, Any]:
        """Initialize (if needed) and index the workspace.

        Only one indexing run is allowed at a time; a concurrent request returns
        status "already_running" without starting anything.

        Args:
            force: Re-index even when the workspace is already indexed.
        """
        host = McpHost(ctx)
        outcome = await index_workspace(bridge.context(host), force=force)
        return _respond(host, outcome.to_dict() | {"log": list(host.output)})

    @mcp.tool(name="workspace_status")
    async def workspace_status_tool(ctx: Context) -> dict[str, Any]:
        """Show the contextkit doctor report for the workspace."""
        host = McpHost(ctx)
        result = await show_status(bridge.context(host))
        if result is None:
            return _respond(host, {"status": "no_workspace"})
        return _respond(host, result.to_dict())

    _ = select_context_tool
    _ = select_related_tool
    _ = find_symbol_tool
    _ = call_graph_tool
    _ = repo_map_tool
    _ = index_workspace_tool
    _ = workspace_status_tool


def build_server(config: BridgeConfig | None = None, bridge: Bridge | None = None) -> FastMCP:
    """Create the FastMCP instance with all tools registered.

    Args:
        config: Settings; loaded from the environment when None.
        bridge: Shared bridge state; built from ``config`` when None.
    """
    if bridge is None:
        bridge = Bridge(config or BridgeConfig.from_env())

    mcp = FastMCP(SERVER_NAME)
    register_tools(mcp, bridge)
    return mcp


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def main() -> None:
    load_dotenv()
    configure_logging()

    bridge = Bridge(BridgeConfig.from_env())
    logger.info("Starting %s (cli=%s)", SERVER_NAME, bridge.config.cli_path)
    if bridge.config.auto_index:
        # Blocks until the startup check (and any recovery run) finishes.
        asyncio.run(bridge.activate(McpHost()))
    server = build_server(bridge=bridge)
    server.run()


if __name__ == "__main__":
    main()
