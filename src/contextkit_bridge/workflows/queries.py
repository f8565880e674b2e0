"""Query workflows: one parametrized pipeline over small descriptors.

resolve workspace -> build argv -> run contextkit -> empty check -> publish,
with failures classified and routed to a remediation.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..config import SELECTION_QUERY_LIMIT
from ..config.workspace import resolve_workspace
from ..host.base import NoticeLevel
from ..index.orchestrator import IndexOutcome
from ..observability import log_event, set_workflow_context
from ..runner.errors import ExternalCLIError, FailureKind
from .context import WorkflowContext
from .indexing import NO_WORKSPACE_MESSAGE, index_workspace

logger = logging.getLogger(__name__)

INITIALIZE_ACTION = "Initialize"
NO_CALL_RELATIONSHIPS_MARKER = "no call relationships"


class QueryStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    FAILED = "failed"
    NO_WORKSPACE = "no_workspace"
    CANCELLED = "cancelled"


def is_blank(output: str) -> bool:
    return not output.strip()


def _graph_is_empty(output: str) -> bool:
    return is_blank(output) or NO_CALL_RELATIONSHIPS_MARKER in output.lower()


def _selection_query(text: str) -> str:
    return f"Code related to: {text[:SELECTION_QUERY_LIMIT]}"


def _select_args(query: str, budget: int) -> list[str]:
    return ["select", query, "--budget", str(budget), "--format", "markdown"]


@dataclass(frozen=True)
class QueryDescriptor:
    name: str
    build_args: Callable[[str, int], list[str]]
    status_text: str
    success_message: str
    to_query: Callable[[str], str] = str.strip
    is_empty: Callable[[str], bool] = is_blank
    empty_message: str = "ContextKit: No results found"
    empty_input_message: str | None = None  # None: blank input is a silent cancel
    language: str = "markdown"
    beside: bool = False


SELECT = QueryDescriptor(
    name="select",
    build_args=_select_args,
    status_text="Finding context...",
    success_message="ContextKit: Context copied to clipboard!",
)

SELECT_FROM_SELECTION = QueryDescriptor(
    name="select_from_selection",
    build_args=_select_args,
    status_text="Finding related code...",
    success_message="ContextKit: Related code copied to clipboard!",
    to_query=_selection_query,
    empty_input_message="ContextKit: No text selected",
    beside=True,
)

SYMBOL = QueryDescriptor(
    name="symbol",
    build_args=lambda name, _budget: ["symbol", name],
    status_text="Looking up symbol...",
    success_message="ContextKit: Symbol matches copied to clipboard!",
    empty_message="ContextKit: No matching symbols",
    language="plaintext",
)

CALL_GRAPH = QueryDescriptor(
    name="graph",
    build_args=lambda function_name, _budget: ["graph", function_name],
    status_text="Building call graph...",
    success_message="ContextKit: Call graph copied to clipboard!",
    is_empty=_graph_is_empty,
    empty_message="ContextKit: No call relationships found",
    language="plaintext",
)

REPO_MAP = QueryDescriptor(
    name="map",
    build_args=lambda query, budget: [*_select_args(query, budget), "--mode", "map"],
    status_text="Mapping repository...",
    success_message="ContextKit: Map copied to clipboard!",
)

DESCRIPTORS: dict[str, QueryDescriptor] = {
    d.name: d for d in (SELECT, SELECT_FROM_SELECTION, SYMBOL, CALL_GRAPH, REPO_MAP)
}


@dataclass
class QueryOutcome:
    status: QueryStatus
    content: str = ""
    message: str = ""
    failure_kind: FailureKind | None = None
    recommended_action: str | None = None
    recovery: IndexOutcome | None = None

    @property
    def ok(self) -> bool:
        return self.status in (QueryStatus.SUCCESS, QueryStatus.EMPTY)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value, "message": self.message}
        if self.content:
            data["content"] = self.content
        if self.failure_kind is not None:
            data["failure_kind"] = self.failure_kind.value
        if self.recommended_action:
            data["recommended_action"] = self.recommended_action
        if self.recovery is not None:
            data["recovery"] = self.recovery.to_dict()
        return data


async def run_query(
    ctx: WorkflowContext,
    descriptor: QueryDescriptor,
    text: str,
    *,
    budget: int | None = None,
) -> QueryOutcome:
    """Run one query workflow.

    User text reaches contextkit as a single argv token; it is never split or
    interpreted by a shell. The status reporter is back to idle on every return.
    When the user accepts recovery for an uninitialized workspace and indexing
    succeeds, the query is run once more and that result is returned.
    """
    set_workflow_context(descriptor.name)

    root = await resolve_workspace(ctx.config, ctx.host)
    if root is None:
        await ctx.host.notify(NoticeLevel.WARNING, NO_WORKSPACE_MESSAGE)
        return QueryOutcome(status=QueryStatus.NO_WORKSPACE, message=NO_WORKSPACE_MESSAGE)

    if is_blank(text or ""):
        if descriptor.empty_input_message:
            await ctx.host.notify(NoticeLevel.WARNING, descriptor.empty_input_message)
        return QueryOutcome(
            status=QueryStatus.CANCELLED, message=descriptor.empty_input_message or ""
        )

    query = descriptor.to_query(text)
    args = descriptor.build_args(query, budget or ctx.config.default_budget)
    log_event({"kind": "query_start", "query_preview": query, "root": root})

    try:
        return await _execute(ctx, descriptor, args, root)
    except ExternalCLIError as exc:
        outcome = await _handle_failure(ctx, exc, offer_recovery=True)

    if outcome.recovery is None or not outcome.recovery.ok:
        return outcome

    # The workspace is ready now; answer the original query once.
    try:
        retried = await _execute(ctx, descriptor, args, root)
    except ExternalCLIError as exc:
        retried = await _handle_failure(ctx, exc, offer_recovery=False)
    retried.recovery = outcome.recovery
    return retried


async def _execute(
    ctx: WorkflowContext, descriptor: QueryDescriptor, args: list[str], root: str
) -> QueryOutcome:
    with ctx.status.busy(descriptor.status_text):
        output = await ctx.client.run_checked(args, root)

    if descriptor.is_empty(output):
        await ctx.host.notify(NoticeLevel.INFO, descriptor.empty_message)
        return QueryOutcome(status=QueryStatus.EMPTY, message=descriptor.empty_message)

    await ctx.host.publish(output, language=descriptor.language, beside=descriptor.beside)
    await ctx.notify_success(descriptor.success_message)
    log_event({"kind": "query_complete", "content_len": len(output)})
    return QueryOutcome(
        status=QueryStatus.SUCCESS, content=output, message=descriptor.success_message
    )


async def _handle_failure(
    ctx: WorkflowContext, exc: ExternalCLIError, *, offer_recovery: bool
) -> QueryOutcome:
    log_event({"kind": "query_error", "failure_kind": exc.kind.value, "error": exc.message})
    outcome = QueryOutcome(status=QueryStatus.FAILED, failure_kind=exc.kind)

    if exc.kind is FailureKind.NOT_INITIALIZED:
        outcome.message = "ContextKit: Workspace not initialized. Initialize now?"
        outcome.recommended_action = "Run index_workspace to initialize and index this workspace."
        if offer_recovery:
            choice = await ctx.host.prompt(outcome.message, INITIALIZE_ACTION)
            if choice == INITIALIZE_ACTION:
                outcome.recovery = await index_workspace(ctx, force=False)
                return outcome
        await ctx.host.notify(
            NoticeLevel.ERROR, f"{outcome.message} {outcome.recommended_action}"
        )
        return outcome

    if exc.kind is FailureKind.TOOL_NOT_FOUND:
        outcome.message = ctx.tool_not_found_hint()
        outcome.recommended_action = "Install contextkit or set CONTEXTKIT_CLI_PATH."
    else:
        outcome.message = f"ContextKit: {exc.message}"
    await ctx.host.notify(NoticeLevel.ERROR, outcome.message)
    return outcome


async def select_context(
    ctx: WorkflowContext, query: str, *, budget: int | None = None
) -> QueryOutcome:
    return await run_query(ctx, SELECT, query, budget=budget)


async def select_from_selection(
    ctx: WorkflowContext, selection: str, *, budget: int | None = None
) -> QueryOutcome:
    return await run_query(ctx, SELECT_FROM_SELECTION, selection, budget=budget)


async def find_symbol(ctx: WorkflowContext, name: str) -> QueryOutcome:
    return await run_query(ctx, SYMBOL, name)


async def call_graph(ctx: WorkflowContext, function_name: str) -> QueryOutcome:
    return await run_query(ctx, CALL_GRAPH, function_name)


async def repo_map(ctx: WorkflowContext, query: str, *, budget: int | None = None) -> QueryOutcome:
    return await run_query(ctx, REPO_MAP, query, budget=budget)
