import logging
from dataclasses import dataclass
from typing import Any

from ..config.workspace import resolve_workspace
from ..host.base import NoticeLevel
from ..index.orchestrator import IndexOutcome, IndexStatus, ensure_indexed
from ..index.readiness import check_readiness
from ..observability import set_workflow_context
from ..runner.errors import ExternalCLIError, FailureKind
from .context import WorkflowContext

logger = logging.getLogger(__name__)

NO_WORKSPACE_MESSAGE = "ContextKit: No workspace folder open"


async def index_workspace(ctx: WorkflowContext, *, force: bool = True) -> IndexOutcome:
    """User-triggered indexing: resolve the workspace, run recovery, report the outcome."""
    set_workflow_context("index_workspace")
    root = await resolve_workspace(ctx.config, ctx.host)
    if root is None:
        await ctx.host.notify(NoticeLevel.WARNING, NO_WORKSPACE_MESSAGE)
        return IndexOutcome(status=IndexStatus.NO_WORKSPACE, message=NO_WORKSPACE_MESSAGE)

    outcome = await ensure_indexed(
        root,
        client=ctx.client,
        session=ctx.session,
        host=ctx.host,
        status=ctx.status,
        force=force,
    )

    if outcome.status is IndexStatus.DONE:
        await ctx.notify_success(outcome.message)
    elif outcome.status is IndexStatus.ALREADY_RUNNING:
        await ctx.host.notify(NoticeLevel.INFO, outcome.message)
    elif outcome.error is not None and outcome.error.kind is FailureKind.TOOL_NOT_FOUND:
        await ctx.host.notify(NoticeLevel.ERROR, ctx.tool_not_found_hint())
    else:
        await ctx.host.notify(NoticeLevel.ERROR, outcome.message)
    return outcome


async def startup_check(ctx: WorkflowContext) -> IndexOutcome | None:
    """Auto-index on activation.

    Quiet by contract: a missing workspace or a failed readiness check is only
    logged, never alerted. Returns None when no recovery run was needed or possible.
    """
    set_workflow_context("startup_check")
    root = await resolve_workspace(ctx.config, ctx.host)
    if root is None:
        logger.debug("Startup check skipped: no workspace open")
        return None

    try:
        report = await check_readiness(ctx.client, root)
    except ExternalCLIError as exc:
        ctx.host.log("ContextKit: Could not check workspace status")
        logger.info("Startup readiness check failed for %s: %s", root, exc.message)
        return None

    if report.ready:
        ctx.host.log("ContextKit: Workspace already indexed")
        return None

    outcome = await ensure_indexed(
        root,
        client=ctx.client,
        session=ctx.session,
        host=ctx.host,
        status=ctx.status,
        report=report,
    )
    if outcome.status is IndexStatus.DONE:
        await ctx.notify_success(outcome.message)
    elif outcome.status is IndexStatus.FAILED:
        await ctx.host.notify(NoticeLevel.ERROR, outcome.message)
    return outcome


@dataclass
class StatusResult:
    ok: bool
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"status": "ok" if self.ok else "error", "text": self.text}


async def show_status(ctx: WorkflowContext) -> StatusResult | None:
    """Write the human-readable ``doctor`` report to the output log."""
    set_workflow_context("show_status")
    root = await resolve_workspace(ctx.config, ctx.host)
    if root is None:
        await ctx.host.notify(NoticeLevel.WARNING, NO_WORKSPACE_MESSAGE)
        return None

    try:
        text = await ctx.client.doctor(root)
    except ExternalCLIError as exc:
        ctx.host.log(f"Status check failed: {exc.message}")
        ctx.host.show_log()
        return StatusResult(ok=False, text=exc.message)

    ctx.host.clear_log()
    ctx.host.log(text.rstrip())
    ctx.host.show_log()
    return StatusResult(ok=True, text=text)
