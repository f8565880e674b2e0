"""Recovery workflow: bring a workspace to a queryable state.

States: Idle -> Checking -> Done when ready, otherwise
Checking -> Initializing -> AddingSource -> Indexing -> Done, with Failed reachable
from any step that runs the tool.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..clients.contextkit import ContextKitClient
from ..host.base import Host
from ..host.status import StatusReporter
from ..observability import log_event
from ..runner.errors import ExternalCLIError
from .readiness import ReadinessReport, check_readiness
from .session import IndexingSession

logger = logging.getLogger(__name__)

SOURCE_DIR_NAME = "src"


class IndexState(str, Enum):
    IDLE = "idle"
    CHECKING = "checking"
    INITIALIZING = "initializing"
    ADDING_SOURCE = "adding_source"
    INDEXING = "indexing"
    DONE = "done"
    FAILED = "failed"


class IndexStatus(str, Enum):
    DONE = "done"
    ALREADY_RUNNING = "already_running"
    FAILED = "failed"
    NO_WORKSPACE = "no_workspace"


@dataclass
class IndexOutcome:
    status: IndexStatus
    states: list[IndexState] = field(default_factory=list)
    message: str = ""
    error: ExternalCLIError | None = None
    source_path: str | None = None
    index_output: str = ""

    @property
    def ok(self) -> bool:
        return self.status is IndexStatus.DONE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status.value,
            "states": [s.value for s in self.states],
            "message": self.message,
        }
        if self.source_path is not None:
            data["source_path"] = self.source_path
        if self.index_output:
            data["index_output"] = self.index_output
        if self.error is not None:
            data["failure_kind"] = self.error.kind.value
        return data


def detect_source_path(root: str) -> str:
    """``./src`` when the workspace has a src directory, else the root itself."""
    if (Path(root) / SOURCE_DIR_NAME).is_dir():
        return f"./{SOURCE_DIR_NAME}"
    return "."


async def ensure_indexed(
    root: str,
    *,
    client: ContextKitClient,
    session: IndexingSession,
    host: Host,
    status: StatusReporter | None = None,
    force: bool = False,
    report: ReadinessReport | None = None,
) -> IndexOutcome:
    """Run the recovery workflow for ``root`` under the single-flight session.

    Args:
        root: Workspace root.
        client: contextkit command client.
        session: Guard shared by every caller in the process.
        host: Receives output-log lines.
        status: Activity indicator, restored to idle on every exit path.
        force: Re-run ``index`` even when the workspace is already ready.
        report: Readiness the caller already determined; skips the ``doctor`` run.

    Returns:
        IndexOutcome. A second caller while a run is active gets ALREADY_RUNNING and
        no command is started.
    """
    with session.claim() as acquired:
        if not acquired:
            logger.info("Indexing already in progress, rejecting request for %s", root)
            return IndexOutcome(
                status=IndexStatus.ALREADY_RUNNING,
                message="ContextKit: Indexing already in progress",
            )

        status = status or StatusReporter()
        with status.busy("Indexing..."):
            return await _run(root, client=client, host=host, force=force, report=report)


async def _run(
    root: str,
    *,
    client: ContextKitClient,
    host: Host,
    force: bool,
    report: ReadinessReport | None,
) -> IndexOutcome:
    outcome = IndexOutcome(status=IndexStatus.FAILED, states=[IndexState.IDLE])

    def enter(state: IndexState) -> None:
        outcome.states.append(state)
        log_event({"kind": "index_state", "state": state.value, "root": root})

    host.show_log()
    host.log("Starting workspace indexing...")

    try:
        enter(IndexState.CHECKING)
        if report is not None:
            ready = report.ready
        else:
            try:
                ready = (await check_readiness(client, root)).ready
            except ExternalCLIError as exc:
                logger.info("Readiness check failed for %s: %s", root, exc)
                ready = False

        if ready and not force:
            enter(IndexState.DONE)
            outcome.status = IndexStatus.DONE
            outcome.message = "ContextKit: Workspace already indexed"
            host.log("Workspace already indexed")
            return outcome

        if not ready:
            enter(IndexState.INITIALIZING)
            host.log("Initializing ContextKit...")
            await client.init(root)

            enter(IndexState.ADDING_SOURCE)
            outcome.source_path = detect_source_path(root)
            await client.add_source(root, outcome.source_path)

        enter(IndexState.INDEXING)
        host.log("Indexing files...")
        outcome.index_output = await client.index(root)
        if outcome.index_output:
            host.log(outcome.index_output.rstrip())

        enter(IndexState.DONE)
        outcome.status = IndexStatus.DONE
        outcome.message = "ContextKit: Indexing complete!"
        return outcome
    except ExternalCLIError as exc:
        enter(IndexState.FAILED)
        outcome.status = IndexStatus.FAILED
        outcome.error = exc
        outcome.message = f"ContextKit indexing failed: {exc.message}"
        host.log(f"Error: {exc.message}")
        logger.warning("Indexing %s failed: %s", root, exc.message)
        return outcome
