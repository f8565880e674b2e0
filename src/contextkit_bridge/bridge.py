import logging

from .clients.contextkit import ContextKitClient
from .config import BridgeConfig
from .host.base import Host
from .host.status import StatusReporter
from .index.orchestrator import IndexOutcome
from .index.session import IndexingSession
from .runner.types import CommandRunner
from .workflows.context import WorkflowContext
from .workflows.indexing import startup_check

logger = logging.getLogger(__name__)


class Bridge:
    """Process-lifetime state shared by every host: config, indexing session, status.

    Hosts are per surface (or per MCP call); ``context(host)`` binds one to the
    shared state for a workflow run.
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        runner: CommandRunner | None = None,
        session: IndexingSession | None = None,
        status: StatusReporter | None = None,
    ) -> None:
        self.config = config or BridgeConfig.from_env()
        self.session = session or IndexingSession()
        self.status = status or StatusReporter()
        self._runner = runner

    def context(self, host: Host) -> WorkflowContext:
        return WorkflowContext(
            config=self.config,
            host=host,
            client=ContextKitClient(self.config, host, runner=self._runner),
            status=self.status,
            session=self.session,
        )

    async def activate(self, host: Host) -> IndexOutcome | None:
        """Show the status indicator and, with auto_index on, run the startup check."""
        self.status.idle()
        self.status.show()
        outcome = None
        if self.config.auto_index:
            outcome = await startup_check(self.context(host))
        logger.info("ContextKit bridge activated")
        return outcome

    def deactivate(self) -> None:
        self.status.hide()
