from dataclasses import dataclass

from ..clients.contextkit import ContextKitClient
from ..config import BridgeConfig
from ..host.base import Host, NoticeLevel
from ..host.status import StatusReporter
from ..index.session import IndexingSession


@dataclass
class WorkflowContext:
    """Everything one workflow run needs; built per host by ``Bridge.context``."""

    config: BridgeConfig
    host: Host
    client: ContextKitClient
    status: StatusReporter
    session: IndexingSession

    async def notify_success(self, message: str) -> None:
        if self.config.show_notifications:
            await self.host.notify(NoticeLevel.INFO, message)

    def tool_not_found_hint(self) -> str:
        return (
            f"ContextKit: '{self.config.cli_path}' not found. "
            "Install contextkit or set CONTEXTKIT_CLI_PATH to its location."
        )
