from enum import Enum
from typing import Protocol


class NoticeLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Host(Protocol):
    """Surface the workflows drive: workspace folders, notices, prompts, output log, results.

    Implementations decide how (or whether) each call reaches a human.
    """

    async def workspace_folders(self) -> list[str]: ...

    async def notify(self, level: NoticeLevel, message: str) -> None: ...

    async def prompt(self, message: str, *actions: str) -> str | None:
        """Ask the user to pick one of ``actions``. None means dismissed."""
        ...

    def log(self, line: str) -> None: ...

    def clear_log(self) -> None: ...

    def show_log(self) -> None: ...

    async def publish(self, content: str, *, language: str, beside: bool) -> None:
        """Display a result and copy it to the shared clipboard-like sink."""
        ...
