from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .types import CommandFailure


class FailureKind(str, Enum):
    """Closed classification of a failed contextkit invocation."""

    NOT_INITIALIZED = "not_initialized"
    TOOL_NOT_FOUND = "tool_not_found"
    INVALID_INPUT = "invalid_input"
    UNKNOWN = "unknown"


class ExternalCLIError(RuntimeError):
    """Structured error for a failed contextkit invocation.

    Attributes:
        kind: Failure category used to pick the remediation.
        command: Argument vector that failed (empty if none was built).
        failure: Raw process failure, when the command actually ran or failed to launch.
    """

    def __init__(
        self,
        *,
        kind: FailureKind,
        message: str,
        command: list[str] | None = None,
        failure: "CommandFailure | None" = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.command = command or []
        self.failure = failure

    @property
    def exit_code(self) -> int | None:
        return self.failure.exit_code if self.failure is not None else None


class InvalidCLIPathError(ExternalCLIError):
    """Configured executable contains shell metacharacters; nothing was spawned."""

    def __init__(self, cli_path: str, offending: str):
        self.cli_path = cli_path
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=(
                f"Invalid contextkit CLI path {cli_path!r}: "
                f"contains disallowed character(s) {offending!r}"
            ),
        )
