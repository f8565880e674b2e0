from .classify import FAILURE_MARKERS, classify_failure, classify_text
from .errors import ExternalCLIError, FailureKind, InvalidCLIPathError
from .process import kill_process_tree, run_command
from .types import (
    CommandFailure,
    CommandInvocation,
    CommandResult,
    CommandRunner,
    CommandSuccess,
)

__all__ = [
    "FAILURE_MARKERS",
    "CommandFailure",
    "CommandInvocation",
    "CommandResult",
    "CommandRunner",
    "CommandSuccess",
    "ExternalCLIError",
    "FailureKind",
    "InvalidCLIPathError",
    "classify_failure",
    "classify_text",
    "kill_process_tree",
    "run_command",
]
