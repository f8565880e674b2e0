"""Map a failed contextkit invocation to a FailureKind.

The marker strings below are a contract with the contextkit CLI's diagnostic
wording. They are matched case-insensitively as substrings, so every entry is kept
narrow: a bare "not found" would also match ordinary tool output such as
"symbol 'foo' not found" and misreport a missing executable.
"""

from .errors import FailureKind
from .types import CommandFailure

# Bump when the contextkit diagnostics change wording.
MARKER_TABLE_VERSION = 1

# POSIX shells and `env` report a missing command with 127, not-executable with 126.
_TOOL_NOT_FOUND_EXIT_CODES = frozenset({126, 127})

FAILURE_MARKERS: tuple[tuple[FailureKind, tuple[str, ...]], ...] = (
    (
        FailureKind.TOOL_NOT_FOUND,
        (
            "command not found",
            "no such file or directory",
            "is not recognized as an internal or external command",
            "executable not found",
        ),
    ),
    (
        FailureKind.NOT_INITIALIZED,
        (
            "not initialized",
            "not initialised",
            "run 'contextkit init'",
            'run "contextkit init"',
            "run `contextkit init`",
            "no index found",
        ),
    ),
    (
        FailureKind.INVALID_INPUT,
        (
            "missing argument",
            "missing required argument",
            "invalid argument",
            "invalid value",
            "unrecognized argument",
            "unexpected argument",
        ),
    ),
)


def classify_text(text: str) -> FailureKind:
    lowered = text.lower()
    for kind, markers in FAILURE_MARKERS:
        if any(marker in lowered for marker in markers):
            return kind
    return FailureKind.UNKNOWN


def classify_failure(failure: CommandFailure) -> FailureKind:
    """Pure and deterministic: the same failure always yields the same kind."""
    if failure.timed_out:
        return FailureKind.UNKNOWN
    if failure.exit_code is None or failure.exit_code in _TOOL_NOT_FOUND_EXIT_CODES:
        return FailureKind.TOOL_NOT_FOUND
    return classify_text(failure.stderr)
