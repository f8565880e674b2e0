import logging
import os
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_state_dir

from .compat import env_bool, env_optional_float

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_BUDGET",
    "DEFAULT_CLI_NAME",
    "BridgeConfig",
]

# External tool
DEFAULT_CLI_NAME = "contextkit"
DEFAULT_BUDGET = 8000

# Selection-derived queries are truncated to this many characters
SELECTION_QUERY_LIMIT = 500

# Local file logging mode (default: off)
# Options: off (disabled), safe (enabled with redaction), full (no redaction + CLI trace log)
_LOGGING_RAW = os.getenv("CONTEXTKIT_LOGGING", "off").strip().lower()
EVENT_LOGGING = _LOGGING_RAW in ("safe", "full", "1", "true", "yes")
EVENT_LOG_REDACT = _LOGGING_RAW != "full"
TRACE_LOGGING = _LOGGING_RAW == "full"

LOG_LEVEL = os.getenv("CONTEXTKIT_LOG_LEVEL", "INFO").strip().upper() or "INFO"

# Cross-platform state directory:
# - Linux: ~/.local/state/contextkit-bridge
# - macOS: ~/Library/Application Support/contextkit-bridge
# - Windows: %LOCALAPPDATA%\contextkit-bridge
# Created lazily by the observability writers.
LOG_DIR = Path(user_state_dir("contextkit-bridge", appauthor=False))
LOG_PATH = LOG_DIR / "events.log"
TRACE_PATH = LOG_DIR / "trace.log"
MAX_LOG_SIZE_BYTES = 10 * 1024 * 1024
MAX_ROTATED_LOGS = 5


def _parse_budget(raw: str) -> int:
    try:
        budget = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"CONTEXTKIT_DEFAULT_BUDGET must be an integer, got {raw!r}") from exc
    if budget <= 0:
        raise RuntimeError(f"CONTEXTKIT_DEFAULT_BUDGET must be positive, got {budget}")
    return budget


@dataclass(frozen=True)
class BridgeConfig:
    cli_path: str = DEFAULT_CLI_NAME  # Validated on every command construction
    default_budget: int = DEFAULT_BUDGET
    auto_index: bool = False
    show_notifications: bool = True  # Gates passive success notices only
    base_dir: str | None = None  # Explicit workspace root; otherwise resolved from the host
    timeout_seconds: float | None = None  # None: wait for the tool indefinitely

    @classmethod
    def from_env(cls) -> "BridgeConfig":
        cli_path = os.getenv("CONTEXTKIT_CLI_PATH", "").strip() or DEFAULT_CLI_NAME

        budget_raw = os.getenv("CONTEXTKIT_DEFAULT_BUDGET", "").strip()
        default_budget = _parse_budget(budget_raw) if budget_raw else DEFAULT_BUDGET

        base_dir = os.getenv("CONTEXTKIT_BASE_DIR", "").strip() or None
        if base_dir:
            if not os.path.isdir(base_dir):
                raise RuntimeError(
                    f"CONTEXTKIT_BASE_DIR does not exist or is not a directory: {base_dir}"
                )
            logger.debug("Using CONTEXTKIT_BASE_DIR: %s", base_dir)

        return cls(
            cli_path=cli_path,
            default_budget=default_budget,
            auto_index=env_bool("CONTEXTKIT_AUTO_INDEX", default=False),
            show_notifications=env_bool("CONTEXTKIT_SHOW_NOTIFICATIONS", default=True),
            base_dir=base_dir,
            timeout_seconds=env_optional_float("CONTEXTKIT_TIMEOUT_SECONDS"),
        )
