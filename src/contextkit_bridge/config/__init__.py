"""Configuration for contextkit-bridge."""

from .cli_path import SHELL_METACHARACTERS, validate_cli_path
from .settings import (
    DEFAULT_BUDGET,
    DEFAULT_CLI_NAME,
    LOG_DIR,
    LOG_LEVEL,
    LOG_PATH,
    SELECTION_QUERY_LIMIT,
    TRACE_PATH,
    BridgeConfig,
)

__all__ = [
    "DEFAULT_BUDGET",
    "DEFAULT_CLI_NAME",
    "LOG_DIR",
    "LOG_LEVEL",
    "LOG_PATH",
    "SELECTION_QUERY_LIMIT",
    "SHELL_METACHARACTERS",
    "TRACE_PATH",
    "BridgeConfig",
    "validate_cli_path",
]
