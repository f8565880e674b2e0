from .orchestrator import (
    IndexOutcome,
    IndexState,
    IndexStatus,
    detect_source_path,
    ensure_indexed,
)
from .readiness import CheckEntry, CheckStatus, ReadinessReport, check_readiness, parse_readiness
from .session import IndexingSession

__all__ = [
    "CheckEntry",
    "CheckStatus",
    "IndexOutcome",
    "IndexState",
    "IndexStatus",
    "IndexingSession",
    "ReadinessReport",
    "check_readiness",
    "detect_source_path",
    "ensure_indexed",
    "parse_readiness",
]
