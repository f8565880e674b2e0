import logging
import threading
from datetime import UTC, datetime
from typing import Any

from ..config import settings
from ._files import append_jsonl
from .context import get_trace_id

logger = logging.getLogger(__name__)

_TRACE_LOCK = threading.Lock()


def log_trace_event(event: dict[str, Any]) -> None:
    """Append a raw subprocess trace record. Only enabled when CONTEXTKIT_LOGGING=full."""
    if not settings.TRACE_LOGGING:
        return

    event = dict(event)
    try:
        if "level" not in event:
            kind = str(event.get("kind", ""))
            event["level"] = "error" if kind.endswith("error") else "debug"
        event.setdefault("timestamp", datetime.now(UTC).isoformat())
        event.setdefault("trace_id", get_trace_id())

        with _TRACE_LOCK:
            append_jsonl(settings.TRACE_PATH, event)
    except Exception as exc:
        logger.warning("Failed to write trace event: %s", exc)
