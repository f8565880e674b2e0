import hashlib
import logging
import threading
from datetime import UTC, datetime
from typing import Any

from ..config import settings
from ._files import append_jsonl
from .context import get_trace_id, workflow_name

logger = logging.getLogger(__name__)

_LOG_LOCK = threading.Lock()

# String values under these keys carry user text or tool output and are redacted in safe mode.
_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "query",
        "query_preview",
        "selection",
        "arguments",
        "command",
        "stdout",
        "stderr",
        "error",
        "message",
        "detail",
        "content",
    }
)

_SANITIZE_DEPTH_LIMIT = 6
_SANITIZE_LIST_LIMIT = 20


def _make_placeholder(value: str) -> str:
    hex12 = hashlib.sha256(value.encode("utf-8")).hexdigest()[:12]
    return f"[REDACTED len={len(value)} sha256={hex12}]"


def _sanitize(key: str, value: Any, depth: int) -> Any:
    if depth > _SANITIZE_DEPTH_LIMIT:
        return "[REDACTED depth_limit]"
    sensitive = key.lower() in _SENSITIVE_KEYS
    if isinstance(value, dict):
        return {k: _sanitize(k, v, depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        items: list[Any] = []
        for item in value[:_SANITIZE_LIST_LIMIT]:
            if sensitive and isinstance(item, str):
                items.append(_make_placeholder(item))
            else:
                items.append(_sanitize(key, item, depth + 1))
        if len(value) > _SANITIZE_LIST_LIMIT:
            items.append(f"[REDACTED list_len={len(value)}]")
        return items
    if isinstance(value, str) and sensitive:
        return _make_placeholder(value)
    return value


def sanitize_event(event: dict[str, Any]) -> dict[str, Any]:
    if not settings.EVENT_LOG_REDACT:
        return event
    return {k: _sanitize(k, v, 0) for k, v in event.items()}


def redact_value(value: str, max_len: int = 200) -> str:
    if not value:
        return value
    if settings.EVENT_LOG_REDACT:
        return _make_placeholder(value)
    if len(value) <= max_len:
        return value
    return f"{value[:max_len]}... [truncated, len={len(value)}]"


def log_event(event: dict[str, Any]) -> None:
    """Append a single JSON event to the local event log.

    Args:
        event: Event payload. Enriched with timestamp, trace_id, workflow and level.
    """
    if not settings.EVENT_LOGGING:
        return

    event = dict(event)
    try:
        event.setdefault("timestamp", datetime.now(UTC).isoformat())
        event.setdefault("trace_id", get_trace_id())
        current = workflow_name.get()
        if current:
            event.setdefault("workflow", current)
        if "level" not in event:
            kind = str(event.get("kind", "")).lower()
            event["level"] = "error" if kind.endswith("error") else "info"

        event = sanitize_event(event)
        with _LOG_LOCK:
            append_jsonl(settings.LOG_PATH, event)
    except Exception as exc:
        logger.warning("Failed to write event log: %s", exc)
