from .context import clear_context, get_trace_id, new_trace_id, set_workflow_context
from .events import log_event, redact_value
from .traces import log_trace_event

__all__ = [
    "clear_context",
    "get_trace_id",
    "log_event",
    "log_trace_event",
    "new_trace_id",
    "redact_value",
    "set_workflow_context",
]
