import uuid
from contextvars import ContextVar

trace_id: ContextVar[str] = ContextVar("trace_id", default="")
workflow_name: ContextVar[str] = ContextVar("workflow_name", default="")


def new_trace_id() -> str:
    tid = f"t-{uuid.uuid4().hex[:12]}"
    trace_id.set(tid)
    return tid


def get_trace_id() -> str:
    current = trace_id.get()
    if current:
        return current
    return new_trace_id()


def set_workflow_context(name: str) -> str:
    """Tag subsequent events with ``name`` and start a fresh trace."""
    workflow_name.set(name)
    return new_trace_id()


def clear_context() -> None:
    trace_id.set("")
    workflow_name.set("")
