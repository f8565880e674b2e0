from .context import WorkflowContext
from .indexing import StatusResult, index_workspace, show_status, startup_check
from .queries import (
    CALL_GRAPH,
    DESCRIPTORS,
    REPO_MAP,
    SELECT,
    SELECT_FROM_SELECTION,
    SYMBOL,
    QueryDescriptor,
    QueryOutcome,
    QueryStatus,
    call_graph,
    find_symbol,
    repo_map,
    run_query,
    select_context,
    select_from_selection,
)

__all__ = [
    "CALL_GRAPH",
    "DESCRIPTORS",
    "REPO_MAP",
    "SELECT",
    "SELECT_FROM_SELECTION",
    "SYMBOL",
    "QueryDescriptor",
    "QueryOutcome",
    "QueryStatus",
    "StatusResult",
    "WorkflowContext",
    "call_graph",
    "find_symbol",
    "index_workspace",
    "repo_map",
    "run_query",
    "select_context",
    "select_from_selection",
    "show_status",
    "startup_check",
]
