"""
Application constants.
Centralized location for all constant values used across the application.
"""

from enum import StrEnum


class Request(StrEnum):
    """
    Request kinds understood by the compiler worker.

    The six ``api/*`` mutation kinds travel in the priority lane; everything
    else, including ``lsp/check``, travels in the normal lane.
    """

    # Fast-lane API mutations
    API_ADD_URI = "api/addUri"
    API_REM_URI = "api/remUri"
    API_ADD_PKG = "api/addPkg"
    API_REM_PKG = "api/remPkg"
    API_ADD_JAR = "api/addJar"
    API_REM_JAR = "api/remJar"

    # Lifecycle
    API_SHUTDOWN = "api/shutdown"
    API_VERSION = "api/version"
    API_DISCONNECT = "api/disconnect"

    # Language features
    LSP_CHECK = "lsp/check"
    LSP_CODE_ACTION = "lsp/codeAction"
    LSP_CODELENS = "lsp/codelens"
    LSP_COMPLETE = "lsp/complete"
    LSP_DOCUMENT_SYMBOLS = "lsp/documentSymbols"
    LSP_GOTO = "lsp/goto"
    LSP_HIGHLIGHT = "lsp/highlight"
    LSP_HOVER = "lsp/hover"
    LSP_IMPLEMENTATION = "lsp/implementation"
    LSP_INLAY_HINTS = "lsp/inlayHints"
    LSP_RENAME = "lsp/rename"
    LSP_SEMANTIC_TOKENS = "lsp/semanticTokens"
    LSP_SHOW_AST = "lsp/showAst"
    LSP_USES = "lsp/uses"
    LSP_WORKSPACE_SYMBOLS = "lsp/workspaceSymbols"

    # Commands
    CMD_RUN_TESTS = "cmd/runTests"

    # Notifications sent back to the client
    INTERNAL_ERROR = "internalError"


class Lane(StrEnum):
    """Queue lanes, in dispatch order."""

    PRIORITY = "priority"
    NORMAL = "normal"


class DispatchState(StrEnum):
    """
    Dispatch loop states.

    State transitions:
    - IDLE -> PUMPING (request_pump while idle)
    - PUMPING -> IDLE (both lanes empty, or reset)
    """

    IDLE = "idle"
    PUMPING = "pumping"


PRIORITY_REQUESTS: frozenset[Request] = frozenset(
    {
        Request.API_ADD_URI,
        Request.API_REM_URI,
        Request.API_ADD_PKG,
        Request.API_REM_PKG,
        Request.API_ADD_JAR,
        Request.API_REM_JAR,
    }
)

# The shutdown job bypasses the registry and always carries this id
SHUTDOWN_JOB_ID = "shutdown"

# Metrics names
METRIC_QUEUE_DEPTH = "lsp_queue_depth"
METRIC_JOBS_SUBMITTED = "lsp_jobs_submitted_total"
METRIC_JOBS_COALESCED = "lsp_jobs_coalesced_total"
METRIC_JOBS_DISPATCHED = "lsp_jobs_dispatched_total"
METRIC_RESOURCE_LOAD_FAILURES = "lsp_resource_load_failures_total"
METRIC_DISPATCH_CYCLES = "lsp_dispatch_cycles_total"
METRIC_SHUTDOWNS = "lsp_shutdowns_total"

# Trace span names
SPAN_DISPATCH_JOB = "dispatch_job"
SPAN_TERMINATE_QUEUE = "terminate_queue"
