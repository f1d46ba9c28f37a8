"""
Centralized Prometheus metrics definitions for the Chess Annotator session core.

This module uses the prometheus-client library to define all metrics exposed
for monitoring. Grouping them here provides a single, clear overview of the
instrumentation points.
"""
from prometheus_client import Counter

# A common prefix for all application-specific metrics.
PREFIX = "chess_annotator"

# --- Session Metrics ---

MOVES_APPLIED_TOTAL = Counter(
    f"{PREFIX}_moves_applied_total",
    "Total number of moves accepted by game sessions.",
)

MOVES_REJECTED_TOTAL = Counter(
    f"{PREFIX}_moves_rejected_total",
    "Total number of move requests rejected by game sessions.",
    ["error_type"],  # e.g., error_type="IllegalMoveError", "WrongSideError"
)

HISTORY_NAVIGATION_TOTAL = Counter(
    f"{PREFIX}_history_navigation_total",
    "Total number of undo/redo operations that changed the session.",
    ["direction"],  # direction="undo" | "redo"
)

HISTORY_INVARIANT_VIOLATIONS_TOTAL = Counter(
    f"{PREFIX}_history_invariant_violations_total",
    "Total number of engine/history desynchronizations that forced a session reset.",
)

POSITIONS_LOADED_TOTAL = Counter(
    f"{PREFIX}_positions_loaded_total",
    "Total number of wholesale position loads.",
    ["outcome"],  # outcome="ok" | "rejected"
)

# --- Analysis Service Metrics ---

ANALYSIS_REQUESTS_TOTAL = Counter(
    f"{PREFIX}_analysis_requests_total",
    "Total number of requests sent to the analysis service.",
    ["endpoint", "outcome"],  # outcome="ok" | "unavailable"
)

ANALYSIS_TRANSIENT_ERRORS_TOTAL = Counter(
    f"{PREFIX}_analysis_transient_errors_total",
    "Total number of transient analysis-service errors that triggered a retry.",
    ["endpoint"],
)

STALE_ANALYSIS_DISCARDED_TOTAL = Counter(
    f"{PREFIX}_stale_analysis_discarded_total",
    "Total number of analysis responses discarded because the position had changed.",
    ["endpoint"],
)
