from .history import (
    evaluate_lags,
    extract_lagged_values,
    flatten_lags,
    lookup_history,
)

__all__ = [
    "evaluate_lags",
    "extract_lagged_values",
    "flatten_lags",
    "lookup_history",
]
