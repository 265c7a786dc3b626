# Load Calendar - Core Library
"""
Workload vs. capacity tracking for people and groups.

The wiring lives in loadcal.app_services (build_services); the API server and
CLI both go through it.
"""

from .errors import (
    ConflictError,
    LoadCalError,
    NotFoundError,
    QueryCancelledError,
    QueryTimeoutError,
    StoreError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "LoadCalError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "StoreError",
    "QueryCancelledError",
    "QueryTimeoutError",
]
