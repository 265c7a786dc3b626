"""
Observability: structured logging and request ids.

Usage:
    from loadcal.observability import configure_logging, CorrelationIdMiddleware

    configure_logging(settings.log_level, settings.log_json)
    app.add_middleware(CorrelationIdMiddleware)
"""

from .context import get_request_id, request_id_scope, set_request_id
from .logging import HumanFormatter, JSONFormatter, configure_logging
from .middleware import CorrelationIdMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "HumanFormatter",
    "JSONFormatter",
    "configure_logging",
    "get_request_id",
    "request_id_scope",
    "set_request_id",
]
