"""
Request id propagation for log lines, via contextvars.

The id set here is what log formatters print; the explicit
loadcal.context.RequestContext carries the same id down the read paths.
"""

import contextvars

_request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get the current request ID from context."""
    return _request_id_var.get()


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Set the request ID in context. Returns token for reset."""
    return _request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_var.reset(token)


class request_id_scope:
    """
    Bind a request id for the duration of a block.

    Usage:
        with request_id_scope(ctx.request_id):
            logger.info("building heatmap")  # carries request_id
    """

    def __init__(self, request_id: str | None):
        self.request_id = request_id
        self._token: contextvars.Token | None = None

    def __enter__(self) -> "request_id_scope":
        self._token = set_request_id(self.request_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            reset_request_id(self._token)
