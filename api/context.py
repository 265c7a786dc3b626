"""
Per-request dependencies: the Services bundle and the RequestContext.

Heatmap and day-detail reads are blocking SQLite work. run_cancellable()
runs them in a worker thread and polls for client disconnect; on disconnect
it cancels the context, which aborts the in-flight statement.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import Request

from loadcal.app_services import Services
from loadcal.context import RequestContext
from loadcal.observability import request_id_scope

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.1


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_request_context(request: Request) -> RequestContext:
    """Fresh context per request: request id from the middleware, read deadline from settings."""
    services: Services = request.app.state.services
    request_id = getattr(request.state, "request_id", None)
    return RequestContext.with_timeout(services.settings.read_timeout, request_id=request_id)


async def run_cancellable(request: Request, ctx: RequestContext, func: Callable[..., Any], *args: Any) -> Any:
    """Run func(*args, ctx=ctx) in a thread, cancelling ctx if the client goes away."""

    def call():
        with request_id_scope(ctx.request_id):
            return func(*args, ctx=ctx)

    task = asyncio.ensure_future(asyncio.to_thread(call))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if not ctx.cancelled and await request.is_disconnected():
                logger.info("Client disconnected, cancelling %s", ctx.request_id)
                ctx.cancel()
    finally:
        if not task.done():
            ctx.cancel()
