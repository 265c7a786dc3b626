"""
ASGI middleware for correlation ID tracking.
"""

import logging

from loadcal.context import generate_request_id

from .context import request_id_scope

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = b"x-request-id"


class CorrelationIdMiddleware:
    """
    Binds a request id for every HTTP request and echoes it back.

    Uses the caller's X-Request-ID when present, otherwise generates one.
    All logs within the request carry it.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = None
        for key, value in scope.get("headers", []):
            if key.lower() == REQUEST_ID_HEADER:
                try:
                    request_id = value.decode("utf-8").strip()[:128]
                except UnicodeDecodeError as e:
                    logger.warning("Could not decode X-Request-ID header: %s", e)
                break

        if not request_id:
            request_id = generate_request_id()

        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message):
            if message["type"] == "http.response.start":
                headers_list = [(k, v) for k, v in message.get("headers", []) if k.lower() != REQUEST_ID_HEADER]
                headers_list.append((REQUEST_ID_HEADER, request_id.encode("utf-8")))
                message["headers"] = headers_list
            await send(message)

        with request_id_scope(request_id):
            await self.app(scope, receive, send_with_request_id)
