"""
API key check for mutating routes.

Clients send the key in the x-api-key header. When no key is configured
(LOADCAL_API_KEY empty) the check is skipped: development mode.

Usage:
    from api.auth import require_api_key

    @router.post("/loads/upsert", dependencies=[Depends(require_api_key)])
    def upsert(...): ...
"""

import logging
import secrets

from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"

# Security scheme for OpenAPI docs
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def require_api_key(request: Request, provided: str | None = Depends(api_key_header)) -> str:
    """
    Dependency that requires a valid x-api-key.

    Returns the key on success, "auth_disabled" in development mode.
    Raises HTTPException 401 on failure.
    """
    expected = request.app.state.services.settings.api_key
    if not expected:
        logger.debug("API key not configured, skipping check for %s", request.url.path)
        return "auth_disabled"

    if not provided:
        logger.warning("Auth failed: no API key for %s", request.url.path)
        raise HTTPException(status_code=401, detail="API key required in x-api-key header")

    if not secrets.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Auth failed: invalid API key for %s", request.url.path)
        raise HTTPException(status_code=401, detail="Invalid API key")

    return provided
