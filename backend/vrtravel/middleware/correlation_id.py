from __future__ import annotations

import logging
import re
import uuid
from typing import Optional

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from vrtravel.errors import error_response

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-Id"

# Client-supplied ids end up in log lines; anything else is replaced.
_VALID_CID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_correlation_id(incoming: Optional[str]) -> str:
    """Use the caller's id when it is well formed, otherwise mint ``cid_<hex>``."""

    value = (incoming or "").strip()
    if _VALID_CID.match(value):
        return value
    return f"cid_{uuid.uuid4().hex}"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        cid = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        request.state.correlation_id = cid

        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception("Request %s %s failed (correlation_id=%s)", request.method, request.url.path, cid)
            response = JSONResponse(
                status_code=500,
                content=error_response("internal_error", "Unexpected server error", {"correlation_id": cid}),
            )

        response.headers[CORRELATION_HEADER] = cid
        return response
