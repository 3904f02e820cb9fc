"""Structured JSON access log.

Every request logs one line:
{
  request_id,
  correlation_id,
  user_id,
  path,
  method,
  status_code,
  latency_ms
}

and the request id is echoed in the X-Request-Id response header.
"""
from __future__ import annotations

import json
import logging
import time
import uuid

import jwt
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger("structured_access")


def _extract_user_id(request: Request) -> str:
    """Read the token subject for logging only; the signature is not checked here."""
    auth = request.headers.get("authorization", "")
    if not auth.lower().startswith("bearer "):
        return ""
    try:
        claims = jwt.decode(auth.split(" ", 1)[1], options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return ""
    return str(claims.get("sub") or "")


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log structured JSON for every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())[:12]
        start = time.monotonic()
        request.state.request_id = request_id

        log_entry = {
            "request_id": request_id,
            "correlation_id": getattr(request.state, "correlation_id", None),
            "user_id": _extract_user_id(request),
            "path": request.url.path,
            "method": request.method,
        }

        try:
            response = await call_next(request)
        except Exception:
            log_entry["status_code"] = 500
            log_entry["latency_ms"] = round((time.monotonic() - start) * 1000, 2)
            logger.error(json.dumps(log_entry))
            raise

        log_entry["status_code"] = response.status_code
        log_entry["latency_ms"] = round((time.monotonic() - start) * 1000, 2)

        if response.status_code >= 500:
            logger.error(json.dumps(log_entry))
        elif response.status_code >= 400:
            logger.warning(json.dumps(log_entry))
        else:
            logger.info(json.dumps(log_entry))

        response.headers["X-Request-Id"] = request_id
        return response
