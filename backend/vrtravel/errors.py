from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    status_code: int
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    retryable: Optional[bool] = None

    def to_dict(self, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Response envelope; ``details`` replaces the stored details when given."""

        content = error_response(self.code, self.message, self.details if details is None else details)
        if self.retryable is not None:
            content["error"]["retryable"] = self.retryable
        return content


class ValidationError(AppError):
    """Malformed or missing input. Never retried."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(400, code, message, details, retryable=False)


class ConflictError(AppError):
    """Invariant violation such as a second active booking."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        status_code: int = 409,
    ) -> None:
        super().__init__(status_code, code, message, details, retryable=False)


class NotFoundError(AppError):
    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(404, code, message, details)


class AuthorizationError(AppError):
    """Caller is neither the owner nor an admin; the operation had no effect.

    Ownership failures use 401 (the web client's contract), admin-policy
    failures 403.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        status_code: int = 403,
    ) -> None:
        super().__init__(status_code, code, message, details)


class StoreError(AppError):
    """Persistence call failed. Surfaced as a generic failure; retry is up to the user."""

    def __init__(self, message: str = "Storage backend unavailable", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(503, "store_unavailable", message, details, retryable=True)


def error_response(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        }
    }
