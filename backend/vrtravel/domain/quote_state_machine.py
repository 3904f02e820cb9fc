from __future__ import annotations

from typing import Literal


QuoteStatus = Literal["pending", "contacted", "completed", "cancelled"]

QUOTE_STATUSES = ("pending", "contacted", "completed", "cancelled")

# Older clients send "processed" for the contacted state.
_STATUS_ALIASES = {"processed": "contacted"}


_ALLOWED_TRANSITIONS = {
    "pending": {"contacted", "completed", "cancelled"},
    "contacted": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


class QuoteStateTransitionError(ValueError):
    """Raised when an invalid quote status transition is requested."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Invalid quote state transition: {current} -> {target}")
        self.current = current
        self.target = target


def normalize_quote_status(status: str) -> str:
    value = (status or "").strip().lower()
    return _STATUS_ALIASES.get(value, value)


def validate_transition(current: str, target: str) -> None:
    allowed = _ALLOWED_TRANSITIONS.get(normalize_quote_status(current), set())
    if normalize_quote_status(target) not in allowed:
        raise QuoteStateTransitionError(current=current, target=target)
