from __future__ import annotations

from typing import Literal


BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]

BOOKING_STATUSES = ("pending", "confirmed", "completed", "cancelled")
ACTIVE_BOOKING_STATUSES = frozenset({"pending", "confirmed"})


_ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "completed", "cancelled"},
    "confirmed": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}


class BookingStateTransitionError(ValueError):
    """Raised when an invalid booking state transition is requested."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Invalid booking state transition: {current} -> {target}")
        self.current = current
        self.target = target


def is_active(status: str) -> bool:
    return status in ACTIVE_BOOKING_STATUSES


def validate_transition(current: str, target: str) -> None:
    """Validate that a transition from current -> target is allowed.

    Raises BookingStateTransitionError if not allowed. Staying in the same
    state is not a transition and is never validated here.
    """

    allowed = _ALLOWED_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise BookingStateTransitionError(current=current, target=target)
