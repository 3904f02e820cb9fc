from __future__ import annotations

import pytest

from vrtravel.domain import booking_state_machine, quote_state_machine
from vrtravel.domain.booking_state_machine import BookingStateTransitionError, is_active
from vrtravel.domain.quote_state_machine import QuoteStateTransitionError, normalize_quote_status


def test_booking_allowed_transitions() -> None:
    booking_state_machine.validate_transition("pending", "confirmed")
    booking_state_machine.validate_transition("pending", "cancelled")
    booking_state_machine.validate_transition("pending", "completed")
    booking_state_machine.validate_transition("confirmed", "completed")
    booking_state_machine.validate_transition("confirmed", "cancelled")


@pytest.mark.parametrize(
    "current,target",
    [
        ("cancelled", "confirmed"),
        ("cancelled", "pending"),
        ("completed", "confirmed"),
        ("completed", "cancelled"),
        ("confirmed", "pending"),
    ],
)
def test_booking_terminal_and_backward_transitions_rejected(current: str, target: str) -> None:
    with pytest.raises(BookingStateTransitionError) as exc:
        booking_state_machine.validate_transition(current, target)
    assert exc.value.current == current
    assert exc.value.target == target


def test_active_statuses() -> None:
    assert is_active("pending")
    assert is_active("confirmed")
    assert not is_active("completed")
    assert not is_active("cancelled")


def test_quote_transitions_and_processed_alias() -> None:
    assert normalize_quote_status("Processed") == "contacted"
    quote_state_machine.validate_transition("pending", "contacted")
    quote_state_machine.validate_transition("pending", "processed")
    quote_state_machine.validate_transition("contacted", "completed")
    quote_state_machine.validate_transition("contacted", "cancelled")

    with pytest.raises(QuoteStateTransitionError):
        quote_state_machine.validate_transition("completed", "pending")
    with pytest.raises(QuoteStateTransitionError):
        quote_state_machine.validate_transition("cancelled", "contacted")
    with pytest.raises(QuoteStateTransitionError):
        quote_state_machine.validate_transition("contacted", "pending")
