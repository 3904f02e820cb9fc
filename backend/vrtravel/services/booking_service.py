from __future__ import annotations

import logging
from datetime import date as date_cls
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from vrtravel.config import booking_initial_status
from vrtravel.domain.booking_state_machine import (
    BOOKING_STATUSES,
    BookingStateTransitionError,
    validate_transition,
)
from vrtravel.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.booking_repository import BookingRepository
from vrtravel.schemas import BookingOut
from vrtravel.services.audit import write_audit_log
from vrtravel.services.user_locks import user_lock

logger = logging.getLogger(__name__)

# Slots offered by the booking form; informational, not enforced.
VR_TIME_SLOTS = (
    "9:00 AM - 11:00 AM",
    "11:00 AM - 1:00 PM",
    "1:00 PM - 3:00 PM",
    "3:00 PM - 5:00 PM",
    "5:00 PM - 7:00 PM",
)


def _active_booking_conflict(existing_id: Optional[str]) -> ConflictError:
    return ConflictError(
        "active_booking_exists",
        "You already have an active VR booking. Cancel it or wait until it is completed.",
        {"booking_id": existing_id} if existing_id else None,
        status_code=400,
    )


def _clean_booking_payload(date: str, time: str, address: str, notes: Optional[str]) -> Dict[str, Any]:
    missing = [name for name, value in (("date", date), ("time", time), ("address", address)) if not (value or "").strip()]
    if missing:
        raise ValidationError("missing_booking_fields", "Date, time and address are required", {"missing": missing})

    try:
        date_cls.fromisoformat(date.strip())
    except ValueError:
        raise ValidationError("invalid_date", "Booking date must be YYYY-MM-DD", {"date": date})

    cleaned_notes = (notes or "").strip() or None
    return {
        "date": date.strip(),
        "time": time.strip(),
        "address": address.strip(),
        "additional_notes": cleaned_notes,
    }


class BookingService:
    """VR demo booking lifecycle.

    Invariant: a user has at most one booking in ``pending`` or ``confirmed``.
    Creation checks the store immediately before inserting, inside a per-user
    lock; the partial unique index on active bookings catches what slips
    past the lock when several service instances run.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self.repo = BookingRepository(db)

    async def create_booking(
        self,
        user_id: str,
        *,
        date: str,
        time: str,
        address: str,
        notes: Optional[str] = None,
        initial_status: Optional[str] = None,
    ) -> BookingOut:
        payload = _clean_booking_payload(date, time, address, notes)
        status = initial_status or booking_initial_status()
        if status not in {"pending", "confirmed"}:
            raise ValidationError("invalid_initial_status", f"Bookings cannot start as {status}", {"status": status})

        async with user_lock("booking", user_id):
            with store_errors("create_booking", user_id=user_id):
                existing = await self.repo.find_active_for_user(user_id)
                if existing is not None:
                    logger.info("Rejected booking for user %s: active booking %s exists", user_id, existing.id)
                    raise _active_booking_conflict(existing.id)

                try:
                    booking = await self.repo.create(user_id, payload, status=status)
                except DuplicateKeyError:
                    logger.warning("Active-booking index rejected a concurrent booking for user %s", user_id)
                    raise _active_booking_conflict(None)

        logger.info("Created VR booking %s for user %s (%s)", booking.id, user_id, booking.status)
        return booking

    async def cancel_booking(self, user_id: str, booking_id: str) -> BookingOut:
        with store_errors("cancel_booking", booking_id=booking_id):
            booking = await self.repo.get_by_id(booking_id)
            if booking is None:
                raise NotFoundError("booking_not_found", "Booking not found", {"booking_id": booking_id})
            if booking.user_id != user_id:
                raise AuthorizationError(
                    "not_booking_owner",
                    "Not authorized to cancel this booking",
                    {"booking_id": booking_id},
                    status_code=401,
                )

            if booking.status == "cancelled":
                return booking

            try:
                validate_transition(booking.status, "cancelled")
            except BookingStateTransitionError as exc:
                raise ConflictError(
                    "invalid_state_transition",
                    str(exc),
                    {"current": exc.current, "target": exc.target},
                ) from exc

            updated = await self.repo.update_status(booking_id, "cancelled")

        if updated is None:
            raise NotFoundError("booking_not_found", "Booking not found", {"booking_id": booking_id})
        logger.info("User %s cancelled booking %s", user_id, booking_id)
        return updated

    async def update_booking_status(
        self,
        booking_id: str,
        new_status: str,
        *,
        actor: Optional[Dict[str, Any]] = None,
    ) -> BookingOut:
        """Admin status change; no ownership check."""

        target = (new_status or "").strip().lower()
        if target not in BOOKING_STATUSES:
            raise ValidationError(
                "invalid_booking_status",
                f"Unknown booking status: {new_status}",
                {"allowed": list(BOOKING_STATUSES)},
            )

        with store_errors("update_booking_status", booking_id=booking_id):
            booking = await self.repo.get_by_id(booking_id)
            if booking is None:
                raise NotFoundError("booking_not_found", "Booking not found", {"booking_id": booking_id})

            if booking.status == target:
                return booking

            try:
                validate_transition(booking.status, target)
            except BookingStateTransitionError as exc:
                raise ConflictError(
                    "invalid_state_transition",
                    str(exc),
                    {"current": exc.current, "target": exc.target},
                ) from exc

            updated = await self.repo.update_status(booking_id, target)
            if updated is None:
                raise NotFoundError("booking_not_found", "Booking not found", {"booking_id": booking_id})

            if actor is not None:
                await write_audit_log(
                    self.db,
                    actor=actor,
                    action="BOOKING_STATUS_CHANGED",
                    target_type="vr_booking",
                    target_id=booking_id,
                    before={"status": booking.status},
                    after={"status": updated.status},
                )

        logger.info("Booking %s moved %s -> %s", booking_id, booking.status, target)
        return updated

    async def has_active_booking(self, user_id: str) -> bool:
        with store_errors("has_active_booking", user_id=user_id):
            return await self.repo.find_active_for_user(user_id) is not None

    async def list_bookings(self, user_id: str) -> List[BookingOut]:
        with store_errors("list_bookings", user_id=user_id):
            return await self.repo.list_for_user(user_id)

    async def list_all_bookings(self, *, status: Optional[str] = None) -> List[BookingOut]:
        with store_errors("list_all_bookings"):
            return await self.repo.list_all(status=status)
