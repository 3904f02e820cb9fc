from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from vrtravel.auth import get_current_user
from vrtravel.db import get_db
from vrtravel.schemas import ActiveBookingOut, BookingIn, BookingOut
from vrtravel.services.booking_service import VR_TIME_SLOTS, BookingService

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.get("", response_model=List[BookingOut])
async def list_my_bookings(db=Depends(get_db), user=Depends(get_current_user)):
    return await BookingService(db).list_bookings(user["id"])


@router.get("/active", response_model=ActiveBookingOut)
async def has_active_booking(db=Depends(get_db), user=Depends(get_current_user)):
    return ActiveBookingOut(has_active_booking=await BookingService(db).has_active_booking(user["id"]))


@router.get("/slots", response_model=List[str])
async def list_time_slots():
    return list(VR_TIME_SLOTS)


@router.post("", response_model=BookingOut)
async def create_booking(payload: BookingIn, db=Depends(get_db), user=Depends(get_current_user)):
    return await BookingService(db).create_booking(
        user["id"],
        date=payload.date,
        time=payload.time,
        address=payload.address,
        notes=payload.additional_notes,
    )


@router.put("/cancel/{booking_id}", response_model=BookingOut)
async def cancel_booking(booking_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    return await BookingService(db).cancel_booking(user["id"], booking_id)
