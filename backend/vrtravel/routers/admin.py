from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends

from vrtravel.auth import require_admin
from vrtravel.db import get_db
from vrtravel.repositories.audit_log_repository import AuditLogRepository
from vrtravel.repositories.base_repository import store_errors
from vrtravel.schemas import (
    AdminEntryOut,
    AdminGrantIn,
    AdminStatsOut,
    AuditLogOut,
    BookingOut,
    BookingStatusIn,
    DestinationIn,
    DestinationOut,
    DestinationPatch,
    MessageOut,
    QuoteOut,
    QuoteStatusIn,
    UserOut,
)
from vrtravel.services.admin_service import AdminService
from vrtravel.services.booking_service import BookingService
from vrtravel.services.destination_service import DestinationService
from vrtravel.services.quote_service import QuoteService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/stats", response_model=AdminStatsOut)
async def stats(db=Depends(get_db), admin=Depends(require_admin)):
    return await AdminService(db).stats()


# --- bookings -------------------------------------------------------------


@router.get("/bookings", response_model=List[BookingOut])
async def list_bookings(status: Optional[str] = None, db=Depends(get_db), admin=Depends(require_admin)):
    return await BookingService(db).list_all_bookings(status=status)


@router.put("/bookings/{booking_id}/status", response_model=BookingOut)
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusIn,
    db=Depends(get_db),
    admin=Depends(require_admin),
):
    return await BookingService(db).update_booking_status(booking_id, payload.status, actor=admin)


# --- quotes ---------------------------------------------------------------


@router.get("/quotes", response_model=List[QuoteOut])
async def list_quotes(status: Optional[str] = None, db=Depends(get_db), admin=Depends(require_admin)):
    return await QuoteService(db).list_all_quotes(status=status)


@router.put("/quotes/{quote_id}/status", response_model=QuoteOut)
async def update_quote_status(quote_id: str, payload: QuoteStatusIn, db=Depends(get_db), admin=Depends(require_admin)):
    return await QuoteService(db).update_quote_status(quote_id, payload.status, actor=admin)


# --- users & admin allow-list ---------------------------------------------


@router.get("/users", response_model=List[UserOut])
async def list_users(db=Depends(get_db), admin=Depends(require_admin)):
    return await AdminService(db).list_users()


@router.get("/admins", response_model=List[AdminEntryOut])
async def list_admins(db=Depends(get_db), admin=Depends(require_admin)):
    return await AdminService(db).list_admins()


@router.post("/admins", response_model=AdminEntryOut)
async def grant_admin(payload: AdminGrantIn, db=Depends(get_db), admin=Depends(require_admin)):
    return await AdminService(db).grant_admin(payload.email, actor=admin)


@router.delete("/admins/{email}", response_model=MessageOut)
async def revoke_admin(email: str, db=Depends(get_db), admin=Depends(require_admin)):
    await AdminService(db).revoke_admin(email, actor=admin)
    return MessageOut(message=f"Admin access revoked for {email}")


# --- destinations ---------------------------------------------------------


@router.post("/destinations", response_model=DestinationOut)
async def create_destination(payload: DestinationIn, db=Depends(get_db), admin=Depends(require_admin)):
    return await DestinationService(db).create_destination(payload, actor=admin)


@router.put("/destinations/{destination_id}", response_model=DestinationOut)
async def update_destination(
    destination_id: str,
    payload: DestinationPatch,
    db=Depends(get_db),
    admin=Depends(require_admin),
):
    return await DestinationService(db).update_destination(destination_id, payload, actor=admin)


@router.delete("/destinations/{destination_id}", response_model=MessageOut)
async def delete_destination(destination_id: str, db=Depends(get_db), admin=Depends(require_admin)):
    await DestinationService(db).delete_destination(destination_id, actor=admin)
    return MessageOut(message="Destination deleted")


# --- audit ----------------------------------------------------------------


@router.get("/audit", response_model=List[AuditLogOut])
async def list_audit_logs(
    target_type: Optional[str] = None,
    target_id: Optional[str] = None,
    limit: int = 100,
    db=Depends(get_db),
    admin=Depends(require_admin),
):
    with store_errors("list_audit_logs"):
        return await AuditLogRepository(db).list_recent(
            target_type=target_type,
            target_id=target_id,
            limit=max(1, min(limit, 500)),
        )
