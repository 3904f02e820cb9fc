from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from vrtravel.domain.booking_state_machine import ACTIVE_BOOKING_STATUSES, is_active
from vrtravel.repositories.base_repository import PROJECTION, get_collection
from vrtravel.schemas import BookingOut
from vrtravel.utils import new_id, now_utc


class BookingRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._db = db
        self._col = get_collection(db, "vr_bookings")

    async def create(self, user_id: str, payload: Dict[str, Any], *, status: str) -> BookingOut:
        now = now_utc()
        doc: Dict[str, Any] = {
            "id": new_id("bkg"),
            "user_id": user_id,
            "date": payload["date"],
            "time": payload["time"],
            "address": payload["address"],
            "additional_notes": payload.get("additional_notes"),
            "status": status,
            # Mirrors the status; backs the partial unique index on user_id.
            "active": is_active(status),
            "created_at": now,
            "updated_at": now,
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return BookingOut.model_validate(doc)

    async def get_by_id(self, booking_id: str) -> Optional[BookingOut]:
        doc = await self._col.find_one({"id": booking_id}, PROJECTION)
        if not doc:
            return None
        return BookingOut.model_validate(doc)

    async def find_active_for_user(self, user_id: str) -> Optional[BookingOut]:
        doc = await self._col.find_one(
            {"user_id": user_id, "status": {"$in": sorted(ACTIVE_BOOKING_STATUSES)}},
            PROJECTION,
        )
        if not doc:
            return None
        return BookingOut.model_validate(doc)

    async def update_status(self, booking_id: str, new_status: str) -> Optional[BookingOut]:
        doc = await self._col.find_one_and_update(
            {"id": booking_id},
            {"$set": {"status": new_status, "active": is_active(new_status), "updated_at": now_utc()}},
            projection=PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            return None
        return BookingOut.model_validate(doc)

    async def list_for_user(self, user_id: str) -> List[BookingOut]:
        docs = await self._col.find({"user_id": user_id}, PROJECTION).sort("created_at", -1).to_list(length=None)
        return [BookingOut.model_validate(d) for d in docs]

    async def list_all(self, *, status: Optional[str] = None, limit: int = 500) -> List[BookingOut]:
        flt: Dict[str, Any] = {}
        if status:
            flt["status"] = status
        cursor = self._col.find(flt, PROJECTION).sort("created_at", -1).limit(limit)
        docs = await cursor.to_list(length=limit)
        return [BookingOut.model_validate(d) for d in docs]

    async def count(self, flt: Optional[Dict[str, Any]] = None) -> int:
        return await self._col.count_documents(flt or {})
