from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from vrtravel.repositories.base_repository import PROJECTION, get_collection
from vrtravel.schemas import QuoteOut
from vrtravel.utils import new_id, now_utc


class QuoteRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "quote_requests")

    async def create(self, user_id: str, package_ids: List[str]) -> QuoteOut:
        now = now_utc()
        doc: Dict[str, Any] = {
            "id": new_id("qte"),
            "user_id": user_id,
            "package_ids": list(package_ids),
            "status": "pending",
            "created_at": now,
            "updated_at": now,
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return QuoteOut.model_validate(doc)

    async def get_by_id(self, quote_id: str) -> Optional[QuoteOut]:
        doc = await self._col.find_one({"id": quote_id}, PROJECTION)
        return QuoteOut.model_validate(doc) if doc else None

    async def update_status(self, quote_id: str, new_status: str) -> Optional[QuoteOut]:
        doc = await self._col.find_one_and_update(
            {"id": quote_id},
            {"$set": {"status": new_status, "updated_at": now_utc()}},
            projection=PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return QuoteOut.model_validate(doc) if doc else None

    async def list_for_user(self, user_id: str) -> List[QuoteOut]:
        docs = await self._col.find({"user_id": user_id}, PROJECTION).sort("created_at", -1).to_list(length=None)
        return [QuoteOut.model_validate(d) for d in docs]

    async def list_all(self, *, status: Optional[str] = None, limit: int = 500) -> List[QuoteOut]:
        flt: Dict[str, Any] = {}
        if status:
            flt["status"] = status
        docs = await self._col.find(flt, PROJECTION).sort("created_at", -1).limit(limit).to_list(length=limit)
        return [QuoteOut.model_validate(d) for d in docs]

    async def count(self, flt: Optional[Dict[str, Any]] = None) -> int:
        return await self._col.count_documents(flt or {})
