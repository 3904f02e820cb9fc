from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from vrtravel.repositories.base_repository import PROJECTION, get_collection
from vrtravel.schemas import DestinationOut, ReviewOut
from vrtravel.utils import new_id, now_utc


class DestinationRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "destinations")

    async def create(self, payload: Dict[str, Any], *, destination_id: Optional[str] = None) -> DestinationOut:
        now = now_utc()
        doc: Dict[str, Any] = {
            **payload,
            "id": destination_id or new_id("dst"),
            "created_at": now,
            "updated_at": now,
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return DestinationOut.model_validate(doc)

    async def get_by_id(self, destination_id: str) -> Optional[DestinationOut]:
        doc = await self._col.find_one({"id": destination_id}, PROJECTION)
        return DestinationOut.model_validate(doc) if doc else None

    async def update(self, destination_id: str, updates: Dict[str, Any]) -> Optional[DestinationOut]:
        doc = await self._col.find_one_and_update(
            {"id": destination_id},
            {"$set": {**updates, "updated_at": now_utc()}},
            projection=PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return DestinationOut.model_validate(doc) if doc else None

    async def delete(self, destination_id: str) -> int:
        res = await self._col.delete_one({"id": destination_id})
        return res.deleted_count

    async def list_all(self, *, q: Optional[str] = None) -> List[DestinationOut]:
        docs = await self._col.find({}, PROJECTION).sort("name", 1).to_list(length=None)
        items = [DestinationOut.model_validate(d) for d in docs]
        if q:
            needle = q.strip().lower()
            items = [d for d in items if needle in d.name.lower() or needle in d.location.lower()]
        return items

    async def count(self) -> int:
        return await self._col.count_documents({})


class ReviewRepository:
    """Append-only review log, one stream per destination."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "destination_reviews")

    async def create(
        self,
        user_id: str,
        destination_id: str,
        *,
        rating: int,
        comment: str,
        experience_type: str,
    ) -> ReviewOut:
        doc: Dict[str, Any] = {
            "id": new_id("rev"),
            "user_id": user_id,
            "destination_id": destination_id,
            "rating": rating,
            "comment": comment,
            "experience_type": experience_type,
            "created_at": now_utc(),
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return ReviewOut.model_validate(doc)

    async def list_for_destination(
        self,
        destination_id: str,
        *,
        experience_type: Optional[str] = None,
    ) -> List[ReviewOut]:
        flt: Dict[str, Any] = {"destination_id": destination_id}
        if experience_type:
            flt["experience_type"] = experience_type
        docs = await self._col.find(flt, PROJECTION).sort("created_at", -1).to_list(length=None)
        return [ReviewOut.model_validate(d) for d in docs]
