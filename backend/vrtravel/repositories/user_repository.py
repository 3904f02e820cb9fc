from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from vrtravel.repositories.base_repository import PROJECTION, get_collection
from vrtravel.schemas import AdminEntryOut, UserOut
from vrtravel.utils import normalize_email, now_utc


class UserRepository:
    """Profiles mirrored from the identity provider, keyed by its subject id."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "users")

    async def upsert_identity(self, user_id: str, email: str, name: Optional[str] = None) -> UserOut:
        """Create the profile on first sight; keep the email in sync afterwards.

        A user-chosen display name is never overwritten by the token's name.
        """

        now = now_utc()
        doc = await self._col.find_one_and_update(
            {"id": user_id},
            {
                "$set": {"email": normalize_email(email), "updated_at": now},
                "$setOnInsert": {
                    "name": name or normalize_email(email).split("@")[0],
                    "photo_url": None,
                    "is_admin": False,
                    "created_at": now,
                },
            },
            projection=PROJECTION,
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return UserOut.model_validate(doc)

    async def get_by_id(self, user_id: str) -> Optional[UserOut]:
        doc = await self._col.find_one({"id": user_id}, PROJECTION)
        return UserOut.model_validate(doc) if doc else None

    async def update_profile(self, user_id: str, updates: Dict[str, Any]) -> Optional[UserOut]:
        doc = await self._col.find_one_and_update(
            {"id": user_id},
            {"$set": {**updates, "updated_at": now_utc()}},
            projection=PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return UserOut.model_validate(doc) if doc else None

    async def set_admin_flag(self, email: str, is_admin: bool) -> int:
        res = await self._col.update_many(
            {"email": normalize_email(email)},
            {"$set": {"is_admin": is_admin, "updated_at": now_utc()}},
        )
        return res.modified_count

    async def list_all(self, *, limit: int = 500) -> List[UserOut]:
        docs = await self._col.find({}, PROJECTION).sort("created_at", -1).limit(limit).to_list(length=limit)
        return [UserOut.model_validate(d) for d in docs]

    async def count(self) -> int:
        return await self._col.count_documents({})


class AdminAllowlistRepository:
    """Persisted admin allow-list; the source of truth for admin status."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "admin_allowlist")

    async def get(self, email: str) -> Optional[AdminEntryOut]:
        doc = await self._col.find_one({"email": normalize_email(email)}, PROJECTION)
        return AdminEntryOut.model_validate(doc) if doc else None

    async def insert(self, email: str, *, protected: bool = False, granted_by: Optional[str] = None) -> AdminEntryOut:
        doc: Dict[str, Any] = {
            "email": normalize_email(email),
            "protected": protected,
            "granted_by": granted_by,
            "created_at": now_utc(),
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return AdminEntryOut.model_validate(doc)

    async def mark_protected(self, email: str) -> Optional[AdminEntryOut]:
        doc = await self._col.find_one_and_update(
            {"email": normalize_email(email)},
            {"$set": {"protected": True}},
            projection=PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return AdminEntryOut.model_validate(doc) if doc else None

    async def delete(self, email: str) -> int:
        res = await self._col.delete_one({"email": normalize_email(email), "protected": {"$ne": True}})
        return res.deleted_count

    async def list_all(self) -> List[AdminEntryOut]:
        docs = await self._col.find({}, PROJECTION).sort("created_at", 1).to_list(length=None)
        return [AdminEntryOut.model_validate(d) for d in docs]
