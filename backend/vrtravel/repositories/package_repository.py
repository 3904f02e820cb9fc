from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from vrtravel.repositories.base_repository import PROJECTION, get_collection
from vrtravel.schemas import PackageGroupOut, PackageMembershipOut
from vrtravel.utils import new_id, now_utc


class PackageGroupRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "package_groups")

    async def create(self, user_id: str, name: str) -> PackageGroupOut:
        doc: Dict[str, Any] = {
            "id": new_id("grp"),
            "user_id": user_id,
            "name": name,
            "created_at": now_utc(),
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return PackageGroupOut.model_validate(doc)

    async def get_by_id(self, group_id: str) -> Optional[PackageGroupOut]:
        doc = await self._col.find_one({"id": group_id}, PROJECTION)
        return PackageGroupOut.model_validate(doc) if doc else None

    async def first_for_user(self, user_id: str) -> Optional[PackageGroupOut]:
        docs = await self._col.find({"user_id": user_id}, PROJECTION).sort("created_at", 1).limit(1).to_list(length=1)
        return PackageGroupOut.model_validate(docs[0]) if docs else None

    async def list_for_user(self, user_id: str) -> List[PackageGroupOut]:
        docs = await self._col.find({"user_id": user_id}, PROJECTION).sort("created_at", 1).to_list(length=None)
        return [PackageGroupOut.model_validate(d) for d in docs]

    async def delete(self, group_id: str) -> int:
        res = await self._col.delete_one({"id": group_id})
        return res.deleted_count


class PackageMembershipRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "user_packages")

    async def create(
        self,
        user_id: str,
        destination_id: str,
        *,
        package_group_id: Optional[str],
        package_name: str,
    ) -> PackageMembershipOut:
        doc: Dict[str, Any] = {
            "id": new_id("pkg"),
            "user_id": user_id,
            "destination_id": destination_id,
            "package_group_id": package_group_id,
            "package_name": package_name,
            "created_at": now_utc(),
        }
        await self._col.insert_one(doc)
        doc.pop("_id", None)
        return PackageMembershipOut.model_validate(doc)

    async def get_by_id(self, membership_id: str) -> Optional[PackageMembershipOut]:
        doc = await self._col.find_one({"id": membership_id}, PROJECTION)
        return PackageMembershipOut.model_validate(doc) if doc else None

    async def find(self, user_id: str, destination_id: str) -> Optional[PackageMembershipOut]:
        doc = await self._col.find_one({"user_id": user_id, "destination_id": destination_id}, PROJECTION)
        return PackageMembershipOut.model_validate(doc) if doc else None

    async def list_for_user(self, user_id: str, *, package_group_id: Optional[str] = None) -> List[PackageMembershipOut]:
        flt: Dict[str, Any] = {"user_id": user_id}
        if package_group_id:
            flt["package_group_id"] = package_group_id
        docs = await self._col.find(flt, PROJECTION).sort("created_at", 1).to_list(length=None)
        return [PackageMembershipOut.model_validate(d) for d in docs]

    async def delete_by_id(self, membership_id: str) -> int:
        res = await self._col.delete_one({"id": membership_id})
        return res.deleted_count

    async def delete_for_destination(self, user_id: str, destination_id: str) -> int:
        res = await self._col.delete_many({"user_id": user_id, "destination_id": destination_id})
        return res.deleted_count

    async def delete_for_group(self, package_group_id: str) -> int:
        res = await self._col.delete_many({"package_group_id": package_group_id})
        return res.deleted_count

    async def count(self, flt: Optional[Dict[str, Any]] = None) -> int:
        return await self._col.count_documents(flt or {})
