from __future__ import annotations

from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from vrtravel.repositories.base_repository import PROJECTION, get_collection
from vrtravel.schemas import AuditLogOut


class AuditLogRepository:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self._col = get_collection(db, "audit_logs")

    async def insert(self, doc: Dict[str, Any]) -> None:
        await self._col.insert_one(dict(doc))

    async def list_recent(
        self,
        *,
        target_type: Optional[str] = None,
        target_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[AuditLogOut]:
        flt: Dict[str, Any] = {}
        if target_type:
            flt["target_type"] = target_type
        if target_id:
            flt["target_id"] = target_id
        docs = await self._col.find(flt, PROJECTION).sort("created_at", -1).limit(limit).to_list(length=limit)
        return [AuditLogOut.model_validate(d) for d in docs]
