from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from vrtravel.errors import NotFoundError, ValidationError
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.destination_repository import DestinationRepository, ReviewRepository
from vrtravel.schemas import DestinationIn, DestinationOut, DestinationPatch, ReviewOut, ReviewSummaryOut
from vrtravel.services.audit import write_audit_log

logger = logging.getLogger(__name__)

EXPERIENCE_TYPES = ("vr", "real_life")


class DestinationService:
    """Destination catalogue. Reads are public; writes are admin-only."""

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self.repo = DestinationRepository(db)

    async def list_destinations(self, *, q: Optional[str] = None) -> List[DestinationOut]:
        with store_errors("list_destinations"):
            return await self.repo.list_all(q=q)

    async def get_destination(self, destination_id: str) -> DestinationOut:
        with store_errors("get_destination", destination_id=destination_id):
            destination = await self.repo.get_by_id(destination_id)
        if destination is None:
            raise NotFoundError("destination_not_found", "Destination not found", {"destination_id": destination_id})
        return destination

    async def create_destination(
        self,
        payload: DestinationIn,
        *,
        actor: Dict[str, Any],
        destination_id: Optional[str] = None,
    ) -> DestinationOut:
        with store_errors("create_destination"):
            destination = await self.repo.create(payload.model_dump(), destination_id=destination_id)
            await write_audit_log(
                self.db,
                actor=actor,
                action="DESTINATION_CREATED",
                target_type="destination",
                target_id=destination.id,
                after={"name": destination.name},
            )
        return destination

    async def update_destination(self, destination_id: str, patch: DestinationPatch, *, actor: Dict[str, Any]) -> DestinationOut:
        updates = patch.model_dump(exclude_unset=True)
        before = await self.get_destination(destination_id)
        if not updates:
            return before

        with store_errors("update_destination", destination_id=destination_id):
            after = await self.repo.update(destination_id, updates)
            if after is None:
                raise NotFoundError("destination_not_found", "Destination not found", {"destination_id": destination_id})
            await write_audit_log(
                self.db,
                actor=actor,
                action="DESTINATION_UPDATED",
                target_type="destination",
                target_id=destination_id,
                before=before.model_dump(include=set(updates)),
                after=after.model_dump(include=set(updates)),
            )
        return after

    async def delete_destination(self, destination_id: str, *, actor: Dict[str, Any]) -> None:
        """Remove a destination from the catalogue.

        Package memberships and quote snapshots keep their destination ids.
        """

        with store_errors("delete_destination", destination_id=destination_id):
            deleted = await self.repo.delete(destination_id)
            if not deleted:
                raise NotFoundError("destination_not_found", "Destination not found", {"destination_id": destination_id})
            await write_audit_log(
                self.db,
                actor=actor,
                action="DESTINATION_DELETED",
                target_type="destination",
                target_id=destination_id,
            )
        logger.info("Destination %s deleted by %s", destination_id, actor.get("email"))


class ReviewService:
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self.repo = ReviewRepository(db)

    async def add_review(
        self,
        user_id: str,
        destination_id: str,
        *,
        rating: int,
        comment: str,
        experience_type: str,
    ) -> ReviewOut:
        if not 1 <= int(rating) <= 5:
            raise ValidationError("invalid_rating", "Rating must be between 1 and 5", {"rating": rating})
        if not (comment or "").strip():
            raise ValidationError("missing_comment", "Please share your experience in the comment field")
        if experience_type not in EXPERIENCE_TYPES:
            raise ValidationError(
                "invalid_experience_type",
                "Experience type must be vr or real_life",
                {"experience_type": experience_type},
            )

        with store_errors("add_review", destination_id=destination_id):
            return await self.repo.create(
                user_id,
                destination_id,
                rating=int(rating),
                comment=comment.strip(),
                experience_type=experience_type,
            )

    async def list_reviews(self, destination_id: str, *, experience_type: Optional[str] = None) -> ReviewSummaryOut:
        with store_errors("list_reviews", destination_id=destination_id):
            items = await self.repo.list_for_destination(destination_id, experience_type=experience_type)
        average = round(sum(r.rating for r in items) / len(items), 2) if items else None
        return ReviewSummaryOut(destination_id=destination_id, count=len(items), average_rating=average, items=items)
