from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from vrtravel.domain.quote_state_machine import (
    QUOTE_STATUSES,
    QuoteStateTransitionError,
    normalize_quote_status,
    validate_transition,
)
from vrtravel.errors import ConflictError, NotFoundError, ValidationError
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.quote_repository import QuoteRepository
from vrtravel.schemas import QuoteOut
from vrtravel.services.audit import write_audit_log
from vrtravel.services.package_service import PackageService

logger = logging.getLogger(__name__)


class QuoteService:
    def __init__(self, db: AsyncIOMotorDatabase, packages: Optional[PackageService] = None) -> None:
        self.db = db
        self.repo = QuoteRepository(db)
        self.packages = packages or PackageService(db)

    async def request_quote(self, user_id: str) -> QuoteOut:
        """Snapshot the user's current package destinations into a pending quote."""

        package_ids = await self.packages.list_packages(user_id)
        if not package_ids:
            raise ValidationError(
                "empty_package",
                "Add at least one destination to your package before requesting a quote",
            )

        # Keep first-seen order, drop duplicates.
        snapshot = list(dict.fromkeys(package_ids))
        with store_errors("request_quote", user_id=user_id):
            quote = await self.repo.create(user_id, snapshot)
        logger.info("Quote %s requested by user %s for %d destinations", quote.id, user_id, len(snapshot))
        return quote

    async def update_quote_status(
        self,
        quote_id: str,
        new_status: str,
        *,
        actor: Optional[Dict[str, Any]] = None,
    ) -> QuoteOut:
        target = normalize_quote_status(new_status)
        if target not in QUOTE_STATUSES:
            raise ValidationError(
                "invalid_quote_status",
                f"Unknown quote status: {new_status}",
                {"allowed": list(QUOTE_STATUSES)},
            )

        with store_errors("update_quote_status", quote_id=quote_id):
            quote = await self.repo.get_by_id(quote_id)
            if quote is None:
                raise NotFoundError("quote_not_found", "Quote request not found", {"quote_id": quote_id})

            if quote.status == target:
                return quote

            try:
                validate_transition(quote.status, target)
            except QuoteStateTransitionError as exc:
                raise ConflictError(
                    "invalid_state_transition",
                    str(exc),
                    {"current": exc.current, "target": exc.target},
                ) from exc

            updated = await self.repo.update_status(quote_id, target)
            if updated is None:
                raise NotFoundError("quote_not_found", "Quote request not found", {"quote_id": quote_id})

            if actor is not None:
                await write_audit_log(
                    self.db,
                    actor=actor,
                    action="QUOTE_STATUS_CHANGED",
                    target_type="quote_request",
                    target_id=quote_id,
                    before={"status": quote.status},
                    after={"status": updated.status},
                )

        logger.info("Quote %s moved %s -> %s", quote_id, quote.status, target)
        return updated

    async def list_quotes(self, user_id: str) -> List[QuoteOut]:
        with store_errors("list_quotes", user_id=user_id):
            return await self.repo.list_for_user(user_id)

    async def list_all_quotes(self, *, status: Optional[str] = None) -> List[QuoteOut]:
        flt_status = normalize_quote_status(status) if status else None
        with store_errors("list_all_quotes"):
            return await self.repo.list_all(status=flt_status)
