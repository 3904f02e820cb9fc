from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from vrtravel.config import super_admin_email
from vrtravel.errors import AuthorizationError, NotFoundError, ValidationError
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.booking_repository import BookingRepository
from vrtravel.repositories.package_repository import PackageMembershipRepository
from vrtravel.repositories.quote_repository import QuoteRepository
from vrtravel.repositories.user_repository import AdminAllowlistRepository, UserRepository
from vrtravel.schemas import AdminEntryOut, AdminStatsOut, UserOut
from vrtravel.services.audit import write_audit_log
from vrtravel.utils import normalize_email

logger = logging.getLogger(__name__)


class AdminService:
    """Admin allow-list and dashboard queries.

    The persisted allow-list decides who is an admin; ``users.is_admin`` is a
    cache refreshed on grant/revoke. The bootstrap super-admin entry is
    marked protected and can never be revoked.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self.allowlist = AdminAllowlistRepository(db)
        self.users = UserRepository(db)

    async def ensure_super_admin(self, email: Optional[str] = None) -> AdminEntryOut:
        target = normalize_email(email or super_admin_email())
        with store_errors("ensure_super_admin"):
            entry = await self.allowlist.get(target)
            if entry is None:
                try:
                    entry = await self.allowlist.insert(target, protected=True, granted_by="bootstrap")
                except DuplicateKeyError:
                    entry = await self.allowlist.mark_protected(target)
            elif not entry.protected:
                entry = await self.allowlist.mark_protected(target)
            await self.users.set_admin_flag(target, True)
        assert entry is not None
        return entry

    async def is_admin(self, email: Optional[str]) -> bool:
        if not email:
            return False
        with store_errors("is_admin"):
            return await self.allowlist.get(email) is not None

    async def list_admins(self) -> List[AdminEntryOut]:
        with store_errors("list_admins"):
            return await self.allowlist.list_all()

    async def grant_admin(self, email: str, *, actor: Dict[str, Any]) -> AdminEntryOut:
        target = normalize_email(email)
        if "@" not in target:
            raise ValidationError("invalid_email", "A valid email address is required", {"email": email})

        with store_errors("grant_admin"):
            entry = await self.allowlist.get(target)
            if entry is not None:
                return entry
            try:
                entry = await self.allowlist.insert(target, granted_by=actor.get("email"))
            except DuplicateKeyError:
                entry = await self.allowlist.get(target)
            await self.users.set_admin_flag(target, True)
            await write_audit_log(
                self.db,
                actor=actor,
                action="ADMIN_GRANTED",
                target_type="admin_allowlist",
                target_id=target,
                after={"email": target},
            )

        assert entry is not None
        logger.info("Admin access granted to %s by %s", target, actor.get("email"))
        return entry

    async def revoke_admin(self, email: str, *, actor: Dict[str, Any]) -> None:
        target = normalize_email(email)
        with store_errors("revoke_admin"):
            entry = await self.allowlist.get(target)
            if entry is None:
                raise NotFoundError("admin_not_found", "Email is not on the admin allow-list", {"email": target})
            if entry.protected:
                raise AuthorizationError(
                    "protected_admin",
                    "This administrator cannot be revoked",
                    {"email": target},
                )
            await self.allowlist.delete(target)
            await self.users.set_admin_flag(target, False)
            await write_audit_log(
                self.db,
                actor=actor,
                action="ADMIN_REVOKED",
                target_type="admin_allowlist",
                target_id=target,
                before={"email": target},
            )
        logger.info("Admin access revoked from %s by %s", target, actor.get("email"))

    async def list_users(self) -> List[UserOut]:
        """All profiles, with is_admin taken from the allow-list."""

        with store_errors("list_users"):
            users = await self.users.list_all()
            admins = {a.email for a in await self.allowlist.list_all()}
        return [u.model_copy(update={"is_admin": u.email in admins}) for u in users]

    async def stats(self) -> AdminStatsOut:
        bookings = BookingRepository(self.db)
        quotes = QuoteRepository(self.db)
        memberships = PackageMembershipRepository(self.db)
        with store_errors("admin_stats"):
            return AdminStatsOut(
                total_bookings=await bookings.count(),
                active_bookings=await bookings.count({"status": {"$in": ["pending", "confirmed"]}}),
                total_quotes=await quotes.count(),
                pending_quotes=await quotes.count({"status": "pending"}),
                total_users=await self.users.count(),
                total_packages=await memberships.count(),
            )
