from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from vrtravel.config import DEFAULT_GROUP_NAME, DEFAULT_PACKAGE_NAME
from vrtravel.errors import AuthorizationError, ConflictError, NotFoundError
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.package_repository import PackageGroupRepository, PackageMembershipRepository
from vrtravel.schemas import PackageGroupOut, PackageMembershipOut
from vrtravel.services.user_locks import user_lock

logger = logging.getLogger(__name__)


class PackageService:
    """Travel packages: a user's saved destinations, filed under package groups.

    A destination appears at most once across all of a user's groups; adding
    it again is a no-op. Removing a membership never touches the destination.
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.db = db
        self.groups = PackageGroupRepository(db)
        self.memberships = PackageMembershipRepository(db)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    async def ensure_default_group(self, user_id: str) -> PackageGroupOut:
        async with user_lock("package_group", user_id):
            with store_errors("ensure_default_group", user_id=user_id):
                group = await self.groups.first_for_user(user_id)
                if group is not None:
                    return group
                group = await self.groups.create(user_id, DEFAULT_GROUP_NAME)

        logger.info("Created default package group %s for user %s", group.id, user_id)
        return group

    async def create_group(self, user_id: str, name: str) -> PackageGroupOut:
        with store_errors("create_group", user_id=user_id):
            group = await self.groups.create(user_id, name)
        logger.info("Created package group %s (%r) for user %s", group.id, name, user_id)
        return group

    async def list_groups(self, user_id: str) -> List[PackageGroupOut]:
        with store_errors("list_groups", user_id=user_id):
            return await self.groups.list_for_user(user_id)

    async def get_owned_group(self, user_id: str, group_id: str) -> PackageGroupOut:
        with store_errors("get_group", group_id=group_id):
            group = await self.groups.get_by_id(group_id)
        if group is None:
            raise NotFoundError("package_group_not_found", "Package group not found", {"package_group_id": group_id})
        if group.user_id != user_id:
            raise AuthorizationError(
                "not_group_owner",
                "Not authorized to use this package group",
                {"package_group_id": group_id},
                status_code=401,
            )
        return group

    async def delete_group(self, user_id: str, group_id: str) -> int:
        """Delete an owned group together with its memberships.

        Returns the number of memberships removed.
        """

        async with user_lock("package", user_id):
            await self.get_owned_group(user_id, group_id)
            with store_errors("delete_group", group_id=group_id):
                removed = await self.memberships.delete_for_group(group_id)
                await self.groups.delete(group_id)
        logger.info("Deleted package group %s of user %s (%d memberships)", group_id, user_id, removed)
        return removed

    # ------------------------------------------------------------------
    # Memberships
    # ------------------------------------------------------------------

    async def add_to_package(
        self,
        user_id: str,
        destination_id: str,
        group_id: Optional[str] = None,
        label: Optional[str] = None,
    ) -> Tuple[PackageMembershipOut, bool]:
        """Add a destination to the user's packages.

        Returns (membership, created). ``created`` is False when the
        destination was already in one of the user's packages; the existing
        membership is returned unchanged.
        """

        async with user_lock("package", user_id):
            # Resolved under the lock so a concurrent delete_group cannot orphan the membership.
            if group_id:
                group = await self.get_owned_group(user_id, group_id)
            else:
                group = await self.ensure_default_group(user_id)

            with store_errors("add_to_package", user_id=user_id, destination_id=destination_id):
                existing = await self.memberships.find(user_id, destination_id)
                if existing is not None:
                    logger.info("Destination %s already in packages of user %s", destination_id, user_id)
                    return existing, False

                try:
                    membership = await self.memberships.create(
                        user_id,
                        destination_id,
                        package_group_id=group.id,
                        package_name=(label or "").strip() or DEFAULT_PACKAGE_NAME,
                    )
                except DuplicateKeyError:
                    existing = await self.memberships.find(user_id, destination_id)
                    if existing is None:
                        logger.warning("Duplicate membership for user %s / %s but none is readable", user_id, destination_id)
                        raise ConflictError(
                            "package_add_conflict",
                            "This destination is being updated in your package; please retry",
                            {"destination_id": destination_id},
                        )
                    return existing, False

        logger.info("Added destination %s to group %s for user %s", destination_id, group.id, user_id)
        return membership, True

    async def remove_from_package(self, user_id: str, destination_id: str) -> bool:
        """Remove a destination from the user's packages; absent is success.

        Returns True when something was deleted.
        """

        with store_errors("remove_from_package", user_id=user_id, destination_id=destination_id):
            removed = await self.memberships.delete_for_destination(user_id, destination_id)
        return removed > 0

    async def remove_membership(self, user_id: str, membership_id: str) -> PackageMembershipOut:
        with store_errors("remove_membership", membership_id=membership_id):
            membership = await self.memberships.get_by_id(membership_id)
            if membership is None:
                raise NotFoundError("package_not_found", "Package entry not found", {"package_id": membership_id})
            if membership.user_id != user_id:
                raise AuthorizationError(
                    "not_package_owner",
                    "Not authorized to remove this package entry",
                    {"package_id": membership_id},
                    status_code=401,
                )
            await self.memberships.delete_by_id(membership_id)
        return membership

    async def is_in_package(self, user_id: str, destination_id: str) -> bool:
        with store_errors("is_in_package", user_id=user_id):
            return await self.memberships.find(user_id, destination_id) is not None

    async def list_packages(self, user_id: str) -> List[str]:
        """Destination ids across all of the user's groups."""

        memberships = await self.list_memberships(user_id)
        return [m.destination_id for m in memberships]

    async def list_memberships(self, user_id: str, *, group_id: Optional[str] = None) -> List[PackageMembershipOut]:
        with store_errors("list_memberships", user_id=user_id):
            return await self.memberships.list_for_user(user_id, package_group_id=group_id)


class PackageSession:
    """Client-session view over PackageService.

    Tracks which group new destinations go into. The selection lives only in
    this object; the server keeps no "current group" pointer, so two sessions
    of the same user may have different current groups.
    """

    def __init__(self, service: PackageService, user_id: str) -> None:
        self.service = service
        self.user_id = user_id
        self.current_group: Optional[PackageGroupOut] = None

    def set_current_group(self, group: PackageGroupOut) -> None:
        if group.user_id != self.user_id:
            raise AuthorizationError(
                "not_group_owner",
                "Not authorized to use this package group",
                {"package_group_id": group.id},
                status_code=401,
            )
        self.current_group = group

    async def create_group(self, name: str) -> PackageGroupOut:
        group = await self.service.create_group(self.user_id, name)
        self.current_group = group
        return group

    async def add_to_package(self, destination_id: str, label: Optional[str] = None) -> Tuple[PackageMembershipOut, bool]:
        if self.current_group is None:
            self.current_group = await self.service.ensure_default_group(self.user_id)
        return await self.service.add_to_package(self.user_id, destination_id, self.current_group.id, label)
