from __future__ import annotations

import logging

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


async def ensure_travel_indexes(db) -> None:
    async def _safe_create(collection, *args, **kwargs):
        try:
            await collection.create_index(*args, **kwargs)
        except PyMongoError as exc:
            logger.warning("Index %s on %s not created: %s", kwargs.get("name"), collection.name, exc)

    for name in ("users", "destinations", "package_groups", "user_packages", "vr_bookings", "quote_requests", "destination_reviews", "audit_logs"):
        await _safe_create(db[name], [("id", ASCENDING)], name=f"{name}_by_id", unique=True)

    await _safe_create(db.users, [("email", ASCENDING)], name="users_by_email")
    await _safe_create(db.admin_allowlist, [("email", ASCENDING)], name="admin_allowlist_by_email", unique=True)

    await _safe_create(
        db.package_groups,
        [("user_id", ASCENDING), ("created_at", ASCENDING)],
        name="package_groups_by_user",
    )

    # One membership per (user, destination), whatever the group.
    await _safe_create(
        db.user_packages,
        [("user_id", ASCENDING), ("destination_id", ASCENDING)],
        name="user_packages_user_destination_unique",
        unique=True,
    )
    await _safe_create(db.user_packages, [("package_group_id", ASCENDING)], name="user_packages_by_group")

    # At most one active VR booking per user; "active" mirrors the status.
    await _safe_create(
        db.vr_bookings,
        [("user_id", ASCENDING)],
        name="vr_bookings_one_active_per_user",
        unique=True,
        partialFilterExpression={"active": True},
    )
    await _safe_create(
        db.vr_bookings,
        [("status", ASCENDING), ("created_at", DESCENDING)],
        name="vr_bookings_by_status",
    )

    await _safe_create(
        db.quote_requests,
        [("user_id", ASCENDING), ("created_at", DESCENDING)],
        name="quote_requests_by_user",
    )
    await _safe_create(
        db.quote_requests,
        [("status", ASCENDING), ("created_at", DESCENDING)],
        name="quote_requests_by_status",
    )

    await _safe_create(
        db.destination_reviews,
        [("destination_id", ASCENDING), ("created_at", DESCENDING)],
        name="destination_reviews_by_destination",
    )
    await _safe_create(db.audit_logs, [("created_at", DESCENDING)], name="audit_logs_recent")
