from __future__ import annotations

from typing import Any

import pytest

from vrtravel.errors import AuthorizationError, NotFoundError, ValidationError
from vrtravel.repositories.user_repository import UserRepository
from vrtravel.services.admin_service import AdminService
from vrtravel.services.booking_service import BookingService
from vrtravel.services.package_service import PackageService
from vrtravel.services.quote_service import QuoteService

pytestmark = pytest.mark.anyio

ACTOR = {"id": "admin-root", "email": "root@vrtravel.test"}


async def test_super_admin_is_protected(test_db: Any) -> None:
    svc = AdminService(test_db)
    entry = await svc.ensure_super_admin("Root@VRTravel.test ")

    assert entry.email == "root@vrtravel.test"
    assert entry.protected is True
    # repeated bootstrap is harmless
    assert (await svc.ensure_super_admin("root@vrtravel.test")).protected is True

    with pytest.raises(AuthorizationError) as exc:
        await svc.revoke_admin("root@vrtravel.test", actor=ACTOR)
    assert exc.value.status_code == 403
    assert exc.value.code == "protected_admin"
    assert await svc.is_admin("root@vrtravel.test") is True


async def test_bootstrap_protects_existing_entry(test_db: Any) -> None:
    svc = AdminService(test_db)
    await svc.grant_admin("ops@vrtravel.test", actor=ACTOR)

    entry = await svc.ensure_super_admin("ops@vrtravel.test")

    assert entry.protected is True
    assert len(await svc.list_admins()) == 1


async def test_grant_and_revoke(test_db: Any) -> None:
    svc = AdminService(test_db)
    await UserRepository(test_db).upsert_identity("u-ops", "ops@vrtravel.test", "Ops")

    entry = await svc.grant_admin("  OPS@vrtravel.test", actor=ACTOR)
    assert entry.email == "ops@vrtravel.test"
    assert entry.protected is False
    assert entry.granted_by == ACTOR["email"]
    assert await svc.is_admin("ops@vrtravel.test") is True
    assert (await UserRepository(test_db).get_by_id("u-ops")).is_admin is True

    # granting twice keeps a single entry
    await svc.grant_admin("ops@vrtravel.test", actor=ACTOR)
    assert [a.email for a in await svc.list_admins()] == ["ops@vrtravel.test"]

    await svc.revoke_admin("ops@vrtravel.test", actor=ACTOR)
    assert await svc.is_admin("ops@vrtravel.test") is False
    assert (await UserRepository(test_db).get_by_id("u-ops")).is_admin is False

    actions = [a["action"] for a in await test_db.audit_logs.find({}, {"_id": 0}).to_list(length=None)]
    assert sorted(actions) == ["ADMIN_GRANTED", "ADMIN_REVOKED"]


async def test_grant_and_revoke_errors(test_db: Any) -> None:
    svc = AdminService(test_db)

    with pytest.raises(ValidationError):
        await svc.grant_admin("not-an-email", actor=ACTOR)
    with pytest.raises(NotFoundError):
        await svc.revoke_admin("nobody@vrtravel.test", actor=ACTOR)
    assert await svc.is_admin(None) is False


async def test_list_users_reflects_allowlist(test_db: Any) -> None:
    users = UserRepository(test_db)
    await users.upsert_identity("u-root", "root@vrtravel.test", "Root")
    await users.upsert_identity("u-alice", "alice@example.com", "Alice")
    await AdminService(test_db).ensure_super_admin("root@vrtravel.test")

    listed = {u.email: u.is_admin for u in await AdminService(test_db).list_users()}

    assert listed == {"root@vrtravel.test": True, "alice@example.com": False}


async def test_stats_counts_lifecycle_records(test_db: Any) -> None:
    bookings = BookingService(test_db)
    packages = PackageService(test_db)
    first = await bookings.create_booking("alice", date="2025-06-01", time="9:00 AM - 11:00 AM", address="1 Main St")
    await bookings.cancel_booking("alice", first.id)
    await bookings.create_booking("alice", date="2025-06-02", time="9:00 AM - 11:00 AM", address="1 Main St")
    await packages.add_to_package("bob", "d1")
    await packages.add_to_package("bob", "d2")
    await QuoteService(test_db, packages).request_quote("bob")
    await UserRepository(test_db).upsert_identity("alice", "alice@example.com", "Alice")

    stats = await AdminService(test_db).stats()

    assert stats.total_bookings == 2
    assert stats.active_bookings == 1
    assert stats.total_quotes == 1
    assert stats.pending_quotes == 1
    assert stats.total_packages == 2
    assert stats.total_users == 1
