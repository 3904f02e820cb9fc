from __future__ import annotations

import asyncio
from typing import Any

import pytest

from vrtravel.config import DEFAULT_GROUP_NAME, DEFAULT_PACKAGE_NAME
from vrtravel.errors import AuthorizationError, NotFoundError
from vrtravel.services.package_service import PackageService, PackageSession
from vrtravel.services.user_locks import user_lock

pytestmark = pytest.mark.anyio


async def test_add_is_idempotent_per_destination(test_db: Any) -> None:
    svc = PackageService(test_db)

    first, created = await svc.add_to_package("bob", "d1")
    again, created_again = await svc.add_to_package("bob", "d1")

    assert created is True
    assert created_again is False
    assert again.id == first.id
    assert await svc.list_packages("bob") == ["d1"]
    assert await test_db.user_packages.count_documents({"user_id": "bob", "destination_id": "d1"}) == 1


async def test_first_add_creates_default_group(test_db: Any) -> None:
    svc = PackageService(test_db)

    membership, _ = await svc.add_to_package("bob", "d1")

    groups = await svc.list_groups("bob")
    assert len(groups) == 1
    assert groups[0].name == DEFAULT_GROUP_NAME
    assert membership.package_group_id == groups[0].id
    assert membership.package_name == DEFAULT_PACKAGE_NAME

    await svc.add_to_package("bob", "d2")
    assert len(await svc.list_groups("bob")) == 1


async def test_destination_is_unique_across_groups(test_db: Any) -> None:
    svc = PackageService(test_db)
    summer = await svc.create_group("bob", "Summer")
    winter = await svc.create_group("bob", "Winter")

    first, _ = await svc.add_to_package("bob", "d1", summer.id)
    second, created = await svc.add_to_package("bob", "d1", winter.id)

    assert created is False
    assert second.package_group_id == summer.id
    assert [m.destination_id for m in await svc.list_memberships("bob", group_id=winter.id)] == []


async def test_remove_then_readd(test_db: Any) -> None:
    svc = PackageService(test_db)
    await svc.add_to_package("bob", "d1")

    assert await svc.remove_from_package("bob", "d1") is True
    assert await svc.is_in_package("bob", "d1") is False
    # absent is still success
    assert await svc.remove_from_package("bob", "d1") is False

    _, created = await svc.add_to_package("bob", "d1")
    assert created is True
    assert await svc.is_in_package("bob", "d1") is True


async def test_remove_membership_checks_owner(test_db: Any) -> None:
    svc = PackageService(test_db)
    membership, _ = await svc.add_to_package("bob", "d1")

    with pytest.raises(AuthorizationError) as exc:
        await svc.remove_membership("mallory", membership.id)
    assert exc.value.status_code == 401
    assert await svc.is_in_package("bob", "d1") is True

    with pytest.raises(NotFoundError):
        await svc.remove_membership("bob", "pkg_missing")

    removed = await svc.remove_membership("bob", membership.id)
    assert removed.destination_id == "d1"
    assert await svc.list_packages("bob") == []


async def test_packages_are_per_user(test_db: Any) -> None:
    svc = PackageService(test_db)
    await svc.add_to_package("bob", "d1")
    await svc.add_to_package("carol", "d1")
    await svc.add_to_package("carol", "d11")

    assert await svc.list_packages("bob") == ["d1"]
    assert sorted(await svc.list_packages("carol")) == ["d1", "d11"]


async def test_foreign_group_is_rejected(test_db: Any) -> None:
    svc = PackageService(test_db)
    group = await svc.create_group("carol", "Carol's trip")

    with pytest.raises(AuthorizationError):
        await svc.add_to_package("bob", "d1", group.id)
    with pytest.raises(NotFoundError):
        await svc.add_to_package("bob", "d1", "grp_missing")
    assert await svc.list_packages("bob") == []


async def test_delete_group_removes_its_memberships(test_db: Any) -> None:
    svc = PackageService(test_db)
    keep = await svc.create_group("bob", "Keep")
    drop = await svc.create_group("bob", "Drop")
    await svc.add_to_package("bob", "d1", keep.id)
    await svc.add_to_package("bob", "d2", drop.id)
    await svc.add_to_package("bob", "d11", drop.id)

    with pytest.raises(AuthorizationError):
        await svc.delete_group("carol", drop.id)

    removed = await svc.delete_group("bob", drop.id)

    assert removed == 2
    assert await svc.list_packages("bob") == ["d1"]
    assert [g.id for g in await svc.list_groups("bob")] == [keep.id]


async def test_session_tracks_current_group(test_db: Any) -> None:
    svc = PackageService(test_db)
    session = PackageSession(svc, "bob")

    membership, _ = await session.add_to_package("d1")
    default_group = session.current_group
    assert default_group is not None
    assert membership.package_group_id == default_group.id

    honeymoon = await session.create_group("Honeymoon")
    assert session.current_group == honeymoon
    membership, _ = await session.add_to_package("d2", label="Beach week")
    assert membership.package_group_id == honeymoon.id
    assert membership.package_name == "Beach week"

    session.set_current_group(default_group)
    membership, _ = await session.add_to_package("d11")
    assert membership.package_group_id == default_group.id

    other = await svc.create_group("carol", "Not yours")
    with pytest.raises(AuthorizationError):
        session.set_current_group(other)
    assert session.current_group == default_group


async def test_delete_group_waits_for_pending_package_writes(test_db: Any) -> None:
    svc = PackageService(test_db)
    group = await svc.create_group("bob", "Weekend")

    async with user_lock("package", "bob"):
        pending = asyncio.ensure_future(svc.delete_group("bob", group.id))
        await asyncio.sleep(0.01)
        assert not pending.done()
        assert await svc.groups.get_by_id(group.id) is not None

    assert await pending == 0
    assert await svc.groups.get_by_id(group.id) is None


async def test_add_into_deleted_group_is_rejected(test_db: Any) -> None:
    svc = PackageService(test_db)
    group = await svc.create_group("bob", "Weekend")
    await svc.delete_group("bob", group.id)

    with pytest.raises(NotFoundError):
        await svc.add_to_package("bob", "d1", group.id)
    assert await svc.list_packages("bob") == []
