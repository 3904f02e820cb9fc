from __future__ import annotations

import pytest

SUPER_ADMIN_EMAIL = "root@vrtravel.test"

pytestmark = pytest.mark.anyio

BOOKING = {"date": "2025-06-01", "time": "9:00 AM - 11:00 AM", "address": "123 Main St"}


async def test_admin_routes_reject_regular_users(async_client, auth_headers) -> None:
    alice = auth_headers("alice")

    for path in ("/api/admin/stats", "/api/admin/bookings", "/api/admin/quotes", "/api/admin/admins"):
        resp = await async_client.get(path, headers=alice)
        assert resp.status_code == 403, path
        assert resp.json()["error"]["code"] == "forbidden"


async def test_admin_flag_comes_from_allowlist(async_client, auth_headers, admin_headers) -> None:
    me = await async_client.get("/api/users/me", headers=admin_headers)
    assert me.status_code == 200
    assert me.json()["is_admin"] is True
    assert me.json()["email"] == SUPER_ADMIN_EMAIL

    alice = await async_client.get("/api/users/me", headers=auth_headers("alice", name="Alice"))
    assert alice.json()["is_admin"] is False
    assert alice.json()["name"] == "Alice"


async def test_admin_updates_booking_status(async_client, auth_headers, admin_headers) -> None:
    alice = auth_headers("alice")
    booking = (await async_client.post("/api/bookings", json=BOOKING, headers=alice)).json()

    listed = await async_client.get("/api/admin/bookings", params={"status": "confirmed"}, headers=admin_headers)
    assert [b["id"] for b in listed.json()] == [booking["id"]]

    done = await async_client.put(
        f"/api/admin/bookings/{booking['id']}/status", json={"status": "completed"}, headers=admin_headers
    )
    assert done.status_code == 200
    assert done.json()["status"] == "completed"

    # completed frees the slot
    again = await async_client.post("/api/bookings", json={**BOOKING, "date": "2025-07-01"}, headers=alice)
    assert again.status_code == 200

    back = await async_client.put(
        f"/api/admin/bookings/{booking['id']}/status", json={"status": "confirmed"}, headers=admin_headers
    )
    assert back.status_code == 409
    assert back.json()["error"]["code"] == "invalid_state_transition"

    audit = await async_client.get("/api/admin/audit", params={"target_id": booking["id"]}, headers=admin_headers)
    assert [a["action"] for a in audit.json()] == ["BOOKING_STATUS_CHANGED"]


async def test_admin_updates_quote_status(async_client, auth_headers, admin_headers) -> None:
    bob = auth_headers("bob")
    await async_client.post("/api/packages", json={"destination_id": "d1"}, headers=bob)
    quote = (await async_client.post("/api/quotes", headers=bob)).json()

    resp = await async_client.put(
        f"/api/admin/quotes/{quote['id']}/status", json={"status": "processed"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "contacted"

    stats = (await async_client.get("/api/admin/stats", headers=admin_headers)).json()
    assert stats["total_quotes"] == 1
    assert stats["pending_quotes"] == 0
    assert stats["total_packages"] == 1


async def test_allowlist_management(async_client, auth_headers, admin_headers) -> None:
    granted = await async_client.post("/api/admin/admins", json={"email": "Ops@VRTravel.test"}, headers=admin_headers)
    assert granted.status_code == 200
    assert granted.json()["email"] == "ops@vrtravel.test"

    ops = auth_headers("ops", "ops@vrtravel.test")
    assert (await async_client.get("/api/admin/stats", headers=ops)).status_code == 200

    protected = await async_client.delete(f"/api/admin/admins/{SUPER_ADMIN_EMAIL}", headers=ops)
    assert protected.status_code == 403
    assert protected.json()["error"]["code"] == "protected_admin"

    revoked = await async_client.delete("/api/admin/admins/ops@vrtravel.test", headers=admin_headers)
    assert revoked.status_code == 200
    assert (await async_client.get("/api/admin/stats", headers=ops)).status_code == 403

    missing = await async_client.delete("/api/admin/admins/ops@vrtravel.test", headers=admin_headers)
    assert missing.status_code == 404


async def test_admin_manages_destinations(async_client, admin_headers) -> None:
    created = await async_client.post(
        "/api/admin/destinations",
        json={"name": "Hampi", "location": "Karnataka, India", "price": 3500, "duration": "2 Days"},
        headers=admin_headers,
    )
    assert created.status_code == 200
    destination_id = created.json()["id"]

    updated = await async_client.put(
        f"/api/admin/destinations/{destination_id}", json={"price": 3900}, headers=admin_headers
    )
    assert updated.json()["price"] == 3900
    assert updated.json()["name"] == "Hampi"

    deleted = await async_client.delete(f"/api/admin/destinations/{destination_id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert (await async_client.get(f"/api/destinations/{destination_id}")).status_code == 404
