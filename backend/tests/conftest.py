"""Shared test configuration and fixtures for backend tests.

Key principles:
- All HTTP calls go through the local ASGI app (httpx.AsyncClient + ASGITransport).
- Each test gets its own in-memory Mongo database (mongomock-motor).
- AnyIO is the single async runner via its pytest plugin (@pytest.mark.anyio).
- Session tokens are minted with the identity provider's shared secret,
  the same way the provider signs them in production.
"""

from typing import Any, AsyncGenerator, Callable, Dict, Generator, Optional

import sys
import uuid
from pathlib import Path

import httpx
import jwt
import pytest
from httpx import ASGITransport
from mongomock_motor import AsyncMongoMockClient

# Ensure backend root is on sys.path so that `server` module is importable
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from server import app  # noqa: E402
from vrtravel.config import IDENTITY_JWT_ALGORITHM, identity_jwt_secret  # noqa: E402
from vrtravel.db import get_db  # noqa: E402
from vrtravel.seed import seed_destinations  # noqa: E402
from vrtravel.services.admin_service import AdminService  # noqa: E402

SUPER_ADMIN_EMAIL = "root@vrtravel.test"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Force pytest-anyio to use asyncio event loop."""

    return "asyncio"


@pytest.fixture(autouse=True)
def identity_env(monkeypatch) -> None:
    monkeypatch.setenv("IDENTITY_JWT_SECRET", "test_identity_secret")
    monkeypatch.delenv("IDENTITY_JWT_AUDIENCE", raising=False)
    monkeypatch.setenv("SUPER_ADMIN_EMAIL", SUPER_ADMIN_EMAIL)
    monkeypatch.delenv("BOOKING_INITIAL_STATUS", raising=False)


@pytest.fixture(scope="function")
def test_db() -> Any:
    """Function-scoped isolated database for each test."""

    client = AsyncMongoMockClient()
    return client[f"vrtravel_test_{uuid.uuid4().hex}"]


@pytest.fixture(scope="function")
async def seeded_db(test_db: Any, anyio_backend: str) -> Any:
    """test_db with the protected admin entry and the starter destinations."""

    await AdminService(test_db).ensure_super_admin(SUPER_ADMIN_EMAIL)
    await seed_destinations(test_db)
    return test_db


@pytest.fixture(scope="function")
def app_with_overrides(seeded_db: Any) -> Generator[Any, None, None]:
    """FastAPI app instance whose get_db dependency points to the test database."""

    async def override_get_db():
        return seeded_db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def async_client(app_with_overrides: Any, anyio_backend: str) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = ASGITransport(app=app_with_overrides)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=30.0) as client:
        yield client


def make_token(user_id: str, email: str, name: Optional[str] = None, **extra: Any) -> str:
    payload: Dict[str, Any] = {"sub": user_id, "email": email, "role": "authenticated", **extra}
    if name:
        payload["user_metadata"] = {"name": name}
    return jwt.encode(payload, identity_jwt_secret(), algorithm=IDENTITY_JWT_ALGORITHM)


@pytest.fixture
def auth_headers() -> Callable[..., Dict[str, str]]:
    """Build Authorization headers for an identity-provider user."""

    def _headers(user_id: str, email: Optional[str] = None, name: Optional[str] = None) -> Dict[str, str]:
        token = make_token(user_id, email or f"{user_id}@example.com", name)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def admin_headers(auth_headers) -> Dict[str, str]:
    return auth_headers("admin-root", SUPER_ADMIN_EMAIL, "Root Admin")
