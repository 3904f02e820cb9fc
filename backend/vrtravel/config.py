"""Application configuration.

Everything is read from the environment (``backend/.env`` is loaded by the
server when present). Flags default to the behaviour the web client expects
so that an empty environment still yields a working development server.
"""

from __future__ import annotations

import os


def _env_flag(name: str, default: bool = True) -> bool:
    """Read a boolean-like flag from environment.

    Accepted falsy values: "0", "false", "off", "no" (case-insensitive).
    Anything else (or unset) falls back to `default`.
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"0", "false", "off", "no"}:
        return False
    if value in {"1", "true", "on", "yes"}:
        return True
    return default


# Application constants
APP_NAME = "VR Travel API"
APP_VERSION = "1.0.0"
CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").split(",")

# Identity provider (tokens are verified here, never issued)
IDENTITY_JWT_ALGORITHM = "HS256"


def identity_jwt_secret() -> str:
    return os.environ.get("IDENTITY_JWT_SECRET", "dev_identity_secret_change_me")


def identity_jwt_audience() -> str | None:
    return os.environ.get("IDENTITY_JWT_AUDIENCE") or None


# Admin allow-list bootstrap entry; protected from revocation
def super_admin_email() -> str:
    return os.environ.get("SUPER_ADMIN_EMAIL", "admin@vrtravel.test").strip().lower()


# Lifecycle defaults
DEFAULT_GROUP_NAME: str = os.environ.get("DEFAULT_GROUP_NAME", "My Travel Package")
DEFAULT_PACKAGE_NAME: str = "My Travel Package"


def booking_initial_status() -> str:
    """Status given to self-service bookings on creation.

    The consumer flow books straight into ``confirmed``; ``pending`` is the
    only other accepted value.
    """

    value = os.environ.get("BOOKING_INITIAL_STATUS", "confirmed").strip().lower()
    if value not in {"pending", "confirmed"}:
        return "confirmed"
    return value


ENABLE_DESTINATION_SEED: bool = _env_flag("ENABLE_DESTINATION_SEED", default=True)


# Mongo connection
def mongo_url() -> str:
    url = os.environ.get("MONGO_URL", "").strip()
    if not url:
        raise RuntimeError("MONGO_URL is not set")
    return url


def mongo_db_name() -> str:
    return os.environ.get("DB_NAME", "vr_travel")


MONGO_SERVER_SELECTION_TIMEOUT_MS: int = int(os.environ.get("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000"))
