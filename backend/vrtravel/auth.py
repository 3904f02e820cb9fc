from __future__ import annotations

from typing import Any, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vrtravel.config import IDENTITY_JWT_ALGORITHM, identity_jwt_audience, identity_jwt_secret
from vrtravel.db import get_db
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.user_repository import AdminAllowlistRepository, UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict[str, Any]:
    """Verify a session token issued by the identity provider."""

    audience = identity_jwt_audience()
    try:
        return jwt.decode(
            token,
            identity_jwt_secret(),
            algorithms=[IDENTITY_JWT_ALGORITHM],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Session expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid session token")


def _display_name(payload: dict[str, Any]) -> Optional[str]:
    metadata = payload.get("user_metadata") or {}
    return metadata.get("name") or metadata.get("full_name") or payload.get("name")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db=Depends(get_db),
) -> dict[str, Any]:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Login required")

    payload = decode_token(credentials.credentials)
    user_id = payload.get("sub")
    email = payload.get("email")
    if not user_id or not email:
        raise HTTPException(status_code=401, detail="Session token is missing identity claims")

    with store_errors("load_current_user", user_id=user_id):
        user = await UserRepository(db).upsert_identity(str(user_id), str(email), _display_name(payload))
        is_admin = await AdminAllowlistRepository(db).get(user.email) is not None

    out = user.model_dump()
    out["is_admin"] = is_admin
    return out


async def require_admin(user: dict[str, Any] = Depends(get_current_user)) -> dict[str, Any]:
    if not user.get("is_admin"):
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
