from __future__ import annotations

from fastapi import APIRouter, Depends

from vrtravel.auth import get_current_user
from vrtravel.db import get_db
from vrtravel.errors import NotFoundError
from vrtravel.repositories.base_repository import store_errors
from vrtravel.repositories.user_repository import UserRepository
from vrtravel.schemas import ProfileUpdateIn, UserOut

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/me", response_model=UserOut)
async def me(user=Depends(get_current_user)):
    return user


@router.put("/me", response_model=UserOut)
async def update_profile(payload: ProfileUpdateIn, db=Depends(get_db), user=Depends(get_current_user)):
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not updates:
        return user

    with store_errors("update_profile", user_id=user["id"]):
        updated = await UserRepository(db).update_profile(user["id"], updates)
    if updated is None:
        raise NotFoundError("user_not_found", "User not found", {"user_id": user["id"]})
    return updated.model_copy(update={"is_admin": user["is_admin"]})
