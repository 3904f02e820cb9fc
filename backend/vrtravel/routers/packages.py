from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from vrtravel.auth import get_current_user
from vrtravel.db import get_db
from vrtravel.schemas import (
    MessageOut,
    PackageAddIn,
    PackageAddOut,
    PackageGroupIn,
    PackageGroupOut,
    PackageMembershipOut,
)
from vrtravel.services.package_service import PackageService

router = APIRouter(prefix="/api/packages", tags=["packages"])


@router.get("", response_model=List[PackageMembershipOut])
async def list_my_packages(group_id: str | None = None, db=Depends(get_db), user=Depends(get_current_user)):
    return await PackageService(db).list_memberships(user["id"], group_id=group_id)


@router.get("/destination-ids", response_model=List[str])
async def list_package_destination_ids(db=Depends(get_db), user=Depends(get_current_user)):
    return await PackageService(db).list_packages(user["id"])


@router.get("/contains/{destination_id}")
async def is_in_package(destination_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    return {"destination_id": destination_id, "in_package": await PackageService(db).is_in_package(user["id"], destination_id)}


@router.post("", response_model=PackageAddOut)
async def add_to_package(payload: PackageAddIn, db=Depends(get_db), user=Depends(get_current_user)):
    membership, created = await PackageService(db).add_to_package(
        user["id"],
        payload.destination_id,
        payload.package_group_id,
        payload.package_name,
    )
    message = "Added to your travel package" if created else "Destination already in package"
    return PackageAddOut(membership=membership, created=created, message=message)


@router.get("/groups", response_model=List[PackageGroupOut])
async def list_groups(db=Depends(get_db), user=Depends(get_current_user)):
    return await PackageService(db).list_groups(user["id"])


@router.post("/groups", response_model=PackageGroupOut)
async def create_group(payload: PackageGroupIn, db=Depends(get_db), user=Depends(get_current_user)):
    return await PackageService(db).create_group(user["id"], payload.name)


@router.delete("/groups/{group_id}", response_model=MessageOut)
async def delete_group(group_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    removed = await PackageService(db).delete_group(user["id"], group_id)
    return MessageOut(message=f"Package group deleted ({removed} destinations removed)")


@router.delete("/destination/{destination_id}", response_model=MessageOut)
async def remove_destination(destination_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    await PackageService(db).remove_from_package(user["id"], destination_id)
    return MessageOut(message="Destination removed from package")


@router.delete("/{package_id}", response_model=MessageOut)
async def remove_package(package_id: str, db=Depends(get_db), user=Depends(get_current_user)):
    await PackageService(db).remove_membership(user["id"], package_id)
    return MessageOut(message="Destination removed from package")
