from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends

from vrtravel.auth import get_current_user
from vrtravel.db import get_db
from vrtravel.schemas import DestinationOut, ReviewIn, ReviewOut, ReviewSummaryOut
from vrtravel.services.destination_service import DestinationService, ReviewService

router = APIRouter(prefix="/api/destinations", tags=["destinations"])


@router.get("", response_model=List[DestinationOut])
async def list_destinations(q: Optional[str] = None, db=Depends(get_db)):
    return await DestinationService(db).list_destinations(q=q)


@router.get("/{destination_id}", response_model=DestinationOut)
async def get_destination(destination_id: str, db=Depends(get_db)):
    return await DestinationService(db).get_destination(destination_id)


@router.get("/{destination_id}/reviews", response_model=ReviewSummaryOut)
async def list_reviews(
    destination_id: str,
    experience_type: Optional[Literal["vr", "real_life"]] = None,
    db=Depends(get_db),
):
    return await ReviewService(db).list_reviews(destination_id, experience_type=experience_type)


@router.post("/{destination_id}/reviews", response_model=ReviewOut)
async def add_review(destination_id: str, payload: ReviewIn, db=Depends(get_db), user=Depends(get_current_user)):
    await DestinationService(db).get_destination(destination_id)
    return await ReviewService(db).add_review(
        user["id"],
        destination_id,
        rating=payload.rating,
        comment=payload.comment,
        experience_type=payload.experience_type,
    )
