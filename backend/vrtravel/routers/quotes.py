from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from vrtravel.auth import get_current_user
from vrtravel.db import get_db
from vrtravel.schemas import QuoteOut
from vrtravel.services.quote_service import QuoteService

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


@router.get("", response_model=List[QuoteOut])
async def list_my_quotes(db=Depends(get_db), user=Depends(get_current_user)):
    return await QuoteService(db).list_quotes(user["id"])


@router.post("", response_model=QuoteOut)
async def request_quote(db=Depends(get_db), user=Depends(get_current_user)):
    # The package list is read from the store, not trusted from the client.
    return await QuoteService(db).request_quote(user["id"])
