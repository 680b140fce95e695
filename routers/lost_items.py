# routers/lost_items.py

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.history_formatter import format_entries
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user
from dependencies.services import get_lost_item_service
from models.common import MutationResult
from models.history import HistoryEntryRead
from models.lost_item import (
    LostItemCreate,
    LostItemRead,
    LostItemReturn,
    LostItemStats,
    LostItemUpdate,
)
from services.lost_item_service import LostItemService


router = APIRouter(
    prefix="/lost-items",
    tags=["Lost Items"],
)


# -----------------------------------------------------
# LIST
# -----------------------------------------------------
@router.get("", response_model=List[LostItemRead], summary="List lost items")
async def list_lost_items(
    hotel: Optional[str] = Query("all"),
    status: Optional[str] = Query("all"),
    date_from: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.list(current_user.identity, hotel, status, date_from, limit)


# -----------------------------------------------------
# STATS
# -----------------------------------------------------
@router.get("/stats", response_model=LostItemStats, summary="Lost item statistics")
async def lost_item_stats(
    hotel: Optional[str] = Query("all"),
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.stats(current_user.identity, hotel)


# -----------------------------------------------------
# GET
# -----------------------------------------------------
@router.get("/{item_id}", response_model=LostItemRead, summary="Get lost item")
async def get_lost_item(
    item_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.get(current_user.identity, item_id)


# -----------------------------------------------------
# CREATE
# -----------------------------------------------------
@router.post("", response_model=MutationResult, summary="Register lost item")
async def create_lost_item(
    payload: LostItemCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.create(current_user.identity, sanitize(payload.to_document()))


# -----------------------------------------------------
# UPDATE (partial)
# -----------------------------------------------------
@router.patch("/{item_id}", response_model=MutationResult, summary="Update lost item")
async def update_lost_item(
    item_id: str,
    payload: LostItemUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.update(current_user.identity, item_id, sanitize(payload.to_document(partial=True)))


# -----------------------------------------------------
# MARK AS RETURNED
# -----------------------------------------------------
@router.post("/{item_id}/return", response_model=MutationResult, summary="Mark lost item as returned")
async def return_lost_item(
    item_id: str,
    payload: LostItemReturn,
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.mark_returned(
        current_user.identity, item_id, payload.returned_by_id, payload.returned_notes
    )


# -----------------------------------------------------
# DELETE
# -----------------------------------------------------
@router.delete("/{item_id}", response_model=MutationResult, summary="Delete lost item")
async def delete_lost_item(
    item_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return await service.delete(current_user.identity, item_id)


# -----------------------------------------------------
# HISTORY
# -----------------------------------------------------
@router.get("/{item_id}/history", response_model=List[HistoryEntryRead], summary="Lost item change log")
async def lost_item_history(
    item_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: LostItemService = Depends(get_lost_item_service),
):
    return format_entries(await service.history_for(current_user.identity, item_id))
