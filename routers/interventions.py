# routers/interventions.py

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.history_formatter import format_entries
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user
from dependencies.services import get_intervention_service
from models.common import MutationResult
from models.history import HistoryEntryRead
from models.intervention import (
    InterventionCreate,
    InterventionRead,
    InterventionStats,
    InterventionUpdate,
)
from services.intervention_service import InterventionService


router = APIRouter(
    prefix="/interventions",
    tags=["Technical Interventions"],
)


# -----------------------------------------------------
# LIST
# -----------------------------------------------------
@router.get("", response_model=List[InterventionRead], summary="List technical interventions")
async def list_interventions(
    hotel: Optional[str] = Query("all"),
    status: Optional[str] = Query("all"),
    date_from: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return await service.list(current_user.identity, hotel, status, date_from, limit)


# -----------------------------------------------------
# STATS
# -----------------------------------------------------
@router.get("/stats", response_model=InterventionStats, summary="Intervention statistics")
async def intervention_stats(
    hotel: Optional[str] = Query("all"),
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return await service.stats(current_user.identity, hotel)


# -----------------------------------------------------
# GET
# -----------------------------------------------------
@router.get("/{intervention_id}", response_model=InterventionRead, summary="Get technical intervention")
async def get_intervention(
    intervention_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return await service.get(current_user.identity, intervention_id)


# -----------------------------------------------------
# CREATE
# -----------------------------------------------------
@router.post("", response_model=MutationResult, summary="Create technical intervention")
async def create_intervention(
    payload: InterventionCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return await service.create(current_user.identity, sanitize(payload.to_document()))


# -----------------------------------------------------
# UPDATE (partial)
# -----------------------------------------------------
@router.patch("/{intervention_id}", response_model=MutationResult, summary="Update technical intervention")
async def update_intervention(
    intervention_id: str,
    payload: InterventionUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return await service.update(
        current_user.identity, intervention_id, sanitize(payload.to_document(partial=True))
    )


# -----------------------------------------------------
# DELETE
# -----------------------------------------------------
@router.delete("/{intervention_id}", response_model=MutationResult, summary="Delete technical intervention")
async def delete_intervention(
    intervention_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return await service.delete(current_user.identity, intervention_id)


# -----------------------------------------------------
# HISTORY
# -----------------------------------------------------
@router.get("/{intervention_id}/history", response_model=List[HistoryEntryRead], summary="Intervention change log")
async def intervention_history(
    intervention_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: InterventionService = Depends(get_intervention_service),
):
    return format_entries(await service.history_for(current_user.identity, intervention_id))
