# routers/incidents.py

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from core.history_formatter import format_entries
from core.utils import sanitize
from dependencies.auth import CurrentUser, get_current_user
from dependencies.services import get_incident_service
from models.common import MutationResult
from models.history import HistoryEntryRead
from models.incident import IncidentCreate, IncidentRead, IncidentStats, IncidentUpdate
from services.incident_service import IncidentService


router = APIRouter(
    prefix="/incidents",
    tags=["Incidents"],
)


# ============================================================
# LIST INCIDENTS
# ============================================================
@router.get(
    "",
    response_model=List[IncidentRead],
    summary="List incidents",
    description="""
    Incidents in the caller's hotels, newest first.

    - `hotel`: a hotel id, or `all` (default) for every accessible hotel
    - `status`: a status id, or `all`
    - `date_from`: keep incidents dated on or after this moment
    """,
)
async def list_incidents(
    hotel: Optional[str] = Query("all"),
    status: Optional[str] = Query("all"),
    date_from: Optional[datetime] = None,
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of incidents to return (1-1000)"),
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.list(current_user.identity, hotel, status, date_from, limit)


# ============================================================
# STATS
# ============================================================
@router.get("/stats", response_model=IncidentStats, summary="Incident statistics")
async def incident_stats(
    hotel: Optional[str] = Query("all"),
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.stats(current_user.identity, hotel)


# ============================================================
# GET INCIDENT
# ============================================================
@router.get("/{incident_id}", response_model=IncidentRead, summary="Get incident")
async def get_incident(
    incident_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.get(current_user.identity, incident_id)


# ============================================================
# CREATE INCIDENT
# ============================================================
@router.post("", response_model=MutationResult, summary="Create incident")
async def create_incident(
    payload: IncidentCreate,
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.create(current_user.identity, sanitize(payload.to_document()))


# ============================================================
# UPDATE INCIDENT (partial)
# ============================================================
@router.patch("/{incident_id}", response_model=MutationResult, summary="Update incident")
async def update_incident(
    incident_id: str,
    payload: IncidentUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.update(current_user.identity, incident_id, sanitize(payload.to_document(partial=True)))


# ============================================================
# DELETE INCIDENT
# ============================================================
@router.delete("/{incident_id}", response_model=MutationResult, summary="Delete incident")
async def delete_incident(
    incident_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    return await service.delete(current_user.identity, incident_id)


# ============================================================
# HISTORY
# ============================================================
@router.get("/{incident_id}/history", response_model=List[HistoryEntryRead], summary="Incident change log")
async def incident_history(
    incident_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    service: IncidentService = Depends(get_incident_service),
):
    entries = await service.history_for(current_user.identity, incident_id)
    return format_entries(entries)
