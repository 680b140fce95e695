# routers/me.py

from fastapi import APIRouter, Depends

from core.permissions import PermissionResolver
from dependencies.auth import CurrentUser, get_current_user
from dependencies.services import get_resolver
from models.user import AccessibleHotelsRead


router = APIRouter(
    prefix="/me",
    tags=["Me"],
)


# -----------------------------------------------------
# GET /me/hotels
# The hotels the caller can see ("all" for system admins)
# -----------------------------------------------------
@router.get("/hotels", response_model=AccessibleHotelsRead, summary="Hotels accessible to the caller")
async def my_hotels(
    current_user: CurrentUser = Depends(get_current_user),
    resolver: PermissionResolver = Depends(get_resolver),
):
    scope = await resolver.accessible_hotels(current_user.identity)
    return AccessibleHotelsRead(all_hotels=scope.all_hotels, hotels=list(scope.hotels))
