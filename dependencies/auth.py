from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from core.logging_config import logger
from core.supabase_client import get_supabase_client


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model (authenticated identity)
# ============================================================
class CurrentUser(BaseModel):
    """
    Who is calling. Hotel scope and role are not carried on the token;
    they are resolved from the users collection on every request.
    """

    id: str
    email: str
    full_name: Optional[str] = None

    @property
    def identity(self) -> str:
        return self.email or self.id


# ============================================================
# AUTH DECODING (Supabase: validates JWT)
# ============================================================
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    token = credentials.credentials

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    client = await get_supabase_client()
    if not client:
        raise HTTPException(503, "Authentication service not configured")

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = await client.auth.get_user(token)
    except Exception as e:
        logger.info(f"Token rejected: {e}")
        raise unauthorized

    if not auth_resp or not auth_resp.user or not auth_resp.user.email:
        raise unauthorized

    auth_user = auth_resp.user
    metadata = auth_user.user_metadata or {}

    return CurrentUser(
        id=auth_user.id,
        email=auth_user.email.lower(),
        full_name=metadata.get("full_name"),
    )
