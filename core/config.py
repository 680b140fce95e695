from typing import List, Literal, Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Hotel Operations API"
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (document storage & auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = None
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = None

    # Every storage call is bounded by this timeout
    STORAGE_TIMEOUT_SECONDS: float = Field(10.0, gt=0)

    # -------------------------------------------------
    # Permission resolution
    # -------------------------------------------------
    PERMISSION_CACHE_TTL_SECONDS: int = Field(300, ge=0, description="How long a resolved user stays cached (default: 5 minutes)")
    PERMISSION_CACHE_MAX_ENTRIES: int = Field(1024, ge=1)

    # What happens when a standard user asks for a hotel outside their scope:
    #   fallback → silently use their first accessible hotel
    #   deny     → return nothing
    UNSCOPED_HOTEL_POLICY: Literal["fallback", "deny"] = "fallback"

    # -------------------------------------------------
    # Query planning
    # -------------------------------------------------
    MAX_IN_PREDICATE_VALUES: int = Field(10, ge=1, description="Maximum values the store accepts in one membership predicate")
    DEFAULT_QUERY_LIMIT: int = Field(100, ge=1)
    STATS_QUERY_LIMIT: int = Field(1000, ge=1)

    # -------------------------------------------------
    # History
    # -------------------------------------------------
    HISTORY_CANDIDATE_LIMIT: int = Field(500, ge=1, description="Rows scanned when the history index is unavailable")
    # Also scan recent entries for records that only reference the entity inside "changes"
    HISTORY_SCAN_UNINDEXED: bool = False
    DISPLAY_TIMEZONE: str = "Europe/Paris"

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()
