# core/config_validator.py

from typing import List

import pytz

from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    warnings = []

    try:
        pytz.timezone(settings.DISPLAY_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        warnings.append(f"DISPLAY_TIMEZONE '{settings.DISPLAY_TIMEZONE}' is unknown, history dates fall back to UTC")

    if settings.PERMISSION_CACHE_TTL_SECONDS == 0:
        warnings.append("PERMISSION_CACHE_TTL_SECONDS is 0, every request re-reads the users collection")

    if settings.ENV == "production" and not settings.BACKEND_CORS_ORIGINS:
        warnings.append("BACKEND_CORS_ORIGINS is empty, browser clients will be rejected")

    if settings.UNSCOPED_HOTEL_POLICY == "fallback":
        logger.info("Out-of-scope hotel filters fall back to the first accessible hotel")

    return warnings


def validate_config_on_startup(strict: bool = False):
    """
    Validate configuration on application startup.
    With strict=True, missing critical config raises RuntimeError;
    otherwise it is only logged so local runs and tests can boot.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        if strict:
            raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Configuration warning: {warning}")

    if not missing_required:
        logger.info("Configuration validation passed")
