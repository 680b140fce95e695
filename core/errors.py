# core/errors.py

# ============================================================
# Domain errors
# ============================================================
class HotelOpsError(Exception):
    """Base class for errors raised by the access & audit core."""

    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class AccessDenied(HotelOpsError):
    """Raised on write paths only. Reads degrade to an empty result."""

    status_code = 403
    public_message = "Not authorized"


class NotFound(HotelOpsError):
    status_code = 404
    public_message = "Resource not found"


class StorageUnavailable(HotelOpsError):
    """Transient storage fault (network error, timeout). Reads are safe to retry."""

    status_code = 503
    public_message = "Storage temporarily unavailable, please try again"


class IndexRequired(StorageUnavailable):
    """The store refused a query because it needs an index that does not exist."""


class HistoryAppendFailed(HotelOpsError):
    """
    The mutation committed but its audit entry could not be written.
    Reported as a warning on the mutation result, never raised to clients.
    """

    def __init__(self, entity_id: str, cause: Exception = None):
        detail = extract_supabase_error(cause) if cause is not None else "unknown error"
        super().__init__(f"History append failed for {entity_id}: {detail}")
        self.entity_id = entity_id
        self.cause = cause


class MalformedHistoryRecord(HotelOpsError):
    """A stored history entry matches neither payload shape."""

    def __init__(self, entry_id: str = None, reason: str = "unrecognized payload"):
        super().__init__(f"Malformed history record {entry_id or '?'}: {reason}")
        self.entry_id = entry_id
        self.reason = reason


# ============================================================
# Supabase client error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Supabase Auth / GoTrue errors
    if hasattr(error, "message"):
        try:
            return str(error.message)
        except Exception:
            pass

    # Errors carrying args
    if hasattr(error, "args") and error.args:
        try:
            return str(error.args[0])
        except Exception:
            pass

    # Plain string fallback
    try:
        return str(error)
    except Exception:
        return "Unknown Supabase error"


def handle_supabase_error(error: Exception, operation: str = "Database operation") -> HotelOpsError:
    """
    Map a storage client exception to a domain error.
    Returns the error (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create incident")
    """
    from core.logging_config import logger

    if isinstance(error, HotelOpsError):
        return error

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    return StorageUnavailable(f"{operation} failed")

