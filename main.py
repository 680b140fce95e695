import os
import sys
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# Ensure local imports resolve
sys.path.append(os.path.dirname(__file__))

# Core
from core.config import settings
from core.config_validator import validate_config_on_startup
from core.errors import HotelOpsError, NotFound, StorageUnavailable
from core.logging_config import logger
from core.supabase_client import reset_supabase_client

# Routers
from routers import api_router


# -------------------------------------------------
# Create the Application
# -------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        description="Hotel operations back office: incidents, technical interventions and lost items",
    )

    # -------------------------------------------------
    # CORS
    # -------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------
    # Startup / shutdown
    # -------------------------------------------------
    @app.on_event("startup")
    async def on_startup():
        logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
        validate_config_on_startup(strict=settings.ENV == "production")

    @app.on_event("shutdown")
    async def on_shutdown():
        reset_supabase_client()

    # -------------------------------------------------
    # Error handling
    # -------------------------------------------------
    @app.exception_handler(HotelOpsError)
    async def handle_domain_error(request: Request, exc: HotelOpsError):
        if isinstance(exc, StorageUnavailable):
            logger.error(f"Storage unavailable at {request.url}: {exc.message}")
        elif exc.status_code in (401, 403):
            logger.warning(f"HTTP {exc.status_code} at {request.url}: {exc.message}")
        # Internal details stay in the logs
        detail = exc.message if isinstance(exc, NotFound) else exc.public_message
        return JSONResponse(status_code=exc.status_code, content={"detail": detail})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (401, 403, 500):
            logger.warning(f"HTTP {exc.status_code} at {request.url}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(request: Request, exc: Exception):
        logger.error("Unhandled error at %s", request.url, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    # -------------------------------------------------
    # Register Routers
    # -------------------------------------------------
    app.include_router(api_router)

    return app


# Create the global FastAPI instance
app = create_app()
