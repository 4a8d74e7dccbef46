"""Main FastAPI application"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flash_registry.core.config import settings
from flash_registry.services.registry import DeviceRegistry
from flash_registry.services.presence import PresenceTracker
from flash_registry.api import devices, admin
from flash_registry.api.schemas import HealthResponse
from flash_registry import __version__

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting Sense360 device registry...")

    if getattr(app.state, "registry", None) is None:
        app.state.registry = DeviceRegistry(public_id_length=settings.PUBLIC_ID_LENGTH)
    if getattr(app.state, "tracker", None) is None:
        app.state.tracker = PresenceTracker(app.state.registry)

    logger.info("Server startup complete (in-memory registry, state is not persisted)")

    yield

    # Shutdown
    logger.info(
        f"Shutting down with {app.state.registry.count()} known devices, "
        "registry state will be discarded"
    )


def register_error_handlers(app: FastAPI):
    """Render errors in the {success, error} envelope used by the frontend"""

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        if request.url.path.endswith("/register"):
            message = "Invalid device data"
        else:
            message = "Invalid request"
        logger.debug(f"Validation failed on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "error": message,
                "details": jsonable_encoder(exc.errors()),
            },
        )


def create_app(
    registry: DeviceRegistry = None, tracker: PresenceTracker = None
) -> FastAPI:
    """
    Create and configure the FastAPI application

    Args:
        registry: Registry to serve (a fresh one is built on startup if omitted)
        tracker: Presence tracker bound to the registry (built if omitted)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=__version__,
        description="Private MAC registry behind the Sense360 web flasher",
        lifespan=lifespan,
    )
    app.state.registry = registry
    app.state.tracker = tracker

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(devices.router, prefix=settings.API_PREFIX)
    app.include_router(admin.router, prefix=settings.API_PREFIX)

    register_error_handlers(app)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": settings.PROJECT_NAME,
            "version": __version__,
            "status": "running",
        }

    @app.get(f"{settings.API_PREFIX}/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint"""
        registry = request.app.state.registry
        return HealthResponse(
            status="healthy",
            total_devices=registry.count(),
            active_devices=registry.count_active(),
            version=__version__,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "flash_registry.main:app",
        host=settings.SERVER_HOST,
        port=settings.SERVER_PORT,
        reload=settings.DEBUG,
    )
