"""FastAPI application entry point for the SmartRent API."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smartrent.app.config import Settings, get_settings
from smartrent.app.context import AppContext
from smartrent.domain.errors import InvalidInput, SmartRentError, StorageUnavailable
from smartrent.domain.schemas import HealthResponse
from smartrent.infra.database import init_db
from smartrent.services.credential_verifiers import IdentityProvider
from smartrent.services.lease_monitor import expire_leases

logger = logging.getLogger(__name__)


async def lease_expiry_loop(session_factory: async_sessionmaker[AsyncSession], interval_hours: float):
    """Expire overdue leases now, then once every ``interval_hours``."""
    while True:
        try:
            async with session_factory() as db:
                expired = await expire_leases(db)
                if expired:
                    logger.info("Lease monitor: expired %d leases", len(expired))
        except Exception as e:
            logger.error("Lease monitor error: %s", e)
        await asyncio.sleep(interval_hours * 3600)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize database and start the expiry sweep."""
    ctx: AppContext = app.state.context
    await init_db(ctx.engine)

    task = asyncio.create_task(
        lease_expiry_loop(ctx.session_factory, ctx.settings.lease_expiry_interval_hours)
    )
    yield
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task
    await ctx.engine.dispose()


# ---------------------------------------------------------------------------
# Error rendering: {"status": "error", "message": ..., "details"?: ...}
# ---------------------------------------------------------------------------


def _error_response(status_code: int, message: str, details=None) -> JSONResponse:
    body = {"status": "error", "message": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return JSONResponse(status_code=status_code, content=body)


def register_error_handlers(app: FastAPI, debug: bool) -> None:
    @app.exception_handler(SmartRentError)
    async def smartrent_error_handler(request: Request, exc: SmartRentError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
        return _error_response(exc.status_code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(InvalidInput.status_code, "Invalid request body", exc.errors())

    @app.exception_handler(SQLAlchemyError)
    async def storage_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(
            "Storage error on %s %s (params=%s)",
            request.method, request.url.path, dict(request.path_params),
        )
        return _error_response(
            StorageUnavailable.status_code,
            StorageUnavailable.default_message,
            str(exc) if debug else None,
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(500, "Something went wrong!", str(exc) if debug else None)


def create_app(
    settings: Settings | None = None,
    identity_provider: IdentityProvider | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(
        title="SmartRent API",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.context = AppContext.create(settings, identity_provider)

    # CORS middleware: allow all origins in debug mode for LAN/IP access
    cors_origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=("*" not in cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app, settings.debug)

    # -----------------------------------------------------------------------
    # Route includes
    # -----------------------------------------------------------------------
    from smartrent.app.routes.auth import router as auth_router
    from smartrent.app.routes.landlords import router as landlords_router
    from smartrent.app.routes.leases import router as leases_router
    from smartrent.app.routes.maintenance import router as maintenance_router
    from smartrent.app.routes.properties import router as properties_router

    app.include_router(auth_router)
    app.include_router(leases_router)
    app.include_router(properties_router)
    app.include_router(landlords_router)
    app.include_router(maintenance_router)

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check():
        """Return service health status."""
        return {"status": "ok", "service": "smartrent"}

    return app


settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)

app = create_app(settings)


def run() -> None:
    """Run the application with uvicorn (used by project.scripts entry point)."""
    uvicorn.run(
        "smartrent.app.main:app",
        host="0.0.0.0",
        port=5000,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
