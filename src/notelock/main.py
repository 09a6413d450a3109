# src/notelock/main.py
"""Main entry point for the Notelock application."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from notelock.api.v1 import legacy_router, notes_router, system_router
from notelock.api.v1.dependencies import admit_read
from notelock.core.errors import ExhaustedRetriesError, NoteValidationError, RateLimitedError
from notelock.core.logging import configure_logging
from notelock.core.settings import Settings, settings as default_settings
from notelock.schemas.note import RateLimitedResponse
from notelock.services.admission import AdmissionController
from notelock.services.note_store import EphemeralNoteStore
from notelock.services.notes import NoteService
from notelock.services.periodic import ExpirySweeper, PeriodicTask, StoreDumper

logger = logging.getLogger(__name__)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(NoteValidationError)
    async def _validation_error(request: Request, exc: NoteValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc)},
        )

    @app.exception_handler(RateLimitedError)
    async def _rate_limited(request: Request, exc: RateLimitedError) -> JSONResponse:
        body = RateLimitedResponse(
            policy=exc.policy,
            detail=exc.detail,
            retry_after=exc.retry_after,
        )
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=body.model_dump(),
            headers={"Retry-After": exc.retry_after_header},
        )

    @app.exception_handler(ExhaustedRetriesError)
    async def _exhausted(request: Request, exc: ExhaustedRetriesError) -> JSONResponse:
        logger.error("Identifier generation exhausted after %d attempts", exc.attempts)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Could not store note, please try again"},
        )


def _log_configuration(settings: Settings) -> None:
    if settings.api_only:
        logger.info("%s is starting in API Only mode...", settings.app_name)
    else:
        logger.info("%s is starting...", settings.app_name)
    if settings.expire_interval_seconds > 0:
        logger.info("Notes are set to expire after %d hours", settings.note_life_hours)
        logger.info(
            "Notes will be checked for expiration every %s minute(s)",
            settings.expire_interval_minutes,
        )
    else:
        logger.info("Notes will never expire")
    if settings.dump_interval_seconds > 0:
        logger.info("Store contents will print every %s minute(s)", settings.dump_interval_minutes)


def create_app(
    settings: Settings | None = None,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> FastAPI:
    """Build a Notelock app with its own store, limiters and background tasks."""
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="One-time retrieval of client-encrypted notes",
        version=settings.app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    store = EphemeralNoteStore(clock=clock)
    app.state.settings = settings
    app.state.store = store
    app.state.note_service = NoteService(
        store,
        max_note_bytes=settings.max_note_bytes,
        id_max_attempts=settings.id_max_attempts,
        id_backoff_seconds=settings.id_backoff_seconds,
    )
    app.state.admission = AdmissionController.from_settings(settings, clock=clock)
    app.state.sweeper = ExpirySweeper(
        store,
        ttl_seconds=settings.note_ttl_seconds,
        interval_seconds=settings.expire_interval_seconds,
    )
    app.state.tasks = [
        app.state.sweeper,
        StoreDumper(store, interval_seconds=settings.dump_interval_seconds),
        PeriodicTask(
            "limiter-janitor",
            settings.limiter_prune_interval_seconds,
            app.state.admission.prune,
        ),
    ]

    _register_exception_handlers(app)

    app.include_router(notes_router, prefix="/api/v1")
    app.include_router(system_router, prefix="/api/v1")
    app.include_router(legacy_router)

    @app.on_event("startup")
    async def on_startup() -> None:
        _log_configuration(settings)
        for task in app.state.tasks:
            await task.start()
        logger.info("%s started successfully", settings.app_name)

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        for task in app.state.tasks:
            await task.stop()
        dropped = store.clear()
        if dropped:
            logger.info("Discarded %d undelivered note(s) on shutdown", dropped)

    @app.get("/health", dependencies=[Depends(admit_read)])
    async def health_check() -> dict[str, str]:
        """Health check endpoint to verify the service is running."""
        return {"status": "ok"}

    @app.get("/", dependencies=[Depends(admit_read)])
    async def root() -> dict[str, str]:
        """Root endpoint with basic information about the API."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("notelock.main:app", host="0.0.0.0", port=8000, reload=default_settings.debug)
