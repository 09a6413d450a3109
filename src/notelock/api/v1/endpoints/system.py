"""System and transparency endpoints for the Notelock API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..dependencies import SettingsDep, admit_read

router = APIRouter(prefix="/system", tags=["system"], dependencies=[Depends(admit_read)])


@router.get("/config")
async def get_public_config(settings: SettingsDep) -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Lets clients show how long a note survives and how hard they may
    call the API before being throttled.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_only": settings.api_only,
        },
        "expiry": {
            "enabled": settings.expire_interval_seconds > 0,
            "note_life_hours": settings.note_life_hours,
            "check_interval_minutes": settings.expire_interval_minutes,
        },
        "limits": {
            "global": {
                "window_seconds": settings.global_rate_window_seconds,
                "max_requests": settings.global_rate_max,
            },
            "write": {
                "window_seconds": settings.write_rate_window_seconds,
                "max_requests": settings.write_rate_max,
            },
            "slowdown": {
                "window_seconds": settings.slowdown_window_seconds,
                "threshold": settings.slowdown_threshold,
                "delay_seconds": settings.slowdown_delay_seconds,
                "max_delay_seconds": settings.slowdown_max_delay_seconds,
            },
        },
        "max_note_bytes": settings.max_note_bytes,
    }


@router.get("/stats")
async def get_stats(request: Request) -> dict[str, int]:
    """Return the number of notes currently awaiting retrieval."""
    return {"live_notes": len(request.app.state.store)}
