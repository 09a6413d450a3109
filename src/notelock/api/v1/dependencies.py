# src/notelock/api/v1/dependencies.py
"""Shared dependencies for API endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import Depends, Request

from notelock.core.settings import Settings
from notelock.services.admission import AdmissionController
from notelock.services.notes import NoteService

IPV4_MAPPED_PREFIX = "::ffff:"

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """Return the settings the running app was built with."""
    return request.app.state.settings


def get_note_service(request: Request) -> NoteService:
    """Return the app's note service."""
    return request.app.state.note_service


def get_admission(request: Request) -> AdmissionController:
    """Return the app's admission controller."""
    return request.app.state.admission


SettingsDep = Annotated[Settings, Depends(get_settings)]
NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]
AdmissionDep = Annotated[AdmissionController, Depends(get_admission)]


def extract_client_key(request: Request, trust_forwarded_for: bool = False) -> str:
    """Derive the rate-limiting key for the caller.

    Uses the first ``X-Forwarded-For`` hop when the deployment sits behind
    a trusted proxy, otherwise the socket peer address.
    """
    host = ""
    if trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for", "")
        host = forwarded.split(",")[0].strip()
    if not host and request.client is not None:
        host = request.client.host
    if host.lower().startswith(IPV4_MAPPED_PREFIX):
        host = host[len(IPV4_MAPPED_PREFIX):]
    return host or "unknown"


def get_client_key(request: Request, settings: SettingsDep) -> str:
    return extract_client_key(request, settings.trust_forwarded_for)


ClientKeyDep = Annotated[str, Depends(get_client_key)]


async def _admit(admission: AdmissionController, client_key: str, *, write: bool) -> None:
    delay = admission.admit(client_key, write=write)
    if delay > 0:
        logger.info("Slowing down %s by %.2fs", client_key, delay)
        await asyncio.sleep(delay)


async def admit_read(admission: AdmissionDep, client_key: ClientKeyDep) -> None:
    """Apply the global limiter and slowdown to a request."""
    await _admit(admission, client_key, write=False)


async def admit_write(admission: AdmissionDep, client_key: ClientKeyDep) -> None:
    """Apply the global and write limiters and the slowdown to a write request."""
    await _admit(admission, client_key, write=True)
