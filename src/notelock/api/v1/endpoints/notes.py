# src/notelock/api/v1/endpoints/notes.py
"""One-time note endpoints for the Notelock API."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from notelock.schemas.note import LegacyNoteCreated, NoteCreate, NoteCreated, NoteResponse

from ..dependencies import (
    ClientKeyDep,
    NoteServiceDep,
    SettingsDep,
    admit_read,
    admit_write,
)

NOT_FOUND_DETAIL = "Note not found"

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notes", tags=["notes"])
legacy_router = APIRouter(tags=["notes"])


def build_note_url(request: Request, base_url: str | None, note_id: str) -> str:
    """Return the retrieval URL; the client appends its key after the '#'."""
    base = (base_url or str(request.base_url)).rstrip("/")
    return f"{base}/?n={note_id}#"


async def _submit(
    payload: NoteCreate,
    request: Request,
    note_service: NoteServiceDep,
    settings: SettingsDep,
    client_key: str,
) -> tuple[str, str]:
    note_id = await asyncio.to_thread(note_service.submit, payload.cipher)
    logger.info("%s posted %s", client_key, note_id)
    return note_id, build_note_url(request, settings.public_base_url, note_id)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(admit_write)],
)
async def create_note(
    payload: NoteCreate,
    request: Request,
    note_service: NoteServiceDep,
    settings: SettingsDep,
    client_key: ClientKeyDep,
) -> NoteCreated:
    """Store an encrypted note and return its one-time identifier."""
    note_id, url = await _submit(payload, request, note_service, settings, client_key)
    return NoteCreated(id=note_id, url=url)


@legacy_router.post("/encrypt", dependencies=[Depends(admit_write)])
async def encrypt(
    payload: NoteCreate,
    request: Request,
    note_service: NoteServiceDep,
    settings: SettingsDep,
    client_key: ClientKeyDep,
) -> LegacyNoteCreated:
    """Store an encrypted note, answering with the retrieval URL under ``id``."""
    _, url = await _submit(payload, request, note_service, settings, client_key)
    return LegacyNoteCreated(id=url)


@router.get("/{note_id}", dependencies=[Depends(admit_read)])
async def read_note(
    note_id: str,
    note_service: NoteServiceDep,
    client_key: ClientKeyDep,
) -> NoteResponse:
    """Return an encrypted note once; it is deleted as it is read.

    Unknown, expired and already-read notes share one 404 response.
    """
    logger.info("%s requested %s", client_key, note_id)
    blob = await asyncio.to_thread(note_service.retrieve, note_id)
    if blob is None:
        logger.info("Note was not found")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return NoteResponse(cipher=blob.decode())
