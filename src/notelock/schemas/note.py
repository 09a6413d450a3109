# src/notelock/schemas/note.py
"""Note-related Pydantic schemas."""

from pydantic import BaseModel, Field


class NoteCreate(BaseModel):
    """Schema for submitting an encrypted note."""

    cipher: str = Field(..., description="Client-encrypted note content, opaque to the server")


class NoteCreated(BaseModel):
    """Schema returned after a note has been stored."""

    id: str = Field(..., description="One-time retrieval identifier")
    url: str = Field(..., description="Retrieval URL; the client appends its key after '#'")


class LegacyNoteCreated(BaseModel):
    """Response shape of the legacy ``/encrypt`` endpoint: the URL under ``id``."""

    id: str


class NoteResponse(BaseModel):
    """Schema for a retrieved note."""

    cipher: str


class RateLimitedResponse(BaseModel):
    """Body of a 429 response."""

    error: str = "rate_limited"
    policy: str
    detail: str
    retry_after: float
