"""Error types raised by the Notelock core."""

from __future__ import annotations

import math


class NotelockError(Exception):
    """Base error for Notelock failures."""


class NoteValidationError(NotelockError):
    """Raised when a submitted note is empty, oversize or malformed."""


class IdCollisionError(NotelockError):
    """Raised when an insert targets an identifier that is already live."""

    def __init__(self, note_id: str) -> None:
        super().__init__(f"Identifier already in use: {note_id}")
        self.note_id = note_id


class ExhaustedRetriesError(NotelockError):
    """Raised when every generated identifier collided with a live note."""

    def __init__(self, attempts: int) -> None:
        super().__init__(f"Could not reserve a unique identifier after {attempts} attempts")
        self.attempts = attempts


class RateLimitedError(NotelockError):
    """Raised when a hard admission limit rejects a request.

    Attributes:
        policy: Name of the limiter that rejected the request.
        retry_after: Seconds until the client's window rolls over.
        detail: Human readable message for the response body.
    """

    def __init__(self, policy: str, retry_after: float, detail: str) -> None:
        super().__init__(detail)
        self.policy = policy
        self.retry_after = max(0.0, retry_after)
        self.detail = detail

    @property
    def retry_after_header(self) -> str:
        """Return the retry hint as whole seconds for a ``Retry-After`` header."""
        return str(max(1, math.ceil(self.retry_after)))
