"""Submit and retrieve one-time notes."""

from __future__ import annotations

import logging

from notelock.core.errors import NoteValidationError
from notelock.services.ids import ID_LENGTH, is_well_formed
from notelock.services.note_store import EphemeralNoteStore

logger = logging.getLogger(__name__)


class NoteService:
    """Validate submissions and mediate exactly-once retrieval.

    The service never inspects ciphertext beyond its size; decryption keys
    stay with the client.
    """

    def __init__(
        self,
        store: EphemeralNoteStore,
        *,
        max_note_bytes: int = 1_048_576,
        id_max_attempts: int = 5,
        id_backoff_seconds: float = 0.001,
    ) -> None:
        self.store = store
        self.max_note_bytes = max_note_bytes
        self.id_max_attempts = id_max_attempts
        self.id_backoff_seconds = id_backoff_seconds

    def submit(self, blob: bytes | str | None) -> str:
        """Store a ciphertext blob and return its retrieval identifier.

        Raises:
            NoteValidationError: if the blob is missing, empty or too large.
            ExhaustedRetriesError: if no unique identifier could be reserved.
        """
        if blob is None:
            raise NoteValidationError("Note is missing")
        if isinstance(blob, str):
            blob = blob.encode()
        if not blob:
            raise NoteValidationError("Note must not be empty")
        if len(blob) > self.max_note_bytes:
            raise NoteValidationError(
                f"Note exceeds the maximum size of {self.max_note_bytes} bytes"
            )

        return self.store.insert_unique(
            blob,
            max_attempts=self.id_max_attempts,
            backoff_seconds=self.id_backoff_seconds,
        )

    def retrieve(self, note_id: str) -> bytes | None:
        """Return the blob for ``note_id`` exactly once.

        Unknown, consumed and expired identifiers all yield None.
        """
        note_id = note_id[:ID_LENGTH]
        if not is_well_formed(note_id):
            return None
        blob = self.store.take(note_id)
        if blob is not None:
            logger.info("Purged %s", note_id)
        return blob
