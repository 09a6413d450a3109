"""Short, URL-safe, unguessable note identifiers."""

from __future__ import annotations

import secrets
import string
from typing import Final

ID_ALPHABET: Final[str] = string.ascii_letters + string.digits + "_-"
ID_LENGTH: Final[int] = 21


def generate_id(size: int = ID_LENGTH) -> str:
    """Return a random identifier drawn from the URL-safe alphabet.

    Each character carries 6 bits from the OS CSPRNG, so the default
    length gives roughly 126 bits of entropy.
    """
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(size))


def is_well_formed(note_id: str) -> bool:
    """Return True if ``note_id`` could have been produced by ``generate_id``."""
    return len(note_id) == ID_LENGTH and all(ch in ID_ALPHABET for ch in note_id)
