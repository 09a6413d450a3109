# src/notelock/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .notes import legacy_router
from .notes import router as notes_router
from .system import router as system_router

__all__ = [
    "legacy_router",
    "notes_router",
    "system_router",
]
