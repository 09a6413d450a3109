# src/notelock/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import legacy_router, notes_router, system_router

__all__ = [
    "legacy_router",
    "notes_router",
    "system_router",
]
