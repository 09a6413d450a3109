# src/notelock/services/__init__.py
"""Business logic services for the Notelock application."""

from .admission import AdmissionController, RateLimitPolicy, SlowdownPolicy
from .note_store import EphemeralNoteStore, NoteRecord
from .notes import NoteService
from .periodic import ExpirySweeper, PeriodicTask, StoreDumper

__all__ = [
    "AdmissionController",
    "EphemeralNoteStore",
    "ExpirySweeper",
    "NoteRecord",
    "NoteService",
    "PeriodicTask",
    "RateLimitPolicy",
    "SlowdownPolicy",
    "StoreDumper",
]
