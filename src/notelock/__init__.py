"""Notelock: one-time retrieval of client-encrypted notes."""

__version__ = "1.0.0"
