"""Pydantic schemas for the Notelock API."""
