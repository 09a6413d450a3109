"""HTTP API for Notelock."""
