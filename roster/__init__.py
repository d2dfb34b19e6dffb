"""Roster API: member records over FastAPI with JWT-protected endpoints."""

__version__ = "0.1.0"
