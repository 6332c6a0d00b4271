# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1, plus the unversioned health and
metrics probes.
"""

from . import auth, health, prometheus, sessions, trainers

__all__ = [
    "auth",
    "health",
    "prometheus",
    "sessions",
    "trainers",
]
