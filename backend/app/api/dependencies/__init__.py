# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, require_subscription
from .database import get_db
from .services import (
    get_auth_service,
    get_booking_service,
    get_email_service,
    get_trainer_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "require_subscription",
    # Database
    "get_db",
    # Services
    "get_auth_service",
    "get_booking_service",
    "get_email_service",
    "get_trainer_service",
]
