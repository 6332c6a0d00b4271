# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.auth_service import AuthService
from ...services.booking_service import BookingService
from ...services.email import EmailService
from ...services.trainer_service import TrainerService
from .database import get_db

logger = logging.getLogger(__name__)


def get_email_service(db: Session = Depends(get_db)) -> EmailService:
    """Get EmailService instance with proper dependencies."""
    return EmailService(db)


def get_auth_service(
    db: Session = Depends(get_db), email_service: EmailService = Depends(get_email_service)
) -> AuthService:
    """
    Get auth service instance.

    Args:
        db: Database session
        email_service: Email service for verification and reset links

    Returns:
        AuthService instance
    """
    return AuthService(db, email_service=email_service)


def get_trainer_service(db: Session = Depends(get_db)) -> TrainerService:
    """Get trainer directory service instance."""
    return TrainerService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session

    Returns:
        BookingService instance
    """
    return BookingService(db)
