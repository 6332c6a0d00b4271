"""
Database models for the Disciplix platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- User identity, subscription and fitness profile
- Trainer profiles and specialties
- Training sessions and reviews
- One-time auth tokens
"""

from .auth_token import AuthToken, TokenPurpose
from .profile import FitnessGoal, UserProfile
from .review import Review
from .subscription import Subscription, SubscriptionStatus, SubscriptionTier
from .trainer import TrainerProfile, TrainerSpecialty
from .training_session import (
    ACTIVE_SESSION_STATUSES,
    SessionStatus,
    SessionType,
    TrainingSession,
)
from .user import User

__all__ = [
    # User models
    "User",
    "Subscription",
    "SubscriptionStatus",
    "SubscriptionTier",
    "UserProfile",
    "FitnessGoal",
    "AuthToken",
    "TokenPurpose",
    # Trainer models
    "TrainerProfile",
    "TrainerSpecialty",
    # Session models
    "TrainingSession",
    "SessionStatus",
    "SessionType",
    "ACTIVE_SESSION_STATUSES",
    "Review",
]
