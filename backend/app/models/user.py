# backend/app/models/user.py
"""
User model for the Disciplix platform.

This module defines the User model which serves as the identity for both
clients and trainers. It holds authentication fields and the relationships
to subscription, profile, goals and training sessions.

Classes:
    User: Main user model for authentication and profile management
"""

import logging
from typing import Any, Optional

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Main user model for authentication and profile management.

    Attributes:
        id: ULID primary key
        email: Unique, lower-cased email address used for login
        hashed_password: Bcrypt hashed password
        name: Display name
        avatar: Optional avatar URL
        verified: Set once when the email address is confirmed
        created_at: Account creation timestamp
        updated_at: Last update timestamp

    Relationships:
        subscription: One-to-one, created on registration
        profile: One-to-one UserProfile, created on registration
        trainer_profile: Zero-or-one TrainerProfile
        goals: One-to-many FitnessGoal
        sessions: Training sessions booked by this user
        auth_tokens: One-time verification/reset tokens
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(100), nullable=False)
    avatar = Column(String(500), nullable=True)
    verified = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    subscription = relationship(
        "Subscription", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    profile = relationship(
        "UserProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    trainer_profile = relationship("TrainerProfile", back_populates="user", uselist=False)
    goals = relationship("FitnessGoal", back_populates="user", cascade="all, delete-orphan")
    sessions = relationship(
        "TrainingSession",
        back_populates="user",
        foreign_keys="TrainingSession.user_id",
    )
    auth_tokens = relationship("AuthToken", back_populates="user", cascade="all, delete-orphan")

    def __init__(self, **kwargs: Any) -> None:
        if "email" in kwargs and kwargs["email"]:
            kwargs["email"] = kwargs["email"].strip().lower()
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<User {self.email}>"

    @property
    def subscription_tier(self) -> str:
        """Tier of the active subscription, FREE when none is active."""
        from .subscription import SubscriptionStatus, SubscriptionTier

        sub: Optional[Any] = self.subscription
        if sub is None or sub.status != SubscriptionStatus.ACTIVE.value:
            return SubscriptionTier.FREE.value
        return str(sub.tier)

    @property
    def is_trainer(self) -> bool:
        return self.trainer_profile is not None

    def mark_verified(self) -> bool:
        """
        Confirm the email address.

        Returns:
            True if the flag flipped, False if the user was already verified
        """
        if self.verified:
            return False
        self.verified = True
        logger.info(f"User {self.id} verified their email")
        return True
