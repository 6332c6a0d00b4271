# backend/app/models/training_session.py
"""
TrainingSession model for the Disciplix platform.

Represents a booked coaching session between a client and a trainer.
The price and currency are snapshotted from the trainer at booking time
and never recomputed. Sessions are never physically deleted; they end in
a terminal status instead.

Lifecycle:
    SCHEDULED -> IN_PROGRESS -> COMPLETED
    SCHEDULED -> CANCELLED
    RESCHEDULED is reserved and has no transition into it.
"""

from datetime import datetime, timedelta
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import MAX_SESSION_DURATION, MIN_SESSION_DURATION
from ..core.exceptions import InvalidSessionStateException
from ..core.timezone_utils import ensure_utc, utc_now
from ..database import Base

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    """Training session lifecycle statuses."""

    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RESCHEDULED = "RESCHEDULED"  # Reserved for future use


# Statuses that occupy a trainer's time
ACTIVE_SESSION_STATUSES = (SessionStatus.SCHEDULED.value, SessionStatus.IN_PROGRESS.value)


class SessionType(str, Enum):
    """How the session is delivered."""

    IN_PERSON = "IN_PERSON"
    VIRTUAL = "VIRTUAL"
    HYBRID = "HYBRID"


class TrainingSession(Base):
    """
    A booked session.

    The trainer's occupied interval is ``[scheduled_at, scheduled_at + duration)``.
    Only SCHEDULED and IN_PROGRESS sessions take part in conflict checks.
    """

    __tablename__ = "training_sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    trainer_id = Column(String(26), ForeignKey("trainer_profiles.id"), nullable=False)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer, nullable=False)
    type = Column(String(20), nullable=False, default=SessionType.VIRTUAL.value)

    # Snapshot taken at booking time
    price = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False)

    status = Column(String(20), nullable=False, default=SessionStatus.SCHEDULED.value, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    # Written by start/complete only; cancelling touches nothing but status
    updated_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="sessions", foreign_keys=[user_id])
    trainer = relationship("TrainerProfile", back_populates="sessions")
    review = relationship("Review", back_populates="session", uselist=False)

    __table_args__ = (
        Index("ix_training_sessions_trainer_status_start", "trainer_id", "status", "scheduled_at"),
        CheckConstraint(
            f"duration >= {MIN_SESSION_DURATION} AND duration <= {MAX_SESSION_DURATION}",
            name="ck_training_sessions_duration_range",
        ),
        CheckConstraint("price >= 0", name="ck_training_sessions_price_non_negative"),
        CheckConstraint(
            "status IN ('SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', 'RESCHEDULED')",
            name="ck_training_sessions_status",
        ),
        CheckConstraint(
            "type IN ('IN_PERSON', 'VIRTUAL', 'HYBRID')",
            name="ck_training_sessions_type",
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        if kwargs.get("scheduled_at") is not None:
            kwargs["scheduled_at"] = ensure_utc(kwargs["scheduled_at"])
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<TrainingSession {self.id} {self.status} at {self.scheduled_at}>"

    @property
    def starts_at(self) -> datetime:
        """Scheduled start as aware UTC."""
        return ensure_utc(self.scheduled_at)

    @property
    def ends_at(self) -> datetime:
        return self.starts_at + timedelta(minutes=self.duration)

    def hours_until_start(self, now: Optional[datetime] = None) -> float:
        now = ensure_utc(now) if now is not None else utc_now()
        return (self.starts_at - now).total_seconds() / 3600

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def cancel(self) -> None:
        """Cancel this session."""
        if self.status != SessionStatus.SCHEDULED.value:
            raise InvalidSessionStateException(
                "Can only cancel scheduled sessions", current_status=self.status
            )
        self.status = SessionStatus.CANCELLED.value
        logger.info(f"Session {self.id} cancelled by user {self.user_id}")

    def start(self, now: Optional[datetime] = None) -> None:
        """Mark the session as in progress."""
        if self.status != SessionStatus.SCHEDULED.value:
            raise InvalidSessionStateException(
                "Can only start scheduled sessions", current_status=self.status
            )
        self.status = SessionStatus.IN_PROGRESS.value
        self.started_at = ensure_utc(now) if now is not None else utc_now()
        self.updated_at = self.started_at

    def complete(self, now: Optional[datetime] = None) -> None:
        """Mark the session as completed."""
        if self.status != SessionStatus.IN_PROGRESS.value:
            raise InvalidSessionStateException(
                "Can only complete sessions in progress", current_status=self.status
            )
        self.status = SessionStatus.COMPLETED.value
        self.completed_at = ensure_utc(now) if now is not None else utc_now()
        self.updated_at = self.completed_at
