# backend/app/models/trainer.py
"""
Trainer profile models for the Disciplix platform.

A TrainerProfile extends a User that offers coaching. It carries the
public directory data (bio, rate, specialties) plus counters that are
denormalized from reviews and completed sessions.

Classes:
    TrainerProfile: Trainer-facing profile, 1:1 with a User
    TrainerSpecialty: One specialty tag of a trainer
"""

from decimal import Decimal
import logging
import re
from typing import Any, List

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
import ulid

from ..core.constants import DEFAULT_CURRENCY, WEEKDAYS
from ..database import Base

logger = logging.getLogger(__name__)

_TIME_RANGE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d-([01]\d|2[0-3]):[0-5]\d$")


class TrainerProfile(Base):
    """
    Trainer profile shown in the directory.

    Attributes:
        user_id: Owning user (unique)
        bio: Free text introduction
        experience: Years of coaching experience
        hourly_rate: Price per hour in ``currency``
        currency: ISO-4217 code used for session price snapshots
        certifications: List of certification names
        languages: List of spoken languages
        availability: Weekday name -> list of "HH:MM-HH:MM" ranges.
            Informational only, bookings are not checked against it.
        is_verified: Vetted by the platform, required to be listed
        is_available: Accepting new bookings
        rating: Mean review rating (denormalized)
        review_count: Number of reviews (denormalized)
        total_sessions: Number of completed sessions (denormalized)
    """

    __tablename__ = "trainer_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id"), unique=True, nullable=False)

    bio = Column(Text, nullable=True)
    experience = Column(Integer, nullable=False, default=0)
    hourly_rate = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default=DEFAULT_CURRENCY)
    certifications = Column(JSON, nullable=False, default=list)
    languages = Column(JSON, nullable=False, default=list)
    availability = Column(JSON, nullable=False, default=dict)

    is_verified = Column(Boolean, nullable=False, default=False, index=True)
    is_available = Column(Boolean, nullable=False, default=True, index=True)

    rating = Column(Numeric(3, 2), nullable=False, default=0)
    review_count = Column(Integer, nullable=False, default=0)
    total_sessions = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="trainer_profile")
    specialty_rows = relationship(
        "TrainerSpecialty",
        back_populates="trainer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TrainerSpecialty.name",
    )
    sessions = relationship("TrainingSession", back_populates="trainer")
    reviews = relationship("Review", back_populates="trainer")

    __table_args__ = (
        CheckConstraint("hourly_rate >= 0", name="ck_trainer_profiles_hourly_rate_non_negative"),
        CheckConstraint("experience >= 0", name="ck_trainer_profiles_experience_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_trainer_profiles_rating_range"),
    )

    def __init__(self, **kwargs: Any) -> None:
        specialties = kwargs.pop("specialties", None)
        super().__init__(**kwargs)
        if specialties:
            self.specialties = specialties

    def __repr__(self) -> str:
        return f"<TrainerProfile {self.id} user={self.user_id}>"

    @property
    def specialties(self) -> List[str]:
        return [row.name for row in self.specialty_rows]

    @specialties.setter
    def specialties(self, values: List[str]) -> None:
        unique = sorted({v.strip() for v in values if v and v.strip()})
        self.specialty_rows = [TrainerSpecialty(name=name) for name in unique]

    @validates("availability")
    def _validate_availability(self, key: str, value: Any) -> Any:
        """Weekday name -> list of "HH:MM-HH:MM" ranges with start before end."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("availability must be a mapping of weekday to time ranges")
        for day, ranges in value.items():
            if day not in WEEKDAYS:
                raise ValueError(f"Unknown weekday in availability: {day}")
            if not isinstance(ranges, list):
                raise ValueError(f"Availability for {day} must be a list")
            for time_range in ranges:
                if not isinstance(time_range, str) or not _TIME_RANGE.match(time_range):
                    raise ValueError(f"Invalid time range for {day}: {time_range!r}")
                start, end = time_range.split("-")
                if start >= end:
                    raise ValueError(f"Time range must end after it starts: {time_range}")
        return value

    @property
    def name(self) -> str:
        return self.user.name if self.user else ""

    @property
    def hourly_rate_decimal(self) -> Decimal:
        return Decimal(str(self.hourly_rate))


class TrainerSpecialty(Base):
    """A single specialty tag; (trainer_id, name) is unique."""

    __tablename__ = "trainer_specialties"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    trainer_id = Column(
        String(26),
        ForeignKey("trainer_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(100), nullable=False, index=True)

    trainer = relationship("TrainerProfile", back_populates="specialty_rows")

    __table_args__ = (UniqueConstraint("trainer_id", "name", name="uq_trainer_specialty"),)
