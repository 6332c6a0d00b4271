"""Schemas for booking and listing training sessions."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import Field, field_validator

from ..core.constants import MAX_SESSION_DURATION, MIN_SESSION_DURATION
from ..core.timezone_utils import ensure_utc
from ..models.training_session import SessionStatus, SessionType
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel, UTCDateTime

if TYPE_CHECKING:
    from ..models.training_session import TrainingSession


class SessionBookingRequest(StrictRequestModel):
    """
    Body of ``POST /trainers/{trainerId}/book``.

    ``scheduledAt`` without an offset is taken as UTC.
    """

    scheduled_at: datetime = Field(..., description="Session start, ISO-8601")
    duration: int = Field(
        ...,
        ge=MIN_SESSION_DURATION,
        le=MAX_SESSION_DURATION,
        strict=True,
        description="Length in minutes",
    )
    type: SessionType = Field(default=SessionType.VIRTUAL)
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("scheduled_at")
    @classmethod
    def _normalize_scheduled_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class SessionTrainerSummary(StandardizedModel):
    id: str
    user_id: str
    name: str
    email: str
    avatar: Optional[str] = None


class SessionResponse(StandardizedModel):
    id: str
    user_id: str
    trainer_id: str
    scheduled_at: UTCDateTime
    duration: int
    type: SessionType
    price: Money
    currency: str
    status: SessionStatus
    notes: Optional[str] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None
    trainer: Optional[SessionTrainerSummary] = None

    @classmethod
    def from_session(cls, session: "TrainingSession") -> "SessionResponse":
        trainer = session.trainer
        trainer_summary = None
        if trainer is not None and trainer.user is not None:
            trainer_summary = SessionTrainerSummary(
                id=trainer.id,
                user_id=trainer.user_id,
                name=trainer.user.name,
                email=trainer.user.email,
                avatar=trainer.user.avatar,
            )
        return cls(
            id=session.id,
            user_id=session.user_id,
            trainer_id=session.trainer_id,
            scheduled_at=session.scheduled_at,
            duration=session.duration,
            type=session.type,
            price=session.price,
            currency=session.currency,
            status=session.status,
            notes=session.notes,
            created_at=session.created_at,
            updated_at=session.updated_at,
            trainer=trainer_summary,
        )


class SessionEnvelope(StandardizedModel):
    session: SessionResponse


class SessionListEnvelope(StandardizedModel):
    sessions: List[SessionResponse]
