"""
Trainer directory schemas for the Disciplix platform.

Defines the directory query parameters and the list/detail response
shapes. Listing entries embed the three most recent reviews; the detail
view embeds every review and the trainer's upcoming sessions.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..models.training_session import SessionStatus
from .base import Money, StandardizedModel, UTCDateTime
from .base_responses import PaginationMeta

if TYPE_CHECKING:
    from ..models.review import Review
    from ..models.trainer import TrainerProfile
    from ..models.training_session import TrainingSession


class TrainerFilterParams(BaseModel):
    """
    Query parameters for the trainer directory.

    ``sessionCount`` is accepted as an alias of the ``sessions`` sort key.
    """

    page: int = Field(1, ge=1)
    limit: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    specialty: Optional[str] = Field(None, min_length=1, max_length=100)
    min_rate: Optional[Decimal] = Field(None, ge=0)
    max_rate: Optional[Decimal] = Field(None, ge=0)
    min_rating: Optional[float] = Field(None, ge=0, le=5)
    search: Optional[str] = Field(None, max_length=100)
    sort_by: Literal["rating", "price", "experience", "sessions", "sessionCount"] = "rating"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("search", "specialty")
    @classmethod
    def _blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @field_validator("sort_by")
    @classmethod
    def _normalize_sort(cls, v: str) -> str:
        return "sessions" if v == "sessionCount" else v

    @model_validator(mode="after")
    def _validate_rate_range(self) -> "TrainerFilterParams":
        if self.min_rate is not None and self.max_rate is not None and self.max_rate < self.min_rate:
            raise ValueError("maxRate must be greater than or equal to minRate")
        return self

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class TrainerUserSummary(StandardizedModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None


class ReviewerSummary(StandardizedModel):
    name: str
    avatar: Optional[str] = None


class ReviewResponse(StandardizedModel):
    id: str
    rating: int
    comment: Optional[str] = None
    created_at: Optional[UTCDateTime] = None
    user: Optional[ReviewerSummary] = None

    @classmethod
    def from_review(cls, review: "Review") -> "ReviewResponse":
        reviewer = None
        if review.user is not None:
            reviewer = ReviewerSummary(name=review.user.name, avatar=review.user.avatar)
        return cls(
            id=review.id,
            rating=review.rating,
            comment=review.comment,
            created_at=review.created_at,
            user=reviewer,
        )


class TrainerSessionSlot(StandardizedModel):
    """An occupied slot shown on the trainer page."""

    id: str
    scheduled_at: UTCDateTime
    duration: int
    status: SessionStatus


class TrainerSummaryResponse(StandardizedModel):
    id: str
    user_id: str
    user: TrainerUserSummary
    bio: Optional[str] = None
    experience: int
    hourly_rate: Money
    currency: str
    specialties: List[str]
    certifications: List[str]
    languages: List[str]
    is_verified: bool
    is_available: bool
    rating: float
    review_count: int
    total_sessions: int
    reviews: List[ReviewResponse] = Field(default_factory=list)

    @classmethod
    def _base_fields(cls, trainer: "TrainerProfile") -> dict:
        return {
            "id": trainer.id,
            "user_id": trainer.user_id,
            "user": TrainerUserSummary(
                id=trainer.user.id,
                name=trainer.user.name,
                email=trainer.user.email,
                avatar=trainer.user.avatar,
            ),
            "bio": trainer.bio,
            "experience": trainer.experience,
            "hourly_rate": trainer.hourly_rate,
            "currency": trainer.currency,
            "specialties": trainer.specialties,
            "certifications": list(trainer.certifications or []),
            "languages": list(trainer.languages or []),
            "is_verified": trainer.is_verified,
            "is_available": trainer.is_available,
            "rating": float(trainer.rating or 0),
            "review_count": trainer.review_count,
            "total_sessions": trainer.total_sessions,
        }

    @classmethod
    def from_trainer(
        cls, trainer: "TrainerProfile", reviews: Sequence["Review"] = ()
    ) -> "TrainerSummaryResponse":
        return cls(
            **cls._base_fields(trainer),
            reviews=[ReviewResponse.from_review(r) for r in reviews],
        )


class TrainerDetailResponse(TrainerSummaryResponse):
    availability: Dict[str, List[str]] = Field(default_factory=dict)
    upcoming_sessions: List[TrainerSessionSlot] = Field(default_factory=list)

    @classmethod
    def from_detail(
        cls,
        trainer: "TrainerProfile",
        reviews: Sequence["Review"],
        sessions: Sequence["TrainingSession"],
    ) -> "TrainerDetailResponse":
        return cls(
            **cls._base_fields(trainer),
            reviews=[ReviewResponse.from_review(r) for r in reviews],
            availability=dict(trainer.availability or {}),
            upcoming_sessions=[
                TrainerSessionSlot(
                    id=s.id, scheduled_at=s.scheduled_at, duration=s.duration, status=s.status
                )
                for s in sessions
            ],
        )


class TrainerListEnvelope(StandardizedModel):
    trainers: List[TrainerSummaryResponse]
    pagination: PaginationMeta


class TrainerDetailEnvelope(StandardizedModel):
    trainer: TrainerDetailResponse


class SpecialtiesEnvelope(StandardizedModel):
    specialties: List[str]
