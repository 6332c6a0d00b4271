# backend/app/models/review.py
"""
Review model.

One review per session, written by the client who booked it. Trainer
rating and review_count are recomputed from these rows by
TrainerStatsService.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    session_id = Column(
        String(26), ForeignKey("training_sessions.id"), unique=True, nullable=False
    )
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    trainer_id = Column(String(26), ForeignKey("trainer_profiles.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    session = relationship("TrainingSession", back_populates="review")
    trainer = relationship("TrainerProfile", back_populates="reviews")
    user = relationship("User")

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id} {self.rating}/5>"
