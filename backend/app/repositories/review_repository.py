# backend/app/repositories/review_repository.py
"""
Repository for trainer reviews.

Follows repository pattern: no business logic, DB-only operations.
"""

import logging
from typing import Dict, List, Sequence, TypedDict

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TrainerReviewAggregate(TypedDict):
    review_count: int
    raw_average: float


class ReviewRepository(BaseRepository[Review]):
    def __init__(self, db: Session):
        super().__init__(db, Review)

    def list_for_trainer(self, trainer_id: str) -> List[Review]:
        """All reviews of a trainer, newest first."""
        query = (
            self.db.query(Review)
            .options(joinedload(Review.user))
            .filter(Review.trainer_id == trainer_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return self._execute_query(query)

    def recent_for_trainers(
        self, trainer_ids: Sequence[str], per_trainer: int
    ) -> Dict[str, List[Review]]:
        """
        Latest ``per_trainer`` reviews for each trainer in one round trip.

        Returns:
            Mapping of trainer id to its reviews, newest first. Trainers
            without reviews map to an empty list.
        """
        result: Dict[str, List[Review]] = {tid: [] for tid in trainer_ids}
        if not trainer_ids:
            return result

        try:
            ranked = (
                self.db.query(
                    Review.id.label("review_id"),
                    func.row_number()
                    .over(
                        partition_by=Review.trainer_id,
                        order_by=(Review.created_at.desc(), Review.id.desc()),
                    )
                    .label("rank"),
                )
                .filter(Review.trainer_id.in_(list(trainer_ids)))
                .subquery()
            )
            reviews = (
                self.db.query(Review)
                .options(joinedload(Review.user))
                .join(ranked, ranked.c.review_id == Review.id)
                .filter(ranked.c.rank <= per_trainer)
                .order_by(Review.created_at.desc(), Review.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading recent reviews: {str(e)}")
            raise RepositoryException(f"Failed to load recent reviews: {str(e)}")

        for review in reviews:
            result[review.trainer_id].append(review)
        return result

    def aggregate_for_trainer(self, trainer_id: str) -> TrainerReviewAggregate:
        try:
            count, average = (
                self.db.query(func.count(Review.id), func.avg(Review.rating))
                .filter(Review.trainer_id == trainer_id)
                .one()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error aggregating reviews for {trainer_id}: {str(e)}")
            raise RepositoryException(f"Failed to aggregate reviews: {str(e)}")
        return {"review_count": int(count or 0), "raw_average": float(average or 0.0)}
