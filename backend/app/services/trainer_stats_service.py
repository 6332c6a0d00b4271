# backend/app/services/trainer_stats_service.py
"""
Recomputes the denormalized trainer counters from their source rows.

rating and review_count come from reviews, total_sessions from
COMPLETED sessions. Running it twice gives the same result.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..repositories.factory import RepositoryFactory
from ..repositories.review_repository import ReviewRepository
from ..repositories.trainer_repository import TrainerRepository
from ..repositories.training_session_repository import TrainingSessionRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class TrainerStats:
    trainer_id: str
    rating: Decimal
    review_count: int
    total_sessions: int


class TrainerStatsService(BaseService):
    def __init__(
        self,
        db: Session,
        trainer_repository: Optional[TrainerRepository] = None,
        review_repository: Optional[ReviewRepository] = None,
        session_repository: Optional[TrainingSessionRepository] = None,
    ):
        super().__init__(db)
        self.trainer_repository = (
            trainer_repository or RepositoryFactory.create_trainer_repository(db)
        )
        self.review_repository = review_repository or RepositoryFactory.create_review_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_training_session_repository(db)
        )

    @BaseService.measure_operation("recompute_trainer_stats")
    def recompute(self, trainer_id: str) -> TrainerStats:
        """Recompute and persist the counters of one trainer."""
        with self.transaction():
            trainer = self.trainer_repository.get_for_update(trainer_id)
            if trainer is None:
                raise NotFoundException("Trainer not found", details={"trainer_id": trainer_id})

            aggregate = self.review_repository.aggregate_for_trainer(trainer_id)
            rating = Decimal(str(aggregate["raw_average"])).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
            stats = TrainerStats(
                trainer_id=trainer_id,
                rating=rating,
                review_count=aggregate["review_count"],
                total_sessions=self.session_repository.count_completed_for_trainer(trainer_id),
            )

            trainer.rating = stats.rating
            trainer.review_count = stats.review_count
            trainer.total_sessions = stats.total_sessions

        self.log_operation(
            "recompute_trainer_stats",
            trainer_id=trainer_id,
            rating=str(stats.rating),
            review_count=stats.review_count,
            total_sessions=stats.total_sessions,
        )
        return stats

    def recompute_all(self) -> List[TrainerStats]:
        return [self.recompute(trainer_id) for trainer_id in self.trainer_repository.list_ids()]
