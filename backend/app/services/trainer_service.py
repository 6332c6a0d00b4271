# backend/app/services/trainer_service.py
"""
Trainer Service for the Disciplix platform

Read path for the public trainer directory: filtered and paginated
listing, the specialty list, and trainer detail pages.
"""

from dataclasses import dataclass
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import RECENT_REVIEWS_IN_LISTING, UPCOMING_SESSIONS_IN_DETAIL
from ..core.exceptions import NotFoundException
from ..models.review import Review
from ..models.trainer import TrainerProfile
from ..models.training_session import TrainingSession
from ..repositories.factory import RepositoryFactory
from ..repositories.review_repository import ReviewRepository
from ..repositories.trainer_repository import TrainerDirectoryFilters, TrainerRepository
from ..repositories.training_session_repository import TrainingSessionRepository
from ..schemas.trainer import TrainerFilterParams
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class TrainerDirectoryPage:
    trainers: List[TrainerProfile]
    recent_reviews: Dict[str, List[Review]]
    page: int
    limit: int
    total: int


@dataclass
class TrainerDetail:
    trainer: TrainerProfile
    reviews: List[Review]
    upcoming_sessions: List[TrainingSession]


class TrainerService(BaseService):
    """Service layer for the trainer directory."""

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

    @BaseService.measure_operation("list_trainers")
    def list_trainers(self, params: TrainerFilterParams) -> TrainerDirectoryPage:
        """
        One page of verified, available trainers.

        A page past the end yields an empty list with the real total.
        """
        filters = TrainerDirectoryFilters(
            specialty=params.specialty,
            min_rate=params.min_rate,
            max_rate=params.max_rate,
            min_rating=params.min_rating,
            search=params.search,
            sort_by=params.sort_by,
            sort_order=params.sort_order,
        )
        trainers, total = self.trainer_repository.find_directory_page(
            filters, skip=params.skip, limit=params.limit
        )
        recent = self.review_repository.recent_for_trainers(
            [t.id for t in trainers], per_trainer=RECENT_REVIEWS_IN_LISTING
        )
        return TrainerDirectoryPage(
            trainers=trainers,
            recent_reviews=recent,
            page=params.page,
            limit=params.limit,
            total=total,
        )

    @BaseService.measure_operation("list_specialties")
    def list_specialties(self) -> List[str]:
        return self.trainer_repository.list_public_specialties()

    @BaseService.measure_operation("get_trainer_detail")
    def get_trainer_detail(self, trainer_id: str) -> TrainerDetail:
        trainer = self.trainer_repository.get_by_id(trainer_id)
        if trainer is None:
            raise NotFoundException("Trainer not found", details={"trainer_id": trainer_id})

        return TrainerDetail(
            trainer=trainer,
            reviews=self.review_repository.list_for_trainer(trainer.id),
            upcoming_sessions=self.session_repository.list_active_for_trainer(
                trainer.id, limit=UPCOMING_SESSIONS_IN_DETAIL
            ),
        )
