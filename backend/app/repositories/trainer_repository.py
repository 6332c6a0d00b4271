# backend/app/repositories/trainer_repository.py
"""
Trainer Repository for the Disciplix platform

Handles data access for trainer profiles: the filtered, sorted and
paginated directory query, the distinct specialty list, detail lookups,
and the row-locked read used by the booking workflow.
"""

from dataclasses import dataclass
from decimal import Decimal
import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload, selectinload

from ..core.exceptions import RepositoryException
from ..models.trainer import TrainerProfile, TrainerSpecialty
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "rating": TrainerProfile.rating,
    "price": TrainerProfile.hourly_rate,
    "experience": TrainerProfile.experience,
    "sessions": TrainerProfile.total_sessions,
}


@dataclass
class TrainerDirectoryFilters:
    """Criteria for the public trainer directory."""

    specialty: Optional[str] = None
    min_rate: Optional[Decimal] = None
    max_rate: Optional[Decimal] = None
    min_rating: Optional[float] = None
    search: Optional[str] = None
    sort_by: str = "rating"
    sort_order: str = "desc"


class TrainerRepository(BaseRepository[TrainerProfile]):
    """
    Repository for trainer profile data access.

    Listed trainers are always verified and available; everything else is
    reachable only by id.
    """

    def __init__(self, db: Session):
        """Initialize with TrainerProfile model."""
        super().__init__(db, TrainerProfile)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(TrainerProfile.user),
            selectinload(TrainerProfile.specialty_rows),
        )

    def _apply_public_visibility(self, query: Query) -> Query:
        """Restrict results to trainers eligible for the directory."""
        return query.filter(
            TrainerProfile.is_verified.is_(True),
            TrainerProfile.is_available.is_(True),
        )

    def _apply_filters(self, query: Query, filters: TrainerDirectoryFilters) -> Query:
        if filters.specialty:
            query = query.filter(
                TrainerProfile.specialty_rows.any(TrainerSpecialty.name == filters.specialty)
            )
        if filters.min_rate is not None:
            query = query.filter(TrainerProfile.hourly_rate >= filters.min_rate)
        if filters.max_rate is not None:
            query = query.filter(TrainerProfile.hourly_rate <= filters.max_rate)
        if filters.min_rating is not None:
            query = query.filter(TrainerProfile.rating >= filters.min_rating)
        if filters.search:
            search_term = f"%{filters.search.strip()}%"
            query = query.filter(
                or_(
                    User.name.ilike(search_term),
                    TrainerProfile.bio.ilike(search_term),
                    TrainerProfile.specialty_rows.any(TrainerSpecialty.name.ilike(search_term)),
                )
            )
        return query

    def _apply_sort(self, query: Query, sort_by: str, sort_order: str) -> Query:
        column = SORT_COLUMNS.get(sort_by, TrainerProfile.rating)
        primary = column.asc() if sort_order == "asc" else column.desc()
        # Stable paging across equal sort keys
        return query.order_by(primary, TrainerProfile.id.asc())

    def find_directory_page(
        self, filters: TrainerDirectoryFilters, skip: int, limit: int
    ) -> Tuple[List[TrainerProfile], int]:
        """
        Run the directory query.

        Args:
            filters: Directory criteria
            skip: Rows to skip
            limit: Page size

        Returns:
            Tuple of (trainers on this page, total matching trainers)
        """
        try:
            base = self._apply_public_visibility(
                self.db.query(TrainerProfile).join(User, TrainerProfile.user_id == User.id)
            )
            base = self._apply_filters(base, filters)

            total = base.count()
            if skip >= total:
                return [], total

            query = self._apply_sort(base, filters.sort_by, filters.sort_order)
            query = query.options(
                joinedload(TrainerProfile.user),
                selectinload(TrainerProfile.specialty_rows),
            )
            return query.offset(skip).limit(limit).all(), total
        except SQLAlchemyError as e:
            self.logger.error(f"Error querying trainer directory: {str(e)}")
            raise RepositoryException(f"Failed to query trainer directory: {str(e)}")

    def list_public_specialties(self) -> List[str]:
        """Sorted distinct specialties across verified, available trainers."""
        try:
            rows = (
                self.db.query(TrainerSpecialty.name)
                .join(TrainerProfile, TrainerSpecialty.trainer_id == TrainerProfile.id)
                .filter(
                    TrainerProfile.is_verified.is_(True),
                    TrainerProfile.is_available.is_(True),
                )
                .distinct()
                .order_by(TrainerSpecialty.name.asc())
                .all()
            )
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing specialties: {str(e)}")
            raise RepositoryException(f"Failed to list specialties: {str(e)}")

    def get_for_update(self, trainer_id: str) -> Optional[TrainerProfile]:
        """
        Load a trainer and lock its row until the transaction ends.

        Concurrent bookings for the same trainer serialize on this lock, so
        the conflict check and the insert that follows see a stable view.
        Dialects without row locks (SQLite) ignore the clause.
        """
        try:
            return (
                self.db.query(TrainerProfile)
                .filter(TrainerProfile.id == trainer_id)
                .with_for_update(of=TrainerProfile)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking trainer {trainer_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock trainer: {str(e)}")

    def list_ids(self) -> List[str]:
        try:
            return [row[0] for row in self.db.query(TrainerProfile.id).order_by(TrainerProfile.id)]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing trainer ids: {str(e)}")
            raise RepositoryException(f"Failed to list trainers: {str(e)}")
