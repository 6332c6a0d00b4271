# backend/app/repositories/training_session_repository.py
"""
TrainingSession Repository for the Disciplix platform

Implements data access for training sessions, including the trainer
conflict query used by the booking workflow.
"""

from datetime import datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.constants import CONFLICT_LOOKBACK_MINUTES
from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.trainer import TrainerProfile
from ..models.training_session import ACTIVE_SESSION_STATUSES, SessionStatus, TrainingSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TrainingSessionRepository(BaseRepository[TrainingSession]):
    """Repository for training session data access."""

    def __init__(self, db: Session):
        super().__init__(db, TrainingSession)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(TrainingSession.trainer).joinedload(TrainerProfile.user),
        )

    # Conflict detection

    def find_conflicting_sessions(
        self,
        trainer_id: str,
        scheduled_at: datetime,
        duration: int,
        lookback_minutes: int = CONFLICT_LOOKBACK_MINUTES,
    ) -> List[TrainingSession]:
        """
        Active sessions of a trainer that block a new booking.

        A session blocks when its *start* lies in either inclusive window:
            (a) [scheduled_at - lookback, scheduled_at]
            (b) [scheduled_at, scheduled_at + duration]

        Only start times are compared. An existing session that starts more
        than ``lookback_minutes`` earlier never blocks, even if it is still
        running at ``scheduled_at``.

        Args:
            trainer_id: Trainer to check
            scheduled_at: Requested start
            duration: Requested length in minutes
            lookback_minutes: Width of window (a)

        Returns:
            Blocking sessions, earliest first
        """
        start = ensure_utc(scheduled_at)
        end = start + timedelta(minutes=duration)
        lookback_start = start - timedelta(minutes=lookback_minutes)

        try:
            return (
                self.db.query(TrainingSession)
                .filter(
                    TrainingSession.trainer_id == trainer_id,
                    TrainingSession.status.in_(ACTIVE_SESSION_STATUSES),
                    or_(
                        and_(
                            TrainingSession.scheduled_at >= lookback_start,
                            TrainingSession.scheduled_at <= start,
                        ),
                        and_(
                            TrainingSession.scheduled_at >= start,
                            TrainingSession.scheduled_at <= end,
                        ),
                    ),
                )
                .order_by(TrainingSession.scheduled_at.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking session conflicts: {str(e)}")
            raise RepositoryException(f"Failed to check session conflicts: {str(e)}")

    # Lookups

    def get_for_update(self, session_id: str) -> Optional[TrainingSession]:
        """Load a session and lock its row until the transaction ends."""
        try:
            return (
                self.db.query(TrainingSession)
                .filter(TrainingSession.id == session_id)
                .with_for_update(of=TrainingSession)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking session {session_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock session: {str(e)}")

    def list_for_user(
        self,
        user_id: str,
        *,
        status: Optional[str] = None,
        upcoming_after: Optional[datetime] = None,
    ) -> List[TrainingSession]:
        """
        Sessions booked by a user, newest first.

        ``upcoming_after`` restricts the result to SCHEDULED sessions
        starting at or after the given instant and overrides ``status``.
        """
        query = self._apply_eager_loading(
            self.db.query(TrainingSession).filter(TrainingSession.user_id == user_id)
        )
        if upcoming_after is not None:
            query = query.filter(
                TrainingSession.status == SessionStatus.SCHEDULED.value,
                TrainingSession.scheduled_at >= ensure_utc(upcoming_after),
            )
        elif status:
            query = query.filter(TrainingSession.status == status)

        return self._execute_query(
            query.order_by(TrainingSession.scheduled_at.desc(), TrainingSession.id.desc())
        )

    def list_active_for_trainer(self, trainer_id: str, limit: int) -> List[TrainingSession]:
        """Non-terminal sessions of a trainer, soonest first."""
        query = (
            self.db.query(TrainingSession)
            .filter(
                TrainingSession.trainer_id == trainer_id,
                TrainingSession.status.in_(ACTIVE_SESSION_STATUSES),
            )
            .order_by(TrainingSession.scheduled_at.asc())
            .limit(limit)
        )
        return self._execute_query(query)

    def count_completed_for_trainer(self, trainer_id: str) -> int:
        return self.count(trainer_id=trainer_id, status=SessionStatus.COMPLETED.value)
