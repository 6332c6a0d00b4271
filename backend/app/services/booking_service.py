# backend/app/services/booking_service.py
"""
Booking Service for the Disciplix platform

Handles the booking workflow and the training session lifecycle:
availability and conflict checks, the price snapshot, persistence, and
the cancel/start/complete transitions.

Booking runs inside one transaction that first locks the trainer row,
so two requests for the same trainer cannot both pass the conflict
check before either has inserted its session.
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import List, NoReturn, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from ..core.constants import CANCELLATION_WINDOW_HOURS
from ..core.exceptions import (
    ForbiddenException,
    InvalidSessionStateException,
    NotFoundException,
    RepositoryException,
    SlotUnavailableException,
    TooLateToCancelException,
    TrainerUnavailableException,
)
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.trainer import TrainerProfile
from ..models.training_session import SessionStatus, SessionType, TrainingSession
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.trainer_repository import TrainerRepository
from ..repositories.training_session_repository import TrainingSessionRepository
from .base import BaseService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# SQLSTATEs meaning "another transaction got there first"
_WRITE_CONFLICT_PGCODES = {"40P01", "40001"}


def compute_session_price(hourly_rate: Decimal, duration_minutes: int) -> Decimal:
    """
    Price of a session: hourly_rate * duration / 60, rounded half-up to cents.

    >>> compute_session_price(Decimal("90.00"), 60)
    Decimal('90.00')
    >>> compute_session_price(Decimal("45.00"), 50)
    Decimal('37.50')
    """
    rate = Decimal(str(hourly_rate))
    return (rate * Decimal(duration_minutes) / Decimal(60)).quantize(CENTS, rounding=ROUND_HALF_UP)


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Centralizes the booking rules and the session state machine.
    """

    def __init__(
        self,
        db: Session,
        trainer_repository: Optional[TrainerRepository] = None,
        session_repository: Optional[TrainingSessionRepository] = None,
    ):
        super().__init__(db)
        self.trainer_repository = (
            trainer_repository or RepositoryFactory.create_trainer_repository(db)
        )
        self.session_repository = (
            session_repository or RepositoryFactory.create_training_session_repository(db)
        )

    @staticmethod
    def _is_write_conflict(exc: BaseException) -> bool:
        """True for integrity violations, deadlocks and serialization failures."""
        if isinstance(exc, RepositoryException):
            cause = exc.__cause__
            return cause is not None and BookingService._is_write_conflict(cause)
        if isinstance(exc, IntegrityError):
            return True
        if isinstance(exc, OperationalError):
            orig = getattr(exc, "orig", None)
            pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
            if pgcode in _WRITE_CONFLICT_PGCODES:
                return True
            return "deadlock detected" in str(exc).lower()
        return False

    # Booking workflow

    @BaseService.measure_operation("book_session")
    def book_session(
        self,
        user: User,
        trainer_id: str,
        scheduled_at: datetime,
        duration: int,
        session_type: SessionType = SessionType.VIRTUAL,
        notes: Optional[str] = None,
    ) -> TrainingSession:
        """
        Book a session with a trainer.

        Args:
            user: Authenticated booking user
            trainer_id: Trainer profile id
            scheduled_at: Requested start (naive values are UTC)
            duration: Minutes, already validated to [30, 180]
            session_type: Delivery type
            notes: Optional free text

        Returns:
            The created session in SCHEDULED status

        Raises:
            NotFoundException: Trainer does not exist
            TrainerUnavailableException: Trainer is not accepting bookings
            SlotUnavailableException: An active session blocks the window
        """
        start = ensure_utc(scheduled_at)
        self.log_operation(
            "book_session",
            user_id=user.id,
            trainer_id=trainer_id,
            scheduled_at=start.isoformat(),
            duration=duration,
        )

        try:
            with self.session_repository.transaction():
                trainer = self._lock_bookable_trainer(trainer_id)
                self._ensure_slot_free(trainer.id, start, duration)
                session = self.session_repository.create(
                    user_id=user.id,
                    trainer_id=trainer.id,
                    scheduled_at=start,
                    duration=duration,
                    type=SessionType(session_type).value,
                    price=compute_session_price(trainer.hourly_rate, duration),
                    currency=trainer.currency,
                    status=SessionStatus.SCHEDULED.value,
                    notes=notes,
                )
        except (IntegrityError, OperationalError, RepositoryException) as exc:
            if self._is_write_conflict(exc):
                self._raise_slot_unavailable(trainer_id, start, duration, exc)
            raise

        prometheus_metrics.inc_booking_outcome("created")
        self.logger.info(
            f"Session {session.id} booked with trainer {trainer_id} at {start.isoformat()}"
        )
        return session

    def _lock_bookable_trainer(self, trainer_id: str) -> TrainerProfile:
        trainer = self.trainer_repository.get_for_update(trainer_id)
        if trainer is None:
            raise NotFoundException("Trainer not found", details={"trainer_id": trainer_id})
        if not trainer.is_available:
            prometheus_metrics.inc_booking_outcome("trainer_unavailable")
            raise TrainerUnavailableException(trainer_id)
        return trainer

    def _ensure_slot_free(self, trainer_id: str, start: datetime, duration: int) -> None:
        conflicts = self.session_repository.find_conflicting_sessions(trainer_id, start, duration)
        if conflicts:
            prometheus_metrics.inc_booking_outcome("slot_unavailable")
            raise SlotUnavailableException(
                details={
                    "trainer_id": trainer_id,
                    "conflicting_session_ids": [s.id for s in conflicts],
                }
            )

    def _raise_slot_unavailable(
        self, trainer_id: str, start: datetime, duration: int, exc: BaseException
    ) -> NoReturn:
        self.logger.warning(
            f"Concurrent booking rejected for trainer {trainer_id} at {start.isoformat()}: {exc}"
        )
        prometheus_metrics.inc_booking_outcome("slot_unavailable")
        raise SlotUnavailableException(
            details={"trainer_id": trainer_id, "scheduled_at": start.isoformat(), "duration": duration}
        ) from exc

    # Queries

    @BaseService.measure_operation("list_user_sessions")
    def list_user_sessions(
        self,
        user: User,
        status: Optional[SessionStatus] = None,
        upcoming: bool = False,
        now: Optional[datetime] = None,
    ) -> List[TrainingSession]:
        """
        Sessions booked by ``user``, newest first.

        ``upcoming`` restricts to SCHEDULED sessions starting at or after
        ``now`` and takes precedence over ``status``.
        """
        return self.session_repository.list_for_user(
            user.id,
            status=SessionStatus(status).value if status else None,
            upcoming_after=(ensure_utc(now) if now else utc_now()) if upcoming else None,
        )

    # Lifecycle transitions

    @BaseService.measure_operation("cancel_session")
    def cancel_session(
        self, user: User, session_id: str, now: Optional[datetime] = None
    ) -> TrainingSession:
        """
        Cancel a session on behalf of its owner.

        Checks run in order: existence (404), ownership (403), status must be
        SCHEDULED (400), then the cancellation window: rejected when fewer
        than 24 hours remain. Exactly 24 hours ahead is still allowed.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        self.log_operation("cancel_session", user_id=user.id, session_id=session_id)

        with self.transaction():
            session = self.session_repository.get_for_update(session_id)
            if session is None:
                raise NotFoundException("Session not found", details={"session_id": session_id})
            if not session.is_owned_by(user.id):
                raise ForbiddenException("Unauthorized to cancel this session")
            if session.status != SessionStatus.SCHEDULED.value:
                raise InvalidSessionStateException(
                    "Can only cancel scheduled sessions", current_status=session.status
                )

            hours_until = session.hours_until_start(now)
            if hours_until < CANCELLATION_WINDOW_HOURS:
                raise TooLateToCancelException(CANCELLATION_WINDOW_HOURS, hours_until)

            session.cancel()

        return session

    @BaseService.measure_operation("start_session")
    def start_session(self, session_id: str, now: Optional[datetime] = None) -> TrainingSession:
        """SCHEDULED -> IN_PROGRESS. Driven by operators or jobs, not by clients."""
        with self.transaction():
            session = self._get_locked_session(session_id)
            session.start(now)
        self.log_operation("start_session", session_id=session_id)
        return session

    @BaseService.measure_operation("complete_session")
    def complete_session(self, session_id: str, now: Optional[datetime] = None) -> TrainingSession:
        """IN_PROGRESS -> COMPLETED."""
        with self.transaction():
            session = self._get_locked_session(session_id)
            session.complete(now)
        self.log_operation("complete_session", session_id=session_id)
        return session

    def _get_locked_session(self, session_id: str) -> TrainingSession:
        session = self.session_repository.get_for_update(session_id)
        if session is None:
            raise NotFoundException("Session not found", details={"session_id": session_id})
        return session
