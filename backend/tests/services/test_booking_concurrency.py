"""Concurrent bookings against a file-backed SQLite database."""

from datetime import timedelta
import threading
import time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import SlotUnavailableException
from app.database import Base, enable_sqlite_write_locks
from app.models.training_session import TrainingSession
from app.repositories.training_session_repository import TrainingSessionRepository
from app.services.booking_service import BookingService


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'bookings.db'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    enable_sqlite_write_locks(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    """Replaces the shared in-memory session so the fixtures write to the file database."""
    session = session_factory()
    yield session
    session.close()


def test_overlapping_bookings_from_two_threads(
    monkeypatch, db, session_factory, test_client_user, test_trainer, future_slot
):
    check_conflicts = TrainingSessionRepository.find_conflicting_sessions

    def slow_conflict_check(self, *args, **kwargs):
        found = check_conflicts(self, *args, **kwargs)
        # Hold the gap between the check and the insert open
        time.sleep(0.3)
        return found

    monkeypatch.setattr(
        TrainingSessionRepository, "find_conflicting_sessions", slow_conflict_check
    )
    ready = threading.Barrier(2)
    outcomes = []

    def book(offset_minutes: int) -> None:
        session = session_factory()
        try:
            ready.wait()
            BookingService(session).book_session(
                test_client_user,
                test_trainer.id,
                future_slot + timedelta(minutes=offset_minutes),
                60,
            )
            outcomes.append("booked")
        except SlotUnavailableException:
            outcomes.append("slot_unavailable")
        finally:
            session.close()

    threads = [threading.Thread(target=book, args=(offset,)) for offset in (0, 30)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes) == ["booked", "slot_unavailable"]
    assert db.query(TrainingSession).count() == 1
