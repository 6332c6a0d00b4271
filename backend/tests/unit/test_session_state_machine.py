"""Lifecycle transitions on the TrainingSession model."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from app.core.exceptions import InvalidSessionStateException
from app.models.training_session import SessionStatus, TrainingSession

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _session(status: SessionStatus = SessionStatus.SCHEDULED, **overrides) -> TrainingSession:
    fields = dict(
        user_id="01HF4G12ABCDEF3456789USER1",
        trainer_id="01HF4G12ABCDEF3456789TRNR1",
        scheduled_at=NOW + timedelta(days=2),
        duration=60,
        price=Decimal("90.00"),
        currency="USD",
        status=status.value,
    )
    fields.update(overrides)
    return TrainingSession(**fields)


def test_cancel_scheduled_session_only_flips_status():
    session = _session()
    session.cancel()
    assert session.status == SessionStatus.CANCELLED.value
    assert session.updated_at is None
    assert session.started_at is None


def test_start_then_complete():
    session = _session()
    session.start(NOW)
    assert session.status == SessionStatus.IN_PROGRESS.value
    assert session.started_at == NOW

    session.complete(NOW + timedelta(hours=1))
    assert session.status == SessionStatus.COMPLETED.value
    assert session.completed_at == NOW + timedelta(hours=1)


@pytest.mark.parametrize(
    "status",
    [SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED, SessionStatus.CANCELLED],
)
def test_cancel_rejected_outside_scheduled(status):
    session = _session(status)
    with pytest.raises(InvalidSessionStateException) as exc_info:
        session.cancel()
    assert exc_info.value.status_code == 400
    assert exc_info.value.details["current_status"] == status.value
    assert session.status == status.value


def test_complete_requires_in_progress():
    with pytest.raises(InvalidSessionStateException):
        _session().complete(NOW)


def test_start_requires_scheduled():
    with pytest.raises(InvalidSessionStateException):
        _session(SessionStatus.CANCELLED).start(NOW)


def test_naive_start_is_read_as_utc():
    session = _session(scheduled_at=datetime(2026, 3, 4, 12, 0))
    assert session.starts_at == datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)
    assert session.ends_at == datetime(2026, 3, 4, 13, 0, tzinfo=timezone.utc)


def test_hours_until_start():
    session = _session(scheduled_at=NOW + timedelta(hours=36))
    assert session.hours_until_start(NOW) == pytest.approx(36.0)


def test_ownership():
    session = _session()
    assert session.is_owned_by("01HF4G12ABCDEF3456789USER1")
    assert not session.is_owned_by("someone-else")
