from datetime import datetime, timedelta, timezone

import pytest

from app.models.review import Review
from app.models.training_session import SessionStatus
from app.repositories.review_repository import ReviewRepository
from app.repositories.training_session_repository import TrainingSessionRepository

BASE = datetime(2026, 1, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def add_review(db, create_session):
    def _add(user, trainer, rating, created_at):
        session = create_session(user, trainer, created_at - timedelta(days=1))
        review = Review(
            session_id=session.id,
            user_id=user.id,
            trainer_id=trainer.id,
            rating=rating,
            comment=f"{rating} stars",
            created_at=created_at,
        )
        db.add(review)
        db.commit()
        return review

    return _add


class TestReviewRepository:
    def test_recent_reviews_limited_per_trainer(
        self, db, test_client_user, test_trainer, create_trainer, add_review
    ):
        other = create_trainer(name="Other Trainer")
        reviews = [
            add_review(test_client_user, test_trainer, 5 - (i % 3), BASE + timedelta(days=i))
            for i in range(5)
        ]
        lone = add_review(test_client_user, other, 4, BASE)

        recent = ReviewRepository(db).recent_for_trainers(
            [test_trainer.id, other.id, "no-reviews"], per_trainer=3
        )

        assert [r.id for r in recent[test_trainer.id]] == [r.id for r in reviews[::-1][:3]]
        assert [r.id for r in recent[other.id]] == [lone.id]
        assert recent["no-reviews"] == []

    def test_recent_reviews_for_no_trainers(self, db):
        assert ReviewRepository(db).recent_for_trainers([], per_trainer=3) == {}

    def test_list_for_trainer_newest_first_with_author(
        self, db, test_client_user, test_trainer, add_review
    ):
        older = add_review(test_client_user, test_trainer, 3, BASE)
        newer = add_review(test_client_user, test_trainer, 5, BASE + timedelta(hours=1))

        reviews = ReviewRepository(db).list_for_trainer(test_trainer.id)

        assert [r.id for r in reviews] == [newer.id, older.id]
        assert reviews[0].user.name == "Casey Client"

    def test_aggregate(self, db, test_client_user, test_trainer, add_review):
        add_review(test_client_user, test_trainer, 5, BASE)
        add_review(test_client_user, test_trainer, 2, BASE + timedelta(hours=1))

        aggregate = ReviewRepository(db).aggregate_for_trainer(test_trainer.id)

        assert aggregate == {"review_count": 2, "raw_average": 3.5}

    def test_aggregate_without_reviews(self, db, test_trainer):
        assert ReviewRepository(db).aggregate_for_trainer(test_trainer.id) == {
            "review_count": 0,
            "raw_average": 0.0,
        }


class TestTrainingSessionRepository:
    def test_conflicts_returned_earliest_first(
        self, db, test_client_user, test_trainer, create_session, future_slot
    ):
        later = create_session(test_client_user, test_trainer, future_slot + timedelta(minutes=30))
        earlier = create_session(test_client_user, test_trainer, future_slot - timedelta(minutes=60))

        conflicts = TrainingSessionRepository(db).find_conflicting_sessions(
            test_trainer.id, future_slot, 60
        )

        assert [s.id for s in conflicts] == [earlier.id, later.id]

    def test_active_sessions_for_trainer_soonest_first(
        self, db, test_client_user, test_trainer, create_session, future_slot
    ):
        second = create_session(test_client_user, test_trainer, future_slot + timedelta(days=1))
        first = create_session(test_client_user, test_trainer, future_slot)
        create_session(
            test_client_user,
            test_trainer,
            future_slot + timedelta(days=2),
            status=SessionStatus.CANCELLED,
        )

        sessions = TrainingSessionRepository(db).list_active_for_trainer(test_trainer.id, limit=10)

        assert [s.id for s in sessions] == [first.id, second.id]

    def test_active_sessions_respect_limit(
        self, db, test_client_user, test_trainer, create_session, future_slot
    ):
        for i in range(4):
            create_session(test_client_user, test_trainer, future_slot + timedelta(days=i))
        sessions = TrainingSessionRepository(db).list_active_for_trainer(test_trainer.id, limit=2)
        assert len(sessions) == 2

    def test_count_completed(self, db, test_client_user, test_trainer, create_session, future_slot):
        create_session(test_client_user, test_trainer, future_slot, status=SessionStatus.COMPLETED)
        create_session(
            test_client_user,
            test_trainer,
            future_slot + timedelta(days=1),
            status=SessionStatus.COMPLETED,
        )
        create_session(test_client_user, test_trainer, future_slot + timedelta(days=2))
        assert TrainingSessionRepository(db).count_completed_for_trainer(test_trainer.id) == 2
