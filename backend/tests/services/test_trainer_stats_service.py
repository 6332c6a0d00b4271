from contextlib import contextmanager
from datetime import timedelta
from decimal import Decimal
import json

import pytest

from app.commands.trainer_stats import main, recompute
from app.core.exceptions import NotFoundException
from app.models.review import Review
from app.models.training_session import SessionStatus
from app.services.trainer_stats_service import TrainerStatsService


@pytest.fixture
def add_review(db, create_session, future_slot):
    def _add(user, trainer, rating, days_ago=1, status=SessionStatus.COMPLETED):
        session = create_session(
            user, trainer, future_slot - timedelta(days=days_ago + 5), status=status
        )
        review = Review(session_id=session.id, user_id=user.id, trainer_id=trainer.id, rating=rating)
        db.add(review)
        db.commit()
        return review

    return _add


@pytest.fixture
def session_factory(db):
    @contextmanager
    def _factory():
        yield db

    return _factory


class TestTrainerStatsService:
    def test_recompute_from_reviews_and_completed_sessions(
        self, db, test_client_user, test_trainer, create_session, add_review, future_slot
    ):
        add_review(test_client_user, test_trainer, 5)
        add_review(test_client_user, test_trainer, 4)
        add_review(test_client_user, test_trainer, 4)
        create_session(test_client_user, test_trainer, future_slot)  # scheduled, not counted

        stats = TrainerStatsService(db).recompute(test_trainer.id)

        assert stats.rating == Decimal("4.33")
        assert stats.review_count == 3
        assert stats.total_sessions == 3
        db.refresh(test_trainer)
        assert test_trainer.review_count == 3
        assert test_trainer.total_sessions == 3
        assert Decimal(str(test_trainer.rating)) == Decimal("4.33")

    def test_recompute_is_idempotent(self, db, test_client_user, test_trainer, add_review):
        add_review(test_client_user, test_trainer, 3)
        service = TrainerStatsService(db)

        assert service.recompute(test_trainer.id) == service.recompute(test_trainer.id)

    def test_trainer_without_reviews_resets_to_zero(self, db, create_trainer):
        trainer = create_trainer(rating=Decimal("4.90"), total_sessions=12)

        stats = TrainerStatsService(db).recompute(trainer.id)

        assert stats.rating == Decimal("0.00")
        assert stats.review_count == 0
        assert stats.total_sessions == 0

    def test_unknown_trainer(self, db):
        with pytest.raises(NotFoundException):
            TrainerStatsService(db).recompute("01HF4G12ABCDEF3456789XYZAB")

    def test_recompute_all(self, db, create_trainer):
        first, second = create_trainer(name="First"), create_trainer(name="Second")

        results = TrainerStatsService(db).recompute_all()

        assert {r.trainer_id for r in results} == {first.id, second.id}


class TestTrainerStatsCommand:
    def test_recompute_single_trainer(
        self, session_factory, test_client_user, test_trainer, add_review
    ):
        add_review(test_client_user, test_trainer, 2)

        results = recompute(test_trainer.id, session_factory=session_factory)

        assert len(results) == 1
        assert results[0].rating == Decimal("2.00")

    def test_main_prints_json(self, capsys, session_factory, test_client_user, test_trainer, add_review):
        add_review(test_client_user, test_trainer, 5)

        exit_code = main(["recompute", "--trainer-id", test_trainer.id], session_factory)

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == [
            {
                "trainer_id": test_trainer.id,
                "rating": "5.00",
                "review_count": 1,
                "total_sessions": 1,
            }
        ]

    def test_main_unknown_trainer_fails(self, session_factory):
        assert main(["recompute", "--trainer-id", "missing"], session_factory) == 1

    def test_main_without_command_fails(self, session_factory):
        assert main([], session_factory) == 1
