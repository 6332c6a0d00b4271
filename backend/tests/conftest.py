# backend/tests/conftest.py
"""
Shared fixtures for the Disciplix backend tests.

Every test gets its own in-memory SQLite database. The app's database
and email dependencies are overridden so route tests and direct service
tests see the same session and the same console outbox.
"""

import os

# Must be set before anything imports app.core.config
os.environ["ENVIRONMENT"] = "test"
os.environ["IS_TESTING"] = "true"
os.environ["SECRET_KEY"] = "test-access-token-secret"
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-token-secret"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["EMAIL_PROVIDER"] = "console"
os.environ["CLIENT_URL"] = "http://localhost:3000"

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Iterator, Optional, Sequence

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
import ulid

from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_email_service
from app.auth import create_access_token, get_password_hash
from app.core.timezone_utils import utc_now
from app.database import Base
from app.main import app
from app.models.profile import UserProfile
from app.models.subscription import Subscription, SubscriptionStatus, SubscriptionTier
from app.models.trainer import TrainerProfile
from app.models.training_session import SessionStatus, SessionType, TrainingSession
from app.models.user import User
from app.services.email import EmailService


@pytest.fixture(scope="function")
def db() -> Iterator[Session]:
    """Fresh in-memory database and session for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestSessionLocal = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def email_service(db: Session) -> EmailService:
    """Console email service; sent messages land in ``email_service.outbox``."""
    return EmailService(db, provider="console")


@pytest.fixture
def client(db: Session, email_service: EmailService) -> Iterator[TestClient]:
    """Create a test client with the test database."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service

    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def test_password() -> str:
    """Standard test password for all test users."""
    return "TestPassword123!"


@pytest.fixture
def create_user(db: Session, test_password: str) -> Callable[..., User]:
    """Factory for users with a subscription and an empty profile."""
    hashed = get_password_hash(test_password)

    def _create(
        email: Optional[str] = None,
        name: str = "Test Client",
        tier: SubscriptionTier = SubscriptionTier.PREMIUM,
        verified: bool = True,
    ) -> User:
        user = User(
            email=email or f"user-{str(ulid.ULID()).lower()}@example.com",
            hashed_password=hashed,
            name=name,
            verified=verified,
        )
        user.subscription = Subscription(
            tier=tier.value, status=SubscriptionStatus.ACTIVE.value
        )
        user.profile = UserProfile()
        db.add(user)
        db.commit()
        return user

    return _create


@pytest.fixture
def create_trainer(db: Session, create_user: Callable[..., User]) -> Callable[..., TrainerProfile]:
    """Factory for trainer profiles, verified and available unless told otherwise."""

    def _create(
        name: str = "Alex Strong",
        hourly_rate: Decimal = Decimal("90.00"),
        specialties: Sequence[str] = ("strength",),
        bio: Optional[str] = None,
        experience: int = 5,
        rating: Decimal = Decimal("0"),
        total_sessions: int = 0,
        is_verified: bool = True,
        is_available: bool = True,
    ) -> TrainerProfile:
        user = create_user(name=name, tier=SubscriptionTier.FREE)
        trainer = TrainerProfile(
            user_id=user.id,
            bio=bio,
            experience=experience,
            hourly_rate=hourly_rate,
            currency="USD",
            specialties=list(specialties),
            certifications=[],
            languages=["English"],
            availability={"monday": ["09:00-17:00"]},
            is_verified=is_verified,
            is_available=is_available,
            rating=rating,
            total_sessions=total_sessions,
        )
        db.add(trainer)
        db.commit()
        return trainer

    return _create


@pytest.fixture
def create_session(db: Session) -> Callable[..., TrainingSession]:
    """Insert a session directly, bypassing the booking rules."""

    def _create(
        user: User,
        trainer: TrainerProfile,
        scheduled_at: datetime,
        duration: int = 60,
        status: SessionStatus = SessionStatus.SCHEDULED,
    ) -> TrainingSession:
        session = TrainingSession(
            user_id=user.id,
            trainer_id=trainer.id,
            scheduled_at=scheduled_at,
            duration=duration,
            type=SessionType.VIRTUAL.value,
            price=Decimal("90.00"),
            currency="USD",
            status=status.value,
        )
        db.add(session)
        db.commit()
        return session

    return _create


@pytest.fixture
def test_client_user(create_user: Callable[..., User]) -> User:
    """Verified PREMIUM user allowed to book."""
    return create_user(email="client@example.com", name="Casey Client")


@pytest.fixture
def free_user(create_user: Callable[..., User]) -> User:
    return create_user(email="free@example.com", name="Frankie Free", tier=SubscriptionTier.FREE)


@pytest.fixture
def test_trainer(create_trainer: Callable[..., TrainerProfile]) -> TrainerProfile:
    return create_trainer()


@pytest.fixture
def make_auth_headers() -> Callable[[User], dict]:
    """Bearer headers for any user."""

    def _headers(user: User) -> dict:
        token = create_access_token(data={"sub": user.id, "email": user.email})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def auth_headers(test_client_user: User, make_auth_headers: Callable[[User], dict]) -> dict:
    """Get auth headers for the default booking user."""
    return make_auth_headers(test_client_user)


@pytest.fixture
def future_slot() -> datetime:
    """A whole-minute UTC instant three days from now."""
    return (utc_now() + timedelta(days=3)).replace(second=0, microsecond=0)
