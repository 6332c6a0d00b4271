# backend/app/services/auth_service.py
"""
Authentication Service for the Disciplix platform

Handles registration, credential checks, token issuance, email
verification, password reset and profile completion. Keeps business
logic out of the routes.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth import (
    DUMMY_HASH_FOR_TIMING_ATTACK,
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    generate_one_time_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from ..core.config import settings
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, utc_now
from ..models.auth_token import AuthToken, TokenPurpose
from ..models.profile import FitnessGoal, UserProfile
from ..models.subscription import Subscription, SubscriptionStatus, SubscriptionTier
from ..models.user import User
from ..repositories.auth_token_repository import AuthTokenRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.auth import CompleteProfileRequest
from .base import BaseService
from .email import EmailService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
FORGOT_PASSWORD_MESSAGE = "If the email exists, a reset link has been sent."


@dataclass
class IssuedTokens:
    access_token: str
    refresh_token: str
    expires_in: int


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(
        self,
        db: Session,
        email_service: Optional[EmailService] = None,
        user_repository: Optional[UserRepository] = None,
        token_repository: Optional[AuthTokenRepository] = None,
    ) -> None:
        super().__init__(db)
        self.email_service = email_service or EmailService(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.token_repository = (
            token_repository or RepositoryFactory.create_auth_token_repository(db)
        )

    # Registration and login

    @BaseService.measure_operation("register_user")
    def register_user(self, email: str, password: str, name: str) -> User:
        """
        Create an unverified user with a FREE subscription and an empty profile,
        then email a verification link.

        Raises:
            ConflictException: Email already registered
            ServiceException: The verification email could not be sent
        """
        email = email.strip().lower()
        self.log_operation("register_user", email=email)

        if self.user_repository.email_exists(email):
            raise ConflictException("User with this email already exists", code="EMAIL_EXISTS")

        try:
            with self.transaction():
                user = User(
                    email=email,
                    hashed_password=get_password_hash(password),
                    name=name,
                    verified=False,
                )
                user.subscription = Subscription(
                    tier=SubscriptionTier.FREE.value, status=SubscriptionStatus.ACTIVE.value
                )
                user.profile = UserProfile()
                self.db.add(user)
                self.db.flush()
                raw_token = self._issue_token(
                    user,
                    TokenPurpose.EMAIL_VERIFICATION,
                    timedelta(hours=settings.email_verification_ttl_hours),
                )
        except ServiceException as exc:
            # Lost a race with a concurrent registration for the same email
            if isinstance(exc.__cause__, IntegrityError):
                raise ConflictException(
                    "User with this email already exists", code="EMAIL_EXISTS"
                ) from exc
            raise

        self.email_service.send_verification_email(user.email, user.name, raw_token)
        self.logger.info(f"Registered user {user.id}")
        return user

    @BaseService.measure_operation("authenticate_user")
    def authenticate_user(self, email: str, password: str) -> User:
        """
        Check credentials.

        Raises:
            UnauthorizedException: Unknown email, wrong password, or unverified account
        """
        user = self.user_repository.get_by_email(email)
        if user is None:
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            raise UnauthorizedException(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")
        if not verify_password(password, user.hashed_password):
            raise UnauthorizedException(INVALID_CREDENTIALS, code="INVALID_CREDENTIALS")
        if not user.verified:
            raise UnauthorizedException(
                "Please verify your email address first", code="EMAIL_NOT_VERIFIED"
            )
        return user

    def issue_tokens(self, user: User) -> IssuedTokens:
        claims = {"sub": user.id, "email": user.email}
        return IssuedTokens(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token({"sub": user.id}),
            expires_in=settings.access_token_expire_minutes * 60,
        )

    @BaseService.measure_operation("refresh_access_token")
    def refresh_access_token(self, refresh_token: Optional[str]) -> IssuedTokens:
        """
        Exchange a refresh token for a new access token.

        The refresh token itself is returned unchanged.
        """
        if not refresh_token:
            raise UnauthorizedException("Refresh token is required")
        try:
            payload = decode_refresh_token(refresh_token)
        except InvalidTokenError as exc:
            raise UnauthorizedException("Invalid refresh token") from exc

        user = self.user_repository.get_by_id(payload["sub"])
        if user is None or not user.verified:
            raise UnauthorizedException("Invalid refresh token")

        return IssuedTokens(
            access_token=create_access_token({"sub": user.id, "email": user.email}),
            refresh_token=refresh_token,
            expires_in=settings.access_token_expire_minutes * 60,
        )

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return self.user_repository.get_by_id(user_id)

    # Email verification

    @BaseService.measure_operation("verify_email")
    def verify_email(self, token: str, now: Optional[datetime] = None) -> User:
        with self.transaction():
            record = self._consume_token(token, TokenPurpose.EMAIL_VERIFICATION, now)
            user = record.user
            user.mark_verified()
        return user

    @BaseService.measure_operation("resend_verification")
    def resend_verification(self, email: str) -> None:
        user = self.user_repository.get_by_email(email)
        if user is None:
            raise NotFoundException("User not found")
        if user.verified:
            raise ValidationException("Email is already verified", code="ALREADY_VERIFIED")

        with self.transaction():
            raw_token = self._issue_token(
                user,
                TokenPurpose.EMAIL_VERIFICATION,
                timedelta(hours=settings.email_verification_ttl_hours),
            )
        self.email_service.send_verification_email(user.email, user.name, raw_token)

    # Password reset

    @BaseService.measure_operation("request_password_reset")
    def request_password_reset(self, email: str) -> str:
        """
        Email a reset link when the account exists.

        Unknown emails get the same answer as known ones.
        """
        user = self.user_repository.get_by_email(email)
        if user is None:
            self.logger.info("Password reset requested for unknown email")
            return FORGOT_PASSWORD_MESSAGE

        with self.transaction():
            raw_token = self._issue_token(
                user,
                TokenPurpose.PASSWORD_RESET,
                timedelta(minutes=settings.password_reset_ttl_minutes),
            )
        self.email_service.send_password_reset_email(user.email, user.name, raw_token)
        return FORGOT_PASSWORD_MESSAGE

    @BaseService.measure_operation("reset_password")
    def reset_password(self, token: str, new_password: str, now: Optional[datetime] = None) -> User:
        with self.transaction():
            record = self._consume_token(token, TokenPurpose.PASSWORD_RESET, now)
            user = record.user
            user.hashed_password = get_password_hash(new_password)
        self.log_operation("reset_password", user_id=user.id)
        return user

    # Profile

    @BaseService.measure_operation("complete_profile")
    def complete_profile(self, user: User, data: CompleteProfileRequest) -> User:
        """Upsert the fitness profile and append any goals."""
        with self.transaction():
            profile = user.profile
            if profile is None:
                profile = UserProfile(user_id=user.id)
                self.db.add(profile)
                user.profile = profile

            for field in ("age", "height", "weight", "activity_level"):
                value = getattr(data, field)
                if value is not None:
                    setattr(profile, field, value)

            for goal in data.goals:
                self.db.add(
                    FitnessGoal(
                        user_id=user.id,
                        type=goal.type,
                        title=goal.title,
                        target_value=goal.target_value,
                        unit=goal.unit,
                        deadline=ensure_utc(goal.deadline),
                    )
                )
        self.log_operation("complete_profile", user_id=user.id, goals_added=len(data.goals))
        return user

    # One-time tokens

    def _issue_token(self, user: User, purpose: TokenPurpose, ttl: timedelta) -> str:
        """Invalidate outstanding tokens of this purpose and create a fresh one."""
        self.token_repository.invalidate_for_user(user.id, purpose.value)
        raw_token = generate_one_time_token()
        try:
            self.token_repository.create(
                user_id=user.id,
                token_hash=hash_token(raw_token),
                purpose=purpose.value,
                expires_at=utc_now() + ttl,
            )
        except RepositoryException:
            self.logger.error(f"Could not store {purpose.value} token for user {user.id}")
            raise
        return raw_token

    def _consume_token(
        self, raw_token: str, purpose: TokenPurpose, now: Optional[datetime]
    ) -> AuthToken:
        record = self.token_repository.get_by_hash(hash_token(raw_token), purpose.value)
        if record is None or not record.is_usable(now):
            raise ValidationException("Invalid or expired token", code="INVALID_TOKEN")
        record.consume(now)
        return record
