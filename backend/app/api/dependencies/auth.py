# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

Every protected route resolves its caller through ``get_current_user``:
bearer token -> access-token claims -> verified user row. Booking routes
add ``require_subscription`` on top.
"""

import logging
from typing import Callable, Optional, Sequence

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ...auth import InvalidTokenError, decode_access_token
from ...core.config import settings
from ...core.exceptions import SubscriptionRequiredException, UnauthorizedException
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _resolve_user(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
    except InvalidTokenError as exc:
        logger.debug(f"Rejected access token: {exc}")
        raise UnauthorizedException("Invalid or expired token", code="INVALID_TOKEN") from exc

    user = RepositoryFactory.create_user_repository(db).get_by_id(payload["sub"])
    if user is None:
        raise UnauthorizedException("User not found", code="INVALID_TOKEN")
    if not user.verified:
        raise UnauthorizedException(
            "Please verify your email address first", code="EMAIL_NOT_VERIFIED"
        )
    return user


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme_optional),
    db: Session = Depends(get_db),
) -> User:
    """
    Get the current authenticated user.

    Raises:
        UnauthorizedException: Token absent, malformed, expired or of the
            wrong type, or its user is gone or unverified
    """
    if not token:
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")
    return _resolve_user(token, db)


def require_subscription(
    tiers: Optional[Sequence[str]] = None,
) -> Callable[..., User]:
    """
    Dependency factory gating a route on the caller's subscription tier.

    Defaults to the tiers configured in ``BOOKING_SUBSCRIPTION_TIERS``.
    """
    allowed = [t.upper() for t in (tiers or settings.booking_subscription_tiers)]

    def _check(current_user: User = Depends(get_current_user)) -> User:
        tier = current_user.subscription_tier
        if tier not in allowed:
            raise SubscriptionRequiredException(required_tiers=allowed, current_tier=tier)
        return current_user

    return _check
