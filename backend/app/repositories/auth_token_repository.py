# backend/app/repositories/auth_token_repository.py
"""
Repository for one-time auth tokens (email verification, password reset).
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import utc_now
from ..models.auth_token import AuthToken
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AuthTokenRepository(BaseRepository[AuthToken]):
    def __init__(self, db: Session):
        super().__init__(db, AuthToken)

    def get_by_hash(self, token_hash: str, purpose: str) -> Optional[AuthToken]:
        try:
            return (
                self.db.query(AuthToken)
                .options(joinedload(AuthToken.user))
                .filter(AuthToken.token_hash == token_hash, AuthToken.purpose == purpose)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error looking up auth token: {str(e)}")
            raise RepositoryException(f"Failed to look up token: {str(e)}")

    def invalidate_for_user(self, user_id: str, purpose: str) -> int:
        """Mark every outstanding token of the given purpose as used."""
        try:
            return (
                self.db.query(AuthToken)
                .filter(
                    AuthToken.user_id == user_id,
                    AuthToken.purpose == purpose,
                    AuthToken.used_at.is_(None),
                )
                .update({AuthToken.used_at: utc_now()}, synchronize_session="fetch")
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error invalidating tokens for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to invalidate tokens: {str(e)}")
