# backend/app/repositories/user_repository.py
"""
User Repository for the Disciplix platform

Handles User data access: lookups by id/email and eager loading of the
subscription used by the booking gate.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        """Initialize with User model."""
        super().__init__(db, User)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(User.subscription))

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup; emails are stored lower-cased."""
        if not email:
            return None
        try:
            return (
                self.db.query(User)
                .options(joinedload(User.subscription))
                .filter(User.email == email.strip().lower())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}")

    def email_exists(self, email: str) -> bool:
        return self.exists(email=email.strip().lower())
