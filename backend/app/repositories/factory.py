# backend/app/repositories/factory.py
"""
Repository Factory for the Disciplix platform

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .auth_token_repository import AuthTokenRepository
    from .review_repository import ReviewRepository
    from .trainer_repository import TrainerRepository
    from .training_session_repository import TrainingSessionRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services can be tested with
    swapped implementations.
    """

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_trainer_repository(db: Session) -> "TrainerRepository":
        """Create repository for trainer directory and booking locks."""
        from .trainer_repository import TrainerRepository

        return TrainerRepository(db)

    @staticmethod
    def create_training_session_repository(db: Session) -> "TrainingSessionRepository":
        """Create repository for training sessions and conflict checks."""
        from .training_session_repository import TrainingSessionRepository

        return TrainingSessionRepository(db)

    @staticmethod
    def create_review_repository(db: Session) -> "ReviewRepository":
        from .review_repository import ReviewRepository

        return ReviewRepository(db)

    @staticmethod
    def create_auth_token_repository(db: Session) -> "AuthTokenRepository":
        from .auth_token_repository import AuthTokenRepository

        return AuthTokenRepository(db)
