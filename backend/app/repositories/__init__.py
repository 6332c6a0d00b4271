# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the Disciplix platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- TrainerRepository: Directory queries and row-locked trainer reads
- TrainingSessionRepository: Session lookups and conflict detection

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_training_session_repository(db)
    conflicts = repository.find_conflicting_sessions(trainer_id, start, 60)
"""

from .auth_token_repository import AuthTokenRepository
from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .review_repository import ReviewRepository
from .trainer_repository import TrainerDirectoryFilters, TrainerRepository
from .training_session_repository import TrainingSessionRepository
from .user_repository import UserRepository

__all__ = [
    "AuthTokenRepository",
    "BaseRepository",
    "RepositoryFactory",
    "ReviewRepository",
    "TrainerDirectoryFilters",
    "TrainerRepository",
    "TrainingSessionRepository",
    "UserRepository",
]
