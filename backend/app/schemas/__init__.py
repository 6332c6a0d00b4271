# backend/app/schemas/__init__.py
"""
Pydantic schemas for the Disciplix platform.

Request models forbid unknown fields; response models are emitted in
camelCase.
"""

from .auth import (
    AccessTokenPayload,
    CompleteProfileRequest,
    EmailRequest,
    GoalInput,
    LoginPayload,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenRequest,
    UserEnvelope,
    UserResponse,
)
from .base_responses import ApiResponse, MessageResponse, PaginationMeta
from .main_responses import HealthResponse
from .trainer import (
    ReviewResponse,
    SpecialtiesEnvelope,
    TrainerDetailEnvelope,
    TrainerDetailResponse,
    TrainerFilterParams,
    TrainerListEnvelope,
    TrainerSummaryResponse,
)
from .training_session import (
    SessionBookingRequest,
    SessionEnvelope,
    SessionListEnvelope,
    SessionResponse,
)

__all__ = [
    # Envelopes
    "ApiResponse",
    "MessageResponse",
    "PaginationMeta",
    "HealthResponse",
    # Auth
    "RegisterRequest",
    "LoginRequest",
    "EmailRequest",
    "TokenRequest",
    "ResetPasswordRequest",
    "GoalInput",
    "CompleteProfileRequest",
    "UserResponse",
    "UserEnvelope",
    "LoginPayload",
    "AccessTokenPayload",
    # Trainers
    "TrainerFilterParams",
    "TrainerSummaryResponse",
    "TrainerDetailResponse",
    "ReviewResponse",
    "TrainerListEnvelope",
    "TrainerDetailEnvelope",
    "SpecialtiesEnvelope",
    # Sessions
    "SessionBookingRequest",
    "SessionResponse",
    "SessionEnvelope",
    "SessionListEnvelope",
]
