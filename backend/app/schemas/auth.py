"""Request and response schemas for the auth endpoints."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Literal, Optional

from pydantic import EmailStr, Field, field_validator

from ..core.constants import MIN_NAME_LENGTH, MIN_PASSWORD_LENGTH
from ._strict_base import StrictRequestModel
from .base import StandardizedModel, UTCDateTime

if TYPE_CHECKING:
    from ..models.user import User


class RegisterRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)
    name: str = Field(..., min_length=MIN_NAME_LENGTH, max_length=100)
    agree_to_terms: bool

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("agree_to_terms")
    @classmethod
    def _must_agree(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must agree to the terms and conditions")
        return v


class LoginRequest(StrictRequestModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    remember_me: bool = False


class EmailRequest(StrictRequestModel):
    email: EmailStr


class TokenRequest(StrictRequestModel):
    token: str = Field(..., min_length=1)


class ResetPasswordRequest(StrictRequestModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)


class GoalInput(StrictRequestModel):
    type: str = Field(..., min_length=1, max_length=50)
    title: str = Field(..., min_length=1, max_length=200)
    target_value: Optional[float] = None
    unit: Optional[str] = Field(None, max_length=20)
    deadline: Optional[datetime] = None


class CompleteProfileRequest(StrictRequestModel):
    age: Optional[int] = Field(None, ge=13, le=120)
    height: Optional[float] = Field(None, gt=0, le=300)
    weight: Optional[float] = Field(None, gt=0, le=500)
    activity_level: Optional[
        Literal["SEDENTARY", "LIGHTLY_ACTIVE", "MODERATELY_ACTIVE", "VERY_ACTIVE", "EXTREMELY_ACTIVE"]
    ] = None
    goals: List[GoalInput] = Field(default_factory=list)


class UserResponse(StandardizedModel):
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    verified: bool
    subscription_tier: str
    created_at: Optional[UTCDateTime] = None

    @classmethod
    def from_user(cls, user: "User") -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            avatar=user.avatar,
            verified=user.verified,
            subscription_tier=user.subscription_tier,
            created_at=user.created_at,
        )


class UserEnvelope(StandardizedModel):
    user: UserResponse


class LoginPayload(StandardizedModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class AccessTokenPayload(StandardizedModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
