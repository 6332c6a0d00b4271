# backend/app/models/auth_token.py

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.timezone_utils import ensure_utc, utc_now
from ..database import Base


class TokenPurpose(str, Enum):
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


class AuthToken(Base):
    """One-time token for email verification and password reset; only the hash is stored"""

    __tablename__ = "auth_tokens"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    purpose = Column(String(30), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    user = relationship("User", back_populates="auth_tokens")

    def __repr__(self):
        return f"<AuthToken {self.purpose} for user {self.user_id}>"

    def is_usable(self, now: Optional[datetime] = None) -> bool:
        now = ensure_utc(now) if now is not None else utc_now()
        return self.used_at is None and ensure_utc(self.expires_at) > now

    def consume(self, now: Optional[datetime] = None) -> None:
        self.used_at = ensure_utc(now) if now is not None else utc_now()
