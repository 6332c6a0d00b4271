# backend/alembic/versions/001_initial_schema.py
"""Initial schema - users, subscriptions, profiles, trainers, sessions, reviews, auth tokens

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000

Primary keys are 26-character ULID strings. Every timestamp column is
timezone-aware and stored in UTC.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(26),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("tier", sa.String(20), nullable=False, server_default="FREE"),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("stripe_customer_id", sa.String(255), nullable=True),
        sa.Column("stripe_subscription_id", sa.String(255), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_subscriptions_id", "subscriptions", ["id"])

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(26),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
        sa.Column("age", sa.Integer(), nullable=True),
        sa.Column("height", sa.Float(), nullable=True),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("activity_level", sa.String(30), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_user_profiles_id", "user_profiles", ["id"])

    op.create_table(
        "fitness_goals",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id", sa.String(26), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("target_value", sa.Float(), nullable=True),
        sa.Column("unit", sa.String(20), nullable=True),
        sa.Column("deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_fitness_goals_id", "fitness_goals", ["id"])
    op.create_index("ix_fitness_goals_user_id", "fitness_goals", ["user_id"])

    op.create_table(
        "trainer_profiles",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hourly_rate", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False, server_default="USD"),
        sa.Column("certifications", sa.JSON(), nullable=False),
        sa.Column("languages", sa.JSON(), nullable=False),
        sa.Column("availability", sa.JSON(), nullable=False),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("rating", sa.Numeric(3, 2), nullable=False, server_default="0"),
        sa.Column("review_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_sessions", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.CheckConstraint("hourly_rate >= 0", name="ck_trainer_profiles_hourly_rate_non_negative"),
        sa.CheckConstraint("experience >= 0", name="ck_trainer_profiles_experience_non_negative"),
        sa.CheckConstraint("rating >= 0 AND rating <= 5", name="ck_trainer_profiles_rating_range"),
    )
    op.create_index("ix_trainer_profiles_id", "trainer_profiles", ["id"])
    op.create_index("ix_trainer_profiles_is_verified", "trainer_profiles", ["is_verified"])
    op.create_index("ix_trainer_profiles_is_available", "trainer_profiles", ["is_available"])

    op.create_table(
        "trainer_specialties",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "trainer_id",
            sa.String(26),
            sa.ForeignKey("trainer_profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.UniqueConstraint("trainer_id", "name", name="uq_trainer_specialty"),
    )
    op.create_index("ix_trainer_specialties_trainer_id", "trainer_specialties", ["trainer_id"])
    op.create_index("ix_trainer_specialties_name", "trainer_specialties", ["name"])

    op.create_table(
        "training_sessions",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "trainer_id", sa.String(26), sa.ForeignKey("trainer_profiles.id"), nullable=False
        ),
        sa.Column("scheduled_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="VIRTUAL"),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="SCHEDULED"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "duration >= 30 AND duration <= 180", name="ck_training_sessions_duration_range"
        ),
        sa.CheckConstraint("price >= 0", name="ck_training_sessions_price_non_negative"),
        sa.CheckConstraint(
            "status IN ('SCHEDULED', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED', 'RESCHEDULED')",
            name="ck_training_sessions_status",
        ),
        sa.CheckConstraint(
            "type IN ('IN_PERSON', 'VIRTUAL', 'HYBRID')", name="ck_training_sessions_type"
        ),
    )
    op.create_index("ix_training_sessions_id", "training_sessions", ["id"])
    op.create_index("ix_training_sessions_user_id", "training_sessions", ["user_id"])
    op.create_index("ix_training_sessions_status", "training_sessions", ["status"])
    op.create_index(
        "ix_training_sessions_trainer_status_start",
        "training_sessions",
        ["trainer_id", "status", "scheduled_at"],
    )

    op.create_table(
        "reviews",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "session_id",
            sa.String(26),
            sa.ForeignKey("training_sessions.id"),
            nullable=False,
            unique=True,
        ),
        sa.Column("user_id", sa.String(26), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "trainer_id", sa.String(26), sa.ForeignKey("trainer_profiles.id"), nullable=False
        ),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_id", "reviews", ["id"])
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])
    op.create_index("ix_reviews_trainer_id", "reviews", ["trainer_id"])
    op.create_index("ix_reviews_created_at", "reviews", ["created_at"])

    op.create_table(
        "auth_tokens",
        sa.Column("id", sa.String(26), primary_key=True),
        sa.Column(
            "user_id", sa.String(26), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("purpose", sa.String(30), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_auth_tokens_token_hash", "auth_tokens", ["token_hash"])


def downgrade() -> None:
    op.drop_table("auth_tokens")
    op.drop_table("reviews")
    op.drop_table("training_sessions")
    op.drop_table("trainer_specialties")
    op.drop_table("trainer_profiles")
    op.drop_table("fitness_goals")
    op.drop_table("user_profiles")
    op.drop_table("subscriptions")
    op.drop_table("users")
