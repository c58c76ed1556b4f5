"""create content tables

Revision ID: 3b9e1c7d2a10
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b9e1c7d2a10"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True)


def _uuid(name: str, *fk: sa.ForeignKey, **kw) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), *fk, nullable=False, **kw)


def upgrade() -> None:
    op.create_table(
        "user_roles",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("role", sa.String(length=16), primary_key=True),
    )

    op.create_table(
        "courses",
        _id(),
        _uuid("owner_id", index=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "tags",
            postgresql.ARRAY(sa.String()),
            nullable=False,
            server_default="{}",
        ),
        sa.Column("thumbnail_url", sa.Text(), nullable=True),
    )

    op.create_table(
        "videos",
        _id(),
        _uuid("course_id", sa.ForeignKey("courses.id"), index=True),
        _uuid("owner_id", index=True),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "timeline_events",
        _id(),
        _uuid("video_id", sa.ForeignKey("videos.id"), index=True),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("at_seconds", sa.Integer(), nullable=False),
        sa.Column("required", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column(
            "payload",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
    )

    op.create_table(
        "quizzes",
        _id(),
        _uuid("event_id", sa.ForeignKey("timeline_events.id"), unique=True),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("options", postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column("correct_index", sa.Integer(), nullable=False),
    )

    op.create_table(
        "quiz_attempts",
        _id(),
        _uuid("user_id"),
        _uuid("event_id", sa.ForeignKey("timeline_events.id")),
        sa.Column("selected_index", sa.Integer(), nullable=False),
        sa.Column("is_correct", sa.Boolean(), nullable=False),
        sa.Column("attempted_at", sa.Integer(), nullable=False),
    )
    op.create_index(
        "ix_quiz_attempts_user_event", "quiz_attempts", ["user_id", "event_id"]
    )

    op.create_table(
        "exam_launches",
        _id(),
        _uuid("user_id"),
        _uuid("event_id", sa.ForeignKey("timeline_events.id")),
        sa.Column("launched_at", sa.Integer(), nullable=False),
    )

    op.create_table(
        "video_event_completions",
        _id(),
        _uuid("user_id"),
        _uuid("event_id", sa.ForeignKey("timeline_events.id")),
        sa.Column("completed_at", sa.Integer(), nullable=False),
        sa.UniqueConstraint("user_id", "event_id"),
    )

    op.create_table(
        "video_progress",
        _id(),
        _uuid("user_id"),
        _uuid("video_id", sa.ForeignKey("videos.id")),
        sa.Column(
            "unlocked_until_seconds", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.UniqueConstraint("user_id", "video_id"),
    )


def downgrade() -> None:
    op.drop_table("video_progress")
    op.drop_table("video_event_completions")
    op.drop_table("exam_launches")
    op.drop_index("ix_quiz_attempts_user_event", table_name="quiz_attempts")
    op.drop_table("quiz_attempts")
    op.drop_table("quizzes")
    op.drop_table("timeline_events")
    op.drop_table("videos")
    op.drop_table("courses")
    op.drop_table("user_roles")
