"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18 00:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("user_id"),
    )
    op.create_index("ix_users_user_id", "users", ["user_id"])

    op.create_table(
        "tool_progress",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("tool_id", sa.String(length=50), nullable=False),
        sa.Column("tool_name", sa.String(length=100), nullable=False),
        sa.Column("current_step", sa.Integer(), nullable=False),
        sa.Column("total_steps", sa.Integer(), nullable=False),
        sa.Column("completed_steps", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "last_activity_at",
            sa.DateTime(timezone=True),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.user_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id", "tool_id", name="uq_progress_user_tool"
        ),
    )
    op.create_index(
        "ix_tool_progress_user_id", "tool_progress", ["user_id"]
    )
    op.create_index(
        "ix_tool_progress_tool_id", "tool_progress", ["tool_id"]
    )
    op.create_index(
        "ix_tool_progress_last_activity_at",
        "tool_progress",
        ["last_activity_at"],
    )

    op.create_table(
        "achievements",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("achievement_type", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("tool_id", sa.String(length=50), nullable=True),
        sa.Column("earned_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.user_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "user_id",
            "achievement_type",
            "tool_id",
            name="uq_achievement_user_type_tool",
        ),
    )
    op.create_index(
        "ix_achievements_user_id", "achievements", ["user_id"]
    )
    op.create_index(
        "ix_achievements_achievement_type",
        "achievements",
        ["achievement_type"],
    )
    op.create_index(
        "uq_achievement_user_type_no_tool",
        "achievements",
        ["user_id", "achievement_type"],
        unique=True,
        sqlite_where=sa.text("tool_id IS NULL"),
        postgresql_where=sa.text("tool_id IS NULL"),
    )

    op.create_table(
        "code_executions",
        sa.Column("id", sa.String(length=50), nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("tool_id", sa.String(length=50), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("validation_result", sa.JSON(), nullable=False),
        sa.Column("execution_result", sa.JSON(), nullable=False),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.user_id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_code_executions_user_id", "code_executions", ["user_id"]
    )
    op.create_index(
        "ix_code_executions_tool_id", "code_executions", ["tool_id"]
    )
    op.create_index(
        "ix_code_executions_created_at", "code_executions", ["created_at"]
    )


def downgrade() -> None:
    op.drop_table("code_executions")
    op.drop_table("achievements")
    op.drop_table("tool_progress")
    op.drop_table("users")
