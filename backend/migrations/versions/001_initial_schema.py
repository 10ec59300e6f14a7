"""Initial schema — users and their favorite jobs.

Creates:
- users: identity from Google sign-in (provider id, email, profile)
- favorite_jobs: saved search results, one row per (user, job id)

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # 1. users
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("provider_id", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(255), nullable=False),
        sa.Column("avatar_url", sa.Text, server_default="", nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_users_provider_id", "users", ["provider_id"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # 2. favorite_jobs
    op.create_table(
        "favorite_jobs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("job_id", sa.String(512), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("company", sa.Text, nullable=False),
        sa.Column("location", sa.Text, nullable=False),
        sa.Column("employment_type", sa.Text, nullable=False),
        sa.Column("apply_link", sa.Text, nullable=False),
        sa.Column("company_logo", sa.Text),
        sa.Column("description", sa.Text, server_default="", nullable=False),
        sa.Column("salary", sa.Text, server_default="", nullable=False),
        sa.Column("saved_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("user_id", "job_id", name="uq_favorite_jobs_user_job"),
    )
    op.create_index("ix_favorite_jobs_user_id", "favorite_jobs", ["user_id"])
    op.create_index("ix_favorite_jobs_job_id", "favorite_jobs", ["job_id"])


def downgrade() -> None:
    op.drop_table("favorite_jobs")
    op.drop_table("users")
