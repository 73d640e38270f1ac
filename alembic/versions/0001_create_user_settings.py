"""create user_settings table

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

import sqlalchemy as sa

from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_settings",
        sa.Column("id", sa.String(length=255), primary_key=True),
        sa.Column("user_email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("gemini_api_key", sa.Text(), nullable=True),
        sa.Column("github_pat_token", sa.Text(), nullable=True),
        sa.Column("gemini_key_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("github_token_expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    op.drop_table("user_settings")
