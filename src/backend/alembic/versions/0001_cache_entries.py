"""Revision 0001: cache_entries table

Flat key-value table for the cached server list ("ploi-servers") and the
per-server site lists ("ploi-sites-{id}"). Values are JSON text.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "cache_entries",
        sa.Column("key", sa.Text(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("key", name="pk_cache_entries"),
    )


def downgrade():
    op.drop_table("cache_entries")
