"""create_local_store_tables

Revision ID: 3e5d2b7a9c41
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "3e5d2b7a9c41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
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
    ]


def upgrade() -> None:
    op.create_table(
        "feed_photos",
        sa.Column("id", sa.String(length=200), nullable=False),
        sa.Column("urls_json", sa.Text(), nullable=False),
        sa.Column("user_json", sa.Text(), nullable=False),
        sa.Column("favorite", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_feed_photos_favorite"), "feed_photos", ["favorite"], unique=False)

    op.create_table(
        "topics",
        sa.Column("id", sa.String(length=200), nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("favorite", sa.Boolean(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_topics_slug"), "topics", ["slug"], unique=False)

    op.create_table(
        "topic_photos",
        sa.Column("id", sa.String(length=400), nullable=False),
        sa.Column("topic_id", sa.String(length=200), nullable=False),
        sa.Column("photo_id", sa.String(length=200), nullable=False),
        sa.Column("urls_json", sa.Text(), nullable=False),
        sa.Column("user_json", sa.Text(), nullable=False),
        sa.Column("favorite", sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_topic_photos_topic_id"), "topic_photos", ["topic_id"], unique=False)
    op.create_index(op.f("ix_topic_photos_favorite"), "topic_photos", ["favorite"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_topic_photos_favorite"), table_name="topic_photos")
    op.drop_index(op.f("ix_topic_photos_topic_id"), table_name="topic_photos")
    op.drop_table("topic_photos")

    op.drop_index(op.f("ix_topics_slug"), table_name="topics")
    op.drop_table("topics")

    op.drop_index(op.f("ix_feed_photos_favorite"), table_name="feed_photos")
    op.drop_table("feed_photos")
