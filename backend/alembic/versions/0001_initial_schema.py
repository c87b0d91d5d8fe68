"""youtube videos, stats archive and video embeddings

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "youtube_videos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("video_id", sa.String(length=64), nullable=False),
        sa.Column("channel_id", sa.String(length=255), nullable=False),
        sa.Column("channel_name", sa.String(length=255), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("category_name", sa.String(length=64), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("thumbnail_url", sa.String(length=512), nullable=True),
        sa.Column("default_language", sa.String(length=32), nullable=True),
        sa.Column("view_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("favorite_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("engagement_rate", sa.Float(), nullable=True),
        sa.Column("views_per_day", sa.Float(), nullable=True),
        sa.Column("days_since_published", sa.Integer(), nullable=True),
        sa.Column("first_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sync_count", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_youtube_videos_video_id", "youtube_videos", ["video_id"], unique=True)
    op.create_index("ix_youtube_videos_channel_id", "youtube_videos", ["channel_id"], unique=False)
    op.create_index("ix_youtube_videos_published_at", "youtube_videos", ["published_at"], unique=False)
    op.create_index("ix_youtube_videos_last_synced_at", "youtube_videos", ["last_synced_at"], unique=False)

    op.create_table(
        "youtube_video_stats",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "video_id",
            sa.String(length=64),
            sa.ForeignKey("youtube_videos.video_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("view_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("like_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("favorite_count", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("view_growth", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("like_growth", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("comment_growth", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("engagement_rate", sa.Float(), nullable=True),
        sa.Column("views_per_hour", sa.Float(), nullable=True),
        sa.Column("days_since_published", sa.Integer(), nullable=True),
    )
    op.create_index(
        "ix_youtube_video_stats_video_recorded", "youtube_video_stats", ["video_id", "recorded_at"], unique=False
    )

    op.create_table(
        "video_embeddings",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("video_id", sa.String(length=64), nullable=True),
        sa.Column("topic", sa.Text(), nullable=True),
        sa.Column("format", sa.Text(), nullable=True),
        sa.Column("poc", sa.Text(), nullable=True),
        sa.Column("hook", sa.Text(), nullable=True),
        sa.Column("style", sa.Text(), nullable=True),
        sa.Column("gimmick", sa.Text(), nullable=True),
        sa.Column("end_cta", sa.Text(), nullable=True),
        sa.Column("script", sa.Text(), nullable=True),
        sa.Column("embedding_text", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_video_embeddings_video_id", "video_embeddings", ["video_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_video_embeddings_video_id", table_name="video_embeddings")
    op.drop_table("video_embeddings")

    op.drop_index("ix_youtube_video_stats_video_recorded", table_name="youtube_video_stats")
    op.drop_table("youtube_video_stats")

    op.drop_index("ix_youtube_videos_last_synced_at", table_name="youtube_videos")
    op.drop_index("ix_youtube_videos_published_at", table_name="youtube_videos")
    op.drop_index("ix_youtube_videos_channel_id", table_name="youtube_videos")
    op.drop_index("ix_youtube_videos_video_id", table_name="youtube_videos")
    op.drop_table("youtube_videos")
