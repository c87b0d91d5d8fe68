from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base

EMBEDDING_TEXT_FIELDS = (
    "topic",
    "format",
    "poc",
    "hook",
    "style",
    "gimmick",
    "end_cta",
    "script",
    "embedding_text",
)


class YouTubeVideo(Base):
    """Current state of one channel short, overwritten on every sync."""

    __tablename__ = "youtube_videos"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    video_id: Mapped[str] = mapped_column(sa.String(64), nullable=False, unique=True, index=True)
    channel_id: Mapped[str] = mapped_column(sa.String(255), nullable=False, index=True)
    channel_name: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)
    title: Mapped[str] = mapped_column(sa.Text(), nullable=False, default="")
    description: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True, index=True)
    duration_seconds: Mapped[int | None] = mapped_column(sa.Integer(), nullable=True)
    category_id: Mapped[int | None] = mapped_column(sa.Integer(), nullable=True)
    category_name: Mapped[str | None] = mapped_column(sa.String(64), nullable=True)
    tags: Mapped[list | None] = mapped_column(sa.JSON(), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(sa.String(512), nullable=True)
    default_language: Mapped[str | None] = mapped_column(sa.String(32), nullable=True)

    view_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    like_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    favorite_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    engagement_rate: Mapped[float | None] = mapped_column(sa.Float(), nullable=True)
    views_per_day: Mapped[float | None] = mapped_column(sa.Float(), nullable=True)
    days_since_published: Mapped[int | None] = mapped_column(sa.Integer(), nullable=True)

    first_synced_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True)
    last_synced_at: Mapped[datetime | None] = mapped_column(sa.DateTime(timezone=True), nullable=True, index=True)
    sync_count: Mapped[int] = mapped_column(sa.Integer(), nullable=False, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False
    )


class YouTubeVideoStats(Base):
    """Append-only archive of the metrics a video had right before a sync overwrote them."""

    __tablename__ = "youtube_video_stats"
    __table_args__ = (sa.Index("ix_youtube_video_stats_video_recorded", "video_id", "recorded_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    video_id: Mapped[str] = mapped_column(
        sa.String(64), sa.ForeignKey("youtube_videos.video_id", ondelete="CASCADE"), nullable=False
    )
    recorded_at: Mapped[datetime] = mapped_column(sa.DateTime(timezone=True), nullable=False)
    view_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    like_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    comment_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    favorite_count: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    view_growth: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    like_growth: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    comment_growth: Mapped[int] = mapped_column(sa.BigInteger(), nullable=False, default=0)
    engagement_rate: Mapped[float | None] = mapped_column(sa.Float(), nullable=True)
    views_per_hour: Mapped[float | None] = mapped_column(sa.Float(), nullable=True)
    days_since_published: Mapped[int | None] = mapped_column(sa.Integer(), nullable=True)


class VideoEmbedding(Base):
    """Creative metadata (topic, hook, script...) for a published or pending short.

    ``video_id`` is NULL while the script waits for its video. Uniqueness of a
    non-null ``video_id`` is enforced when linking, not by the table.
    """

    __tablename__ = "video_embeddings"

    id: Mapped[uuid.UUID] = mapped_column(sa.Uuid(), primary_key=True, default=uuid.uuid4)
    video_id: Mapped[str | None] = mapped_column(sa.String(64), nullable=True, index=True)
    topic: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    format: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    poc: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    hook: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    style: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    gimmick: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    end_cta: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    script: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    embedding_text: Mapped[str | None] = mapped_column(sa.Text(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False
    )
