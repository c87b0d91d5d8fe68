"""
Data access for the two sync tables.

youtube_videos       one row per video_id, overwritten on every sync
youtube_video_stats  append-only history, one row per (video_id, sync run)

Every write commits on its own so one failed row never takes the rest of a
run down with it; on failure the session is rolled back before re-raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.models import YouTubeVideo, YouTubeVideoStats

# columns a sync is allowed to overwrite on an existing row
MUTABLE_VIDEO_FIELDS = (
    "channel_id",
    "channel_name",
    "title",
    "description",
    "published_at",
    "duration_seconds",
    "category_id",
    "category_name",
    "tags",
    "thumbnail_url",
    "default_language",
    "view_count",
    "like_count",
    "comment_count",
    "favorite_count",
    "engagement_rate",
    "views_per_day",
    "days_since_published",
)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@dataclass(frozen=True)
class VideoState:
    """Detached copy of a stored video, safe to use after a rollback."""

    video_id: str
    view_count: int
    like_count: int
    comment_count: int
    favorite_count: int
    engagement_rate: float | None
    views_per_day: float | None
    days_since_published: int | None
    sync_count: int
    first_synced_at: datetime | None
    last_synced_at: datetime | None

    @classmethod
    def from_model(cls, video: YouTubeVideo) -> "VideoState":
        return cls(
            video_id=video.video_id,
            view_count=video.view_count or 0,
            like_count=video.like_count or 0,
            comment_count=video.comment_count or 0,
            favorite_count=video.favorite_count or 0,
            engagement_rate=video.engagement_rate,
            views_per_day=video.views_per_day,
            days_since_published=video.days_since_published,
            sync_count=video.sync_count or 1,
            first_synced_at=as_utc(video.first_synced_at),
            last_synced_at=as_utc(video.last_synced_at),
        )


@dataclass(frozen=True)
class StatsPoint:
    view_count: int
    like_count: int
    comment_count: int
    recorded_at: datetime | None


async def _commit(session: AsyncSession) -> None:
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def get_video(session: AsyncSession, video_id: str) -> YouTubeVideo | None:
    stmt = (
        select(YouTubeVideo)
        .where(YouTubeVideo.video_id == video_id)
        .execution_options(populate_existing=True)
    )
    return await session.scalar(stmt)


async def get_video_state(session: AsyncSession, video_id: str) -> VideoState | None:
    video = await get_video(session, video_id)
    return VideoState.from_model(video) if video else None


async def list_videos(session: AsyncSession) -> list[YouTubeVideo]:
    result = await session.execute(
        select(YouTubeVideo).order_by(YouTubeVideo.published_at.desc(), YouTubeVideo.video_id.desc())
    )
    return list(result.scalars().all())


async def insert_video(session: AsyncSession, data: dict[str, Any], *, now: datetime) -> None:
    fields = {k: data.get(k) for k in MUTABLE_VIDEO_FIELDS if k in data}
    session.add(
        YouTubeVideo(
            video_id=data["video_id"],
            **fields,
            first_synced_at=now,
            last_synced_at=now,
            sync_count=1,
            updated_at=now,
        )
    )
    await _commit(session)


async def update_video(
    session: AsyncSession,
    video_id: str,
    data: dict[str, Any],
    *,
    sync_count: int,
    now: datetime,
) -> None:
    fields = {k: data.get(k) for k in MUTABLE_VIDEO_FIELDS if k in data}
    stmt = (
        update(YouTubeVideo)
        .where(YouTubeVideo.video_id == video_id)
        .values(**fields, sync_count=sync_count, last_synced_at=now, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    try:
        result = await session.execute(stmt)
    except Exception:
        await session.rollback()
        raise
    if result.rowcount == 0:
        await session.rollback()
        raise LookupError(f"video {video_id} vanished before update")
    await _commit(session)


async def latest_stats(session: AsyncSession, video_id: str) -> StatsPoint | None:
    row = await session.scalar(
        select(YouTubeVideoStats)
        .where(YouTubeVideoStats.video_id == video_id)
        .order_by(YouTubeVideoStats.recorded_at.desc(), YouTubeVideoStats.id.desc())
        .limit(1)
    )
    if row is None:
        return None
    return StatsPoint(
        view_count=row.view_count or 0,
        like_count=row.like_count or 0,
        comment_count=row.comment_count or 0,
        recorded_at=as_utc(row.recorded_at),
    )


async def insert_stats(session: AsyncSession, row: dict[str, Any]) -> None:
    session.add(YouTubeVideoStats(**row))
    await _commit(session)


async def stats_history(session: AsyncSession, video_id: str) -> list[YouTubeVideoStats]:
    result = await session.execute(
        select(YouTubeVideoStats)
        .where(YouTubeVideoStats.video_id == video_id)
        .order_by(YouTubeVideoStats.recorded_at.asc(), YouTubeVideoStats.id.asc())
    )
    return list(result.scalars().all())
