"""
Stats archive for the YouTube sync.

Before a sync overwrites a video with fresh numbers, the numbers it had are
appended to youtube_video_stats. Growth is measured against the previous
archived row of the same video, not against the current row, so the archive
ordered by recorded_at reads as a growth ledger.

Archiving is best-effort: failures come back as an ArchiveOutcome and are
never raised to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.services.video_store import StatsPoint, VideoState, insert_stats, latest_stats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveOutcome:
    archived: bool
    snapshot: dict[str, Any] | None = None
    error: str | None = None


def build_stats_snapshot(
    previous: VideoState,
    prior: StatsPoint | None,
    recorded_at: datetime,
) -> dict[str, Any]:
    """Row for youtube_video_stats describing ``previous`` as of ``recorded_at``.

    Growth is zero when there is no prior snapshot. ``views_per_hour`` is None
    when the prior snapshot is not strictly older than ``recorded_at``; with no
    prior snapshot it falls back to ``views_per_day / 24``.
    """
    if prior is not None:
        view_growth = previous.view_count - prior.view_count
        like_growth = previous.like_count - prior.like_count
        comment_growth = previous.comment_count - prior.comment_count
    else:
        view_growth = like_growth = comment_growth = 0

    views_per_hour: float | None = None
    if prior is not None and prior.recorded_at is not None:
        elapsed_hours = (recorded_at - prior.recorded_at).total_seconds() / 3600
        if elapsed_hours > 0:
            views_per_hour = view_growth / elapsed_hours
    elif previous.views_per_day is not None:
        views_per_hour = previous.views_per_day / 24

    return {
        "video_id": previous.video_id,
        "recorded_at": recorded_at,
        "view_count": previous.view_count,
        "like_count": previous.like_count,
        "comment_count": previous.comment_count,
        "favorite_count": previous.favorite_count,
        "view_growth": view_growth,
        "like_growth": like_growth,
        "comment_growth": comment_growth,
        "engagement_rate": previous.engagement_rate,
        "views_per_hour": views_per_hour,
        "days_since_published": previous.days_since_published,
    }


async def archive_previous_stats(
    session: AsyncSession,
    previous: VideoState,
    recorded_at: datetime,
) -> ArchiveOutcome:
    try:
        prior = await latest_stats(session, previous.video_id)
        snapshot = build_stats_snapshot(previous, prior, recorded_at)
        await insert_stats(session, snapshot)
    except Exception as exc:
        await session.rollback()
        logger.error(f"[stats_archive] Error archiving stats for video {previous.video_id}: {exc}")
        return ArchiveOutcome(archived=False, error=str(exc))
    logger.debug(f"[stats_archive] Archived stats for video {previous.video_id} at {recorded_at.isoformat()}")
    return ArchiveOutcome(archived=True, snapshot=snapshot)
