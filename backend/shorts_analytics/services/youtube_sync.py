from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.integrations.youtube_api import (
    fetch_channel_name,
    fetch_short_video_ids,
    fetch_videos_details,
    transform_video,
)
from shorts_analytics.services.stats_archive import ArchiveOutcome, archive_previous_stats
from shorts_analytics.services.video_store import get_video_state, insert_video, update_video

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VideoOutcome:
    video_id: str | None
    action: Literal["inserted", "updated", "failed"]
    archive: ArchiveOutcome | None = None
    error: str | None = None


@dataclass
class SyncSummary:
    channel_id: str
    channel_name: str
    videos_processed: int = 0
    videos_inserted: int = 0
    videos_updated: int = 0
    stats_archived: int = 0
    archive_errors: int = 0
    errors: int = 0
    message: str = ""

    def record(self, outcome: VideoOutcome) -> None:
        if outcome.archive is not None:
            if outcome.archive.archived:
                self.stats_archived += 1
            else:
                self.archive_errors += 1
        if outcome.action == "inserted":
            self.videos_inserted += 1
        elif outcome.action == "updated":
            self.videos_updated += 1
        else:
            self.errors += 1

    def to_response(self) -> dict[str, Any]:
        return {
            "success": True,
            "message": self.message,
            "videosProcessed": self.videos_processed,
            "videosInserted": self.videos_inserted,
            "videosUpdated": self.videos_updated,
            "statsArchived": self.stats_archived,
            "archiveErrors": self.archive_errors,
            "errors": self.errors,
            "channelId": self.channel_id,
            "channelName": self.channel_name,
        }


async def sync_video(
    session: AsyncSession,
    item: dict[str, Any],
    *,
    channel_id: str,
    channel_name: str,
    now: datetime,
) -> VideoOutcome:
    """Insert a new video, or archive the stored stats and overwrite them.

    Never raises: any failure ends up as a ``failed`` outcome.
    """
    video_id = item.get("id")
    archive: ArchiveOutcome | None = None
    try:
        data = transform_video(item, channel_id, channel_name, now=now)
        if not video_id:
            raise ValueError("video item has no id")

        previous = await get_video_state(session, video_id)
        if previous is None:
            await insert_video(session, data, now=now)
            return VideoOutcome(video_id=video_id, action="inserted")

        archive = await archive_previous_stats(session, previous, now)
        await update_video(session, video_id, data, sync_count=previous.sync_count + 1, now=now)
        return VideoOutcome(video_id=video_id, action="updated", archive=archive)
    except Exception as exc:
        await session.rollback()
        logger.error(f"[youtube_sync] Error processing video {video_id}: {exc}")
        return VideoOutcome(video_id=video_id, action="failed", archive=archive, error=str(exc))


async def sync_channel_shorts(
    session: AsyncSession,
    channel_id: str,
    *,
    now: datetime | None = None,
) -> SyncSummary:
    """Refresh every short of ``channel_id`` in youtube_videos.

    Videos are processed one at a time. Listing the channel's shorts is the
    only fatal step; everything after it is counted instead of raised.
    """
    now = now or datetime.now(timezone.utc)
    logger.info(f"[youtube_sync] Starting retrieval of shorts from channel {channel_id}")

    channel_name = await fetch_channel_name(channel_id)
    summary = SyncSummary(channel_id=channel_id, channel_name=channel_name)

    video_ids = await fetch_short_video_ids(channel_id)
    logger.info(f"[youtube_sync] Found {len(video_ids)} shorts for {channel_name}")
    if not video_ids:
        summary.message = "No shorts found in channel"
        return summary

    items = await fetch_videos_details(video_ids)
    summary.videos_processed = len(items)

    for item in items:
        outcome = await sync_video(
            session,
            item,
            channel_id=channel_id,
            channel_name=channel_name,
            now=now,
        )
        summary.record(outcome)

    summary.message = f"Retrieved {len(items)} shorts from channel"
    logger.info(
        f"[youtube_sync] Done: {summary.videos_inserted} inserted, {summary.videos_updated} updated, "
        f"{summary.stats_archived} archived, {summary.archive_errors} archive errors, {summary.errors} errors"
    )
    return summary
