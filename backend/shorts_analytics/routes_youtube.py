from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.db import get_session
from shorts_analytics.integrations.youtube_api import YouTubeAPIError
from shorts_analytics.schemas import CurrentMetricsRead, VideoRead, VideoSort, VideoStatsRead
from shorts_analytics.services.analytics import chart_series, dashboard_summary, sort_videos
from shorts_analytics.services.video_store import get_video, list_videos, stats_history
from shorts_analytics.services.youtube_sync import sync_channel_shorts
from shorts_analytics.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/youtube", tags=["youtube"])

SessionDep = Depends(get_session)


def _require_key() -> None:
    if not get_settings().youtube_api_key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="YOUTUBE_API_KEY missing")


@router.get("/videos")
async def get_all_videos(
    sort: VideoSort = Query(default="none"),
    session: AsyncSession = SessionDep,
):
    videos = sort_videos(await list_videos(session), sort)
    data = [VideoRead.model_validate(v).model_dump(mode="json") for v in videos]
    return {"success": True, "data": data, "count": len(data)}


@router.post("/retrieve")
async def retrieve_channel_shorts(session: AsyncSession = SessionDep):
    """Sync every short of the configured channel into youtube_videos."""
    _require_key()
    channel_id = get_settings().youtube_channel_id
    try:
        summary = await sync_channel_shorts(session, channel_id)
    except YouTubeAPIError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "YouTube sync failed", "reason": str(exc)},
        ) from exc
    except Exception as exc:
        logger.exception(f"[youtube_sync] Sync of channel {channel_id} failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "YouTube sync failed", "reason": str(exc)},
        ) from exc
    return summary.to_response()


@router.get("/summary")
async def get_dashboard_summary(session: AsyncSession = SessionDep):
    summary = dashboard_summary(await list_videos(session))
    return {"success": True, "data": summary.model_dump()}


@router.get("/stats/{video_id}")
async def get_video_stats(video_id: str, session: AsyncSession = SessionDep):
    history = await stats_history(session, video_id)
    current = await get_video(session, video_id)
    return {
        "success": True,
        "data": {
            "historical": [VideoStatsRead.model_validate(s).model_dump(mode="json") for s in history],
            "current": CurrentMetricsRead.model_validate(current).model_dump(mode="json") if current else None,
        },
    }


@router.get("/stats/{video_id}/series")
async def get_video_series(video_id: str, session: AsyncSession = SessionDep):
    history = await stats_history(session, video_id)
    current = await get_video(session, video_id)
    if not history and current is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")
    points = chart_series(history, current)
    return {"success": True, "data": [p.model_dump(mode="json") for p in points]}
