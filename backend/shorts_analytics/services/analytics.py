"""Dashboard aggregates and chart data over the stored shorts."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

from shorts_analytics.models import YouTubeVideo, YouTubeVideoStats
from shorts_analytics.schemas import ChartPoint, DashboardSummary, VideoSort
from shorts_analytics.services.video_store import as_utc


def sort_videos(videos: Sequence[YouTubeVideo], sort: VideoSort) -> list[YouTubeVideo]:
    if sort in ("views-desc", "views-asc"):
        return sorted(videos, key=lambda v: v.view_count or 0, reverse=sort == "views-desc")
    if sort in ("engagement-desc", "engagement-asc"):
        return sorted(videos, key=lambda v: v.engagement_rate or 0, reverse=sort == "engagement-desc")
    return list(videos)


def dashboard_summary(videos: Sequence[YouTubeVideo]) -> DashboardSummary:
    total = len(videos)
    views = sum(v.view_count or 0 for v in videos)
    likes = sum(v.like_count or 0 for v in videos)
    comments = sum(v.comment_count or 0 for v in videos)
    # videos with zero views carry no rate and do not drag the average down
    rates = [v.engagement_rate for v in videos if v.engagement_rate is not None]
    return DashboardSummary(
        total_videos=total,
        total_views=views,
        total_likes=likes,
        total_comments=comments,
        total_interactions=likes + comments,
        avg_engagement_rate=sum(rates) / len(rates) if rates else 0.0,
        avg_views_per_video=views / total if total else 0.0,
        avg_likes_per_video=likes / total if total else 0.0,
        avg_comments_per_video=comments / total if total else 0.0,
    )


def chart_series(history: Iterable[YouTubeVideoStats], current: YouTubeVideo | None) -> list[ChartPoint]:
    """Views over time: every archived snapshot plus the live row."""
    points = [
        ChartPoint(
            date=as_utc(stat.recorded_at),
            views=stat.view_count or 0,
            label=as_utc(stat.recorded_at).isoformat(),
        )
        for stat in history
    ]
    if current is not None:
        current_at = as_utc(current.last_synced_at) or datetime.now(timezone.utc)
        points.append(
            ChartPoint(
                date=current_at,
                views=current.view_count or 0,
                label=f"Current ({current_at.isoformat()})",
                current=True,
            )
        )
    points.sort(key=lambda p: p.date)
    return points
