from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterator, Sequence
from datetime import datetime, timezone
from typing import Any

import httpx

from shorts_analytics.settings import get_settings

logger = logging.getLogger(__name__)

YT_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YT_CHANNELS_URL = "https://www.googleapis.com/youtube/v3/channels"
YT_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"

MAX_IDS_PER_REQUEST = 50
SEARCH_PAGE_SIZE = 50
SHORT_MAX_SECONDS = 60
UNKNOWN_CHANNEL = "Unknown Channel"

_DURATION_RE = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")


class YouTubeAPIError(RuntimeError):
    def __init__(self, endpoint: str, status_code: int):
        super().__init__(f"YouTube {endpoint} error: {status_code}")
        self.endpoint = endpoint
        self.status_code = status_code


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=get_settings().youtube_timeout_sec)


def _api_key() -> str:
    key = get_settings().youtube_api_key
    if not key:
        raise RuntimeError("YOUTUBE_API_KEY missing")
    return key


async def _get(client: httpx.AsyncClient, url: str, endpoint: str, params: dict[str, Any]) -> dict:
    try:
        resp = await client.get(url, params=params)
    except (httpx.TransportError, httpx.TimeoutException):
        # single retry
        resp = await client.get(url, params=params)
    if resp.status_code >= 400:
        raise YouTubeAPIError(endpoint, resp.status_code)
    return resp.json()


def chunked(items: Sequence[str], size: int = MAX_IDS_PER_REQUEST) -> Iterator[list[str]]:
    for i in range(0, len(items), size):
        yield list(items[i : i + size])


def parse_iso8601_duration(duration: str | None) -> int:
    """Return the length in seconds of a ``PT#H#M#S`` duration.

    Any component may be missing. Values that do not match at all count as
    zero seconds, so such videos pass the shorts filter.
    """
    match = _DURATION_RE.search(duration or "")
    if not match:
        return 0
    hours, minutes, seconds = (int(part or 0) for part in match.groups())
    return hours * 3600 + minutes * 60 + seconds


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _to_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


async def fetch_channel_name(channel_id: str) -> str:
    """Display name of the channel; never raises."""
    try:
        params = {"part": "snippet", "id": channel_id, "key": _api_key()}
        async with _client() as client:
            data = await _get(client, YT_CHANNELS_URL, "channels", params)
    except Exception as exc:
        logger.error(f"[youtube_api] Error fetching channel name for {channel_id}: {exc}")
        return UNKNOWN_CHANNEL
    items = data.get("items") or []
    if not items:
        return UNKNOWN_CHANNEL
    return (items[0].get("snippet") or {}).get("title") or UNKNOWN_CHANNEL


async def fetch_short_video_ids(channel_id: str) -> list[str]:
    """Walk every search page of the channel and keep the ids of shorts.

    A failing search page aborts the walk and propagates. Failing duration
    lookups only drop the affected ids.
    """
    key = _api_key()
    video_ids: list[str] = []
    page_token: str | None = None
    async with _client() as client:
        while True:
            params = {
                "part": "id",
                "channelId": channel_id,
                "type": "video",
                "maxResults": SEARCH_PAGE_SIZE,
                "order": "date",
                "key": key,
            }
            if page_token:
                params["pageToken"] = page_token
            data = await _get(client, YT_SEARCH_URL, "search", params)
            page_ids = [
                item["id"]["videoId"]
                for item in data.get("items", [])
                if (item.get("id") or {}).get("videoId")
            ]
            if page_ids:
                video_ids.extend(await filter_shorts(page_ids))
            page_token = data.get("nextPageToken")
            if not page_token:
                break
    return video_ids


async def filter_shorts(video_ids: Sequence[str]) -> list[str]:
    """Ids whose duration is at most a minute. A failing batch is logged and dropped."""
    key = _api_key()
    shorts: list[str] = []
    async with _client() as client:
        for batch in chunked(video_ids):
            params = {"part": "contentDetails", "id": ",".join(batch), "key": key}
            try:
                data = await _get(client, YT_VIDEOS_URL, "videos", params)
            except Exception as exc:
                logger.error(f"[youtube_api] Error filtering shorts for batch of {len(batch)}: {exc}")
                continue
            for item in data.get("items", []):
                duration = parse_iso8601_duration((item.get("contentDetails") or {}).get("duration"))
                if duration <= SHORT_MAX_SECONDS:
                    shorts.append(item["id"])
    return shorts


async def fetch_videos_details(video_ids: Sequence[str]) -> list[dict[str, Any]]:
    """Raw ``videos`` items with snippet, statistics and contentDetails.

    A failing batch is logged and skipped; the rest is still returned.
    """
    if not video_ids:
        return []
    key = _api_key()
    items: list[dict[str, Any]] = []
    async with _client() as client:
        for batch in chunked(video_ids):
            params = {"part": "snippet,statistics,contentDetails", "id": ",".join(batch), "key": key}
            try:
                data = await _get(client, YT_VIDEOS_URL, "videos", params)
            except Exception as exc:
                logger.error(f"[youtube_api] Error fetching video details for batch of {len(batch)}: {exc}")
                continue
            items.extend(data.get("items", []))
    return items


def transform_video(
    item: dict[str, Any],
    channel_id: str,
    channel_name: str,
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Map a raw ``videos`` item onto the ``youtube_videos`` columns."""
    now = now or datetime.now(timezone.utc)
    stats = item.get("statistics") or {}
    snippet = item.get("snippet") or {}
    content = item.get("contentDetails") or {}
    thumbnails = snippet.get("thumbnails") or {}

    views = _to_int(stats.get("viewCount"))
    likes = _to_int(stats.get("likeCount"))
    comments = _to_int(stats.get("commentCount"))
    engagement_rate = (likes + comments) / views if views > 0 else None

    published_at = _parse_dt(snippet.get("publishedAt"))
    days_since_published = None
    if published_at:
        days_since_published = math.floor((now - published_at).total_seconds() / 86400)
    if days_since_published and days_since_published > 0:
        views_per_day = views / days_since_published
    else:
        views_per_day = float(views)

    return {
        "video_id": item.get("id"),
        "channel_id": channel_id,
        "channel_name": channel_name,
        "title": snippet.get("title") or "",
        "description": snippet.get("description") or None,
        "published_at": published_at,
        "duration_seconds": parse_iso8601_duration(content.get("duration")),
        "category_id": _to_int(snippet.get("categoryId")),
        "category_name": snippet.get("categoryId") or None,
        "tags": list(snippet.get("tags") or []),
        "thumbnail_url": (thumbnails.get("high") or {}).get("url") or (thumbnails.get("default") or {}).get("url"),
        "default_language": snippet.get("defaultLanguage") or snippet.get("defaultAudioLanguage"),
        "view_count": views,
        "like_count": likes,
        "comment_count": comments,
        "favorite_count": _to_int(stats.get("favoriteCount")),
        "engagement_rate": engagement_rate,
        "views_per_day": views_per_day,
        "days_since_published": days_since_published,
    }
