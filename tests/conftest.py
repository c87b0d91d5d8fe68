from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("YOUTUBE_API_KEY", "test-youtube-key")
os.environ.setdefault("YOUTUBE_CHANNEL_ID", "UCtestchannel")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from collections.abc import AsyncIterator
from typing import Any
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from shorts_analytics.db import Base, get_session
from shorts_analytics.integrations import youtube_api
from shorts_analytics.main import app
from shorts_analytics.services.llm_provider import set_chat_provider


def make_video_item(
    video_id: str,
    *,
    views: int | None = 100,
    likes: int | None = 10,
    comments: int | None = 5,
    favorites: int | None = 0,
    duration: str = "PT30S",
    published_at: str = "2026-10-08T12:00:00Z",
    title: str | None = None,
    tags: list[str] | None = None,
) -> dict[str, Any]:
    statistics = {}
    for key, value in (
        ("viewCount", views),
        ("likeCount", likes),
        ("commentCount", comments),
        ("favoriteCount", favorites),
    ):
        if value is not None:
            statistics[key] = str(value)
    return {
        "id": video_id,
        "snippet": {
            "title": title or f"Short {video_id}",
            "description": f"Description of {video_id}",
            "publishedAt": published_at,
            "categoryId": "22",
            "tags": tags if tags is not None else ["shorts", "saas"],
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
            },
            "defaultAudioLanguage": "en",
        },
        "statistics": statistics,
        "contentDetails": {"duration": duration},
    }


class FakeYouTube:
    """In-memory stand-in for the YouTube Data API v3 endpoints the sync uses."""

    def __init__(self, page_size: int = 2):
        self.channel_title: str | None = "Test Channel"
        self.videos: dict[str, dict[str, Any]] = {}
        self.page_size = page_size
        self.fail_search_status: int | None = None
        self.fail_channels = False
        self.fail_detail_ids: set[str] = set()
        self.fail_duration_ids: set[str] = set()
        self.requests: list[httpx.Request] = []

    def add_video(self, video_id: str, **kwargs: Any) -> dict[str, Any]:
        item = make_video_item(video_id, **kwargs)
        self.videos[video_id] = item
        return item

    def set_stats(self, video_id: str, *, views: int, likes: int | None = None, comments: int | None = None) -> None:
        stats = self.videos[video_id]["statistics"]
        stats["viewCount"] = str(views)
        if likes is not None:
            stats["likeCount"] = str(likes)
        if comments is not None:
            stats["commentCount"] = str(comments)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        params = {k: v[0] for k, v in parse_qs(urlparse(str(request.url)).query).items()}
        path = request.url.path
        if path.endswith("/channels"):
            if self.fail_channels:
                return httpx.Response(500, json={"error": "boom"})
            items = [{"snippet": {"title": self.channel_title}}] if self.channel_title else []
            return httpx.Response(200, json={"items": items})
        if path.endswith("/search"):
            if self.fail_search_status:
                return httpx.Response(self.fail_search_status, json={"error": "quota"})
            ids = list(self.videos)
            start = int(params.get("pageToken") or 0)
            page = ids[start : start + self.page_size]
            body: dict[str, Any] = {"items": [{"id": {"kind": "youtube#video", "videoId": vid}} for vid in page]}
            if start + self.page_size < len(ids):
                body["nextPageToken"] = str(start + self.page_size)
            return httpx.Response(200, json=body)
        if path.endswith("/videos"):
            requested = params.get("id", "").split(",")
            if params.get("part") == "contentDetails":
                if self.fail_duration_ids & set(requested):
                    return httpx.Response(503, json={"error": "backend error"})
                items = [
                    {"id": vid, "contentDetails": self.videos[vid]["contentDetails"]}
                    for vid in requested
                    if vid in self.videos
                ]
                return httpx.Response(200, json={"items": items})
            if self.fail_detail_ids & set(requested):
                return httpx.Response(503, json={"error": "backend error"})
            return httpx.Response(200, json={"items": [self.videos[vid] for vid in requested if vid in self.videos]})
        return httpx.Response(404)


@pytest.fixture
def fake_youtube(monkeypatch: pytest.MonkeyPatch) -> FakeYouTube:
    fake = FakeYouTube()
    monkeypatch.setattr(
        youtube_api,
        "_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(fake.handler)),
    )
    return fake


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncIterator[httpx.AsyncClient]:
    async def _session_override() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()
    set_chat_provider(None)
