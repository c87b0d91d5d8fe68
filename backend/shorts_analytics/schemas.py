from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

VideoSort = Literal["none", "views-desc", "views-asc", "engagement-desc", "engagement-asc"]


class VideoRead(BaseModel):
    video_id: str
    channel_id: str
    channel_name: str | None = None
    title: str
    description: str | None = None
    published_at: datetime | None = None
    duration_seconds: int | None = None
    category_id: int | None = None
    category_name: str | None = None
    tags: list[str] | None = None
    thumbnail_url: str | None = None
    default_language: str | None = None
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    favorite_count: int = 0
    engagement_rate: float | None = None
    views_per_day: float | None = None
    days_since_published: int | None = None
    first_synced_at: datetime | None = None
    last_synced_at: datetime | None = None
    sync_count: int = 1
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class VideoStatsRead(BaseModel):
    video_id: str
    recorded_at: datetime
    view_count: int
    like_count: int
    comment_count: int
    favorite_count: int
    view_growth: int
    like_growth: int
    comment_growth: int
    engagement_rate: float | None = None
    views_per_hour: float | None = None
    days_since_published: int | None = None

    class Config:
        from_attributes = True


class CurrentMetricsRead(BaseModel):
    video_id: str
    view_count: int
    like_count: int
    comment_count: int
    engagement_rate: float | None = None
    days_since_published: int | None = None
    last_synced_at: datetime | None = None

    class Config:
        from_attributes = True


class ChartPoint(BaseModel):
    date: datetime
    views: int
    label: str
    current: bool = False


class DashboardSummary(BaseModel):
    total_videos: int
    total_views: int
    total_likes: int
    total_comments: int
    total_interactions: int
    avg_engagement_rate: float
    avg_views_per_video: float
    avg_likes_per_video: float
    avg_comments_per_video: float


class EmbeddingFields(BaseModel):
    topic: str | None = None
    format: str | None = None
    poc: str | None = None
    hook: str | None = None
    style: str | None = None
    gimmick: str | None = None
    end_cta: str | None = None
    script: str | None = None
    embedding_text: str | None = None


class EmbeddingRead(EmbeddingFields):
    id: uuid.UUID
    video_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class EmbeddingAssign(BaseModel):
    video_id: str

    @field_validator("video_id")
    @classmethod
    def strip_video_id(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("video_id is required")
        return value


class ChatRequest(BaseModel):
    message: str = ""
    video_ids: list[str] = Field(default_factory=list, alias="videoIds")
    history: list[dict[str, Any]] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class PromptAssistantRequest(BaseModel):
    prompt: str = ""
    video_ids: list[str] = Field(default_factory=list, alias="videoIds")

    class Config:
        populate_by_name = True
