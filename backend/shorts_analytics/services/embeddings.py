"""
Script embeddings: creative notes (topic, hook, script...) attached to a short.

A row is either linked to one published video or pending, waiting for the
video it was written for. Older rows mark pending with a ``PENDING_<x>``
placeholder instead of NULL; both read as unassigned.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Union

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.models import EMBEDDING_TEXT_FIELDS, VideoEmbedding, YouTubeVideo

LEGACY_PENDING_PREFIX = "PENDING_"


class VideoNotFoundError(LookupError):
    pass


class EmbeddingNotFoundError(LookupError):
    pass


class EmbeddingConflictError(ValueError):
    pass


@dataclass(frozen=True)
class Unassigned:
    pass


@dataclass(frozen=True)
class Assigned:
    video_id: str


EmbeddingLink = Union[Unassigned, Assigned]


def link_for(video_id: str | None) -> EmbeddingLink:
    if not video_id or video_id.startswith(LEGACY_PENDING_PREFIX):
        return Unassigned()
    return Assigned(video_id)


def is_unassigned(video_id: str | None) -> bool:
    return isinstance(link_for(video_id), Unassigned)


def _content(fields: dict[str, Any]) -> dict[str, Any]:
    # id and video_id are never edited through content updates
    return {k: v for k, v in fields.items() if k in EMBEDDING_TEXT_FIELDS}


async def _save(session: AsyncSession, embedding: VideoEmbedding) -> VideoEmbedding:
    session.add(embedding)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    await session.refresh(embedding)
    return embedding


async def video_exists(session: AsyncSession, video_id: str) -> bool:
    found = await session.scalar(select(YouTubeVideo.video_id).where(YouTubeVideo.video_id == video_id))
    return found is not None


async def _require_video(session: AsyncSession, video_id: str) -> None:
    if not await video_exists(session, video_id):
        raise VideoNotFoundError(f"Video {video_id} not found in youtube_videos table")


async def find_for_video(session: AsyncSession, video_id: str) -> VideoEmbedding | None:
    return await session.scalar(
        select(VideoEmbedding)
        .where(VideoEmbedding.video_id == video_id)
        .order_by(VideoEmbedding.created_at.asc())
        .limit(1)
    )


async def get_or_create_for_video(session: AsyncSession, video_id: str) -> tuple[VideoEmbedding, bool]:
    """Embedding of a stored video, creating an empty one on first access."""
    await _require_video(session, video_id)
    existing = await find_for_video(session, video_id)
    if existing:
        return existing, False
    created = await _save(session, VideoEmbedding(id=uuid.uuid4(), video_id=video_id))
    return created, True


async def upsert_for_video(
    session: AsyncSession, video_id: str, fields: dict[str, Any]
) -> tuple[VideoEmbedding, bool]:
    await _require_video(session, video_id)
    embedding = await find_for_video(session, video_id)
    created = embedding is None
    if created:
        embedding = VideoEmbedding(id=uuid.uuid4(), video_id=video_id)
    for field, value in _content(fields).items():
        setattr(embedding, field, value)
    return await _save(session, embedding), created


async def create_unassigned(session: AsyncSession, fields: dict[str, Any]) -> VideoEmbedding:
    return await _save(session, VideoEmbedding(id=uuid.uuid4(), video_id=None, **_content(fields)))


async def list_unassigned(session: AsyncSession) -> list[VideoEmbedding]:
    result = await session.execute(
        select(VideoEmbedding)
        .where(
            or_(
                VideoEmbedding.video_id.is_(None),
                VideoEmbedding.video_id.startswith(LEGACY_PENDING_PREFIX, autoescape=True),
            )
        )
        .order_by(VideoEmbedding.created_at.desc())
    )
    return list(result.scalars().all())


async def get_by_id(session: AsyncSession, embedding_id: uuid.UUID) -> VideoEmbedding:
    embedding = await session.get(VideoEmbedding, embedding_id)
    if not embedding:
        raise EmbeddingNotFoundError(f"Embedding {embedding_id} not found")
    return embedding


async def update_by_id(
    session: AsyncSession, embedding_id: uuid.UUID, fields: dict[str, Any]
) -> VideoEmbedding:
    embedding = await get_by_id(session, embedding_id)
    for field, value in _content(fields).items():
        setattr(embedding, field, value)
    return await _save(session, embedding)


async def assign(session: AsyncSession, embedding_id: uuid.UUID, video_id: str) -> VideoEmbedding:
    """Link an embedding to a stored video.

    Raises EmbeddingConflictError when another embedding already holds it.
    """
    embedding = await get_by_id(session, embedding_id)
    if is_unassigned(video_id):
        raise ValueError("video_id must reference a published video")
    await _require_video(session, video_id)
    holder = await session.scalar(
        select(VideoEmbedding.id).where(
            VideoEmbedding.video_id == video_id,
            VideoEmbedding.id != embedding.id,
        )
    )
    if holder is not None:
        raise EmbeddingConflictError(f"Video {video_id} already has an embedding assigned")
    embedding.video_id = video_id
    return await _save(session, embedding)


async def unassign(session: AsyncSession, embedding_id: uuid.UUID) -> VideoEmbedding:
    embedding = await get_by_id(session, embedding_id)
    embedding.video_id = None
    return await _save(session, embedding)


async def delete_by_id(session: AsyncSession, embedding_id: uuid.UUID) -> None:
    embedding = await get_by_id(session, embedding_id)
    await session.delete(embedding)
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise


async def available_videos(session: AsyncSession) -> list[YouTubeVideo]:
    """Videos no embedding is linked to yet, newest first."""
    linked = select(VideoEmbedding.video_id).where(VideoEmbedding.video_id.is_not(None))
    result = await session.execute(
        select(YouTubeVideo)
        .where(YouTubeVideo.video_id.not_in(linked))
        .order_by(YouTubeVideo.published_at.desc())
    )
    return list(result.scalars().all())
