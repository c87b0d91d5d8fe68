from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.db import get_session
from shorts_analytics.schemas import EmbeddingAssign, EmbeddingFields, EmbeddingRead, VideoRead
from shorts_analytics.services import embeddings as embedding_service
from shorts_analytics.services.embeddings import (
    EmbeddingConflictError,
    EmbeddingNotFoundError,
    VideoNotFoundError,
)

router = APIRouter(prefix="/api/youtube/embeddings", tags=["embeddings"])
SessionDep = Depends(get_session)


def _read(embedding) -> dict:
    return EmbeddingRead.model_validate(embedding).model_dump(mode="json")


def _not_found(exc: LookupError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))


@router.get("/available-videos")
async def list_available_videos(session: AsyncSession = SessionDep):
    """Videos that no script has been linked to yet."""
    videos = await embedding_service.available_videos(session)
    return {"success": True, "data": [VideoRead.model_validate(v).model_dump(mode="json") for v in videos]}


@router.get("/unassigned/list")
async def list_unassigned(session: AsyncSession = SessionDep):
    embeddings = await embedding_service.list_unassigned(session)
    return {"success": True, "data": [_read(e) for e in embeddings], "count": len(embeddings)}


@router.post("/unassigned", status_code=status.HTTP_201_CREATED)
async def create_unassigned(data: EmbeddingFields, session: AsyncSession = SessionDep):
    embedding = await embedding_service.create_unassigned(session, data.model_dump(exclude_unset=True))
    return {"success": True, "data": _read(embedding), "created": True}


@router.put("/by-id/{embedding_id}")
async def update_by_id(embedding_id: uuid.UUID, data: EmbeddingFields, session: AsyncSession = SessionDep):
    try:
        embedding = await embedding_service.update_by_id(session, embedding_id, data.model_dump(exclude_unset=True))
    except EmbeddingNotFoundError as exc:
        raise _not_found(exc) from exc
    return {"success": True, "data": _read(embedding), "message": "Embedding updated successfully"}


@router.put("/{embedding_id}/assign")
async def assign_embedding(embedding_id: uuid.UUID, data: EmbeddingAssign, session: AsyncSession = SessionDep):
    try:
        embedding = await embedding_service.assign(session, embedding_id, data.video_id)
    except (EmbeddingNotFoundError, VideoNotFoundError) as exc:
        raise _not_found(exc) from exc
    except EmbeddingConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {"success": True, "data": _read(embedding), "message": "Embedding assigned successfully"}


@router.put("/{embedding_id}/unassign")
async def unassign_embedding(embedding_id: uuid.UUID, session: AsyncSession = SessionDep):
    try:
        embedding = await embedding_service.unassign(session, embedding_id)
    except EmbeddingNotFoundError as exc:
        raise _not_found(exc) from exc
    return {"success": True, "data": _read(embedding), "message": "Embedding unassigned successfully"}


@router.delete("/{embedding_id}")
async def delete_embedding(embedding_id: uuid.UUID, session: AsyncSession = SessionDep):
    try:
        await embedding_service.delete_by_id(session, embedding_id)
    except EmbeddingNotFoundError as exc:
        raise _not_found(exc) from exc
    return {"success": True, "message": "Embedding deleted successfully"}


@router.get("/{video_id}/check")
async def check_embedding(video_id: str, session: AsyncSession = SessionDep):
    """Look up without creating, unlike GET /{video_id}."""
    embedding = await embedding_service.find_for_video(session, video_id)
    return {"success": True, "exists": embedding is not None, "data": _read(embedding) if embedding else None}


@router.get("/{video_id}")
async def get_or_create_embedding(video_id: str, session: AsyncSession = SessionDep):
    try:
        embedding, created = await embedding_service.get_or_create_for_video(session, video_id)
    except VideoNotFoundError as exc:
        raise _not_found(exc) from exc
    body = {"success": True, "data": _read(embedding)}
    if created:
        body["created"] = True
    return body


@router.put("/{video_id}")
async def update_embedding(video_id: str, data: EmbeddingFields, session: AsyncSession = SessionDep):
    try:
        embedding, created = await embedding_service.upsert_for_video(
            session, video_id, data.model_dump(exclude_unset=True)
        )
    except VideoNotFoundError as exc:
        raise _not_found(exc) from exc
    if created:
        return {"success": True, "data": _read(embedding), "message": "Embedding created successfully", "created": True}
    return {"success": True, "data": _read(embedding), "message": "Embedding updated successfully"}
