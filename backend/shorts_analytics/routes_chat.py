from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.db import get_session
from shorts_analytics.schemas import ChatRequest, PromptAssistantRequest
from shorts_analytics.services.llm_provider import ChatProviderError, get_chat_provider
from shorts_analytics.services.prompt_context import build_chat_messages, build_context, build_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])
SessionDep = Depends(get_session)


@router.post("/chat")
async def send_chat_message(data: ChatRequest, session: AsyncSession = SessionDep):
    """Answer a chat message with the selected shorts as model context."""
    if not data.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="message is required")

    context = await build_context(session, data.video_ids)
    messages = build_chat_messages(data.message, context, data.history)
    logger.debug(f"[chat] Sending {len(messages)} messages with {len(context)} context videos")

    try:
        completion = await get_chat_provider().complete(messages)
    except ChatProviderError as exc:
        logger.error(f"[chat] Chat completion failed: {exc}")
        if exc.status_code == 401:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid OpenAI API key") from exc
        if exc.status_code == 429:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="OpenAI rate limit exceeded. Please try again shortly.",
            ) from exc
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"LLM chat failed: {exc}") from exc

    return {"success": True, "data": completion.to_response()}


@router.post("/prompt-assistant")
async def build_assistant_prompt(data: PromptAssistantRequest, session: AsyncSession = SessionDep):
    """Prompt text for an external chat tool, built from the selected shorts."""
    context = await build_context(session, data.video_ids)
    return {
        "success": True,
        "data": {
            "prompt": build_prompt(data.prompt, context),
            "videos": len(context),
        },
    }
