"""
Context assembly for the prompt assistant and the chatbot.

Both feed the same JSON ``[{video, embedding}, ...]`` of the selected shorts to
a language model: the assistant as text the user pastes into an external chat
tool, the chatbot as the system message of a chat completion.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from shorts_analytics.schemas import EmbeddingRead, VideoRead
from shorts_analytics.services.embeddings import find_for_video
from shorts_analytics.services.video_store import get_video

logger = logging.getLogger(__name__)

_PATTERN_BRIEF = """You are a marketing strategist and creative copy generator for a SaaS product.

Your role is to generate high-performing promotional content (hooks, scripts, captions, CTAs, angles, positioning statements) that is direct-response oriented, optimized for short-form and long-form digital platforms.

You will be provided with structured JSON data representing selected video content. This data may include (but is not limited to):
– topics
– hooks
– formats
– scripts or notes
– pacing
– tone or style descriptors
– gimmicks
– endings / CTAs
– performance indicators or qualitative trends

Treat this JSON as ground truth pattern data.

How to use the JSON:

Extract recurring patterns, trends, and stylistic signals (e.g. hook structure, language choices, pacing, emotional triggers, narrative devices).

Infer what works for this audience and product category without explicitly referencing the raw data.

Use these patterns to influence the structure, tone, and creative decisions of your output.

Output rules:

– Do not summarize or restate the JSON.
– Do not mention "the data," "the JSON," or "selected videos."
– Produce original marketing content that feels native to the identified trends.
– Favor clarity, memorability, and conversion over generic brand language.
– When uncertain, default to bold, specific, and testable ideas rather than safe generalities.
"""

_COMBINE = """– the user's intent
– the inferred patterns from the provided data
– best-practice SaaS marketing principles
– the best practices for marketing on YouTube Shorts that are proven to work based on data in both the JSON and youtube landscape trends and historical data

…to generate content that is distinct, compelling, and optimized to perform."""

META_PROMPT = (
    _PATTERN_BRIEF
    + "\nThe user's prompt that follows represents the intent and goal of the content.\n\n"
    + "Your task is to combine:\n"
    + _COMBINE
)

CHAT_SYSTEM_PROMPT = _PATTERN_BRIEF + "\nYou combine:\n" + _COMBINE

SECTION_BREAK = "\n\n---\n\n"

CHAT_ROLES = {"user", "assistant"}


def _unique(video_ids: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for video_id in video_ids:
        if video_id and video_id not in seen:
            seen[video_id] = None
    return list(seen)


async def build_context(session: AsyncSession, video_ids: Iterable[str]) -> list[dict[str, Any]]:
    """``{video, embedding}`` for each selected id; unknown ids are skipped."""
    context = []
    for video_id in _unique(video_ids):
        video = await get_video(session, video_id)
        if video is None:
            logger.debug(f"[prompt_context] Skipping unknown video {video_id}")
            continue
        embedding = await find_for_video(session, video_id)
        context.append(
            {
                "video": VideoRead.model_validate(video).model_dump(mode="json"),
                "embedding": EmbeddingRead.model_validate(embedding).model_dump(mode="json") if embedding else None,
            }
        )
    return context


def format_context(context: list[dict[str, Any]]) -> str:
    return json.dumps(context, indent=2, ensure_ascii=False)


def build_prompt(user_prompt: str, context: list[dict[str, Any]]) -> str:
    """Text for an external chat tool; empty until there is a prompt and some context."""
    if not user_prompt.strip() or not context:
        return ""
    return f"{user_prompt}{SECTION_BREAK}{META_PROMPT}{SECTION_BREAK}Context:\n{format_context(context)}"


def build_chat_messages(
    message: str,
    context: list[dict[str, Any]],
    history: Iterable[dict[str, Any]] = (),
) -> list[dict[str, str]]:
    system = CHAT_SYSTEM_PROMPT
    if context:
        system += f"{SECTION_BREAK}Context:\n{format_context(context)}"
    messages = [{"role": "system", "content": system}]
    for item in history:
        role = item.get("role")
        content = item.get("content")
        if role in CHAT_ROLES and isinstance(content, str) and content:
            messages.append({"role": role, "content": content})
    messages.append({"role": "user", "content": message.strip()})
    return messages
