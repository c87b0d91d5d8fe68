from __future__ import annotations

import uuid

import httpx
import pytest

from shorts_analytics.services.llm_provider import (
    ChatCompletion,
    ChatProvider,
    ChatProviderError,
    OpenAIChatProvider,
    set_chat_provider,
)
from shorts_analytics.settings import get_settings


class RecordingProvider(ChatProvider):
    def __init__(self, reply="Try a pattern-interrupt hook.", error=None):
        self.reply = reply
        self.error = error
        self.calls: list[list[dict[str, str]]] = []

    async def complete(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return ChatCompletion(self.reply, usage={"total_tokens": 42})


async def _sync(client, fake_youtube):
    resp = await client.post("/api/youtube/retrieve")
    assert resp.status_code == 200, resp.text
    return resp.json()


async def test_health_endpoints(client):
    assert (await client.get("/ping")).json() == {"status": "ok"}
    health = (await client.get("/health")).json()
    assert health["status"] == "ok"
    db = await client.get("/api/health/db")
    assert db.status_code == 200
    assert db.json()["success"] is True


async def test_retrieve_and_list_videos(client, fake_youtube):
    fake_youtube.add_video("a", views=100, likes=1, comments=1)
    fake_youtube.add_video("b", views=300, likes=30, comments=0)

    body = await _sync(client, fake_youtube)

    assert body["success"] is True
    assert body["channelId"] == "UCtestchannel"
    assert body["videosInserted"] == 2

    videos = (await client.get("/api/youtube/videos", params={"sort": "views-desc"})).json()
    assert videos["count"] == 2
    assert [v["video_id"] for v in videos["data"]] == ["b", "a"]
    assert videos["data"][0]["sync_count"] == 1


async def test_retrieve_reports_upstream_failure(client, fake_youtube):
    fake_youtube.add_video("a")
    fake_youtube.fail_search_status = 403

    resp = await client.post("/api/youtube/retrieve")

    assert resp.status_code == 502
    assert resp.json()["detail"]["error"] == "YouTube sync failed"
    assert "403" in resp.json()["detail"]["reason"]


async def test_retrieve_without_api_key(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "youtube_api_key", None)
    resp = await client.post("/api/youtube/retrieve")
    assert resp.status_code == 400


async def test_invalid_sort_is_rejected(client):
    assert (await client.get("/api/youtube/videos", params={"sort": "random"})).status_code == 422


async def test_stats_and_series(client, fake_youtube):
    fake_youtube.add_video("a", views=1000)
    await _sync(client, fake_youtube)
    fake_youtube.set_stats("a", views=1500)
    await _sync(client, fake_youtube)

    stats = (await client.get("/api/youtube/stats/a")).json()["data"]
    assert [row["view_count"] for row in stats["historical"]] == [1000]
    assert stats["current"]["view_count"] == 1500

    series = (await client.get("/api/youtube/stats/a/series")).json()["data"]
    assert [p["views"] for p in series] == [1000, 1500]
    assert series[-1]["current"] is True

    assert (await client.get("/api/youtube/stats/missing/series")).status_code == 404
    missing = (await client.get("/api/youtube/stats/missing")).json()["data"]
    assert missing == {"historical": [], "current": None}


async def test_summary(client, fake_youtube):
    fake_youtube.add_video("a", views=100, likes=5, comments=5)
    fake_youtube.add_video("b", views=100, likes=15, comments=5)
    await _sync(client, fake_youtube)

    data = (await client.get("/api/youtube/summary")).json()["data"]

    assert data["total_videos"] == 2
    assert data["total_views"] == 200
    assert data["total_interactions"] == 30
    assert data["avg_engagement_rate"] == pytest.approx(0.15)


async def test_embedding_routes(client, fake_youtube):
    fake_youtube.add_video("a")
    fake_youtube.add_video("b")
    await _sync(client, fake_youtube)

    check = (await client.get("/api/youtube/embeddings/a/check")).json()
    assert check == {"success": True, "exists": False, "data": None}

    first = (await client.get("/api/youtube/embeddings/a")).json()
    assert first["created"] is True
    second = (await client.get("/api/youtube/embeddings/a")).json()
    assert "created" not in second
    assert second["data"]["id"] == first["data"]["id"]

    updated = (await client.put("/api/youtube/embeddings/a", json={"hook": "Wait for it"})).json()
    assert updated["message"] == "Embedding updated successfully"
    assert updated["data"]["hook"] == "Wait for it"

    available = (await client.get("/api/youtube/embeddings/available-videos")).json()["data"]
    assert [v["video_id"] for v in available] == ["b"]

    assert (await client.get("/api/youtube/embeddings/missing")).status_code == 404
    assert (await client.put("/api/youtube/embeddings/missing", json={"hook": "x"})).status_code == 404


async def test_unassigned_embedding_routes(client, fake_youtube):
    fake_youtube.add_video("a")
    fake_youtube.add_video("b")
    await _sync(client, fake_youtube)
    await client.get("/api/youtube/embeddings/a")

    created = await client.post("/api/youtube/embeddings/unassigned", json={"topic": "draft"})
    assert created.status_code == 201
    draft_id = created.json()["data"]["id"]
    assert created.json()["data"]["video_id"] is None

    listed = (await client.get("/api/youtube/embeddings/unassigned/list")).json()
    assert listed["count"] == 1

    edited = await client.put(f"/api/youtube/embeddings/by-id/{draft_id}", json={"script": "Line one"})
    assert edited.json()["data"]["script"] == "Line one"

    conflict = await client.put(f"/api/youtube/embeddings/{draft_id}/assign", json={"video_id": "a"})
    assert conflict.status_code == 409
    missing_video = await client.put(f"/api/youtube/embeddings/{draft_id}/assign", json={"video_id": "zzz"})
    assert missing_video.status_code == 404
    pending = await client.put(f"/api/youtube/embeddings/{draft_id}/assign", json={"video_id": "PENDING_1"})
    assert pending.status_code == 400
    blank = await client.put(f"/api/youtube/embeddings/{draft_id}/assign", json={"video_id": "  "})
    assert blank.status_code == 422

    assigned = await client.put(f"/api/youtube/embeddings/{draft_id}/assign", json={"video_id": " b "})
    assert assigned.status_code == 200
    assert assigned.json()["data"]["video_id"] == "b"

    released = await client.put(f"/api/youtube/embeddings/{draft_id}/unassign")
    assert released.json()["data"]["video_id"] is None

    assert (await client.delete(f"/api/youtube/embeddings/{draft_id}")).status_code == 200
    assert (await client.delete(f"/api/youtube/embeddings/{draft_id}")).status_code == 404
    assert (await client.put(f"/api/youtube/embeddings/{uuid.uuid4()}/unassign")).status_code == 404


async def test_prompt_assistant(client, fake_youtube):
    fake_youtube.add_video("a")
    await _sync(client, fake_youtube)

    resp = await client.post("/api/prompt-assistant", json={"prompt": "Three hooks", "videoIds": ["a", "nope"]})

    data = resp.json()["data"]
    assert data["videos"] == 1
    assert data["prompt"].startswith("Three hooks")
    assert '"video_id": "a"' in data["prompt"]

    empty = (await client.post("/api/prompt-assistant", json={"prompt": "Three hooks", "videoIds": []})).json()
    assert empty["data"] == {"prompt": "", "videos": 0}


async def test_chat_uses_provider(client, fake_youtube):
    fake_youtube.add_video("a")
    await _sync(client, fake_youtube)
    provider = RecordingProvider()
    set_chat_provider(provider)

    resp = await client.post(
        "/api/chat",
        json={
            "message": "What hook should I test next?",
            "videoIds": ["a"],
            "history": [{"role": "user", "content": "hi"}, {"role": "assistant", "content": "hello"}],
        },
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "data": {"message": "Try a pattern-interrupt hook.", "usage": {"total_tokens": 42}},
    }
    sent = provider.calls[0]
    assert sent[0]["role"] == "system"
    assert '"video_id": "a"' in sent[0]["content"]
    assert [m["role"] for m in sent[1:]] == ["user", "assistant", "user"]


async def test_chat_rejects_blank_message(client):
    set_chat_provider(RecordingProvider())
    assert (await client.post("/api/chat", json={"message": "   "})).status_code == 400


@pytest.mark.parametrize(("upstream", "expected"), [(401, 401), (429, 429), (500, 502), (None, 502)])
async def test_chat_maps_provider_errors(client, upstream, expected):
    set_chat_provider(RecordingProvider(error=ChatProviderError("boom", status_code=upstream)))
    resp = await client.post("/api/chat", json={"message": "hi"})
    assert resp.status_code == expected


async def test_openai_provider_request_shape(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = request.read()
        return httpx.Response(
            200,
            json={"choices": [{"message": {"content": "reply"}}], "usage": {"total_tokens": 7}, "model": "m"},
        )

    provider = OpenAIChatProvider("sk-test", base_url="https://llm.example/v1/", model="m")
    monkeypatch.setattr(provider, "_client", lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))

    completion = await provider.complete([{"role": "user", "content": "hi"}])

    assert completion.message == "reply"
    assert completion.usage == {"total_tokens": 7}
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert b'"model":"m"' in seen["body"].replace(b" ", b"")


async def test_openai_provider_errors(monkeypatch):
    provider = OpenAIChatProvider(None, base_url="https://llm.example/v1", model="m")
    with pytest.raises(ChatProviderError) as excinfo:
        await provider.complete([])
    assert excinfo.value.status_code == 401

    provider = OpenAIChatProvider("sk-test", base_url="https://llm.example/v1", model="m")
    monkeypatch.setattr(
        provider,
        "_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(429))),
    )
    with pytest.raises(ChatProviderError) as excinfo:
        await provider.complete([])
    assert excinfo.value.status_code == 429

    monkeypatch.setattr(
        provider,
        "_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"choices": []}))),
    )
    assert (await provider.complete([])).message == "No response generated."
