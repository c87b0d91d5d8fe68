#!/usr/bin/env python3
"""
Smoke test against a running server: triggers one channel sync and checks
that the invariants of the run hold for the returned data.

Needs a real YOUTUBE_API_KEY configured on the server. Running it twice in a
row exercises the update path (stats archive, sync_count bump).

Env vars:
  BASE_URL   (default http://localhost:8000)
"""
from __future__ import annotations

import json
import os
import sys
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

BASE_URL = os.environ.get("BASE_URL", "http://localhost:8000").rstrip("/")

# ── Helpers ──────────────────────────────────────────────────

class SmokeError(Exception):
    pass


def _req(method: str, path: str, body: dict | None = None) -> dict:
    url = f"{BASE_URL}{path}"
    data = json.dumps(body).encode() if body else None
    req = Request(url, data=data, headers={"Content-Type": "application/json"}, method=method)
    try:
        with urlopen(req, timeout=600) as resp:
            raw = resp.read().decode()
            return json.loads(raw) if raw else {}
    except HTTPError as e:
        raise SmokeError(f"{method} {path} → {e.code}: {e.read().decode()[:500]}")
    except URLError as e:
        raise SmokeError(f"{method} {path} → URLError: {e}")


def GET(path: str) -> dict:
    return _req("GET", path)


def POST(path: str, body: dict | None = None) -> dict:
    return _req("POST", path, body)


def step(name: str):
    print(f"\n{'='*60}")
    print(f"  STEP: {name}")
    print(f"{'='*60}")


def ok(msg: str):
    print(f"  ✅ {msg}")


def fail(msg: str):
    print(f"  ❌ {msg}")
    raise SmokeError(msg)


# ── Steps ────────────────────────────────────────────────────

def step1_health():
    step("1. Health check")
    GET("/ping")
    data = GET("/api/health/db")
    if not data.get("success"):
        fail(f"DB check failed: {data}")
    ok("API and DB reachable")


def step2_snapshot() -> dict[str, dict]:
    step("2. Snapshot stored videos")
    videos = GET("/api/youtube/videos").get("data", [])
    ok(f"{len(videos)} videos stored before sync")
    return {v["video_id"]: v for v in videos}


def step3_sync() -> dict:
    step("3. Trigger sync")
    summary = POST("/api/youtube/retrieve")
    ok(
        f"{summary.get('channelName')}: processed={summary.get('videosProcessed')} "
        f"inserted={summary.get('videosInserted')} updated={summary.get('videosUpdated')} "
        f"archived={summary.get('statsArchived')} errors={summary.get('errors')}"
    )
    return summary


def step4_check(before: dict[str, dict]):
    step("4. Check sync invariants")
    after = {v["video_id"]: v for v in GET("/api/youtube/videos").get("data", [])}
    for video_id, old in before.items():
        new = after.get(video_id)
        if not new or new["last_synced_at"] == old["last_synced_at"]:
            continue
        if new["sync_count"] != old["sync_count"] + 1:
            fail(f"{video_id}: sync_count {old['sync_count']} → {new['sync_count']}")
        if new["first_synced_at"] != old["first_synced_at"]:
            fail(f"{video_id}: first_synced_at changed")
    for video_id in after.keys() - before.keys():
        if after[video_id]["sync_count"] != 1:
            fail(f"{video_id}: new video with sync_count {after[video_id]['sync_count']}")
    ok(f"{len(after)} videos consistent")


# ── Main ─────────────────────────────────────────────────────

def main():
    print(f"\n🔬 Sync smoke test: {BASE_URL}\n")
    try:
        step1_health()
        before = step2_snapshot()
        step3_sync()
        step4_check(before)
    except SmokeError as e:
        print(f"\n{'='*60}")
        print(f"  ❌ FAIL: {e}")
        print(f"{'='*60}\n")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n  ⏹ Interrupted")
        sys.exit(130)


if __name__ == "__main__":
    main()
