from __future__ import annotations

import json
from typing import Any

import pytest


def _activity_body(sessions: list[dict[str, Any]] | None, stream_count: Any = None) -> bytes:
    """Build a get_activity response body the way Tautulli sends it."""
    sessions = sessions or []
    count = str(len(sessions)) if stream_count is None else stream_count
    payload = {
        "response": {
            "result": "success",
            "message": None,
            "data": {"stream_count": count, "sessions": sessions},
        }
    }
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def dune_session() -> dict[str, Any]:
    return {
        "user": "Mike",
        "platform": "Plex Web",
        "video_full_resolution": "4k",
        "stream_video_full_resolution": "1080p",
        "transcode_hw_full_pipeline": 1,
        "bandwidth": 6410,
        "throttled": 1,
        "state": "playing",
        "view_offset": 5102000,
        "duration": 8936000,
        "full_title": "Dune",
    }


@pytest.fixture
def music_session() -> dict[str, Any]:
    return {
        "user": "jo",
        "platform": "iOS",
        "video_full_resolution": "",
        "stream_video_full_resolution": "",
        "transcode_hw_full_pipeline": 0,
        "bandwidth": None,
        "throttled": "0",
        "state": "paused",
        "view_offset": "61500",
        "duration": "245999",
        "full_title": "Radiohead - Airbag",
    }


@pytest.fixture
def activity_body():
    return _activity_body
