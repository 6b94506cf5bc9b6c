from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping

from .client import InvalidResponseError
from .formatting import (
    FLAGS_WIDTH,
    PLATFORM_WIDTH,
    RESOLUTION_WIDTH,
    USER_WIDTH,
    format_progress,
    kbps_to_mbps,
    status_code,
)

logger = logging.getLogger(__name__)


def as_text(value: Any) -> str:
    """Coerce a raw field to a string; ``None`` becomes ``""``."""
    if value is None:
        return ""
    text = str(value).strip()
    if len(text) >= 2 and text[0] == text[-1] == '"':
        text = text[1:-1]
    return text


def as_int(value: Any) -> int:
    """Coerce a raw numeric field; absent, empty or non-numeric becomes 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return math.floor(value) if math.isfinite(value) else 0
    text = as_text(value)
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return 0
    return math.floor(number) if math.isfinite(number) else 0


def as_flag(value: Any) -> int:
    """Coerce a boolean-like field to 0 or 1."""
    return 1 if as_int(value) != 0 else 0


@dataclass(frozen=True)
class DisplaySession:
    """One active stream, normalized and ready for display."""

    user: str
    platform: str
    video_resolution: str
    stream_resolution: str
    transcoded: int
    throttled: int
    mbps: float
    status: str
    progress: str
    title: str

    @property
    def flags(self) -> str:
        return f"{self.transcoded}{self.throttled}"[:FLAGS_WIDTH]

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> DisplaySession:
        return cls(
            user=as_text(raw.get("user"))[:USER_WIDTH],
            platform=as_text(raw.get("platform"))[:PLATFORM_WIDTH],
            video_resolution=as_text(raw.get("video_full_resolution"))[:RESOLUTION_WIDTH],
            stream_resolution=as_text(raw.get("stream_video_full_resolution"))[:RESOLUTION_WIDTH],
            transcoded=as_flag(raw.get("transcode_hw_full_pipeline")),
            throttled=as_flag(raw.get("throttled")),
            mbps=kbps_to_mbps(as_int(raw.get("bandwidth"))),
            status=status_code(as_text(raw.get("state"))),
            progress=format_progress(as_int(raw.get("view_offset")), as_int(raw.get("duration"))),
            title=as_text(raw.get("full_title")),
        )


@dataclass(frozen=True)
class Activity:
    stream_count: int
    sessions: tuple[DisplaySession, ...] = ()

    @property
    def is_idle(self) -> bool:
        return self.stream_count == 0

    def to_json(self) -> str:
        payload = {
            "stream_count": self.stream_count,
            "sessions": [asdict(session) for session in self.sessions],
        }
        return json.dumps(payload, indent=2, sort_keys=True)


def _stream_count(data: Mapping[str, Any]) -> int:
    raw = data.get("stream_count")
    if raw is None or isinstance(raw, bool):
        raise InvalidResponseError("Response has no stream count; not a Tautulli activity payload.")
    try:
        count = int(as_text(raw))
    except ValueError as e:
        raise InvalidResponseError(f"Invalid stream count in response: {raw!r}") from e
    if count < 0:
        raise InvalidResponseError(f"Invalid stream count in response: {count}")
    return count


def extract_activity(body: bytes | str) -> Activity:
    """Parse a ``get_activity`` body into an Activity.

    The envelope is ``{"response": {"result": ..., "data": {"stream_count": ..., "sessions": [...]}}}``.
    Sessions keep their array order.

    Raises:
        InvalidResponseError: if the body is not an activity payload.
    """
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise InvalidResponseError("Tautulli returned a response that is not valid JSON.") from e

    envelope = payload.get("response") if isinstance(payload, dict) else None
    if not isinstance(envelope, dict):
        raise InvalidResponseError("Response has no 'response' envelope.")

    result = envelope.get("result")
    if result is not None and result != "success":
        message = envelope.get("message") or "unknown error"
        raise InvalidResponseError(f"Tautulli reported an error: {message}")

    data = envelope.get("data")
    if not isinstance(data, dict):
        raise InvalidResponseError("Response has no 'data' section.")

    count = _stream_count(data)
    if count == 0:
        logger.info("No active sessions")
        return Activity(stream_count=0)

    raw_sessions = data.get("sessions")
    if not isinstance(raw_sessions, list):
        logger.warning("stream_count=%d but no sessions array in response", count)
        raw_sessions = []
    elif len(raw_sessions) != count:
        logger.warning("stream_count=%d but sessions array has %d entries", count, len(raw_sessions))

    sessions = tuple(
        DisplaySession.from_raw(raw if isinstance(raw, dict) else {}) for raw in raw_sessions
    )
    logger.debug("Extracted %d sessions", len(sessions))
    return Activity(stream_count=count, sessions=sessions)
