"""Row formatting and table rendering for active sessions."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Iterable, TextIO

if TYPE_CHECKING:
    from .sessions import DisplaySession

USER_WIDTH = 12
PLATFORM_WIDTH = 4
RESOLUTION_WIDTH = 5
FLAGS_WIDTH = 2
MBPS_WIDTH = 4
STATUS_WIDTH = 2
PROGRESS_WIDTH = 15

MBPS_CEILING = 99.9
MBPS_SENTINEL = 9999

STATUS_CODES = {
    "playing": "pl",
    "paused": "pa",
}
UNKNOWN_STATUS = "--"


def kbps_to_mbps(kbps: int) -> float:
    return kbps / 1000


def format_mbps(mbps: float) -> str:
    """Render Mbps right-aligned in a 4-character field.

    Readings above 99.9 are treated as bogus and shown as 9999.
    """
    if mbps > MBPS_CEILING:
        return f"{MBPS_SENTINEL:>{MBPS_WIDTH}d}"
    # 9.995 and up would print as "10.00"
    if round(mbps, 2) >= 10.0:
        return f"{mbps:>{MBPS_WIDTH}.1f}"
    return f"{mbps:>{MBPS_WIDTH}.2f}"


def format_duration(milliseconds: int) -> str:
    """Milliseconds to ``H:MM:SS``; sub-second remainders are dropped."""
    seconds = max(milliseconds, 0) // 1000
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    return f"{hours}:{minutes:02d}:{seconds % 60:02d}"


def format_progress(elapsed_ms: int, total_ms: int) -> str:
    return f"{format_duration(elapsed_ms).strip()}/{format_duration(total_ms).strip()}"


def status_code(state: str) -> str:
    """Map a playback state to its 2-character column code.

    Unmapped states show their first two characters; an empty state shows ``--``.
    """
    if not state:
        return UNKNOWN_STATUS
    return STATUS_CODES.get(state.lower(), state[:STATUS_WIDTH])


def _layout(
    user: str,
    platform: str,
    video_res: str,
    stream_res: str,
    flags: str,
    mbps: str,
    status: str,
    progress: str,
    title: str,
) -> str:
    return (
        f"{user:<{USER_WIDTH}} "
        f"{platform:<{PLATFORM_WIDTH}} "
        f"{video_res:<{RESOLUTION_WIDTH}} "
        f"{stream_res:<{RESOLUTION_WIDTH}} "
        f"{flags:<{FLAGS_WIDTH}} "
        f"{mbps:>{MBPS_WIDTH}} "
        f"{status:<{STATUS_WIDTH}} "
        f"{progress:<{PROGRESS_WIDTH}} "
        f"{title}"
    ).rstrip()


def format_header() -> str:
    return _layout("User", "Plat", "Vres", "Sres", "TT", "Mbps", "ST", "Progress", "Title")


def format_row(session: DisplaySession) -> str:
    return _layout(
        session.user,
        session.platform,
        session.video_resolution,
        session.stream_resolution,
        session.flags,
        format_mbps(session.mbps),
        session.status,
        session.progress,
        session.title,
    )


def render_table(sessions: Iterable[DisplaySession]) -> list[str]:
    """Header line followed by one line per session, in the given order."""
    return [format_header(), *(format_row(session) for session in sessions)]


def print_table(sessions: Iterable[DisplaySession], stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    for line in render_table(sessions):
        print(line, file=out)
