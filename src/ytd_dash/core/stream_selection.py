"""Pure stream selection: video quality ladder, audio per language, subtitles.

Every function in this module is a **pure** transformation — no I/O,
no side effects, fully deterministic, and trivially unit-testable.

Video pipeline (:func:`select_video_streams`):

1. **Filter** — keep only video-only adaptive streams.
2. **Ladder** — one stream per resolution tier, highest tier first.
3. **Top up** — when fewer than ``MIN_VIDEO_QUALITIES`` tiers matched,
   add streams by preferred itag.
4. **Order** — ladder order, descending quality.

Audio pipeline (:func:`select_best_audio_streams`):

1. **Filter** — keep only audio streams.
2. **Group** — by normalized language, first-seen order.
3. **Pick** — preferred itag, else best AAC, else best bitrate.
4. **Order** — original/undetermined, then English, then alphabetical.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import TypeVar

from ytd_dash.core.languages import language_sort_key, normalize_language_code
from ytd_dash.core.models import StreamDescriptor, SubtitleDescriptor
from ytd_dash.core.tables import (
    AAC_CODEC_MARKERS,
    AAC_CONTAINER_FORMATS,
    MIN_VIDEO_QUALITIES,
    PREFERRED_AUDIO_ITAGS,
    PREFERRED_VIDEO_ITAGS,
    QUALITY_LADDER,
    SUBTITLE_FORMAT_PREFERENCE,
)

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def pick_by_base_id(
    streams: Sequence[StreamDescriptor],
    priority: Sequence[str],
) -> StreamDescriptor | None:
    """Return the first stream matching the highest-priority base itag."""
    for itag in priority:
        for stream in streams:
            if stream.base_id == itag:
                return stream
    return None


def group_by_language(
    items: Iterable[_T],
    code_of: Callable[[_T], str | None],
) -> dict[str, list[_T]]:
    """Group *items* by normalized language code, in first-seen order."""
    groups: dict[str, list[_T]] = {}
    for item in items:
        code = normalize_language_code(code_of(item))
        groups.setdefault(code, []).append(item)
    return groups


def _stream_language(stream: StreamDescriptor) -> str:
    return stream.language_code


# ---------------------------------------------------------------------------
# Video
# ---------------------------------------------------------------------------

def filter_video_only(
    streams: Sequence[StreamDescriptor],
) -> list[StreamDescriptor]:
    """Return only adaptive video-only streams."""
    return [stream for stream in streams if stream.is_video_only]


def _ladder_position(stream: StreamDescriptor) -> int:
    if stream.resolution in QUALITY_LADDER:
        return QUALITY_LADDER.index(stream.resolution)
    return len(QUALITY_LADDER)


def select_video_streams(
    streams: Sequence[StreamDescriptor],
) -> list[StreamDescriptor]:
    """Pick one video-only stream per quality tier.

    The result never holds two streams with the same resolution label
    or the same base itag, and is ordered by the quality ladder.
    Streams without a resolution label are only reachable through the
    itag top-up.
    """
    candidates = filter_video_only(streams)

    selected: list[StreamDescriptor] = []
    used_ids: set[str] = set()
    used_resolutions: set[str | None] = set()

    def _take(stream: StreamDescriptor) -> None:
        selected.append(stream)
        used_ids.add(stream.base_id)
        used_resolutions.add(stream.resolution)

    for tier in QUALITY_LADDER:
        if tier in used_resolutions:
            continue
        match = next(
            (
                s
                for s in candidates
                if s.resolution == tier and s.base_id not in used_ids
            ),
            None,
        )
        if match is not None:
            _take(match)

    if len(selected) < MIN_VIDEO_QUALITIES and len(candidates) > len(selected):
        for itag in PREFERRED_VIDEO_ITAGS:
            if len(selected) >= MIN_VIDEO_QUALITIES:
                break
            if itag in used_ids:
                continue
            match = next(
                (
                    s
                    for s in candidates
                    if s.base_id == itag and s.resolution not in used_resolutions
                ),
                None,
            )
            if match is not None:
                _take(match)

    # sorted() is stable: top-up picks outside the ladder keep their order.
    return sorted(selected, key=_ladder_position)


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

def filter_audio(streams: Sequence[StreamDescriptor]) -> list[StreamDescriptor]:
    """Return only audio streams."""
    return [stream for stream in streams if stream.is_audio]


def is_aac(stream: StreamDescriptor) -> bool:
    """True when the container or codec marks the stream as M4A/AAC."""
    if stream.container_format.upper() in AAC_CONTAINER_FORMATS:
        return True
    codec = stream.codec.lower()
    return any(marker in codec for marker in AAC_CODEC_MARKERS)


def _highest_bitrate(streams: Sequence[StreamDescriptor]) -> StreamDescriptor:
    # max() keeps the first of equal keys.
    return max(streams, key=lambda s: s.bitrate or 0)


def best_audio_stream(
    streams: Sequence[StreamDescriptor],
) -> StreamDescriptor | None:
    """Choose the representative of one language group."""
    if not streams:
        return None

    preferred = pick_by_base_id(streams, PREFERRED_AUDIO_ITAGS)
    if preferred is not None:
        return preferred

    aac = [s for s in streams if is_aac(s)]
    if aac:
        return _highest_bitrate(aac)

    return _highest_bitrate(streams)


def select_best_audio_streams(
    streams: Sequence[StreamDescriptor],
) -> list[StreamDescriptor]:
    """Return at most one audio stream per language, priority-ordered."""
    groups = group_by_language(filter_audio(streams), _stream_language)

    chosen: list[tuple[str, StreamDescriptor]] = []
    for code, group in groups.items():
        best = best_audio_stream(group)
        if best is not None:
            chosen.append((code, best))

    chosen.sort(key=lambda pair: language_sort_key(pair[0]))
    return [stream for _, stream in chosen]


# ---------------------------------------------------------------------------
# Subtitles
# ---------------------------------------------------------------------------

def _subtitle_rank(subtitle: SubtitleDescriptor) -> tuple[int, int]:
    fmt = subtitle.format.lower()
    format_rank = (
        SUBTITLE_FORMAT_PREFERENCE.index(fmt)
        if fmt in SUBTITLE_FORMAT_PREFERENCE
        else len(SUBTITLE_FORMAT_PREFERENCE)
    )
    return (int(subtitle.auto_generated), format_rank)


def select_subtitles(
    subtitles: Sequence[SubtitleDescriptor],
) -> list[SubtitleDescriptor]:
    """Return one subtitle track per language.

    Manually authored tracks beat auto-generated ones; after that the
    earlier entry in ``SUBTITLE_FORMAT_PREFERENCE`` wins.
    """
    groups = group_by_language(subtitles, lambda sub: sub.language_code)
    chosen = [
        (code, min(group, key=_subtitle_rank)) for code, group in groups.items()
    ]
    chosen.sort(key=lambda pair: language_sort_key(pair[0]))
    return [subtitle for _, subtitle in chosen]


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------

def log_selected_streams(
    video_streams: Sequence[StreamDescriptor],
    audio_streams: Sequence[StreamDescriptor],
    *,
    sink: logging.Logger | None = None,
) -> None:
    """Emit one DEBUG record per selected stream."""
    log = sink or logger
    log.debug("Selected %d video stream(s)", len(video_streams))
    for stream in video_streams:
        log.debug(
            "  video %s %s %s bitrate=%s",
            stream.id,
            stream.resolution or "?",
            stream.codec,
            stream.bitrate,
        )
    log.debug("Selected %d audio stream(s)", len(audio_streams))
    for stream in audio_streams:
        log.debug(
            "  audio %s lang=%s %s bitrate=%s",
            stream.id,
            normalize_language_code(stream.language_code),
            stream.codec,
            stream.bitrate,
        )
