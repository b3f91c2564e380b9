"""Raw backend JSON → domain models.

The streaming backend reports each stream as a JSON object shaped
roughly like::

    {
        "id": "137", "url": "https://...", "codec": "avc1.640028",
        "format": "MPEG_4", "resolution": "1080p", "bitrate": 5000000,
        "width": 1920, "height": 1080, "fps": 30, "videoOnly": true,
        "itagItem": {
            "itagType": "VIDEO", "initStart": 0, "initEnd": 740,
            "indexStart": 741, "indexEnd": 1200, "approxDurationMs": 212000,
            "sampleRate": 44100, "audioChannels": 2,
            "audioLocale": "en", "audioTrackId": "en.0",
            "audioTrackName": "English original"
        }
    }

Parsing is lenient: malformed entries are skipped, missing numbers
become ``None`` and are defaulted later by the manifest assembler.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from ytd_dash.core.models import (
    ROLE_AUDIO,
    ROLE_MIXED,
    ROLE_VIDEO_ONLY,
    ByteRanges,
    StreamDescriptor,
    StreamLanguage,
    StreamListing,
    SubtitleDescriptor,
)


# ---------------------------------------------------------------------------
# Field coercion
# ---------------------------------------------------------------------------

def _as_int(value: Any) -> int | None:
    """Coerce numbers and numeric strings to ``int``; anything else is ``None``."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _itag_item(raw: dict[str, Any]) -> dict[str, Any]:
    item = raw.get("itagItem")
    return item if isinstance(item, dict) else {}


# ---------------------------------------------------------------------------
# Streams
# ---------------------------------------------------------------------------

def _resolve_role(
    raw: dict[str, Any],
    item: dict[str, Any],
    default_role: str | None,
) -> str:
    if raw.get("videoOnly") is True:
        return ROLE_VIDEO_ONLY
    itag_type = str(item.get("itagType", "")).upper()
    if itag_type == "AUDIO":
        return ROLE_AUDIO
    if itag_type == "VIDEO_ONLY":
        return ROLE_VIDEO_ONLY
    if raw.get("videoOnly") is False and default_role == ROLE_VIDEO_ONLY:
        return ROLE_MIXED
    return default_role or ROLE_MIXED


def _parse_byte_ranges(item: dict[str, Any]) -> ByteRanges | None:
    ranges = ByteRanges.from_offsets(
        _as_int(item.get("initStart")),
        _as_int(item.get("initEnd")),
        _as_int(item.get("indexStart")),
        _as_int(item.get("indexEnd")),
    )
    # The backend reports 0-0/0-0 for streams it could not index.
    if ranges is not None and ranges.init_end == 0 and ranges.index_end == 0:
        return None
    return ranges


def _parse_language(
    raw: dict[str, Any],
    item: dict[str, Any],
) -> StreamLanguage | None:
    def _lookup(key: str) -> str | None:
        return _as_str(item.get(key)) or _as_str(raw.get(key))

    language = StreamLanguage(
        locale=_lookup("audioLocale"),
        track_id=_lookup("audioTrackId"),
        track_name=_lookup("audioTrackName"),
    )
    if language == StreamLanguage():
        return None
    return language


def parse_stream(
    raw: dict[str, Any],
    *,
    default_role: str | None = None,
) -> StreamDescriptor | None:
    """Convert one raw stream object, or return ``None`` when it has no URL."""
    url = _as_str(raw.get("url"))
    if url is None:
        return None

    item = _itag_item(raw)
    stream_id = _as_str(raw.get("id")) or _as_str(item.get("id")) or ""
    container_format = _as_str(raw.get("format")) or _as_str(item.get("mediaFormat")) or ""

    return StreamDescriptor(
        id=stream_id,
        role=_resolve_role(raw, item, default_role),
        url=url,
        codec=_as_str(raw.get("codec")) or _as_str(item.get("codec")) or "",
        container_format=container_format,
        resolution=_as_str(raw.get("resolution")) or _as_str(item.get("resolutionString")),
        bitrate=_as_int(raw.get("bitrate")) or _as_int(item.get("bitrate")),
        width=_as_int(raw.get("width")) or _as_int(item.get("width")),
        height=_as_int(raw.get("height")) or _as_int(item.get("height")),
        fps=_as_int(raw.get("fps")) or _as_int(item.get("fps")),
        sample_rate=_as_int(item.get("sampleRate")),
        channels=_as_int(item.get("audioChannels")),
        byte_ranges=_parse_byte_ranges(item),
        language=_parse_language(raw, item),
        approx_duration_ms=_as_int(item.get("approxDurationMs")),
    )


def parse_streams(
    raw_streams: Any,
    *,
    default_role: str | None = None,
) -> tuple[StreamDescriptor, ...]:
    """Parse a list of raw stream objects, skipping malformed entries."""
    if not isinstance(raw_streams, list):
        return ()
    parsed = (
        parse_stream(entry, default_role=default_role)
        for entry in raw_streams
        if isinstance(entry, dict)
    )
    return tuple(stream for stream in parsed if stream is not None)


# ---------------------------------------------------------------------------
# Subtitles
# ---------------------------------------------------------------------------

def _subtitle_format(raw: dict[str, Any]) -> str:
    fmt = _as_str(raw.get("format")) or _as_str(raw.get("ext"))
    if fmt:
        return fmt.lower()
    mime_type = (_as_str(raw.get("mimeType")) or "").lower()
    if "ttml" in mime_type:
        return "ttml"
    if "subrip" in mime_type:
        return "srt"
    return "vtt"


def parse_subtitle(raw: dict[str, Any]) -> SubtitleDescriptor | None:
    """Convert one raw subtitle object, or return ``None`` when it has no URL."""
    url = _as_str(raw.get("url"))
    if url is None:
        return None
    return SubtitleDescriptor(
        url=url,
        language_code=(
            _as_str(raw.get("languageCode"))
            or _as_str(raw.get("code"))
            or _as_str(raw.get("language"))
            or "und"
        ),
        language_name=_as_str(raw.get("languageName")) or _as_str(raw.get("name")),
        format=_subtitle_format(raw),
        auto_generated=bool(raw.get("autoGenerated") or raw.get("isAutoGenerated")),
    )


def parse_subtitles(raw_subtitles: Any) -> tuple[SubtitleDescriptor, ...]:
    if not isinstance(raw_subtitles, list):
        return ()
    parsed = (parse_subtitle(entry) for entry in raw_subtitles if isinstance(entry, dict))
    return tuple(subtitle for subtitle in parsed if subtitle is not None)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def calculate_duration(
    video_streams: Sequence[StreamDescriptor],
    audio_streams: Sequence[StreamDescriptor],
) -> float:
    """Duration in seconds from the streams' own metadata.

    Video streams are consulted before audio streams; ``0.0`` when no
    stream knows its duration.
    """
    for stream in (*video_streams, *audio_streams):
        if stream.approx_duration_ms:
            return stream.approx_duration_ms / 1000
    return 0.0


def parse_stream_listing(
    data: dict[str, Any],
    *,
    video_id: str = "",
    title: str = "",
) -> StreamListing:
    """Build a :class:`StreamListing` from a backend stream dump.

    Accepts ``videoOnlyStreams``/``videoStreams``, ``audioStreams``
    and ``subtitles`` arrays, or a single mixed ``streams`` array.  Every
    entry lands in the list matching its own role, whichever array it
    came from.
    """
    raw_video = data.get("videoOnlyStreams", data.get("videoStreams"))
    parsed = (
        *parse_streams(raw_video, default_role=ROLE_VIDEO_ONLY),
        *parse_streams(data.get("audioStreams"), default_role=ROLE_AUDIO),
        *parse_streams(data.get("streams")),
    )
    # Muxed streams are dropped.
    video = tuple(s for s in parsed if s.is_video_only)
    audio = tuple(s for s in parsed if s.is_audio)

    raw_duration = data.get("duration")
    duration = (
        float(raw_duration)
        if isinstance(raw_duration, (int, float)) and not isinstance(raw_duration, bool)
        else calculate_duration(video, audio)
    )

    return StreamListing(
        video_id=_as_str(data.get("videoId")) or _as_str(data.get("id")) or video_id,
        title=_as_str(data.get("title")) or title,
        video_streams=video,
        audio_streams=audio,
        subtitles=parse_subtitles(data.get("subtitles")),
        duration=duration,
    )
