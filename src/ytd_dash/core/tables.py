"""Ordered lookup tables shared by the selectors and the assembler.

Everything here is plain data — tuples and read-only mappings — so each
table can be tested and replaced independently of the code that walks
it.  Order is significant wherever a tuple is used.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


# ---------------------------------------------------------------------------
# Video quality ladder
# ---------------------------------------------------------------------------

QUALITY_LADDER: tuple[str, ...] = (
    "2160p",
    "1440p",
    "1080p",
    "720p",
    "480p",
    "360p",
    "240p",
    "144p",
)
"""Resolution tiers in selection priority (highest quality first)."""

MIN_VIDEO_QUALITIES: int = 3
"""Below this many ladder picks the selector tops up by itag preference."""


# ---------------------------------------------------------------------------
# Itag preference lists
# ---------------------------------------------------------------------------

PREFERRED_VIDEO_ITAGS: tuple[str, ...] = (
    "264",  # 1440p MP4 AVC
    "137",  # 1080p MP4 AVC
    "136",  # 720p MP4 AVC
    "135",  # 480p MP4 AVC
    "400",  # 1440p MP4 AV1
    "399",  # 1080p MP4 AV1
    "398",  # 720p MP4 AV1
    "397",  # 480p MP4 AV1
    "271",  # 1440p WebM VP9
    "248",  # 1080p WebM VP9
    "247",  # 720p WebM VP9
    "246",  # 480p WebM VP9
)
"""Video itags used to top up a short quality ladder."""

PREFERRED_AUDIO_ITAGS: tuple[str, ...] = (
    "141",  # m4a 256kbps
    "140",  # m4a 128kbps
    "251",  # webm 160kbps
    "250",  # webm 70kbps
    "249",  # webm 50kbps
    "139",  # m4a 48kbps
)
"""Audio itags, highest quality first."""


# ---------------------------------------------------------------------------
# Codecs
# ---------------------------------------------------------------------------

CANONICAL_CODEC_PREFIXES: tuple[str, ...] = (
    "avc1.",
    "vp09.",
    "av01.",
    "mp4a.",
    "opus",
    "vorbis",
)
"""Lower-cased prefixes of codec strings that are already DASH-ready."""

CODEC_ALIASES: tuple[tuple[str, str], ...] = (
    ("h264", "avc1.42E01E"),
    ("vp9", "vp09.00.10.08"),
    ("av1", "av01.0.05M.08"),
    ("aac", "mp4a.40.2"),
    ("opus", "opus"),
    ("vorbis", "vorbis"),
)
"""``(substring, canonical codec)`` pairs, matched in order."""

AAC_CODEC_MARKERS: tuple[str, ...] = ("mp4a", "aac")
AAC_CONTAINER_FORMATS: frozenset[str] = frozenset({"M4A", "MP4A"})


# ---------------------------------------------------------------------------
# MIME types
# ---------------------------------------------------------------------------

FORMAT_MIME_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "MPEG_4": "video/mp4",
        "MP4": "video/mp4",
        "WEBM": "video/webm",
        "V_VP9": "video/webm",
        "VP9": "video/webm",
        "M4A": "audio/mp4",
        "MP4A": "audio/mp4",
        "WEBMA": "audio/webm",
        "OPUS": "audio/webm",
        "VORBIS": "audio/webm",
    }
)
"""Upper-cased container format token → MIME type (exact match)."""

CODEC_MIME_TYPES: tuple[tuple[str, str], ...] = (
    ("avc1", "video/mp4"),
    ("h264", "video/mp4"),
    ("vp09", "video/webm"),
    ("vp9", "video/webm"),
    ("av01", "video/mp4"),
    ("av1", "video/mp4"),
    ("mp4a", "audio/mp4"),
    ("opus", "audio/webm"),
    ("vorbis", "audio/webm"),
)
"""``(codec substring, MIME type)`` pairs, matched in order."""

SUBTITLE_MIME_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "vtt": "text/vtt",
        "srv3": "application/ttml+xml",
        "srv2": "application/ttml+xml",
        "srv1": "application/x-subrip",
        "ttml": "application/ttml+xml",
        "srt": "application/x-subrip",
    }
)

SUBTITLE_FORMAT_PREFERENCE: tuple[str, ...] = (
    "vtt",
    "ttml",
    "srv3",
    "srv2",
    "srv1",
    "srt",
)


# ---------------------------------------------------------------------------
# Representation defaults
# ---------------------------------------------------------------------------

DEFAULT_VIDEO_BANDWIDTH: int = 1_000_000
DEFAULT_VIDEO_WIDTH: int = 1920
DEFAULT_VIDEO_HEIGHT: int = 1080
DEFAULT_FRAME_RATE: int = 30

DEFAULT_AUDIO_BANDWIDTH: int = 128_000
DEFAULT_AUDIO_SAMPLE_RATE: int = 44_100
DEFAULT_AUDIO_CHANNELS: int = 2

SUBTITLE_BANDWIDTH: int = 256


# ---------------------------------------------------------------------------
# Languages
# ---------------------------------------------------------------------------

LANGUAGE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "de": "German",
        "en": "English",
        "es": "Spanish",
        "es-419": "Spanish (Latin America)",
        "id": "Indonesian",
        "pt": "Portuguese",
        "pt-BR": "Portuguese (Brazil)",
        "ru": "Russian",
        "fr": "French",
        "it": "Italian",
        "ja": "Japanese",
        "ko": "Korean",
        "zh": "Chinese",
        "zh-CN": "Chinese (Simplified)",
        "zh-TW": "Chinese (Traditional)",
        "ar": "Arabic",
        "hi": "Hindi",
        "und": "Unknown",
        "original": "Original",
    }
)
"""Normalized language code → display name."""

TOP_PRIORITY_LANGUAGES: frozenset[str] = frozenset({"und", "original"})
SECOND_PRIORITY_LANGUAGES: frozenset[str] = frozenset({"en"})
