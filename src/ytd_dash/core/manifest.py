"""DASH MPD assembly.

:func:`generate_manifest` turns a :class:`ManifestConfig` into the text
of a static, on-demand DASH manifest in which every Representation is a
single remote file addressed by byte ranges (``SegmentBase``).

The document is built line by line rather than through an XML tree so
that attribute order, indentation and escaping are fixed: the same
config always renders to the same string.

Layout
------
* video — one AdaptationSet (id ``0``) holding every video stream;
* audio — one AdaptationSet per language (ids from ``1``) holding every
  audio stream of that language, in first-seen order;
* text — one AdaptationSet per subtitle track, numbered after audio.
"""

from __future__ import annotations

import hashlib
import logging
import math
from collections.abc import Sequence

from ytd_dash.core.codecs import infer_mime_type, normalize_codec
from ytd_dash.core.languages import language_display_name, normalize_language_code
from ytd_dash.core.models import ManifestConfig, StreamDescriptor, SubtitleDescriptor
from ytd_dash.core.stream_selection import group_by_language
from ytd_dash.core.tables import (
    DEFAULT_AUDIO_BANDWIDTH,
    DEFAULT_AUDIO_CHANNELS,
    DEFAULT_AUDIO_SAMPLE_RATE,
    DEFAULT_FRAME_RATE,
    DEFAULT_VIDEO_BANDWIDTH,
    DEFAULT_VIDEO_HEIGHT,
    DEFAULT_VIDEO_WIDTH,
    SUBTITLE_BANDWIDTH,
    SUBTITLE_MIME_TYPES,
)
from ytd_dash.exceptions import ManifestConfigurationError

logger = logging.getLogger(__name__)

MPD_NAMESPACE: str = "urn:mpeg:dash:schema:mpd:2011"
ON_DEMAND_PROFILE: str = "urn:mpeg:dash:profile:isoff-on-demand:2011"
AUDIO_CHANNEL_SCHEME: str = "urn:mpeg:dash:23003:3:audio_channel_configuration:2011"
ROLE_SCHEME: str = "urn:mpeg:dash:role:2011"
MIN_BUFFER_TIME: str = "PT2S"

_XML_ESCAPES: tuple[tuple[str, str], ...] = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


# ---------------------------------------------------------------------------
# Value formatting
# ---------------------------------------------------------------------------

def escape_xml(value: str) -> str:
    """Escape ``& < > " '`` for use in attribute values and text nodes.

    ``&`` is replaced first, so each character is escaped exactly once.
    """
    for char, entity in _XML_ESCAPES:
        value = value.replace(char, entity)
    return value


def _is_missing_duration(seconds: float | None) -> bool:
    return seconds is None or not math.isfinite(seconds) or seconds <= 0


def format_duration(seconds: float | None) -> str:
    """Render seconds as an ISO 8601 duration.

    ``0`` → ``PT0S``, ``120`` → ``PT2M``, ``3665`` → ``PT1H1M5S``,
    ``10.5`` → ``PT10.500S``.  Fractions are kept to milliseconds.
    """
    if _is_missing_duration(seconds):
        return "PT0S"

    total_ms = round(seconds * 1000)  # type: ignore[operator]
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)

    parts = ["PT"]
    if hours > 0:
        parts.append(f"{hours}H")
    if minutes > 0:
        parts.append(f"{minutes}M")
    if millis > 0:
        parts.append(f"{secs}.{millis:03d}S")
    elif secs > 0:
        parts.append(f"{secs}S")

    duration = "".join(parts)
    return "PT0S" if duration == "PT" else duration


def _segment_base_lines(stream: StreamDescriptor, indent: str) -> list[str]:
    ranges = stream.byte_ranges
    if ranges is None:
        return []
    return [
        f'{indent}<SegmentBase indexRange="{ranges.index}">',
        f'{indent}  <Initialization range="{ranges.initialization}"/>',
        f"{indent}</SegmentBase>",
    ]


# ---------------------------------------------------------------------------
# Adaptation sets
# ---------------------------------------------------------------------------

def _video_adaptation_set(streams: Sequence[StreamDescriptor]) -> list[str]:
    first = streams[0]
    mime_type = infer_mime_type(first.container_format, first.codec, True)
    lines = [
        "    <AdaptationSet"
        ' id="0"'
        ' contentType="video"'
        f' mimeType="{escape_xml(mime_type)}"'
        ' subsegmentAlignment="true"'
        ' startWithSAP="1">'
    ]
    for number, stream in enumerate(streams, start=1):
        lines.append(
            "      <Representation"
            f' id="video-{number}"'
            f' bandwidth="{stream.bitrate or DEFAULT_VIDEO_BANDWIDTH}"'
            f' codecs="{escape_xml(normalize_codec(stream.codec))}"'
            f' width="{stream.width or DEFAULT_VIDEO_WIDTH}"'
            f' height="{stream.height or DEFAULT_VIDEO_HEIGHT}"'
            f' frameRate="{stream.fps or DEFAULT_FRAME_RATE}">'
        )
        lines.append(f"        <BaseURL>{escape_xml(stream.url)}</BaseURL>")
        lines.extend(_segment_base_lines(stream, "        "))
        lines.append("      </Representation>")
    lines.append("    </AdaptationSet>")
    return lines


def _audio_adaptation_set(
    set_id: int,
    language: str,
    streams: Sequence[StreamDescriptor],
) -> list[str]:
    first = streams[0]
    mime_type = infer_mime_type(first.container_format, first.codec, False)
    label = first.track_name or language
    lines = [
        "    <AdaptationSet"
        f' id="{set_id}"'
        ' contentType="audio"'
        f' mimeType="{escape_xml(mime_type)}"'
        f' lang="{escape_xml(language)}"'
        f' label="{escape_xml(label)}"'
        ' subsegmentAlignment="true"'
        ' startWithSAP="1">'
    ]
    for number, stream in enumerate(streams, start=1):
        lines.append(
            "      <Representation"
            f' id="audio-{set_id}-{number}"'
            f' bandwidth="{stream.bitrate or DEFAULT_AUDIO_BANDWIDTH}"'
            f' codecs="{escape_xml(normalize_codec(stream.codec))}"'
            f' audioSamplingRate="{stream.sample_rate or DEFAULT_AUDIO_SAMPLE_RATE}">'
        )
        lines.append(
            "        <AudioChannelConfiguration"
            f' schemeIdUri="{AUDIO_CHANNEL_SCHEME}"'
            f' value="{stream.channels or DEFAULT_AUDIO_CHANNELS}"/>'
        )
        lines.append(f"        <BaseURL>{escape_xml(stream.url)}</BaseURL>")
        lines.extend(_segment_base_lines(stream, "        "))
        lines.append("      </Representation>")
    lines.append("    </AdaptationSet>")
    return lines


def subtitle_mime_type(subtitle_format: str) -> str:
    """MIME type of a subtitle format; unknown formats are served as WebVTT."""
    return SUBTITLE_MIME_TYPES.get(subtitle_format.lower(), "text/vtt")


def _text_adaptation_set(set_id: int, subtitle: SubtitleDescriptor) -> list[str]:
    language = normalize_language_code(subtitle.language_code)
    label = subtitle.language_name or language_display_name(language)
    role = "caption" if subtitle.auto_generated else "subtitle"
    mime_type = subtitle_mime_type(subtitle.format)
    return [
        "    <AdaptationSet"
        f' id="{set_id}"'
        ' contentType="text"'
        f' mimeType="{escape_xml(mime_type)}"'
        f' lang="{escape_xml(language)}"'
        f' label="{escape_xml(label)}">',
        f'      <Role schemeIdUri="{ROLE_SCHEME}" value="{role}"/>',
        f'      <Representation id="text-{set_id}-1" bandwidth="{SUBTITLE_BANDWIDTH}">',
        f"        <BaseURL>{escape_xml(subtitle.url)}</BaseURL>",
        "      </Representation>",
        "    </AdaptationSet>",
    ]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_config(config: ManifestConfig) -> None:
    """Raise :class:`ManifestConfigurationError` for stream-less configs."""
    if not config.video_streams and not config.audio_streams:
        raise ManifestConfigurationError(
            "At least one video or audio stream must be provided.",
            hint="Check that the stream source returned adaptive streams.",
        )


def generate_manifest(
    config: ManifestConfig,
    *,
    sink: logging.Logger | None = None,
) -> str:
    """Render *config* as a DASH MPD document.

    Parameters
    ----------
    config:
        Streams and duration to describe.  Audio streams are grouped by
        language here, so the config may hold several qualities per
        language.
    sink:
        Diagnostic sink for the missing-duration warning.  Defaults to
        this module's logger.

    Raises
    ------
    ManifestConfigurationError
        If the config holds neither video nor audio streams.
    """
    log = sink or logger
    validate_config(config)

    if _is_missing_duration(config.duration):
        log.warning(
            "Duration is 0 or undefined; the manifest will declare PT0S "
            "and playback may be affected."
        )

    duration = format_duration(config.duration)
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<MPD"
        f' xmlns="{MPD_NAMESPACE}"'
        ' type="static"'
        f' mediaPresentationDuration="{duration}"'
        f' minBufferTime="{MIN_BUFFER_TIME}"'
        f' profiles="{ON_DEMAND_PROFILE}">',
        f'  <Period duration="{duration}">',
    ]

    if config.video_streams:
        lines.extend(_video_adaptation_set(config.video_streams))

    set_id = 1
    languages = group_by_language(config.audio_streams, lambda s: s.language_code)
    for language, streams in languages.items():
        lines.extend(_audio_adaptation_set(set_id, language, streams))
        set_id += 1

    for subtitle in config.subtitles:
        lines.extend(_text_adaptation_set(set_id, subtitle))
        set_id += 1

    lines.append("  </Period>")
    lines.append("</MPD>")
    return "\n".join(lines) + "\n"


def manifest_fingerprint(config: ManifestConfig) -> str:
    """SHA-256 of the config's canonical rendering.

    Equal configs always share a fingerprint, so it can key a cache of
    generated manifests.
    """
    return hashlib.sha256(repr(config).encode("utf-8")).hexdigest()
