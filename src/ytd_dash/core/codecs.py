"""Codec and MIME-type normalisation for DASH manifests.

Both functions are pure table walks over :mod:`ytd_dash.core.tables`.
Unknown inputs pass through (codecs) or fall back to a generic MIME
type rather than raising.
"""

from __future__ import annotations

from ytd_dash.core.tables import (
    CANONICAL_CODEC_PREFIXES,
    CODEC_ALIASES,
    CODEC_MIME_TYPES,
    FORMAT_MIME_TYPES,
)


def normalize_codec(codec: str) -> str:
    """Map a loose codec name to its DASH ``codecs`` identifier.

    Strings that already start with a canonical prefix (``avc1.``,
    ``vp09.``, ``av01.``, ``mp4a.``, ``opus``, ``vorbis``) are returned
    unchanged, case included.  Otherwise the first alias whose name is
    a case-insensitive substring of *codec* wins.  Unknown codecs are
    returned as given, which makes the function idempotent.
    """
    if not codec:
        return codec

    lowered = codec.lower()
    if lowered.startswith(CANONICAL_CODEC_PREFIXES):
        return codec

    for alias, canonical in CODEC_ALIASES:
        if alias in lowered:
            return canonical
    return codec


def _mime_from_format(container_format: str) -> str | None:
    return FORMAT_MIME_TYPES.get(container_format.upper())


def _mime_from_codec(codec: str) -> str | None:
    lowered = codec.lower()
    for marker, mime_type in CODEC_MIME_TYPES:
        if marker in lowered:
            return mime_type
    return None


def infer_mime_type(
    container_format: str | None,
    codec: str | None,
    is_video: bool,
) -> str:
    """Infer the MIME type of a stream.

    The container format token is consulted first, then the codec, and
    finally the stream kind.  The format lookup does not look at
    *is_video*: ``WEBM`` is always ``video/webm`` (the audio token is
    ``WEBMA``).
    """
    if container_format:
        mime_type = _mime_from_format(container_format)
        if mime_type:
            return mime_type

    if codec:
        mime_type = _mime_from_codec(codec)
        if mime_type:
            return mime_type

    return "video/mp4" if is_video else "audio/mp4"
