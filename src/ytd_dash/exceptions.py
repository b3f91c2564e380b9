"""Errors raised by ytd-dash.

Providers translate yt-dlp, ``json`` and filesystem failures into these
types, and the core raises them for configs it cannot render, so the
CLI only ever has to handle :class:`YtdDashError`.

Hierarchy
---------
YtdDashError
├── ManifestConfigurationError
├── StreamSelectionError
├── StreamSourceError
├── MetadataExtractionError
├── VideoUnavailableError
├── OutputWriteError
└── EnvironmentError
"""

from __future__ import annotations


class YtdDashError(Exception):
    """Root of the hierarchy.

    *message* is shown as-is by the CLI; *hint*, when given, is printed
    on the line below it.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint


# --- Manifest generation ---------------------------------------------------

class ManifestConfigurationError(YtdDashError):
    """Raised when a manifest is requested without any video or audio stream."""


class StreamSelectionError(YtdDashError):
    """Raised when no stream survives selection."""


# --- Stream sources --------------------------------------------------------

class StreamSourceError(YtdDashError):
    """Raised when a stream dump cannot be read or has an unexpected shape."""


class MetadataExtractionError(YtdDashError):
    """Raised when yt-dlp fails to extract video metadata."""


class VideoUnavailableError(YtdDashError):
    """Raised when the target video is unavailable (private, removed, etc.)."""


# --- Output ----------------------------------------------------------------

class OutputWriteError(YtdDashError):
    """Raised when the generated manifest cannot be written."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(YtdDashError):
    """Raised when a required runtime dependency is not available."""


def append_ytdlp_upgrade_suggestion(hint: str) -> str:
    """Append yt-dlp upgrade guidance to an existing hint text.

    The suggestion is appended only once and preserves the original
    hint content verbatim.
    """
    marker = "Also try updating yt-dlp:"
    if marker in hint:
        return hint
    return "\n".join(
        (
            hint,
            marker,
            "    pip install --upgrade yt-dlp",
        )
    )
