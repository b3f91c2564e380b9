"""yt-dlp backed implementation of :class:`~ytd_dash.core.protocols.StreamProvider`.

This module is the **only** place in the codebase that imports ``yt_dlp``.
All yt-dlp exceptions are caught here and re-raised as typed
:class:`~ytd_dash.exceptions.YtdDashError` subclasses — nothing raw
escapes the infrastructure boundary.
"""

from __future__ import annotations

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
from ytd_dash.exceptions import (
    EnvironmentError,
    MetadataExtractionError,
    VideoUnavailableError,
    append_ytdlp_upgrade_suggestion,
)

# yt-dlp reports ``m4a``/``mp4``/``webm`` extensions; the manifest
# layer speaks the backend's container tokens.
_VIDEO_CONTAINERS: dict[str, str] = {"mp4": "MPEG_4", "webm": "WEBM"}
_AUDIO_CONTAINERS: dict[str, str] = {"m4a": "M4A", "mp4": "M4A", "webm": "WEBMA"}

_PROGRESSIVE_PROTOCOLS: frozenset[str] = frozenset({"http", "https"})


def _parse_range(value: Any) -> tuple[int, int] | None:
    """``"0-740"`` → ``(0, 740)``; anything else → ``None``."""
    if not isinstance(value, str):
        return None
    start, sep, end = value.partition("-")
    if not sep or not start.isdigit() or not end.isdigit():
        return None
    return int(start), int(end)


class YtDlpStreamProvider:
    """Concrete :class:`StreamProvider` backed by the yt-dlp Python API.

    Usage::

        provider = YtDlpStreamProvider()
        listing = provider.fetch_streams("https://www.youtube.com/watch?v=...")

    Parameters
    ----------
    automatic_captions:
        Also list auto-generated caption tracks (one per language, in
        the original language only).
    """

    # Substrings in yt-dlp error messages that indicate the video itself
    # is unavailable (as opposed to a transient or extraction error).
    _UNAVAILABLE_SIGNALS: tuple[str, ...] = (
        "unavailable",
        "private video",
        "removed",
        "not available",
        "account terminated",
        "video has been removed",
        "this video is no longer available",
        "sign in to confirm your age",
    )

    def __init__(self, *, automatic_captions: bool = False) -> None:
        self._automatic_captions: bool = automatic_captions

    @staticmethod
    def _build_opts() -> dict[str, Any]:
        """Return yt-dlp options suitable for metadata-only extraction."""
        return {
            "quiet": True,
            "no_warnings": True,
            "no_color": True,
            # Do not write any files to disk.
            "skip_download": True,
        }

    # ------------------------------------------------------------------
    # Protocol method
    # ------------------------------------------------------------------

    def fetch_streams(self, source: str) -> StreamListing:
        """Extract every adaptive stream of the video at *source*.

        Raises
        ------
        EnvironmentError
            When yt-dlp is not installed.
        VideoUnavailableError
            When yt-dlp reports the video as unavailable / private / removed.
        MetadataExtractionError
            For all other extraction failures.
        """
        info = self._extract_info(source)
        return self._parse_listing(info)

    def _extract_info(self, url: str) -> dict[str, Any]:
        opts = self._build_opts()

        try:
            import yt_dlp
            import yt_dlp.utils
        except ModuleNotFoundError as exc:
            raise EnvironmentError(
                "yt-dlp is not installed. Install with: pip install yt-dlp",
            ) from exc

        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                info: Any = ydl.extract_info(url, download=False)
        except yt_dlp.utils.DownloadError as exc:
            self._raise_mapped(exc)
        except Exception as exc:
            raise MetadataExtractionError(
                f"Unexpected yt-dlp error: {exc}",
            ) from exc

        if info is None:
            raise MetadataExtractionError(
                "yt-dlp returned no metadata for the given URL.",
                hint="The URL may not point to a valid video.",
            )

        if not isinstance(info, dict):
            raise MetadataExtractionError(
                "yt-dlp returned an unexpected data structure.",
            )

        return dict(info)  # shallow copy

    # ------------------------------------------------------------------
    # yt-dlp info dict → domain models
    # ------------------------------------------------------------------

    def _parse_listing(self, info: dict[str, Any]) -> StreamListing:
        raw_duration = info.get("duration")
        duration = float(raw_duration) if isinstance(raw_duration, (int, float)) else None
        duration_ms = int(duration * 1000) if duration else None

        raw_formats = info.get("formats")
        formats = raw_formats if isinstance(raw_formats, list) else []
        streams = [
            self._parse_format(fmt, duration_ms)
            for fmt in formats
            if isinstance(fmt, dict)
        ]
        parsed = [stream for stream in streams if stream is not None]

        return StreamListing(
            video_id=str(info.get("id", "")),
            title=str(info.get("title", "Unknown")),
            video_streams=tuple(s for s in parsed if s.is_video_only),
            audio_streams=tuple(s for s in parsed if s.is_audio),
            subtitles=self._parse_subtitles(info),
            duration=duration,
        )

    @staticmethod
    def _role(fmt: dict[str, Any]) -> str | None:
        vcodec = str(fmt.get("vcodec") or "none")
        acodec = str(fmt.get("acodec") or "none")
        has_video = vcodec != "none"
        has_audio = acodec != "none"
        if has_video and has_audio:
            return ROLE_MIXED
        if has_video:
            return ROLE_VIDEO_ONLY
        if has_audio:
            return ROLE_AUDIO
        # Storyboards and other image-only formats.
        return None

    @classmethod
    def _parse_format(
        cls,
        fmt: dict[str, Any],
        duration_ms: int | None,
    ) -> StreamDescriptor | None:
        """Convert one yt-dlp format dict, or ``None`` when unusable."""
        url = fmt.get("url")
        role = cls._role(fmt)
        if not url or role is None:
            return None
        if fmt.get("protocol") not in _PROGRESSIVE_PROTOCOLS:
            return None

        is_audio = role == ROLE_AUDIO
        ext = str(fmt.get("ext") or "")
        containers = _AUDIO_CONTAINERS if is_audio else _VIDEO_CONTAINERS

        width = fmt.get("width") if isinstance(fmt.get("width"), int) else None
        height = fmt.get("height") if isinstance(fmt.get("height"), int) else None
        resolution = None
        if height is not None and not is_audio:
            # "1080p" names the short side, also for portrait videos.
            resolution = f"{min(height, width or height)}p"

        tbr = fmt.get("tbr")
        raw_fps = fmt.get("fps")
        language = fmt.get("language")

        return StreamDescriptor(
            id=str(fmt.get("format_id", "")),
            role=role,
            url=str(url),
            codec=str(fmt.get("acodec") if is_audio else fmt.get("vcodec")),
            container_format=containers.get(ext, ext.upper()),
            resolution=resolution,
            bitrate=int(tbr * 1000) if isinstance(tbr, (int, float)) else None,
            width=width,
            height=height,
            fps=round(raw_fps) if isinstance(raw_fps, (int, float)) else None,
            sample_rate=fmt.get("asr") if isinstance(fmt.get("asr"), int) else None,
            channels=(
                fmt.get("audio_channels")
                if isinstance(fmt.get("audio_channels"), int)
                else None
            ),
            byte_ranges=cls._parse_byte_ranges(fmt),
            language=StreamLanguage(locale=str(language)) if language else None,
            approx_duration_ms=duration_ms,
        )

    @staticmethod
    def _parse_byte_ranges(fmt: dict[str, Any]) -> ByteRanges | None:
        options = fmt.get("streaming_options")
        if not isinstance(options, dict):
            return None
        init_range = _parse_range(options.get("init_range"))
        index_range = _parse_range(options.get("index_range"))
        if init_range is None or index_range is None:
            return None
        return ByteRanges(
            init_start=init_range[0],
            init_end=init_range[1],
            index_start=index_range[0],
            index_end=index_range[1],
        )

    def _parse_subtitles(self, info: dict[str, Any]) -> tuple[SubtitleDescriptor, ...]:
        tracks: list[SubtitleDescriptor] = []
        tracks.extend(self._subtitle_tracks(info.get("subtitles"), auto_generated=False))

        if self._automatic_captions:
            manual = {track.language_code for track in tracks}
            automatic = info.get("automatic_captions")
            if isinstance(automatic, dict):
                originals = {
                    lang.removesuffix("-orig"): entries
                    for lang, entries in automatic.items()
                    if lang.endswith("-orig") and lang.removesuffix("-orig") not in manual
                }
                tracks.extend(self._subtitle_tracks(originals, auto_generated=True))

        return tuple(tracks)

    @staticmethod
    def _subtitle_tracks(
        raw: Any,
        *,
        auto_generated: bool,
    ) -> list[SubtitleDescriptor]:
        if not isinstance(raw, dict):
            return []
        tracks: list[SubtitleDescriptor] = []
        for lang, entries in raw.items():
            if not isinstance(entries, list):
                continue
            for entry in entries:
                if not isinstance(entry, dict) or not entry.get("url"):
                    continue
                tracks.append(
                    SubtitleDescriptor(
                        url=str(entry["url"]),
                        language_code=str(lang),
                        language_name=entry.get("name") or None,
                        format=str(entry.get("ext") or "vtt"),
                        auto_generated=auto_generated,
                    )
                )
        return tracks

    # ------------------------------------------------------------------
    # Exception mapping
    # ------------------------------------------------------------------

    @classmethod
    def _raise_mapped(cls, exc: Exception) -> None:
        """Translate a yt-dlp ``DownloadError`` into a domain exception.

        Always raises — the ``Never`` return type is implicit via
        ``raise`` at every exit path.
        """
        msg_lower = str(exc).lower()
        if any(signal in msg_lower for signal in cls._UNAVAILABLE_SIGNALS):
            raise VideoUnavailableError(
                str(exc),
                hint="The video may be private, removed, or geo-restricted.",
            ) from exc
        raise MetadataExtractionError(
            str(exc),
            hint=append_ytdlp_upgrade_suggestion(
                "Check the URL and your network connection.",
            ),
        ) from exc
