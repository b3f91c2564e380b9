"""Domain models for ytd-dash.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and a few derived properties.  They carry
zero I/O, zero dependencies on external packages, and must remain pure
across the entire lifecycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field


# ---------------------------------------------------------------------------
# Stream roles
# ---------------------------------------------------------------------------

ROLE_VIDEO_ONLY: str = "video-only"
"""Adaptive stream carrying video and no audio."""

ROLE_AUDIO: str = "audio"
"""Adaptive stream carrying audio only."""

ROLE_MIXED: str = "mixed"
"""Progressive stream with both video and audio muxed together."""

STREAM_ROLES: tuple[str, ...] = (ROLE_VIDEO_ONLY, ROLE_AUDIO, ROLE_MIXED)


# ---------------------------------------------------------------------------
# Stream building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ByteRanges:
    """Initialization and index byte ranges inside a single remote file.

    Only ever constructed when all four offsets are known; a stream with
    partial range data carries ``None`` instead.
    """

    init_start: int
    init_end: int
    index_start: int
    index_end: int

    @property
    def initialization(self) -> str:
        """Initialization segment range as ``"start-end"``."""
        return f"{self.init_start}-{self.init_end}"

    @property
    def index(self) -> str:
        """Segment index (``sidx``) range as ``"start-end"``."""
        return f"{self.index_start}-{self.index_end}"

    @classmethod
    def from_offsets(
        cls,
        init_start: int | None,
        init_end: int | None,
        index_start: int | None,
        index_end: int | None,
    ) -> ByteRanges | None:
        """Build ranges when every offset is present, else return ``None``."""
        offsets = (init_start, init_end, index_start, index_end)
        if any(offset is None for offset in offsets):
            return None
        return cls(
            init_start=int(init_start),  # type: ignore[arg-type]
            init_end=int(init_end),  # type: ignore[arg-type]
            index_start=int(index_start),  # type: ignore[arg-type]
            index_end=int(index_end),  # type: ignore[arg-type]
        )


@dataclass(frozen=True, slots=True)
class StreamLanguage:
    """Audio-track language information reported by the backend."""

    locale: str | None = None
    """Locale code (e.g. ``en``, ``es-419``)."""

    track_id: str | None = None
    """Backend audio-track identifier, used when no locale is known."""

    track_name: str | None = None
    """Human-readable track name (e.g. ``English original``)."""

    @property
    def code(self) -> str:
        """Resolved language: locale, then track id, then ``"und"``."""
        return self.locale or self.track_id or "und"


# ---------------------------------------------------------------------------
# Stream descriptors
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StreamDescriptor:
    """One media variant served by the origin.

    The ``id`` is the backend itag, optionally carrying a ``-N`` variant
    suffix (e.g. ``137-1``).
    """

    id: str
    role: str
    url: str
    codec: str = ""
    container_format: str = ""
    resolution: str | None = None
    bitrate: int | None = None
    width: int | None = None
    height: int | None = None
    fps: int | None = None
    sample_rate: int | None = None
    channels: int | None = None
    byte_ranges: ByteRanges | None = None
    language: StreamLanguage | None = None
    approx_duration_ms: int | None = None

    @property
    def base_id(self) -> str:
        """The itag without its variant suffix (``"137-2"`` → ``"137"``)."""
        return self.id.split("-", 1)[0]

    @property
    def is_video_only(self) -> bool:
        return self.role == ROLE_VIDEO_ONLY

    @property
    def is_audio(self) -> bool:
        return self.role == ROLE_AUDIO

    @property
    def language_code(self) -> str:
        """Resolved (not yet normalized) language code of this stream."""
        if self.language is None:
            return "und"
        return self.language.code

    @property
    def track_name(self) -> str | None:
        if self.language is None:
            return None
        return self.language.track_name


@dataclass(frozen=True, slots=True)
class SubtitleDescriptor:
    """A sidecar subtitle track."""

    url: str
    language_code: str
    language_name: str | None = None
    format: str = "vtt"
    auto_generated: bool = False


# ---------------------------------------------------------------------------
# Pipeline inputs and outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ManifestConfig:
    """Everything the manifest assembler needs.

    Tuples keep the config hashable so that generated manifests can be
    cached by content.
    """

    video_streams: tuple[StreamDescriptor, ...] = ()
    audio_streams: tuple[StreamDescriptor, ...] = ()
    subtitles: tuple[SubtitleDescriptor, ...] = ()
    duration: float | None = None


@dataclass(frozen=True, slots=True)
class StreamListing:
    """Raw streams for one video, as returned by a stream provider."""

    video_id: str
    title: str
    video_streams: tuple[StreamDescriptor, ...] = ()
    audio_streams: tuple[StreamDescriptor, ...] = ()
    subtitles: tuple[SubtitleDescriptor, ...] = ()
    duration: float | None = None

    def __bool__(self) -> bool:
        return bool(self.video_streams or self.audio_streams)


@dataclass(frozen=True, slots=True)
class ManifestResult:
    """Selected streams together with the manifest rendered from them."""

    listing: StreamListing
    config: ManifestConfig
    manifest: str
    fingerprint: str = field(default="")

    @property
    def video_streams(self) -> tuple[StreamDescriptor, ...]:
        return self.config.video_streams

    @property
    def audio_streams(self) -> tuple[StreamDescriptor, ...]:
        return self.config.audio_streams

    @property
    def subtitles(self) -> tuple[SubtitleDescriptor, ...]:
        return self.config.subtitles
