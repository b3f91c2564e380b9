"""Rich tables summarising the streams that went into a manifest.

This module is responsible for:

* Formatting stream attributes for display (pure helpers).
* Rendering one Rich table for video and one for audio/subtitles.

All display-related logic lives here — no selection, no parsing, no
manifest generation.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ytd_dash.cli.console import console
from ytd_dash.core.languages import language_display_name, normalize_language_code
from ytd_dash.core.manifest import format_duration
from ytd_dash.core.models import ManifestResult, StreamDescriptor, SubtitleDescriptor
from ytd_dash.exceptions import EnvironmentError


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for stream rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


# ---------------------------------------------------------------------------
# Presentation helpers (pure, no I/O)
# ---------------------------------------------------------------------------

def _format_bitrate(bitrate: int | None) -> str:
    """Render bits per second as ``"2.5 Mbps"`` / ``"128 kbps"``."""
    if not bitrate:
        return "Unknown"
    if bitrate >= 1_000_000:
        return f"{bitrate / 1_000_000:.1f} Mbps"
    return f"{bitrate // 1000} kbps"


def _format_resolution(stream: StreamDescriptor) -> str:
    if stream.resolution:
        return stream.resolution
    if stream.height:
        return f"{stream.height}p"
    return "Unknown"


def _format_fps(fps: int | None) -> str:
    """Render FPS or ``"—"`` when unavailable."""
    if fps is None:
        return "—"
    return str(fps)


def _format_ranges(stream: StreamDescriptor) -> str:
    """``"yes"`` when the stream can be byte-range addressed."""
    return "yes" if stream.byte_ranges is not None else "no"


def _format_language(stream: StreamDescriptor) -> str:
    code = normalize_language_code(stream.language_code)
    name = stream.track_name or language_display_name(code)
    return f"{name} ({code})"


# ---------------------------------------------------------------------------
# Rich tables
# ---------------------------------------------------------------------------

def _video_table(streams: Sequence[StreamDescriptor]) -> Any:
    table_class = _import_rich_table()
    table = table_class(
        title="Video",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Itag", justify="left", min_width=6)
    table.add_column("Resolution", justify="left", min_width=10)
    table.add_column("FPS", justify="right", min_width=5)
    table.add_column("Codec", justify="left", min_width=12)
    table.add_column("Bitrate", justify="right", min_width=10)
    table.add_column("Ranges", justify="center", min_width=6)

    for i, stream in enumerate(streams, start=1):
        table.add_row(
            str(i),
            stream.id,
            _format_resolution(stream),
            _format_fps(stream.fps),
            stream.codec or "—",
            _format_bitrate(stream.bitrate),
            _format_ranges(stream),
        )
    return table


def _audio_table(
    streams: Sequence[StreamDescriptor],
    subtitles: Sequence[SubtitleDescriptor],
) -> Any:
    table_class = _import_rich_table()
    table = table_class(
        title="Audio & subtitles",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Kind", justify="left", min_width=8)
    table.add_column("Language", justify="left", min_width=16)
    table.add_column("Itag / format", justify="left", min_width=8)
    table.add_column("Bitrate", justify="right", min_width=10)

    row = 1
    for stream in streams:
        table.add_row(
            str(row),
            "audio",
            _format_language(stream),
            stream.id,
            _format_bitrate(stream.bitrate),
        )
        row += 1
    for subtitle in subtitles:
        code = normalize_language_code(subtitle.language_code)
        name = subtitle.language_name or language_display_name(code)
        kind = "captions" if subtitle.auto_generated else "subtitles"
        table.add_row(str(row), kind, f"{name} ({code})", subtitle.format, "—")
        row += 1
    return table


def display_manifest_summary(result: ManifestResult) -> None:
    """Print the title, duration and selected streams to stderr."""
    listing = result.listing
    console.print()
    console.print(f"[bold cyan]Title:[/bold cyan]  {listing.title}")
    console.print(
        f"[bold cyan]Duration:[/bold cyan] {format_duration(result.config.duration)}"
    )
    console.print(
        f"[bold cyan]Streams:[/bold cyan]  "
        f"{len(result.video_streams)}/{len(listing.video_streams)} video, "
        f"{len(result.audio_streams)}/{len(listing.audio_streams)} audio, "
        f"{len(result.subtitles)} subtitle(s)"
    )
    console.print()

    if result.video_streams:
        console.print(_video_table(result.video_streams))
    if result.audio_streams or result.subtitles:
        console.print(_audio_table(result.audio_streams, result.subtitles))
    console.print()
