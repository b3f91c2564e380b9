"""Tests for the yt-dlp stream provider (infra/ytdlp_provider.py).

yt-dlp itself is never invoked: a stand-in ``yt_dlp`` module is placed
in ``sys.modules`` so that no network access happens.  These tests
verify:

* yt-dlp format dicts → domain models
* Byte-range and subtitle extraction
* Exception mapping (``DownloadError`` → our hierarchy)
* A clear ``EnvironmentError`` when yt-dlp is missing
"""

from __future__ import annotations

import sys
import types
from typing import Any
from unittest.mock import MagicMock

import pytest

from ytd_dash.core.models import ROLE_AUDIO, ROLE_VIDEO_ONLY
from ytd_dash.exceptions import (
    EnvironmentError,
    MetadataExtractionError,
    VideoUnavailableError,
)
from ytd_dash.infra.ytdlp_provider import YtDlpStreamProvider


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _DownloadError(Exception):
    """Stand-in for ``yt_dlp.utils.DownloadError``."""


def _install_fake_ytdlp(
    monkeypatch: pytest.MonkeyPatch,
    result: dict[str, Any] | Exception | None,
) -> MagicMock:
    """Install a fake ``yt_dlp`` whose ``extract_info`` returns/raises *result*."""
    ydl = MagicMock()
    if isinstance(result, Exception):
        ydl.extract_info.side_effect = result
    else:
        ydl.extract_info.return_value = result

    youtube_dl = MagicMock()
    youtube_dl.return_value.__enter__.return_value = ydl

    utils = types.ModuleType("yt_dlp.utils")
    utils.DownloadError = _DownloadError  # type: ignore[attr-defined]
    module = types.ModuleType("yt_dlp")
    module.YoutubeDL = youtube_dl  # type: ignore[attr-defined]
    module.utils = utils  # type: ignore[attr-defined]

    monkeypatch.setitem(sys.modules, "yt_dlp", module)
    monkeypatch.setitem(sys.modules, "yt_dlp.utils", utils)
    return youtube_dl


def _raw_format(
    *,
    format_id: str = "137",
    ext: str = "mp4",
    vcodec: str = "avc1.640028",
    acodec: str = "none",
    width: int | None = 1920,
    height: int | None = 1080,
    protocol: str = "https",
    **extra: Any,
) -> dict[str, Any]:
    fmt: dict[str, Any] = {
        "format_id": format_id,
        "url": f"https://origin.example/{format_id}",
        "ext": ext,
        "vcodec": vcodec,
        "acodec": acodec,
        "width": width,
        "height": height,
        "protocol": protocol,
        "tbr": 2500.5,
        "fps": 29.97,
    }
    fmt.update(extra)
    return fmt


def _sample_info(**overrides: Any) -> dict[str, Any]:
    info: dict[str, Any] = {
        "id": "abc123",
        "title": "Sample Video",
        "duration": 212,
        "formats": [
            _raw_format(
                streaming_options={"init_range": "0-740", "index_range": "741-1200"},
            ),
            _raw_format(
                format_id="140",
                ext="m4a",
                vcodec="none",
                acodec="mp4a.40.2",
                width=None,
                height=None,
                asr=44100,
                audio_channels=2,
                language="en",
            ),
            _raw_format(format_id="18", acodec="mp4a.40.2"),
            _raw_format(format_id="sb0", vcodec="none", acodec="none", ext="mhtml"),
            _raw_format(format_id="270", protocol="m3u8_native"),
        ],
        "subtitles": {
            "en": [
                {"ext": "vtt", "url": "https://origin.example/en.vtt", "name": "English"},
                {"ext": "srv3", "url": "https://origin.example/en.srv3"},
            ],
        },
        "automatic_captions": {
            "en-orig": [{"ext": "vtt", "url": "https://origin.example/auto-en.vtt"}],
            "de-orig": [{"ext": "vtt", "url": "https://origin.example/auto-de.vtt"}],
            "fr": [{"ext": "vtt", "url": "https://origin.example/auto-fr.vtt"}],
        },
    }
    info.update(overrides)
    return info


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

class TestFetchStreams:
    def test_listing_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, _sample_info())
        listing = YtDlpStreamProvider().fetch_streams("https://youtu.be/abc123")

        assert listing.video_id == "abc123"
        assert listing.title == "Sample Video"
        assert listing.duration == 212.0
        assert [s.id for s in listing.video_streams] == ["137"]
        assert [s.id for s in listing.audio_streams] == ["140"]

    def test_video_stream(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, _sample_info())
        video = YtDlpStreamProvider().fetch_streams("u").video_streams[0]

        assert video.role == ROLE_VIDEO_ONLY
        assert video.container_format == "MPEG_4"
        assert video.resolution == "1080p"
        assert video.bitrate == 2_500_500
        assert video.fps == 30
        assert video.approx_duration_ms == 212_000
        assert video.byte_ranges is not None
        assert video.byte_ranges.initialization == "0-740"
        assert video.byte_ranges.index == "741-1200"

    def test_audio_stream(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, _sample_info())
        audio = YtDlpStreamProvider().fetch_streams("u").audio_streams[0]

        assert audio.role == ROLE_AUDIO
        assert audio.container_format == "M4A"
        assert audio.codec == "mp4a.40.2"
        assert audio.resolution is None
        assert (audio.sample_rate, audio.channels) == (44100, 2)
        assert audio.language_code == "en"
        assert audio.byte_ranges is None

    def test_portrait_resolution_uses_short_side(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        info = _sample_info(formats=[_raw_format(width=1080, height=1920)])
        _install_fake_ytdlp(monkeypatch, info)
        video = YtDlpStreamProvider().fetch_streams("u").video_streams[0]
        assert video.resolution == "1080p"

    def test_malformed_ranges_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        info = _sample_info(
            formats=[
                _raw_format(
                    streaming_options={"init_range": "0-740", "index_range": "bogus"}
                )
            ]
        )
        _install_fake_ytdlp(monkeypatch, info)
        video = YtDlpStreamProvider().fetch_streams("u").video_streams[0]
        assert video.byte_ranges is None

    def test_missing_formats(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, _sample_info(formats=None, duration=None))
        listing = YtDlpStreamProvider().fetch_streams("u")
        assert not listing
        assert listing.duration is None

    def test_metadata_only_options(self, monkeypatch: pytest.MonkeyPatch) -> None:
        youtube_dl = _install_fake_ytdlp(monkeypatch, _sample_info())
        YtDlpStreamProvider().fetch_streams("u")
        opts = youtube_dl.call_args.args[0]
        assert opts["skip_download"] is True
        assert opts["quiet"] is True


class TestSubtitles:
    def test_manual_subtitles_only_by_default(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _install_fake_ytdlp(monkeypatch, _sample_info())
        subtitles = YtDlpStreamProvider().fetch_streams("u").subtitles

        assert [(s.language_code, s.format) for s in subtitles] == [
            ("en", "vtt"),
            ("en", "srv3"),
        ]
        assert subtitles[0].language_name == "English"
        assert not any(s.auto_generated for s in subtitles)

    def test_automatic_captions_in_original_language(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _install_fake_ytdlp(monkeypatch, _sample_info())
        provider = YtDlpStreamProvider(automatic_captions=True)
        subtitles = provider.fetch_streams("u").subtitles

        automatic = [s for s in subtitles if s.auto_generated]
        assert [s.language_code for s in automatic] == ["de"]


# ---------------------------------------------------------------------------
# Exception mapping
# ---------------------------------------------------------------------------

class TestExceptionMapping:
    def test_unavailable_video(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, _DownloadError("ERROR: Private video"))
        with pytest.raises(VideoUnavailableError) as excinfo:
            YtDlpStreamProvider().fetch_streams("u")
        assert excinfo.value.hint is not None

    def test_other_download_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, _DownloadError("HTTP Error 500"))
        with pytest.raises(MetadataExtractionError, match="HTTP Error 500") as excinfo:
            YtDlpStreamProvider().fetch_streams("u")
        assert "pip install --upgrade yt-dlp" in excinfo.value.hint

    def test_unexpected_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, ValueError("weird"))
        with pytest.raises(MetadataExtractionError, match="Unexpected yt-dlp error"):
            YtDlpStreamProvider().fetch_streams("u")

    def test_no_metadata(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, None)
        with pytest.raises(MetadataExtractionError, match="no metadata"):
            YtDlpStreamProvider().fetch_streams("u")

    def test_non_dict_metadata(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _install_fake_ytdlp(monkeypatch, ["not", "a", "dict"])  # type: ignore[arg-type]
        with pytest.raises(MetadataExtractionError, match="unexpected data structure"):
            YtDlpStreamProvider().fetch_streams("u")

    def test_missing_ytdlp(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "yt_dlp", None)
        monkeypatch.setitem(sys.modules, "yt_dlp.utils", None)
        with pytest.raises(EnvironmentError, match="pip install yt-dlp"):
            YtDlpStreamProvider().fetch_streams("u")
