"""Tests for the CLI layer (cli/app.py, cli/doctor.py, cli/stream_table.py).

Manifests are built from JSON stream dumps written to ``tmp_path`` — no
network, no yt-dlp invocation.

Coverage:
* End-to-end manifest output to stdout and to ``--output``
* Flag handling (``--all-streams``, ``--no-subtitles``, ``--show-streams``)
* The ``cli()`` error boundary and its exit codes
* Doctor checks
* Stream table formatting helpers
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from ytd_dash.cli import exit_codes
from ytd_dash.cli.app import cli, main
from ytd_dash.core.models import ROLE_VIDEO_ONLY, ByteRanges, StreamDescriptor, StreamLanguage
from ytd_dash.exceptions import OutputWriteError, StreamSourceError, VideoUnavailableError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _dump(tmp_path: Path) -> Path:
    data: dict[str, Any] = {
        "videoId": "abc123",
        "title": "Sample & Co",
        "duration": 125.5,
        "videoOnlyStreams": [
            {
                "id": "137",
                "url": "https://origin.example/137?a=1&b=2",
                "codec": "avc1.640028",
                "format": "MPEG_4",
                "resolution": "1080p",
                "videoOnly": True,
            },
            {
                "id": "136",
                "url": "https://origin.example/136",
                "codec": "avc1.4d401f",
                "format": "MPEG_4",
                "resolution": "720p",
                "videoOnly": True,
            },
            {
                "id": "248",
                "url": "https://origin.example/248",
                "codec": "vp9",
                "format": "WEBM",
                "resolution": "1080p",
                "videoOnly": True,
            },
        ],
        "audioStreams": [
            {
                "id": "140",
                "url": "https://origin.example/140",
                "codec": "mp4a.40.2",
                "format": "M4A",
                "itagItem": {"itagType": "AUDIO", "audioLocale": "en"},
            },
        ],
        "subtitles": [
            {"url": "https://origin.example/en.vtt", "languageCode": "en"},
        ],
    }
    path = tmp_path / "abc123.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _raise(exc: BaseException) -> Any:
    def _raiser(*_args: object, **_kwargs: object) -> Any:
        raise exc

    return _raiser


# ---------------------------------------------------------------------------
# Manifest command
# ---------------------------------------------------------------------------

class TestManifestCommand:
    def test_writes_manifest_to_stdout(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main([str(_dump(tmp_path))])
        out = capsys.readouterr().out

        assert code == exit_codes.SUCCESS
        assert out.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert 'mediaPresentationDuration="PT2M5.500S"' in out
        assert out.count("<Representation") == 4
        assert "https://origin.example/137?a=1&amp;b=2" in out
        assert 'contentType="text"' in out

    def test_writes_manifest_to_file(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "out.mpd"
        code = main([str(_dump(tmp_path)), "-o", str(output)])
        captured = capsys.readouterr()

        assert code == exit_codes.SUCCESS
        assert captured.out == ""
        assert output.read_text(encoding="utf-8").endswith("</MPD>\n")
        assert "Manifest written." in captured.err

    def test_all_streams(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main([str(_dump(tmp_path)), "--all-streams"])
        assert capsys.readouterr().out.count('id="video-') == 3

    def test_no_subtitles(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main([str(_dump(tmp_path)), "--no-subtitles"])
        assert 'contentType="text"' not in capsys.readouterr().out

    def test_show_streams(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        main([str(_dump(tmp_path)), "--show-streams"])
        err = capsys.readouterr().err
        assert "Sample & Co" in err
        assert "PT2M5.500S" in err

    def test_verbose_enables_debug_logging(self, tmp_path: Path) -> None:
        main([str(_dump(tmp_path)), "-v", "-o", str(tmp_path / "out.mpd")])
        assert logging.getLogger("ytd_dash").level == logging.DEBUG

    def test_missing_dump_raises(self, tmp_path: Path) -> None:
        with pytest.raises(StreamSourceError):
            main([str(tmp_path / "missing.json")])

    def test_unwritable_output(self, tmp_path: Path) -> None:
        output = tmp_path / "no-such-dir" / "out.mpd"
        with pytest.raises(OutputWriteError) as excinfo:
            main([str(_dump(tmp_path)), "--output", str(output)])
        assert excinfo.value.hint is not None

    def test_url_uses_ytdlp_provider(self) -> None:
        from ytd_dash.cli.app import _build_provider
        from ytd_dash.infra.json_provider import JsonStreamProvider
        from ytd_dash.infra.ytdlp_provider import YtDlpStreamProvider

        assert isinstance(
            _build_provider("https://youtu.be/abc", auto_captions=False),
            YtDlpStreamProvider,
        )
        assert isinstance(
            _build_provider("dump.json", auto_captions=False), JsonStreamProvider
        )


# ---------------------------------------------------------------------------
# Error boundary
# ---------------------------------------------------------------------------

class TestErrorBoundary:
    def _run_cli(self, monkeypatch: pytest.MonkeyPatch, exc: BaseException) -> int:
        from ytd_dash.cli import app as app_module

        monkeypatch.setattr(app_module, "main", _raise(exc))
        with pytest.raises(SystemExit) as excinfo:
            cli()
        return int(excinfo.value.code)

    def test_domain_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = self._run_cli(
            monkeypatch, VideoUnavailableError("Private video", hint="Try another")
        )
        err = capsys.readouterr().err
        assert code == exit_codes.GENERAL_ERROR
        assert "Private video" in err
        assert "Try another" in err

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        code = self._run_cli(monkeypatch, KeyboardInterrupt())
        assert code == exit_codes.KEYBOARD_INTERRUPT

    def test_unexpected_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = self._run_cli(monkeypatch, RuntimeError("kaboom"))
        assert code == exit_codes.UNEXPECTED_ERROR
        assert "RuntimeError: kaboom" in capsys.readouterr().err

    def test_success_exit_code(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from ytd_dash.cli import app as app_module

        monkeypatch.setattr(app_module, "main", lambda: exit_codes.SUCCESS)
        with pytest.raises(SystemExit) as excinfo:
            cli()
        assert excinfo.value.code == exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Doctor
# ---------------------------------------------------------------------------

class TestDoctor:
    def test_python_check(self) -> None:
        from ytd_dash.cli.doctor import check_python

        row = check_python()
        assert row.component == "Python"
        assert row.status in ("OK", "FAIL")

    def test_ytdlp_missing_is_a_warning(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import sys

        from ytd_dash.cli.doctor import check_ytdlp

        monkeypatch.setitem(sys.modules, "yt_dlp", None)
        monkeypatch.setitem(sys.modules, "yt_dlp.version", None)
        row = check_ytdlp()
        assert (row.component, row.value, row.status) == ("yt-dlp", "NOT INSTALLED", "WARN")
        assert "URL sources disabled" in row.status_markup()

    def test_status_markup(self) -> None:
        from ytd_dash.cli.doctor import DoctorCheck

        assert DoctorCheck("x", "1", "OK").status_markup() == "[green]OK[/green]"
        assert (
            DoctorCheck("x", "1", "FAIL", ">=3.10 required").status_markup()
            == "[red]FAIL (>=3.10 required)[/red]"
        )

    def test_all_checks_pass(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from ytd_dash.cli import doctor
        from ytd_dash.cli.doctor import DoctorCheck

        monkeypatch.setattr(
            doctor, "CHECKS", (lambda: DoctorCheck("Python", "3.12.0", "OK"),)
        )
        assert doctor.run_doctor() == exit_codes.SUCCESS

    def test_warning_does_not_fail(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from ytd_dash.cli import doctor
        from ytd_dash.cli.doctor import DoctorCheck

        monkeypatch.setattr(
            doctor, "CHECKS", (lambda: DoctorCheck("yt-dlp", "NOT INSTALLED", "WARN"),)
        )
        assert doctor.run_doctor() == exit_codes.SUCCESS

    def test_failure_returns_general_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from ytd_dash.cli import doctor
        from ytd_dash.cli.doctor import DoctorCheck

        monkeypatch.setattr(
            doctor,
            "CHECKS",
            (lambda: DoctorCheck("Python", "3.8.0", "FAIL", ">=3.10 required"),),
        )
        assert doctor.run_doctor() == exit_codes.GENERAL_ERROR
        assert "Some checks failed." in capsys.readouterr().err

    def test_plain_rendering_without_rich(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        import sys

        from ytd_dash.cli import doctor

        monkeypatch.setitem(sys.modules, "rich", None)
        monkeypatch.setitem(sys.modules, "rich.console", None)
        monkeypatch.setitem(sys.modules, "rich.table", None)
        doctor.run_doctor()
        err = capsys.readouterr().err
        assert "ytd-dash doctor" in err
        assert "Component" in err


# ---------------------------------------------------------------------------
# Stream table helpers
# ---------------------------------------------------------------------------

class TestStreamTableHelpers:
    def test_format_bitrate(self) -> None:
        from ytd_dash.cli.stream_table import _format_bitrate

        assert _format_bitrate(None) == "Unknown"
        assert _format_bitrate(2_500_000) == "2.5 Mbps"
        assert _format_bitrate(128_000) == "128 kbps"

    def test_format_resolution(self) -> None:
        from ytd_dash.cli.stream_table import _format_resolution

        stream = StreamDescriptor(id="137", role=ROLE_VIDEO_ONLY, url="u")
        assert _format_resolution(stream) == "Unknown"
        assert _format_resolution(
            StreamDescriptor(id="137", role=ROLE_VIDEO_ONLY, url="u", height=720)
        ) == "720p"

    def test_format_ranges(self) -> None:
        from ytd_dash.cli.stream_table import _format_ranges

        with_ranges = StreamDescriptor(
            id="137", role=ROLE_VIDEO_ONLY, url="u", byte_ranges=ByteRanges(0, 1, 2, 3)
        )
        assert _format_ranges(with_ranges) == "yes"
        assert _format_ranges(StreamDescriptor(id="137", role=ROLE_VIDEO_ONLY, url="u")) == "no"

    def test_format_language(self) -> None:
        from ytd_dash.cli.stream_table import _format_language

        stream = StreamDescriptor(
            id="140", role="audio", url="u", language=StreamLanguage(locale="es_419")
        )
        assert _format_language(stream) == "Spanish (Latin America) (es-419)"
