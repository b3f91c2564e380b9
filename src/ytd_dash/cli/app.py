"""CLI application entry point and command routing for ytd-dash.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ytd_dash.exceptions.YtdDashError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* The manifest itself goes to stdout or ``--output``; everything else
  (tables, logs, errors) goes to stderr.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ytd_dash.cli import exit_codes
from ytd_dash.cli.console import configure_logging, console
from ytd_dash.core.protocols import StreamProvider
from ytd_dash.exceptions import OutputWriteError, YtdDashError
from ytd_dash.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Sub-commands are not used; the CLI supports:
    * ``ytd-dash <url|dump.json>`` — build a manifest
    * ``ytd-dash doctor``          — environment diagnostics
    * ``ytd-dash --version``
    """
    parser = argparse.ArgumentParser(
        prog="ytd-dash",
        description="Build a DASH manifest from adaptive video streams.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help=(
            "Video URL, path to a JSON stream dump, "
            "or 'doctor' to run diagnostics."
        ),
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the manifest to this file instead of stdout.",
    )
    parser.add_argument(
        "--all-streams",
        action="store_true",
        help="Skip stream selection and describe every input stream.",
    )
    parser.add_argument(
        "--no-subtitles",
        action="store_true",
        help="Leave subtitle tracks out of the manifest.",
    )
    parser.add_argument(
        "--auto-captions",
        action="store_true",
        help="Include auto-generated captions (URL sources only).",
    )
    parser.add_argument(
        "--show-streams",
        action="store_true",
        help="Print tables of the selected streams to stderr.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log selection details to stderr.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _is_url(target: str) -> bool:
    return target.startswith(("http://", "https://"))


def _build_provider(target: str, *, auto_captions: bool) -> StreamProvider:
    """Pick the stream provider matching *target*."""
    if _is_url(target):
        from ytd_dash.infra.ytdlp_provider import YtDlpStreamProvider

        return YtDlpStreamProvider(automatic_captions=auto_captions)

    from ytd_dash.infra.json_provider import JsonStreamProvider

    return JsonStreamProvider()


def _write_manifest(manifest: str, output: Path | None) -> None:
    if output is None:
        sys.stdout.write(manifest)
        sys.stdout.flush()
        return
    try:
        output.write_text(manifest, encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(
            f"Cannot write manifest to {output}: {exc}",
            hint="Check that the directory exists and is writable.",
        ) from exc


def _handle_manifest(args: argparse.Namespace) -> int:
    """Build a manifest for ``args.target``.

    Flow:
    1. Pick the provider (yt-dlp for URLs, JSON for files).
    2. Fetch, select and render through the manifest service.
    3. Optionally show the selected streams.
    4. Write the manifest.
    """
    from ytd_dash.cli.stream_table import display_manifest_summary
    from ytd_dash.core.manifest_service import ManifestService

    provider = _build_provider(args.target, auto_captions=args.auto_captions)
    service = ManifestService(
        provider,
        select=not args.all_streams,
        include_subtitles=not args.no_subtitles,
    )

    if _is_url(args.target):
        console.print(f"\n[bold]Fetching streams…[/bold]  {args.target}\n")
    result = service.build(args.target)

    if args.show_streams:
        display_manifest_summary(result)

    _write_manifest(result.manifest, args.output)

    if args.output is not None:
        console.print(
            f"[bold green]Manifest written.[/bold green]  {args.output}"
        )
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from ytd_dash.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the ytd-dash CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.target is None:
        parser.print_help()
        return exit_codes.SUCCESS

    target: str = args.target

    if target.lower() == "doctor":
        return _handle_doctor()

    configure_logging(verbose=args.verbose)
    return _handle_manifest(args)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except YtdDashError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {exc.hint}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
