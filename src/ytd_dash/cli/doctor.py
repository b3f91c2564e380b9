"""``ytd-dash doctor`` — can this environment build manifests?

Each check yields a :class:`DoctorCheck` row.  Only a ``FAIL`` row turns
the exit code non-zero: yt-dlp is optional (JSON stream dumps work
without it), Rich and a supported Python are not.
"""

from __future__ import annotations

import platform
import sys
from collections.abc import Callable
from importlib.metadata import PackageNotFoundError, version
from typing import NamedTuple

from ytd_dash.cli import exit_codes
from ytd_dash.cli.console import console
from ytd_dash.version import __version__

OK = "OK"
WARN = "WARN"
FAIL = "FAIL"

_STATUS_STYLES: dict[str, str] = {OK: "green", WARN: "yellow", FAIL: "red"}

_MIN_PYTHON: tuple[int, int] = (3, 10)


class DoctorCheck(NamedTuple):
    """One row of the doctor table."""

    component: str
    value: str
    status: str
    note: str = ""

    def status_markup(self) -> str:
        text = f"{self.status} ({self.note})" if self.note else self.status
        style = _STATUS_STYLES.get(self.status, "white")
        return f"[{style}]{text}[/{style}]"

    def status_plain(self) -> str:
        return self.status


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------

def check_ytddash() -> DoctorCheck:
    return DoctorCheck("ytd-dash", __version__, OK)


def check_python() -> DoctorCheck:
    current = sys.version_info[:2]
    if current >= _MIN_PYTHON:
        return DoctorCheck("Python", platform.python_version(), OK)
    required = ".".join(str(part) for part in _MIN_PYTHON)
    return DoctorCheck("Python", platform.python_version(), FAIL, f">={required} required")


def check_ytdlp() -> DoctorCheck:
    """yt-dlp is needed for URL sources only."""
    try:
        from yt_dlp.version import __version__ as ytdlp_version
    except ImportError:
        return DoctorCheck("yt-dlp", "NOT INSTALLED", WARN, "URL sources disabled")
    return DoctorCheck("yt-dlp", ytdlp_version, OK)


def check_rich() -> DoctorCheck:
    try:
        return DoctorCheck("rich", version("rich"), OK)
    except PackageNotFoundError:
        return DoctorCheck("rich", "NOT INSTALLED", FAIL)


def check_platform() -> DoctorCheck:
    names = {"Darwin": "macOS"}
    system = platform.system()
    value = f"{names.get(system, system)} {platform.release()} ({platform.machine()})"
    return DoctorCheck("OS", value, OK)


CHECKS: tuple[Callable[[], DoctorCheck], ...] = (
    check_ytddash,
    check_python,
    check_ytdlp,
    check_rich,
    check_platform,
)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _render_rich(rows: list[DoctorCheck]) -> bool:
    """Print *rows* as a Rich table; ``False`` when Rich is unavailable."""
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        return False

    table = Table(title="ytd-dash doctor", header_style="bold cyan", border_style="dim")
    table.add_column("Component", style="bold", min_width=10)
    table.add_column("Value", min_width=20)
    table.add_column("Status", justify="center")
    for row in rows:
        table.add_row(row.component, row.value, row.status_markup())

    console.print(table)
    return True


def _render_plain(rows: list[DoctorCheck]) -> None:
    width = 56
    lines = ["ytd-dash doctor", "=" * width, f"{'Component':<12} {'Value':<32} Status", "-" * width]
    lines.extend(f"{row.component:<12} {row.value:<32} {row.status_plain()}" for row in rows)
    print("\n".join(lines), file=sys.stderr)


def run_doctor() -> int:
    """Run every check, print the table and return the exit code."""
    rows = [check() for check in CHECKS]

    if not _render_rich(rows):
        _render_plain(rows)

    if any(row.status == FAIL for row in rows):
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR

    console.print("[bold green]Ready to build manifests.[/bold green]")
    return exit_codes.SUCCESS
