"""Process exit codes returned by ``ytd-dash``."""

from __future__ import annotations

SUCCESS: int = 0
"""Manifest written (or doctor found nothing fatal)."""

GENERAL_ERROR: int = 1
"""A :class:`~ytd_dash.exceptions.YtdDashError` was reported to the user."""

UNEXPECTED_ERROR: int = 2
"""Any other exception reached :func:`ytd_dash.cli.app.cli`."""

KEYBOARD_INTERRUPT: int = 130
"""Interrupted with Ctrl+C (128 + SIGINT)."""
