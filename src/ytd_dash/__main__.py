"""``python -m ytd_dash`` entry point; same behaviour as the ``ytd-dash`` script."""

from __future__ import annotations

from ytd_dash.cli.app import cli

if __name__ == "__main__":
    cli()
