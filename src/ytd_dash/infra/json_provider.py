"""File-backed implementation of :class:`~ytd_dash.core.protocols.StreamProvider`.

Reads a stream dump saved from the streaming backend's
``/streams`` endpoints and hands it to the core parser.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ytd_dash.core.models import StreamListing
from ytd_dash.core.stream_parser import parse_stream_listing
from ytd_dash.exceptions import StreamSourceError


class JsonStreamProvider:
    """Concrete :class:`StreamProvider` reading backend JSON from disk.

    Usage::

        provider = JsonStreamProvider()
        listing = provider.fetch_streams("dumps/dQw4w9WgXcQ.json")

    The file holds either an object with ``videoOnlyStreams`` /
    ``audioStreams`` / ``subtitles`` arrays, or a bare array of stream
    objects.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._encoding: str = encoding

    def fetch_streams(self, source: str) -> StreamListing:
        """Load and parse the dump at *source*.

        Raises
        ------
        StreamSourceError
            When the file is missing, unreadable, not JSON, or not an
            object/array.
        """
        path = Path(source)
        data = self._load(path)

        if isinstance(data, list):
            data = {"streams": data}
        if not isinstance(data, dict):
            raise StreamSourceError(
                f"Unexpected stream dump structure in {path}.",
                hint="Expected a JSON object or an array of streams.",
            )

        return parse_stream_listing(data, video_id=path.stem, title=path.stem)

    def _load(self, path: Path) -> Any:
        try:
            text = path.read_text(encoding=self._encoding)
        except FileNotFoundError as exc:
            raise StreamSourceError(f"Stream dump not found: {path}") from exc
        except OSError as exc:
            raise StreamSourceError(f"Cannot read {path}: {exc}") from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise StreamSourceError(
                f"Invalid JSON in {path}: {exc.msg} (line {exc.lineno})",
            ) from exc
