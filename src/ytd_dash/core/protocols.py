"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from typing import Protocol

from ytd_dash.core.models import StreamListing


class StreamProvider(Protocol):
    """Contract for stream-listing backends.

    Any object that implements :meth:`fetch_streams` with the correct
    signature satisfies this protocol structurally (no explicit
    inheritance required).
    """

    def fetch_streams(self, source: str) -> StreamListing:
        """Return every adaptive stream known for *source*.

        *source* is provider-specific: a video URL for yt-dlp, a file
        path for a JSON stream dump.

        Implementations must map all backend-specific exceptions to
        :class:`~ytd_dash.exceptions.YtdDashError` subclasses.

        Raises
        ------
        StreamSourceError
            When the source cannot be read or parsed.
        MetadataExtractionError
            When the backend fails to extract stream metadata.
        VideoUnavailableError
            When the target video is confirmed unavailable.
        """
        ...  # pragma: no cover
