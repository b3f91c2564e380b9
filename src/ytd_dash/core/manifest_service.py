"""Core manifest service — orchestrates fetching, selection and rendering.

This is the central service class consumed by the CLI layer.  It
depends on a :class:`~ytd_dash.core.protocols.StreamProvider` injected
at construction time (dependency inversion), keeping the core free of
any external-system imports.

Guarantees
----------
* Pure orchestration — no I/O of its own, no ``print()``.
* Only :class:`~ytd_dash.exceptions.YtdDashError` subclasses escape.
* Manifests are memoized by config fingerprint; identical inputs never
  render twice while their entry is cached.  The cache keeps the
  ``cache_limit`` most recently used manifests.
"""

from __future__ import annotations

import logging
from collections import OrderedDict

from ytd_dash.core.manifest import generate_manifest, manifest_fingerprint
from ytd_dash.core.models import ManifestConfig, ManifestResult, StreamListing
from ytd_dash.core.protocols import StreamProvider
from ytd_dash.core.stream_selection import (
    log_selected_streams,
    select_best_audio_streams,
    select_subtitles,
    select_video_streams,
)
from ytd_dash.exceptions import (
    StreamSelectionError,
    StreamSourceError,
    YtdDashError,
)

logger = logging.getLogger(__name__)

DEFAULT_CACHE_LIMIT = 32


class ManifestService:
    """Builds DASH manifests for sources resolved by a stream provider.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`StreamProvider` protocol.
    sink:
        Logger receiving diagnostics; defaults to this module's logger.
    select:
        When ``False`` every input stream is emitted instead of the
        selected quality ladder and per-language audio.
    include_subtitles:
        When ``False`` subtitle tracks are left out of the manifest.
    cache_limit:
        Most manifests kept in memory; the least recently used is
        evicted first.
    """

    def __init__(
        self,
        provider: StreamProvider,
        *,
        sink: logging.Logger | None = None,
        select: bool = True,
        include_subtitles: bool = True,
        cache_limit: int = DEFAULT_CACHE_LIMIT,
    ) -> None:
        if cache_limit < 1:
            raise ValueError("cache_limit must be at least 1")
        self._provider: StreamProvider = provider
        self._log: logging.Logger = sink or logger
        self._select: bool = select
        self._include_subtitles: bool = include_subtitles
        self._cache: OrderedDict[str, str] = OrderedDict()
        self._cache_limit: int = cache_limit

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, source: str) -> ManifestResult:
        """Fetch streams for *source* and render their manifest.

        Raises
        ------
        StreamSourceError
            If *source* is empty.
        StreamSelectionError
            If neither a video nor an audio stream survives selection.
        YtdDashError
            Any provider error, unchanged.
        """
        if not source.strip():
            raise StreamSourceError("Source must not be empty.")

        listing = self._fetch(source.strip())
        config = self.build_config(listing)
        return self.render(listing, config)

    def build_config(self, listing: StreamListing) -> ManifestConfig:
        """Turn a raw listing into the config that will be rendered."""
        if self._select:
            video = tuple(select_video_streams(listing.video_streams))
            audio = tuple(select_best_audio_streams(listing.audio_streams))
            subtitles = tuple(select_subtitles(listing.subtitles))
        else:
            video = listing.video_streams
            audio = listing.audio_streams
            subtitles = listing.subtitles

        if not video and not audio:
            raise StreamSelectionError(
                "No adaptive video or audio streams found for this source.",
                hint="The source may only provide muxed or live streams.",
            )

        log_selected_streams(video, audio, sink=self._log)
        return ManifestConfig(
            video_streams=video,
            audio_streams=audio,
            subtitles=subtitles if self._include_subtitles else (),
            duration=listing.duration,
        )

    def render(self, listing: StreamListing, config: ManifestConfig) -> ManifestResult:
        """Render *config*, reusing a cached manifest when one exists."""
        fingerprint = manifest_fingerprint(config)
        manifest = self._cache.get(fingerprint)
        if manifest is None:
            manifest = generate_manifest(config, sink=self._log)
            self._cache[fingerprint] = manifest
            if len(self._cache) > self._cache_limit:
                self._cache.popitem(last=False)
        else:
            self._cache.move_to_end(fingerprint)
            self._log.debug("Reusing cached manifest %s", fingerprint[:12])

        return ManifestResult(
            listing=listing,
            config=config,
            manifest=manifest,
            fingerprint=fingerprint,
        )

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    # ------------------------------------------------------------------
    # Provider delegation (safe boundary)
    # ------------------------------------------------------------------

    def _fetch(self, source: str) -> StreamListing:
        """Call the provider and ensure only our exceptions escape."""
        try:
            return self._provider.fetch_streams(source)
        except YtdDashError:
            raise
        except Exception as exc:
            raise StreamSourceError(
                f"Unexpected provider error: {exc}",
            ) from exc
