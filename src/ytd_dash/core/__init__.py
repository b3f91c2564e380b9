"""Manifest core: models, stream selection and MPD assembly.

Nothing here prints, touches the filesystem or the network, or imports
from ``cli`` / ``infra``; stream listings arrive through
:class:`StreamProvider`.
"""

from ytd_dash.core.codecs import infer_mime_type, normalize_codec
from ytd_dash.core.manifest import format_duration, generate_manifest
from ytd_dash.core.manifest_service import ManifestService
from ytd_dash.core.models import (
    ByteRanges,
    ManifestConfig,
    ManifestResult,
    StreamDescriptor,
    StreamLanguage,
    StreamListing,
    SubtitleDescriptor,
)
from ytd_dash.core.protocols import StreamProvider
from ytd_dash.core.stream_selection import (
    select_best_audio_streams,
    select_subtitles,
    select_video_streams,
)

__all__: list[str] = [
    "ByteRanges",
    "ManifestConfig",
    "ManifestResult",
    "ManifestService",
    "StreamDescriptor",
    "StreamLanguage",
    "StreamListing",
    "StreamProvider",
    "SubtitleDescriptor",
    "format_duration",
    "generate_manifest",
    "infer_mime_type",
    "normalize_codec",
    "select_best_audio_streams",
    "select_subtitles",
    "select_video_streams",
]
