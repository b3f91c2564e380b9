"""Stream providers that produce :class:`~ytd_dash.core.models.StreamListing` values.

* :class:`JsonStreamProvider` reads a saved backend stream dump.
* :class:`YtDlpStreamProvider` asks yt-dlp about a video URL.

Both satisfy :class:`~ytd_dash.core.protocols.StreamProvider` and raise
only :class:`~ytd_dash.exceptions.YtdDashError` subclasses.
"""

from ytd_dash.infra.json_provider import JsonStreamProvider
from ytd_dash.infra.ytdlp_provider import YtDlpStreamProvider

__all__: list[str] = [
    "JsonStreamProvider",
    "YtDlpStreamProvider",
]
