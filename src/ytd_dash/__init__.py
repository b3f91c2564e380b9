"""ytd-dash — DASH manifest builder for adaptive video streams.

Selects a quality ladder of video streams and one audio track per
language, then renders an on-demand DASH MPD that byte-range-addresses
the origin server.
"""

from ytd_dash.version import __version__

__all__: list[str] = ["__version__"]
