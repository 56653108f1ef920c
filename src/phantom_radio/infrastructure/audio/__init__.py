"""Audio infrastructure - local file and yt-dlp source resolution."""

from phantom_radio.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)
from phantom_radio.infrastructure.audio.source_resolver import YtDlpSourceResolver

__all__ = [
    "AudioFormatInfo",
    "YtDlpOpts",
    "YtDlpSourceResolver",
    "YtDlpTrackInfo",
]
