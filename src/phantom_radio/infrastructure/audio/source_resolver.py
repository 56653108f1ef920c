"""AudioSourceResolver implementation for local files and yt-dlp streams."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, ExtractorError

from phantom_radio.application.interfaces.audio_resolver import AudioSourceResolver, ResolvedAudio
from phantom_radio.config.settings import AudioSettings
from phantom_radio.domain.music.value_objects import LocalFileSource, StreamSource
from phantom_radio.domain.shared.exceptions import AudioSourceUnresolvableError
from phantom_radio.domain.shared.messages import ErrorMessages, LogTemplates
from phantom_radio.infrastructure.audio.models import LOG_URL_TRUNCATE, YtDlpOpts, YtDlpTrackInfo

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioSource

logger = logging.getLogger(__name__)


class YtDlpSourceResolver(AudioSourceResolver):
    """Local files are read straight from the music directory; streams go through yt-dlp."""

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._music_dir = Path(self._settings.music_dir).resolve()
        self._opts = YtDlpOpts(format=self._settings.ytdlp_format)

    @property
    def music_dir(self) -> Path:
        return self._music_dir

    async def resolve(self, source: AudioSource) -> ResolvedAudio:
        if isinstance(source, LocalFileSource):
            return self._resolve_local(source)
        return await self._resolve_stream(source)

    def _resolve_local(self, source: LocalFileSource) -> ResolvedAudio:
        path = (self._music_dir / source.relative_path).resolve()
        if not path.is_relative_to(self._music_dir):
            raise AudioSourceUnresolvableError(
                source.describe(), ErrorMessages.LOCAL_PATH_OUTSIDE_MUSIC_DIR
            )
        if not path.is_file():
            raise AudioSourceUnresolvableError(source.describe(), ErrorMessages.LOCAL_FILE_MISSING)

        return ResolvedAudio(
            input=str(path),
            is_stream=False,
            options=self._settings.ffmpeg_options.get("options"),
        )

    async def _resolve_stream(self, source: StreamSource) -> ResolvedAudio:
        info = await asyncio.to_thread(self._extract_info_sync, source.url)
        stream_url = info.stream_url if info else None
        if not stream_url:
            raise AudioSourceUnresolvableError(source.describe(), ErrorMessages.NO_URL_IN_INFO_DICT)

        return ResolvedAudio(
            input=stream_url,
            is_stream=True,
            before_options=self._settings.ffmpeg_options.get("before_options"),
            options=self._settings.ffmpeg_options.get("options"),
        )

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
        except (DownloadError, ExtractorError) as e:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url[:LOG_URL_TRUNCATE])
            raise AudioSourceUnresolvableError(
                f"stream:{url}", ErrorMessages.YTDLP_EXTRACTION_FAILED.format(error=e)
            ) from e

        if not isinstance(data, dict):
            return None
        return YtDlpTrackInfo.model_validate(dict(data))
