"""
Unit Tests for YtDlpSourceResolver

Tests for:
- Local files inside and outside the music directory
- Stream extraction through yt-dlp (mocked)
- yt-dlp info model coercion and stream URL fallback
"""

from unittest.mock import patch

import pytest
from yt_dlp.utils import DownloadError

from phantom_radio.config.settings import AudioSettings
from phantom_radio.domain.music.value_objects import LocalFileSource, StreamSource
from phantom_radio.domain.shared.exceptions import AudioSourceUnresolvableError
from phantom_radio.domain.shared.messages import ErrorMessages
from phantom_radio.infrastructure.audio.models import AudioFormatInfo, YtDlpOpts, YtDlpTrackInfo
from phantom_radio.infrastructure.audio.source_resolver import YtDlpSourceResolver

YDL_PATH = "phantom_radio.infrastructure.audio.source_resolver.YoutubeDL"
STREAM = StreamSource(url="https://example.com/watch?v=abc")


@pytest.fixture
def music_dir(tmp_path):
    root = tmp_path / "music"
    (root / "battle").mkdir(parents=True)
    (root / "battle" / "pbz-battle-004.mp3").write_bytes(b"ID3")
    (tmp_path / "secret.mp3").write_bytes(b"ID3")
    return root


@pytest.fixture
def resolver(music_dir):
    return YtDlpSourceResolver(AudioSettings(music_dir=str(music_dir)))


def _mock_extract(mock_ydl, data):
    mock_ydl.return_value.__enter__.return_value.extract_info.return_value = data


class TestLocalSources:
    @pytest.mark.asyncio
    async def test_existing_file_resolved(self, resolver, music_dir):
        """Should hand FFmpeg the absolute path of a local file."""
        resolved = await resolver.resolve(
            LocalFileSource(relative_path="battle/pbz-battle-004.mp3")
        )

        assert resolved.input == str((music_dir / "battle" / "pbz-battle-004.mp3").resolve())
        assert resolved.is_stream is False
        assert resolved.before_options is None
        assert resolved.options == "-vn"

    @pytest.mark.asyncio
    async def test_missing_file_unresolvable(self, resolver):
        with pytest.raises(AudioSourceUnresolvableError) as exc_info:
            await resolver.resolve(LocalFileSource(relative_path="battle/missing.mp3"))

        assert exc_info.value.reason == ErrorMessages.LOCAL_FILE_MISSING

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, resolver):
        """Should refuse paths that climb out of the music directory."""
        with pytest.raises(AudioSourceUnresolvableError) as exc_info:
            await resolver.resolve(LocalFileSource(relative_path="../secret.mp3"))

        assert exc_info.value.reason == ErrorMessages.LOCAL_PATH_OUTSIDE_MUSIC_DIR

    @pytest.mark.asyncio
    async def test_directory_is_not_a_track(self, resolver):
        with pytest.raises(AudioSourceUnresolvableError):
            await resolver.resolve(LocalFileSource(relative_path="battle"))


class TestStreamSources:
    @pytest.mark.asyncio
    async def test_stream_url_extracted(self, resolver):
        """Should resolve a page URL to its direct media URL with reconnect options."""
        with patch(YDL_PATH) as mock_ydl:
            _mock_extract(mock_ydl, {"url": "https://cdn.example.com/a.m4a", "title": "Live"})
            resolved = await resolver.resolve(STREAM)

        assert resolved.input == "https://cdn.example.com/a.m4a"
        assert resolved.is_stream is True
        assert resolved.before_options.startswith("-reconnect 1")

    @pytest.mark.asyncio
    async def test_ytdlp_options_passed(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            _mock_extract(mock_ydl, {"url": "https://cdn.example.com/a.m4a"})
            await resolver.resolve(STREAM)

        params = mock_ydl.call_args.kwargs["params"]
        assert params["format"] == "bestaudio/best"
        assert params["noplaylist"] is True

    @pytest.mark.asyncio
    async def test_extraction_error_unresolvable(self, resolver):
        """Should turn yt-dlp failures into an unresolvable source."""
        with patch(YDL_PATH) as mock_ydl:
            mock_ydl.return_value.__enter__.return_value.extract_info.side_effect = DownloadError(
                "Video unavailable"
            )
            with pytest.raises(AudioSourceUnresolvableError) as exc_info:
                await resolver.resolve(STREAM)

        assert exc_info.value.source == STREAM.describe()

    @pytest.mark.asyncio
    async def test_non_dict_info_unresolvable(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            _mock_extract(mock_ydl, None)
            with pytest.raises(AudioSourceUnresolvableError) as exc_info:
                await resolver.resolve(STREAM)

        assert exc_info.value.reason == ErrorMessages.NO_URL_IN_INFO_DICT

    @pytest.mark.asyncio
    async def test_no_playable_url_unresolvable(self, resolver):
        with patch(YDL_PATH) as mock_ydl:
            _mock_extract(mock_ydl, {"title": "Video only", "formats": [{"url": "v", "acodec": "none"}]})
            with pytest.raises(AudioSourceUnresolvableError):
                await resolver.resolve(STREAM)


class TestYtDlpModels:
    def test_stream_url_prefers_top_level_url(self):
        info = YtDlpTrackInfo(url="https://a", formats=[AudioFormatInfo(url="https://b")])

        assert info.stream_url == "https://a"

    def test_stream_url_falls_back_to_last_audio_format(self):
        """Should pick the last format that carries audio."""
        info = YtDlpTrackInfo.model_validate(
            {
                "url": "  ",
                "formats": [
                    {"url": "https://low", "acodec": "opus"},
                    {"url": "https://high", "acodec": "mp4a"},
                    {"url": "https://video", "acodec": "none"},
                ],
            }
        )

        assert info.url is None
        assert info.stream_url == "https://high"

    def test_blank_title_coerced(self):
        assert YtDlpTrackInfo(title="").title == "Unknown Title"

    def test_opts_defaults(self):
        opts = YtDlpOpts()

        assert opts.skip_download is True
        assert opts.format is None
