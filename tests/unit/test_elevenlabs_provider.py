"""Unit tests for ElevenLabsProvider error handling and logic."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from voicecache.errors import TTSAPIError, TTSAuthError
from voicecache.providers.elevenlabs import ElevenLabsProvider, VoiceSettings


class TestElevenLabsProviderInitialization:
    """Test ElevenLabsProvider initialization and authentication error handling."""

    def test_initialization_with_provided_api_key(self) -> None:
        with patch("voicecache.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            mock_client = MagicMock()
            mock_elevenlabs.return_value = mock_client

            provider = ElevenLabsProvider(api_key="test_key")

            assert provider._api_key == "test_key"
            mock_elevenlabs.assert_called_once_with(api_key="test_key")
            assert provider._client == mock_client

    def test_initialization_with_env_var_api_key(self) -> None:
        with patch.dict(os.environ, {"ELEVENLABS_API_KEY": "env_test_key"}):
            with patch("voicecache.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
                provider = ElevenLabsProvider()

                assert provider._api_key == "env_test_key"
                mock_elevenlabs.assert_called_once_with(api_key="env_test_key")

    def test_initialization_no_api_key_raises_auth_error(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(TTSAuthError, match="ElevenLabs API key not found"):
                ElevenLabsProvider()

    def test_initialization_client_failure_raises_auth_error(self) -> None:
        with patch("voicecache.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            mock_elevenlabs.side_effect = Exception("Invalid API key")

            with pytest.raises(
                TTSAuthError, match="Failed to initialize ElevenLabs client"
            ):
                ElevenLabsProvider(api_key="invalid_key")


class TestVoiceSettings:
    """Test voice settings validation."""

    def test_defaults_are_valid(self) -> None:
        settings = VoiceSettings()

        assert settings.to_dict() == {
            "stability": 0.65,
            "similarity_boost": 0.75,
            "style": 0.4,
            "use_speaker_boost": True,
        }

    @pytest.mark.parametrize("field", ["stability", "similarity_boost", "style"])
    def test_out_of_range_rejected(self, field: str) -> None:
        with pytest.raises(ValueError, match=field):
            VoiceSettings(**{field: 1.5})


class TestElevenLabsProviderSynthesize:
    """Test ElevenLabsProvider synthesize method."""

    def setup_method(self) -> None:
        """Set up test provider with mocked ElevenLabs client."""
        with patch("voicecache.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.mock_client = MagicMock()
            mock_elevenlabs.return_value = self.mock_client
            self.provider = ElevenLabsProvider(api_key="test_key")

    @pytest.mark.asyncio
    async def test_synthesize_maps_format_and_joins_chunks(self) -> None:
        self.mock_client.text_to_speech.convert.return_value = iter([b"ab", b"cd"])

        result = await self.provider.synthesize(" Hello ", "voice_1", "MP3")

        assert result == b"abcd"
        self.mock_client.text_to_speech.convert.assert_called_once_with(
            text="Hello",
            voice_id="voice_1",
            model_id="eleven_turbo_v2_5",
            output_format="mp3_44100_128",
            voice_settings=VoiceSettings().to_dict(),
        )

    @pytest.mark.asyncio
    async def test_synthesize_unsupported_format(self) -> None:
        with pytest.raises(TTSAPIError, match="Unsupported audio format 'ogg'"):
            await self.provider.synthesize("Hello", "voice_1", "ogg")

        self.mock_client.text_to_speech.convert.assert_not_called()

    @pytest.mark.asyncio
    async def test_synthesize_empty_text_raises_value_error(self) -> None:
        with pytest.raises(ValueError, match="Text cannot be empty"):
            await self.provider.synthesize("   ", "voice_1", "mp3")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("message", "error", "match"),
        [
            ("401 unauthorized", TTSAuthError, "Authentication failed"),
            ("429 rate limit", TTSAPIError, "Rate limit exceeded"),
            ("500 server error", TTSAPIError, "Server error"),
            ("network error", TTSAPIError, "API call failed"),
        ],
    )
    async def test_synthesize_error_mapping(self, message, error, match) -> None:
        self.mock_client.text_to_speech.convert.side_effect = Exception(message)

        with pytest.raises(error, match=match) as exc_info:
            await self.provider.synthesize("Hello", "voice_1", "mp3")

        assert str(exc_info.value.original_error) == message

    @pytest.mark.asyncio
    async def test_rate_limit_carries_status_code(self) -> None:
        self.mock_client.text_to_speech.convert.side_effect = Exception("429 slow down")

        with pytest.raises(TTSAPIError) as exc_info:
            await self.provider.synthesize("Hello", "voice_1", "mp3")

        assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_synthesize_no_audio_data(self) -> None:
        self.mock_client.text_to_speech.convert.return_value = iter([])

        with pytest.raises(TTSAPIError, match="No audio data received from API"):
            await self.provider.synthesize("Hello", "voice_1", "mp3")


class TestElevenLabsProviderListVoices:
    """Test ElevenLabsProvider list_voices method."""

    def setup_method(self) -> None:
        with patch("voicecache.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.mock_client = MagicMock()
            mock_elevenlabs.return_value = self.mock_client
            self.provider = ElevenLabsProvider(api_key="test_key")

    @pytest.mark.asyncio
    async def test_list_voices_is_cached(self) -> None:
        voice = MagicMock(voice_id="v1")
        voice.name = "Rachel"
        self.mock_client.voices.get_all.return_value = MagicMock(voices=[voice])

        first = await self.provider.list_voices()
        second = await self.provider.list_voices()

        assert first == [{"id": "v1", "name": "Rachel", "provider": "elevenlabs"}]
        assert second is first
        self.mock_client.voices.get_all.assert_called_once()

    @pytest.mark.asyncio
    async def test_list_voices_unauthorized(self) -> None:
        self.mock_client.voices.get_all.side_effect = Exception("401 unauthorized")

        with pytest.raises(TTSAuthError, match="Authentication failed"):
            await self.provider.list_voices()

    @pytest.mark.asyncio
    async def test_list_voices_generic_error(self) -> None:
        self.mock_client.voices.get_all.side_effect = Exception("boom")

        with pytest.raises(TTSAPIError, match="Listing voices failed"):
            await self.provider.list_voices()


class TestElevenLabsProviderResolveVoice:
    """Test voice name to voice ID resolution."""

    def setup_method(self) -> None:
        with patch("voicecache.providers.elevenlabs.ElevenLabs") as mock_elevenlabs:
            self.mock_client = MagicMock()
            mock_elevenlabs.return_value = self.mock_client
            self.provider = ElevenLabsProvider(api_key="test_key")

        rachel = MagicMock(voice_id="21m00Tcm4TlvDq8ikWAM")
        rachel.name = "Rachel"
        self.mock_client.voices.get_all.return_value = MagicMock(voices=[rachel])

    @pytest.mark.asyncio
    async def test_name_resolves_to_id(self) -> None:
        assert await self.provider.resolve_voice("Rachel") == "21m00Tcm4TlvDq8ikWAM"
        assert await self.provider.resolve_voice("rachel") == "21m00Tcm4TlvDq8ikWAM"

    @pytest.mark.asyncio
    async def test_id_and_unknown_labels_pass_through(self) -> None:
        assert (
            await self.provider.resolve_voice("21m00Tcm4TlvDq8ikWAM")
            == "21m00Tcm4TlvDq8ikWAM"
        )
        assert await self.provider.resolve_voice("pNInz6obpgDQGcFmaJgB") == (
            "pNInz6obpgDQGcFmaJgB"
        )

    @pytest.mark.asyncio
    async def test_listing_failure_uses_label_as_id(self) -> None:
        self.mock_client.voices.get_all.side_effect = Exception("network error")

        assert await self.provider.resolve_voice("Rachel") == "Rachel"

    @pytest.mark.asyncio
    async def test_listing_auth_failure_propagates(self) -> None:
        self.mock_client.voices.get_all.side_effect = Exception("401 unauthorized")

        with pytest.raises(TTSAuthError):
            await self.provider.resolve_voice("Rachel")

    @pytest.mark.asyncio
    async def test_synthesize_sends_resolved_id(self) -> None:
        convert = self.mock_client.text_to_speech.convert
        convert.side_effect = lambda **_: iter([b"audio"])

        await self.provider.synthesize("Hello", "Rachel", "mp3")
        await self.provider.synthesize("Hello again", "Rachel", "mp3")

        calls = self.mock_client.text_to_speech.convert.call_args_list
        assert [c.kwargs["voice_id"] for c in calls] == ["21m00Tcm4TlvDq8ikWAM"] * 2
        self.mock_client.voices.get_all.assert_called_once()
