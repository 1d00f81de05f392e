"""ElevenLabs text-to-speech provider implementation."""

import asyncio
import logging
import os
from dataclasses import asdict, dataclass
from typing import ClassVar

from elevenlabs.client import ElevenLabs

from ..errors import TTSAPIError, TTSAuthError
from .base import TTSProvider

logger = logging.getLogger(__name__)

# Cache file extension -> ElevenLabs output_format
OUTPUT_FORMATS = {
    "mp3": "mp3_44100_128",
    "pcm": "pcm_16000",
    "ulaw": "ulaw_8000",
}


@dataclass
class VoiceSettings:
    """Voice generation settings.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float = 0.65
    similarity_boost: float = 0.75
    style: float = 0.4
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Validate voice settings."""
        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self) -> dict:
        return asdict(self)


def _map_error(e: Exception, action: str) -> Exception:
    message = str(e)
    if "unauthorized" in message.lower() or "401" in message:
        return TTSAuthError(f"Authentication failed: {e}", e)
    if "429" in message:
        return TTSAPIError(f"Rate limit exceeded: {e}", 429, e)
    if message[:1] == "5":  # 5xx server errors
        return TTSAPIError(f"Server error: {e}", original_error=e)
    return TTSAPIError(f"{action} failed: {e}", original_error=e)


class ElevenLabsProvider(TTSProvider):
    """ElevenLabs TTS provider implementation.

    The ElevenLabs SDK is synchronous, so calls run in a worker thread to
    keep the event loop free.
    """

    formats: ClassVar[tuple[str, ...]] = tuple(OUTPUT_FORMATS)

    def __init__(
        self,
        api_key: str | None = None,
        model_id: str = "eleven_turbo_v2_5",
        voice_settings: VoiceSettings | None = None,
    ) -> None:
        """Initialize ElevenLabs provider.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            model_id: ElevenLabs model ID to use
            voice_settings: Voice settings, defaults tuned for turbo models

        Raises:
            TTSAuthError: If API key is not provided or invalid.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        try:
            self._client = ElevenLabs(api_key=self._api_key)
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        self.model_id = model_id
        self.voice_settings = voice_settings or VoiceSettings()
        self._voices_cache: list[dict] | None = None

    async def synthesize(self, text: str, voice: str, audio_format: str) -> bytes:
        """Convert text to speech audio bytes.

        Args:
            text: Text to convert to speech
            voice: Voice name or voice ID. Names are resolved to IDs through
                list_voices(); anything else is sent as an ID.
            audio_format: One of "mp3", "pcm", "ulaw"

        Returns:
            Audio data as bytes in the requested format

        Raises:
            TTSAPIError: If the format is unsupported or the API call fails
            TTSAuthError: If authentication fails
            ValueError: If text is empty
        """
        if not text or not text.strip():
            raise ValueError("Text cannot be empty")

        if not self.supports(audio_format.lower()):
            raise TTSAPIError(
                f"Unsupported audio format '{audio_format}' for ElevenLabs. "
                f"Supported: {', '.join(self.formats)}"
            )
        output_format = OUTPUT_FORMATS[audio_format.lower()]
        voice_id = await self.resolve_voice(voice)

        def _sync_convert() -> bytes:
            audio_generator = self._client.text_to_speech.convert(
                text=text.strip(),
                voice_id=voice_id,
                model_id=self.model_id,
                output_format=output_format,
                voice_settings=self.voice_settings.to_dict(),
            )
            return b"".join(audio_generator)

        try:
            audio_bytes = await asyncio.to_thread(_sync_convert)
        except Exception as e:
            raise _map_error(e, "API call") from e

        if not audio_bytes:
            raise TTSAPIError("No audio data received from API")

        return audio_bytes

    async def resolve_voice(self, voice: str) -> str:
        """Map a voice name such as "Rachel" to its ElevenLabs voice ID.

        Matching is case-insensitive. A label that is already a known ID, or
        matches no voice, is returned unchanged. If voices cannot be listed
        the label is used as an ID.

        Raises:
            TTSAuthError: If authentication fails
        """
        try:
            voices = await self.list_voices()
        except TTSAuthError:
            raise
        except TTSAPIError as e:
            logger.debug(f"Could not list voices, using '{voice}' as voice ID: {e}")
            return voice

        if any(v["id"] == voice for v in voices):
            return voice
        wanted = voice.casefold()
        for v in voices:
            if v["name"].casefold() == wanted:
                logger.debug(f"Resolved voice '{voice}' to {v['id']}")
                return v["id"]
        return voice

    async def list_voices(self) -> list[dict]:
        """Get list of available voices.

        Results are cached after first call to avoid repeated API requests.

        Raises:
            TTSAPIError: If API call fails
            TTSAuthError: If authentication fails
        """
        if self._voices_cache is not None:
            return self._voices_cache

        def _sync_get_voices() -> list[dict]:
            response = self._client.voices.get_all()
            return [
                {"id": voice.voice_id, "name": voice.name, "provider": "elevenlabs"}
                for voice in response.voices
            ]

        try:
            voices = await asyncio.to_thread(_sync_get_voices)
        except Exception as e:
            raise _map_error(e, "Listing voices") from e

        self._voices_cache = voices
        return voices
