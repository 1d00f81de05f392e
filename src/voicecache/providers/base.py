"""Abstract base class for text-to-speech providers.

Providers are the synthesis backends the audio cache falls back to on a
miss. Output for identical inputs is assumed to be identical, which is what
makes caching by (text, voice, format) correct.
"""

from abc import ABC, abstractmethod
from typing import ClassVar


class TTSProvider(ABC):
    """Speech synthesis backend.

    Subclasses turn (text, voice, format) into complete audio bytes and
    describe their voices as dicts with "id", "name" and "provider" keys.
    """

    # Audio formats (file extensions) the provider can produce
    formats: ClassVar[tuple[str, ...]] = ()

    def supports(self, audio_format: str) -> bool:
        """Whether the provider can produce the given lowercase format."""
        return audio_format in self.formats

    @abstractmethod
    async def synthesize(self, text: str, voice: str, audio_format: str) -> bytes:
        """Synthesize text into audio.

        Args:
            text: Text to speak
            voice: Voice label, passed to the backend unchanged
            audio_format: Lowercase audio format, e.g. "mp3"

        Returns:
            Complete audio payload in the requested format

        Raises:
            TTSError: If synthesis fails
        """

    @abstractmethod
    async def list_voices(self) -> list[dict]:
        """Return the voices this provider offers.

        Raises:
            TTSError: If voice listing fails
        """
