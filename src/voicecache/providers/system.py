"""System TTS provider using native OS text-to-speech commands.

Uses ``say`` on macOS and ``espeak`` on Linux. Only WAV output is produced,
so the cache stores system voices as ``.wav`` entries.
"""

import asyncio
import logging
import platform
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import ClassVar

from ..errors import TTSAPIError
from .base import TTSProvider

logger = logging.getLogger(__name__)


async def _run(*cmd: str) -> None:
    proc = await asyncio.create_subprocess_exec(
        *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
    )
    _, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise TTSAPIError(
            f"{cmd[0]} failed with code {proc.returncode}: {stderr.decode().strip()}"
        )


class SystemTTSProvider(TTSProvider):
    """System TTS provider using native OS commands.

    Note: Audio quality will be robotic compared to AI-powered voices.
    """

    formats: ClassVar[tuple[str, ...]] = ("wav",)

    def __init__(self) -> None:
        """Initialize system TTS provider and detect platform.

        Raises:
            RuntimeError: If the platform has no supported TTS command
        """
        self.platform = platform.system()
        if self.platform not in ["Darwin", "Linux"]:
            raise RuntimeError(f"Unsupported platform: {self.platform}")

    async def synthesize(self, text: str, voice: str, audio_format: str) -> bytes:
        """Convert text to WAV audio using native OS commands.

        Args:
            text: Text to convert to speech
            voice: Platform voice name, "default" for the system default
            audio_format: Must be "wav"

        Returns:
            WAV audio bytes

        Raises:
            TTSAPIError: If the format is unsupported or the TTS command fails
        """
        if not self.supports(audio_format.lower()):
            raise TTSAPIError(
                f"Unsupported audio format '{audio_format}' for system TTS. "
                "Supported: wav"
            )

        voice_args = [] if not voice or voice == "default" else ["-v", voice]

        with tempfile.TemporaryDirectory() as tmp_dir:
            output_path = Path(tmp_dir) / "speech.wav"

            if self.platform == "Darwin":
                aiff_path = Path(tmp_dir) / "speech.aiff"
                await _run("say", "-o", str(aiff_path), *voice_args, text)
                # afconvert turns say's AIFF output into 16-bit little-endian WAV
                await _run(
                    "afconvert", "-f", "WAVE", "-d", "LEI16",
                    str(aiff_path), str(output_path),
                )
            else:
                if shutil.which("espeak") is None:
                    raise TTSAPIError(
                        "espeak not found. Install it with: sudo apt-get install espeak"
                    )
                await _run("espeak", "-w", str(output_path), *voice_args, text)

            return output_path.read_bytes()

    async def list_voices(self) -> list[dict]:
        """List available system voices.

        Returns:
            List of voice dictionaries with id, name, and provider fields
        """
        if self.platform == "Darwin":
            cmd = ["say", "-v", "?"]
        else:
            cmd = ["espeak", "--voices"]

        try:
            result = await asyncio.to_thread(
                subprocess.run, cmd, capture_output=True, text=True, check=True
            )
        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning(f"Failed to list system voices: {e}")
            result = None

        voices = []
        if result is not None:
            lines = result.stdout.strip().split("\n")
            if self.platform == "Darwin":
                # Format: "Voice Name     Language  # Description"
                names = [line.split()[0] for line in lines if line.strip()]
            else:
                # espeak prints a header, voice ID is in the second column
                names = [
                    line.split()[1] for line in lines[1:] if len(line.split()) >= 2
                ]
            voices = [{"id": name, "name": name, "provider": "system"} for name in names]

        if not voices:
            voices.append(
                {"id": "default", "name": "Default System Voice", "provider": "system"}
            )

        return voices
