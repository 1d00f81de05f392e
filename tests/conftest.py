"""Pytest configuration and fixtures for voicecache tests."""

import asyncio
import sys
from pathlib import Path
from collections.abc import Generator

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from voicecache.core import reset_caches
from voicecache.providers.base import TTSProvider


class StubProvider(TTSProvider):
    """Deterministic provider that counts synthesis calls."""

    formats = ("mp3", "ogg", "wav")

    def __init__(self, delay: float = 0.0) -> None:
        self.calls: list[tuple[str, str, str]] = []
        self.delay = delay

    async def synthesize(self, text: str, voice: str, audio_format: str) -> bytes:
        self.calls.append((text, voice, audio_format))
        if self.delay:
            await asyncio.sleep(self.delay)
        return f"{audio_format}:{voice}:{text}".encode("utf-8")

    async def list_voices(self) -> list[dict]:
        return [{"id": "Robert", "name": "Robert", "provider": "stub"}]


@pytest.fixture
def stub_provider() -> StubProvider:
    """Provider stub recording every synthesis call."""
    return StubProvider()


@pytest.fixture
def slow_provider() -> StubProvider:
    """Provider stub that yields to the event loop while synthesizing."""
    return StubProvider(delay=0.05)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Cache folder path that does not exist yet."""
    return tmp_path / "tts-cache"


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch) -> Generator[None]:
    """Keep config env overrides and shared caches out of every test."""
    for name in (
        "VOICECACHE_PROVIDER",
        "VOICECACHE_VOICE",
        "VOICECACHE_FORMAT",
        "VOICECACHE_FOLDER",
        "VOICECACHE_EXPIRE_DAYS",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_caches()
    yield
    reset_caches()
