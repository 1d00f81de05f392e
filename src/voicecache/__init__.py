"""voicecache - disk-backed cache for text-to-speech audio."""

__version__ = "0.1.0"
__all__ = ["get_audio"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name == "get_audio":
        from .api import get_audio

        return get_audio
    raise AttributeError(f"module 'voicecache' has no attribute {name!r}")
