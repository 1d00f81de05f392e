"""Synthesis backends the audio cache falls back to on a miss.

Providers are looked up by the name used in ``[tts] provider`` of the
config file. One instance per name is shared by every cache in the process.
"""

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from .base import TTSProvider

from .elevenlabs import ElevenLabsProvider
from .system import SystemTTSProvider

__all__ = ["ElevenLabsProvider", "ProviderRegistry", "SystemTTSProvider"]


class ProviderRegistry:
    """Name to provider class mapping with lazily created shared instances."""

    _providers: ClassVar[dict[str, type["TTSProvider"]]] = {}
    _instances: ClassVar[dict[str, "TTSProvider"]] = {}

    @classmethod
    def register(cls, name: str, provider_class: type["TTSProvider"]) -> None:
        """Register a provider class, dropping any instance built for the name."""
        cls._providers[name] = provider_class
        cls._instances.pop(name, None)

    @classmethod
    def register_instance(cls, name: str, provider: "TTSProvider") -> None:
        """Register a ready-made provider, e.g. one needing constructor arguments."""
        cls._providers[name] = type(provider)
        cls._instances[name] = provider

    @classmethod
    def unregister(cls, name: str) -> None:
        """Forget a provider name. Unknown names are ignored."""
        cls._providers.pop(name, None)
        cls._instances.pop(name, None)

    @classmethod
    def names(cls) -> list[str]:
        """Registered provider names in sorted order."""
        return sorted(cls._providers)

    @classmethod
    def get(cls, name: str) -> type["TTSProvider"]:
        """Get a provider class by name.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._providers:
            available = ", ".join(cls.names()) or "none"
            raise KeyError(
                f"Provider '{name}' not found. Available providers: {available}"
            )
        return cls._providers[name]

    @classmethod
    def get_instance(cls, name: str) -> "TTSProvider":
        """Get the shared provider instance for a name, creating it on first use.

        Raises:
            KeyError: If provider name not found
        """
        if name not in cls._instances:
            cls._instances[name] = cls.get(name)()
        return cls._instances[name]


ProviderRegistry.register("elevenlabs", ElevenLabsProvider)
ProviderRegistry.register("system", SystemTTSProvider)
