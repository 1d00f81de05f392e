"""Cache key derivation for (text, voice) pairs."""

import hashlib

from ..errors import KeyDerivationError

_UNSAFE_LABEL_CHARS = ("/", "\\", "\x00")


def derive_key(text: str, voice: str) -> str:
    """Derive the cache key for a text spoken by a voice.

    The key is the voice label followed by the MD5 digest of the UTF-8
    encoded text, rendered as exactly 32 lowercase hex characters.

    Sample: "Robert_00a2653ac5f77063bc4ea2fee87318d3"

    Args:
        text: Source text of the audio
        voice: Voice label, used as a readable filename prefix

    Returns:
        Filesystem-safe cache key

    Raises:
        KeyDerivationError: If the text cannot be encoded, MD5 is
            unavailable, or the voice label is not usable in a filename
    """
    if text is None:
        raise KeyDerivationError("Cannot derive cache key: text is None")
    if not voice or any(char in voice for char in _UNSAFE_LABEL_CHARS):
        raise KeyDerivationError(
            f"Cannot derive cache key: invalid voice label {voice!r}"
        )

    try:
        data = text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise KeyDerivationError(
            f"Could not encode text as UTF-8: '{text[:50]}'", e
        ) from e

    try:
        digest = hashlib.md5(data, usedforsecurity=False).digest()
    except ValueError as e:
        # FIPS builds reject MD5 outright
        raise KeyDerivationError(f"MD5 digest unavailable: {e}", e) from e

    # Rendering from the raw bytes keeps leading zero bytes
    return f"{voice}_{digest.hex()}"
