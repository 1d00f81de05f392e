"""Custom exceptions for the audio cache and synthesis providers."""

from pathlib import Path


class CacheError(Exception):
    """Base exception for cache-related errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class ConfigurationError(CacheError):
    """Exception raised when the cache cannot be configured.

    This typically occurs when:
    - The cache folder is missing from configuration
    - The cache folder cannot be created
    - The expiration window is negative or not an integer
    """

    pass


class KeyDerivationError(CacheError):
    """Exception raised when no cache key can be derived for a request."""

    pass


class PersistenceError(CacheError):
    """Exception raised when audio or its sidecar cannot be written."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.path = path


class PurgeError(CacheError):
    """Exception raised when a single file cannot be removed during a sweep."""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.path = path


class TTSError(Exception):
    """Base exception for synthesis provider errors."""

    def __init__(
        self, message: str, original_error: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_error = original_error


class TTSAuthError(TTSError):
    """Exception raised for authentication failures.

    This typically occurs when:
    - API key is missing or invalid
    - Account has insufficient credits
    """

    pass


class TTSAPIError(TTSError):
    """Exception raised for API communication errors.

    This typically occurs when:
    - API server is unavailable (5xx errors)
    - Rate limits are exceeded (429 error)
    - The requested audio format is not offered by the provider
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)
        self.status_code = status_code
