"""Filesystem storage for cached audio files and their text sidecars."""

import logging
import os
import tempfile
import time
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import BinaryIO

from ..errors import ConfigurationError, PersistenceError, PurgeError
from .models import CacheEntry, EntryFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
SIDECAR_SUFFIX = "txt"

AudioSource = bytes | bytearray | memoryview | Iterable[bytes] | BinaryIO


def normalize_format(audio_format: str) -> str:
    """Normalize an audio format into the file extension used in the cache.

    Args:
        audio_format: Caller supplied format such as "MP3" or "ogg"

    Returns:
        Lowercased extension

    Raises:
        ValueError: If the format is empty, not alphanumeric, or collides
            with the sidecar extension
    """
    fmt = (audio_format or "").strip().lower()
    if not fmt or not fmt.isalnum():
        raise ValueError(f"Invalid audio format: {audio_format!r}")
    if fmt == SIDECAR_SUFFIX:
        raise ValueError(f"Audio format '{fmt}' is reserved for text sidecars")
    return fmt


def _iter_chunks(audio: AudioSource) -> Iterator[bytes]:
    if isinstance(audio, (bytes, bytearray, memoryview)):
        yield bytes(audio)
    elif hasattr(audio, "read"):
        yield from iter(lambda: audio.read(CHUNK_SIZE), b"")
    else:
        yield from audio


class ArtifactStore:
    """Flat directory of cache entries.

    Every entry is an audio file ``<key>.<format>`` plus a text sidecar
    ``<key>.txt``. Files are written under a temporary name and renamed into
    place, so an audio file that exists is always complete.
    """

    def __init__(self, folder: Path):
        """Initialize store and create the folder if it is missing.

        Args:
            folder: Directory holding all cache files

        Raises:
            ConfigurationError: If the folder cannot be created
        """
        self.folder = Path(folder).expanduser()
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Could not create cache folder {self.folder}: {e}", e
            ) from e

    def entry(self, key: str, audio_format: str) -> CacheEntry:
        fmt = normalize_format(audio_format)
        return CacheEntry(
            key=key,
            audio_path=self.folder / f"{key}.{fmt}",
            text_path=self.folder / f"{key}.{SIDECAR_SUFFIX}",
        )

    def exists(self, key: str, audio_format: str) -> bool:
        """Check whether the audio file for a key exists."""
        return self.entry(key, audio_format).audio_path.is_file()

    def touch(self, key: str, audio_format: str, now: float | None = None) -> bool:
        """Mark an entry as recently used.

        Sets the modification time of the audio file and its sidecar to now.
        A missing sidecar is skipped.

        Args:
            key: Cache key
            audio_format: Audio format of the entry
            now: Timestamp to apply, defaults to the current time

        Returns:
            True if the audio file was refreshed, False if it no longer exists
        """
        entry = self.entry(key, audio_format)
        stamp = time.time() if now is None else now

        try:
            os.utime(entry.audio_path, (stamp, stamp))
        except FileNotFoundError:
            logger.debug(f"Audio file vanished before touch: {entry.audio_path}")
            return False

        try:
            os.utime(entry.text_path, (stamp, stamp))
        except FileNotFoundError:
            logger.debug(f"No sidecar to touch for {key}")
        except OSError as e:
            logger.warning(f"Failed to touch sidecar {entry.text_path}: {e}")

        return True

    def read(self, key: str, audio_format: str) -> Path:
        """Return the path of the cached audio file for streaming."""
        return self.entry(key, audio_format).audio_path

    def write(
        self, key: str, audio_format: str, text: str, audio: AudioSource
    ) -> Path:
        """Persist audio and its text sidecar.

        The audio stream is fully drained to a temporary file in the cache
        folder, flushed to disk and renamed onto its final name. The sidecar is
        written the same way once the audio is in place.

        Args:
            key: Cache key
            audio_format: Audio format, used as the file extension
            text: Source text stored in the sidecar
            audio: Audio bytes, an iterable of byte chunks, or a binary file

        Returns:
            Path to the persisted audio file

        Raises:
            PersistenceError: If any write fails or the stream is empty
        """
        entry = self.entry(key, audio_format)

        try:
            sidecar = text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise PersistenceError(
                f"Could not encode sidecar text for {key}", entry.text_path, e
            ) from e

        try:
            self.folder.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(
                f"Could not create cache folder {self.folder}: {e}",
                self.folder,
                e,
            ) from e

        size = self._write_atomic(
            entry.audio_path, _iter_chunks(audio), allow_empty=False
        )

        try:
            self._write_atomic(entry.text_path, [sidecar])
        except PersistenceError:
            # Without its sidecar the entry is dropped rather than left half written
            entry.audio_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {size} bytes of audio to {entry.audio_path}")
        return entry.audio_path

    def _write_atomic(
        self, target: Path, chunks: Iterable[bytes], allow_empty: bool = True
    ) -> int:
        tmp_path = None
        written = 0
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.folder, prefix=f".{target.name}.", suffix=".tmp"
            )
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "wb") as f:
                for chunk in chunks:
                    f.write(chunk)
                    written += len(chunk)
                f.flush()
                os.fsync(f.fileno())
            if not written and not allow_empty:
                raise PersistenceError(f"Refusing to cache empty file {target}", target)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as e:
            raise PersistenceError(f"Could not write {target}: {e}", target, e) from e
        finally:
            if tmp_path is not None:
                try:
                    tmp_path.unlink(missing_ok=True)
                except OSError as cleanup_error:
                    logger.warning(
                        f"Failed to clean up temporary file {tmp_path}: {cleanup_error}"
                    )
        return written

    def list_entries(self) -> list[EntryFile]:
        """List every regular file directly in the cache folder.

        Audio files, sidecars and leftover temporaries are all listed. Files
        removed by another process during the scan are skipped.

        Raises:
            OSError: If the folder itself cannot be read
        """
        files = []
        with os.scandir(self.folder) as it:
            for dir_entry in it:
                try:
                    if not dir_entry.is_file(follow_symlinks=False):
                        continue
                    mtime = dir_entry.stat(follow_symlinks=False).st_mtime
                except FileNotFoundError:
                    continue
                files.append(EntryFile(path=Path(dir_entry.path), mtime=mtime))
        return files

    def delete(self, path: Path) -> bool:
        """Remove one file from the cache folder.

        Returns:
            True if the file was removed, False if it was already gone

        Raises:
            PurgeError: If the file exists but cannot be removed
        """
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise PurgeError(f"Could not delete {path}: {e}", Path(path), e) from e
        return True
