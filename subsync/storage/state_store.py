"""
File-based persistent state store.

One UTF-8 text artifact per source, one entry per line. Writes go
through a temporary file and an atomic rename so a failed save never
leaves a truncated artifact behind.
"""

import hashlib
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..sync.normalize import normalize
from .models import EntrySet

logger = logging.getLogger(__name__)


_URL_PREFIXES = ("http://", "https://")

# Characters that are unsafe in file names on at least one platform,
# plus the query separators that show up in subscription links.
_UNSAFE_CHARS = '/\\:*?"<>|&='

_SANITIZE_TABLE = str.maketrans({ch: "_" for ch in _UNSAFE_CHARS})

# Leaves room for the digest, extension and temp-file affixes under
# the usual 255-byte file name limit.
MAX_STEM_BYTES = 96

DIGEST_LENGTH = 12


class StateStoreError(Exception):
    """Raised when state store operations fail."""
    pass


def _readable_stem(source: str) -> str:
    for prefix in _URL_PREFIXES:
        if source.startswith(prefix):
            source = source[len(prefix):]
            break
    stem = source.translate(_SANITIZE_TABLE)
    # Cut on bytes, not characters; dropping a split multi-byte tail
    return stem.encode("utf-8")[:MAX_STEM_BYTES].decode("utf-8", errors="ignore")


def artifact_name(source: str) -> str:
    """
    Derive a filesystem-safe artifact name from a source identifier.

    The name is a readable stem (http(s) scheme dropped, unsafe
    characters replaced with underscores, capped at MAX_STEM_BYTES)
    followed by a digest of the full identifier. The stem alone is
    lossy; the digest keeps distinct sources on distinct files.

    Args:
        source: Subscription URL or local file path

    Returns:
        Name without extension
    """
    digest = hashlib.sha256(source.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
    return f"{_readable_stem(source)}-{digest}"


class StateStore:
    """
    Text-file state store keyed by source identifier.

    Features:
    - Missing or unreadable artifacts load as an empty EntrySet
    - Atomic overwrite via temp file + os.replace
    - Per-key in-process lock for load/diff/save critical sections

    Usage:
        store = StateStore(Path("output"))

        with store.lock(url):
            old = store.load(url)
            ...
            store.save(url, new_entries)
    """

    def __init__(self, output_dir: Path, extension: str = ".txt"):
        """
        Initialize state store.

        Args:
            output_dir: Directory holding the artifacts
            extension: File extension appended to artifact names
        """
        self.output_dir = Path(output_dir)
        self.extension = extension

        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        logger.debug(f"State store initialized at {self.output_dir}")

    def path_for(self, source: str) -> Path:
        """Return the artifact path for a source."""
        return self.output_dir / f"{artifact_name(source)}{self.extension}"

    def exists(self, source: str) -> bool:
        """Check whether an artifact has been written for a source."""
        return self.path_for(source).is_file()

    @contextmanager
    def lock(self, source: str) -> Iterator[None]:
        """
        Hold the lock for a source's artifact.

        Runs against the same key must not interleave their load and
        save, otherwise the later save silently drops the earlier one.
        """
        key = artifact_name(source)
        with self._locks_guard:
            key_lock = self._locks.setdefault(key, threading.Lock())
        with key_lock:
            yield

    def load(self, source: str) -> EntrySet:
        """
        Load the persisted entries for a source.

        Args:
            source: Source identifier

        Returns:
            Stored EntrySet, or an empty one if there is no readable artifact
        """
        path = self.path_for(source)

        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"No prior state at {path}")
            return EntrySet()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read prior state {path}: {e}")
            return EntrySet()

        entries = normalize(text)
        logger.debug(f"Loaded {len(entries)} entries from {path}")
        return entries

    def save(self, source: str, entries: EntrySet) -> Path:
        """
        Overwrite the artifact for a source.

        Args:
            source: Source identifier
            entries: Entries to persist

        Returns:
            Path of the written artifact

        Raises:
            StateStoreError: If the artifact could not be written
        """
        path = self.path_for(source)
        tmp_name = None

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)

            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=self.output_dir
            )
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(entries.join())
                f.flush()
                os.fsync(f.fileno())

            os.replace(tmp_name, path)
            tmp_name = None

        except OSError as e:
            raise StateStoreError(f"Failed to write {path}: {e}") from e

        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug(f"Could not remove temp file {tmp_name}")

        logger.debug(f"Saved {len(entries)} entries to {path}")
        return path
