"""File storage utilities.

Uploads are staged in a temp directory while their digest is computed, then
promoted into the store under a content-derived name. The store keeps at
most one copy per name: if the name is already taken the staged file is
dropped and the existing entry is reused.
"""
from __future__ import annotations

import logging
import os
from typing import BinaryIO, Optional, Protocol

from .errors import StorageError
from .hashing import DEFAULT_ALGORITHM, ContentHasher
from .naming import safe_basename
from .schemas import StoreEntry

logger = logging.getLogger("hashdrop.storage")

DEFAULT_CHUNK_SIZE = 1_048_576  # 1 MiB


class ByteSource(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


class StagedFile:
    """A partially or fully written upload in the staging directory."""

    def __init__(self, path: str, handle: BinaryIO, hasher: ContentHasher) -> None:
        self.path = path
        self.hasher = hasher
        self.bytes_written = 0
        self._handle: Optional[BinaryIO] = handle

    @property
    def closed(self) -> bool:
        return self._handle is None

    def write(self, chunk: bytes) -> None:
        if self._handle is None:
            raise StorageError(f"Staged file is closed: {self.path}")
        self._handle.write(chunk)
        self.hasher.write(chunk)
        self.bytes_written += len(chunk)

    def close(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()

    def discard(self) -> None:
        """Close and remove the temp file, ignoring failures."""
        try:
            self.close()
        except OSError:
            logger.warning("Could not close staged file %s", self.path)
        safe_unlink(self.path)


def open_staged(
    tmp_dir: str,
    prefix: str,
    original_name: str,
    algorithm: str = DEFAULT_ALGORITHM,
) -> StagedFile:
    """Create ``tmp_dir/<prefix><basename>`` exclusively and return it."""
    path = os.path.join(tmp_dir, prefix + safe_basename(original_name))
    try:
        handle = open(path, "xb")
    except OSError as e:
        raise StorageError(f"Failed to create staged file {path}: {e}") from e
    return StagedFile(path, handle, ContentHasher(algorithm))


async def copy_from(staged: StagedFile, source: ByteSource, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> int:
    """Stream ``source`` into ``staged`` while feeding its hasher.

    ``source`` is anything with an awaitable ``read(size)``, such as a
    streamed multipart part. Returns the number of bytes copied. On failure
    the partial temp file is left in place for the caller to discard.
    """
    try:
        while True:
            chunk = await source.read(chunk_size)
            if not chunk:
                break
            staged.write(chunk)
    except OSError as e:
        raise StorageError(f"Failed to stage upload into {staged.path}: {e}") from e
    return staged.bytes_written


def commit(staged: StagedFile, derived_name: str, store_dir: str) -> StoreEntry:
    """Promote ``staged`` to ``store_dir/derived_name`` or drop it as a duplicate.

    The rename must stay on one filesystem; a cross-device store fails
    instead of degrading to a copy.
    """
    dest = os.path.join(store_dir, derived_name)
    try:
        staged.close()
        if os.path.exists(dest):
            os.remove(staged.path)
            return StoreEntry(name=derived_name, path=dest, created=False)
        os.replace(staged.path, dest)
    except OSError as e:
        raise StorageError(f"Failed to commit {staged.path} as {dest}: {e}") from e
    return StoreEntry(name=derived_name, path=dest, created=True)


def safe_unlink(path: str) -> None:
    """Best-effort file removal (no exception if it fails)."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)
