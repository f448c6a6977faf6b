from __future__ import annotations

import hashlib

DEFAULT_ALGORITHM = "sha256"

# shake_* digests have no fixed length and cannot address content on their own.
SUPPORTED_ALGORITHMS = frozenset(
    name for name in hashlib.algorithms_guaranteed if not name.startswith("shake_")
)


class ContentHasher:
    """Incremental digest over a stream of chunks.

    Fed chunk by chunk while the same chunks are written to disk, so the
    whole file is never held in memory.
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        if algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        self.algorithm = algorithm
        self._hash = hashlib.new(algorithm)
        self._digest: bytes | None = None

    def write(self, chunk: bytes) -> int:
        if self._digest is not None:
            raise RuntimeError("hasher already finalized")
        self._hash.update(chunk)
        return len(chunk)

    def finalize(self) -> bytes:
        if self._digest is None:
            self._digest = self._hash.digest()
        return self._digest
