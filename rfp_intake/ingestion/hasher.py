"""Content hashing for deduplication."""

import hashlib
from pathlib import Path
from typing import BinaryIO

DEFAULT_CHUNK_SIZE = 64 * 1024


class ContentHasher:
    """SHA-256 over file bytes, read in bounded chunks.

    The digest depends only on content, never on the filename.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def hash_stream(self, stream: BinaryIO) -> str:
        """Hex digest of everything left in ``stream``."""
        digest = hashlib.sha256()
        while chunk := stream.read(self.chunk_size):
            digest.update(chunk)
        return digest.hexdigest()

    def hash_file(self, path: Path | str) -> str:
        """Hex digest of the file at ``path``. Raises OSError if unreadable."""
        with open(path, "rb") as f:
            return self.hash_stream(f)

    def hash_bytes(self, data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()
