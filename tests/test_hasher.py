"""Tests for content hashing."""

import hashlib
import io

import pytest

from rfp_intake.ingestion.hasher import ContentHasher


class TestContentHasher:
    """Tests for ContentHasher."""

    def test_known_digest(self):
        hasher = ContentHasher()
        assert hasher.hash_stream(io.BytesIO(b"abc")) == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_digest_ignores_filename(self, tmp_path):
        """Identical bytes under different names hash the same."""
        first = tmp_path / "rfp.pdf"
        second = tmp_path / "copy of rfp.txt"
        first.write_bytes(b"Budget: $10,000")
        second.write_bytes(b"Budget: $10,000")

        hasher = ContentHasher()
        assert hasher.hash_file(first) == hasher.hash_file(second)

    def test_small_chunks_match_single_pass(self):
        data = bytes(range(256)) * 1000
        chunked = ContentHasher(chunk_size=7).hash_stream(io.BytesIO(data))
        assert chunked == hashlib.sha256(data).hexdigest()
        assert ContentHasher().hash_bytes(data) == chunked

    def test_different_content_differs(self):
        hasher = ContentHasher()
        assert hasher.hash_bytes(b"RFP v1") != hasher.hash_bytes(b"RFP v2")

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            ContentHasher().hash_file(tmp_path / "missing.pdf")

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            ContentHasher(chunk_size=0)
