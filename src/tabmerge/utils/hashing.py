"""Content digests for source files and exported tables."""

import hashlib
from pathlib import Path

__all__ = ["file_sha256", "sha256_digest", "short_digest"]


def sha256_digest(data: bytes) -> str:
    """Return the "sha256:"-prefixed hex digest of ``data``."""
    return "sha256:" + hashlib.sha256(data).hexdigest()


def file_sha256(path: Path) -> str:
    """Digest a file on disk the same way loaded source bytes are digested."""
    return sha256_digest(path.read_bytes())


def short_digest(data: bytes, length: int = 9) -> str:
    """Return the first ``length`` hex characters of the SHA256 digest.

    Used as the opaque id of a loaded collection, so identical file content
    always yields the same id.
    """
    return hashlib.sha256(data).hexdigest()[:length]
