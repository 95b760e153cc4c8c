"""Digest and timestamp helpers shared by the table loader and the audit trail."""

from tabmerge.utils.hashing import file_sha256, sha256_digest, short_digest
from tabmerge.utils.timestamps import file_mtime, utc_now

__all__ = [
    "file_mtime",
    "file_sha256",
    "sha256_digest",
    "short_digest",
    "utc_now",
]
