"""Bankforge - Archive digests.

Digests are lowercase hex strings with no algorithm prefix, so two builds
of an unchanged bank can be compared with a plain string equality.
"""

import hashlib
from pathlib import Path


def sha256_file(path: str | Path) -> str:
    """SHA-256 hex digest of a file, streamed without loading it whole.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    with open(path, "rb") as f:
        return hashlib.file_digest(f, "sha256").hexdigest()
