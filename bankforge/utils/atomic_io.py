"""Bankforge - Atomic publication of build outputs.

Both outputs of a bank build are published with the same rule:
1. Write to "<final>.tmp" in the same directory
2. Flush + fsync
3. Rename temp -> final (the publish boundary)

The final path therefore holds either the previous complete content or the
new complete content. A crash mid-write only leaves a temp file behind,
which cleanup_orphan_temp_files() removes on the next build.

Failpoints (resilience tests):
- MANIFEST_WRITE_AFTER_TMP_WRITE: manifest temp written, not yet renamed
- ARCHIVE_WRITE_AFTER_TMP_WRITE: archive temp written, not yet renamed
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import BinaryIO

from bankforge.config import TEMP_SUFFIX
from bankforge.utils.failpoints import maybe_fail


def temp_path_for(final_path: str | Path, temp_suffix: str = TEMP_SUFFIX) -> Path:
    """Get the temp path used while publishing final_path.

    Returns:
        Path: <final_path><temp_suffix>, in the same directory.
    """
    final_path = Path(final_path)
    return final_path.with_name(final_path.name + temp_suffix)


@contextlib.contextmanager
def atomic_output(
    final_path: str | Path,
    failpoint: str | None = None,
    temp_suffix: str = TEMP_SUFFIX,
) -> Iterator[BinaryIO]:
    """Open a binary temp file that is renamed over final_path on success.

    The parent directory must already exist. If the body raises, the temp
    file is removed and the exception propagates unchanged; final_path is
    left untouched.

    Args:
        final_path: The target path for the published file.
        failpoint: Optional failpoint name checked after the body completes,
            before the rename.
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Yields:
        Writable binary file object for the temp file.

    Raises:
        OSError: If creating, writing, syncing or renaming fails.
    """
    final_path = Path(final_path)
    temp_path = temp_path_for(final_path, temp_suffix)

    fh = open(temp_path, "wb")
    try:
        yield fh
        fh.flush()
        os.fsync(fh.fileno())
    except BaseException:
        fh.close()
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise
    fh.close()

    if failpoint:
        maybe_fail(failpoint)

    os.replace(temp_path, final_path)
    _fsync_directory(final_path.parent)


def atomic_write_bytes(
    final_path: str | Path,
    data: bytes,
    failpoint: str | None = None,
    temp_suffix: str = TEMP_SUFFIX,
) -> None:
    """Atomically write bytes to a file.

    Safe to call when a stale temp file exists (it is truncated).

    Args:
        final_path: The target path for the final file.
        data: Bytes to write.
        failpoint: Optional failpoint name checked before the rename.
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Raises:
        OSError: If directory creation, write, or rename fails.
    """
    final_path = Path(final_path)
    final_path.parent.mkdir(parents=True, exist_ok=True)

    with atomic_output(final_path, failpoint=failpoint, temp_suffix=temp_suffix) as fh:
        fh.write(data)


def atomic_write_text(
    final_path: str | Path,
    text: str,
    encoding: str = "utf-8",
    failpoint: str | None = None,
    temp_suffix: str = TEMP_SUFFIX,
) -> None:
    """Atomically write text to a file.

    Text is encoded as-is; no newline translation happens, so "\\n" stays
    "\\n" on every platform.

    Args:
        final_path: The target path for the final file.
        text: Text string to write.
        encoding: Text encoding (default: utf-8).
        failpoint: Optional failpoint name checked before the rename.
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Raises:
        OSError: If directory creation, write, or rename fails.
    """
    atomic_write_bytes(final_path, text.encode(encoding), failpoint, temp_suffix)


def _fsync_directory(dir_path: Path) -> None:
    """Best-effort fsync on a directory so the rename itself is durable."""
    try:
        fd = os.open(dir_path, os.O_RDONLY | os.O_DIRECTORY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except (OSError, AttributeError):
        # O_DIRECTORY is missing on Windows; directory fsync is optional
        pass


def cleanup_orphan_temp_files(
    final_paths: Iterable[str | Path], temp_suffix: str = TEMP_SUFFIX
) -> int:
    """Remove temp files left behind by interrupted publishes.

    Only the temp path of each given output is considered. Other files
    that happen to end with the temp suffix belong to the user and are
    never touched.

    Args:
        final_paths: Final paths whose "<final><temp_suffix>" may be stale.
        temp_suffix: Suffix for the temporary file (default: ".tmp").

    Returns:
        Number of files removed.
    """
    removed = 0

    for final_path in final_paths:
        temp_file = temp_path_for(final_path, temp_suffix)
        if not temp_file.is_file():
            continue
        try:
            temp_file.unlink()
            removed += 1
        except OSError:
            pass  # Best-effort cleanup

    return removed
