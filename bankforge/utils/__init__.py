"""Bankforge - Utility modules."""

from bankforge.utils.atomic_io import (
    atomic_output,
    atomic_write_bytes,
    atomic_write_text,
    cleanup_orphan_temp_files,
)
from bankforge.utils.fs import relative_posix, walk_files
from bankforge.utils.hashing import sha256_file
from bankforge.utils.paths import (
    archive_path,
    audio_dir_path,
    bank_identifier,
    generated_banks_root,
    license_path,
    manifest_path,
    output_root,
    readme_path,
)

__all__ = [
    # atomic_io
    "atomic_output",
    "atomic_write_bytes",
    "atomic_write_text",
    "cleanup_orphan_temp_files",
    # fs
    "walk_files",
    "relative_posix",
    # hashing
    "sha256_file",
    # paths
    "manifest_path",
    "audio_dir_path",
    "readme_path",
    "license_path",
    "generated_banks_root",
    "output_root",
    "bank_identifier",
    "archive_path",
]
