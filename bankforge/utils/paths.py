"""Bankforge - Canonical path utilities.

Returns canonical Paths for the bank layout. Does NOT create directories.
Directory creation is the responsibility of the calling code.
"""

from pathlib import Path

from bankforge.config import (
    ARCHIVE_EXTENSION,
    AUDIO_DIRNAME,
    GENERATED_BANKS_SUBDIR,
    LICENSE_FILENAME,
    MANIFEST_FILENAME,
    OUTPUT_SUBDIR,
    README_FILENAME,
)


def manifest_path(bank_dir: str | Path) -> Path:
    """Path: {bank_dir}/bank.toml"""
    return Path(bank_dir) / MANIFEST_FILENAME


def audio_dir_path(bank_dir: str | Path) -> Path:
    """Path: {bank_dir}/audio"""
    return Path(bank_dir) / AUDIO_DIRNAME


def readme_path(bank_dir: str | Path) -> Path:
    """Path: {bank_dir}/README.md"""
    return Path(bank_dir) / README_FILENAME


def license_path(bank_dir: str | Path) -> Path:
    """Path: {bank_dir}/LICENSE"""
    return Path(bank_dir) / LICENSE_FILENAME


def generated_banks_root(root: str | Path) -> Path:
    """Path: {root}/generated/banks"""
    return Path(root).joinpath(*GENERATED_BANKS_SUBDIR)


def output_root(root: str | Path) -> Path:
    """Path: {root}/output/bank"""
    return Path(root).joinpath(*OUTPUT_SUBDIR)


def bank_identifier(author: str, name: str) -> str:
    """Format the bank identifier "<author>.<name>"."""
    return f"{author}.{name}"


def archive_path(root: str | Path, author: str, name: str) -> Path:
    """Get canonical path for a built bank archive.

    Args:
        root: Invocation root.
        author: Bank author from [bank].author.
        name: Bank name from [bank].name.

    Returns:
        Path: {root}/output/bank/{author}.{name}.devabank
    """
    ext = ARCHIVE_EXTENSION.lstrip(".")
    return output_root(root) / f"{bank_identifier(author, name)}.{ext}"
