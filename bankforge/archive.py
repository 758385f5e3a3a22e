"""Bankforge - Bank archive assembly.

Archive layout (ZIP, DEFLATE):

    bank.toml       the rewritten manifest
    README.md       copied from the bank, or generated
    LICENSE         copied from the bank, or a generated MIT license
    audio/          explicit directory entry, present even when empty
    audio/<rel>     every file under the bank's audio/ directory

Entries are written in a fixed order with a fixed timestamp and fixed
permissions, so an unchanged bank always produces the same bytes.
"""

from __future__ import annotations

import logging
import shutil
import zipfile
from pathlib import Path

from bankforge.config import (
    ARCHIVE_AUDIO_PREFIX,
    ARCHIVE_ENTRY_DATE_TIME,
    DEFAULT_DESCRIPTION,
    LICENSE_FILENAME,
    MANIFEST_FILENAME,
    README_FILENAME,
)
from bankforge.errors import BankIOError
from bankforge.schemas import BankSection
from bankforge.utils.atomic_io import atomic_output
from bankforge.utils.fs import relative_posix, walk_files
from bankforge.utils.paths import bank_identifier, license_path, readme_path

logger = logging.getLogger(__name__)

ARCHIVE_WRITE_FAILPOINT = "ARCHIVE_WRITE_AFTER_TMP_WRITE"

COMPRESSION = zipfile.ZIP_DEFLATED

_FILE_MODE = 0o100644
_DIR_MODE = 0o040755
_MSDOS_DIRECTORY = 0x10


def default_readme(author: str, name: str, description: str | None = None) -> str:
    """README.md used when the bank does not ship one."""
    desc = description if description and description.strip() else DEFAULT_DESCRIPTION
    return (
        f"# {bank_identifier(author, name)} Bank\n"
        "\n"
        f"{desc}\n"
        "\n"
        "Contents:\n"
        f"- {MANIFEST_FILENAME}\n"
        f"- {ARCHIVE_AUDIO_PREFIX} (assets)\n"
        f"- {LICENSE_FILENAME}\n"
        "\n"
        "Built with bankforge.\n"
    )


def default_license(author: str) -> str:
    """MIT license text used when the bank does not ship a LICENSE."""
    return (
        "MIT License\n"
        "\n"
        f"Copyright (c) {author}\n"
        "\n"
        "Permission is hereby granted, free of charge, to any person obtaining a copy\n"
        'of this software and associated documentation files (the "Software"), to deal\n'
        "in the Software without restriction, including without limitation the rights\n"
        "to use, copy, modify, merge, publish, distribute, sublicense, and/or sell\n"
        "copies of the Software, and to permit persons to whom the Software is\n"
        "furnished to do so, subject to the following conditions:\n"
        "\n"
        "The above copyright notice and this permission notice shall be included in all\n"
        "copies or substantial portions of the Software.\n"
        "\n"
        'THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR\n'
        "IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,\n"
        "FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE\n"
        "AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER\n"
        "LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,\n"
        "OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE\n"
        "SOFTWARE.\n"
    )


def _entry(arcname: str, is_dir: bool = False) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(arcname, date_time=ARCHIVE_ENTRY_DATE_TIME)
    info.create_system = 3  # unix, so external_attr carries the mode
    if is_dir:
        info.external_attr = (_DIR_MODE << 16) | _MSDOS_DIRECTORY
        info.compress_type = zipfile.ZIP_STORED
    else:
        info.external_attr = _FILE_MODE << 16
        info.compress_type = COMPRESSION
    return info


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise BankIOError(f"read {path}", str(e)) from e


def _add_bytes(zf: zipfile.ZipFile, arcname: str, data: bytes) -> None:
    try:
        zf.writestr(_entry(arcname), data)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        raise BankIOError(f"write {arcname} to archive", str(e)) from e


def _add_file(zf: zipfile.ZipFile, arcname: str, source: Path) -> None:
    info = _entry(arcname)
    try:
        info.file_size = source.stat().st_size
        with open(source, "rb") as src, zf.open(info, "w") as dst:
            shutil.copyfileobj(src, dst, 1024 * 1024)
    except (OSError, zipfile.BadZipFile, ValueError) as e:
        raise BankIOError(f"write {arcname} to archive", str(e)) from e


def _document(path: Path, fallback: str) -> bytes:
    if path.is_file():
        return _read_bytes(path)
    return fallback.encode("utf-8")


def list_audio_entries(audio_dir: Path) -> list[tuple[str, Path]]:
    """(archive name, source path) for every file under audio_dir, sorted.

    Raises:
        BankIOError: If the audio tree cannot be listed.
    """
    try:
        files = walk_files(audio_dir)
    except OSError as e:
        raise BankIOError(f"list {audio_dir}", str(e)) from e
    entries = [(ARCHIVE_AUDIO_PREFIX + relative_posix(p, audio_dir), p) for p in files]
    entries.sort(key=lambda item: item[0])
    return entries


def assemble_archive(
    bank_dir: str | Path,
    manifest_file: str | Path,
    audio_dir: str | Path,
    out_file: str | Path,
    bank: BankSection,
) -> Path:
    """Build the bank archive at out_file.

    The archive is assembled in "<out_file>.tmp" and renamed into place
    once complete; out_file's parent directory is created if missing.

    Args:
        bank_dir: Bank directory (source of README.md and LICENSE).
        manifest_file: The already rewritten bank.toml.
        audio_dir: The bank's audio directory.
        out_file: Destination archive path.
        bank: The [bank] table, for generated README/LICENSE text.

    Returns:
        out_file as a Path.

    Raises:
        BankIOError: If any create, read, write or finalize step fails.
    """
    bank_dir = Path(bank_dir)
    audio_dir = Path(audio_dir)
    out_file = Path(out_file)

    try:
        out_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BankIOError(f"create output directory {out_file.parent}", str(e)) from e

    manifest_bytes = _read_bytes(Path(manifest_file))
    readme = _document(
        readme_path(bank_dir), default_readme(bank.author, bank.name, bank.description)
    )
    license_text = _document(license_path(bank_dir), default_license(bank.author))
    audio_entries = list_audio_entries(audio_dir)

    try:
        with atomic_output(out_file, failpoint=ARCHIVE_WRITE_FAILPOINT) as fh:
            with zipfile.ZipFile(fh, "w", compression=COMPRESSION) as zf:
                _add_bytes(zf, MANIFEST_FILENAME, manifest_bytes)
                _add_bytes(zf, README_FILENAME, readme)
                _add_bytes(zf, LICENSE_FILENAME, license_text)
                zf.writestr(_entry(ARCHIVE_AUDIO_PREFIX, is_dir=True), b"")
                for arcname, source in audio_entries:
                    logger.debug("Adding %s", arcname)
                    _add_file(zf, arcname, source)
    except OSError as e:
        raise BankIOError(f"finalize archive {out_file}", str(e)) from e

    logger.debug("Archived %d audio file(s) into %s", len(audio_entries), out_file)
    return out_file
