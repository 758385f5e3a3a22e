"""Bankforge - Trigger discovery.

Turns the files under a bank's audio/ directory into raw trigger
candidates: one per audio file, named after the file stem, pointing at
"./<relative/posix/path>".
"""

from __future__ import annotations

import logging
from pathlib import Path

from bankforge.config import AUDIO_EXTENSIONS
from bankforge.schemas import TriggerEntry
from bankforge.utils.fs import relative_posix, walk_files

logger = logging.getLogger(__name__)


def is_audio_file(path: Path) -> bool:
    """True if path has one of the accepted audio extensions (any case)."""
    ext = path.suffix[1:]
    return bool(ext) and ext.lower() in AUDIO_EXTENSIONS


def trigger_path(path: Path, audio_dir: Path) -> str:
    """Manifest form of an audio file path: "./" + relative posix path."""
    return f"./{relative_posix(path, audio_dir)}"


def discover_triggers(audio_dir: str | Path) -> list[TriggerEntry]:
    """Discover trigger candidates under audio_dir.

    Non-audio files are skipped silently. The candidate name is the bare
    file stem; uniqueness is resolved later by merge_triggers().

    Args:
        audio_dir: The bank's audio directory.

    Returns:
        Candidates sorted by path.

    Raises:
        OSError: If any directory below audio_dir cannot be listed.
    """
    audio_dir = Path(audio_dir)
    candidates: list[TriggerEntry] = []

    for file_path in walk_files(audio_dir):
        if not is_audio_file(file_path):
            logger.debug("Skipping non-audio file %s", file_path)
            continue
        candidates.append(
            TriggerEntry(
                name=file_path.stem,
                path=trigger_path(file_path, audio_dir),
            )
        )

    candidates.sort(key=lambda t: t.path)
    logger.debug("Discovered %d audio file(s) under %s", len(candidates), audio_dir)
    return candidates
