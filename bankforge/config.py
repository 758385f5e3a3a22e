"""Bankforge - Configuration constants.

Minimal configuration. No external config libraries.
Paths are resolved against the invocation root (the current working
directory unless BANKFORGE_ROOT is set).
"""

import logging
import os
from pathlib import Path

# Per-bank layout
MANIFEST_FILENAME = "bank.toml"
AUDIO_DIRNAME = "audio"
README_FILENAME = "README.md"
LICENSE_FILENAME = "LICENSE"

# Archive naming: <author>.<name>.<ARCHIVE_EXTENSION>
ARCHIVE_EXTENSION = "devabank"

# Archive layout: the audio tree is rooted under this prefix
ARCHIVE_AUDIO_PREFIX = "audio/"

# Fixed entry timestamp (earliest value the ZIP format can represent)
ARCHIVE_ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)

# Locations relative to the invocation root
OUTPUT_SUBDIR = ("output", "bank")
GENERATED_BANKS_SUBDIR = ("generated", "banks")

# Aliases look like bank.<author>.<name> or bank.<name>
ALIAS_PREFIX = "bank."

# Extensions accepted as triggers (compared case-insensitively, no dot)
AUDIO_EXTENSIONS = frozenset({"wav", "mp3", "ogg", "aif", "aiff", "flac"})

DEFAULT_DESCRIPTION = "Sample bank for Devalang."

# Suffix for in-progress writes (manifest rewrite, archive assembly)
TEMP_SUFFIX = ".tmp"


def get_root() -> Path:
    """Get the invocation root.

    Environment variable BANKFORGE_ROOT overrides the current working
    directory, which is mostly useful for tests and CI.

    Returns:
        Absolute invocation root.
    """
    env_val = os.environ.get("BANKFORGE_ROOT")
    if env_val:
        return Path(env_val).resolve()
    return Path.cwd()


def get_log_level() -> int:
    """Get the CLI log level from environment or use INFO.

    BANKFORGE_LOG_LEVEL accepts a level name ("DEBUG", "warning", ...).
    Unknown names fall back to INFO.

    Returns:
        A logging level constant.
    """
    env_val = os.environ.get("BANKFORGE_LOG_LEVEL")
    if env_val:
        level = logging.getLevelName(env_val.strip().upper())
        if isinstance(level, int):
            return level
    return logging.INFO
