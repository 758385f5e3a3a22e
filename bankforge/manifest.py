"""Bankforge - bank.toml loading and trigger-section rewriting.

Loading goes through tomllib + pydantic. Writing never re-serializes the
parsed document: bank.toml is hand-edited, so only the [[triggers]] blocks
are replaced, line by line, and every other line (comments, key order,
other tables) is kept verbatim.

Rewrite layout:

    <head: everything up to the last non-blank line of [bank]>
    <one blank line>
    [[triggers]]
    name = "..."
    path = "..."
    <one blank line between trigger blocks>
    ...
    <one blank line, only if triggers were written and a tail follows>
    <tail: remaining sections>

The rewrite is idempotent: rewriting its own output with the same triggers
returns identical text.
"""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from bankforge.errors import BankIOError, MalformedManifestError
from bankforge.schemas import BankManifest, TriggerEntry
from bankforge.utils.atomic_io import atomic_write_text

logger = logging.getLogger(__name__)

BANK_HEADER = "[bank]"
TRIGGERS_HEADER = "[[triggers]]"

MANIFEST_WRITE_FAILPOINT = "MANIFEST_WRITE_AFTER_TMP_WRITE"


# --- Loading ---


def read_manifest_text(path: str | Path) -> str:
    """Read bank.toml as UTF-8 text.

    Raises:
        BankIOError: If the file cannot be read or decoded.
    """
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise BankIOError(f"read {path}", str(e)) from e


def parse_manifest(text: str, source: str = "bank.toml") -> BankManifest:
    """Parse and validate manifest text.

    Args:
        text: Raw TOML text.
        source: Name used in error messages.

    Raises:
        MalformedManifestError: If the text is not TOML or does not match
            the manifest schema.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise MalformedManifestError(f"Invalid TOML in {source}: {e}") from e

    try:
        return BankManifest.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise MalformedManifestError(f"Invalid manifest {source}: {problems}") from e


def load_manifest(path: str | Path) -> BankManifest:
    """Read, parse and validate bank.toml."""
    return parse_manifest(read_manifest_text(path), source=str(path))


def require_identity(manifest: BankManifest, source: str = "bank.toml") -> None:
    """Reject a manifest whose [bank].author or [bank].name is blank.

    Raises:
        MalformedManifestError: If either field is empty or whitespace.
    """
    if not manifest.bank.author.strip() or not manifest.bank.name.strip():
        raise MalformedManifestError(
            f"Fields [bank].author and [bank].name are required in {source}"
        )


# --- Rewriting ---


def _split_lines(text: str) -> list[str]:
    # "\n"-separated, final newline optional, trailing "\r" dropped per line
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _is_blank(line: str) -> bool:
    return not line.strip()


def _toml_string(value: str) -> str:
    """Render value as a TOML basic string."""
    out = []
    for ch in value:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\u{ord(ch):04X}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def strip_trigger_blocks(lines: Sequence[str]) -> list[str]:
    """Drop every [[triggers]] block.

    A block runs from a "[[triggers]]" line up to, not including, the next
    line that opens any other table, or to the end of the file. Comments
    and blank lines inside a block go with it.
    """
    kept: list[str] = []
    skipping = False
    for line in lines:
        stripped = line.strip()
        if stripped == TRIGGERS_HEADER:
            skipping = True
            continue
        if skipping:
            if not stripped.startswith("["):
                continue
            skipping = False
        kept.append(line)
    return kept


def find_insertion_index(lines: Sequence[str]) -> int:
    """Index just past the last non-blank line of the [bank] table.

    If there is no [bank] table, the end of the file.
    """
    insert_idx = len(lines)
    in_bank = False
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped == BANK_HEADER:
            in_bank = True
            insert_idx = i + 1
            continue
        if not in_bank:
            continue
        if stripped.startswith("["):
            break
        if stripped:
            insert_idx = i + 1
    return insert_idx


def render_triggers(triggers: Sequence[TriggerEntry]) -> list[str]:
    """Render triggers as [[triggers]] blocks separated by one blank line."""
    lines: list[str] = []
    for i, trigger in enumerate(triggers):
        if i:
            lines.append("")
        lines.append(TRIGGERS_HEADER)
        lines.append(f"name = {_toml_string(trigger.name)}")
        lines.append(f"path = {_toml_string(trigger.path)}")
    return lines


def rewrite_triggers(text: str, triggers: Sequence[TriggerEntry]) -> str:
    """Replace the trigger section of manifest text.

    Args:
        text: Current bank.toml content.
        triggers: The canonical trigger list (already sorted).

    Returns:
        New content, ending with exactly one newline.
    """
    cleaned = strip_trigger_blocks(_split_lines(text))
    insert_idx = find_insertion_index(cleaned)

    head = list(cleaned[:insert_idx])
    tail = list(cleaned[insert_idx:])
    while head and _is_blank(head[-1]):
        head.pop()
    while tail and _is_blank(tail[0]):
        tail.pop(0)
    while tail and _is_blank(tail[-1]):
        tail.pop()

    result = head
    trigger_lines = render_triggers(triggers)
    if trigger_lines:
        result.append("")
        result.extend(trigger_lines)
        if tail:
            result.append("")
    result.extend(tail)

    return "\n".join(result) + "\n"


def write_triggers(path: str | Path, triggers: Sequence[TriggerEntry]) -> bool:
    """Rewrite the trigger section of bank.toml on disk.

    The file is replaced atomically, and only when its content changes.

    Args:
        path: Path to bank.toml.
        triggers: The canonical trigger list.

    Returns:
        True if the file was rewritten, False if it was already up to date.

    Raises:
        BankIOError: If reading or writing fails.
    """
    path = Path(path)
    original = read_manifest_text(path)
    updated = rewrite_triggers(original, triggers)

    if updated == original:
        logger.debug("Manifest %s already up to date", path)
        return False

    try:
        atomic_write_text(path, updated, failpoint=MANIFEST_WRITE_FAILPOINT)
    except OSError as e:
        raise BankIOError(f"write {path}", str(e)) from e

    logger.debug("Rewrote %d trigger(s) in %s", len(triggers), path)
    return True
