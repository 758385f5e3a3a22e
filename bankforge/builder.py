"""Bankforge - Bank build pipeline.

Single bank: resolve -> load + validate bank.toml -> discover audio ->
merge triggers -> rewrite bank.toml -> assemble archive.

Batch: every directory directly under generated/banks that holds a
bank.toml, in sorted order. A failing bank is recorded and the batch moves
on; nothing is shared between bank builds.

Build order for one bank:
1. bank.toml must exist (NOT_FOUND)
2. bank.toml must parse and have non-blank author/name (MALFORMED_INPUT)
3. audio/ must exist (NOT_FOUND)
4. bank.toml.tmp and <archive>.tmp left by an interrupted build are removed
5. triggers discovered, merged, and written back to bank.toml
6. archive written to output/bank/<author>.<name>.devabank

Steps 1-3 run before anything is written, so an invalid bank leaves no
trace on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from bankforge.archive import assemble_archive
from bankforge.config import ALIAS_PREFIX, MANIFEST_FILENAME, get_root
from bankforge.discovery import discover_triggers
from bankforge.errors import (
    AmbiguousBankReferenceError,
    BankError,
    BankIOError,
    BankNotFoundError,
)
from bankforge.manifest import load_manifest, require_identity, write_triggers
from bankforge.merge import merge_triggers
from bankforge.utils.atomic_io import cleanup_orphan_temp_files
from bankforge.utils.hashing import sha256_file
from bankforge.utils.paths import (
    archive_path,
    audio_dir_path,
    generated_banks_root,
    manifest_path,
)

logger = logging.getLogger(__name__)


# --- Result Types ---


@dataclass
class BuildResult:
    """Result of a successful single-bank build."""

    bank_dir: Path
    identifier: str
    archive_path: Path
    trigger_count: int
    manifest_changed: bool
    archive_sha256: str


@dataclass
class BankFailure:
    """A bank that failed inside a batch build."""

    bank_dir: Path
    message: str
    error_code: str | None = None


@dataclass
class BatchSummary:
    """Outcome of build_all()."""

    total: int = 0
    built: list[BuildResult] = field(default_factory=list)
    failures: list[BankFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def report(self) -> str:
        """Human-readable summary, one line per failing bank."""
        if self.ok:
            return f"Build complete: {self.total} bank(s) built"
        lines = [f"Some banks failed ({self.failed_count}/{self.total}):"]
        lines.extend(f" - {f.bank_dir} -> {f.message}" for f in self.failures)
        return "\n".join(lines)


# --- Resolution ---


def _has_manifest(directory: Path) -> bool:
    return directory.is_dir() and manifest_path(directory).is_file()


def resolve_bank_directory(root: str | Path, identifier_or_path: str) -> Path:
    """Resolve a user-supplied bank reference to a bank directory.

    Accepted forms, tried in order:
    - a path (relative to root, or absolute) to a bank directory
    - a path to a bank.toml file
    - "bank.<author>.<name>": generated/banks/<author>.<name>
    - "bank.<name>": the single generated/banks/*.<name> directory

    Args:
        root: Invocation root.
        identifier_or_path: Path or alias.

    Returns:
        The bank directory.

    Raises:
        BankNotFoundError: Nothing matched.
        AmbiguousBankReferenceError: A "bank.<name>" alias matched several banks.
    """
    root = Path(root)
    candidate = root / identifier_or_path

    if candidate.is_file() and candidate.name == MANIFEST_FILENAME:
        return candidate.parent
    if _has_manifest(candidate):
        return candidate

    if not identifier_or_path.startswith(ALIAS_PREFIX):
        raise BankNotFoundError(f"Invalid path: {candidate} (no {MANIFEST_FILENAME} found)")

    rest = identifier_or_path[len(ALIAS_PREFIX) :]
    banks_root = generated_banks_root(root)

    exact = banks_root / rest
    if rest and _has_manifest(exact):
        return exact

    if rest and "." not in rest and banks_root.is_dir():
        suffix = f".{rest}"
        matches = [
            p for p in find_bank_directories(banks_root) if p.name.endswith(suffix)
        ]
        if len(matches) == 1:
            return matches[0]
        if len(matches) > 1:
            raise AmbiguousBankReferenceError(identifier_or_path, [p.name for p in matches])
        raise BankNotFoundError(f"No bank matched alias {identifier_or_path} under {banks_root}")

    raise BankNotFoundError(f"Alias not found: {identifier_or_path}; expected under {banks_root}")


def find_bank_directories(banks_root: str | Path) -> list[Path]:
    """Directories directly under banks_root that contain a bank.toml, sorted.

    Raises:
        BankIOError: If banks_root cannot be listed.
    """
    banks_root = Path(banks_root)
    try:
        children = list(banks_root.iterdir())
    except OSError as e:
        raise BankIOError(f"list {banks_root}", str(e)) from e
    return sorted(p for p in children if _has_manifest(p))


# --- Single bank ---


def build_one(bank_dir: str | Path, root: str | Path | None = None) -> BuildResult:
    """Build one bank directory into an archive.

    Args:
        bank_dir: Directory holding bank.toml and audio/.
        root: Invocation root; the archive lands in <root>/output/bank.
            Defaults to config.get_root().

    Returns:
        BuildResult describing the archive.

    Raises:
        BankError: Any failure, with the failing step in the message.
    """
    bank_dir = Path(bank_dir)
    root = Path(root) if root is not None else get_root()

    manifest_file = manifest_path(bank_dir)
    if not manifest_file.is_file():
        raise BankNotFoundError(f"{MANIFEST_FILENAME} not found in: {bank_dir}")

    manifest = load_manifest(manifest_file)
    require_identity(manifest, source=str(manifest_file))

    audio_dir = audio_dir_path(bank_dir)
    if not audio_dir.is_dir():
        raise BankNotFoundError(f"Audio directory not found: {audio_dir}")

    target = archive_path(root, manifest.bank.author, manifest.bank.name)

    removed = cleanup_orphan_temp_files([manifest_file, target])
    if removed:
        logger.info("Removed %d orphan temp file(s) for %s", removed, bank_dir)

    try:
        discovered = discover_triggers(audio_dir)
    except OSError as e:
        raise BankIOError(f"scan audio directory {audio_dir}", str(e)) from e

    triggers = merge_triggers(manifest.triggers, discovered)
    changed = write_triggers(manifest_file, triggers)

    out_file = assemble_archive(bank_dir, manifest_file, audio_dir, target, manifest.bank)

    try:
        digest = sha256_file(out_file)
    except OSError as e:
        raise BankIOError(f"hash {out_file}", str(e)) from e

    logger.info("Bank built: %s (%d trigger(s))", out_file, len(triggers))

    return BuildResult(
        bank_dir=bank_dir,
        identifier=manifest.identifier,
        archive_path=out_file,
        trigger_count=len(triggers),
        manifest_changed=changed,
        archive_sha256=digest,
    )


def build_bank(root: str | Path, identifier_or_path: str) -> BuildResult:
    """Resolve a path or alias and build that bank."""
    bank_dir = resolve_bank_directory(root, identifier_or_path)
    return build_one(bank_dir, root)


# --- Batch ---


def build_all(root: str | Path | None = None) -> BatchSummary:
    """Build every bank under <root>/generated/banks.

    Banks are processed sequentially in sorted path order. A failing bank
    is recorded in the summary and does not stop the batch.

    Args:
        root: Invocation root. Defaults to config.get_root().

    Returns:
        BatchSummary; summary.ok is True only if every bank built.

    Raises:
        BankNotFoundError: The banks root is missing or holds no banks.
    """
    root = Path(root) if root is not None else get_root()
    banks_root = generated_banks_root(root)
    if not banks_root.is_dir():
        raise BankNotFoundError(f"Banks directory not found: {banks_root}")

    bank_dirs = find_bank_directories(banks_root)
    if not bank_dirs:
        raise BankNotFoundError(f"No banks to build ({banks_root} is empty)")

    summary = BatchSummary(total=len(bank_dirs))
    for bank_dir in bank_dirs:
        try:
            summary.built.append(build_one(bank_dir, root))
        except BankError as e:
            logger.error("Bank %s failed: %s", bank_dir, e.message)
            summary.failures.append(BankFailure(bank_dir, e.message, e.error_code))
        except Exception as e:
            logger.exception("Bank %s failed with an unexpected error", bank_dir)
            summary.failures.append(BankFailure(bank_dir, f"Unexpected error: {e}"))

    if summary.ok:
        logger.info("Build complete: %d bank(s) built", summary.total)
    else:
        logger.warning("%d/%d bank(s) failed", summary.failed_count, summary.total)
    return summary
