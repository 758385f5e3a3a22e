"""Bankforge - Trigger merge and name disambiguation.

Reconciles freshly discovered triggers with the triggers already recorded
in bank.toml:

- a path that was already listed keeps its recorded name verbatim, so
  manual renames in the manifest survive rebuilds;
- a new path gets a unique name from disambiguate_name();
- a recorded path that no longer exists on disk is dropped.

Disambiguation order for a new file "./a/b/kick.wav" (stem "kick"):

    kick            bare stem
    a.b.kick        all parent directories
    b.kick          innermost directory, widening outward
    a.b.kick        (all directories again, already tried)
    kick_2, kick_3  numeric suffix, first free one

The order is kept as-is: changing it would rename triggers in existing
banks.

New files claim names shallowest first, then by path, so "./kick.wav"
gets "kick" before "./a/kick.wav" is considered. The claim order depends
only on the paths, never on filesystem iteration order. The returned list
is always sorted by path.

This is deliberately not plain byte order of the paths, which the
Devalang CLI's own bank builder uses: there "./a/kick.wav" sorts first and
takes "kick", leaving "./kick.wav" with "kick_2". Names already recorded in
bank.toml are kept either way, so only files new to a bank can be named
differently by the two tools.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from bankforge.schemas import TriggerEntry


class NameRegistry:
    """Set of trigger names already claimed within one manifest.

    Passed explicitly through the merge so each build starts from its own
    registry.
    """

    def __init__(self, names: Iterable[str] = ()):
        self._names: set[str] = set(names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def claim(self, name: str) -> bool:
        """Claim name if it is free.

        Returns:
            True if the name was free and is now claimed.
        """
        if name in self._names:
            return False
        self._names.add(name)
        return True


def _parent_dirs(rel_path: str) -> list[str]:
    """Directory components of a "./"-prefixed trigger path, outermost first."""
    rel = rel_path
    while rel.startswith("./"):
        rel = rel[2:]
    parts = rel.split("/")
    return parts[:-1]


def claim_order(entry: TriggerEntry) -> tuple[int, str]:
    """Sort key deciding which new file claims a contested name first."""
    return len(_parent_dirs(entry.path)), entry.path


def _path_variants(base: str, dirs: list[str]) -> Iterator[str]:
    if not dirs:
        return
    yield ".".join([*dirs, base])
    for depth in range(1, len(dirs) + 1):
        yield ".".join([*dirs[-depth:], base])


def disambiguate_name(base: str, rel_path: str, registry: NameRegistry) -> str:
    """Pick and claim a unique trigger name for a new file.

    Args:
        base: File stem (may be empty; it is treated like any other string).
        rel_path: The trigger path, e.g. "./kit/acoustic/kick.wav".
        registry: Names already in use; the chosen name is added to it.

    Returns:
        The claimed name.
    """
    if registry.claim(base):
        return base

    for candidate in _path_variants(base, _parent_dirs(rel_path)):
        if registry.claim(candidate):
            return candidate

    suffix = 2
    while not registry.claim(f"{base}_{suffix}"):
        suffix += 1
    return f"{base}_{suffix}"


def merge_triggers(
    existing: Iterable[TriggerEntry],
    discovered: Iterable[TriggerEntry],
    registry: NameRegistry | None = None,
) -> list[TriggerEntry]:
    """Merge recorded triggers with discovered ones.

    Args:
        existing: Triggers loaded from bank.toml (possibly empty).
        discovered: Candidates from discover_triggers(), one per path.
        registry: Optional registry to thread through; defaults to a new one
            seeded with every recorded name, including names of triggers
            about to be dropped.

    Returns:
        The canonical trigger list, sorted by path.
    """
    names_by_path: dict[str, str] = {}
    for entry in existing:
        names_by_path[entry.path] = entry.name

    if registry is None:
        registry = NameRegistry(names_by_path.values())
    else:
        for name in names_by_path.values():
            registry.claim(name)

    merged: list[TriggerEntry] = []
    for candidate in sorted(discovered, key=claim_order):
        recorded = names_by_path.get(candidate.path)
        if recorded is not None:
            merged.append(TriggerEntry(name=recorded, path=candidate.path))
        else:
            name = disambiguate_name(candidate.name, candidate.path, registry)
            merged.append(TriggerEntry(name=name, path=candidate.path))

    merged.sort(key=lambda t: t.path)
    return merged
