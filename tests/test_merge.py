"""Tests for bankforge.merge module."""

import random

from bankforge.merge import NameRegistry, disambiguate_name, merge_triggers
from bankforge.schemas import TriggerEntry


def _candidate(path: str) -> TriggerEntry:
    stem = path.rsplit("/", 1)[-1].rsplit(".", 1)[0]
    return TriggerEntry(name=stem, path=path)


def _names(triggers: list[TriggerEntry]) -> dict[str, str]:
    return {t.path: t.name for t in triggers}


class TestNameRegistry:
    """Tests for NameRegistry."""

    def test_claim_free_name(self):
        """A free name is claimed once."""
        registry = NameRegistry()
        assert registry.claim("kick") is True
        assert "kick" in registry
        assert registry.claim("kick") is False

    def test_seeded(self):
        """Seed names are already taken."""
        registry = NameRegistry(["kick", "snare"])
        assert len(registry) == 2
        assert registry.claim("snare") is False

    def test_case_sensitive(self):
        """Names differing only in case are distinct."""
        registry = NameRegistry(["Kick"])
        assert registry.claim("kick") is True


class TestDisambiguateName:
    """Tests for disambiguate_name function."""

    def test_bare_name_first(self):
        """A free stem is used as-is."""
        registry = NameRegistry()
        assert disambiguate_name("kick", "./kit/kick.wav", registry) == "kick"
        assert "kick" in registry

    def test_all_parents_joined(self):
        """Second choice joins every parent directory."""
        registry = NameRegistry(["kick"])
        assert disambiguate_name("kick", "./a/b/kick.wav", registry) == "a.b.kick"

    def test_innermost_directory_next(self):
        """Third choice uses only the innermost directory."""
        registry = NameRegistry(["kick", "a.b.kick"])
        assert disambiguate_name("kick", "./a/b/kick.wav", registry) == "b.kick"

    def test_widens_outward(self):
        """Then widens one directory at a time from the innermost."""
        registry = NameRegistry(["kick", "a.b.c.kick", "c.kick"])
        assert disambiguate_name("kick", "./a/b/c/kick.wav", registry) == "b.c.kick"

    def test_numeric_suffix_when_paths_exhausted(self):
        """Numeric suffixes start at 2 once every path variant is taken."""
        registry = NameRegistry(["kick", "a.kick"])
        assert disambiguate_name("kick", "./a/kick.wav", registry) == "kick_2"

    def test_numeric_suffix_without_parents(self):
        """A top-level file goes straight to numeric suffixes."""
        registry = NameRegistry(["kick", "kick_2", "kick_3"])
        assert disambiguate_name("kick", "./kick.wav", registry) == "kick_4"

    def test_empty_base_is_ordinary(self):
        """An empty stem is claimed like any other string, then suffixed."""
        registry = NameRegistry()
        assert disambiguate_name("", "./x", registry) == ""
        assert disambiguate_name("", "./y", registry) == "_2"

    def test_claims_result(self):
        """The returned name is registered."""
        registry = NameRegistry(["kick"])
        name = disambiguate_name("kick", "./kit/kick.wav", registry)
        assert name in registry


class TestMergeTriggers:
    """Tests for merge_triggers function."""

    def test_nested_collision(self):
        """kick.wav keeps 'kick'; kit/kick.wav becomes 'kit.kick'."""
        merged = merge_triggers([], [_candidate("./kick.wav"), _candidate("./kit/kick.wav")])

        assert [(t.name, t.path) for t in merged] == [
            ("kick", "./kick.wav"),
            ("kit.kick", "./kit/kick.wav"),
        ]

    def test_top_level_file_claims_bare_name(self):
        """With a/kick, b/kick and kick, the top-level file gets 'kick'."""
        discovered = [
            _candidate("./a/kick.wav"),
            _candidate("./b/kick.wav"),
            _candidate("./kick.wav"),
        ]

        merged = merge_triggers([], discovered)

        assert _names(merged) == {
            "./kick.wav": "kick",
            "./a/kick.wav": "a.kick",
            "./b/kick.wav": "b.kick",
        }
        assert [t.path for t in merged] == ["./a/kick.wav", "./b/kick.wav", "./kick.wav"]

    def test_preserves_existing_names(self):
        """A recorded path keeps its (possibly hand-edited) name."""
        existing = [TriggerEntry(name="big_boom", path="./kick.wav")]
        discovered = [_candidate("./kick.wav"), _candidate("./snare.wav")]

        merged = merge_triggers(existing, discovered)

        assert _names(merged) == {"./kick.wav": "big_boom", "./snare.wav": "snare"}

    def test_existing_names_block_new_claims(self):
        """A new file cannot take a name already recorded for another path."""
        existing = [TriggerEntry(name="snare", path="./kit/snare.wav")]
        discovered = [_candidate("./kit/snare.wav"), _candidate("./snare.wav")]

        merged = merge_triggers(existing, discovered)

        assert _names(merged) == {"./kit/snare.wav": "snare", "./snare.wav": "snare_2"}

    def test_drops_orphans(self):
        """Recorded triggers whose file disappeared are removed."""
        existing = [
            TriggerEntry(name="kick", path="./kick.wav"),
            TriggerEntry(name="gone", path="./deleted.wav"),
        ]

        merged = merge_triggers(existing, [_candidate("./kick.wav")])

        assert [(t.name, t.path) for t in merged] == [("kick", "./kick.wav")]

    def test_orphan_names_stay_reserved_for_this_build(self):
        """A name freed by a deleted file is not reassigned in the same merge."""
        existing = [TriggerEntry(name="kick", path="./old/kick.wav")]

        merged = merge_triggers(existing, [_candidate("./kick.wav")])

        assert _names(merged) == {"./kick.wav": "kick_2"}

    def test_empty_inputs(self):
        """Nothing discovered means nothing kept."""
        existing = [TriggerEntry(name="kick", path="./kick.wav")]
        assert merge_triggers(existing, []) == []
        assert merge_triggers([], []) == []

    def test_threaded_registry(self):
        """An explicit registry is used and updated."""
        registry = NameRegistry(["kick"])

        merged = merge_triggers([], [_candidate("./kick.wav")], registry=registry)

        assert _names(merged) == {"./kick.wav": "kick_2"}
        assert "kick_2" in registry

    def test_output_sorted_by_path(self):
        """Output is sorted by path in byte order."""
        discovered = [_candidate(p) for p in ("./z.wav", "./B.wav", "./a/x.wav", "./a.wav")]

        merged = merge_triggers([], discovered)

        paths = [t.path for t in merged]
        assert paths == sorted(paths)
        assert paths == ["./B.wav", "./a.wav", "./a/x.wav", "./z.wav"]


class TestMergeProperties:
    """Randomized checks of the merge invariants."""

    PATHS = [
        "./kick.wav",
        "./kit/kick.wav",
        "./kit/acoustic/kick.wav",
        "./acoustic/kick.wav",
        "./a/kit/kick.wav",
        "./kick_2.wav",
        "./kit.kick.wav",
        "./snare.wav",
        "./kit/snare.wav",
        "./x/y/z/snare.wav",
        "./z/snare.wav",
        "./hat.ogg",
        "./hat.wav",
    ]

    def _random_case(self, rng: random.Random):
        picked = rng.sample(self.PATHS, rng.randint(0, len(self.PATHS)))
        discovered = [_candidate(p) for p in picked]
        previous = merge_triggers([], [_candidate(p) for p in rng.sample(self.PATHS, 5)])
        existing = rng.sample(previous, rng.randint(0, len(previous)))
        return existing, discovered

    def test_invariants(self):
        """Unique names, preserved names, pruned orphans, sorted output."""
        rng = random.Random(1234)
        for _ in range(200):
            existing, discovered = self._random_case(rng)

            merged = merge_triggers(existing, discovered)

            names = [t.name for t in merged]
            assert len(names) == len(set(names))

            discovered_paths = {t.path for t in discovered}
            assert {t.path for t in merged} == discovered_paths

            by_path = _names(merged)
            for entry in existing:
                if entry.path in discovered_paths:
                    assert by_path[entry.path] == entry.name

            paths = [t.path for t in merged]
            assert paths == sorted(paths)

    def test_independent_of_input_order(self):
        """Shuffling existing and discovered never changes the result."""
        rng = random.Random(99)
        for _ in range(50):
            existing, discovered = self._random_case(rng)
            expected = merge_triggers(existing, discovered)

            shuffled_existing = existing[:]
            shuffled_discovered = discovered[:]
            rng.shuffle(shuffled_existing)
            rng.shuffle(shuffled_discovered)

            assert merge_triggers(shuffled_existing, shuffled_discovered) == expected
