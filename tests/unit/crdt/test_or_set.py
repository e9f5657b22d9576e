"""Tests for ORSet CRDT."""

import json

import pytest

from convergent.crdt.or_set import ORSet
from convergent.crdt.protocol import CRDT
from convergent.crdt.tags import RandomTagSource, SequenceTagSource
from convergent.crdt.two_phase_set import TwoPhaseSet


class TestORSetCreation:
    """Tests for ORSet construction."""

    def test_creates_with_replica_id(self):
        s = ORSet("node-a")
        assert s.replica_id == "node-a"

    def test_initial_set_is_empty(self):
        s = ORSet("node-a")
        assert len(s) == 0
        assert s.elements == frozenset()

    def test_default_tag_source_is_sequence(self):
        s = ORSet("node-a")
        assert isinstance(s.tag_source, SequenceTagSource)
        assert s.tag_source.replica_id == "node-a"

    def test_implements_crdt_protocol(self):
        assert isinstance(ORSet("node-a"), CRDT)

    def test_repr(self):
        assert "node-a" in repr(ORSet("node-a"))


class TestORSetAddRemove:
    """Tests for add and remove operations."""

    def test_add_element(self):
        s = ORSet("node-a")
        s.add("apple")
        assert "apple" in s
        assert s.query("apple")

    def test_add_returns_fresh_tags(self):
        s = ORSet("node-a")
        t1 = s.add("apple")
        t2 = s.add("apple")
        assert t1 == ("node-a", 0)
        assert t2 == ("node-a", 1)
        assert s.tags("apple") == frozenset({t1, t2})
        assert len(s) == 1

    def test_remove_element(self):
        s = ORSet("node-a")
        s.add("apple")
        removed = s.remove("apple")
        assert "apple" not in s
        assert removed == frozenset({("node-a", 0)})

    def test_remove_nonexistent_is_noop(self):
        s = ORSet("node-a")
        assert s.remove("apple") == frozenset()
        assert len(s) == 0
        assert s == ORSet("node-a")

    def test_add_after_remove(self):
        s = ORSet("node-a")
        s.add("apple")
        s.remove("apple")
        s.add("apple")
        assert "apple" in s
        assert s.tags("apple") == frozenset({("node-a", 1)})

    def test_unlimited_readd_cycles(self):
        s = ORSet("node-a")
        for _ in range(5):
            s.add("apple")
            assert "apple" in s
            s.remove("apple")
            assert "apple" not in s

    def test_remove_again_only_tombstones_new_tags(self):
        s = ORSet("node-a")
        s.add("apple")
        s.remove("apple")
        s.add("apple")
        assert s.remove("apple") == frozenset({("node-a", 1)})


class TestORSetMerge:
    """Tests for merge operations."""

    def test_merge_disjoint_sets(self):
        a = ORSet("node-a")
        b = ORSet("node-b")
        a.add("apple")
        b.add("banana")
        a.merge(b)
        assert a.elements == frozenset({"apple", "banana"})

    def test_concurrent_readd_survives_observed_remove(self):
        """A re-add the remover never observed keeps the element present."""
        a = ORSet("node-a")
        b = ORSet("node-b")

        a.add("x")  # t1
        b.merge(a)
        b.remove("x")  # tombstones t1 only
        a.add("x")  # t2, concurrent with b's remove

        a.merge(b)
        b.merge(a)
        assert "x" in a.value
        assert "x" in b.value
        assert a.tags("x") == frozenset({("node-a", 1)})
        assert a == b

    def test_same_history_excludes_element_in_two_phase_set(self):
        a = TwoPhaseSet()
        b = TwoPhaseSet()
        a.add("x")
        b.merge(a)
        b.remove("x")
        a.add("x")
        a.merge(b)
        assert "x" not in a.value

    def test_remove_does_not_affect_unseen_adds(self):
        a = ORSet("node-a")
        b = ORSet("node-b")
        a.add("x")
        b.add("x")
        a.remove("x")

        a.merge(b)
        assert "x" in a
        assert a.tags("x") == frozenset({("node-b", 0)})

    def test_observed_remove_wins_after_merge(self):
        a = ORSet("node-a")
        b = ORSet("node-b")
        a.add("x")
        b.merge(a)
        b.remove("x")
        a.merge(b)
        assert "x" not in a

    def test_stale_state_does_not_resurrect(self):
        """Redelivering an old snapshot cannot undo a later remove."""
        a = ORSet("node-a")
        a.add("x")
        stale = a.copy()
        a.remove("x")
        a.merge(stale)
        assert "x" not in a

    def test_merge_does_not_mutate_other(self):
        a = ORSet("node-a")
        b = ORSet("node-b")
        a.add("x")
        b.add("y")
        snapshot = b.to_dict()
        a.merge(b)
        assert b.to_dict() == snapshot

    def test_merge_laws(self):
        a = ORSet("node-a")
        b = ORSet("node-b")
        c = ORSet("node-c")
        a.add("x")
        b.merge(a)
        b.remove("x")
        b.add("y")
        c.add("x")
        c.add("z")
        c.remove("z")

        aa = a.copy()
        aa.merge(a)
        assert aa == a

        ab = a.copy()
        ab.merge(b)
        ba = b.copy()
        ba.merge(a)
        assert ab == ba

        ab_c = ab.copy()
        ab_c.merge(c)
        bc = b.copy()
        bc.merge(c)
        a_bc = a.copy()
        a_bc.merge(bc)
        assert ab_c == a_bc
        assert ab_c.value == frozenset({"x", "y"})

    def test_merge_advances_own_sequence(self):
        """A replica rebuilt from stale state skips tags it already issued."""
        a = ORSet("node-a")
        a.add("x")
        stale = a.copy()
        a.add("y")

        restored = ORSet("node-a")
        restored.merge(stale)
        restored.merge(a)
        assert restored.add("z") == ("node-a", 2)

    def test_merge_wrong_type_raises(self):
        with pytest.raises(TypeError):
            ORSet("node-a").merge(TwoPhaseSet())


class TestORSetOrdering:
    """Tests for <=."""

    def test_empty_le_anything(self):
        a = ORSet("node-a")
        a.add("x")
        assert ORSet("node-b") <= a

    def test_remove_moves_up(self):
        a = ORSet("node-a")
        a.add("x")
        before = a.copy()
        a.remove("x")
        assert before <= a
        assert not a <= before

    def test_merge_is_monotonic(self):
        a = ORSet("node-a")
        b = ORSet("node-b")
        a.add("x")
        b.add("y")
        b.remove("y")
        before = a.copy()
        a.merge(b)
        assert b <= a
        assert before <= a


class TestORSetTagSources:
    """Tests for pluggable tag sources."""

    def test_random_tags(self):
        s = ORSet("node-a", tag_source=RandomTagSource())
        t1 = s.add("x")
        t2 = s.add("x")
        assert isinstance(t1, str)
        assert t1 != t2

    def test_random_tags_round_trip(self):
        s = ORSet("node-a", tag_source=RandomTagSource())
        s.add("x")
        s.add("y")
        s.remove("y")
        s2 = ORSet.from_dict(s.to_dict(), tag_source=RandomTagSource())
        assert s2 == s


class TestORSetSerialization:
    """Tests for raw state export and import."""

    def test_round_trip(self):
        s = ORSet("node-a")
        s.add("apple")
        s.add("banana")
        s.remove("banana")
        s2 = ORSet.from_dict(s.to_dict())
        assert s2 == s
        assert s2.elements == frozenset({"apple"})

    def test_round_trip_resumes_sequence(self):
        s = ORSet("node-a")
        s.add("apple")
        s.add("apple")
        s2 = ORSet.from_dict(s.to_dict())
        assert s2.add("pear") == ("node-a", 2)

    def test_element_types_are_preserved(self):
        s = ORSet("node-a")
        s.add(1)
        s.add((2, "b"))
        s2 = ORSet.from_dict(s.to_dict())
        assert s2.elements == frozenset({1, (2, "b")})

    def test_nested_tuples_survive_json(self):
        s = ORSet("node-a")
        s.add(("k", (1, 2)))
        s.add(("gone", ((3,), "z")))
        s.remove(("gone", ((3,), "z")))
        s2 = ORSet.from_dict(json.loads(json.dumps(s.to_dict())))
        assert s2 == s
        assert s2.elements == frozenset({("k", (1, 2))})
        assert s2.tags(("k", (1, 2))) == frozenset({("node-a", 0)})
        assert s2.add("next") == ("node-a", 2)

    def test_to_dict_structure(self):
        s = ORSet("node-a")
        s.add("apple")
        s.remove("apple")
        d = s.to_dict()
        assert d["type"] == "ORSet"
        assert d["replica_id"] == "node-a"
        assert d["live"] == [["apple", [["node-a", 0]]]]
        assert d["tomb"] == [["apple", [["node-a", 0]]]]

    def test_from_dict_rejects_other_type(self):
        with pytest.raises(ValueError):
            ORSet.from_dict({"type": "GSet", "elements": []})
