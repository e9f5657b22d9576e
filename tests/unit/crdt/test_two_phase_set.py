"""Tests for TwoPhaseSet CRDT."""

import json

import pytest

from convergent.crdt.protocol import CRDT
from convergent.crdt.two_phase_set import TwoPhaseSet


def _set(*elements) -> TwoPhaseSet:
    s = TwoPhaseSet()
    for e in elements:
        s.add(e)
    return s


class TestTwoPhaseSetAddRemove:
    """Tests for add, remove and value."""

    def test_implements_crdt_protocol(self):
        assert isinstance(TwoPhaseSet(), CRDT)

    def test_add(self):
        s = _set("x", "y")
        assert s.value == frozenset({"x", "y"})
        assert "x" in s

    def test_remove(self):
        s = _set("x", "y")
        s.remove("x")
        assert s.value == frozenset({"y"})
        assert not s.query("x")

    def test_remove_never_added_is_noop(self):
        s = _set("y")
        s.remove("x")
        assert s.removed == frozenset()
        assert s.value == frozenset({"y"})

    def test_remove_is_permanent(self):
        s = _set("x")
        s.remove("x")
        s.add("x")
        assert "x" not in s
        assert s.value == frozenset()

    def test_value_is_added_minus_removed(self):
        s = _set(1, 2, 3, 4)
        s.remove(2)
        s.remove(4)
        assert s.value == frozenset({1, 3})
        assert s.added == frozenset({1, 2, 3, 4})
        assert s.removed == frozenset({2, 4})

    def test_len_and_iter(self):
        s = _set(1, 2, 3)
        s.remove(1)
        assert len(s) == 2
        assert sorted(s) == [2, 3]


class TestTwoPhaseSetMerge:
    """Tests for merge."""

    def test_readd_on_other_replica_stays_removed(self):
        """A removed element cannot come back through another replica's add."""
        a = _set("x")
        a.remove("x")
        b = _set("x")

        a.merge(b)
        b.merge(a)
        assert "x" not in a.value
        assert "x" not in b.value
        assert a == b

    def test_remove_unseen_on_both_replicas_converges(self):
        a = _set("y")
        b = TwoPhaseSet()
        a.remove("x")
        b.remove("x")
        ab = a.copy()
        ab.merge(b)
        ba = b.copy()
        ba.merge(a)
        assert ab == ba

    def test_merge_laws(self):
        a = _set(1, 2)
        a.remove(1)
        b = _set(2, 3)
        b.remove(2)
        c = _set(1, 4)

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
        assert ab_c.value == frozenset({3, 4})

    def test_merge_wrong_type_raises(self):
        from convergent.crdt.g_set import GSet

        with pytest.raises(TypeError):
            TwoPhaseSet().merge(GSet())


class TestTwoPhaseSetOrdering:
    """Tests for <=."""

    def test_le_needs_both_components(self):
        a = _set("x")
        b = _set("x")
        assert a <= b
        a.remove("x")
        assert not a <= b
        assert b <= a

    def test_merge_is_monotonic(self):
        a = _set(1)
        b = _set(2)
        b.remove(2)
        before = a.copy()
        a.merge(b)
        assert b <= a
        assert before <= a


class TestTwoPhaseSetSerialization:
    """Tests for raw state export and import."""

    def test_round_trip(self):
        s = _set("x", "y")
        s.remove("y")
        s2 = TwoPhaseSet.from_dict(s.to_dict())
        assert s2 == s
        assert s2.value == frozenset({"x"})

    def test_nested_tuples_survive_json(self):
        s = _set(("k", (1, 2)), ("r", (3, (4,))))
        s.remove(("r", (3, (4,))))
        s2 = TwoPhaseSet.from_dict(json.loads(json.dumps(s.to_dict())))
        assert s2 == s
        assert s2.value == frozenset({("k", (1, 2))})

    def test_to_dict_structure(self):
        d = _set("x").to_dict()
        assert d["type"] == "TwoPhaseSet"
        assert d["added"]["elements"] == ["x"]
        assert d["removed"]["elements"] == []
