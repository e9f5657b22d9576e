"""Two-phase set (2P-Set) CRDT.

Two G-Sets are combined to support removal: ``added`` records every
element ever added and ``removed`` acts as a tombstone set. An element
is present while it is in ``added`` and not in ``removed``. Removal is
permanent: a removed element can never come back, even if it is added
again on another replica, because the type cannot tell one add of an
element from another.

Example::

    a = TwoPhaseSet()
    a.add("x")
    a.remove("x")

    b = TwoPhaseSet()
    b.add("x")

    a.merge(b)
    assert "x" not in a
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self

from convergent.crdt.g_set import GSet
from convergent.crdt.protocol import check_mergeable, check_type

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterator

logger = logging.getLogger(__name__)


class TwoPhaseSet:
    """Two-phase (add-once, remove-once) set CRDT.

    Removes take precedence over adds. Removing an element this replica
    has never seen added is a no-op, so two replicas removing the same
    unseen element converge regardless of order.
    """

    __slots__ = ("_added", "_removed")

    def __init__(self):
        self._added = GSet()
        self._removed = GSet()

    @property
    def added(self) -> frozenset:
        """Every element ever added."""
        return self._added.value

    @property
    def removed(self) -> frozenset:
        """Tombstoned elements."""
        return self._removed.value

    @property
    def value(self) -> frozenset:
        """Elements added and not removed.

        Walks ``added`` once, so the cost grows with every element ever
        added, tombstoned or not.
        """
        result = set()
        for element in self._added:
            if not self._removed.query(element):
                result.add(element)
        return frozenset(result)

    def add(self, element: Hashable) -> None:
        """Add an element. Has no visible effect if it was already removed."""
        self._added.add(element)

    def remove(self, element: Hashable) -> None:
        """Tombstone an element, if this replica has seen it added."""
        if not self._added.query(element):
            logger.debug("Ignoring remove of unseen element %r", element)
            return
        self._removed.add(element)

    def query(self, element: Hashable) -> bool:
        """True if ``element`` is added and not removed."""
        return self._added.query(element) and not self._removed.query(element)

    def merge(self, other: TwoPhaseSet) -> None:
        """Merge another 2P-Set into this one.

        ``added`` and ``removed`` merge independently.

        Raises:
            TypeError: If other is not a TwoPhaseSet.
        """
        check_mergeable(self, other)
        self._added.merge(other._added)
        self._removed.merge(other._removed)

    def copy(self) -> Self:
        s = type(self)()
        s._added = self._added.copy()
        s._removed = self._removed.copy()
        return s

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return {
            "type": "TwoPhaseSet",
            "added": self._added.to_dict(),
            "removed": self._removed.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.
        """
        check_type(data, "TwoPhaseSet")
        s = cls()
        s._added = GSet.from_dict(data["added"])
        s._removed = GSet.from_dict(data["removed"])
        return s

    def __le__(self, other: object) -> bool:
        if not isinstance(other, TwoPhaseSet):
            return NotImplemented
        return self._added <= other._added and self._removed <= other._removed

    def __contains__(self, element: Any) -> bool:
        return self.query(element)

    def __len__(self) -> int:
        return len(self.value)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.value)

    def __repr__(self) -> str:
        return f"TwoPhaseSet(elements={set(self.value)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TwoPhaseSet):
            return NotImplemented
        return self._added == other._added and self._removed == other._removed
