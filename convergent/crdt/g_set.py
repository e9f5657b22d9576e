"""Grow-only set (G-Set) CRDT.

Elements can be added but never removed; merge is set union. Once an
element is present on a replica it stays present in that replica's
future.

Example::

    a = GSet([1, 2])
    b = GSet([2, 3])
    a.merge(b)
    assert a.value == frozenset({1, 2, 3})
    assert b <= a
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

from convergent.crdt.protocol import check_mergeable, check_type, freeze

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Iterator


class GSet:
    """Grow-only set CRDT.

    Elements must be hashable. Iteration yields elements in arbitrary
    order. Each call to ``iter()`` walks a snapshot taken at call time,
    so adds made during the loop are not visited.

    Args:
        elements: Optional initial elements.
    """

    __slots__ = ("_elements",)

    def __init__(self, elements: Iterable[Hashable] = ()):
        self._elements: set[Any] = set(elements)

    @property
    def value(self) -> frozenset:
        """Snapshot of the current elements."""
        return frozenset(self._elements)

    def add(self, element: Hashable) -> None:
        """Add an element. Adding a present element is a no-op."""
        self._elements.add(element)

    def query(self, element: Hashable) -> bool:
        """True if ``element`` is a member."""
        return element in self._elements

    def includes(self, other: GSet) -> bool:
        """True if every element of ``other`` is also in this set."""
        return self._elements >= other._elements

    def merge(self, other: GSet) -> None:
        """Merge another G-Set into this one (union).

        Raises:
            TypeError: If other is not a GSet.
        """
        check_mergeable(self, other)
        self._elements |= other._elements

    def copy(self) -> Self:
        return type(self)(self._elements)

    def to_dict(self) -> dict:
        """Serialize to a plain dict. Elements must be JSON-friendly to ship as JSON."""
        return {
            "type": "GSet",
            "elements": list(self._elements),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.
        """
        check_type(data, "GSet")
        return cls(freeze(e) for e in data["elements"])

    def __le__(self, other: object) -> bool:
        if not isinstance(other, GSet):
            return NotImplemented
        return other.includes(self)

    def __contains__(self, element: Any) -> bool:
        return self.query(element)

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Any]:
        return iter(tuple(self._elements))

    def __repr__(self) -> str:
        return f"GSet({set(self._elements)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GSet):
            return NotImplemented
        return self._elements == other._elements
