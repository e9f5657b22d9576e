"""Observed-Remove Set (OR-Set) CRDT.

An OR-Set supports unlimited add / remove / re-add cycles. Every add
attaches a fresh unique tag to the element. A remove tombstones only the
tags the removing replica has *observed* for that element, so an add
made concurrently elsewhere (carrying a tag the remover never saw)
survives the merge. An element is present while at least one of its
tags is not tombstoned.

State per replica:

- ``live``: element -> every add tag observed for it
- ``tomb``: element -> tags observed as removed

Merge unions both maps per element. Presence is always derived from
``live[e] - tomb[e]``, never stored. Tombstones are kept forever.

Example::

    a = ORSet("node-a")
    b = ORSet("node-b")

    a.add("x")          # tag ("node-a", 0)
    b.merge(a)
    b.remove("x")       # tombstones ("node-a", 0) only
    a.add("x")          # tag ("node-a", 1), unseen by b

    a.merge(b)
    assert "x" in a     # ("node-a", 1) survived
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Self

from convergent.crdt.protocol import check_mergeable, check_type, freeze
from convergent.crdt.tags import SequenceTagSource

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterator

    from convergent.crdt.tags import TagSource

logger = logging.getLogger(__name__)

_EMPTY: frozenset = frozenset()


def _encode_tag(tag: Hashable) -> Any:
    return list(tag) if isinstance(tag, tuple) else tag


def _decode_tag(raw: Any) -> Hashable:
    return freeze(raw)


class ORSet:
    """Observed-Remove Set CRDT.

    Tags come from ``tag_source``; the default issues
    ``(replica_id, sequence_number)`` tuples, which are deterministic and
    unique while replica ids are unique.

    Args:
        replica_id: Identifier for this replica.
        tag_source: Supplier of unique add tags. Defaults to
            ``SequenceTagSource(replica_id)``.
    """

    __slots__ = ("_live", "_replica_id", "_tags", "_tomb")

    def __init__(self, replica_id: str, tag_source: TagSource | None = None):
        self._replica_id = replica_id
        self._tags = tag_source if tag_source is not None else SequenceTagSource(replica_id)
        self._live: dict[Any, set[Hashable]] = {}
        self._tomb: dict[Any, set[Hashable]] = {}

    @property
    def replica_id(self) -> str:
        """This replica's identifier."""
        return self._replica_id

    @property
    def tag_source(self) -> TagSource:
        return self._tags

    @property
    def value(self) -> frozenset:
        """Current elements in the set (alias for ``elements``)."""
        return self.elements

    @property
    def elements(self) -> frozenset:
        """Elements with at least one tag that is not tombstoned."""
        return frozenset(e for e in self._live if self._visible(e))

    def _visible(self, element: Any) -> set[Hashable] | frozenset:
        return self._live.get(element, _EMPTY) - self._tomb.get(element, _EMPTY)

    def tags(self, element: Hashable) -> frozenset:
        """Tags currently keeping ``element`` present."""
        return frozenset(self._visible(element))

    def add(self, element: Hashable) -> Hashable:
        """Add an element under a new unique tag.

        Adding an element that is already present still records a new
        tag; each tag must be removed separately.

        Returns:
            The tag recorded for this add.
        """
        tag = self._tags.next_tag()
        self._live.setdefault(element, set()).add(tag)
        return tag

    def remove(self, element: Hashable) -> frozenset:
        """Tombstone every tag of ``element`` this replica has observed.

        Tags added on other replicas and not merged here yet are not
        affected. If the element is not present, this is a no-op.

        Returns:
            The tags tombstoned by this call.
        """
        observed = self._visible(element)
        if not observed:
            logger.debug("Ignoring remove of absent element %r on %s", element, self._replica_id)
            return _EMPTY
        self._tomb.setdefault(element, set()).update(observed)
        return frozenset(observed)

    def contains(self, element: Hashable) -> bool:
        """Check whether an element is present.

        Returns:
            True if the element has at least one live, untombstoned tag.
        """
        return bool(self._visible(element))

    query = contains

    def merge(self, other: ORSet) -> None:
        """Merge another OR-Set into this one.

        For each element, the live tags and the tombstones are each the
        union of both replicas'. A tag tombstoned on either side stays
        tombstoned; a tag never tombstoned keeps its element present.

        Args:
            other: Another ORSet to merge from.

        Raises:
            TypeError: If other is not an ORSet.
        """
        check_mergeable(self, other)
        for source, target in ((other._live, self._live), (other._tomb, self._tomb)):
            for element, tags in source.items():
                if not tags:
                    continue
                target.setdefault(element, set()).update(tags)
                for tag in tags:
                    self._tags.observe(tag)

    def copy(self) -> Self:
        return type(self).from_dict(self.to_dict(), self._tags)

    def to_dict(self) -> dict:
        """Serialize to a plain dict.

        Elements are kept as-is; tuple tags become lists.
        """

        def encode(entries: dict[Any, set[Hashable]]) -> list:
            return [
                [element, [_encode_tag(t) for t in sorted(tags, key=repr)]]
                for element, tags in entries.items()
                if tags
            ]

        return {
            "type": "ORSet",
            "replica_id": self._replica_id,
            "live": encode(self._live),
            "tomb": encode(self._tomb),
        }

    @classmethod
    def from_dict(cls, data: dict, tag_source: TagSource | None = None) -> Self:
        """Deserialize from a plain dict.

        The tag source observes every restored tag, so a default
        sequence source resumes after the highest tag this replica issued.

        Args:
            data: Dict produced by ``to_dict()``.
            tag_source: Optional tag source for the restored replica.
        """
        check_type(data, "ORSet")
        s = cls(data["replica_id"], tag_source)
        for key, target in (("live", s._live), ("tomb", s._tomb)):
            for raw_element, raw_tags in data[key]:
                element = freeze(raw_element)
                tags = {_decode_tag(t) for t in raw_tags}
                if not tags:
                    continue
                target.setdefault(element, set()).update(tags)
                for tag in tags:
                    s._tags.observe(tag)
        return s

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ORSet):
            return NotImplemented
        for mine, theirs in ((self._live, other._live), (self._tomb, other._tomb)):
            for element, tags in mine.items():
                if not tags <= theirs.get(element, _EMPTY):
                    return False
        return True

    def __contains__(self, element: Any) -> bool:
        return self.contains(element)

    def __len__(self) -> int:
        return sum(1 for e in self._live if self._visible(e))

    def __iter__(self) -> Iterator[Any]:
        return iter(self.elements)

    def __repr__(self) -> str:
        return f"ORSet(replica_id={self._replica_id!r}, elements={set(self.elements)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ORSet):
            return NotImplemented

        def active(entries: dict[Any, set[Hashable]]) -> dict[Any, set[Hashable]]:
            return {e: tags for e, tags in entries.items() if tags}

        return active(self._live) == active(other._live) and active(self._tomb) == active(
            other._tomb
        )
