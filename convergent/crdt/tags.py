"""Unique tag generation for observe-remove sets.

Every ``ORSet.add`` needs a tag no other add, on any replica, has ever
produced. Two strategies are provided:

- **SequenceTagSource**: ``(replica_id, seq)`` pairs. Unique as long as
  replica ids are unique; deterministic, so tests are reproducible.
- **RandomTagSource**: random 128-bit hex tokens. Needs no replica id.

Usage::

    tags = SequenceTagSource("node-a")
    tags.next_tag()          # ("node-a", 0)
    tags.next_tag()          # ("node-a", 1)
    tags.observe(("node-a", 7))
    tags.next_tag()          # ("node-a", 8)
"""

from __future__ import annotations

import uuid
from collections.abc import Hashable
from typing import Protocol, runtime_checkable


@runtime_checkable
class TagSource(Protocol):
    """Supplies globally unique tags, one per add event."""

    def next_tag(self) -> Hashable:
        """Return a tag never returned before by any source."""
        ...

    def observe(self, tag: Hashable) -> None:
        """Note a tag seen through a merge."""
        ...


class SequenceTagSource:
    """Issues ``(replica_id, seq)`` tags from a per-replica counter.

    ``observe`` moves the counter past any tag carrying this replica's
    id, like a Lamport clock receive. A replica restored from a stale
    snapshot therefore stops reissuing tags once it merges state that
    contains its own later tags.

    Args:
        replica_id: Identifier unique to this replica.
        start: First sequence number to issue.
    """

    __slots__ = ("_replica_id", "_seq")

    def __init__(self, replica_id: str, start: int = 0):
        self._replica_id = replica_id
        self._seq = start

    @property
    def replica_id(self) -> str:
        return self._replica_id

    @property
    def seq(self) -> int:
        """Next sequence number to issue."""
        return self._seq

    def next_tag(self) -> tuple[str, int]:
        tag = (self._replica_id, self._seq)
        self._seq += 1
        return tag

    def observe(self, tag: Hashable) -> None:
        if isinstance(tag, tuple) and len(tag) == 2 and tag[0] == self._replica_id:
            self._seq = max(self._seq, tag[1] + 1)

    def __repr__(self) -> str:
        return f"SequenceTagSource(replica_id={self._replica_id!r}, seq={self._seq})"


class RandomTagSource:
    """Issues random 128-bit tokens as 32-character hex strings."""

    __slots__ = ()

    def next_tag(self) -> str:
        return uuid.uuid4().hex

    def observe(self, tag: Hashable) -> None:
        pass

    def __repr__(self) -> str:
        return "RandomTagSource()"
