"""Grow-only counter (G-Counter) CRDT.

A G-Counter is a replicated counter that can only be incremented. It
holds one slot per replica index in a fixed-size vector; each replica
increments only its own slot. The value is the sum of all slots and
merge takes the slot-wise maximum.

This is the foundational CRDT: PNCounter builds on two G-Counters.

Example::

    a = GCounter(3)
    b = GCounter(3)

    a.increment(0)
    a.increment(0)
    b.increment(1)

    a.merge(b)
    assert a.value == 3
    assert b <= a
"""

from __future__ import annotations

import logging
from typing import Self

from convergent.crdt.bounded_vector import BoundedVector
from convergent.crdt.protocol import check_mergeable, check_type

logger = logging.getLogger(__name__)


class GCounter:
    """Grow-only counter CRDT over ``size`` replica slots.

    Slot counts never decrease. Merge uses slot-wise max, which is
    commutative, associative, and idempotent.

    Args:
        size: Number of replicas sharing this counter.

    Raises:
        ValueError: If size is not positive.
    """

    __slots__ = ("_payload",)

    def __init__(self, size: int):
        self._payload = BoundedVector(size)

    @property
    def size(self) -> int:
        """Number of replica slots."""
        return self._payload.size

    @property
    def value(self) -> int:
        """Total count across all replicas."""
        return self._payload.total()

    @property
    def payload(self) -> tuple[int, ...]:
        """Per-replica counts, indexed by replica index."""
        return tuple(self._payload)

    def increment(self, index: int) -> None:
        """Add one to replica ``index``'s slot.

        The caller must own ``index``. An out-of-range index is a no-op.

        Args:
            index: Replica index in ``[0, size)``.
        """
        if not self._payload.increment(index):
            logger.debug("Ignoring increment for replica %s outside [0, %d)", index, self.size)

    def replica_value(self, index: int) -> int:
        """Count contributed by one replica, or 0 for an unknown index."""
        if not self._payload.in_bounds(index):
            return 0
        return self._payload[index]

    def merge(self, other: GCounter) -> None:
        """Merge another G-Counter into this one (slot-wise max).

        Args:
            other: A GCounter with the same size.

        Raises:
            TypeError: If other is not a GCounter.
            ValueError: If the sizes differ.
        """
        check_mergeable(self, other)
        self._payload.merge_max(other._payload)

    def copy(self) -> Self:
        counter = type(self)(self.size)
        counter._payload = self._payload.copy()
        return counter

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return {
            "type": "GCounter",
            "payload": self._payload.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.

        Raises:
            ValueError: If data holds another type or a malformed payload.
        """
        check_type(data, "GCounter")
        payload = list(data["payload"])
        counter = cls(len(payload))
        counter._payload = BoundedVector(len(payload), payload)
        return counter

    def __le__(self, other: object) -> bool:
        if not isinstance(other, GCounter):
            return NotImplemented
        return self._payload <= other._payload

    def __repr__(self) -> str:
        return f"GCounter(size={self.size}, value={self.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GCounter):
            return NotImplemented
        return self._payload == other._payload
