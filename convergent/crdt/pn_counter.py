"""Positive-Negative counter (PN-Counter) CRDT.

A PN-Counter supports both increment and decrement by combining two
G-Counters: one for increments and one for decrements. The value is
``inc.value - dec.value`` and may be negative.

Example::

    a = PNCounter(2)
    b = PNCounter(2)
    for _ in range(3):
        a.increment(0)
    for _ in range(5):
        b.decrement(1)

    a.merge(b)
    assert a.value == -2
"""

from __future__ import annotations

from typing import Self

from convergent.crdt.g_counter import GCounter
from convergent.crdt.protocol import check_mergeable, check_type


class PNCounter:
    """Positive-Negative counter CRDT.

    Wraps two G-Counters of the same size: ``_inc`` for increments and
    ``_dec`` for decrements.

    Args:
        size: Number of replicas sharing this counter.

    Raises:
        ValueError: If size is not positive.
    """

    __slots__ = ("_inc", "_dec")

    def __init__(self, size: int):
        self._inc = GCounter(size)
        self._dec = GCounter(size)

    @property
    def size(self) -> int:
        """Number of replica slots."""
        return self._inc.size

    @property
    def value(self) -> int:
        """Net count (increments - decrements)."""
        return self._inc.value - self._dec.value

    @property
    def increments(self) -> int:
        """Total increments across all replicas."""
        return self._inc.value

    @property
    def decrements(self) -> int:
        """Total decrements across all replicas."""
        return self._dec.value

    def increment(self, index: int) -> None:
        """Add one on behalf of replica ``index``. Out of range is a no-op."""
        self._inc.increment(index)

    def decrement(self, index: int) -> None:
        """Subtract one on behalf of replica ``index``. Out of range is a no-op."""
        self._dec.increment(index)

    def merge(self, other: PNCounter) -> None:
        """Merge another PN-Counter into this one.

        The increment and decrement G-Counters merge independently.

        Args:
            other: A PNCounter with the same size.

        Raises:
            TypeError: If other is not a PNCounter.
            ValueError: If the sizes differ.
        """
        check_mergeable(self, other)
        self._inc.merge(other._inc)
        self._dec.merge(other._dec)

    def copy(self) -> Self:
        counter = type(self)(self.size)
        counter._inc = self._inc.copy()
        counter._dec = self._dec.copy()
        return counter

    def to_dict(self) -> dict:
        """Serialize to a plain dict."""
        return {
            "type": "PNCounter",
            "inc": self._inc.to_dict(),
            "dec": self._dec.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Deserialize from a plain dict.

        Args:
            data: Dict produced by ``to_dict()``.

        Raises:
            ValueError: If data holds another type, or the two halves
                disagree on size.
        """
        check_type(data, "PNCounter")
        inc = GCounter.from_dict(data["inc"])
        dec = GCounter.from_dict(data["dec"])
        if inc.size != dec.size:
            raise ValueError(f"Increment/decrement sizes differ: {inc.size} vs {dec.size}")
        counter = cls(inc.size)
        counter._inc = inc
        counter._dec = dec
        return counter

    def __le__(self, other: object) -> bool:
        if not isinstance(other, PNCounter):
            return NotImplemented
        return self._inc <= other._inc and self._dec <= other._dec

    def __repr__(self) -> str:
        return f"PNCounter(size={self.size}, value={self.value})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PNCounter):
            return NotImplemented
        return self._inc == other._inc and self._dec == other._dec
