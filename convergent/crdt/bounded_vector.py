"""Fixed-size vector of per-replica counts.

Each slot belongs to one replica index in ``[0, size)``. Slots only grow:
``increment`` adds one to a slot and ``merge_max`` takes the pointwise
maximum. Both counter CRDTs store their state in this container.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class BoundedVector:
    """Dense array of non-negative integers indexed by replica slot.

    Args:
        size: Number of replica slots (must be at least 1).
        values: Optional initial counts, one per slot.

    Raises:
        ValueError: If size is not positive, or values has the wrong
            length or holds a negative count.
    """

    __slots__ = ("_slots",)

    def __init__(self, size: int, values: Iterable[int] | None = None):
        if size < 1:
            raise ValueError(f"Vector size must be positive, got {size}")
        if values is None:
            self._slots = [0] * size
            return
        slots = [int(v) for v in values]
        if len(slots) != size:
            raise ValueError(f"Expected {size} values, got {len(slots)}")
        if any(v < 0 for v in slots):
            raise ValueError(f"Counts must be non-negative, got {slots}")
        self._slots = slots

    @property
    def size(self) -> int:
        """Number of replica slots."""
        return len(self._slots)

    def in_bounds(self, index: int) -> bool:
        """True if ``index`` names a slot. Negative indices never do."""
        return 0 <= index < len(self._slots)

    def increment(self, index: int) -> bool:
        """Add one to a slot.

        Out-of-range indices are ignored.

        Returns:
            True if a slot changed.
        """
        if not self.in_bounds(index):
            return False
        self._slots[index] += 1
        return True

    def total(self) -> int:
        """Sum of every slot."""
        return sum(self._slots)

    def merge_max(self, other: BoundedVector) -> None:
        """Raise each slot to ``other``'s count where that is larger.

        Raises:
            ValueError: If the vectors have different sizes.
        """
        self._check_size(other)
        for i, count in enumerate(other._slots):
            if count > self._slots[i]:
                self._slots[i] = count

    def copy(self) -> Self:
        return type(self)(len(self._slots), self._slots)

    def to_list(self) -> list[int]:
        return list(self._slots)

    def _check_size(self, other: BoundedVector) -> None:
        if len(other._slots) != len(self._slots):
            raise ValueError(
                f"Vector sizes differ: {len(self._slots)} vs {len(other._slots)}"
            )

    def __le__(self, other: object) -> bool:
        if not isinstance(other, BoundedVector):
            return NotImplemented
        self._check_size(other)
        return all(a <= b for a, b in zip(self._slots, other._slots))

    def __getitem__(self, index: int) -> int:
        if not self.in_bounds(index):
            raise IndexError(f"Replica index {index} out of range [0, {len(self._slots)})")
        return self._slots[index]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[int]:
        return iter(tuple(self._slots))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedVector):
            return NotImplemented
        return self._slots == other._slots

    def __repr__(self) -> str:
        return f"BoundedVector({self._slots!r})"
