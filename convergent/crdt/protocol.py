"""Protocol shared by every convergent replicated data type.

A CRDT replica can be mutated locally without coordination and later
folded together with any other replica of the same type. For replicas to
converge, ``merge`` must be:

- **Commutative**: ``merge(a, b) == merge(b, a)``
- **Associative**: ``merge(a, merge(b, c)) == merge(merge(a, b), c)``
- **Idempotent**: ``merge(a, a) == a``

``<=`` is the partial order of the join semilattice: after ``a.merge(b)``
both ``b <= a`` and ``a_before <= a`` hold.
"""

from __future__ import annotations

from typing import Any, Protocol, Self, runtime_checkable


@runtime_checkable
class CRDT(Protocol):
    """Protocol for all CRDT types.

    All CRDTs must support:
    - ``value``: Read the current resolved value.
    - ``merge(other)``: Fold another replica's state in (in-place).
    - ``<=``: Partial order used to reason about convergence.
    - ``to_dict()`` / ``from_dict()``: Raw state for a transport layer.
    """

    @property
    def value(self) -> Any:
        """The current resolved value of this CRDT."""
        ...

    def merge(self, other: Self) -> None:
        """Merge another replica's state into this one (in-place).

        The other replica is only read, never mutated.

        Args:
            other: Another instance of the same CRDT type.
        """
        ...

    def __le__(self, other: Self) -> bool: ...

    def to_dict(self) -> dict:
        """Export this replica's raw state as plain data."""
        ...

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Rebuild a replica from the output of ``to_dict()``.

        Args:
            data: Dict produced by ``to_dict()``.
        """
        ...


def check_type(data: dict, expected: str) -> None:
    """Reject raw state produced by a different CRDT type.

    Raises:
        ValueError: If ``data["type"]`` is missing or not ``expected``.
    """
    found = data.get("type")
    if found != expected:
        raise ValueError(f"Expected {expected} state, got {found!r}")


def check_mergeable(target: object, other: object) -> None:
    """Reject merges between different CRDT types.

    Raises:
        TypeError: If ``other`` is not an instance of ``type(target)``.
    """
    if not isinstance(other, type(target)):
        raise TypeError(
            f"Cannot merge {type(other).__name__} into {type(target).__name__}"
        )


def freeze(raw: Any) -> Any:
    """Turn JSON lists back into tuples, at any depth.

    ``to_dict()`` output round-trips through JSON as lists; hashable
    elements and tags are rebuilt as tuples.
    """
    if isinstance(raw, list):
        return tuple(freeze(item) for item in raw)
    return raw
