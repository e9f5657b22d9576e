"""Convergent replicated data types.

Each type can be mutated on any replica without coordination and merged
with any other replica's state. Merge is commutative, associative, and
idempotent, so replicas that have seen the same updates converge no
matter the delivery order or how many times a state is delivered.

Provided CRDTs:

- **GCounter**: Grow-only counter over a fixed number of replica slots
- **PNCounter**: Positive-negative counter (two GCounters)
- **GSet**: Grow-only set
- **TwoPhaseSet**: Add/remove set where removal is permanent
- **ORSet**: Observed-remove set with unlimited re-adds

``BoundedVector`` is the per-replica storage behind the counters, and
the tag sources supply the unique add tags ORSet relies on.
"""

from convergent.crdt.protocol import CRDT
from convergent.crdt.bounded_vector import BoundedVector
from convergent.crdt.g_counter import GCounter
from convergent.crdt.pn_counter import PNCounter
from convergent.crdt.g_set import GSet
from convergent.crdt.two_phase_set import TwoPhaseSet
from convergent.crdt.tags import RandomTagSource, SequenceTagSource, TagSource
from convergent.crdt.or_set import ORSet

__all__ = [
    "CRDT",
    "BoundedVector",
    "GCounter",
    "PNCounter",
    "GSet",
    "TwoPhaseSet",
    "ORSet",
    "TagSource",
    "SequenceTagSource",
    "RandomTagSource",
]
