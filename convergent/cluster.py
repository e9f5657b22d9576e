"""In-process replica cluster for exercising convergence.

ReplicaCluster holds one CRDT replica per index and plays the part of
the transport and scheduler that a real deployment supplies: it ships a
*snapshot* of one replica's raw state to another and merges it there.
Deliveries can follow any order and may repeat, which is exactly the
freedom the CRDT types must tolerate.

Gossip follows the push-pull pattern of gossip-replicated stores: a
replica pushes its state to a random peer, the peer merges it and
replies with its own state, which the initiator merges in turn.

Example::

    import random

    from convergent.crdt import GCounter

    cluster = ReplicaCluster(lambda i: GCounter(3), count=3)
    cluster[0].increment(0)
    cluster[2].increment(2)

    rounds = cluster.run_until_converged(random.Random(7))
    assert cluster.values == [2, 2, 2]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import permutations
from typing import TYPE_CHECKING, Any

from convergent.crdt.registry import load_state

if TYPE_CHECKING:
    import random
    from collections.abc import Callable, Iterable

    from convergent.analysis.trace import ConvergenceTrace
    from convergent.crdt.protocol import CRDT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClusterStats:
    """Delivery counters for a ReplicaCluster.

    Attributes:
        deliveries: Snapshots merged into a replica.
        gossip_rounds: Gossip rounds run.
    """

    deliveries: int = 0
    gossip_rounds: int = 0


class ReplicaCluster:
    """A fixed group of replicas of one CRDT type.

    Args:
        factory: Builds the replica for a given index.
        count: Number of replicas.

    Raises:
        ValueError: If count is not positive.
    """

    def __init__(self, factory: Callable[[int], CRDT], count: int):
        if count < 1:
            raise ValueError(f"Replica count must be positive, got {count}")
        self._replicas: list[CRDT] = [factory(i) for i in range(count)]
        self._deliveries = 0
        self._gossip_rounds = 0

    @property
    def replicas(self) -> list[CRDT]:
        return list(self._replicas)

    @property
    def stats(self) -> ClusterStats:
        """Return a frozen snapshot of delivery statistics."""
        return ClusterStats(deliveries=self._deliveries, gossip_rounds=self._gossip_rounds)

    @property
    def values(self) -> list[Any]:
        """Each replica's current value, by index."""
        return [r.value for r in self._replicas]

    @property
    def converged(self) -> bool:
        """True if every replica holds identical state."""
        first = self._replicas[0]
        return all(r == first for r in self._replicas[1:])

    def snapshot(self, index: int) -> CRDT:
        """Copy replica ``index`` through its raw state, as a transport would."""
        return load_state(self._replicas[index].to_dict())

    def deliver(self, src: int, dst: int) -> None:
        """Merge a snapshot of replica ``src`` into replica ``dst``."""
        logger.debug("deliver %d -> %d", src, dst)
        self._replicas[dst].merge(self.snapshot(src))
        self._deliveries += 1

    def sync_all(self, order: Iterable[tuple[int, int]] | None = None) -> None:
        """Deliver along every ordered pair of replicas.

        Args:
            order: ``(src, dst)`` pairs to deliver, in order. Defaults to
                every ordered pair. Pairs may repeat.
        """
        if order is None:
            order = permutations(range(len(self._replicas)), 2)
        for src, dst in order:
            self.deliver(src, dst)

    def gossip_round(self, rng: random.Random) -> int:
        """Run one push-pull exchange from every replica to a random peer.

        Returns:
            The number of deliveries made.
        """
        self._gossip_rounds += 1
        if len(self._replicas) < 2:
            return 0
        made = 0
        for src in range(len(self._replicas)):
            dst = rng.choice([i for i in range(len(self._replicas)) if i != src])
            self.deliver(src, dst)
            self.deliver(dst, src)
            made += 2
        return made

    def run_until_converged(
        self,
        rng: random.Random,
        max_rounds: int = 100,
        trace: ConvergenceTrace | None = None,
    ) -> int:
        """Gossip until all replicas hold identical state.

        Args:
            rng: Source of randomness for peer selection.
            max_rounds: Give up after this many rounds.
            trace: Optional trace recording every round (round 0 is the
                state before any gossip).

        Returns:
            The number of rounds it took (0 if already converged).

        Raises:
            RuntimeError: If the replicas have not converged after
                ``max_rounds`` rounds.
        """
        if trace is not None:
            trace.record(0, self)
        for round_no in range(1, max_rounds + 1):
            if self.converged:
                logger.info("Converged %d replicas after %d rounds", len(self), round_no - 1)
                return round_no - 1
            self.gossip_round(rng)
            if trace is not None:
                trace.record(round_no, self)
        if self.converged:
            logger.info("Converged %d replicas after %d rounds", len(self), max_rounds)
            return max_rounds
        logger.warning("Replicas still diverged after %d rounds", max_rounds)
        raise RuntimeError(f"Replicas did not converge within {max_rounds} rounds")

    def __getitem__(self, index: int) -> CRDT:
        return self._replicas[index]

    def __len__(self) -> int:
        return len(self._replicas)

    def __repr__(self) -> str:
        return f"ReplicaCluster(replicas={len(self._replicas)}, converged={self.converged})"
