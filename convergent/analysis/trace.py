"""Per-round record of replica values while a cluster converges.

Numeric values (counters) are recorded as-is; set-valued CRDTs are
recorded by their size so every replica can be plotted on one axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pandas as pd

if TYPE_CHECKING:
    from convergent.cluster import ReplicaCluster


@dataclass(frozen=True)
class TraceSample:
    """One replica's value after one round.

    Attributes:
        round: Gossip round (0 = before any gossip).
        replica: Replica index.
        value: Counter value, or element count for sets.
        converged: Whether the whole cluster was converged at this round.
    """

    round: int
    replica: int
    value: float
    converged: bool


def _numeric(value: Any) -> float:
    if isinstance(value, (int, float)):
        return value
    return len(value)


class ConvergenceTrace:
    """Collects TraceSamples from a ReplicaCluster."""

    COLUMNS = ["round", "replica", "value", "converged"]

    def __init__(self) -> None:
        self._samples: list[TraceSample] = []

    @property
    def samples(self) -> list[TraceSample]:
        return list(self._samples)

    def record(self, round_no: int, cluster: ReplicaCluster) -> None:
        """Append one sample per replica for ``round_no``."""
        converged = cluster.converged
        for index, value in enumerate(cluster.values):
            self._samples.append(TraceSample(round_no, index, _numeric(value), converged))

    def clear(self) -> None:
        self._samples.clear()

    def rounds_to_converge(self) -> int | None:
        """First round at which the cluster was converged, or None."""
        for sample in self._samples:
            if sample.converged:
                return sample.round
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """All samples as a DataFrame with columns round, replica, value, converged."""
        return pd.DataFrame(
            [(s.round, s.replica, s.value, s.converged) for s in self._samples],
            columns=self.COLUMNS,
        )

    def plot(self, path: str | Path, title: str = "Replica convergence") -> Path:
        """Save a line chart of each replica's value per round.

        Args:
            path: Output image path. Parent directories are created.
            title: Chart title.

        Returns:
            The path written.
        """
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        frame = self.to_dataframe()
        fig, ax = plt.subplots(figsize=(8, 4))
        for replica, rows in frame.groupby("replica"):
            ax.plot(rows["round"], rows["value"], marker="o", label=f"replica {replica}")

        first = self.rounds_to_converge()
        if first is not None:
            ax.axvline(first, color="grey", linestyle="--", label="converged")

        ax.set_xlabel("round")
        ax.set_ylabel("value")
        ax.set_title(title)
        ax.legend()
        fig.tight_layout()
        fig.savefig(path)
        plt.close(fig)
        return path

    def __len__(self) -> int:
        return len(self._samples)
