"""convergent: state-based CRDTs that converge without coordination.

Replicas of a counter or set are mutated independently and merged in
any order, any number of times; replicas that have seen the same
updates end up with identical state.

Quick start::

    from convergent import ORSet

    a = ORSet("node-a")
    b = ORSet("node-b")
    a.add("x")
    b.merge(a)
    b.remove("x")
    a.add("x")
    a.merge(b)
    assert "x" in a

The library is silent by default; see ``convergent.logging_config`` to
enable log output.
"""

import logging

from convergent.crdt import (
    CRDT,
    BoundedVector,
    GCounter,
    GSet,
    ORSet,
    PNCounter,
    RandomTagSource,
    SequenceTagSource,
    TagSource,
    TwoPhaseSet,
)
from convergent.crdt.registry import load_state
from convergent.cluster import ClusterStats, ReplicaCluster
from convergent.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_file_logging,
    enable_json_logging,
    set_level,
    set_module_level,
)

logging.getLogger("convergent").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # CRDTs
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
    "load_state",
    # Convergence harness
    "ReplicaCluster",
    "ClusterStats",
    # Logging
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_file_logging",
    "enable_json_logging",
    "set_level",
    "set_module_level",
]
