"""Rebuild any CRDT from raw state using its ``type`` field."""

from __future__ import annotations

from typing import TYPE_CHECKING

from convergent.crdt.g_counter import GCounter
from convergent.crdt.g_set import GSet
from convergent.crdt.or_set import ORSet
from convergent.crdt.pn_counter import PNCounter
from convergent.crdt.two_phase_set import TwoPhaseSet

if TYPE_CHECKING:
    from convergent.crdt.protocol import CRDT

CRDT_TYPES: dict[str, type] = {
    "GCounter": GCounter,
    "PNCounter": PNCounter,
    "GSet": GSet,
    "TwoPhaseSet": TwoPhaseSet,
    "ORSet": ORSet,
}


def load_state(data: dict) -> CRDT:
    """Reconstruct a CRDT from a dict produced by its ``to_dict()``.

    Raises:
        ValueError: If the ``type`` field names no known CRDT.
    """
    crdt_type = data.get("type", "")
    cls = CRDT_TYPES.get(crdt_type)
    if cls is None:
        raise ValueError(f"Unknown CRDT type: {crdt_type!r}")
    return cls.from_dict(data)
