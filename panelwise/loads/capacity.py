"""Capacity Validator."""

from __future__ import annotations

from typing import Any


class CapacityResult:
    """Outcome of comparing a circuit load against its capacity."""

    def __init__(self, overloaded: bool, margin: float, load: float, capacity: float) -> None:
        self.overloaded = overloaded
        self.margin = margin
        self.load = load
        self.capacity = capacity

    def to_dict(self) -> dict[str, Any]:
        return {
            "overloaded": self.overloaded,
            "margin": self.margin,
            "load": self.load,
            "capacity": self.capacity,
        }


def check_capacity(circuit_load: float, capacity: float) -> CapacityResult:
    """Compare *circuit_load* against *capacity* (both in watts).

    ``margin`` is ``capacity - circuit_load`` and goes negative when the
    circuit is overloaded.  A load exactly at capacity is not overloaded.
    """
    if capacity < 0:
        raise ValueError(f"capacity must be >= 0, got {capacity}")
    margin = capacity - circuit_load
    return CapacityResult(
        overloaded=circuit_load > capacity,
        margin=margin,
        load=circuit_load,
        capacity=capacity,
    )
