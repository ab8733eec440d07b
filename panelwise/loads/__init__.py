"""Load aggregation and capacity checks."""

from panelwise.loads.aggregator import DemandFactors, LoadAggregator, LoadSummary, TypeLoad
from panelwise.loads.capacity import CapacityResult, check_capacity

__all__ = [
    "CapacityResult",
    "DemandFactors",
    "LoadAggregator",
    "LoadSummary",
    "TypeLoad",
    "check_capacity",
]
