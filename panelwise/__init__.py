"""panelwise — circuit bookkeeping for electrical distribution drawings."""

__version__ = "1.0.0"

from panelwise.api.facade import Panelwise
from panelwise.circuits.engine import CircuitEngine
from panelwise.circuits.report import CircuitAssignment, CircuitReport
from panelwise.issues import Issue, IssueLog, PanelwiseError, SettingsError, WireRecordError
from panelwise.loads.aggregator import DemandFactors, LoadAggregator, LoadSummary
from panelwise.loads.capacity import CapacityResult, check_capacity
from panelwise.models.element import Element, ElementKind
from panelwise.models.wire import WireKind, WireRecord, WireStatus
from panelwise.records.snapshot import Snapshot
from panelwise.records.source import DrawingSource, InMemoryDrawing
from panelwise.records.store import WireRecordStore, normalize_record
from panelwise.settings import AnalysisSettings, SettingsManager
from panelwise.topology.chains import ChainTree, build_chain_trees, find_chains, find_parent
from panelwise.topology.graph import build_graph

__all__ = [
    "__version__",
    # Facade
    "Panelwise",
    # Model
    "Element",
    "ElementKind",
    "WireKind",
    "WireRecord",
    "WireStatus",
    # Records
    "DrawingSource",
    "InMemoryDrawing",
    "Snapshot",
    "WireRecordStore",
    "normalize_record",
    # Topology
    "ChainTree",
    "build_chain_trees",
    "build_graph",
    "find_chains",
    "find_parent",
    # Circuits and loads
    "CapacityResult",
    "CircuitAssignment",
    "CircuitEngine",
    "CircuitReport",
    "DemandFactors",
    "LoadAggregator",
    "LoadSummary",
    "check_capacity",
    # Settings and errors
    "AnalysisSettings",
    "Issue",
    "IssueLog",
    "PanelwiseError",
    "SettingsError",
    "SettingsManager",
    "WireRecordError",
]
