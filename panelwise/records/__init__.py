"""Wire records, drawing sources and the per-pass snapshot."""

from panelwise.records.snapshot import Snapshot
from panelwise.records.source import DrawingSource, InMemoryDrawing
from panelwise.records.store import WireRecordStore, normalize_record

__all__ = [
    "DrawingSource",
    "InMemoryDrawing",
    "Snapshot",
    "WireRecordStore",
    "normalize_record",
]
