"""Panelwise — the single entry point for a drawing's circuit bookkeeping.

Usage::

    from panelwise import Panelwise

    pw = Panelwise(drawing, project_root="/path/to/project")
    report = pw.analyze()
    circuits, issues = pw.assign_circuits("SDB1")
    pw.aggregate_load(["SB1", "SB2"])
    pw.check_capacity(900.0)
    pw.chain_trees()
    pw.commit(report)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from panelwise.circuits.engine import CircuitEngine
from panelwise.circuits.report import CircuitAssignment, CircuitReport
from panelwise.issues import IssueLog
from panelwise.loads.aggregator import LoadSummary
from panelwise.loads.capacity import CapacityResult, check_capacity
from panelwise.records.snapshot import Snapshot
from panelwise.records.source import DrawingSource
from panelwise.settings import AnalysisSettings, SettingsManager
from panelwise.topology.chains import ChainTree, build_chain_trees

logger = logging.getLogger(__name__)


class Panelwise:
    """The public interface for panelwise.

    Every query reloads a fresh snapshot from the drawing, so results
    always reflect the drawing's current wires and attributes.

    Parameters
    ----------
    source:
        The drawing collaborator.
    project_root:
        Directory holding ``.panelwise/settings.json``.  Ignored when
        *settings* is given.
    settings:
        Explicit settings object.  A non-empty ``log_level`` is applied
        to the ``panelwise`` logger.
    """

    def __init__(
        self,
        source: DrawingSource,
        project_root: str | Path | None = None,
        *,
        settings: AnalysisSettings | None = None,
    ) -> None:
        self.source = source
        self.project_root = Path(project_root).resolve() if project_root else None
        self.settings = settings or SettingsManager().load(self.project_root)
        if self.settings.log_level:
            logging.getLogger("panelwise").setLevel(self.settings.log_level)

    # -- Snapshot ----------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Batch-load elements and wires from the drawing."""
        return Snapshot.load(self.source, self.settings)

    def engine(self) -> CircuitEngine:
        return CircuitEngine(self.snapshot(), self.settings)

    # -- Operations --------------------------------------------------------

    def analyze(self) -> CircuitReport:
        """Assign circuits under every SDB and total all loads."""
        report = self.engine().assign_all()
        logger.info(
            "Analysis complete: %d circuits, %d overloaded, %d issues",
            len(report.assignments), len(report.overloaded), len(report.issues),
        )
        return report

    def assign_circuits(self, sdb_id: str) -> tuple[list[CircuitAssignment], IssueLog]:
        """Circuits under one SDB, plus the snapshot and engine issues."""
        engine = self.engine()
        assignments = engine.assign_circuits(sdb_id)
        issue_log = IssueLog()
        issue_log.extend(engine.snapshot.issues.to_list() + engine.issues.to_list())
        return assignments, issue_log

    def aggregate_load(self, boards: Iterable[str]) -> LoadSummary:
        return self.engine().aggregator.aggregate_load(boards)

    def project_load(self) -> LoadSummary:
        return self.engine().aggregator.project_load()

    def check_capacity(self, circuit_load: float, capacity: float | None = None) -> CapacityResult:
        """Compare a load against *capacity*, or the configured circuit capacity."""
        if capacity is None:
            capacity = self.settings.circuit_capacity_w
        return check_capacity(circuit_load, capacity)

    def chain_trees(self) -> tuple[list[ChainTree], IssueLog]:
        """Every chain in the drawing arranged under its distribution board."""
        snapshot = self.snapshot()
        issue_log = IssueLog()
        elements = {e.id: e for e in snapshot.elements}
        return build_chain_trees(snapshot.graph(), elements, issue_log), issue_log

    def commit(self, report: CircuitReport) -> int:
        """Write a report's labels and emergency flags to the drawing."""
        return self.engine().commit(report, self.source)
