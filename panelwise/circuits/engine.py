"""CircuitEngine — partition switchboards into numbered circuits.

Usage::

    from panelwise.circuits import CircuitEngine

    engine = CircuitEngine(snapshot, settings)
    circuits = engine.assign_circuits("SDB1")
    report = engine.assign_all()
    engine.commit(report, drawing)

Numbering restarts at 1 for every sub-distribution board and runs
independently for normal (``C<n>``) and emergency (``EC<n>``) circuits.
Labels are only stable for unchanged topology: re-running after wires
are added or removed may renumber.
"""

from __future__ import annotations

import logging

from panelwise import config
from panelwise import issues as cat
from panelwise.circuits.report import CircuitAssignment, CircuitReport
from panelwise.issues import IssueLog
from panelwise.loads.aggregator import DemandFactors, LoadAggregator
from panelwise.loads.capacity import check_capacity
from panelwise.models.element import ElementKind
from panelwise.records.snapshot import Snapshot
from panelwise.records.source import DrawingSource
from panelwise.settings import AnalysisSettings
from panelwise.topology.chains import build_chain_trees, find_chains

logger = logging.getLogger(__name__)


class CircuitEngine:
    """Circuit assignment over one snapshot.

    Parameters
    ----------
    snapshot:
        Elements and active wires for this pass.
    settings:
        Demand factors, capacity and label settings.  Defaults to the
        built-in values.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        settings: AnalysisSettings | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.settings = settings or AnalysisSettings()
        self.issues = IssueLog()
        self.aggregator = LoadAggregator(
            snapshot,
            DemandFactors(
                self.settings.demand_factors,
                unknown_factor=self.settings.unknown_demand_factor,
                issue_log=self.issues,
            ),
        )

    # -- Topology ----------------------------------------------------------

    def reachable_switchboards(self, sdb_id: str) -> list[str]:
        """Switchboards reachable from *sdb_id*, in depth-first order.

        The walk only continues through switchboards, so it never crosses
        into another distribution board's tree or through fixtures.
        """
        snapshot = self.snapshot
        found: list[str] = []
        visited: set[str] = set()
        stack = [sdb_id]
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            if node != sdb_id:
                found.append(node)
            for neighbour in reversed(snapshot.neighbours(node)):
                if neighbour in visited:
                    continue
                if snapshot.kind_of(neighbour) is ElementKind.SWITCH:
                    stack.append(neighbour)
        return found

    def switchboard_chains(self, boards: list[str]) -> list[list[str]]:
        """Chains of board-to-board wiring among *boards*.

        Boards with no wire to another board in the set form
        single-member chains after the wired ones.
        """
        graph = self.snapshot.graph(scope=set(boards))
        for board_id in boards:
            graph.setdefault(board_id, set())
        return find_chains(graph)

    def _is_emergency(self, chain: list[str]) -> bool:
        return any(
            fixture.is_emergency
            for board_id in chain
            for fixture in self.snapshot.downstream_fixtures(board_id)
        )

    # -- Assignment --------------------------------------------------------

    def assign_circuits(
        self,
        sdb_id: str,
        exclude: set[str] | None = None,
    ) -> list[CircuitAssignment]:
        """Assign circuit labels to the switchboards under one SDB.

        Parameters
        ----------
        sdb_id:
            Id of a sub-distribution board.
        exclude:
            Switchboards already claimed by another board in this pass.

        Returns
        -------
        list[CircuitAssignment]
            In discovery order.  Empty when no switchboard is connected.

        Raises
        ------
        ValueError
            If *sdb_id* is unknown or not a sub-distribution board.
        """
        element = self.snapshot.element(sdb_id)
        if element is None:
            raise ValueError(f"Unknown element {sdb_id}")
        if element.kind is not ElementKind.SUB:
            raise ValueError(f"{sdb_id} is a {element.kind.value} board, not SUB")

        boards = self.reachable_switchboards(sdb_id)
        if exclude:
            boards = [b for b in boards if b not in exclude]
        if not boards:
            self.issues.add(
                cat.TOPOLOGY, "board_no_switchboards",
                f"Sub-distribution board {sdb_id} has no connected switchboards",
                element_id=sdb_id,
                severity="info",
            )
            return []

        counters = {False: 0, True: 0}
        assignments: list[CircuitAssignment] = []
        for chain in self.switchboard_chains(boards):
            emergency = self._is_emergency(chain)
            counters[emergency] += 1
            prefix = config.EMERGENCY_CIRCUIT_PREFIX if emergency else config.NORMAL_CIRCUIT_PREFIX
            label = f"{prefix}{counters[emergency]}"

            for board_id in chain:
                previous = self.snapshot.element(board_id).circuit_id
                if previous and previous != label:
                    logger.debug("Relabelling %s: %s -> %s", board_id, previous, label)

            load = self.aggregator.aggregate_load(chain)
            capacity = check_capacity(load.used, self.settings.circuit_capacity_w)
            if capacity.overloaded:
                self.issues.add(
                    cat.CAPACITY, "circuit_overloaded",
                    f"{sdb_id}/{label} uses {load.used:.0f} W, capacity "
                    f"{self.settings.circuit_capacity_w:.0f} W",
                    element_id=chain[0],
                )
            assignments.append(CircuitAssignment(
                label=label,
                sdb_id=sdb_id,
                member_boards=list(chain),
                is_emergency=emergency,
                load=load,
                capacity=capacity,
            ))

        logger.info(
            "%s: %d circuits (%d normal, %d emergency)",
            sdb_id, len(assignments), counters[False], counters[True],
        )
        return assignments

    def assign_all(self) -> CircuitReport:
        """Assign circuits under every sub-distribution board.

        Boards are processed in element order.  A switchboard reachable
        from more than one SDB stays with the first and is reported.
        """
        snapshot = self.snapshot
        circuits: dict[str, list[CircuitAssignment]] = {}
        claimed: dict[str, str] = {}

        for sdb_id in snapshot.ids_of_kind(ElementKind.SUB):
            shared = [b for b in self.reachable_switchboards(sdb_id) if b in claimed]
            for board_id in shared:
                self.issues.add(
                    cat.TOPOLOGY, "switchboard_shared",
                    f"Switchboard {board_id} is reachable from {claimed[board_id]} "
                    f"and {sdb_id}; kept under {claimed[board_id]}",
                    element_id=board_id,
                )
            group = self.assign_circuits(sdb_id, exclude=set(claimed))
            for assignment in group:
                for board_id in assignment.member_boards:
                    claimed[board_id] = sdb_id
            circuits[sdb_id] = group

        for element in snapshot.elements:
            if element.is_board and not snapshot.is_connected(element.id):
                self.issues.add(
                    cat.TOPOLOGY, "board_unconnected",
                    f"Board {element.id} has no connections",
                    element_id=element.id,
                )
            elif element.is_switchboard and element.id not in claimed:
                self.issues.add(
                    cat.TOPOLOGY, "switchboard_unassigned",
                    f"Switchboard {element.id} is not reachable from any sub-distribution board",
                    element_id=element.id,
                )

        fixture_circuits = self._fixture_circuits(circuits)
        elements = {e.id: e for e in snapshot.elements}
        trees = build_chain_trees(snapshot.graph(), elements, self.issues)

        return CircuitReport(
            circuits=circuits,
            fixture_circuits=fixture_circuits,
            chain_trees=trees,
            board_loads=self.aggregator.board_loads(),
            project_load=self.aggregator.project_load(),
            issues=snapshot.issues.to_list() + self.issues.to_list(),
            capacity_w=self.settings.circuit_capacity_w,
        )

    def _fixture_circuits(self, circuits: dict[str, list[CircuitAssignment]]) -> dict[str, str]:
        """Fixture id -> label inherited from the switchboard feeding it.

        Fixtures daisy-chained behind another fixture inherit the same label.
        """
        result: dict[str, str] = {}
        for group in circuits.values():
            for assignment in group:
                for board_id in assignment.member_boards:
                    for fixture in self.snapshot.downstream_fixtures(board_id):
                        current = result.get(fixture.id)
                        if current is None:
                            result[fixture.id] = assignment.label
                        elif current != assignment.label:
                            self.issues.add(
                                cat.TOPOLOGY, "fixture_multiple_circuits",
                                f"Fixture {fixture.id} is wired into {current} and "
                                f"{assignment.label}; keeping {current}",
                                element_id=fixture.id,
                            )
        return result

    # -- Persistence -------------------------------------------------------

    def commit(self, report: CircuitReport, source: DrawingSource) -> int:
        """Write circuit labels and emergency flags back to the drawing.

        Member switchboards get ``CKT`` and a ``SPARE1`` flag matching
        their circuit; emergency fixtures inside assigned circuits get
        ``SPARE1``.  Returns the number of attribute writes.

        Callers must not run two commits for the same SDB concurrently.
        """
        writes = 0
        for assignment in report.assignments:
            flag = "1" if assignment.is_emergency else "0"
            for board_id in assignment.member_boards:
                source.set_attribute(board_id, config.ATTR_CIRCUIT, assignment.label)
                source.set_attribute(board_id, config.ATTR_EMERGENCY, flag)
                writes += 2
        for fixture_id in report.fixture_circuits:
            fixture = self.snapshot.element(fixture_id)
            if fixture is not None and fixture.is_emergency:
                source.set_attribute(fixture_id, config.ATTR_EMERGENCY, "1")
                writes += 1
        logger.info("Committed %d attribute writes", writes)
        return writes
