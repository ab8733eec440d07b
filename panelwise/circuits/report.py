"""CircuitAssignment and CircuitReport — results handed to reporting."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from panelwise.issues import Issue
from panelwise.loads.aggregator import LoadSummary, TypeLoad
from panelwise.loads.capacity import CapacityResult
from panelwise.models.element import ElementKind
from panelwise.topology.chains import ChainTree


class CircuitAssignment:
    """One circuit: a chain of switchboards under one sub-distribution board."""

    def __init__(
        self,
        label: str,
        sdb_id: str,
        member_boards: list[str],
        is_emergency: bool,
        load: LoadSummary,
        capacity: CapacityResult,
    ) -> None:
        self.label = label
        self.sdb_id = sdb_id
        self.member_boards = member_boards
        self.is_emergency = is_emergency
        self.load = load
        self.capacity = capacity

    @property
    def total_load(self) -> float:
        """Used load (after demand factors), in watts."""
        return self.load.used

    @property
    def connected_load(self) -> float:
        return self.load.connected

    @property
    def by_type(self) -> dict[ElementKind, TypeLoad]:
        return self.load.by_type

    @property
    def overloaded(self) -> bool:
        return self.capacity.overloaded

    @property
    def margin(self) -> float:
        return self.capacity.margin

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "sdb_id": self.sdb_id,
            "member_boards": list(self.member_boards),
            "is_emergency": self.is_emergency,
            "connected_load": round(self.connected_load, 2),
            "total_load": round(self.total_load, 2),
            "overloaded": self.overloaded,
            "margin": round(self.margin, 2),
            "by_type": {k.value: v.to_dict() for k, v in self.by_type.items()},
        }

    def __repr__(self) -> str:
        return f"CircuitAssignment({self.sdb_id}/{self.label}: {self.member_boards})"


class CircuitReport:
    """Result of one full assignment pass over a project."""

    def __init__(
        self,
        circuits: dict[str, list[CircuitAssignment]] | None = None,
        fixture_circuits: dict[str, str] | None = None,
        chain_trees: list[ChainTree] | None = None,
        board_loads: dict[str, LoadSummary] | None = None,
        project_load: LoadSummary | None = None,
        issues: list[Issue] | None = None,
        capacity_w: float = 0.0,
        generated_at: datetime | None = None,
    ) -> None:
        self.circuits = circuits or {}
        self.fixture_circuits = fixture_circuits or {}
        self.chain_trees = chain_trees or []
        self.board_loads = board_loads or {}
        self.project_load = project_load or LoadSummary()
        self.issues = issues or []
        self.capacity_w = capacity_w
        self.generated_at = generated_at or datetime.now(timezone.utc)

    @property
    def assignments(self) -> list[CircuitAssignment]:
        return [a for group in self.circuits.values() for a in group]

    @property
    def board_labels(self) -> dict[str, str]:
        """Switchboard id -> circuit label."""
        labels: dict[str, str] = {}
        for assignment in self.assignments:
            for board_id in assignment.member_boards:
                labels[board_id] = assignment.label
        return labels

    @property
    def overloaded(self) -> list[CircuitAssignment]:
        return [a for a in self.assignments if a.overloaded]

    @property
    def orphaned_chains(self) -> list[ChainTree]:
        return [t for t in self.chain_trees if t.orphaned]

    def circuit_of(self, element_id: str) -> str | None:
        """Circuit label of a switchboard, or the one a fixture inherits."""
        return self.board_labels.get(element_id) or self.fixture_circuits.get(element_id)

    def issues_by_category(self, category: str) -> list[Issue]:
        return [i for i in self.issues if i.category == category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": self.generated_at.isoformat(),
            "capacity_w": self.capacity_w,
            "circuits": {
                sdb: [a.to_dict() for a in group] for sdb, group in self.circuits.items()
            },
            "fixture_circuits": dict(self.fixture_circuits),
            "chains": [t.to_dict() for t in self.chain_trees],
            "board_loads": {b: s.to_dict() for b, s in self.board_loads.items()},
            "project_load": self.project_load.to_dict(),
            "summary": {
                "circuits": len(self.assignments),
                "emergency_circuits": sum(1 for a in self.assignments if a.is_emergency),
                "overloaded": [f"{a.sdb_id}/{a.label}" for a in self.overloaded],
                "orphaned_chains": len(self.orphaned_chains),
                "errors": sum(1 for i in self.issues if i.severity == "error"),
                "warnings": sum(1 for i in self.issues if i.severity == "warning"),
            },
            "issues": [i.to_dict() for i in self.issues],
        }

    def to_json(self) -> str:
        """Return structured JSON for reporting collaborators."""
        return json.dumps(self.to_dict(), indent=2, default=str)
