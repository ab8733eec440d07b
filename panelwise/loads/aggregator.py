"""LoadAggregator — connected and used load per board, circuit, project.

Usage::

    aggregator = LoadAggregator(snapshot, DemandFactors(settings.demand_factors))
    summary = aggregator.aggregate_load(["SB1", "SB2"])
    summary.connected, summary.used
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from panelwise import config
from panelwise import issues as cat
from panelwise.issues import IssueLog
from panelwise.models.element import BOARD_KINDS, ElementKind
from panelwise.records.snapshot import Snapshot

logger = logging.getLogger(__name__)


class DemandFactors:
    """Demand factor table keyed by fixture kind.

    Kinds missing from the table get *unknown_factor* (1.0 by default,
    i.e. no diversity credit) and are flagged once per kind.
    """

    def __init__(
        self,
        factors: Mapping[str, float] | None = None,
        unknown_factor: float = config.UNKNOWN_DEMAND_FACTOR,
        issue_log: IssueLog | None = None,
    ) -> None:
        source = config.DEFAULT_DEMAND_FACTORS if factors is None else factors
        self.factors = {str(k).upper(): float(v) for k, v in source.items()}
        self.unknown_factor = unknown_factor
        self.issues = issue_log if issue_log is not None else IssueLog()
        self._flagged: set[str] = set()

    def factor(self, kind: ElementKind | str) -> float:
        key = kind.value if isinstance(kind, ElementKind) else str(kind).upper()
        value = self.factors.get(key)
        if value is not None:
            return value
        if key not in self._flagged:
            self._flagged.add(key)
            self.issues.add(
                cat.CONFIGURATION, "demand_factor_unknown",
                f"No demand factor for {key}; using {self.unknown_factor}",
            )
        return self.unknown_factor

    def to_dict(self) -> dict[str, float]:
        return dict(self.factors)


class TypeLoad:
    """Load totals for one fixture kind."""

    def __init__(self, count: int = 0, connected: float = 0.0, used: float = 0.0) -> None:
        self.count = count
        self.connected = connected
        self.used = used

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "connected": self.connected, "used": self.used}


class LoadSummary:
    """Connected / used totals with a per-kind breakdown."""

    def __init__(
        self,
        by_type: dict[ElementKind, TypeLoad] | None = None,
        fixtures: list[str] | None = None,
    ) -> None:
        self.by_type = by_type or {}
        self.fixtures = fixtures or []

    @property
    def connected(self) -> float:
        return sum(t.connected for t in self.by_type.values())

    @property
    def used(self) -> float:
        return sum(t.used for t in self.by_type.values())

    @property
    def fixture_count(self) -> int:
        return len(self.fixtures)

    def to_dict(self) -> dict[str, Any]:
        return {
            "connected": round(self.connected, 2),
            "used": round(self.used, 2),
            "fixture_count": self.fixture_count,
            "by_type": {k.value: v.to_dict() for k, v in self.by_type.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


class LoadAggregator:
    """Read-only load summation over a snapshot.

    Parameters
    ----------
    snapshot:
        Element and wire tables for this pass.
    demand_factors:
        Demand factor table.  Defaults to the built-in factors.
    """

    def __init__(
        self,
        snapshot: Snapshot,
        demand_factors: DemandFactors | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.demand_factors = demand_factors or DemandFactors(issue_log=snapshot.issues)

    def aggregate_load(self, boards: Iterable[str]) -> LoadSummary:
        """Sum fixtures wired directly to any of *boards*.

        A fixture wired to more than one of the boards is counted once.
        Fixtures with no usable load contribute 0 W.
        """
        by_type: dict[ElementKind, TypeLoad] = {}
        counted: list[str] = []
        seen: set[str] = set()
        for board_id in boards:
            for fixture in self.snapshot.fixtures_of(board_id):
                if fixture.id in seen:
                    continue
                seen.add(fixture.id)
                counted.append(fixture.id)
                watts = fixture.load_watts or 0.0
                entry = by_type.setdefault(fixture.kind, TypeLoad())
                entry.count += 1
                entry.connected += watts

        for kind, entry in by_type.items():
            entry.used = entry.connected * self.demand_factors.factor(kind)

        return LoadSummary(by_type, counted)

    def board_loads(self, board_ids: Iterable[str] | None = None) -> dict[str, LoadSummary]:
        """Per-board summaries.  Defaults to every switchboard."""
        if board_ids is None:
            board_ids = self.snapshot.ids_of_kind(ElementKind.SWITCH)
        return {board_id: self.aggregate_load([board_id]) for board_id in board_ids}

    def project_load(self) -> LoadSummary:
        """Totals over every fixture wired to any board in the project."""
        return self.aggregate_load(self.snapshot.ids_of_kind(*BOARD_KINDS))
