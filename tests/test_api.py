"""Tests for the Panelwise facade.

Runs the worked examples end to end against an in-memory drawing.
"""

from __future__ import annotations

import json
import logging

import pytest

from panelwise import InMemoryDrawing, Panelwise
from panelwise.settings import AnalysisSettings


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def drawing() -> InMemoryDrawing:
    d = InMemoryDrawing()
    d.add_element("SDB1", name="SDB-1", type="SDB")
    for sb in ("SB1", "SB2", "SB4"):
        d.add_element(sb, name=sb, type="SB")
    d.add_wire("SDB1", "SB1", chain_id="k1", kind="BATCH")
    d.add_wire("SB1", "SB2", chain_id="k2", kind="CHAIN")
    d.add_wire("SDB1", "SB4", chain_id="k1", kind="BATCH")
    return d


@pytest.fixture
def pw(drawing, monkeypatch) -> Panelwise:
    monkeypatch.delenv("PANELWISE_CIRCUIT_CAPACITY_W", raising=False)
    monkeypatch.delenv("PANELWISE_EMERGENCY_PREFIX", raising=False)
    monkeypatch.delenv("PANELWISE_LOG_LEVEL", raising=False)
    return Panelwise(drawing)


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------

class TestWorkedExamples:

    def test_two_circuits(self, pw):
        circuits, _ = pw.assign_circuits("SDB1")
        assert [(c.label, c.member_boards) for c in circuits] == [
            ("C1", ["SB1", "SB2"]),
            ("C2", ["SB4"]),
        ]

    def test_emergency_chain(self, pw, drawing):
        drawing.add_element("E1", name="E-LIGHT-01", type="LIGHT", load=60)
        drawing.add_wire("SB2", "E1")
        circuits, _ = pw.assign_circuits("SDB1")
        assert circuits[0].label == "EC1"
        assert circuits[0].member_boards == ["SB1", "SB2"]
        assert circuits[1].label == "C1"

    def test_five_lights(self, pw, drawing):
        for i in range(5):
            drawing.add_element(f"L{i}", name=f"LIGHT-{i}", type="LIGHT", load=100)
            drawing.add_wire("SB1", f"L{i}")
        summary = pw.aggregate_load(["SB1"])
        assert summary.connected == pytest.approx(500.0)
        assert summary.used == pytest.approx(300.0)

    def test_overload(self, pw):
        result = pw.check_capacity(900.0, 800.0)
        assert result.overloaded
        assert result.margin == pytest.approx(-100.0)

    def test_configured_capacity(self, drawing):
        pw = Panelwise(drawing, settings=AnalysisSettings(circuit_capacity_w=1000.0))
        assert not pw.check_capacity(900.0).overloaded

    def test_dangling_reference(self, pw, drawing):
        drawing.add_wire("SB4", "MISSING")
        report = pw.analyze()
        assert [c.label for c in report.circuits["SDB1"]] == ["C1", "C2"]
        dangling = [i for i in report.issues if i.code == "wire_dangling"]
        assert len(dangling) == 1
        assert dangling[0].category == "data_quality"


# ---------------------------------------------------------------------------
# Facade operations
# ---------------------------------------------------------------------------

class TestFacade:

    def test_analyze_and_commit(self, pw, drawing):
        report = pw.analyze()
        assert pw.commit(report) == 6
        assert drawing.get_attribute("SB2", "CKT") == "C1"
        assert drawing.get_attribute("SB4", "CKT") == "C2"

    def test_snapshot_is_fresh_each_time(self, pw, drawing):
        assert len(pw.snapshot().wires()) == 3
        drawing.add_element("SB5", name="SB5", type="SB")
        drawing.add_wire("SDB1", "SB5")
        assert len(pw.snapshot().wires()) == 4
        circuits, _ = pw.assign_circuits("SDB1")
        assert [c.label for c in circuits] == ["C1", "C2", "C3"]

    def test_assign_circuits_returns_issues(self, pw, drawing):
        drawing.add_element("SDB2", name="SDB-2", type="SDB")
        drawing.add_wire("SB4", "GHOST")
        circuits, issues = pw.assign_circuits("SDB2")
        assert circuits == []
        assert issues.codes() == ["wire_dangling", "board_no_switchboards"]

    def test_assign_circuits_reports_overload(self, drawing):
        drawing.add_element("L1", name="LIGHT-1", type="LIGHT", load=1000)
        drawing.add_wire("SB4", "L1")
        pw = Panelwise(drawing, settings=AnalysisSettings(circuit_capacity_w=500.0))
        circuits, issues = pw.assign_circuits("SDB1")
        assert [c.label for c in circuits if c.overloaded] == ["C2"]
        assert [i.code for i in issues.by_category("capacity")] == ["circuit_overloaded"]

    def test_log_level_applied(self, drawing):
        package_logger = logging.getLogger("panelwise")
        previous = package_logger.level
        try:
            Panelwise(drawing, settings=AnalysisSettings(log_level="debug"))
            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)

    def test_log_level_untouched_by_default(self, drawing):
        package_logger = logging.getLogger("panelwise")
        previous = package_logger.level
        Panelwise(drawing, settings=AnalysisSettings())
        assert package_logger.level == previous

    def test_chain_trees(self, pw, drawing):
        drawing.add_element("SB7", name="SB7", type="SB")
        drawing.add_element("L7", name="L7", type="LIGHT", load=5)
        drawing.add_wire("SB7", "L7")
        trees, issues = pw.chain_trees()
        assert [t.parent for t in trees] == ["SDB1", None]
        assert issues.codes() == ["chain_orphaned"]

    def test_project_load(self, pw, drawing):
        drawing.add_element("A1", name="AC-1", type="AC", load=1000)
        drawing.add_wire("SB4", "A1")
        assert pw.project_load().used == pytest.approx(700.0)

    def test_settings_from_project_root(self, drawing, tmp_path, monkeypatch):
        monkeypatch.delenv("PANELWISE_CIRCUIT_CAPACITY_W", raising=False)
        target = tmp_path / ".panelwise" / "settings.json"
        target.parent.mkdir()
        target.write_text(json.dumps({"circuit_capacity_w": 50}), encoding="utf-8")
        drawing.add_element("L1", name="LIGHT-1", type="LIGHT", load=100)
        drawing.add_wire("SB1", "L1")
        report = Panelwise(drawing, tmp_path).analyze()
        assert [a.label for a in report.overloaded] == ["C1"]
