"""Element — a distribution board or a fixture on the drawing.

Boards route power (main, sub-distribution, switch); fixtures consume it.
Elements are read-only inputs to the analysis; circuit labels computed
for switchboards are handed back to the drawing by
:meth:`panelwise.circuits.engine.CircuitEngine.commit`.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class ElementKind(str, Enum):
    """Element categories."""

    MAIN = "MAIN"
    SUB = "SUB"
    SWITCH = "SWITCH"
    LIGHT = "LIGHT"
    FAN = "FAN"
    SOCKET = "SOCKET"
    AC = "AC"
    OTHER = "OTHER"


BOARD_KINDS = frozenset({ElementKind.MAIN, ElementKind.SUB, ElementKind.SWITCH})
DISTRIBUTION_KINDS = frozenset({ElementKind.MAIN, ElementKind.SUB})
FIXTURE_KINDS = frozenset({
    ElementKind.LIGHT, ElementKind.FAN, ElementKind.SOCKET,
    ElementKind.AC, ElementKind.OTHER,
})


class Element(BaseModel):
    """A board or fixture."""

    id: str
    name: str = ""
    kind: ElementKind = ElementKind.OTHER

    load_watts: float | None = None
    """Declared load.  Fixtures only; ``None`` when missing or unparseable."""

    circuit_id: str | None = None
    """Circuit label.  Set on switchboards only."""

    is_emergency: bool = False

    @property
    def is_board(self) -> bool:
        return self.kind in BOARD_KINDS

    @property
    def is_fixture(self) -> bool:
        return self.kind in FIXTURE_KINDS

    @property
    def is_switchboard(self) -> bool:
        return self.kind is ElementKind.SWITCH

    @property
    def is_distribution_board(self) -> bool:
        return self.kind in DISTRIBUTION_KINDS
