"""Circuit assignment — numbering switchboard chains under each SDB."""

from panelwise.circuits.engine import CircuitEngine
from panelwise.circuits.report import CircuitAssignment, CircuitReport

__all__ = ["CircuitAssignment", "CircuitEngine", "CircuitReport"]
