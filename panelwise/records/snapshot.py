"""Snapshot — batch-loaded, read-only view of elements and wires.

Everything the analysis needs is fetched from the drawing source once,
up front.  After loading, all queries run in memory and never call back
into the drawing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from panelwise import config
from panelwise import issues as cat
from panelwise.issues import IssueLog
from panelwise.models.element import FIXTURE_KINDS, Element, ElementKind
from panelwise.models.wire import WireKind, WireRecord
from panelwise.records.source import DrawingSource
from panelwise.records.store import WireRecordStore
from panelwise.settings import AnalysisSettings
from panelwise.topology.graph import build_graph

logger = logging.getLogger(__name__)


def parse_load(value: Any) -> float | None:
    """Parse a LOAD attribute into watts.  Returns None when unusable."""
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = float(value)
    else:
        text = str(value).strip().upper().removesuffix("W").strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if number != number or number < 0:  # NaN or negative
        return None
    return number


def is_emergency_flag(value: Any) -> bool:
    if value is None:
        return False
    return str(value).strip().upper() in config.EMERGENCY_FLAG_VALUES


def build_element(
    element_id: str,
    attributes: Mapping[str, Any],
    settings: AnalysisSettings,
    issue_log: IssueLog,
) -> Element:
    """Create an :class:`Element` from raw drawing attributes.

    Emergency status is decided here, once: an explicit SPARE1 flag wins,
    otherwise the configured name prefix applies.
    """
    attrs = {str(k).upper(): v for k, v in attributes.items()}
    name = str(attrs.get(config.ATTR_NAME) or "").strip()
    raw_type = str(attrs.get(config.ATTR_TYPE) or "").strip().upper()

    kind_name = settings.type_aliases.get(raw_type)
    if not raw_type:
        issue_log.add(
            cat.DATA_QUALITY, "element_missing_type",
            f"Element {element_id} has no TYPE; treated as OTHER",
            element_id=element_id,
        )
        kind = ElementKind.OTHER
    elif kind_name is None or kind_name not in ElementKind.__members__:
        issue_log.add(
            cat.DATA_QUALITY, "element_unknown_type",
            f"Element {element_id} has unknown TYPE {raw_type!r}; treated as OTHER",
            element_id=element_id,
        )
        kind = ElementKind.OTHER
    else:
        kind = ElementKind(kind_name)

    spare = attrs.get(config.ATTR_EMERGENCY)
    if spare is not None and str(spare).strip():
        emergency = is_emergency_flag(spare)
    else:
        prefix = settings.emergency_prefix.upper()
        emergency = bool(prefix) and name.upper().startswith(prefix)

    load: float | None = None
    circuit: str | None = None
    if kind in FIXTURE_KINDS:
        raw_load = attrs.get(config.ATTR_LOAD)
        load = parse_load(raw_load)
        if load is None:
            issue_log.add(
                cat.DATA_QUALITY, "fixture_bad_load",
                f"Fixture {element_id} has missing or non-numeric LOAD {raw_load!r}; counted as 0 W",
                element_id=element_id,
            )
    elif kind is ElementKind.SWITCH:
        circuit = str(attrs.get(config.ATTR_CIRCUIT) or "").strip() or None

    return Element(
        id=element_id,
        name=name or element_id,
        kind=kind,
        load_watts=load,
        circuit_id=circuit,
        is_emergency=emergency,
    )


class Snapshot:
    """Immutable element table + wire table for one analysis pass.

    Wires whose endpoints are missing from the element table are dropped
    and reported as dangling references.
    """

    def __init__(
        self,
        elements: Iterable[Element],
        store: WireRecordStore,
        issue_log: IssueLog | None = None,
    ) -> None:
        self.issues = issue_log if issue_log is not None else store.issues
        self._elements: dict[str, Element] = {}
        for element in elements:
            if element.id in self._elements:
                self.issues.add(
                    cat.DATA_QUALITY, "element_duplicate",
                    f"Element {element.id} listed twice; keeping the first",
                    element_id=element.id,
                )
                continue
            self._elements[element.id] = element
        self.store = store
        self._wires = self._resolve(store.active())
        self._graph = build_graph(self._wires)

    def _resolve(self, records: list[WireRecord]) -> list[WireRecord]:
        resolved: list[WireRecord] = []
        for record in records:
            missing = [e for e in (record.from_id, record.to_id) if e not in self._elements]
            if missing:
                self.issues.add(
                    cat.DATA_QUALITY, "wire_dangling",
                    f"Wire {record.from_id} -> {record.to_id} references unknown "
                    f"element(s) {', '.join(missing)}; dropped",
                    element_id=missing[0],
                )
                continue
            resolved.append(record)
        return resolved

    # -- Construction ------------------------------------------------------

    @classmethod
    def load(
        cls,
        source: DrawingSource,
        settings: AnalysisSettings | None = None,
    ) -> Snapshot:
        """Read every element and wire from *source* once."""
        settings = settings or AnalysisSettings()
        issue_log = IssueLog()

        elements: list[Element] = []
        seen: set[str] = set()
        for raw_type in source.element_types():
            for element_id in source.list_elements_by_type(raw_type):
                if element_id in seen:
                    continue
                seen.add(element_id)
                attributes = {
                    name: source.get_attribute(element_id, name)
                    for name in (
                        config.ATTR_NAME, config.ATTR_TYPE, config.ATTR_LOAD,
                        config.ATTR_EMERGENCY, config.ATTR_CIRCUIT,
                    )
                }
                elements.append(build_element(element_id, attributes, settings, issue_log))

        store = WireRecordStore.from_raw(source.list_wires(), issue_log)
        snapshot = cls(elements, store, issue_log)
        logger.info(
            "Loaded snapshot: %d elements, %d active wires, %d issues",
            len(snapshot._elements), len(snapshot._wires), len(issue_log),
        )
        return snapshot

    @classmethod
    def from_data(
        cls,
        elements: Iterable[Element],
        wires: Iterable[Mapping[str, Any] | WireRecord],
    ) -> Snapshot:
        """Build a snapshot from already-typed elements and raw wires."""
        issue_log = IssueLog()
        store = WireRecordStore.from_raw(wires, issue_log)
        return cls(elements, store, issue_log)

    # -- Element queries ---------------------------------------------------

    def element(self, element_id: str) -> Element | None:
        return self._elements.get(element_id)

    @property
    def elements(self) -> list[Element]:
        return list(self._elements.values())

    def ids_of_kind(self, *kinds: ElementKind) -> list[str]:
        return [e.id for e in self._elements.values() if e.kind in kinds]

    def kind_of(self, element_id: str) -> ElementKind | None:
        element = self._elements.get(element_id)
        return element.kind if element else None

    # -- Wire queries ------------------------------------------------------

    def wires(self, kind: WireKind | str | None = None) -> list[WireRecord]:
        """Active, resolved wires in first-seen order."""
        if not kind:
            return list(self._wires)
        wanted = WireKind(kind.upper())
        return [w for w in self._wires if w.kind is wanted]

    def graph(self, scope: set[str] | None = None) -> dict[str, set[str]]:
        """Fresh connection graph over all active wires, optionally scoped."""
        if scope is None:
            return {k: set(v) for k, v in self._graph.items()}
        return build_graph(self._wires, scope)

    def neighbours(self, element_id: str) -> list[str]:
        """Directly wired elements, sorted for deterministic iteration."""
        return sorted(self._graph.get(element_id, ()))

    def fixtures_of(self, board_id: str) -> list[Element]:
        """Fixtures wired directly to *board_id* (one hop)."""
        result = []
        for other in self.neighbours(board_id):
            element = self._elements[other]
            if element.is_fixture:
                result.append(element)
        return result

    def downstream_fixtures(self, board_id: str) -> list[Element]:
        """Fixtures reachable from *board_id* through fixture-to-fixture wires.

        Picks up daisy-chained fixtures.  The walk expands through fixtures
        only, never through another board.
        """
        found: list[Element] = []
        visited = {board_id}
        stack = list(reversed(self.neighbours(board_id)))
        while stack:
            node = stack.pop()
            if node in visited:
                continue
            visited.add(node)
            element = self._elements[node]
            if not element.is_fixture:
                continue
            found.append(element)
            stack.extend(n for n in reversed(self.neighbours(node)) if n not in visited)
        return found

    def is_connected(self, element_id: str) -> bool:
        return bool(self._graph.get(element_id))
