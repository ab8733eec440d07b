"""DrawingSource interface and an in-memory implementation.

A drawing source is the collaborator that owns the host drawing: it
lists connection curves, reads and writes element attributes, and
enumerates blocks by type.  CAD bindings implement
:class:`DrawingSource`; :class:`InMemoryDrawing` backs tests and scripts.
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Mapping
from typing import Any

from panelwise import config
from panelwise.issues import WireRecordError
from panelwise.records.store import lookup_field, parse_kind, parse_status

logger = logging.getLogger(__name__)


class DrawingSource(abc.ABC):
    """Abstract drawing collaborator."""

    @abc.abstractmethod
    def list_wires(
        self,
        kind: str | None = None,
        status: str | None = None,
    ) -> list[Mapping[str, Any]]:
        """Return raw wire metadata, optionally filtered by kind/status."""

    @abc.abstractmethod
    def get_attribute(self, element_id: str, name: str) -> str | None:
        """Read a named attribute off an element, or None if absent."""

    @abc.abstractmethod
    def set_attribute(self, element_id: str, name: str, value: str) -> None:
        """Write a named attribute onto an element."""

    @abc.abstractmethod
    def list_elements_by_type(self, element_type: str) -> list[str]:
        """Return ids of elements whose TYPE attribute equals *element_type*."""

    def element_types(self) -> list[str]:
        """Raw TYPE values to enumerate when loading a snapshot.

        Sources that can list their own types override this.
        """
        return list(config.DEFAULT_TYPE_ALIASES)


class InMemoryDrawing(DrawingSource):
    """Drawing held in plain dicts.  Always available.

    Parameters
    ----------
    elements:
        element id -> attribute dict (``NAME``, ``TYPE``, ``LOAD`` ...).
    wires:
        Raw wire metadata mappings.
    """

    def __init__(
        self,
        elements: Mapping[str, Mapping[str, Any]] | None = None,
        wires: list[Mapping[str, Any]] | None = None,
    ) -> None:
        self.elements: dict[str, dict[str, Any]] = {
            eid: dict(attrs) for eid, attrs in (elements or {}).items()
        }
        self.wires: list[dict[str, Any]] = [dict(w) for w in (wires or [])]
        self.writes: list[tuple[str, str, str]] = []

    def add_element(self, element_id: str, **attributes: Any) -> None:
        self.elements[element_id] = {k.upper(): v for k, v in attributes.items()}

    def add_wire(self, from_id: str, to_id: str, **metadata: Any) -> None:
        wire: dict[str, Any] = {"from_id": from_id, "to_id": to_id}
        wire.update(metadata)
        self.wires.append(wire)

    def list_wires(
        self,
        kind: str | None = None,
        status: str | None = None,
    ) -> list[Mapping[str, Any]]:
        wanted_kind = parse_kind(kind) if kind is not None else None
        wanted_status = parse_status(status) if status is not None else None
        result = []
        for wire in self.wires:
            if wanted_kind is not None or wanted_status is not None:
                # Unreadable kind/status never matches a filter
                try:
                    wire_kind = parse_kind(lookup_field(wire, "kind"))
                    wire_status = parse_status(lookup_field(wire, "status"))
                except WireRecordError:
                    continue
                if wanted_kind is not None and wire_kind is not wanted_kind:
                    continue
                if wanted_status is not None and wire_status is not wanted_status:
                    continue
            result.append(dict(wire))
        return result

    def get_attribute(self, element_id: str, name: str) -> str | None:
        attrs = self.elements.get(element_id)
        if attrs is None:
            return None
        value = attrs.get(name.upper())
        return None if value is None else str(value)

    def set_attribute(self, element_id: str, name: str, value: str) -> None:
        if element_id not in self.elements:
            raise KeyError(f"Unknown element {element_id}")
        self.elements[element_id][name.upper()] = value
        self.writes.append((element_id, name.upper(), value))

    def list_elements_by_type(self, element_type: str) -> list[str]:
        wanted = element_type.upper()
        return [
            eid for eid, attrs in self.elements.items()
            if str(attrs.get(config.ATTR_TYPE, "")).upper() == wanted
        ]

    def element_types(self) -> list[str]:
        seen: list[str] = []
        for attrs in self.elements.values():
            raw = str(attrs.get(config.ATTR_TYPE, "")).upper()
            if raw not in seen:
                seen.append(raw)
        return seen
