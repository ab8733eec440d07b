"""Wire Record Store — normalize raw wire metadata into WireRecords.

Raw records are whatever the drawing collaborator read off a connecting
curve: a mapping with loosely named keys.  Malformed records are
rejected here so the graph builder can assume well-formed input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from panelwise import issues as cat
from panelwise.issues import IssueLog, SelfReferenceError, WireRecordError
from panelwise.models.wire import WireKind, WireRecord, WireStatus

logger = logging.getLogger(__name__)

# Canonical field -> accepted raw key spellings (compared upper-case)
_KEY_ALIASES: dict[str, tuple[str, ...]] = {
    "from_id": ("FROM_ID", "FROM"),
    "to_id": ("TO_ID", "TO"),
    "from_handle": ("FROM_HANDLE",),
    "to_handle": ("TO_HANDLE",),
    "from_type": ("FROM_TYPE",),
    "to_type": ("TO_TYPE",),
    "chain_id": ("CHAIN_ID", "CHAIN", "BATCH_ID"),
    "created_at": ("CREATED_AT", "TIMESTAMP", "TIME"),
    "kind": ("KIND", "WIRE_KIND"),
    "status": ("STATUS",),
}


def lookup_field(raw: Mapping[str, Any], field: str) -> Any:
    """Value of canonical *field* in *raw*, trying each accepted key spelling."""
    upper = {str(k).upper(): v for k, v in raw.items()}
    for key in _KEY_ALIASES[field]:
        if key in upper and upper[key] is not None:
            return upper[key]
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.debug("Out-of-range wire timestamp %r", value)
            return None
    text = str(value).strip()
    try:
        return datetime.fromtimestamp(float(text), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        pass
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable wire timestamp %r", value)
        return None


def parse_kind(value: Any) -> WireKind:
    text = _text(value).upper()
    if not text:
        return WireKind.BATCH
    try:
        return WireKind(text)
    except ValueError:
        raise WireRecordError(f"Unknown wire kind {value!r}") from None


def parse_status(value: Any) -> WireStatus:
    text = _text(value).upper()
    if not text:
        return WireStatus.ACTIVE
    if text in ("0", "OFF", "INACTIVE"):
        return WireStatus.DISABLED
    if text in ("1", "ON"):
        return WireStatus.ACTIVE
    try:
        return WireStatus(text)
    except ValueError:
        raise WireRecordError(f"Unknown wire status {value!r}") from None


def normalize_record(raw: Mapping[str, Any]) -> WireRecord:
    """Build a :class:`WireRecord` from raw wire metadata.

    Raises
    ------
    WireRecordError
        When an endpoint id is missing, both endpoints are the same
        element, or kind/status hold unknown values.
    """
    if not isinstance(raw, Mapping):
        raise WireRecordError(f"Wire record must be a mapping, got {type(raw).__name__}")

    from_id = _text(lookup_field(raw, "from_id"))
    to_id = _text(lookup_field(raw, "to_id"))
    if not from_id or not to_id:
        raise WireRecordError("Wire record is missing an endpoint id")
    if from_id == to_id:
        raise SelfReferenceError(f"Wire record connects {from_id} to itself")

    return WireRecord(
        from_id=from_id,
        to_id=to_id,
        from_handle=_text(lookup_field(raw, "from_handle")),
        to_handle=_text(lookup_field(raw, "to_handle")),
        from_type=_text(lookup_field(raw, "from_type")).upper(),
        to_type=_text(lookup_field(raw, "to_type")).upper(),
        chain_id=_text(lookup_field(raw, "chain_id")),
        created_at=_parse_timestamp(lookup_field(raw, "created_at")),
        kind=parse_kind(lookup_field(raw, "kind")),
        status=parse_status(lookup_field(raw, "status")),
    )


class WireRecordStore:
    """Ordered, de-duplicated set of wire records.

    Records keep their input order; the first record seen for an endpoint
    pair wins and later duplicates (in either direction) are dropped.
    """

    def __init__(self, issue_log: IssueLog | None = None) -> None:
        self.issues = issue_log if issue_log is not None else IssueLog()
        self._records: list[WireRecord] = []
        self._pairs: set[frozenset[str]] = set()

    @classmethod
    def from_raw(
        cls,
        raws: Iterable[Mapping[str, Any] | WireRecord],
        issue_log: IssueLog | None = None,
    ) -> WireRecordStore:
        store = cls(issue_log)
        store.ingest(raws)
        return store

    def ingest(self, raws: Iterable[Mapping[str, Any] | WireRecord]) -> int:
        """Normalize and add raw records.  Returns the number accepted."""
        accepted = 0
        for index, raw in enumerate(raws):
            if isinstance(raw, WireRecord):
                record = raw
            else:
                try:
                    record = normalize_record(raw)
                except WireRecordError as exc:
                    self._reject(index, raw, exc)
                    continue
            if self.add(record):
                accepted += 1
        return accepted

    def add(self, record: WireRecord) -> bool:
        if record.from_id == record.to_id:
            self.issues.add(
                cat.DATA_QUALITY, "wire_self_reference",
                f"Wire connects {record.from_id} to itself; ignored",
                element_id=record.from_id,
            )
            return False
        pair = record.endpoints
        if pair in self._pairs:
            self.issues.add(
                cat.DATA_QUALITY, "wire_duplicate",
                f"Duplicate wire between {record.from_id} and {record.to_id}; ignored",
                element_id=record.from_id,
            )
            return False
        self._pairs.add(pair)
        self._records.append(record)
        return True

    def _reject(self, index: int, raw: Any, exc: WireRecordError) -> None:
        element_id = ""
        if isinstance(raw, Mapping):
            element_id = _text(lookup_field(raw, "from_id")) or _text(lookup_field(raw, "to_id"))
        if isinstance(exc, SelfReferenceError):
            self.issues.add(
                cat.DATA_QUALITY, "wire_self_reference",
                f"Wire record #{index}: {exc}; ignored",
                element_id=element_id,
            )
        else:
            self.issues.add(
                cat.CONTRACT, "wire_malformed",
                f"Wire record #{index} rejected: {exc}",
                element_id=element_id,
                severity="error",
            )

    # -- Queries -----------------------------------------------------------

    @property
    def records(self) -> list[WireRecord]:
        return list(self._records)

    def active(self, kind: WireKind | str | None = None) -> list[WireRecord]:
        """Active records in input order, optionally of one kind."""
        wanted = WireKind(kind.upper()) if kind else None
        return [
            r for r in self._records
            if r.is_active and (wanted is None or r.kind is wanted)
        ]

    def by_chain_id(self) -> dict[str, list[WireRecord]]:
        """Group active records by their authoring batch id."""
        groups: dict[str, list[WireRecord]] = {}
        for record in self.active():
            groups.setdefault(record.chain_id, []).append(record)
        return groups

    def wires_of(self, element_id: str) -> list[WireRecord]:
        return [r for r in self.active() if element_id in r.endpoints]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)
