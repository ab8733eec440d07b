"""Data model for boards, fixtures and wire records."""

from panelwise.models.element import (
    BOARD_KINDS,
    DISTRIBUTION_KINDS,
    FIXTURE_KINDS,
    Element,
    ElementKind,
)
from panelwise.models.wire import WireKind, WireRecord, WireStatus

__all__ = [
    "BOARD_KINDS",
    "DISTRIBUTION_KINDS",
    "FIXTURE_KINDS",
    "Element",
    "ElementKind",
    "WireKind",
    "WireRecord",
    "WireStatus",
]
