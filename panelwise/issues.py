"""Issue taxonomy shared by every panelwise stage.

Nothing in the analysis pipeline raises for bad drawing data.  Problems
are recorded as :class:`Issue` objects, logged, and the offending item is
excluded while processing continues.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Categories
DATA_QUALITY = "data_quality"
TOPOLOGY = "topology"
CONFIGURATION = "configuration"
CONTRACT = "contract"
CAPACITY = "capacity"

CATEGORIES = (DATA_QUALITY, TOPOLOGY, CONFIGURATION, CONTRACT, CAPACITY)


class PanelwiseError(Exception):
    """Base class for panelwise exceptions."""


class WireRecordError(PanelwiseError, ValueError):
    """Raised when a raw wire record violates the caller contract."""


class SelfReferenceError(WireRecordError):
    """Raised when both ends of a wire record name the same element."""


class SettingsError(PanelwiseError, ValueError):
    """Raised for invalid configuration values."""


class Issue:
    """A single reported problem."""

    def __init__(
        self,
        category: str,
        code: str,
        message: str,
        element_id: str = "",
        severity: str = "warning",
    ) -> None:
        self.category = category
        self.code = code
        self.message = message
        self.element_id = element_id
        self.severity = severity  # "error", "warning", "info"

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "severity": self.severity,
            "message": self.message,
            "element_id": self.element_id,
        }

    def __repr__(self) -> str:
        return f"Issue({self.category}/{self.code}: {self.message})"


class IssueLog:
    """Ordered collection of issues with logging on record."""

    def __init__(self) -> None:
        self._issues: list[Issue] = []

    def add(
        self,
        category: str,
        code: str,
        message: str,
        element_id: str = "",
        severity: str = "warning",
    ) -> Issue:
        issue = Issue(category, code, message, element_id=element_id, severity=severity)
        self._issues.append(issue)
        level = {"error": logging.ERROR, "warning": logging.WARNING}.get(severity, logging.INFO)
        logger.log(level, "[%s] %s", code, message)
        return issue

    def extend(self, issues: list[Issue]) -> None:
        self._issues.extend(issues)

    def by_category(self, category: str) -> list[Issue]:
        return [i for i in self._issues if i.category == category]

    def codes(self) -> list[str]:
        return [i.code for i in self._issues]

    def __iter__(self):
        return iter(self._issues)

    def __len__(self) -> int:
        return len(self._issues)

    def to_list(self) -> list[Issue]:
        return list(self._issues)
