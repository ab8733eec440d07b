"""Connection Graph Builder."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from panelwise.models.wire import WireRecord

logger = logging.getLogger(__name__)


def build_graph(
    records: Iterable[WireRecord],
    scope: set[str] | frozenset[str] | None = None,
) -> dict[str, set[str]]:
    """Build an undirected adjacency mapping from wire records.

    Parameters
    ----------
    records:
        Active wire records.  Disabled records are skipped.
    scope:
        When given, only edges with both endpoints in *scope* are kept.

    Returns
    -------
    dict
        element id -> set of directly connected ids.  Keys appear in the
        order their first qualifying record was seen.
    """
    graph: dict[str, set[str]] = {}
    for record in records:
        if not record.is_active:
            logger.debug("Skipping disabled wire %s -> %s", record.from_id, record.to_id)
            continue
        a, b = record.from_id, record.to_id
        if a == b:
            continue
        if scope is not None and (a not in scope or b not in scope):
            continue
        graph.setdefault(a, set()).add(b)
        graph.setdefault(b, set()).add(a)
    return graph
