"""Chain discovery — connected components of the connection graph."""

from __future__ import annotations

import json
import logging
from collections.abc import Collection, Mapping
from typing import Any

from panelwise import issues as cat
from panelwise.issues import IssueLog
from panelwise.models.element import DISTRIBUTION_KINDS, Element, ElementKind

logger = logging.getLogger(__name__)


def traverse(
    graph: Mapping[str, Collection[str]],
    start: str,
    visited: set[str] | None = None,
) -> list[str]:
    """Depth-first walk from *start*, returning ids in visit order.

    Uses an explicit stack.  Neighbours are pushed in reverse sorted order
    so they are popped in sorted order.  Ids already in *visited* are
    skipped; *visited* is updated in place.
    """
    if visited is None:
        visited = set()
    order: list[str] = []
    stack = [start]
    while stack:
        node = stack.pop()
        if node in visited:
            continue
        visited.add(node)
        order.append(node)
        for neighbour in sorted(graph.get(node, ()), reverse=True):
            if neighbour != node and neighbour not in visited:
                stack.append(neighbour)
    return order


def find_chains(graph: Mapping[str, Collection[str]]) -> list[list[str]]:
    """Partition the graph's elements into maximal connected chains.

    Keys are visited in the mapping's iteration order, so a graph built
    from the same record list always yields the same chains in the same
    order.
    """
    visited: set[str] = set()
    chains: list[list[str]] = []
    for node in graph:
        if node in visited:
            continue
        chains.append(traverse(graph, node, visited))
    return chains


def find_parent(
    chain: list[str],
    elements: Mapping[str, Element],
    kinds: Collection[ElementKind] = DISTRIBUTION_KINDS,
) -> str | None:
    """Return the first element of *chain* whose kind is in *kinds*."""
    for element_id in chain:
        element = elements.get(element_id)
        if element is not None and element.kind in kinds:
            return element_id
    return None


class ChainTree:
    """A chain arranged as parent board plus descendants."""

    def __init__(
        self,
        parent: str | None,
        descendants: list[str],
        ambiguous_parents: list[str] | None = None,
    ) -> None:
        self.parent = parent
        self.descendants = descendants
        self.ambiguous_parents = ambiguous_parents or []

    @property
    def orphaned(self) -> bool:
        return self.parent is None

    @property
    def members(self) -> list[str]:
        return ([self.parent] if self.parent else []) + self.descendants

    def to_dict(self) -> dict[str, Any]:
        return {
            "parent": self.parent,
            "orphaned": self.orphaned,
            "descendants": list(self.descendants),
            "ambiguous_parents": list(self.ambiguous_parents),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def build_chain_trees(
    graph: Mapping[str, Collection[str]],
    elements: Mapping[str, Element],
    issue_log: IssueLog | None = None,
    kinds: Collection[ElementKind] = DISTRIBUTION_KINDS,
) -> list[ChainTree]:
    """Arrange every chain as a tree rooted at its distribution board.

    When several boards qualify, the first in discovery order becomes the
    parent and the rest are listed in ``ambiguous_parents``.
    """
    trees: list[ChainTree] = []
    for chain in find_chains(graph):
        parent = find_parent(chain, elements, kinds)
        others = [
            eid for eid in chain
            if eid != parent and eid in elements and elements[eid].kind in kinds
        ]
        if issue_log is not None:
            if parent is None:
                issue_log.add(
                    cat.TOPOLOGY, "chain_orphaned",
                    f"Chain starting at {chain[0]} ({len(chain)} elements) has no distribution board",
                    element_id=chain[0],
                )
            elif others:
                issue_log.add(
                    cat.TOPOLOGY, "chain_ambiguous_parent",
                    f"Chain has several distribution boards; using {parent}, "
                    f"also found {', '.join(others)}",
                    element_id=parent,
                    severity="info",
                )
        descendants = [eid for eid in chain if eid != parent]
        trees.append(ChainTree(parent, descendants, others))
    return trees
