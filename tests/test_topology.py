"""Tests for the connection graph builder and chain discovery.

Covers: build_graph, traverse, find_chains, find_parent, build_chain_trees,
and the partition / symmetry / rebuild properties.
"""

from __future__ import annotations

import random

from panelwise.issues import IssueLog
from panelwise.models.element import Element, ElementKind
from panelwise.models.wire import WireRecord, WireStatus
from panelwise.topology.chains import (
    build_chain_trees,
    find_chains,
    find_parent,
    traverse,
)
from panelwise.topology.graph import build_graph


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _wires(*pairs: tuple[str, str], status: WireStatus = WireStatus.ACTIVE) -> list[WireRecord]:
    return [WireRecord(from_id=a, to_id=b, status=status) for a, b in pairs]


def _elements(**kinds: ElementKind) -> dict[str, Element]:
    return {eid: Element(id=eid, name=eid, kind=kind) for eid, kind in kinds.items()}


def _random_records(seed: int, nodes: int = 30, edges: int = 40) -> list[WireRecord]:
    rng = random.Random(seed)
    ids = [f"N{i}" for i in range(nodes)]
    records = []
    for _ in range(edges):
        a, b = rng.sample(ids, 2)
        records.append(WireRecord(from_id=a, to_id=b))
    return records


# ---------------------------------------------------------------------------
# build_graph
# ---------------------------------------------------------------------------

class TestBuildGraph:

    def test_empty(self):
        assert build_graph([]) == {}

    def test_undirected(self):
        g = build_graph(_wires(("A", "B")))
        assert g == {"A": {"B"}, "B": {"A"}}

    def test_duplicates_idempotent(self):
        g = build_graph(_wires(("A", "B"), ("B", "A"), ("A", "B")))
        assert g == {"A": {"B"}, "B": {"A"}}

    def test_disabled_skipped(self):
        g = build_graph(_wires(("A", "B"), status=WireStatus.DISABLED))
        assert g == {}

    def test_scope_drops_outside_edges(self):
        g = build_graph(_wires(("A", "B"), ("B", "C"), ("C", "D")), scope={"A", "B", "C"})
        assert g == {"A": {"B"}, "B": {"A", "C"}, "C": {"B"}}

    def test_scope_empty(self):
        assert build_graph(_wires(("A", "B")), scope=set()) == {}

    def test_key_order_is_first_seen(self):
        g = build_graph(_wires(("X", "Y"), ("A", "X"), ("B", "C")))
        assert list(g) == ["X", "Y", "A", "B", "C"]

    def test_does_not_mutate_input(self):
        records = _wires(("A", "B"))
        build_graph(records)
        assert len(records) == 1

    def test_symmetry_property(self):
        for seed in range(5):
            g = build_graph(_random_records(seed))
            for a, neighbours in g.items():
                for b in neighbours:
                    assert a in g[b]


# ---------------------------------------------------------------------------
# Chain discovery
# ---------------------------------------------------------------------------

class TestFindChains:

    def test_empty(self):
        assert find_chains({}) == []

    def test_two_components(self):
        g = build_graph(_wires(("SB1", "SB2"), ("SB4", "SB5")))
        assert find_chains(g) == [["SB1", "SB2"], ["SB4", "SB5"]]

    def test_depth_first_order(self):
        g = build_graph(_wires(("A", "C"), ("A", "B"), ("B", "D")))
        assert find_chains(g) == [["A", "B", "D", "C"]]

    def test_cycle_terminates(self):
        g = build_graph(_wires(("A", "B"), ("B", "C"), ("C", "A")))
        chains = find_chains(g)
        assert len(chains) == 1
        assert sorted(chains[0]) == ["A", "B", "C"]

    def test_self_loop_skipped(self):
        chains = find_chains({"A": {"A", "B"}, "B": {"A"}})
        assert chains == [["A", "B"]]

    def test_isolated_key(self):
        assert find_chains({"A": set()}) == [["A"]]

    def test_long_chain_no_recursion_limit(self):
        pairs = [(f"N{i}", f"N{i + 1}") for i in range(5000)]
        chains = find_chains(build_graph(_wires(*pairs)))
        assert len(chains) == 1
        assert len(chains[0]) == 5001

    def test_partition_property(self):
        for seed in range(10):
            g = build_graph(_random_records(seed))
            chains = find_chains(g)
            flat = [n for chain in chains for n in chain]
            assert len(flat) == len(set(flat))
            assert set(flat) == set(g)

    def test_idempotent_rebuild(self):
        records = _random_records(42)
        first = find_chains(build_graph(records))
        second = find_chains(build_graph(records))
        assert first == second

    def test_partition_independent_of_input_order(self):
        records = _random_records(7)
        shuffled = list(records)
        random.Random(1).shuffle(shuffled)
        a = {frozenset(c) for c in find_chains(build_graph(records))}
        b = {frozenset(c) for c in find_chains(build_graph(shuffled))}
        assert a == b

    def test_traverse_respects_visited(self):
        g = build_graph(_wires(("A", "B"), ("B", "C")))
        visited = {"B"}
        assert traverse(g, "A", visited) == ["A"]
        assert visited == {"A", "B"}


# ---------------------------------------------------------------------------
# Parents and chain trees
# ---------------------------------------------------------------------------

class TestChainTrees:

    def test_find_parent_first_in_chain_order(self):
        elements = _elements(SB1=ElementKind.SWITCH, SDB1=ElementKind.SUB, MDB=ElementKind.MAIN)
        assert find_parent(["SB1", "SDB1", "MDB"], elements) == "SDB1"

    def test_find_parent_none(self):
        elements = _elements(SB1=ElementKind.SWITCH, L1=ElementKind.LIGHT)
        assert find_parent(["SB1", "L1"], elements) is None

    def test_find_parent_custom_kinds(self):
        elements = _elements(SB1=ElementKind.SWITCH, L1=ElementKind.LIGHT)
        assert find_parent(["L1", "SB1"], elements, kinds={ElementKind.SWITCH}) == "SB1"

    def test_find_parent_unknown_ids_skipped(self):
        elements = _elements(SDB1=ElementKind.SUB)
        assert find_parent(["GHOST", "SDB1"], elements) == "SDB1"

    def test_tree_with_parent(self):
        elements = _elements(SDB1=ElementKind.SUB, SB1=ElementKind.SWITCH, L1=ElementKind.LIGHT)
        g = build_graph(_wires(("SB1", "SDB1"), ("SB1", "L1")))
        trees = build_chain_trees(g, elements)
        assert len(trees) == 1
        assert trees[0].parent == "SDB1"
        assert trees[0].descendants == ["SB1", "L1"]
        assert not trees[0].orphaned

    def test_orphaned_chain_reported(self):
        elements = _elements(SB9=ElementKind.SWITCH, L9=ElementKind.LIGHT)
        log = IssueLog()
        trees = build_chain_trees(build_graph(_wires(("SB9", "L9"))), elements, log)
        assert trees[0].orphaned
        assert trees[0].to_dict()["parent"] is None
        assert log.codes() == ["chain_orphaned"]

    def test_ambiguous_parents_listed(self):
        elements = _elements(SDB1=ElementKind.SUB, MDB=ElementKind.MAIN)
        log = IssueLog()
        trees = build_chain_trees(build_graph(_wires(("SDB1", "MDB"))), elements, log)
        assert trees[0].parent == "SDB1"
        assert trees[0].ambiguous_parents == ["MDB"]
        assert log.codes() == ["chain_ambiguous_parent"]

    def test_members_and_json(self):
        elements = _elements(SDB1=ElementKind.SUB, SB1=ElementKind.SWITCH)
        tree = build_chain_trees(build_graph(_wires(("SDB1", "SB1"))), elements)[0]
        assert tree.members == ["SDB1", "SB1"]
        assert '"orphaned": false' in tree.to_json()
