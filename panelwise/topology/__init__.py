"""Topology reconstruction: connection graphs and chains."""

from panelwise.topology.chains import (
    ChainTree,
    build_chain_trees,
    find_chains,
    find_parent,
    traverse,
)
from panelwise.topology.graph import build_graph

__all__ = [
    "ChainTree",
    "build_chain_trees",
    "build_graph",
    "find_chains",
    "find_parent",
    "traverse",
]
