"""
Hierarchy module - turns flat division records into a navigable tree.
"""

from quhua.hierarchy.builder import HierarchyBuilder
from quhua.hierarchy.index import CodeIndex
from quhua.hierarchy.tree import AncestorEntry, RegionNode, RegionTree, ancestor_chain

__all__ = [
    "AncestorEntry",
    "CodeIndex",
    "HierarchyBuilder",
    "RegionNode",
    "RegionTree",
    "ancestor_chain",
]
