"""
quhua - administrative-division hierarchy and query engine.

Loads flat division records (nation -> province -> prefecture -> county ->
township -> village), links them into an in-memory tree and answers code
and name lookups with the full ancestor chain.

Main components:
- DivisionRecord: one flat record as read from the source
- HierarchyBuilder: turns records into a RegionTree
- RegionQueryEngine: code lookup and name search over a built tree
- QueryConfig: search limits and index/duplicate policies
"""

from quhua.config import DuplicatePolicy, QueryConfig
from quhua.core.region import DivisionRecord
from quhua.errors import BuildFailure, DuplicateCodeError, HierarchyCycleError, QuhuaError
from quhua.hierarchy import HierarchyBuilder, RegionNode, RegionTree
from quhua.query import RegionQueryEngine

__version__ = "0.1.0"
__all__ = [
    "BuildFailure",
    "DivisionRecord",
    "DuplicateCodeError",
    "DuplicatePolicy",
    "HierarchyBuilder",
    "HierarchyCycleError",
    "QueryConfig",
    "QuhuaError",
    "RegionNode",
    "RegionQueryEngine",
    "RegionTree",
]
