"""
Region hierarchy builder.

Builds a RegionTree from an ordered sequence of flat division records.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from quhua.config import DuplicatePolicy, QueryConfig
from quhua.core.region import ROOT_LEVEL, DivisionRecord
from quhua.errors import BuildFailure, DuplicateCodeError
from quhua.hierarchy.index import CodeIndex
from quhua.hierarchy.tree import RegionNode, RegionTree

logger = logging.getLogger(__name__)

_PROGRESS_INTERVAL = 100_000


class HierarchyBuilder:
    """
    Builds region trees from flat records.

    Parent links are resolved through a sorted CodeIndex, so linking N
    records costs O(N log N) instead of a pairwise O(N^2) scan.
    """

    @staticmethod
    def build(
        records: Sequence[DivisionRecord],
        config: QueryConfig | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> RegionTree:
        """Build a region tree from records.

        Strategy:
        1. Create one node per record, in input order
        2. Sort (code, node) pairs into a CodeIndex
        3. Create the synthetic national root, unless the input carries
           its own top-level national (level 0) record
        4. Attach top-level records to the root and every other record
           to the node its parent code resolves to
        5. Leave records with an unresolvable parent code unattached

        Args:
            records: Division records in source order.
            config: Duplicate and index policies. Uses defaults when None.
            metadata: Optional metadata for the tree.

        Returns:
            RegionTree rooted at the synthetic national root.

        Raises:
            BuildFailure: If memory runs out while allocating nodes or the index.
            DuplicateCodeError: If codes repeat under DuplicatePolicy.REJECT.
        """
        cfg = config or QueryConfig()

        try:
            nodes = [RegionNode(record=record) for record in records]
            logger.info("Created %d region nodes", len(nodes))

            index = CodeIndex(nodes)
            root = HierarchyBuilder._find_national_record(nodes)
            synthetic_root = root is None
            if root is None:
                root = RegionNode(record=DivisionRecord.root())
        except MemoryError as exc:
            raise BuildFailure("Out of memory while allocating region nodes") from exc

        duplicate_codes = index.duplicate_codes()
        if duplicate_codes:
            if cfg.duplicate_policy is DuplicatePolicy.REJECT:
                raise DuplicateCodeError(duplicate_codes)
            logger.warning(
                "%d duplicate region codes; first record in input order wins (e.g. %s)",
                len(duplicate_codes),
                duplicate_codes[0],
            )

        orphans = HierarchyBuilder._link(nodes, index, root)
        if orphans:
            logger.warning(
                "%d regions have an unknown parent code and were left unattached",
                len(orphans),
            )

        tree = HierarchyBuilder._finish(root, nodes, orphans, duplicate_codes, cfg, synthetic_root)
        tree.metadata.update(metadata or {})
        logger.info(
            "Region tree built: %d reachable regions, %d top-level",
            tree.metadata["reachable_count"],
            len(root.children),
        )
        return tree

    @staticmethod
    def _find_national_record(nodes: list[RegionNode]) -> RegionNode | None:
        """First top-level record at the national level, if the input has one."""
        for node in nodes:
            if node.level == ROOT_LEVEL and node.record.is_top_level:
                return node
        return None

    @staticmethod
    def _link(
        nodes: list[RegionNode], index: CodeIndex, root: RegionNode
    ) -> list[RegionNode]:
        """Attach every node to its parent; return the ones with no parent found."""
        orphans: list[RegionNode] = []
        total = len(nodes)

        for position, node in enumerate(nodes, start=1):
            if node is root:
                continue
            if node.record.is_top_level:
                root.add_child(node)
            else:
                parent = index.find(node.record.parent_code)
                if parent is None or parent is node:
                    orphans.append(node)
                else:
                    parent.add_child(node)

            if position % _PROGRESS_INTERVAL == 0:
                logger.debug("Linked %d/%d regions", position, total)

        return orphans

    @staticmethod
    def _finish(
        root: RegionNode,
        nodes: list[RegionNode],
        orphans: list[RegionNode],
        duplicate_codes: list[str],
        config: QueryConfig,
        synthetic_root: bool,
    ) -> RegionTree:
        """Wrap the linked root and collect reachability figures.

        The code map is filled in input order: a duplicated code maps to its
        first reachable record, the one parent resolution attached children to.
        """
        reachable_ids = {id(node) for node in root.iter_preorder()}
        if synthetic_root:
            reachable_ids.discard(id(root))

        code_map: dict[str, RegionNode] | None = {} if config.retain_index else None
        reachable = 0
        for node in nodes:
            if id(node) not in reachable_ids:
                continue
            reachable += 1
            if code_map is not None:
                code_map.setdefault(node.code, node)

        record_count = len(nodes)
        unreachable = record_count - reachable
        if unreachable > len(orphans):
            logger.warning(
                "%d regions are unreachable through a parent chain that never "
                "reaches the root",
                unreachable - len(orphans),
            )

        return RegionTree(
            root=root,
            nodes=nodes,
            orphans=orphans,
            duplicate_codes=duplicate_codes,
            code_map=code_map,
            synthetic_root=synthetic_root,
            metadata={
                "record_count": record_count,
                "reachable_count": reachable,
                "unreachable_count": unreachable,
                "duplicate_policy": config.duplicate_policy.value,
            },
        )

    @staticmethod
    def flatten_to_records(tree: RegionTree) -> list[dict[str, Any]]:
        """
        Flatten a tree to one dictionary per reachable region, DFS order.

        Each entry includes the record fields and the hierarchy path.
        """
        return [
            {
                **node.record.to_dict(),
                "hierarchy_path": node.hierarchy_path,
                "depth": node.depth,
                "child_count": len(node.children),
            }
            for node in tree.get_all_nodes()
        ]
