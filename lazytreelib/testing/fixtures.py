"""Test fixtures for lazytreelib consumers.

These helpers give test suites a stable way to inspect and check store
snapshots without reaching into TreeStore internals.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

from ..core.node import TreeNode
from ..core.operations import find_parent, iter_with_depth


class TreeTestHelper:
    """Public test fixture for snapshot verification.

    Example:
        helper = TreeTestHelper(store)
        store.relocate("a", "b", "inside")
        assert helper.children_of("b") == ["a"]
        assert helper.check_invariants() == []
    """

    def __init__(self, store):
        """Initialize with a TreeStore.

        Args:
            store: The store to observe (always reads its current snapshot)
        """
        self._store = store

    @property
    def root(self) -> TreeNode:
        return self._store.root

    def all_ids(self) -> List[str]:
        return self.root.ids()

    def children_of(self, node_id: str) -> Optional[List[str]]:
        """Child ids of ``node_id`` in order, or None if it is missing."""
        node = self.root.find(node_id)
        if node is None:
            return None
        return [child.id for child in node.children]

    def parent_of(self, node_id: str) -> Optional[str]:
        parent = find_parent(self.root, node_id)
        return parent.id if parent is not None else None

    def outline(self) -> List[str]:
        """Indented ``id`` lines, one per node, for readable assertions."""
        return ["  " * depth + node.id for node, depth in iter_with_depth(self.root)]

    def get_summary(self) -> Dict[str, Any]:
        """Returns high-level snapshot state for testing.

        Returns:
            Dictionary containing total_nodes, loaded_count,
            loading_count and root_id
        """
        nodes = list(self.root.walk())
        return {
            'total_nodes': len(nodes),
            'loaded_count': sum(1 for node in nodes if node.is_loaded),
            'loading_count': sum(1 for node in nodes if node.is_loading),
            'root_id': self.root.id,
        }

    def duplicate_ids(self) -> List[str]:
        counts = Counter(self.all_ids())
        return sorted(node_id for node_id, count in counts.items() if count > 1)

    def check_invariants(self, root_id: Optional[str] = None) -> List[str]:
        """Check the structural invariants of the current snapshot.

        Args:
            root_id: Expected root id, if the caller wants it checked

        Returns:
            List of violations (empty if the snapshot is consistent)
        """
        problems = []
        duplicates = self.duplicate_ids()
        if duplicates:
            problems.append(f"duplicate ids: {duplicates}")

        if root_id is not None and self.root.id != root_id:
            problems.append(f"root id changed: {self.root.id!r} != {root_id!r}")

        # A node reachable through itself would loop forever in walk(),
        # so detect cycles on object identity along each path
        stack = [(self.root, frozenset())]
        while stack:
            node, path = stack.pop()
            if id(node) in path:
                problems.append(f"cycle through {node.id!r}")
                continue
            for child in node.children:
                stack.append((child, path | {id(node)}))

        return problems
