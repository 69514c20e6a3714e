"""Presentation-facing session over a TreeStore.

A view layer needs two things the tree itself does not model: which
nodes are expanded, and a single entry point per user gesture. TreeSession
provides both. Expansion is kept as a set of node ids beside the store, so
collapsing a node never touches the tree data.
"""

import logging
from typing import List, Optional, Set, Tuple, Union

from .core.node import TreeNode
from .store import Position, TreeStore

logger = logging.getLogger(__name__)


class TreeSession:
    """Expansion state plus the operations a view invokes."""

    def __init__(self, store: TreeStore, expanded: Optional[Set[str]] = None):
        self.store = store
        self._expanded: Set[str] = set(expanded or ())

    @property
    def root(self) -> TreeNode:
        return self.store.root

    # Expansion

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self._expanded

    @property
    def expanded_ids(self) -> Set[str]:
        return set(self._expanded)

    async def expand(self, node_id: str) -> TreeNode:
        """Mark ``node_id`` expanded, loading its children on first expand."""
        if not self.store.contains(node_id):
            return self.store.root
        self._expanded.add(node_id)
        if self.store.needs_load(node_id):
            await self.store.load_children(node_id)
        return self.store.root

    def collapse(self, node_id: str) -> TreeNode:
        self._expanded.discard(node_id)
        return self.store.root

    async def toggle_expand(self, node_id: str) -> TreeNode:
        """Flip expansion of ``node_id``.

        Expanding an unloaded node that is not already loading triggers a
        lazy load; a second toggle while the fetch is in flight only
        collapses the node again.
        """
        if node_id in self._expanded:
            return self.collapse(node_id)
        return await self.expand(node_id)

    # Operations

    async def load(self, node_id: str) -> TreeNode:
        return await self.store.load_children(node_id)

    def add(self, parent_id: str, name: str) -> TreeNode:
        return self.store.add_child(parent_id, name)

    def remove(self, node_id: str) -> TreeNode:
        """Remove a subtree and forget the expansion state of its nodes."""
        node = self.store.find_node(node_id)
        root = self.store.remove_node(node_id)
        if node is not None and not self.store.contains(node_id):
            self._expanded.difference_update(node.ids())
        return root

    def rename(self, node_id: str, name: str) -> TreeNode:
        return self.store.rename_node(node_id, name)

    def move(self, drag_id: str, target_id: str,
             position: Union[Position, str] = Position.INSIDE) -> TreeNode:
        """Relocate a subtree; expansion state of a dropped subtree is forgotten."""
        root = self.store.relocate(drag_id, target_id, position)
        if not self.store.contains(drag_id):
            self.prune_expanded()
        return root

    # Rendering support

    def visible_rows(self) -> List[Tuple[TreeNode, int]]:
        """Flattened ``(node, depth)`` rows an outline view would show.

        The root is always shown; a node's children are shown only while
        the node is expanded.
        """
        rows = []
        stack = [(self.store.root, 0)]
        while stack:
            node, depth = stack.pop()
            rows.append((node, depth))
            if node.id in self._expanded:
                for child in reversed(node.children):
                    stack.append((child, depth + 1))
        return rows

    def prune_expanded(self) -> int:
        """Drop expansion entries whose nodes no longer exist.

        Returns:
            Number of entries removed
        """
        existing = set(self.store.root.ids())
        stale = self._expanded - existing
        self._expanded -= stale
        if stale:
            logger.debug("Pruned %d stale expanded ids", len(stale))
        return len(stale)
