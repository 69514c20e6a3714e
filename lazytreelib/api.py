"""High-level API for lazytreelib.

This module provides simple functions for common jobs around a tree
store: converting snapshots to and from plain dictionaries, computing
statistics, and eagerly loading a whole tree.
"""

import asyncio
from typing import Any, Dict, List, Mapping, Optional

from .core.node import TreeNode
from .core.operations import iter_with_depth
from .store import TreeStore


def tree_from_dict(data: Mapping[str, Any]) -> TreeNode:
    """Build a snapshot from a nested dictionary.

    Accepts the JSON shape used by web front ends: ``id``, ``name``,
    ``level``, ``children``, ``isLoaded``, ``isLoading``. Snake case
    flag names are accepted too.

    Args:
        data: Nested mapping describing the root node

    Returns:
        Root TreeNode

    Raises:
        ValueError: If a node has no ``id``
    """
    if 'id' not in data:
        raise ValueError(f"Node data without 'id': {dict(data)!r}")

    children = tuple(tree_from_dict(child) for child in data.get('children') or ())
    return TreeNode(
        id=str(data['id']),
        name=data.get('name', str(data['id'])),
        level=data.get('level', 'A'),
        children=children,
        is_loaded=bool(data.get('isLoaded', data.get('is_loaded', False))),
        is_loading=bool(data.get('isLoading', data.get('is_loading', False))),
    )


def tree_to_dict(node: TreeNode) -> Dict[str, Any]:
    """Inverse of ``tree_from_dict``, using the camel case flag names."""
    return {
        'id': node.id,
        'name': node.name,
        'level': node.level,
        'children': [tree_to_dict(child) for child in node.children],
        'isLoaded': node.is_loaded,
        'isLoading': node.is_loading,
    }


def count_nodes(root: TreeNode) -> int:
    """Count all nodes in the snapshot, root included."""
    return sum(1 for _ in root.walk())


def get_leaf_nodes(root: TreeNode) -> List[TreeNode]:
    """All nodes without children, in pre-order."""
    return [node for node in root.walk() if node.is_leaf()]


def get_tree_stats(root: TreeNode) -> Dict[str, int]:
    """Summary statistics of a snapshot.

    Returns:
        Dictionary with ``total_nodes``, ``max_depth``, ``loaded``,
        ``loading``, ``leaves`` and ``unloaded``
    """
    stats = {
        'total_nodes': 0,
        'max_depth': 0,
        'loaded': 0,
        'loading': 0,
        'unloaded': 0,
        'leaves': 0,
    }
    for node, depth in iter_with_depth(root):
        stats['total_nodes'] += 1
        stats['max_depth'] = max(stats['max_depth'], depth)
        if node.is_loaded:
            stats['loaded'] += 1
        else:
            stats['unloaded'] += 1
        if node.is_loading:
            stats['loading'] += 1
        if node.is_leaf():
            stats['leaves'] += 1
    return stats


async def expand_all(store: TreeStore, max_depth: Optional[int] = None) -> TreeNode:
    """Load every reachable node, level by level.

    Nodes of one level are fetched concurrently. Loads go through
    ``store.load_children``, so the store's error policy applies: with
    the default FailFastPolicy the first failure propagates once every
    load of its level has finished.

    Args:
        store: Store to fill
        max_depth: Deepest level whose nodes get loaded (root = 0);
            None loads everything

    Returns:
        The snapshot after loading
    """
    level = [store.root.id]
    depth = 0
    while level and (max_depth is None or depth <= max_depth):
        pending = [node_id for node_id in level if store.needs_load(node_id)]
        if pending:
            results = await asyncio.gather(
                *(store.load_children(node_id) for node_id in pending),
                return_exceptions=True,
            )
            # Every sibling load has settled before the first failure surfaces
            for result in results:
                if isinstance(result, BaseException):
                    raise result

        next_level = []
        for node_id in level:
            node = store.find_node(node_id)
            if node is not None:
                next_level.extend(child.id for child in node.children)
        level = next_level
        depth += 1
    return store.root
