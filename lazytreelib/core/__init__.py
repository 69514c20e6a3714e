"""Core abstractions for lazytreelib.

This module defines the snapshot node, the repository contract, id
generation and the pure tree algorithms the store is built on.
"""

from .node import TreeNode
from .ids import IdGenerator, CounterIdGenerator, UuidIdGenerator
from .repository import (
    NodeRepository,
    InMemoryRepository,
    CallableRepository,
    demo_repository,
    demo_root,
)
from .operations import (
    find_node,
    compute_depth,
    is_ancestor,
    find_parent,
    iter_with_depth,
    collect_ids,
    map_node,
    remove_subtree,
    copy_subtree,
    insert_child,
    insert_sibling,
)

__all__ = [
    # Node
    'TreeNode',
    # Ids
    'IdGenerator',
    'CounterIdGenerator',
    'UuidIdGenerator',
    # Repositories
    'NodeRepository',
    'InMemoryRepository',
    'CallableRepository',
    'demo_repository',
    'demo_root',
    # Queries
    'find_node',
    'compute_depth',
    'is_ancestor',
    'find_parent',
    'iter_with_depth',
    'collect_ids',
    # Rebuilds
    'map_node',
    'remove_subtree',
    'copy_subtree',
    'insert_child',
    'insert_sibling',
]
