"""lazytreelib - Lazily loaded, immutable-snapshot tree store.

lazytreelib keeps an in-memory hierarchy whose children are fetched on
demand from an asynchronous repository, and supports insert, delete,
rename and relocate while keeping ids unique and the tree acyclic.

Quick start:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from lazytreelib import TreeStore, demo_root, demo_repository

    store = TreeStore(demo_root(), repository=demo_repository())
    await store.load_children("node-1")
    store.relocate("node-6", "node-2", "before")
━━━━━━━━━━━━━━━━━━━━━━━━━━

Every operation returns the new snapshot; old snapshots never change.
"""

__version__ = "0.1.0"

from .core import (
    TreeNode,
    IdGenerator,
    CounterIdGenerator,
    UuidIdGenerator,
    NodeRepository,
    InMemoryRepository,
    CallableRepository,
    demo_repository,
    demo_root,
    find_node,
    compute_depth,
    is_ancestor,
)
from .config import StoreConfig, DEFAULT_LEVELS
from .exceptions import (
    TreeStoreError,
    NodeNotFoundError,
    InvalidOperationError,
    FetchError,
    ConfigurationError,
)
from .error_policies import (
    ErrorPolicy,
    FailFastPolicy,
    ContinueOnErrorsPolicy,
    CollectErrorsPolicy,
    ThresholdPolicy,
)
from .store import TreeStore, Position
from .session import TreeSession
from .api import (
    tree_from_dict,
    tree_to_dict,
    count_nodes,
    get_leaf_nodes,
    get_tree_stats,
    expand_all,
)

__all__ = [
    "__version__",
    # Model
    "TreeNode",
    "Position",
    # Store
    "TreeStore",
    "TreeSession",
    "StoreConfig",
    "DEFAULT_LEVELS",
    # Ids
    "IdGenerator",
    "CounterIdGenerator",
    "UuidIdGenerator",
    # Repositories
    "NodeRepository",
    "InMemoryRepository",
    "CallableRepository",
    "demo_repository",
    "demo_root",
    # Queries
    "find_node",
    "compute_depth",
    "is_ancestor",
    # Errors
    "TreeStoreError",
    "NodeNotFoundError",
    "InvalidOperationError",
    "FetchError",
    "ConfigurationError",
    "ErrorPolicy",
    "FailFastPolicy",
    "ContinueOnErrorsPolicy",
    "CollectErrorsPolicy",
    "ThresholdPolicy",
    # High-level API
    "tree_from_dict",
    "tree_to_dict",
    "count_nodes",
    "get_leaf_nodes",
    "get_tree_stats",
    "expand_all",
]
