"""Node repository abstraction.

Defines the asynchronous data source a TreeStore lazily loads children
from. The store only knows one operation, ``fetch_children``; latency and
ordering across concurrent calls are up to the implementation.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .node import TreeNode


class NodeRepository(ABC):
    """Abstract base class for child sources.

    Subclasses implement ``fetch_children``. Callers (the store) go
    through ``fetch``, which applies the concurrency limit and keeps
    simple call statistics.
    """

    def __init__(self, max_concurrent: int = 100):
        """Initialize repository with concurrency control.

        Args:
            max_concurrent: Maximum concurrent fetch operations
        """
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self.fetch_count = 0
        self.failure_count = 0

    @abstractmethod
    async def fetch_children(self, node_id: str) -> Sequence[TreeNode]:
        """Produce the direct children of ``node_id``, in display order.

        Args:
            node_id: Identifier of the parent node

        Returns:
            Ordered sequence of child nodes

        Raises:
            Any exception to signal a fetch failure
        """
        pass

    async def fetch(self, node_id: str) -> List[TreeNode]:
        """Fetch children under the concurrency limit.

        Args:
            node_id: Identifier of the parent node

        Returns:
            List of child nodes
        """
        async with self.semaphore:
            self.fetch_count += 1
            try:
                children = await self.fetch_children(node_id)
            except Exception:
                self.failure_count += 1
                raise
        return list(children)

    async def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary of statistics (fetch count, failures, permits)
        """
        return {
            'max_concurrent': self.max_concurrent,
            'fetch_count': self.fetch_count,
            'failure_count': self.failure_count,
            'available_permits': self.semaphore._value if hasattr(self.semaphore, '_value') else None,
        }

    async def close(self):
        """Clean up repository resources.

        Override if the repository holds connections.
        """
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class InMemoryRepository(NodeRepository):
    """Dictionary-backed repository.

    Unknown ids resolve to an empty list, the way a server answers for a
    node that has no children.
    """

    def __init__(self, children_by_id: Optional[Mapping[str, Iterable[TreeNode]]] = None,
                 latency: float = 0.0, max_concurrent: int = 100):
        """
        Args:
            children_by_id: Mapping of parent id to its children
            latency: Seconds to sleep before answering each fetch
            max_concurrent: Maximum concurrent fetch operations
        """
        super().__init__(max_concurrent=max_concurrent)
        self.children_by_id: Dict[str, List[TreeNode]] = {
            key: list(value) for key, value in (children_by_id or {}).items()
        }
        self.latency = latency
        self.requested_ids: List[str] = []

    async def fetch_children(self, node_id: str) -> List[TreeNode]:
        self.requested_ids.append(node_id)
        if self.latency:
            await asyncio.sleep(self.latency)
        else:
            await asyncio.sleep(0)
        return list(self.children_by_id.get(node_id, []))

    def set_children(self, node_id: str, children: Iterable[TreeNode]):
        """Replace what a later fetch of ``node_id`` returns."""
        self.children_by_id[node_id] = list(children)


class CallableRepository(NodeRepository):
    """Adapt a plain ``async def fetch(node_id)`` function."""

    def __init__(self, fetch_fn: Callable[[str], Awaitable[Sequence[TreeNode]]],
                 max_concurrent: int = 100):
        super().__init__(max_concurrent=max_concurrent)
        self._fetch_fn = fetch_fn

    async def fetch_children(self, node_id: str) -> Sequence[TreeNode]:
        return await self._fetch_fn(node_id)

    def __repr__(self) -> str:
        name = getattr(self._fetch_fn, '__name__', repr(self._fetch_fn))
        return f"CallableRepository({name})"


def demo_root() -> TreeNode:
    """Unloaded root of the sample application tree."""
    return TreeNode(id="node-1", name="Application", level="A")


def demo_repository(latency: float = 0.0) -> InMemoryRepository:
    """Sample lazily loaded tree: an application with services and components.

    Args:
        latency: Artificial delay per fetch, in seconds

    Returns:
        InMemoryRepository serving the sample tree below ``demo_root()``
    """
    def leaf(node_id: str, name: str, level: str) -> TreeNode:
        return TreeNode(id=node_id, name=name, level=level, is_loaded=True)

    def branch(node_id: str, name: str, level: str) -> TreeNode:
        return TreeNode(id=node_id, name=name, level=level)

    return InMemoryRepository({
        "node-1": [branch("node-2", "Services", "B"), branch("node-6", "Components", "B")],
        "node-2": [branch("node-3", "Auth Service", "C"), branch("node-5", "API Gateway", "C")],
        "node-3": [leaf("node-4", "OAuth Provider", "D")],
        "node-6": [leaf("node-7", "Button", "C"), leaf("node-8", "Modal", "C")],
    }, latency=latency)
