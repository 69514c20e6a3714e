"""Immutable tree node snapshot.

A TreeNode is a plain data container. Every change to the tree produces
new TreeNode objects along the path to the change; nodes that did not
change are shared between snapshots, so a snapshot handed to a reader
never changes underneath it.
"""

from dataclasses import dataclass, field, replace
from typing import Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class TreeNode:
    """One entry in the hierarchy.

    ``is_loaded`` separates "no children" from "children never fetched":
    an unloaded node with an empty ``children`` tuple has simply not been
    asked yet.
    """

    id: str
    name: str
    level: str = "A"
    children: Tuple['TreeNode', ...] = field(default_factory=tuple)
    is_loaded: bool = False
    is_loading: bool = False

    def __post_init__(self):
        # Accept any sequence but always store a tuple
        if not isinstance(self.children, tuple):
            object.__setattr__(self, 'children', tuple(self.children))

    @classmethod
    def create(cls, id: str, name: Optional[str] = None, level: str = "A",
               children: Sequence['TreeNode'] = (), is_loaded: Optional[bool] = None) -> 'TreeNode':
        """Build a node, treating a node given children as loaded.

        Args:
            id: Unique identifier
            name: Display label (defaults to the id)
            level: Level tag
            children: Initial children
            is_loaded: Explicit loaded flag; inferred from ``children`` if None

        Returns:
            New TreeNode
        """
        if is_loaded is None:
            is_loaded = bool(children)
        return cls(id=id, name=id if name is None else name, level=level,
                   children=tuple(children), is_loaded=is_loaded)

    def is_leaf(self) -> bool:
        """True if the node currently has no children."""
        return not self.children

    def replace(self, **changes) -> 'TreeNode':
        """Return a copy of this node with ``changes`` applied."""
        return replace(self, **changes)

    def walk(self) -> Iterator['TreeNode']:
        """Iterate over this node and all descendants, pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def ids(self) -> List[str]:
        """Identifiers of this node and all descendants, pre-order."""
        return [node.id for node in self.walk()]

    def find(self, node_id: str) -> Optional['TreeNode']:
        """Return the first node in this subtree with ``node_id``."""
        for node in self.walk():
            if node.id == node_id:
                return node
        return None

    def __repr__(self) -> str:
        flags = []
        if self.is_loaded:
            flags.append("loaded")
        if self.is_loading:
            flags.append("loading")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        return (f"{self.__class__.__name__}(id={self.id!r}, name={self.name!r}, "
                f"level={self.level!r}, children={len(self.children)}){suffix}")
