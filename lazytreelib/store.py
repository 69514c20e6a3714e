"""Tree store: owner of the current snapshot.

The TreeStore holds exactly one root TreeNode. Every operation computes a
new snapshot from the current one and publishes it; previous snapshots
are never modified, so a reader holding one always sees a consistent
tree.

All mutations are synchronous. ``load_children`` is the only coroutine:
it publishes a "loading" snapshot, awaits the repository, then applies
the result by node id against whatever snapshot is current when the
fetch resolves. Edits made while the fetch is in flight are therefore
kept, and a fetch for a node removed in the meantime is discarded.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional, Sequence, Set, Union

from .config import StoreConfig
from .core.ids import CounterIdGenerator, IdGenerator
from .core.node import TreeNode
from .core.operations import (
    collect_ids,
    compute_depth,
    copy_subtree,
    find_node,
    insert_child,
    insert_sibling,
    is_ancestor,
    map_node,
    remove_subtree,
)
from .core.repository import InMemoryRepository, NodeRepository
from .error_policies import ErrorPolicy, FailFastPolicy
from .exceptions import (
    ConfigurationError,
    InvalidOperationError,
    NodeNotFoundError,
    TreeStoreError,
)


class Position(Enum):
    """Where a relocated node lands relative to its target."""
    BEFORE = "before"   # Previous sibling of target
    AFTER = "after"     # Next sibling of target
    INSIDE = "inside"   # Last child of target

    @classmethod
    def coerce(cls, value: Union['Position', str]) -> 'Position':
        """Accept a Position or its string value.

        Raises:
            ValueError: For an unknown position string
        """
        if isinstance(value, cls):
            return value
        return cls(value)


Listener = Callable[[TreeNode], None]


def _with_loading_flags(node: TreeNode, in_flight: Set[str]) -> TreeNode:
    """Set ``is_loading`` on ``node``'s subtree to match the outstanding fetches."""
    children = tuple(_with_loading_flags(child, in_flight) for child in node.children)
    loading = node.id in in_flight
    if loading == node.is_loading and all(a is b for a, b in zip(children, node.children)):
        return node
    return node.replace(children=children, is_loading=loading)


class TreeStore:
    """Lazily loaded, immutable-snapshot tree with structural editing.

    Example:
        store = TreeStore(demo_root(), repository=demo_repository())
        await store.load_children("node-1")
        store.add_child("node-2", "Billing")
        store.relocate("node-6", "node-2", Position.BEFORE)
    """

    def __init__(self,
                 root: TreeNode,
                 repository: Optional[NodeRepository] = None,
                 id_generator: Optional[IdGenerator] = None,
                 config: Optional[StoreConfig] = None,
                 error_policy: Optional[ErrorPolicy] = None):
        """
        Initialize the store.

        Args:
            root: Initial root snapshot
            repository: Source of lazily loaded children (default: empty
                in-memory repository, every node loads as childless)
            id_generator: Id source for locally created nodes (default:
                counter built from the config's prefix and start)
            config: Store configuration
            error_policy: What to do with fetch failures (default:
                FailFastPolicy, the failure propagates)

        Raises:
            ConfigurationError: If ``config`` fails validation
        """
        self.config = config or StoreConfig()
        errors = self.config.validate()
        if errors:
            raise ConfigurationError(errors)

        self.repository = repository or InMemoryRepository(
            max_concurrent=self.config.max_concurrent_fetches
        )
        self.id_generator = id_generator or CounterIdGenerator(
            prefix=self.config.id_prefix, start=self.config.id_start
        )
        self.error_policy = error_policy or FailFastPolicy()

        self._root = root
        self._listeners: List[Listener] = []
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # Snapshot access

    @property
    def root(self) -> TreeNode:
        """The current snapshot."""
        return self._root

    def snapshot(self) -> TreeNode:
        """Return the current snapshot (read-only by construction)."""
        return self._root

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(new_root)`` after every published change.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, new_root: TreeNode) -> TreeNode:
        if new_root is not self._root:
            self._root = new_root
            for listener in list(self._listeners):
                listener(new_root)
        return self._root

    def _noop(self, error: TreeStoreError) -> TreeNode:
        """Report a refused operation and hand back the unchanged snapshot."""
        if self.config.strict:
            raise error
        level = logging.INFO if self.config.verbose else logging.DEBUG
        self.logger.log(level, "%s", error)
        return self._root

    # Queries

    def find_node(self, node_id: str) -> Optional[TreeNode]:
        return find_node(self._root, node_id)

    def contains(self, node_id: str) -> bool:
        return self.find_node(node_id) is not None

    def compute_depth(self, node_id: str) -> int:
        """Depth of ``node_id`` (root = 0; a missing id also yields 0)."""
        return compute_depth(self._root, node_id)

    def is_ancestor(self, ancestor_id: str, descendant_id: str) -> bool:
        """True iff ``descendant_id`` lies in ``ancestor_id``'s subtree (reflexive)."""
        return is_ancestor(self._root, ancestor_id, descendant_id)

    def needs_load(self, node_id: str) -> bool:
        """True if ``load_children`` would actually call the repository."""
        node = self.find_node(node_id)
        return node is not None and not node.is_loaded and not node.is_loading

    # Lazy load

    async def load_children(self, node_id: str) -> TreeNode:
        """Fetch and attach the children of ``node_id``.

        Does nothing if the node is missing, already loaded, or already
        loading. On failure the node's ``is_loading`` flag is cleared and
        ``is_loaded`` is left as it was, then the error policy decides
        whether the exception reaches the caller.

        Args:
            node_id: Node to load

        Returns:
            The snapshot current after the load finished
        """
        node = self.find_node(node_id)
        if node is None:
            return self._noop(NodeNotFoundError(node_id, 'load_children'))
        if node.is_loaded or node.is_loading:
            self.logger.debug("Skipping load of %r (loaded=%s, loading=%s)",
                              node_id, node.is_loaded, node.is_loading)
            return self._root

        previous_ids = {child.id for child in node.children}
        self._commit(map_node(self._root, node_id, lambda n: n.replace(is_loading=True)))

        try:
            fetched = await self.repository.fetch(node_id)
        except asyncio.CancelledError:
            self._clear_loading(node_id)
            raise
        except Exception as error:
            self._clear_loading(node_id)
            self.logger.debug("Fetching children of %r failed: %r", node_id, error)
            await self.error_policy.handle(error, 'fetch_children', node_id)
            return self._root

        return self._commit(self._apply_fetched(node_id, fetched, previous_ids))

    def _clear_loading(self, node_id: str):
        self._commit(map_node(self._root, node_id, lambda n: n.replace(is_loading=False)))

    def _apply_fetched(self, node_id: str, fetched: Sequence[TreeNode],
                       previous_ids: Set[str]) -> TreeNode:
        """Merge a fetch result into the current snapshot."""
        current = self.find_node(node_id)
        if current is None:
            self.logger.debug("Discarding %d fetched children of removed node %r",
                              len(fetched), node_id)
            return self._root

        # Children attached while the fetch was in flight stay, after the fetched ones
        local = [child for child in current.children if child.id not in previous_ids]

        taken = set(collect_ids(self._root)) - set(current.ids())
        taken.add(node_id)
        for child in local:
            taken.update(child.ids())

        # Descendants with their own fetch outstanding; that fetch clears the flag
        in_flight = {n.id for n in current.walk() if n.is_loading and n.id != node_id}

        accepted = []
        for child in fetched:
            child_ids = child.ids()
            if any(child_id in taken for child_id in child_ids):
                self.logger.warning("Dropping fetched node %r under %r: id already in tree",
                                    child.id, node_id)
                continue
            taken.update(child_ids)
            accepted.append(_with_loading_flags(child, in_flight))

        children = tuple(accepted + local)
        return map_node(self._root, node_id, lambda n: n.replace(
            children=children, is_loaded=True, is_loading=False
        ))

    # Local mutations

    def _fresh_id(self) -> str:
        existing = set(collect_ids(self._root))
        node_id = self.id_generator.next_id()
        while node_id in existing:
            node_id = self.id_generator.next_id()
        return node_id

    def create_child(self, parent_id: str, name: str) -> Optional[TreeNode]:
        """Append a new node named ``name`` under ``parent_id``.

        The new node's level comes from the parent's depth and it starts
        loaded with no children. The parent becomes loaded as well, so a
        later expand will not fetch it from the repository.

        Returns:
            The new node, or None if ``parent_id`` does not exist
        """
        if self.find_node(parent_id) is None:
            self._noop(NodeNotFoundError(parent_id, 'add_child'))
            return None

        depth = compute_depth(self._root, parent_id)
        child = TreeNode(
            id=self._fresh_id(),
            name=name,
            level=self.config.level_for_depth(depth + 1),
            is_loaded=True,
        )
        self._commit(insert_child(self._root, parent_id, child))
        return child

    def add_child(self, parent_id: str, name: str) -> TreeNode:
        """Like ``create_child`` but returns the resulting snapshot."""
        self.create_child(parent_id, name)
        return self._root

    def remove_node(self, node_id: str) -> TreeNode:
        """Delete ``node_id`` and its whole subtree. The root is irremovable."""
        result = remove_subtree(self._root, node_id)
        if result is None:
            return self._noop(InvalidOperationError(
                f"Refusing to remove root node {node_id!r}", 'remove_node'))
        if result is self._root:
            return self._noop(NodeNotFoundError(node_id, 'remove_node'))
        return self._commit(result)

    def rename_node(self, node_id: str, new_name: str) -> TreeNode:
        """Change a node's display name; id and children are untouched."""
        node = self.find_node(node_id)
        if node is None:
            return self._noop(NodeNotFoundError(node_id, 'rename_node'))
        if node.name == new_name:
            return self._root
        return self._commit(map_node(self._root, node_id, lambda n: n.replace(name=new_name)))

    # Relocation

    def relocate(self, drag_id: str, target_id: str,
                 position: Union[Position, str] = Position.INSIDE) -> TreeNode:
        """Move ``drag_id`` (with its subtree) next to or into ``target_id``.

        Identity and content of the moved subtree are preserved; only its
        position changes. Levels are not recomputed.

        When the target cannot take the node (it is missing, or is the root
        with ``before``/``after``), the removal still happens and the node
        is not re-inserted. In strict mode that case raises instead, before
        anything changes.

        Args:
            drag_id: Node to move
            target_id: Reference node
            position: ``before``/``after`` the target, or ``inside`` it
                as the last child

        Returns:
            The new snapshot, or the unchanged one if the move is refused

        Raises:
            ValueError: If ``position`` is not a known Position value
        """
        position = Position.coerce(position)
        root = self._root

        # Also covers drag_id == target_id
        if is_ancestor(root, drag_id, target_id):
            return self._noop(InvalidOperationError(
                f"Cannot move {drag_id!r} into its own subtree ({target_id!r})", 'relocate'))

        dragged = find_node(root, drag_id)
        if dragged is None:
            return self._noop(NodeNotFoundError(drag_id, 'relocate'))
        if drag_id == root.id:
            return self._noop(InvalidOperationError(
                f"Refusing to move root node {drag_id!r}", 'relocate'))

        refusal = None
        if find_node(root, target_id) is None:
            refusal = NodeNotFoundError(target_id, 'relocate')
        elif position is not Position.INSIDE and target_id == root.id:
            refusal = InvalidOperationError(
                f"Root node {target_id!r} has no siblings", 'relocate')
        if refusal is not None and self.config.strict:
            raise refusal

        moved = copy_subtree(dragged)
        pruned = remove_subtree(root, drag_id)

        if refusal is not None:
            self.logger.warning("%s; %r was removed without being re-inserted", refusal, drag_id)
            return self._commit(pruned)
        if position is Position.INSIDE:
            result = insert_child(pruned, target_id, moved)
        else:
            result = insert_sibling(pruned, target_id, moved, after=position is Position.AFTER)
        return self._commit(result)

    def __repr__(self) -> str:
        return (f"TreeStore(root={self._root.id!r}, nodes={len(collect_ids(self._root))}, "
                f"repository={self.repository.__class__.__name__})")
