"""Pure query and rebuild functions over TreeNode snapshots.

Nothing here mutates its input. Rebuild functions copy the nodes on the
path from the root to the change and share every other subtree with the
input snapshot. When nothing changes, the input root object itself is
returned, so callers can detect no-ops with an identity check.
"""

from typing import Callable, Iterator, List, Optional, Tuple

from .node import TreeNode


# Query operations

def find_node(root: TreeNode, node_id: str) -> Optional[TreeNode]:
    """Depth-first search for ``node_id``.

    Args:
        root: Snapshot root
        node_id: Identifier to look for

    Returns:
        The matching node, or None
    """
    return root.find(node_id)


def compute_depth(root: TreeNode, node_id: str) -> int:
    """Distance from ``root`` to ``node_id`` (root = 0).

    A missing id yields 0, the same as the root. Callers should check
    existence first when the difference matters.
    """
    for node, depth in iter_with_depth(root):
        if node.id == node_id:
            return depth
    return 0


def is_ancestor(root: TreeNode, ancestor_id: str, descendant_id: str) -> bool:
    """True iff ``ancestor_id`` exists and its subtree contains ``descendant_id``.

    Reflexive: an existing node counts as its own ancestor.
    """
    ancestor = find_node(root, ancestor_id)
    if ancestor is None:
        return False
    return ancestor.find(descendant_id) is not None


def find_parent(root: TreeNode, node_id: str) -> Optional[TreeNode]:
    """Return the parent of ``node_id``, or None for the root or a missing id."""
    for node in root.walk():
        for child in node.children:
            if child.id == node_id:
                return node
    return None


def iter_with_depth(root: TreeNode, start_depth: int = 0) -> Iterator[Tuple[TreeNode, int]]:
    """Yield ``(node, depth)`` pairs in pre-order."""
    stack = [(root, start_depth)]
    while stack:
        node, depth = stack.pop()
        yield node, depth
        for child in reversed(node.children):
            stack.append((child, depth + 1))


def collect_ids(root: TreeNode) -> List[str]:
    """All identifiers in the snapshot, pre-order."""
    return root.ids()


# Structural rebuilds

def map_node(root: TreeNode, node_id: str,
             fn: Callable[[TreeNode], TreeNode]) -> TreeNode:
    """Replace the node ``node_id`` with ``fn(node)``.

    Args:
        root: Snapshot root
        node_id: Node to transform
        fn: Function producing the replacement node

    Returns:
        New root, or ``root`` itself if ``node_id`` is absent or ``fn``
        returned the node unchanged
    """
    if root.id == node_id:
        return fn(root)

    children = root.children
    for index, child in enumerate(children):
        updated = map_node(child, node_id, fn)
        if updated is not child:
            return root.replace(children=children[:index] + (updated,) + children[index + 1:])
    return root


def remove_subtree(root: TreeNode, node_id: str) -> Optional[TreeNode]:
    """Delete ``node_id`` and everything beneath it.

    Returns:
        None when ``node_id`` is the root itself (there is no tree left),
        otherwise the new root (``root`` itself when ``node_id`` is absent)
    """
    if root.id == node_id:
        return None

    children = root.children
    for index, child in enumerate(children):
        if child.id == node_id:
            return root.replace(children=children[:index] + children[index + 1:])
        updated = remove_subtree(child, node_id)
        if updated is not child:
            return root.replace(children=children[:index] + (updated,) + children[index + 1:])
    return root


def copy_subtree(node: TreeNode) -> TreeNode:
    """Structurally independent copy of ``node`` and all descendants.

    Ids, names, levels and flags are preserved exactly.
    """
    return node.replace(children=tuple(copy_subtree(child) for child in node.children))


def insert_child(root: TreeNode, parent_id: str, child: TreeNode,
                 index: Optional[int] = None, mark_loaded: bool = True) -> TreeNode:
    """Insert ``child`` among ``parent_id``'s children.

    Args:
        root: Snapshot root
        parent_id: Receiving node
        child: Node (with subtree) to insert
        index: Position among the children; None appends at the end
        mark_loaded: Also set the parent's ``is_loaded`` flag

    Returns:
        New root, or ``root`` itself if ``parent_id`` is absent
    """
    def attach(parent: TreeNode) -> TreeNode:
        children = list(parent.children)
        if index is None:
            children.append(child)
        else:
            children.insert(index, child)
        changes = {'children': tuple(children)}
        if mark_loaded:
            changes['is_loaded'] = True
        return parent.replace(**changes)

    return map_node(root, parent_id, attach)


def insert_sibling(root: TreeNode, target_id: str, node: TreeNode,
                   after: bool) -> TreeNode:
    """Insert ``node`` immediately before or after ``target_id``.

    Returns:
        New root, or ``root`` itself when the target is missing or is the
        root (which has no siblings)
    """
    parent = find_parent(root, target_id)
    if parent is None:
        return root
    index = next(i for i, child in enumerate(parent.children) if child.id == target_id)
    if after:
        index += 1
    return insert_child(root, parent.id, node, index=index, mark_loaded=False)
