"""Tests for relocating nodes, including cycle prevention."""

import pytest

from lazytreelib import (
    TreeNode,
    TreeStore,
    Position,
    StoreConfig,
    InvalidOperationError,
    NodeNotFoundError,
)
from lazytreelib.testing import TreeTestHelper


def flat_store(*ids):
    root = TreeNode.create("r", children=[TreeNode.create(i, level="B") for i in ids])
    return TreeStore(root)


def children(store, node_id):
    return TreeTestHelper(store).children_of(node_id)


class TestRelocationScenarios:

    def test_move_inside_sibling(self):
        store = flat_store("a", "b")
        store.relocate("a", "b", "inside")
        assert children(store, "r") == ["b"]
        assert children(store, "b") == ["a"]

    def test_move_before(self):
        store = flat_store("a", "b", "c")
        store.relocate("c", "a", "before")
        assert children(store, "r") == ["c", "a", "b"]

    def test_move_after(self):
        store = flat_store("a", "b", "c")
        store.relocate("a", "b", Position.AFTER)
        assert children(store, "r") == ["b", "a", "c"]

    def test_move_after_last(self):
        store = flat_store("a", "b", "c")
        store.relocate("a", "c", "after")
        assert children(store, "r") == ["b", "c", "a"]

    def test_move_inside_appends_at_end_and_marks_loaded(self):
        root = TreeNode.create("r", children=[
            TreeNode.create("a"),
            TreeNode.create("b", children=[TreeNode.create("b1")]),
            TreeNode.create("c"),
        ])
        store = TreeStore(root)
        assert store.find_node("c").is_loaded is False

        store.relocate("a", "b", "inside")
        assert children(store, "b") == ["b1", "a"]

        store.relocate("b1", "c", "inside")
        assert store.find_node("c").is_loaded is True

    def test_move_across_branches(self):
        root = TreeNode.create("r", children=[
            TreeNode.create("a", children=[TreeNode.create("a1"), TreeNode.create("a2")]),
            TreeNode.create("b", children=[TreeNode.create("b1")]),
        ])
        store = TreeStore(root)
        store.relocate("a2", "b1", "before")
        assert children(store, "a") == ["a1"]
        assert children(store, "b") == ["a2", "b1"]

    def test_default_position_is_inside(self):
        store = flat_store("a", "b")
        store.relocate("a", "b")
        assert children(store, "b") == ["a"]


class TestCyclePrevention:

    def test_move_into_own_child_is_noop(self):
        root = TreeNode.create("r", children=[
            TreeNode.create("a", children=[TreeNode.create("b")]),
        ])
        store = TreeStore(root)
        before = store.root

        assert store.relocate("a", "b", "inside") is before
        assert store.root is before

    def test_move_into_deep_descendant_is_noop(self):
        deep = TreeNode.create("a", children=[
            TreeNode.create("a1", children=[TreeNode.create("a1x")]),
        ])
        store = TreeStore(TreeNode.create("r", children=[deep]))
        before = store.root
        for position in Position:
            assert store.relocate("a", "a1x", position) is before

    def test_move_onto_itself_is_noop(self):
        store = flat_store("a", "b")
        before = store.root
        for position in ("before", "after", "inside"):
            assert store.relocate("a", "a", position) is before

    def test_move_root_is_noop(self):
        store = flat_store("a", "b")
        before = store.root
        assert store.relocate("r", "a", "inside") is before

    def test_strict_mode_reports_cycle(self):
        root = TreeNode.create("r", children=[
            TreeNode.create("a", children=[TreeNode.create("b")]),
        ])
        store = TreeStore(root, config=StoreConfig.strict_mode())
        with pytest.raises(InvalidOperationError):
            store.relocate("a", "b", "inside")


class TestRelocationNoOps:

    def test_missing_drag_node(self):
        store = flat_store("a")
        before = store.root
        assert store.relocate("missing", "a", "inside") is before

    def test_missing_target_removes_dragged_node(self, caplog):
        store = flat_store("a", "b")
        before = store.root
        seen = []
        store.subscribe(seen.append)

        with caplog.at_level("WARNING", logger="lazytreelib.store"):
            root = store.relocate("a", "missing", "after")

        assert children(store, "r") == ["b"]
        assert root is not before
        assert seen == [root]
        assert [c.id for c in before.children] == ["a", "b"]
        assert "removed without being re-inserted" in caplog.text

    @pytest.mark.parametrize("position", ["before", "after"])
    def test_sibling_of_root_removes_dragged_node(self, position):
        root = TreeNode.create("r", children=[
            TreeNode.create("a", children=[TreeNode.create("a1")]),
            TreeNode.create("b"),
        ])
        store = TreeStore(root)

        store.relocate("a", "r", position)

        assert store.root.ids() == ["r", "b"]
        assert TreeTestHelper(store).check_invariants(root_id="r") == []

    def test_strict_mode_refuses_sibling_of_root(self):
        store = TreeStore(TreeNode.create("r", children=[TreeNode.create("a")]),
                          config=StoreConfig.strict_mode())
        before = store.root
        with pytest.raises(InvalidOperationError):
            store.relocate("a", "r", "after")
        assert store.root is before

    def test_inside_root_is_allowed(self):
        root = TreeNode.create("r", children=[
            TreeNode.create("a", children=[TreeNode.create("a1")]),
        ])
        store = TreeStore(root)
        store.relocate("a1", "r", "inside")
        assert children(store, "r") == ["a", "a1"]

    def test_unknown_position_raises_value_error(self):
        store = flat_store("a", "b")
        with pytest.raises(ValueError):
            store.relocate("a", "b", "sideways")

    def test_strict_mode_reports_missing_target(self):
        store = TreeStore(TreeNode.create("r", children=[TreeNode.create("a")]),
                          config=StoreConfig.strict_mode())
        before = store.root
        with pytest.raises(NodeNotFoundError) as exc_info:
            store.relocate("a", "missing", "inside")
        assert exc_info.value.node_id == "missing"
        assert store.root is before


class TestSubtreePreservation:

    @pytest.fixture
    def store(self):
        """
        Structure:
            r
            ├── a (level B)
            │   ├── a1 (level C)
            │   │   └── a1x (level D)
            │   └── a2 (level C)
            └── b (level B)
                └── b1 (level C)
        """
        a1 = TreeNode.create("a1", name="A one", level="C",
                             children=[TreeNode.create("a1x", level="D")])
        a = TreeNode.create("a", level="B", children=[a1, TreeNode.create("a2", level="C")])
        b = TreeNode.create("b", level="B", children=[TreeNode.create("b1", level="C")])
        return TreeStore(TreeNode.create("r", children=[a, b]))

    def test_moved_subtree_content_is_identical(self, store):
        original = store.find_node("a")
        store.relocate("a", "b1", "inside")
        moved = store.find_node("a")
        assert moved == original
        assert moved.ids() == ["a", "a1", "a1x", "a2"]
        assert store.find_node("a1").name == "A one"

    def test_levels_are_not_recomputed(self, store):
        store.relocate("a1", "b1", "inside")
        assert store.find_node("a1").level == "C"
        assert store.find_node("a1x").level == "D"
        assert store.compute_depth("a1x") == 4

    def test_previous_snapshot_untouched(self, store):
        before = store.root
        store.relocate("a", "b", "after")
        assert children(store, "r") == ["b", "a"]
        assert [c.id for c in before.children] == ["a", "b"]

    def test_moved_node_appears_once(self, store):
        store.relocate("a2", "b1", "before")
        helper = TreeTestHelper(store)
        assert helper.duplicate_ids() == []
        assert helper.parent_of("a2") == "b"
