"""Tests for aligning translation files with the primary language."""

from api.services.structure_sync import (
    StructuralChange,
    apply_changes,
    structural_changes,
    synchronize,
)


class TestStructuralChanges:
    def test_aligned_content_has_no_changes(self):
        target = {"greeting": "Hallo", "nav": {"home": "Start"}}
        primary = {"greeting": "Hello", "nav": {"home": "Home"}}
        assert structural_changes(target, primary) == []

    def test_missing_and_extra_keys(self):
        changes = structural_changes({"old": "Alt"}, {"new": "New"})
        assert changes == [
            StructuralChange("delete", ("old",)),
            StructuralChange("add", ("new",), "New"),
        ]

    def test_nested_paths(self):
        changes = structural_changes(
            {"nav": {"home": "Start", "gone": "Weg"}},
            {"nav": {"home": "Home", "about": "About"}},
        )
        assert changes == [
            StructuralChange("delete", ("nav", "gone")),
            StructuralChange("add", ("nav", "about"), "About"),
        ]

    def test_leaf_replaced_by_object(self):
        changes = structural_changes({"nav": "Navigation"}, {"nav": {"home": "Home"}})
        assert changes == [StructuralChange("add", ("nav",), {"home": "Home"})]

    def test_lists_are_leaves(self):
        assert structural_changes({"items": ["a"]}, {"items": ["x", "y"]}) == []


class TestApplyChanges:
    def test_input_not_mutated(self):
        content = {"a": {"b": "1"}}
        result = apply_changes(content, [StructuralChange("delete", ("a", "b"))])
        assert result == {"a": {}}
        assert content == {"a": {"b": "1"}}

    def test_add_creates_parents(self):
        result = apply_changes({}, [StructuralChange("add", ("a", "b"), "x")])
        assert result == {"a": {"b": "x"}}

    def test_delete_of_missing_path_ignored(self):
        result = apply_changes({"a": "1"}, [StructuralChange("delete", ("b", "c"))])
        assert result == {"a": "1"}


class TestSynchronize:
    def test_translations_kept(self):
        content, applied = synchronize(
            {"greeting": "Hallo", "old": "Alt"},
            {"greeting": "Hello", "nav": {"home": "Home"}},
        )
        assert content == {"greeting": "Hallo", "nav": {"home": "Home"}}
        assert applied == 2

    def test_unchanged_returns_target(self):
        target = {"greeting": "Hallo"}
        content, applied = synchronize(target, {"greeting": "Hello"})
        assert content is target
        assert applied == 0

    def test_added_value_is_a_copy(self):
        primary = {"nav": {"home": "Home"}}
        content, _ = synchronize({}, primary)
        content["nav"]["home"] = "Start"
        assert primary == {"nav": {"home": "Home"}}
