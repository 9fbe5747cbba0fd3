"""
Unit tests for breadcrumb navigation.
"""

import logging

import pytest

from schema_engine.document_codec import node_from_dict
from schema_engine.mutation_engine import remove_property
from schema_engine.navigation import Breadcrumb, NavigationState, child_path
from schema_engine.path_resolver import ItemsStep, PropertyStep, ROOT_PATH, parse_path


def make_document():
    return node_from_dict({
        "type": "object",
        "properties": {
            "a": {
                "type": "object",
                "properties": {"b": {"type": "object", "properties": {"c": {"type": "string"}}}},
            },
        },
    })


class TestNavigationState:
    """Test cases for NavigationState."""

    def test_initial_state(self):
        state = NavigationState.initial()

        assert state.focus == ROOT_PATH
        assert state.breadcrumbs == (Breadcrumb(ROOT_PATH, "Root"),)

    def test_initial_state_custom_label(self):
        assert NavigationState.initial("Invoice").labels() == ["Invoice"]

    def test_drill_down_appends_breadcrumbs(self):
        state = NavigationState.initial()

        state = state.navigate(["properties", "a"], "A")
        state = state.navigate(["properties", "a", "properties", "b"], "B")

        assert state.labels() == ["Root", "A", "B"]
        assert state.focus == (PropertyStep("a"), PropertyStep("b"))

    def test_jump_back_truncates_trail(self):
        """Test that revisiting a breadcrumb drops the ones after it."""
        state = NavigationState.initial()
        state = state.navigate(["properties", "a"], "A")
        state = state.navigate(["properties", "a", "properties", "b"], "B")

        state = state.navigate(["properties", "a"], "")

        assert state.labels() == ["Root", "A"]
        assert state.focus == (PropertyStep("a"),)

    def test_jump_back_to_root(self):
        state = NavigationState.initial().navigate("a", "A").navigate("a.b", "B")

        state = state.navigate(ROOT_PATH)

        assert state.labels() == ["Root"]
        assert state.focus_path == ROOT_PATH

    def test_navigation_returns_new_state(self):
        state = NavigationState.initial()

        moved = state.navigate("a", "A")

        assert moved is not state
        assert state.labels() == ["Root"]

    @pytest.mark.parametrize("path", [["properties"], ["bogus"], 42])
    def test_malformed_path_is_ignored(self, path, caplog):
        """Test that a malformed path leaves the navigation unchanged."""
        state = NavigationState.initial().navigate("a", "A")

        with caplog.at_level(logging.WARNING, logger="schema_engine.navigation"):
            result = state.navigate(path, "Broken")

        assert result is state
        assert result.labels() == ["Root", "A"]
        assert "malformed path" in caplog.text

    def test_index_of(self):
        state = NavigationState.initial().navigate("a", "A")

        assert state.index_of((PropertyStep("a"),)) == 1
        assert state.index_of((PropertyStep("z"),)) == -1


class TestRecover:
    """Test cases for recovering a stale focus."""

    def test_resolvable_focus_is_kept(self):
        root = make_document()
        state = NavigationState.initial().navigate("a.b", "B")

        assert state.recover(root) is state

    def test_stale_focus_returns_to_nearest_breadcrumb(self):
        """Test that a removed node sends the focus to the closest live breadcrumb."""
        root = make_document()
        state = NavigationState.initial().navigate("a", "A").navigate("a.b", "B")

        root = remove_property(root, parse_path("a"), "b")
        recovered = state.recover(root)

        assert recovered.labels() == ["Root", "A"]
        assert recovered.focus == (PropertyStep("a"),)

    def test_falls_back_to_root(self):
        root = make_document()
        state = NavigationState.initial().navigate("a", "A").navigate("a.b", "B")

        root = remove_property(root, ROOT_PATH, "a")

        assert state.recover(root).labels() == ["Root"]


class TestChildPath:
    """Test cases for child_path."""

    def test_property_path(self):
        assert child_path(ROOT_PATH, "a") == (PropertyStep("a"),)

    def test_items_path(self):
        path = child_path((PropertyStep("a"),), "tags", via_items=True)

        assert path == (PropertyStep("a"), PropertyStep("tags"), ItemsStep(0))
        assert parse_path("a.tags.0") == path
