"""
Integration tests for the editing session.
"""

from dataclasses import replace

import pytest
import yaml

from schema_engine.config_loader import EditorSettings
from schema_engine.document_codec import node_from_dict, node_to_dict
from schema_engine.exceptions import EditOutcome
from schema_engine.mutation_engine import remove_property
from schema_engine.path_resolver import PropertyStep, ROOT_PATH
from schema_engine.session import EditorSession


def make_session(**settings):
    document = node_from_dict({
        "type": "object",
        "title": "Order",
        "properties": {
            "customer": {
                "type": "object",
                "properties": {"name": {"type": "string"}},
            },
            "items": {
                "type": "array",
                "items": {"type": "object", "properties": {"sku": {"type": "string"}}},
            },
        },
    })
    return EditorSession.load(document, EditorSettings(**settings))


class TestSessionLifecycle:
    """Test cases for loading, saving and discarding."""

    def test_load_starts_clean_at_root(self):
        session = make_session()

        assert session.focus_path == ROOT_PATH
        assert session.navigation.labels() == ["Root"]
        assert not session.is_dirty()
        assert session.last_outcome is None

    def test_root_label_from_settings(self):
        assert make_session(root_label="Order").navigation.labels() == ["Order"]

    def test_edit_then_save(self):
        """Test the dirty flag through an edit and a save."""
        session = make_session().apply('add_property')

        assert session.is_dirty()
        assert session.change_summary()['total'] >= 1

        saved = session.mark_saved()

        assert not saved.is_dirty()
        assert node_to_dict(saved.document) == node_to_dict(session.document)

    def test_discard_changes(self):
        session = make_session()
        original = session.payload()

        edited = session.apply('remove_property', 'customer')
        discarded = edited.discard_changes()

        assert not discarded.is_dirty()
        assert discarded.payload() == original

    def test_reload_keeps_settings(self):
        session = make_session(root_label="Order").apply('add_property')

        reloaded = session.reload(node_from_dict({"type": "object"}))

        assert reloaded.settings.root_label == "Order"
        assert not reloaded.is_dirty()
        assert reloaded.focus_properties() == []

    def test_session_is_immutable(self):
        session = make_session()

        session.apply('add_property')

        assert not session.is_dirty()


class TestApply:
    """Test cases for applying edits at the focus."""

    def test_applied_outcome(self):
        session = make_session().apply('add_property')

        assert session.last_outcome == EditOutcome.APPLIED
        assert [name for name, _ in session.focus_properties()] == ["customer", "items", "newProperty1"]

    def test_prefix_from_settings(self):
        session = make_session(new_property_prefix="field").apply('add_property')

        assert "field1" in dict(session.focus_properties())

    def test_no_op_outcome(self):
        session = make_session()

        result = session.apply('remove_property', 'missing')

        assert result.last_outcome == EditOutcome.NO_OP
        assert result.document is session.document

    def test_edits_apply_at_focus(self):
        session = make_session().navigate(["properties", "customer"], "Customer")

        session = session.apply('toggle_required', 'name')

        assert session.focus_required() == ["name"]
        assert session.document.required is None

    def test_edits_inside_array_items(self):
        session = make_session().navigate("items.0", "items[]")

        session = session.apply('rename_property', 'sku', 'code')

        assert [name for name, _ in session.focus_properties()] == ["code"]

    def test_stale_focus(self):
        """Test that an edit on a removed node is ignored and the focus recovers."""
        session = make_session().navigate(["properties", "customer"], "Customer")
        session = replace(session, document=remove_property(session.document, ROOT_PATH, "customer"))

        result = session.apply('add_property')

        assert result.last_outcome == EditOutcome.STALE_FOCUS
        assert result.focus_path == ROOT_PATH
        assert result.document is session.document

    def test_unknown_operation(self):
        with pytest.raises(KeyError):
            make_session().apply('explode')

    def test_malformed_navigation_keeps_focus(self):
        session = make_session().navigate("customer", "Customer")

        moved = session.navigate(["properties"], "Broken")

        assert moved.focus_path == (PropertyStep("customer"),)
        assert moved.navigation.labels() == ["Root", "Customer"]

    def test_navigate_and_focus_node(self):
        session = make_session().navigate("customer", "Customer")

        assert session.focus_path == (PropertyStep("customer"),)
        assert session.focus_node().kind == "object"
        assert session.focus_required() == []


class TestExport:
    """Test cases for exporting the live document."""

    def test_export_default_format(self):
        session = make_session(default_export_format='yaml')

        assert yaml.safe_load(session.export())['title'] == "Order"

    def test_export_json(self):
        session = make_session()

        assert session.export('json').startswith('{\n  "type": "object"')
