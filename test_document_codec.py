"""
Unit tests for document loading, serialization and export.
"""

import json
import logging

import pytest
import yaml

from schema_engine.document_codec import (
    dumps,
    export_document,
    export_filename,
    loads,
    node_from_dict,
    node_to_dict,
)
from schema_engine.exceptions import DocumentLoadError
from schema_engine.node_model import ObjectNode

INVOICE = {
    "type": "object",
    "title": "Invoice",
    "properties": {
        "number": {"type": "string", "minLength": 1, "pattern": "^[A-Z0-9-]+$"},
        "total": {"type": "number", "minimum": 0, "multipleOf": 0.01},
        "paid": {"type": "boolean", "default": False},
        "lines": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "quantity": {"type": "integer", "exclusiveMinimum": 0},
                    "sku": {"type": "string", "enum": ["A1", "B2"]},
                },
                "required": ["quantity"],
            },
        },
        "memo": {"type": "null"},
    },
    "required": ["number", "total"],
}


class TestRoundTrip:
    """Test cases for serialization round trips."""

    def test_json_round_trip_is_structurally_equal(self):
        """Test that dumping and loading a document preserves content and order."""
        document = node_from_dict(INVOICE)

        reloaded = loads(dumps(document))

        assert node_to_dict(reloaded) == node_to_dict(document)
        assert list(reloaded.properties) == ["number", "total", "paid", "lines", "memo"]
        assert json.loads(dumps(reloaded)) == INVOICE

    def test_dumps_preserves_key_order(self):
        text = dumps(node_from_dict(INVOICE))

        assert text.index('"number"') < text.index('"total"') < text.index('"memo"')

    def test_dumps_keeps_unicode(self):
        document = node_from_dict({"type": "object", "title": "Facture réglée"})

        assert "réglée" in dumps(document)


class TestLoading:
    """Test cases for loading edge cases."""

    def test_root_without_type_is_object(self):
        document = node_from_dict({"title": "Untitled"})

        assert isinstance(document, ObjectNode)
        assert document.title == "Untitled"
        assert document.properties == {}

    def test_invalid_json_raises(self):
        with pytest.raises(DocumentLoadError) as exc_info:
            loads("{not json", source="broken.json")

        assert exc_info.value.source == "broken.json"
        assert exc_info.value.context['original_error_type'] == "JSONDecodeError"

    def test_unknown_type_raises(self):
        with pytest.raises(DocumentLoadError):
            node_from_dict({"type": "object", "properties": {"when": {"type": "date"}}})

    def test_non_object_payload_raises(self):
        with pytest.raises(DocumentLoadError):
            loads("[1, 2, 3]")

    def test_unknown_keys_are_ignored_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="schema_engine.document_codec"):
            document = node_from_dict({
                "$schema": "http://json-schema.org/draft-07/schema#",
                "type": "object",
                "properties": {"name": {"type": "string", "x-widget": "textarea"}},
            })

        assert node_to_dict(document) == {"type": "object", "properties": {"name": {"type": "string"}}}
        assert "root.$schema" in caplog.text
        assert "root.name.x-widget" in caplog.text

    def test_required_without_property_is_repaired(self):
        document = node_from_dict({
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "required": ["a", "ghost", "a"],
        })

        assert document.required == ["a"]

    def test_empty_required_is_dropped(self):
        document = node_from_dict({"type": "object", "properties": {}, "required": []})

        assert "required" not in node_to_dict(document)


class TestExport:
    """Test cases for JSON and YAML export."""

    def test_yaml_export(self):
        document = node_from_dict(INVOICE)

        text = export_document(document, 'yaml')

        assert yaml.safe_load(text) == node_to_dict(document)
        assert text.index("number:") < text.index("total:")

    def test_json_export_indent(self):
        document = node_from_dict({"type": "object", "title": "T"})

        assert export_document(document, 'JSON', indent=4).startswith('{\n    "type"')

    def test_unsupported_format(self):
        with pytest.raises(ValueError):
            export_document(node_from_dict(INVOICE), 'xml')

    def test_export_filename(self):
        assert export_filename("invoice", "yaml") == "invoice.yaml"
        assert export_filename("invoice", "json") == "invoice.json"
        assert export_filename(None) == "schema.json"
