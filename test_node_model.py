"""
Unit tests for the schema node model.
"""

import pytest
from pydantic import ValidationError

from schema_engine.document_codec import node_to_dict
from schema_engine.node_model import (
    ArrayNode,
    BooleanNode,
    NumberNode,
    ObjectNode,
    SchemaKind,
    StringNode,
    UNSET,
    field_attribute,
    is_node,
    legal_fields,
    node_adapter,
    node_values,
    rebuild_node,
    sanitize_for_kind,
)


class TestNodeParsing:
    """Test cases for building nodes from their JSON shape."""

    def test_discriminates_on_type_key(self):
        """Test that the type key selects the node class."""
        node = node_adapter.validate_python({"type": "string", "minLength": 2, "title": "Name"})

        assert isinstance(node, StringNode)
        assert node.kind == "string"
        assert node.min_length == 2
        assert node.title == "Name"

    def test_nested_nodes_are_parsed(self):
        """Test that properties and items are parsed recursively."""
        node = node_adapter.validate_python({
            "type": "object",
            "properties": {
                "tags": {"type": "array", "items": {"type": "string"}},
                "count": {"type": "integer"},
            },
        })

        assert isinstance(node, ObjectNode)
        assert list(node.properties) == ["tags", "count"]
        assert isinstance(node.properties["tags"], ArrayNode)
        assert isinstance(node.properties["tags"].items, StringNode)

    def test_fields_of_other_kinds_are_ignored(self):
        """Test that keys not legal for the kind are not kept."""
        node = node_adapter.validate_python({"type": "boolean", "minLength": 3})

        assert node_to_dict(node) == {"type": "boolean"}

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            node_adapter.validate_python({"type": "date"})

    def test_negative_length_is_rejected(self):
        with pytest.raises(ValidationError):
            node_adapter.validate_python({"type": "string", "minLength": -1})

    def test_unknown_string_format_is_rejected(self):
        with pytest.raises(ValidationError):
            node_adapter.validate_python({"type": "string", "format": "postcode"})

    def test_nodes_can_be_built_by_attribute_name(self):
        node = NumberNode(exclusive_minimum=0, multiple_of=0.5)

        assert node_to_dict(node) == {"type": "number", "exclusiveMinimum": 0, "multipleOf": 0.5}

    def test_is_node(self):
        assert is_node(StringNode())
        assert not is_node({"type": "string"})


class TestFieldLookup:
    """Test cases for legal_fields and field_attribute."""

    def test_legal_fields_per_kind(self):
        assert legal_fields(SchemaKind.BOOLEAN) == ("default",)
        assert legal_fields(SchemaKind.NULL) == ()
        assert "items" in legal_fields(SchemaKind.ARRAY)
        assert "properties" in legal_fields(SchemaKind.OBJECT)

    def test_legal_fields_unknown_kind(self):
        assert legal_fields("date") == ()

    def test_field_attribute_accepts_json_and_attribute_names(self):
        assert field_attribute("string", "minLength") == "min_length"
        assert field_attribute("string", "min_length") == "min_length"
        assert field_attribute("string", "type") == "kind"
        assert field_attribute("string", "title") == "title"

    def test_field_attribute_illegal_field(self):
        assert field_attribute("boolean", "minLength") is None
        assert field_attribute("date", "title") is None


class TestRebuildNode:
    """Test cases for rebuild_node."""

    def test_sets_and_removes_fields(self):
        """Test that values are set and UNSET removes a field."""
        node = StringNode(title="Name", min_length=1)

        rebuilt = rebuild_node(node, max_length=10, title=UNSET)

        assert node_to_dict(rebuilt) == {"type": "string", "minLength": 1, "maxLength": 10}
        # Original untouched
        assert node.title == "Name"
        assert node.max_length is None

    def test_invalid_value_raises(self):
        with pytest.raises(ValidationError):
            rebuild_node(StringNode(), min_length="many")

    def test_node_values_skips_unset(self):
        assert node_values(BooleanNode(default=False)) == {"kind": "boolean", "default": False}


class TestSanitizeForKind:
    """Test cases for kind change cleanup."""

    def test_string_to_boolean_keeps_only_common_fields(self):
        """Test that a string node becoming boolean keeps just its title."""
        node = StringNode(title="T", min_length=3)

        result = sanitize_for_kind(node, SchemaKind.BOOLEAN)

        assert isinstance(result, BooleanNode)
        assert node_to_dict(result) == {"type": "boolean", "title": "T"}

    def test_description_survives(self):
        result = sanitize_for_kind(NumberNode(description="Amount", minimum=0), SchemaKind.STRING)

        assert node_to_dict(result) == {"type": "string", "description": "Amount"}

    def test_number_to_integer_keeps_integral_values(self):
        """Test that integral floats carry over and fractional ones are dropped."""
        node = NumberNode(title="N", minimum=3.0, maximum=2.5)

        result = sanitize_for_kind(node, SchemaKind.INTEGER)

        assert node_to_dict(result) == {"type": "integer", "title": "N", "minimum": 3}

    def test_incompatible_default_is_dropped(self):
        result = sanitize_for_kind(StringNode(default="abc"), SchemaKind.NUMBER)

        assert result.default is None

    def test_becoming_object_seeds_properties(self):
        result = sanitize_for_kind(StringNode(title="Address"), SchemaKind.OBJECT)

        assert node_to_dict(result) == {
            "type": "object",
            "title": "Address",
            "properties": {},
            "additionalProperties": False,
        }

    def test_array_items_are_cleared(self):
        node = ArrayNode(items=StringNode(), min_items=1)

        result = sanitize_for_kind(node, SchemaKind.ARRAY)

        assert result.items is None
        assert result.min_items == 1

    def test_unknown_kind_returns_same_node(self):
        node = StringNode()

        assert sanitize_for_kind(node, "date") is node

    def test_unset_sentinel(self):
        assert not UNSET
        assert repr(UNSET) == "UNSET"
