"""Schema document editing engine."""

from .node_model import (
    ArrayNode,
    BooleanNode,
    IntegerNode,
    NullNode,
    NumberNode,
    ObjectNode,
    SchemaKind,
    SchemaNode,
    StringNode,
    UNSET,
    sanitize_for_kind,
)
from .path_resolver import NOT_FOUND, ItemsStep, PropertyStep, parse_path, resolve, with_mutation_at
from .mutation_engine import (
    add_property,
    move_property,
    remove_property,
    rename_property,
    set_items_kind,
    toggle_required,
    update_description,
    update_field,
)
from .navigation import Breadcrumb, NavigationState, child_path
from .dirty_tracker import calculate_changes, get_change_summary, is_dirty, mark_saved
from .document_codec import dumps, export_document, loads, node_from_dict, node_to_dict
from .exceptions import (
    ConfigurationLoadError,
    DocumentLoadError,
    EditOutcome,
    InvalidPathError,
    SchemaEngineError,
)
from .session import EditorSession

__all__ = [
    "ArrayNode",
    "BooleanNode",
    "Breadcrumb",
    "ConfigurationLoadError",
    "DocumentLoadError",
    "EditOutcome",
    "EditorSession",
    "IntegerNode",
    "InvalidPathError",
    "ItemsStep",
    "NOT_FOUND",
    "NavigationState",
    "NullNode",
    "NumberNode",
    "ObjectNode",
    "PropertyStep",
    "SchemaEngineError",
    "SchemaKind",
    "SchemaNode",
    "StringNode",
    "UNSET",
    "add_property",
    "calculate_changes",
    "child_path",
    "dumps",
    "export_document",
    "get_change_summary",
    "is_dirty",
    "loads",
    "mark_saved",
    "move_property",
    "node_from_dict",
    "node_to_dict",
    "parse_path",
    "remove_property",
    "rename_property",
    "resolve",
    "sanitize_for_kind",
    "set_items_kind",
    "toggle_required",
    "update_description",
    "update_field",
    "with_mutation_at",
]
