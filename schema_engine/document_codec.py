"""
Conversion between schema node models and their JSON shape.

A node is a JSON object whose ``type`` is one of the seven kind tags, with
camelCase constraint keys. Property order is preserved in both directions.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from .exceptions import DocumentLoadError
from .node_model import BaseNode, SchemaKind, field_attribute, node_adapter

logger = logging.getLogger(__name__)

SUPPORTED_EXPORT_FORMATS = ('json', 'yaml')


def _unknown_keys(data: Any, location: str = "root") -> List[str]:
    """Collect keys the node models do not know about, for logging."""
    unknown: List[str] = []
    if not isinstance(data, dict):
        return unknown

    kind = data.get('type')
    for key in data:
        if key == 'type':
            continue
        if kind in SchemaKind.ALL and field_attribute(kind, key) is None:
            unknown.append(f"{location}.{key}")

    properties = data.get('properties')
    if kind == SchemaKind.OBJECT and isinstance(properties, dict):
        for name, child in properties.items():
            unknown.extend(_unknown_keys(child, f"{location}.{name}"))
    if kind == SchemaKind.ARRAY and isinstance(data.get('items'), dict):
        unknown.extend(_unknown_keys(data['items'], f"{location}[]"))
    return unknown


def node_from_dict(data: Dict[str, Any], source: Optional[str] = None) -> BaseNode:
    """
    Build a schema document from its JSON shape.

    A root without ``type`` is read as an object node, since new documents are
    created with only a title.

    Args:
        data: Parsed JSON object
        source: Where the payload came from, for error messages

    Returns:
        Root node

    Raises:
        DocumentLoadError: If the payload is not a valid schema document
    """
    if not isinstance(data, dict):
        raise DocumentLoadError(
            TypeError(f"expected a JSON object, got {type(data).__name__}"),
            source=source
        )

    if 'type' not in data:
        logger.info("Schema document has no root type, treating it as an object")
        data = {'type': SchemaKind.OBJECT, **data}

    unknown = _unknown_keys(data)
    if unknown:
        logger.warning(f"Ignoring unsupported schema keys: {', '.join(unknown)}")

    try:
        root = node_adapter.validate_python(data)
    except ValidationError as e:
        logger.error(f"Schema document validation failed: {e.error_count()} error(s)")
        raise DocumentLoadError(e, source=source) from e

    _repair_required(root)
    return root


def _repair_required(node: BaseNode) -> None:
    """Drop ``required`` names that are not properties and collapse empty lists."""
    properties = getattr(node, 'properties', None)
    if properties is not None:
        if node.required is not None:
            kept = [name for name in dict.fromkeys(node.required) if name in properties]
            if len(kept) != len(node.required):
                logger.warning(f"Dropped required names without a matching property: "
                               f"{sorted(set(node.required) - set(kept))}")
            node.required = kept or None
        for child in properties.values():
            _repair_required(child)
    items = getattr(node, 'items', None)
    if items is not None:
        _repair_required(items)


def node_to_dict(node: BaseNode) -> Dict[str, Any]:
    """Render a node in its JSON shape, omitting unset fields."""
    return node.model_dump(by_alias=True, exclude_none=True, mode='json')


def loads(text: str, source: Optional[str] = None) -> BaseNode:
    """
    Parse JSON text into a schema document.

    Raises:
        DocumentLoadError: If the text is not JSON or not a valid document
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in schema document: {e}")
        raise DocumentLoadError(e, source=source) from e
    return node_from_dict(data, source=source)


def dumps(node: BaseNode, indent: Optional[int] = 2) -> str:
    """Serialize a schema document to JSON text."""
    return json.dumps(node_to_dict(node), indent=indent, ensure_ascii=False)


def export_document(node: BaseNode, fmt: str = 'json', indent: int = 2) -> str:
    """
    Export a schema document as JSON or YAML text.

    Args:
        node: Document root
        fmt: 'json' or 'yaml'
        indent: Indentation width

    Returns:
        Serialized document

    Raises:
        ValueError: If the format is not supported
    """
    fmt = fmt.lower()
    if fmt == 'json':
        return dumps(node, indent=indent)
    if fmt == 'yaml':
        return yaml.safe_dump(
            node_to_dict(node),
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False,
            indent=indent
        )
    raise ValueError(f"Unsupported export format '{fmt}', expected one of {SUPPORTED_EXPORT_FORMATS}")


def export_filename(document_name: Optional[str], fmt: str = 'json') -> str:
    """Build the download filename for a document export."""
    extension = 'yaml' if fmt.lower() == 'yaml' else 'json'
    return f"{document_name or 'schema'}.{extension}"
