"""
Document-level edit operations for schema documents.

Every operation takes the current root and the focus path and returns a new
root built through ``with_mutation_at``; the input root is never modified.
Requests that cannot be applied (missing key, blank rename, stale focus, a
field that is not legal for the node's kind) return the input root unchanged.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple, Mapping
import logging

from pydantic import ValidationError

from .node_model import (
    ArrayNode,
    BaseNode,
    ObjectNode,
    SchemaKind,
    StringNode,
    UNSET,
    field_attribute,
    is_node,
    node_adapter,
    rebuild_node,
    sanitize_for_kind,
)
from .path_resolver import Path, path_label, with_mutation_at

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_PREFIX = "newProperty"

KIND_FIELDS = ("kind", "type")

# Edited only through the dedicated property operations
STRUCTURAL_FIELDS = ("properties", "required")


def properties_of(node: Any) -> List[Tuple[str, BaseNode]]:
    """Return the (name, node) pairs of an object node in declaration order."""
    if isinstance(node, ObjectNode):
        return list(node.properties.items())
    return []


def generate_property_name(existing: Any, prefix: str = DEFAULT_PROPERTY_PREFIX) -> str:
    """
    Generate ``{prefix}{n}`` with the smallest positive ``n`` not already used.

    Args:
        existing: Collection of sibling names
        prefix: Name prefix

    Returns:
        Unused property name
    """
    taken = set(existing)
    n = 1
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


def _canonical_required(names: List[str]) -> Optional[List[str]]:
    # Empty and absent are equivalent; absent is canonical
    deduplicated = list(dict.fromkeys(names))
    return deduplicated or None


def add_property(root: BaseNode, path: Path, prefix: str = DEFAULT_PROPERTY_PREFIX,
                 node_factory: Optional[Callable[[], BaseNode]] = None) -> BaseNode:
    """
    Append a new property to the object node at the focus path.

    When the focus is an array whose items are an object, the property is added
    to the items definition.

    Args:
        root: Document root
        path: Focus path
        prefix: Prefix for the generated property name
        node_factory: Builds the new property's node (default: a string node)

    Returns:
        New root, or ``root`` if the focus is neither an object nor an array of objects
    """
    def mutate(target: BaseNode) -> bool:
        if isinstance(target, ArrayNode) and isinstance(target.items, ObjectNode):
            target = target.items
        if not isinstance(target, ObjectNode):
            logger.debug(f"add_property: focus '{path_label(path)}' is {target.kind}, not object")
            return False
        name = generate_property_name(target.properties, prefix)
        target.properties[name] = node_factory() if node_factory else StringNode()
        logger.debug(f"add_property: added '{name}' at '{path_label(path)}'")
        return True

    return with_mutation_at(root, path, mutate)


def remove_property(root: BaseNode, path: Path, name: str) -> BaseNode:
    """Delete a property and its ``required`` entry from the focus object."""
    def mutate(target: BaseNode) -> bool:
        if not isinstance(target, ObjectNode) or name not in target.properties:
            return False
        del target.properties[name]
        if target.required is not None:
            target.required = _canonical_required([item for item in target.required if item != name])
        logger.debug(f"remove_property: removed '{name}' at '{path_label(path)}'")
        return True

    return with_mutation_at(root, path, mutate)


def rename_property(root: BaseNode, path: Path, old_name: str, new_name: str) -> BaseNode:
    """
    Rename a property of the focus object, keeping its position.

    A blank new name or one equal to the old name is ignored. When the new name
    is already used by a sibling, that sibling is overwritten.

    Args:
        root: Document root
        path: Focus path
        old_name: Current property name
        new_name: Replacement property name

    Returns:
        New root, or ``root`` if nothing was renamed
    """
    if not isinstance(new_name, str) or not new_name.strip() or new_name == old_name:
        return root

    def mutate(target: BaseNode) -> bool:
        if not isinstance(target, ObjectNode) or old_name not in target.properties:
            return False

        if new_name in target.properties:
            logger.warning(f"rename_property: '{new_name}' already exists at '{path_label(path)}' and is overwritten")

        renamed: Dict[str, BaseNode] = {}
        for key, value in target.properties.items():
            if key == old_name:
                renamed[new_name] = value
            elif key != new_name:
                renamed[key] = value
        target.properties = renamed

        if target.required is not None:
            target.required = _canonical_required(
                [new_name if item == old_name else item for item in target.required]
            )
        logger.debug(f"rename_property: '{old_name}' -> '{new_name}' at '{path_label(path)}'")
        return True

    return with_mutation_at(root, path, mutate)


def _coerce_node(value: Any) -> Any:
    if value is None or value is UNSET or is_node(value):
        return value
    if isinstance(value, Mapping):
        return node_adapter.validate_python(dict(value))
    return value


def update_field(root: BaseNode, path: Path, key: str, field: str, value: Any) -> BaseNode:
    """
    Set one field on the property ``key`` of the focus object.

    ``UNSET`` (or None) removes the field, and an empty title counts as unset.
    Setting ``kind``/``type`` migrates the property to the new kind with
    ``sanitize_for_kind``. Setting ``items`` assigns the definition directly.

    Args:
        root: Document root
        path: Focus path
        key: Property name within the focus object
        field: JSON or attribute name of the field
        value: New value, or UNSET

    Returns:
        New root, or ``root`` if the update could not be applied
    """
    if field == "title" and value == "":
        value = UNSET

    def mutate(target: BaseNode) -> bool:
        if not isinstance(target, ObjectNode) or key not in target.properties:
            return False
        child = target.properties[key]

        if field in KIND_FIELDS:
            if value is None or value is UNSET:
                logger.warning(f"update_field: cannot unset the type of '{key}'")
                return False
            if value == child.kind:
                return False
            if value not in SchemaKind.ALL:
                logger.warning(f"update_field: unknown type '{value}' for '{key}'")
                return False
            target.properties[key] = sanitize_for_kind(child, value)
            logger.debug(f"update_field: '{key}' changed type {child.kind} -> {value}")
            return True

        attribute = field_attribute(child.kind, field)
        if attribute in STRUCTURAL_FIELDS:
            logger.warning(f"update_field: '{field}' of '{key}' is edited through the property operations")
            return False
        if attribute is None:
            logger.warning(f"update_field: field '{field}' is not valid for {child.kind} property '{key}'")
            return False

        try:
            new_value = _coerce_node(value) if attribute == "items" else value
            target.properties[key] = rebuild_node(child, **{attribute: new_value})
        except ValidationError as e:
            logger.warning(f"update_field: rejected {field}={value!r} for '{key}': {e.error_count()} validation error(s)")
            return False

        logger.debug(f"update_field: set {field} on '{key}' at '{path_label(path)}'")
        return True

    return with_mutation_at(root, path, mutate)


def toggle_required(root: BaseNode, path: Path, key: str) -> BaseNode:
    """Flip membership of ``key`` in the focus object's ``required`` list."""
    def mutate(target: BaseNode) -> bool:
        if not isinstance(target, ObjectNode) or key not in target.properties:
            return False
        required = list(target.required or [])
        if key in required:
            required = [item for item in required if item != key]
        else:
            required.append(key)
        target.required = _canonical_required(required)
        return True

    return with_mutation_at(root, path, mutate)


def update_description(root: BaseNode, path: Path, text: Optional[str]) -> BaseNode:
    """Set or clear the description of the focus node itself."""
    description = text if text else None

    def mutate(target: BaseNode) -> bool:
        if target.description == description:
            return False
        target.description = description
        return True

    return with_mutation_at(root, path, mutate)


def move_property(root: BaseNode, path: Path, name: str, offset: int) -> BaseNode:
    """
    Move a property up (negative offset) or down (positive offset) among its siblings.

    The position is clamped to the sibling range.
    """
    def mutate(target: BaseNode) -> bool:
        if not isinstance(target, ObjectNode) or name not in target.properties:
            return False
        names = list(target.properties)
        current = names.index(name)
        destination = max(0, min(len(names) - 1, current + offset))
        if destination == current:
            return False
        names.insert(destination, names.pop(current))
        target.properties = {item: target.properties[item] for item in names}
        return True

    return with_mutation_at(root, path, mutate)


def set_items_kind(root: BaseNode, path: Path, key: str, kind: str) -> BaseNode:
    """
    Choose the item kind of the array property ``key``.

    A previous items definition is migrated with ``sanitize_for_kind``; an
    array without items gets a fresh node of the chosen kind.
    """
    def mutate(target: BaseNode) -> bool:
        if not isinstance(target, ObjectNode) or key not in target.properties:
            return False
        child = target.properties[key]
        if not isinstance(child, ArrayNode) or kind not in SchemaKind.ALL:
            logger.warning(f"set_items_kind: cannot set items type '{kind}' on '{key}'")
            return False
        if child.items is not None and child.items.kind == kind:
            return False
        if child.items is not None:
            items = sanitize_for_kind(child.items, kind)
        else:
            items = sanitize_for_kind(StringNode(), kind)
        target.properties[key] = rebuild_node(child, items=items)
        return True

    return with_mutation_at(root, path, mutate)
