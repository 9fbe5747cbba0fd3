"""
Schema node model for the schema editing engine.

A schema document is a tree of typed nodes. Each node kind is its own Pydantic
model carrying only the fields that are legal for that kind, and the models are
joined into a discriminated union keyed on ``kind`` (JSON key ``type``).
"""

from typing import Dict, Any, List, Optional, Tuple, Union, Literal
from typing import Annotated
import logging

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    TypeAdapter,
    ValidationError,
)

logger = logging.getLogger(__name__)


class SchemaKind:
    """Node kind tags."""
    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"

    ALL = (STRING, NUMBER, INTEGER, BOOLEAN, OBJECT, ARRAY, NULL)
    SCALAR = (STRING, NUMBER, INTEGER, BOOLEAN, NULL)


# Format tags recognised on string nodes
STRING_FORMATS = (
    "date-time", "date", "time", "duration",
    "email", "idn-email", "hostname", "idn-hostname",
    "ipv4", "ipv6", "uri", "uri-reference", "iri", "iri-reference",
    "uuid", "regex", "json-pointer", "relative-json-pointer", "uri-template",
)

StringFormat = Literal[
    "date-time", "date", "time", "duration",
    "email", "idn-email", "hostname", "idn-hostname",
    "ipv4", "ipv6", "uri", "uri-reference", "iri", "iri-reference",
    "uuid", "regex", "json-pointer", "relative-json-pointer", "uri-template",
]

Number = Union[int, float]
PositiveNumber = Union[PositiveInt, PositiveFloat]

# Fields every kind carries; they survive any kind change
COMMON_FIELDS = ("title", "description")


class _Unset:
    """Sentinel type meaning "remove this field"."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


class BaseNode(BaseModel):
    """Fields shared by every node kind."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind: str = Field(alias="type")
    title: Optional[str] = None
    description: Optional[str] = None


class StringNode(BaseNode):
    kind: Literal["string"] = Field("string", alias="type")
    default: Optional[str] = None
    enum: Optional[Annotated[List[str], Field(min_length=1)]] = None
    min_length: Optional[NonNegativeInt] = Field(None, alias="minLength")
    max_length: Optional[NonNegativeInt] = Field(None, alias="maxLength")
    pattern: Optional[str] = None
    format: Optional[StringFormat] = None


class NumberNode(BaseNode):
    kind: Literal["number"] = Field("number", alias="type")
    default: Optional[Number] = None
    minimum: Optional[Number] = None
    maximum: Optional[Number] = None
    exclusive_minimum: Optional[Number] = Field(None, alias="exclusiveMinimum")
    exclusive_maximum: Optional[Number] = Field(None, alias="exclusiveMaximum")
    multiple_of: Optional[PositiveNumber] = Field(None, alias="multipleOf")


class IntegerNode(BaseNode):
    kind: Literal["integer"] = Field("integer", alias="type")
    default: Optional[int] = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    exclusive_minimum: Optional[int] = Field(None, alias="exclusiveMinimum")
    exclusive_maximum: Optional[int] = Field(None, alias="exclusiveMaximum")
    multiple_of: Optional[PositiveInt] = Field(None, alias="multipleOf")


class BooleanNode(BaseNode):
    kind: Literal["boolean"] = Field("boolean", alias="type")
    default: Optional[bool] = None


class ObjectNode(BaseNode):
    """
    Object node. ``properties`` keeps declaration order; ``required`` lists
    names that must all be keys of ``properties`` and is absent when empty.
    """
    kind: Literal["object"] = Field("object", alias="type")
    properties: Dict[str, "SchemaNode"] = Field(default_factory=dict)
    required: Optional[List[str]] = None
    additional_properties: Optional[bool] = Field(None, alias="additionalProperties")


class ArrayNode(BaseNode):
    """Array node with a single ``items`` definition shared by all elements."""
    kind: Literal["array"] = Field("array", alias="type")
    items: Optional["SchemaNode"] = None
    min_items: Optional[NonNegativeInt] = Field(None, alias="minItems")
    max_items: Optional[NonNegativeInt] = Field(None, alias="maxItems")
    unique_items: Optional[bool] = Field(None, alias="uniqueItems")


class NullNode(BaseNode):
    kind: Literal["null"] = Field("null", alias="type")


SchemaNode = Annotated[
    Union[StringNode, NumberNode, IntegerNode, BooleanNode, ObjectNode, ArrayNode, NullNode],
    Field(discriminator="kind"),
]

ObjectNode.model_rebuild()
ArrayNode.model_rebuild()

NODE_CLASSES = {
    SchemaKind.STRING: StringNode,
    SchemaKind.NUMBER: NumberNode,
    SchemaKind.INTEGER: IntegerNode,
    SchemaKind.BOOLEAN: BooleanNode,
    SchemaKind.OBJECT: ObjectNode,
    SchemaKind.ARRAY: ArrayNode,
    SchemaKind.NULL: NullNode,
}

NODE_TYPES = tuple(NODE_CLASSES.values())

node_adapter = TypeAdapter(SchemaNode)


def is_node(value: Any) -> bool:
    """Return True if value is one of the schema node models."""
    return isinstance(value, NODE_TYPES)


def legal_fields(kind: str) -> Tuple[str, ...]:
    """
    Get the kind-specific attribute names legal for a node kind.

    ``kind``, ``title`` and ``description`` are not included.

    Args:
        kind: Node kind tag

    Returns:
        Tuple of attribute names in declaration order (empty for unknown kinds)
    """
    node_cls = NODE_CLASSES.get(kind)
    if node_cls is None:
        return ()
    return tuple(
        name for name in node_cls.model_fields
        if name != "kind" and name not in COMMON_FIELDS
    )


def field_attribute(kind: str, field_name: str) -> Optional[str]:
    """
    Map a field name to the model attribute for a node kind.

    Accepts either the JSON name (``minLength``, ``type``) or the attribute
    name (``min_length``, ``kind``).

    Args:
        kind: Node kind tag
        field_name: JSON or attribute field name

    Returns:
        Attribute name, or None if the field is not legal for the kind
    """
    node_cls = NODE_CLASSES.get(kind)
    if node_cls is None or not isinstance(field_name, str):
        return None

    for name, info in node_cls.model_fields.items():
        if field_name == name or field_name == info.alias:
            return name
    return None


def node_values(node: BaseNode) -> Dict[str, Any]:
    """Return the set (non-None) attributes of a node, keyed by attribute name."""
    values = {}
    for name in type(node).model_fields:
        value = getattr(node, name)
        if value is not None:
            values[name] = value
    return values


def rebuild_node(node: BaseNode, **changes: Any) -> BaseNode:
    """
    Build a validated copy of a node with some attributes changed.

    A change whose value is None or UNSET removes the attribute.

    Raises:
        ValidationError: If a changed value is not valid for the node kind
    """
    values = node_values(node)
    for name, value in changes.items():
        if value is None or value is UNSET:
            values.pop(name, None)
        else:
            values[name] = value
    return type(node).model_validate(values)


def _integral(value: Any) -> Any:
    if isinstance(value, float) and not isinstance(value, bool) and value.is_integer():
        return int(value)
    return value


def sanitize_for_kind(node: BaseNode, new_kind: str) -> BaseNode:
    """
    Produce a node of ``new_kind`` from an existing node.

    Keeps ``title`` and ``description``, copies the other fields that are legal
    for ``new_kind`` and type-compatible with it, and drops everything else.
    A node becoming an object gets empty ``properties`` and
    ``additionalProperties = False``; an array always loses its ``items`` so the
    item type has to be chosen again.

    Args:
        node: Source node (left untouched)
        new_kind: Target kind tag

    Returns:
        New node of the target kind; the source node itself for unknown kinds
    """
    target_cls = NODE_CLASSES.get(new_kind)
    if target_cls is None:
        logger.warning(f"sanitize_for_kind: unknown kind '{new_kind}', node left unchanged")
        return node

    values: Dict[str, Any] = {}
    for name in COMMON_FIELDS:
        value = getattr(node, name, None)
        if value is not None:
            values[name] = value

    dropped = []
    for name in legal_fields(new_kind):
        if new_kind == SchemaKind.ARRAY and name == "items":
            continue
        value = getattr(node, name, None)
        if value is None:
            continue
        if new_kind == SchemaKind.INTEGER:
            value = _integral(value)
        try:
            target_cls.model_validate({name: value}, strict=True)
        except ValidationError:
            dropped.append(name)
            continue
        values[name] = value

    if new_kind == SchemaKind.OBJECT and not isinstance(node, ObjectNode):
        values["properties"] = {}
        values["additional_properties"] = False

    if dropped:
        logger.debug(f"sanitize_for_kind: dropped incompatible fields {dropped} moving {node.kind} -> {new_kind}")

    return target_cls.model_validate(values)
