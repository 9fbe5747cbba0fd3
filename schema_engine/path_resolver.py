"""
Path resolution over schema documents.

A path is a tuple of traversal steps from the document root: ``PropertyStep``
descends into ``properties[name]`` of an object node, ``ItemsStep`` descends
into the ``items`` definition of an array node. Resolution never raises; a path
that no longer matches the document is a stale focus and resolves to NOT_FOUND.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union
import logging

from .exceptions import InvalidPathError
from .node_model import ArrayNode, BaseNode, ObjectNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyStep:
    """Descend into ``properties[name]``."""
    name: str


@dataclass(frozen=True)
class ItemsStep:
    """
    Descend into ``items``.

    An array has one shared items definition, so ``index`` is carried only for
    display and plays no part in equality or resolution.
    """
    index: Optional[int] = field(default=None, compare=False)


PathStep = Union[PropertyStep, ItemsStep]
Path = Tuple[PathStep, ...]

ROOT_PATH: Path = ()

PROPERTIES_SEGMENT = "properties"
ITEMS_SEGMENT = "items"


class _NotFound:
    """Result of resolving a stale or invalid path."""

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


def _is_index(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    return isinstance(value, str) and value.isdigit()


def _parse_segments(segments: Sequence[Any], raw: Any) -> Path:
    steps: List[PathStep] = []
    position = 0
    while position < len(segments):
        segment = segments[position]
        if isinstance(segment, (PropertyStep, ItemsStep)):
            steps.append(segment)
            position += 1
        elif segment == PROPERTIES_SEGMENT:
            if position + 1 >= len(segments) or not isinstance(segments[position + 1], str):
                raise InvalidPathError(raw, f"'{PROPERTIES_SEGMENT}' at position {position} is not followed by a property name")
            steps.append(PropertyStep(segments[position + 1]))
            position += 2
        elif segment == ITEMS_SEGMENT:
            index = None
            if position + 1 < len(segments) and _is_index(segments[position + 1]):
                index = int(segments[position + 1])
                position += 1
            steps.append(ItemsStep(index))
            position += 1
        else:
            raise InvalidPathError(raw, f"unexpected segment {segment!r} at position {position}")
    return tuple(steps)


def _parse_dotted(dotted: str) -> Path:
    steps: List[PathStep] = []
    for part in dotted.split("."):
        if part.isdigit():
            steps.append(ItemsStep(int(part)))
        else:
            steps.append(PropertyStep(part))
    return tuple(steps)


def parse_path(value: Any) -> Path:
    """
    Normalize a host-supplied path into a tuple of steps.

    Accepted forms:
        - None, "" or an empty sequence: the root
        - a sequence of PathStep objects
        - segment form: ``["properties", "address", "items", "properties", "street"]``
          (an integer may follow ``"items"`` and is ignored for resolution)
        - dotted form: ``"address.0.street"`` where numeric parts descend into items

    Raises:
        InvalidPathError: If the value is not one of the accepted forms
    """
    if value is None or value == "":
        return ROOT_PATH
    if isinstance(value, (PropertyStep, ItemsStep)):
        return (value,)
    if isinstance(value, str):
        return _parse_dotted(value)
    if isinstance(value, (list, tuple)):
        return _parse_segments(list(value), value)
    raise InvalidPathError(value, f"unsupported path type {type(value).__name__}")


def format_path(path: Path) -> List[Any]:
    """Render a path in segment form."""
    segments: List[Any] = []
    for step in path:
        if isinstance(step, PropertyStep):
            segments.extend([PROPERTIES_SEGMENT, step.name])
        else:
            segments.append(ITEMS_SEGMENT)
            if step.index is not None:
                segments.append(step.index)
    return segments


def path_label(path: Path) -> str:
    """Render a path in dotted form (items steps show as their index, default 0)."""
    parts = []
    for step in path:
        if isinstance(step, PropertyStep):
            parts.append(step.name)
        else:
            parts.append(str(step.index if step.index is not None else 0))
    return ".".join(parts)


def _step(node: BaseNode, step: PathStep) -> Any:
    if isinstance(step, PropertyStep):
        if isinstance(node, ObjectNode) and step.name in node.properties:
            return node.properties[step.name]
        return NOT_FOUND
    if isinstance(node, ArrayNode) and node.items is not None:
        return node.items
    return NOT_FOUND


def resolve(root: BaseNode, path: Path) -> Any:
    """
    Walk a path from the root.

    Args:
        root: Document root node
        path: Tuple of steps

    Returns:
        The node the path designates, or NOT_FOUND
    """
    current = root
    for step in path:
        current = _step(current, step)
        if current is NOT_FOUND:
            return NOT_FOUND
    return current


def is_resolvable(root: BaseNode, path: Path) -> bool:
    """Return True if the path designates a node of the document."""
    return resolve(root, path) is not NOT_FOUND


def nearest_valid_ancestor(root: BaseNode, path: Path) -> Path:
    """Return the longest prefix of ``path`` that still resolves (root at worst)."""
    current = root
    for depth, step in enumerate(path):
        current = _step(current, step)
        if current is NOT_FOUND:
            return path[:depth]
    return path


def with_mutation_at(root: BaseNode, path: Path,
                     mutate: Callable[[BaseNode], Optional[bool]]) -> BaseNode:
    """
    Apply an in-place edit to a deep copy of the document.

    The whole document is deep-copied so the returned root shares nothing with
    ``root``; ``mutate`` then edits the copy of the target node in place.

    Args:
        root: Document root node (never modified)
        path: Tuple of steps designating the target node
        mutate: Callable receiving the copied target; returning False signals
            that it made no change

    Returns:
        The new root, or ``root`` itself if the path does not resolve or
        ``mutate`` reported no change
    """
    if resolve(root, path) is NOT_FOUND:
        logger.debug(f"with_mutation_at: stale path '{path_label(path)}', document unchanged")
        return root

    new_root = root.model_copy(deep=True)
    target = resolve(new_root, path)
    if mutate(target) is False:
        return root
    return new_root
