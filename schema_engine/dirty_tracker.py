"""
Change detection between the live schema document and its last-saved snapshot.

Comparison is structural and uses DeepDiff. Property order is part of a
document, so before comparing, every ``properties`` mapping is turned into an
ordered list of ``[name, node]`` pairs; a reordering then shows up as a change.
"""

from typing import Dict, Any, List
import logging

from deepdiff import DeepDiff

from .node_model import BaseNode

logger = logging.getLogger(__name__)

CHANGE_TYPES = (
    'values_changed',
    'type_changes',
    'dictionary_item_added',
    'dictionary_item_removed',
    'iterable_item_added',
    'iterable_item_removed',
)


def _ordered_form(value: Any) -> Any:
    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            if key == 'properties' and isinstance(item, dict):
                result[key] = [[name, _ordered_form(child)] for name, child in item.items()]
            else:
                result[key] = _ordered_form(item)
        return result
    if isinstance(value, list):
        return [_ordered_form(item) for item in value]
    return value


def canonical_form(node: BaseNode) -> Dict[str, Any]:
    """
    Convert a document to the order-sensitive form used for comparison.

    Args:
        node: Document root

    Returns:
        Plain data with properties as ordered name/node pairs
    """
    return _ordered_form(node.model_dump(by_alias=True, exclude_none=True, mode='json'))


def calculate_changes(snapshot: BaseNode, current: BaseNode) -> Dict[str, Any]:
    """
    Calculate the differences between the snapshot and the live document.

    Args:
        snapshot: Last-saved document
        current: Live document

    Returns:
        Dict keyed by DeepDiff change type, each holding the list of changed paths
    """
    diff = DeepDiff(
        canonical_form(snapshot),
        canonical_form(current),
        ignore_order=False,
        verbose_level=1,
    )

    changes: Dict[str, Any] = {}
    for change_type in CHANGE_TYPES:
        if change_type in diff and diff[change_type]:
            changes[change_type] = sorted(str(path) for path in diff[change_type])
    return changes


def has_changes(changes: Dict[str, Any]) -> bool:
    """Check if a result of calculate_changes holds any change."""
    if not changes:
        return False
    return any(changes.get(change_type) for change_type in CHANGE_TYPES)


def is_dirty(current: BaseNode, snapshot: BaseNode) -> bool:
    """Return True if the live document differs from the snapshot."""
    if current is snapshot:
        return False
    return has_changes(calculate_changes(snapshot, current))


def mark_saved(current: BaseNode) -> BaseNode:
    """
    Take a new snapshot of the live document.

    The snapshot is a deep, independent copy so later edits cannot leak into it.
    """
    snapshot = current.model_copy(deep=True)
    logger.info("Snapshot taken of current schema document")
    return snapshot


def get_change_summary(changes: Dict[str, Any]) -> Dict[str, int]:
    """
    Count changes by category.

    Returns:
        Dict with 'modified', 'added', 'removed' and 'total' counts
    """
    summary = {'modified': 0, 'added': 0, 'removed': 0, 'total': 0}
    if not changes:
        return summary

    summary['modified'] = len(changes.get('values_changed', [])) + len(changes.get('type_changes', []))
    summary['added'] = len(changes.get('dictionary_item_added', [])) + len(changes.get('iterable_item_added', []))
    summary['removed'] = len(changes.get('dictionary_item_removed', [])) + len(changes.get('iterable_item_removed', []))
    summary['total'] = summary['modified'] + summary['added'] + summary['removed']
    return summary


def describe_changes(changes: Dict[str, Any]) -> List[str]:
    """Render the changed paths as short lines for the editor's change panel."""
    icons = {
        'values_changed': '✏️',
        'type_changes': '🔄',
        'dictionary_item_added': '➕',
        'iterable_item_added': '➕',
        'dictionary_item_removed': '➖',
        'iterable_item_removed': '➖',
    }
    lines = []
    for change_type in CHANGE_TYPES:
        for path in changes.get(change_type, []):
            lines.append(f"{icons[change_type]} {path}")
    return lines
