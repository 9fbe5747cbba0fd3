"""
Breadcrumb navigation over a schema document.

The navigation state records which node the editor is focused on and the trail
of breadcrumbs leading there. It is an immutable value: every call returns a
new state.
"""

from dataclasses import dataclass
from typing import Any, List, Tuple
import logging

from .exceptions import InvalidPathError
from .node_model import BaseNode
from .path_resolver import (
    ItemsStep,
    Path,
    PropertyStep,
    ROOT_PATH,
    is_resolvable,
    parse_path,
)

logger = logging.getLogger(__name__)

DEFAULT_ROOT_LABEL = "Root"


@dataclass(frozen=True)
class Breadcrumb:
    """A revisitable focus path with its display label."""
    path: Path
    label: str


@dataclass(frozen=True)
class NavigationState:
    """
    Breadcrumb trail plus the current focus.

    Attributes:
        breadcrumbs: Trail starting with the root breadcrumb
        focus: Path of the node being edited
    """
    breadcrumbs: Tuple[Breadcrumb, ...]
    focus: Path = ROOT_PATH

    @classmethod
    def initial(cls, root_label: str = DEFAULT_ROOT_LABEL) -> 'NavigationState':
        """Create the state for a freshly loaded document: only the root breadcrumb."""
        return cls(breadcrumbs=(Breadcrumb(ROOT_PATH, root_label),), focus=ROOT_PATH)

    @property
    def focus_path(self) -> Path:
        return self.focus

    def labels(self) -> List[str]:
        return [crumb.label for crumb in self.breadcrumbs]

    def index_of(self, path: Path) -> int:
        """Position of ``path`` in the breadcrumb trail, or -1."""
        for position, crumb in enumerate(self.breadcrumbs):
            if crumb.path == path:
                return position
        return -1

    def navigate(self, path: Any, label: str = "") -> 'NavigationState':
        """
        Focus a path.

        If the path is already in the trail, the trail is cut back to end at
        that breadcrumb (jump back). Otherwise a new breadcrumb is appended
        (drill down).

        Args:
            path: Target path (any form accepted by ``parse_path``)
            label: Display label for a new breadcrumb

        Returns:
            New navigation state, or this state unchanged if the path is malformed
        """
        try:
            target = parse_path(path)
        except InvalidPathError as e:
            logger.warning(f"navigate: ignoring malformed path: {e.issue}")
            return self

        position = self.index_of(target)
        if position >= 0:
            logger.debug(f"navigate: jump back to breadcrumb {position} ({self.breadcrumbs[position].label})")
            return NavigationState(self.breadcrumbs[:position + 1], target)

        logger.debug(f"navigate: drill down to '{label}'")
        return NavigationState(self.breadcrumbs + (Breadcrumb(target, label),), target)

    def recover(self, root: BaseNode) -> 'NavigationState':
        """
        Snap a stale focus back to the nearest breadcrumb that still resolves.

        Breadcrumbs after that one are discarded. A focus that resolves is
        returned untouched.
        """
        if is_resolvable(root, self.focus):
            return self

        for position in range(len(self.breadcrumbs) - 1, -1, -1):
            crumb = self.breadcrumbs[position]
            if is_resolvable(root, crumb.path):
                logger.warning(f"recover: focus is stale, returning to '{crumb.label}'")
                return NavigationState(self.breadcrumbs[:position + 1], crumb.path)

        # The root always resolves, so this is only reached for a trail without a root
        return NavigationState.initial()


def child_path(path: Path, name: str, via_items: bool = False) -> Path:
    """
    Build the drill-down path for a property of the focus object.

    Args:
        path: Focus path
        name: Property name
        via_items: Descend into the property's array items instead

    Returns:
        Path to the property (or to its items definition)
    """
    target = path + (PropertyStep(name),)
    if via_items:
        target = target + (ItemsStep(0),)
    return target
