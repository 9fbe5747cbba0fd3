"""
Editing session for one schema document.

The session holds exactly three values: the live document, the navigation
state and the last-saved snapshot. Each call replaces them; nothing is
mutated in place, so the host can keep the session in its own state store.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional
import logging

from . import mutation_engine
from .config_loader import EditorSettings
from .dirty_tracker import calculate_changes, get_change_summary, is_dirty, mark_saved
from .document_codec import export_document, node_to_dict
from .exceptions import EditOutcome
from .navigation import NavigationState
from .node_model import BaseNode, ObjectNode
from .path_resolver import NOT_FOUND, Path, resolve

logger = logging.getLogger(__name__)

# Operations the session can apply at the current focus, by name
OPERATIONS: Dict[str, Callable[..., BaseNode]] = {
    'add_property': mutation_engine.add_property,
    'remove_property': mutation_engine.remove_property,
    'rename_property': mutation_engine.rename_property,
    'update_field': mutation_engine.update_field,
    'toggle_required': mutation_engine.toggle_required,
    'update_description': mutation_engine.update_description,
    'move_property': mutation_engine.move_property,
    'set_items_kind': mutation_engine.set_items_kind,
}


@dataclass(frozen=True)
class EditorSession:
    """
    Live document, navigation and snapshot of one editing session.

    Attributes:
        document: Live document root
        navigation: Breadcrumbs and focus
        snapshot: Last-saved copy of the document
        settings: Editor settings
        last_outcome: EditOutcome of the most recent edit, if any
    """
    document: BaseNode
    navigation: NavigationState
    snapshot: BaseNode
    settings: EditorSettings = field(default_factory=EditorSettings)
    last_outcome: Optional[str] = None

    @classmethod
    def load(cls, document: BaseNode, settings: Optional[EditorSettings] = None) -> 'EditorSession':
        """
        Start a session on a freshly loaded document.

        Args:
            document: Document root supplied by the host
            settings: Editor settings (defaults when omitted)

        Returns:
            Session focused on the root with a clean snapshot
        """
        settings = settings or EditorSettings()
        logger.info(f"Loading schema document into editor ({document.kind} root)")
        return cls(
            document=document,
            navigation=NavigationState.initial(settings.root_label),
            snapshot=mark_saved(document),
            settings=settings,
        )

    @property
    def focus_path(self) -> Path:
        return self.navigation.focus

    def focus_node(self) -> Any:
        """Return the focused node, or NOT_FOUND if the focus is stale."""
        return resolve(self.document, self.navigation.focus)

    def focus_properties(self) -> List[tuple]:
        """Return the (name, node) pairs of the focused object."""
        return mutation_engine.properties_of(self.focus_node())

    def focus_required(self) -> List[str]:
        node = self.focus_node()
        if isinstance(node, ObjectNode):
            return list(node.required or [])
        return []

    def apply(self, operation: str, *args: Any, **kwargs: Any) -> 'EditorSession':
        """
        Run an edit operation at the current focus.

        Args:
            operation: Name of an entry in OPERATIONS
            *args: Operation arguments after (root, path)

        Returns:
            Session holding the new document, with last_outcome recorded

        Raises:
            KeyError: If the operation name is unknown
        """
        func = OPERATIONS[operation]
        if operation == 'add_property':
            kwargs.setdefault('prefix', self.settings.new_property_prefix)

        if resolve(self.document, self.navigation.focus) is NOT_FOUND:
            logger.warning(f"{operation}: focus is stale, edit ignored")
            return replace(self,
                           navigation=self.navigation.recover(self.document),
                           last_outcome=EditOutcome.STALE_FOCUS)

        new_document = func(self.document, self.navigation.focus, *args, **kwargs)
        outcome = EditOutcome.NO_OP if new_document is self.document else EditOutcome.APPLIED
        logger.debug(f"{operation}: {outcome}")

        return replace(self,
                       document=new_document,
                       navigation=self.navigation.recover(new_document),
                       last_outcome=outcome)

    def navigate(self, path: Any, label: str = "") -> 'EditorSession':
        """Move the focus (drill down or jump back to a breadcrumb)."""
        return replace(self, navigation=self.navigation.navigate(path, label))

    def is_dirty(self) -> bool:
        return is_dirty(self.document, self.snapshot)

    def change_summary(self) -> Dict[str, int]:
        return get_change_summary(calculate_changes(self.snapshot, self.document))

    def mark_saved(self) -> 'EditorSession':
        """Record the live document as persisted."""
        return replace(self, snapshot=mark_saved(self.document))

    def discard_changes(self) -> 'EditorSession':
        """Return the live document to the last-saved snapshot."""
        document = self.snapshot.model_copy(deep=True)
        logger.info("Discarding unsaved schema changes")
        return replace(self, document=document, navigation=self.navigation.recover(document),
                       last_outcome=None)

    def reload(self, document: BaseNode) -> 'EditorSession':
        """Replace the document with a fresh copy from the host, keeping settings."""
        return EditorSession.load(document, self.settings)

    def payload(self) -> Dict[str, Any]:
        """Document in its JSON shape, for the host to persist."""
        return node_to_dict(self.document)

    def export(self, fmt: Optional[str] = None) -> str:
        return export_document(
            self.document,
            fmt or self.settings.default_export_format,
            indent=self.settings.export_indent
        )
