"""
Streamlit editor view for schema documents.

Renders the focused node of an EditorSession (breadcrumbs, description,
property rows with kind-specific inputs) and routes every user edit through
the session so the document, navigation and snapshot are replaced, never
mutated. Loading and persisting documents belong to the host application.
"""

import streamlit as st
import logging
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from .exceptions import EditOutcome
from .navigation import child_path
from .node_model import ArrayNode, BaseNode, ObjectNode, SchemaKind, UNSET, STRING_FORMATS
from .path_resolver import NOT_FOUND, path_label
from .session import EditorSession
from .document_codec import export_filename
from .dirty_tracker import calculate_changes, describe_changes

logger = logging.getLogger(__name__)

SESSION_KEY = "schema_editor_session"
DOCUMENT_NAME_KEY = "schema_editor_document_name"
WIDGET_GENERATION_KEY = "schema_editor_widget_generation"

# Input keys embed a generation; bumping it makes every input show the
# document value again instead of its last entry
WIDGET_KEY_FORMAT = "schema_editor_{generation}_{name}"

KIND_LABELS = {
    SchemaKind.STRING: "String",
    SchemaKind.NUMBER: "Number",
    SchemaKind.INTEGER: "Integer",
    SchemaKind.BOOLEAN: "Boolean",
    SchemaKind.OBJECT: "Object",
    SchemaKind.ARRAY: "Array",
    SchemaKind.NULL: "Null",
}


def widget_key(name: str) -> str:
    """Key of an editor input widget in the current widget generation."""
    return WIDGET_KEY_FORMAT.format(generation=st.session_state.get(WIDGET_GENERATION_KEY, 0), name=name)


def reset_widgets() -> None:
    """Drop the entries held by editor inputs so they show the document again."""
    st.session_state[WIDGET_GENERATION_KEY] = st.session_state.get(WIDGET_GENERATION_KEY, 0) + 1


def parse_enum_input(text: str) -> Any:
    """Turn a comma separated entry into enum values; blank input unsets enum."""
    values = [value.strip() for value in (text or "").split(",")]
    values = [value for value in values if value]
    return values or UNSET


def parse_optional_int(text: str) -> Any:
    """
    Parse a non-negative integer entry.

    Returns:
        The integer, or UNSET for blank input

    Raises:
        ValueError: If the entry is not a non-negative integer
    """
    text = (text or "").strip()
    if not text:
        return UNSET
    value = int(text)
    if value < 0:
        raise ValueError(f"expected a non-negative integer, got {value}")
    return value


def parse_optional_number(text: str, integer: bool = False) -> Any:
    """
    Parse a numeric entry; blank input unsets the field.

    Raises:
        ValueError: If the entry is not a number (an integer when ``integer``)
    """
    text = (text or "").strip()
    if not text:
        return UNSET
    if integer:
        return int(text)
    return float(text) if any(char in text for char in ".eE") else int(text)


def format_optional(value: Any) -> str:
    return "" if value is None else str(value)


class SchemaEditorView:
    """Streamlit rendering of the schema editing engine."""

    @staticmethod
    def get_session() -> Optional[EditorSession]:
        return st.session_state.get(SESSION_KEY)

    @staticmethod
    def set_session(session: EditorSession) -> None:
        st.session_state[SESSION_KEY] = session

    @staticmethod
    def open_document(document: BaseNode, name: str, settings=None) -> None:
        """Start editing a document supplied by the host."""
        SchemaEditorView.set_session(EditorSession.load(document, settings))
        st.session_state[DOCUMENT_NAME_KEY] = name
        reset_widgets()
        logger.info(f"Opened schema document '{name}' in editor")

    @staticmethod
    def reload_document(document: BaseNode) -> None:
        """Replace the edited document with a fresh copy from the host, keeping settings."""
        SchemaEditorView.set_session(SchemaEditorView.get_session().reload(document))
        reset_widgets()
        logger.info("Reloaded schema document in editor")

    @staticmethod
    def _apply(operation: str, *args: Any) -> None:
        session = SchemaEditorView.get_session()
        updated = session.apply(operation, *args)
        SchemaEditorView.set_session(updated)
        if updated.last_outcome == EditOutcome.STALE_FOCUS:
            st.warning("⚠️ The node you were editing no longer exists; returned to the nearest parent.")
        if updated.last_outcome != EditOutcome.NO_OP:
            st.rerun()

    @staticmethod
    def _navigate(path: Any, label: str) -> None:
        session = SchemaEditorView.get_session()
        SchemaEditorView.set_session(session.navigate(path, label))
        st.rerun()

    @staticmethod
    def render(on_save: Optional[Callable[[Dict[str, Any]], bool]] = None) -> None:
        """
        Render the editor for the session stored in Streamlit state.

        Args:
            on_save: Host callback receiving the document payload; returns True
                when the document was persisted
        """
        session = SchemaEditorView.get_session()
        if session is None:
            st.info("📋 No schema document loaded")
            return

        node = session.focus_node()
        if node is NOT_FOUND:
            session = replace(session, navigation=session.navigation.recover(session.document))
            SchemaEditorView.set_session(session)
            node = session.focus_node()

        SchemaEditorView._render_header(session, on_save)
        SchemaEditorView._render_breadcrumbs(session)

        SchemaEditorView._render_description(session, node)

        if isinstance(node, ObjectNode):
            SchemaEditorView._render_properties(session, node)
        else:
            st.caption(f"This node is of type {KIND_LABELS.get(node.kind, node.kind)} and has no properties.")

        with st.expander("🔍 Current node JSON"):
            st.json(node.model_dump(by_alias=True, exclude_none=True, mode="json"))

    @staticmethod
    def _render_header(session: EditorSession, on_save: Optional[Callable[[Dict[str, Any]], bool]]) -> None:
        name = st.session_state.get(DOCUMENT_NAME_KEY, "schema")
        dirty = session.is_dirty()

        col1, col2, col3, col4 = st.columns([3, 1, 1, 1])
        with col1:
            st.header(f"✏️ Editing: {name}")
            if dirty:
                summary = session.change_summary()
                st.warning(f"⚠️ Unsaved • {summary['total']} change{'s' if summary['total'] != 1 else ''}")
                with st.expander("Pending changes"):
                    for line in describe_changes(calculate_changes(session.snapshot, session.document)):
                        st.write(line)

        with col2:
            if st.button("💾 Save", type="primary", disabled=not dirty or on_save is None,
                         key="schema_save", width='stretch'):
                if on_save(session.payload()):
                    SchemaEditorView.set_session(session.mark_saved())
                    st.success("✅ Schema saved successfully")
                    st.rerun()
                else:
                    st.error("❌ Failed to save schema")

        with col3:
            if st.button("↩️ Discard", disabled=not dirty, key="schema_discard", width='stretch'):
                SchemaEditorView.set_session(session.discard_changes())
                reset_widgets()
                st.rerun()

        with col4:
            fmt = session.settings.default_export_format
            st.download_button(
                "📤 Export",
                data=session.export(fmt),
                file_name=export_filename(name, fmt),
                mime="application/json" if fmt == "json" else "application/x-yaml",
                key="schema_export",
                width='stretch'
            )

    @staticmethod
    def _render_breadcrumbs(session: EditorSession) -> None:
        crumbs = session.navigation.breadcrumbs
        columns = st.columns(len(crumbs))
        for position, (column, crumb) in enumerate(zip(columns, crumbs)):
            with column:
                is_focus = position == len(crumbs) - 1
                if st.button(crumb.label or path_label(crumb.path) or "…", key=f"crumb_{position}",
                             disabled=is_focus, width='stretch'):
                    SchemaEditorView._navigate(crumb.path, crumb.label)

    @staticmethod
    def _render_description(session: EditorSession, node: BaseNode) -> None:
        key = f"description_{path_label(session.focus_path)}"
        text = st.text_area("Description", value=node.description or "", key=widget_key(key))
        if text != (node.description or ""):
            SchemaEditorView._apply("update_description", text)

    @staticmethod
    def _render_properties(session: EditorSession, node: ObjectNode) -> None:
        st.subheader("Properties")
        properties = session.focus_properties()
        required = session.focus_required()

        if not properties:
            st.caption("No properties defined yet")

        for index, (name, prop) in enumerate(properties):
            SchemaEditorView._render_property(session, index, len(properties), name, prop, name in required)

        if st.button("➕ Add Property", key=f"add_property_{path_label(session.focus_path)}", width='stretch'):
            SchemaEditorView._apply("add_property")

    @staticmethod
    def _render_property(session: EditorSession, index: int, total: int, name: str,
                         prop: BaseNode, is_required: bool) -> None:
        field_id = f"{path_label(session.focus_path)}/{name}"
        header = f"🏷️ {name} ({prop.kind}){' 🔴' if is_required else ''}"

        with st.expander(header, expanded=True):
            col1, col2, col3 = st.columns([1, 1, 4])
            with col1:
                if st.button("🔼", key=f"up_{field_id}", disabled=index == 0, width='stretch'):
                    SchemaEditorView._apply("move_property", name, -1)
            with col2:
                if st.button("🔽", key=f"down_{field_id}", disabled=index == total - 1, width='stretch'):
                    SchemaEditorView._apply("move_property", name, 1)
            with col3:
                if st.button("🗑️ Remove", key=f"remove_{field_id}", width='stretch'):
                    SchemaEditorView._apply("remove_property", name)

            col1, col2 = st.columns(2)
            with col1:
                new_name = st.text_input("Property Name", value=name, key=widget_key(f"name_{field_id}"))
                if new_name != name and new_name.strip():
                    SchemaEditorView._apply("rename_property", name, new_name)

                kinds = list(SchemaKind.ALL)
                new_kind = st.selectbox("Type", options=kinds, index=kinds.index(prop.kind),
                                        format_func=lambda kind: KIND_LABELS[kind], key=widget_key(f"type_{field_id}"))
                if new_kind != prop.kind:
                    SchemaEditorView._apply("update_field", name, "type", new_kind)

            with col2:
                title = st.text_input("Display Title", value=prop.title or "", key=widget_key(f"title_{field_id}"))
                if title != (prop.title or ""):
                    SchemaEditorView._apply("update_field", name, "title", title)

                if st.checkbox("Required", value=is_required, key=widget_key(f"required_{field_id}")) != is_required:
                    SchemaEditorView._apply("toggle_required", name)

            SchemaEditorView._render_kind_fields(session, field_id, name, prop)

    @staticmethod
    def _text_field(label: str, name: str, field: str, current: Any, field_id: str,
                    parse: Callable[[str], Any]) -> None:
        entered = st.text_input(label, value=format_optional(current), key=widget_key(f"{field}_{field_id}"))
        if entered == format_optional(current):
            return
        try:
            value = parse(entered)
        except ValueError:
            logger.debug(f"_text_field: rejected {field} entry {entered!r} for '{name}'")
            st.warning(f"⚠️ {label} must be a valid number; the previous value was kept.")
            return
        SchemaEditorView._apply("update_field", name, field, value)

    @staticmethod
    def _render_kind_fields(session: EditorSession, field_id: str, name: str, prop: BaseNode) -> None:
        if prop.kind == SchemaKind.STRING:
            col1, col2 = st.columns(2)
            with col1:
                SchemaEditorView._text_field("Default Value", name, "default", prop.default, field_id,
                                             lambda text: text or UNSET)
                SchemaEditorView._text_field("Min Length", name, "minLength", prop.min_length, field_id,
                                             parse_optional_int)
                SchemaEditorView._text_field("Pattern (Regex)", name, "pattern", prop.pattern, field_id,
                                             lambda text: text or UNSET)
            with col2:
                enum_text = ", ".join(prop.enum) if prop.enum else ""
                entered = st.text_input("Enum Values (comma separated)", value=enum_text, key=widget_key(f"enum_{field_id}"))
                if entered != enum_text:
                    SchemaEditorView._apply("update_field", name, "enum", parse_enum_input(entered))
                SchemaEditorView._text_field("Max Length", name, "maxLength", prop.max_length, field_id,
                                             parse_optional_int)
                formats = [""] + list(STRING_FORMATS)
                current = prop.format or ""
                chosen = st.selectbox("Format", options=formats, index=formats.index(current),
                                      key=widget_key(f"format_{field_id}"))
                if chosen != current:
                    SchemaEditorView._apply("update_field", name, "format", chosen or UNSET)

        elif prop.kind in (SchemaKind.NUMBER, SchemaKind.INTEGER):
            integer = prop.kind == SchemaKind.INTEGER
            parse = lambda text: parse_optional_number(text, integer=integer)  # noqa: E731
            col1, col2 = st.columns(2)
            with col1:
                SchemaEditorView._text_field("Default Value", name, "default", prop.default, field_id, parse)
                SchemaEditorView._text_field("Minimum", name, "minimum", prop.minimum, field_id, parse)
                SchemaEditorView._text_field("Multiple Of", name, "multipleOf", prop.multiple_of, field_id, parse)
            with col2:
                SchemaEditorView._text_field("Maximum", name, "maximum", prop.maximum, field_id, parse)
                SchemaEditorView._text_field("Exclusive Minimum", name, "exclusiveMinimum",
                                             prop.exclusive_minimum, field_id, parse)
                SchemaEditorView._text_field("Exclusive Maximum", name, "exclusiveMaximum",
                                             prop.exclusive_maximum, field_id, parse)

        elif prop.kind == SchemaKind.BOOLEAN:
            options = ["(none)", "true", "false"]
            current = "(none)" if prop.default is None else str(prop.default).lower()
            chosen = st.selectbox("Default Value", options=options, index=options.index(current),
                                  key=widget_key(f"default_{field_id}"))
            if chosen != current:
                SchemaEditorView._apply("update_field", name, "default",
                                        UNSET if chosen == "(none)" else chosen == "true")

        elif prop.kind == SchemaKind.OBJECT:
            count = len(prop.properties)
            st.caption(f"{count} properties defined" if count else "No properties defined yet")
            if st.button("Edit Properties →", key=f"drill_{field_id}", width='stretch'):
                SchemaEditorView._navigate(child_path(session.focus_path, name), name)

        elif prop.kind == SchemaKind.ARRAY:
            SchemaEditorView._render_array_fields(session, field_id, name, prop)

    @staticmethod
    def _render_array_fields(session: EditorSession, field_id: str, name: str, prop: ArrayNode) -> None:
        col1, col2 = st.columns(2)
        with col1:
            SchemaEditorView._text_field("Min Items", name, "minItems", prop.min_items, field_id, parse_optional_int)
        with col2:
            SchemaEditorView._text_field("Max Items", name, "maxItems", prop.max_items, field_id, parse_optional_int)

        unique = st.checkbox("Unique Items", value=bool(prop.unique_items), key=widget_key(f"unique_{field_id}"))
        if unique != bool(prop.unique_items):
            SchemaEditorView._apply("update_field", name, "uniqueItems", True if unique else UNSET)

        kinds: List[str] = ["(choose)"] + list(SchemaKind.ALL)
        current = prop.items.kind if prop.items is not None else "(choose)"
        chosen = st.selectbox("Items Type", options=kinds, index=kinds.index(current),
                              format_func=lambda kind: KIND_LABELS.get(kind, kind), key=widget_key(f"items_type_{field_id}"))
        if chosen != current and chosen != "(choose)":
            SchemaEditorView._apply("set_items_kind", name, chosen)

        if prop.items is not None and prop.items.kind in (SchemaKind.OBJECT, SchemaKind.ARRAY):
            if st.button("Edit Array Items Schema →", key=f"drill_items_{field_id}", width='stretch'):
                SchemaEditorView._navigate(child_path(session.focus_path, name, via_items=True), f"{name}[]")
