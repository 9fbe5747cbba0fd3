"""
Main Streamlit application for the schema editor.
Loads a JSON schema document and edits it through the schema engine.
"""

import streamlit as st
from pathlib import Path
import logging
from typing import Any, Dict

from schema_engine.config_loader import EditorSettings, get_config, get_config_value, get_logging_level_name
from schema_engine.document_codec import dumps, loads, node_from_dict
from schema_engine.editor_view import DOCUMENT_NAME_KEY, SchemaEditorView
from schema_engine.exceptions import DocumentLoadError, create_user_friendly_error_message

DOCUMENT_SOURCE_KEY = "schema_document_source"


def get_logging_level(level_str):
    """Map string logging level to logging constant."""
    level_map = {
        'DEBUG': logging.DEBUG,
        'INFO': logging.INFO,
        'WARNING': logging.WARNING,
        'ERROR': logging.ERROR,
        'CRITICAL': logging.CRITICAL
    }
    return level_map.get(str(level_str).upper(), logging.INFO)


# Configure logging dynamically from config
log_level_str = get_logging_level_name(get_config())
logging.basicConfig(level=get_logging_level(log_level_str))
logger = logging.getLogger(__name__)
logger.info(f"Logging configured to level: {log_level_str}")

app_name = get_config_value('app', 'name', 'Schema Editor')
app_version = get_config_value('app', 'version', 'Unknown')
logger.info(f"Starting {app_name} version: {app_version}")

# Page configuration
st.set_page_config(
    page_title=app_name,
    page_icon="🧩",
    layout="wide",
    initial_sidebar_state="expanded"
)


def show_load_error(error: DocumentLoadError) -> None:
    """Display a document load error with its recovery suggestions."""
    info = create_user_friendly_error_message(error)
    st.error(f"**{info['title']}**")
    st.error(info['message'])
    if info['recovery_suggestions']:
        st.info("💡 **Troubleshooting:**")
        for suggestion in info['recovery_suggestions']:
            st.info(f"• {suggestion}")


def open_sample_document(settings: EditorSettings) -> None:
    """Open the sample document named in config, if any, on first run."""
    if SchemaEditorView.get_session() is not None or settings.sample_document is None:
        return

    path = settings.sample_document
    try:
        document = loads(path.read_text(encoding='utf-8'), source=str(path))
    except OSError as e:
        logger.warning(f"Could not read sample document {path}: {e}")
        return
    except DocumentLoadError as e:
        show_load_error(e)
        return

    SchemaEditorView.open_document(document, path.stem, settings)
    st.session_state[DOCUMENT_SOURCE_KEY] = path


def save_document(payload: Dict[str, Any]) -> bool:
    """
    Persist the edited document.

    Documents opened from disk are written back to their file; uploaded or new
    documents only get a new snapshot and can be downloaded with Export.

    Args:
        payload: Document in its JSON shape

    Returns:
        True if the document was saved
    """
    source = st.session_state.get(DOCUMENT_SOURCE_KEY)
    if source is None:
        logger.info("Document has no file on disk, snapshot updated only")
        return True

    try:
        Path(source).write_text(dumps(node_from_dict(payload)) + "\n", encoding='utf-8')
    except OSError as e:
        logger.error(f"Failed to write schema document {source}: {e}")
        return False

    logger.info(f"Saved schema document to {source}")
    return True


def render_sidebar(settings: EditorSettings) -> None:
    """Render document selection controls."""
    with st.sidebar:
        st.title(f"🧩 {app_name}")
        st.caption(f"Version {app_version}")

        uploaded = st.file_uploader("Open JSON schema", type=["json"], key="schema_upload")
        if uploaded is not None and st.button("📂 Load uploaded file", width='stretch'):
            try:
                document = loads(uploaded.getvalue().decode('utf-8'), source=uploaded.name)
            except UnicodeDecodeError as e:
                st.error(f"❌ File is not UTF-8 text: {e}")
            except DocumentLoadError as e:
                show_load_error(e)
            else:
                SchemaEditorView.open_document(document, Path(uploaded.name).stem, settings)
                st.session_state[DOCUMENT_SOURCE_KEY] = None
                st.rerun()

        title = st.text_input("New document title", value="", key="new_document_title")
        if st.button("➕ New document", width='stretch'):
            document = node_from_dict({'title': title} if title else {})
            SchemaEditorView.open_document(document, title or "schema", settings)
            st.session_state[DOCUMENT_SOURCE_KEY] = None
            st.rerun()

        if SchemaEditorView.get_session() is not None:
            st.divider()
            st.write(f"**Document:** {st.session_state.get(DOCUMENT_NAME_KEY, 'schema')}")

            source = st.session_state.get(DOCUMENT_SOURCE_KEY)
            if source is not None and st.button("🔄 Reload from file", width='stretch'):
                try:
                    document = loads(Path(source).read_text(encoding='utf-8'), source=str(source))
                except OSError as e:
                    st.error(f"❌ Could not read {source}: {e}")
                except DocumentLoadError as e:
                    show_load_error(e)
                else:
                    SchemaEditorView.reload_document(document)
                    st.rerun()


def main():
    """Main application entry point."""
    settings = EditorSettings.from_config(get_config())

    open_sample_document(settings)
    render_sidebar(settings)
    SchemaEditorView.render(on_save=save_document)


if __name__ == "__main__":
    main()
