"""
Gemini Document Processor - Streamlit App
Main entrypoint rendering the upload / configure / processing / done screens.
"""
import sys
from pathlib import Path

# Add parent directory to path to find the doc_processor and ui packages
parent_dir = Path(__file__).parent.parent.absolute()
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import streamlit as st

from doc_processor.orchestrator import CONFIGURING, DONE, PROCESSING, UPLOADING
from ui.components import (
    render_file_upload,
    render_image_grid,
    render_options_panel,
    render_result,
    render_session_actions,
    run_with_progress,
)
from ui.constants import ICON_FOLDER_OPEN, ICON_HOURGLASS
from ui.feedback import error, info, toast
from ui.state import get_orchestrator, load_session, pop_notification, reset_app

# Page configuration
st.set_page_config(
    page_title="Gemini Document Processor",
    page_icon="📄",
    layout="centered",
)

st.title("Gemini Document Processor")
st.caption("Clean images, extract text, and convert tables with the power of AI.")

orchestrator = get_orchestrator()

if notification := pop_notification(orchestrator):
    toast(notification)

if orchestrator.state == UPLOADING:
    if orchestrator.error:
        error(orchestrator.error)
    render_file_upload(orchestrator)
    if orchestrator.has_saved_session:
        st.button(
            f"{ICON_FOLDER_OPEN} Load Previous Session",
            on_click=load_session,
            key="session.load_previous",
        )

elif orchestrator.state == CONFIGURING:
    render_image_grid(orchestrator.images, on_delete=orchestrator.remove_image)
    with st.expander("Add more images"):
        render_file_upload(orchestrator)
    if orchestrator.error:
        error(orchestrator.error)
    render_session_actions(orchestrator)
    if render_options_panel(orchestrator):
        run_with_progress(orchestrator)
        st.rerun()

elif orchestrator.state == PROCESSING:
    # Only reachable if a previous script run was interrupted mid-request
    info("A run is still in progress...", icon=ICON_HOURGLASS)
    st.progress(orchestrator.progress.fraction, text=orchestrator.progress.label)

elif orchestrator.state == DONE and orchestrator.result is not None:
    render_result(orchestrator.result, on_reset=reset_app)
