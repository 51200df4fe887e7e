"""
Session state helpers centralizing key usage patterns.
"""
from __future__ import annotations

from typing import Optional

import streamlit as st

from doc_processor.orchestrator import Orchestrator

# Namespaced session state keys
ORCHESTRATOR_KEY = "app.orchestrator"
UPLOADER_NONCE_KEY = "app.uploader_nonce"


def get_orchestrator() -> Orchestrator:
    """Return the per-browser-session orchestrator, creating it on first use."""
    if ORCHESTRATOR_KEY not in st.session_state:
        st.session_state[ORCHESTRATOR_KEY] = Orchestrator()
    return st.session_state[ORCHESTRATOR_KEY]


def get_uploader_key() -> str:
    """Key for the file uploader; bumping it clears the widget."""
    return f"upload.files.{st.session_state.get(UPLOADER_NONCE_KEY, 0)}"


def clear_uploader() -> None:
    st.session_state[UPLOADER_NONCE_KEY] = st.session_state.get(UPLOADER_NONCE_KEY, 0) + 1


def pop_notification(orchestrator: Orchestrator) -> Optional[str]:
    """Take the pending notification so it is shown once."""
    message = orchestrator.notification
    orchestrator.notification = None
    return message


def _forget_option_widgets() -> None:
    """Drop option widget values so the widgets re-read the orchestrator's options."""
    for key in [k for k in st.session_state.keys() if str(k).startswith("options.")]:
        del st.session_state[key]


def reset_app() -> None:
    """Reset the orchestrator and forget option widget values."""
    get_orchestrator().reset()
    _forget_option_widgets()


def load_session() -> None:
    """Restore the saved session; on success the option widgets follow the loaded options."""
    if get_orchestrator().load_session():
        _forget_option_widgets()
