"""
Banners and toasts shown by the document processor screens.
"""
from typing import Callable, Optional

import streamlit as st

from ui.constants import (
    ICON_CHECK_CIRCLE,
    ICON_ERROR,
    ICON_LIGHTBULB,
    ICON_WARNING,
)


def _banner(render: Callable[[str], object], default_icon: str, message: str, icon: Optional[str]) -> None:
    render(f"{icon or default_icon} {message}")


def info(message: str, *, icon: Optional[str] = None) -> None:
    """Informational banner, e.g. while a run is in flight."""
    _banner(st.info, ICON_LIGHTBULB, message, icon)


def warning(message: str, *, icon: Optional[str] = None) -> None:
    _banner(st.warning, ICON_WARNING, message, icon)


def error(message: str, *, icon: Optional[str] = None) -> None:
    """Banner for the orchestrator's current error message."""
    _banner(st.error, ICON_ERROR, message, icon)


def toast(message: str) -> None:
    """One-shot notification, such as a saved or loaded session."""
    st.toast(message, icon=ICON_CHECK_CIRCLE)
