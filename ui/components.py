"""
Reusable UI building blocks for the four application screens.
"""
from __future__ import annotations

import io
from typing import Callable, List

import polars as pl
import streamlit as st

from doc_processor.config import LIMITS, MODE_CLEAN, MODE_EXTRACT_TEXT, PROCESSING_MODES
from doc_processor.exceptions import ValidationError
from doc_processor.models import ImageAsset, ProgressState, ResultArtifact, UploadedImage
from doc_processor.orchestrator import Orchestrator
from ui.constants import (
    DATAFRAME_PREVIEW_HEIGHT,
    GRID_COLUMNS,
    ICON_DELETE,
    ICON_DOWNLOAD,
    ICON_FOLDER_OPEN,
    ICON_PLAY_CIRCLE,
    ICON_REFRESH,
    ICON_SAVE,
    MODE_HELP,
    MODE_LABELS,
    TEXTAREA_RESULT_HEIGHT,
    UPLOAD_TYPES,
)
from ui.feedback import error, info, warning
from ui.state import clear_uploader, get_uploader_key, load_session


# ===== Upload ================================================================

def render_file_upload(orchestrator: Orchestrator) -> None:
    """File uploader; new files are handed to the orchestrator once."""
    uploaded = st.file_uploader(
        f"Upload up to {LIMITS['max_images']} images",
        type=UPLOAD_TYPES,
        accept_multiple_files=True,
        key=get_uploader_key(),
    )
    if uploaded:
        files: List[UploadedImage] = [
            UploadedImage(name=f.name, data=f.getvalue(), media_type=f.type or None)
            for f in uploaded
        ]
        orchestrator.add_files(files)
        clear_uploader()
        st.rerun()


# ===== Image Grid ============================================================

def render_image_grid(images: List[ImageAsset], on_delete: Callable[[str], None]) -> None:
    """Thumbnails with a delete button per image."""
    st.caption(f"{len(images)} image(s) selected")
    for start in range(0, len(images), GRID_COLUMNS):
        cols = st.columns(GRID_COLUMNS)
        for image, col in zip(images[start:start + GRID_COLUMNS], cols):
            with col:
                st.image(image.preview(), caption=image.name, width="stretch")
                st.button(
                    ICON_DELETE,
                    key=f"grid.delete.{image.id}",
                    help=f"Remove {image.name}",
                    on_click=on_delete,
                    args=(image.id,),
                )


# ===== Options Panel =========================================================

def render_options_panel(orchestrator: Orchestrator) -> bool:
    """
    Render the processing options form.

    Returns:
        True when the user pressed the submit button.
    """
    options = orchestrator.options

    with st.container(border=True):
        mode = st.radio(
            "Mode",
            options=list(PROCESSING_MODES),
            index=PROCESSING_MODES.index(options.mode),
            format_func=lambda m: MODE_LABELS[m],
            horizontal=True,
            key="options.mode",
        )
        st.caption(MODE_HELP[mode])
        changes = {"mode": mode}

        if mode == MODE_CLEAN:
            changes["instructions"] = st.text_area(
                "Instructions",
                value=options.instructions,
                placeholder="e.g. Remove the coffee stain and the handwritten notes in the margin.",
                key="options.instructions",
            )
            changes["clean_sensitivity"] = st.slider(
                "Cleaning sensitivity",
                min_value=0.0,
                max_value=1.0,
                value=float(options.clean_sensitivity),
                step=0.05,
                key="options.clean_sensitivity",
            )
        else:
            changes["high_accuracy"] = st.toggle(
                "High accuracy (slower)",
                value=options.high_accuracy,
                key="options.high_accuracy",
            )

        changes["temperature"] = st.slider(
            "Temperature",
            min_value=0.0,
            max_value=1.0,
            value=float(options.temperature),
            step=0.05,
            key="options.temperature",
        )

        orchestrator.update_options(**changes)

        try:
            orchestrator.validate()
            blocked_reason = None
        except ValidationError as e:
            blocked_reason = str(e)
        if blocked_reason:
            info(blocked_reason)

        label = "Extract text" if mode == MODE_EXTRACT_TEXT else MODE_LABELS[mode]
        return st.button(
            f"{ICON_PLAY_CIRCLE} {label}",
            type="primary",
            width="stretch",
            disabled=blocked_reason is not None,
            key="options.submit",
        )


def render_session_actions(orchestrator: Orchestrator) -> None:
    col_save, col_load = st.columns(2)
    with col_save:
        st.button(f"{ICON_SAVE} Save", width="stretch", on_click=orchestrator.save_session, key="session.save")
    with col_load:
        st.button(f"{ICON_FOLDER_OPEN} Load", width="stretch", on_click=load_session, key="session.load")


# ===== Processing ============================================================

def run_with_progress(orchestrator: Orchestrator) -> None:
    """Submit and mirror progress updates into a progress bar."""
    progress_bar = st.progress(0.0, text="Starting process...")

    def update(progress: ProgressState) -> None:
        progress_bar.progress(min(max(progress.fraction, 0.0), 1.0), text=progress.label)

    with st.spinner("Processing..."):
        orchestrator.submit(on_progress=update)


# ===== Result ================================================================

def render_result(result: ResultArtifact, on_reset: Callable[[], None]) -> None:
    """Preview and download the artifact of a finished run."""
    st.subheader(result.file_name)

    if result.format_tag == "csv":
        try:
            df = pl.read_csv(io.BytesIO(result.data), infer_schema_length=0, truncate_ragged_lines=True)
            st.dataframe(df, height=DATAFRAME_PREVIEW_HEIGHT, width="stretch")
        except pl.exceptions.PolarsError as e:
            warning(f"Could not render table preview: {e}")
            st.code(result.data.decode("utf-8"), language=None)
    elif result.format_tag == "txt":
        st.text_area("Extracted text", value=result.data.decode("utf-8"), height=TEXTAREA_RESULT_HEIGHT, disabled=True)
    elif result.media_type.startswith("image/"):
        st.image(result.data, width="stretch")
    else:
        error(f"Unknown result format: {result.format_tag}")

    col_download, col_reset = st.columns(2)
    with col_download:
        st.download_button(
            f"{ICON_DOWNLOAD} Download {result.file_name}",
            data=result.data,
            file_name=result.file_name,
            mime=result.media_type,
            type="primary",
            width="stretch",
        )
    with col_reset:
        st.button(f"{ICON_REFRESH} Start over", width="stretch", on_click=on_reset, key="result.reset")
