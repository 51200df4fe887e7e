"""
Application state machine: owns the image set and options and drives one processing run at a time.
"""
from typing import Callable, Iterable, List, Optional

from . import codec
from . import config
from .core import logger
from .exceptions import (
    CorruptSessionError,
    DocProcessorError,
    PersistenceError,
    ValidationError,
)
from .gateway import Gateway
from .models import (
    ImageAsset,
    ProcessingOptions,
    ProgressState,
    ResultArtifact,
    UploadedImage,
)
from .session import SessionStore

# Application states
UPLOADING = "uploading"
CONFIGURING = "configuring"
PROCESSING = "processing"
DONE = "done"

ProgressListener = Callable[[ProgressState], None]

_PROGRESS_TASKS = {
    config.MODE_EXTRACT_TEXT: "Extracting text",
    config.MODE_EXTRACT_TABLE: "Extracting table data",
}


def validate_options(options: ProcessingOptions, image_count: int):
    """Check the mode-specific preconditions. Raises ValidationError."""
    if options.mode == config.MODE_CLEAN:
        if image_count != 1:
            raise ValidationError("Image cleaning only works with a single image.")
        if not options.instructions.strip():
            raise ValidationError("Please provide instructions for cleaning the image.")
    elif options.mode == config.MODE_EXTRACT_TABLE:
        if image_count != 1:
            raise ValidationError("Table extraction only works with a single image.")
    elif options.mode == config.MODE_EXTRACT_TEXT:
        if image_count < 1:
            raise ValidationError("Text extraction needs at least one image.")
    else:
        raise ValidationError("Invalid processing mode selected.")


class Orchestrator:
    """Holds all mutable application state; mutated only through its methods."""

    def __init__(self, gateway: Optional[Gateway] = None, session_store: Optional[SessionStore] = None):
        self.gateway = gateway or Gateway()
        self.session_store = session_store or SessionStore()
        self.state = UPLOADING
        self.images: List[ImageAsset] = []
        self.options = ProcessingOptions()
        self.progress = ProgressState()
        self.result: Optional[ResultArtifact] = None
        self.error: Optional[str] = None
        self.notification: Optional[str] = None
        self.has_saved_session = self.session_store.has()

    def _transition(self, new_state: str):
        if new_state != self.state:
            logger.info(f"State: {self.state} -> {new_state}")
        self.state = new_state

    # ===== Image Set ==========================================================

    def add_files(self, files: Iterable[UploadedImage]) -> bool:
        """Encode and append files. The whole batch is rejected if it would exceed the limit."""
        files = list(files)
        max_images = config.LIMITS["max_images"]
        if len(self.images) + len(files) > max_images:
            self.error = f"You can upload a maximum of {max_images} images."
            logger.warning(f"Rejected {len(files)} file(s): would exceed {max_images} images")
            return False

        try:
            assets = [ImageAsset.from_upload(f) for f in files]
        except DocProcessorError as e:
            self.error = f"Could not read the uploaded files: {e}"
            logger.error(self.error)
            return False

        self.images = self.images + assets
        self.error = None
        if self.state == UPLOADING and self.images:
            self._transition(CONFIGURING)
        return True

    def remove_image(self, image_id: str):
        self.images = [img for img in self.images if img.id != image_id]
        if not self.images:
            self._transition(UPLOADING)

    def update_options(self, **partial):
        """Shallow-merge option changes; validation happens on submit."""
        self.options = self.options.merged(**partial)

    # ===== Processing =========================================================

    def validate(self):
        validate_options(self.options, len(self.images))

    def submit(self, on_progress: Optional[ProgressListener] = None) -> bool:
        """
        Run the selected operation on the current images.

        Returns:
            True when a result is available (state is 'done'), False otherwise;
            the reason is left in self.error.
        """
        if self.state != CONFIGURING:
            logger.warning(f"Ignoring submit while in state '{self.state}'")
            return False

        self.error = None
        try:
            self.validate()
        except ValidationError as e:
            self.error = str(e)
            return False

        def report(progress: ProgressState):
            self.progress = progress
            if on_progress:
                on_progress(progress)

        def progress_handler(task: str) -> Callable[[float], None]:
            def handle(fraction: float):
                report(ProgressState(fraction=fraction, label=f"{task} - {round(fraction * 100)}% complete..."))
            return handle

        self.result = None
        self._transition(PROCESSING)
        report(ProgressState(0.0, "Starting process..."))

        options = self.options
        try:
            if options.mode == config.MODE_CLEAN:
                source = self.images[0]
                report(ProgressState(0.1, "Sending image to AI for cleaning..."))
                cleaned = self.gateway.clean_image(
                    source.encoded, options.instructions, options.temperature, options.clean_sensitivity
                )
                data, media_type = codec.decode(cleaned)
                result = ResultArtifact(
                    data=data,
                    file_name=config.OUTPUT_FILES[config.MODE_CLEAN].format(name=source.name),
                    format_tag=codec.subtype(media_type) or "png",
                    media_type=media_type,
                )
            elif options.mode == config.MODE_EXTRACT_TEXT:
                text = self.gateway.extract_text(
                    [img.encoded for img in self.images],
                    options.temperature,
                    options.high_accuracy,
                    progress_handler(_PROGRESS_TASKS[config.MODE_EXTRACT_TEXT]),
                )
                result = ResultArtifact(
                    data=text.encode("utf-8"),
                    file_name=config.OUTPUT_FILES[config.MODE_EXTRACT_TEXT],
                    format_tag="txt",
                    media_type="text/plain",
                )
            else:
                csv_text = self.gateway.extract_table(
                    self.images[0].encoded,
                    options.temperature,
                    options.high_accuracy,
                    progress_handler(_PROGRESS_TASKS[config.MODE_EXTRACT_TABLE]),
                )
                result = ResultArtifact(
                    data=csv_text.encode("utf-8"),
                    file_name=config.OUTPUT_FILES[config.MODE_EXTRACT_TABLE],
                    format_tag="csv",
                    media_type="text/csv",
                )
        except DocProcessorError as e:
            logger.error(f"Processing failed: {e}")
            self._fail(str(e))
            return False
        except Exception as e:
            logger.exception("Unexpected error during processing")
            self._fail(str(e) or "An unexpected error occurred.")
            return False

        self.result = result
        self.progress = ProgressState()
        self._transition(DONE)
        return True

    def _fail(self, message: str):
        self.error = message
        self.progress = ProgressState()
        self._transition(CONFIGURING)

    def reset(self):
        self.images = []
        self.options = ProcessingOptions()
        self.progress = ProgressState()
        self.result = None
        self.error = None
        self._transition(UPLOADING)

    # ===== Session ============================================================

    def save_session(self) -> bool:
        try:
            self.session_store.save(self.images, self.options)
        except PersistenceError as e:
            logger.error(f"Failed to save session: {e}")
            self.error = "Could not save the session. The storage might be full."
            return False
        self.has_saved_session = True
        self.notification = "Session saved successfully!"
        return True

    def load_session(self) -> bool:
        self.error = None
        try:
            snapshot = self.session_store.load()
        except CorruptSessionError as e:
            logger.error(f"Failed to load session: {e}")
            self.error = f"Could not load session. The saved data might be corrupted. (Error: {e})"
            self.has_saved_session = False
            return False

        if snapshot is None:
            self.notification = "No saved session found."
            self.has_saved_session = False
            return False

        self.images = snapshot.images
        self.options = snapshot.options
        self.result = None
        self.progress = ProgressState()
        self._transition(CONFIGURING)
        self.notification = "Session loaded successfully!"
        return True
