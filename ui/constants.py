"""
Constants and labels for the UI.
"""
from doc_processor.config import MODE_CLEAN, MODE_EXTRACT_TABLE, MODE_EXTRACT_TEXT

# Accepted upload extensions
UPLOAD_TYPES = ["png", "jpg", "jpeg", "webp", "gif", "bmp"]

# Image grid
GRID_COLUMNS = 5

# Text preview height for extracted text
TEXTAREA_RESULT_HEIGHT = 400
DATAFRAME_PREVIEW_HEIGHT = 400

MODE_LABELS = {
    MODE_CLEAN: "Clean image",
    MODE_EXTRACT_TEXT: "Extract text (OCR)",
    MODE_EXTRACT_TABLE: "Extract table (CSV)",
}

MODE_HELP = {
    MODE_CLEAN: "Remove stains, marks or handwriting from a single image.",
    MODE_EXTRACT_TEXT: "Transcribe the text of one or more images into a .txt file.",
    MODE_EXTRACT_TABLE: "Convert the table in a single image into a .csv file.",
}

# Material Icons
ICON_UPLOAD = ":material/upload:"
ICON_DELETE = ":material/delete:"
ICON_DOWNLOAD = ":material/download:"
ICON_PLAY_CIRCLE = ":material/play_circle:"
ICON_SAVE = ":material/save:"
ICON_FOLDER_OPEN = ":material/folder_open:"
ICON_REFRESH = ":material/refresh:"
ICON_CHECK_CIRCLE = ":material/check_circle:"
ICON_ERROR = ":material/error:"
ICON_WARNING = ":material/warning:"
ICON_LIGHTBULB = ":material/lightbulb:"
ICON_HOURGLASS = ":material/hourglass_top:"
