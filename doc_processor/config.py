"""
Central configuration file for the Gemini document processor.
"""
from google import genai

# --- Model and Generation Settings ---
MODEL_CONFIG = {
    "default_model": "gemini-2.5-flash",
    "high_accuracy_model": "gemini-2.5-pro",
    "image_model": "gemini-2.5-flash-image",
    "generation_config": {
        "temperature": 0.5,
    },
    # None leaves the model's own thinking default in place
    "thinking_budget": None,
    "high_accuracy_thinking_budget": 32768,
}

# --- Client Rate Limiting ---
RATE_LIMIT_CONFIG = {
    "calls": 15,
    "period": 60,  # seconds
}

# --- Upload Limits ---
LIMITS = {
    "max_images": 100,
    "preview_size": (256, 256),
}

# --- Session Persistence ---
SESSION_CONFIG = {
    "storage_key": "docPiState",
    "data_dir": "doc_data",
    # Roughly what a browser grants to local storage
    "quota_bytes": 5 * 1024 * 1024,
}

# --- Processing Modes ---
MODE_CLEAN = "clean"
MODE_EXTRACT_TEXT = "extract-text"
MODE_EXTRACT_TABLE = "extract-table"
PROCESSING_MODES = (MODE_CLEAN, MODE_EXTRACT_TEXT, MODE_EXTRACT_TABLE)

DEFAULT_OPTIONS = {
    "mode": MODE_CLEAN,
    "instructions": "",
    "temperature": 0.5,
    "high_accuracy": False,
    "clean_sensitivity": 0.5,
}

# Upper bound (inclusive) -> descriptor
SENSITIVITY_TIERS = [
    (0.3, "Low (Conservative)"),
    (0.7, "Medium (Balanced)"),
    (1.0, "High (Aggressive)"),
]

# --- Output Artifacts ---
OUTPUT_FILES = {
    MODE_CLEAN: "cleaned-{name}",
    MODE_EXTRACT_TEXT: "extracted-text.txt",
    MODE_EXTRACT_TABLE: "extracted-table.csv",
}

# --- Prompt Templates ---
PROMPT_TEMPLATES = {
    "clean":
        """Act as an expert document restoration AI. Clean this image based on the user's instructions and the specified sensitivity level.

    **Cleaning Sensitivity:** {sensitivity}
    - **Low sensitivity:** Be very conservative. Only remove the most obvious, non-original marks (e.g., heavy stains, clear handwriting). Prioritize preserving every detail of the original document over perfect cleanliness.
    - **High sensitivity:** Be more aggressive. Remove fainter marks, noise, and even minor paper texture variations. Strive for the cleanest possible background, even at a slight risk of affecting very light original content.

    **User's Instruction:** "{instructions}"

    Return only the cleaned image. Do not add any text or explanation.""",

    "ocr":
        "Perform high-fidelity Optical Character Recognition (OCR) on this document image. "
        "Your primary goal is to extract all text with the highest possible accuracy, making it searchable and usable. "
        "Pay close attention to preserving the original layout, including paragraphs, line breaks, and spacing, "
        "to maintain the document's structure and readability.",

    "table":
        "Analyze the image and extract the table data. Structure the output as a JSON object with a single key 'table' "
        "which is an array of arrays. The first inner array should be the header row, and subsequent inner arrays "
        "should be the data rows.",
}

# --- Output Schemas ---
TableExtractionSchema = genai.types.Schema(
    type=genai.types.Type.OBJECT,
    required=["table"],
    properties={
        "table": genai.types.Schema(
            type=genai.types.Type.ARRAY,
            description="The extracted table, represented as an array of arrays where each inner array is a row.",
            items=genai.types.Schema(
                type=genai.types.Type.ARRAY,
                items=genai.types.Schema(
                    type=genai.types.Type.STRING,
                    description="A single cell value from the table. It can be a string or a number represented as a string.",
                ),
            ),
        ),
    },
)
