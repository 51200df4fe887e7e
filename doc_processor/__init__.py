"""
Gemini Document Processor - clean images, extract text, and convert tables with the Gemini API

Core library. For the Streamlit application, see the ui/ directory.
"""
__version__ = "0.1.0"

# Export core API for programmatic use
from doc_processor.gateway import Gateway
from doc_processor.models import ProcessingOptions, UploadedImage
from doc_processor.orchestrator import Orchestrator
from doc_processor.session import SessionStore

__all__ = [
    "Gateway",
    "Orchestrator",
    "ProcessingOptions",
    "SessionStore",
    "UploadedImage",
]
