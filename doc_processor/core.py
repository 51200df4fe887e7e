"""
Core utilities for talking to Gemini: logging, client management, and request helpers.
"""

import os
from typing import Optional, Dict, Any
from google import genai
from google.genai import types
from ratelimit import limits, sleep_and_retry
import logging

from . import config
from .codec import decode

# Logging configuration
def setup_logging(level: int = logging.INFO, format_string: str = "[%(asctime)s] %(levelname)s:%(name)s:%(message)s", filename: Optional[str] = None) -> logging.Logger:
    """Set up logging configuration."""
    handlers = []
    if filename:
        handlers.append(logging.FileHandler(filename))
    handlers.append(logging.StreamHandler())

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=handlers,
    )
    return logging.getLogger("doc_processor")

logger = setup_logging()

# API key configuration
def get_api_key() -> str:
    """Get Gemini API key from environment."""
    api_key = os.getenv('GEMINI_API_KEY')
    if not api_key:
        raise ValueError("GEMINI_API_KEY environment variable is required")
    return api_key

class GeminiClient:
    """Wrapper for Gemini client with reusable connection."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or get_api_key()
        self._client = None

    @property
    def client(self) -> genai.Client:
        """Get or create Gemini client."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @sleep_and_retry
    @limits(calls=config.RATE_LIMIT_CONFIG["calls"], period=config.RATE_LIMIT_CONFIG["period"])
    def generate_content(self, model_name: str, contents, generation_config: dict):
        """
        Calls the Gemini API's generate_content method with rate limiting.
        """
        return self.client.models.generate_content(
            model=model_name,
            contents=contents,
            config=generation_config
        )


def prepare_image_for_gemini(encoded: str) -> types.Part:
    """
    Convert an encoded image (data URL) to a types.Part for Gemini API.

    Raises:
        FormatError: if the string is not a valid encoded image.
    """
    img_bytes, mime_type = decode(encoded)
    return types.Part.from_bytes(data=img_bytes, mime_type=mime_type)


def select_model(high_accuracy: bool) -> str:
    """Pick the text model for an extraction request."""
    if high_accuracy:
        return config.MODEL_CONFIG["high_accuracy_model"]
    return config.MODEL_CONFIG["default_model"]


def log_token_usage(response, logger):
    """Log token usage from Gemini response if available."""
    usage = getattr(response, 'usage_metadata', None)
    if usage:
        prompt_tokens = getattr(usage, 'prompt_token_count', None)
        cached_content_tokens = getattr(usage, 'cached_content_token_count', None)
        thoughts_tokens = getattr(usage, 'thoughts_token_count', None)
        candidates_tokens = getattr(usage, 'candidates_token_count', None)
        total_tokens = getattr(usage, 'total_token_count', None)

        logger.info(f"Token usage - prompt: {prompt_tokens}, cached: {cached_content_tokens}, thoughts: {thoughts_tokens}, output: {candidates_tokens}, total: {total_tokens}")

def build_generation_config(
    response_schema: Optional[types.Schema] = None,
    thinking_budget: Optional[int] = None,
    temperature: Optional[float] = None,
    response_modalities: Optional[list] = None,
) -> Dict[str, Any]:
    """
    Builds a generation configuration dictionary for the Gemini API.

    Args:
        response_schema: The schema for a structured JSON response.
        thinking_budget: The thinking budget. Falls back to MODEL_CONFIG; when
            that is None too, no thinking config is sent.
        temperature: The temperature.
        response_modalities: Output modalities, e.g. ["IMAGE"].

    Returns:
        A dictionary representing the generation configuration.
    """
    gen_config = {
        "temperature": temperature if temperature is not None else config.MODEL_CONFIG["generation_config"]["temperature"],
    }

    if response_schema:
        gen_config["response_mime_type"] = "application/json"
        gen_config["response_schema"] = response_schema.to_json_dict()

    if thinking_budget is None:
        thinking_budget = config.MODEL_CONFIG["thinking_budget"]
    if thinking_budget is not None:
        gen_config["thinking_config"] = types.ThinkingConfig(thinking_budget=thinking_budget).to_json_dict()

    if response_modalities:
        gen_config["response_modalities"] = list(response_modalities)

    return gen_config
