"""
Gateway to the Gemini API: image cleaning, text extraction and table extraction.
"""
from typing import Callable, List, Optional

from . import codec
from . import config as app_config
from .core import (
    GeminiClient,
    build_generation_config,
    log_token_usage,
    logger,
    prepare_image_for_gemini,
    select_model,
)
from .exceptions import GatewayError, NoImageReturnedError, ValidationError
from .models import sensitivity_tier
from .parser import parse_table_response, table_to_csv

ProgressCallback = Callable[[float], None]


def _noop_progress(fraction: float) -> None:
    pass


class Gateway:
    """The only component that talks to Gemini.

    Each operation is a single request/response (or a strictly sequential
    series of them). Nothing is retried here; failures surface immediately.
    """

    def __init__(self, client: Optional[GeminiClient] = None):
        self._client = client

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = GeminiClient()
        return self._client

    def _generate(self, model_name: str, contents, generation_config: dict):
        logger.info(f"Sending request to Gemini model '{model_name}'...")
        try:
            response = self.client.generate_content(
                model_name=model_name,
                contents=contents,
                generation_config=generation_config,
            )
        except Exception as e:
            logger.error(f"Gemini API call failed: {e}")
            raise GatewayError(f"Gemini API call failed: {e}", cause=e) from e
        logger.info("Gemini API call successful.")
        log_token_usage(response, logger)
        return response

    def clean_image(self, encoded_image: str, instructions: str, temperature: float, sensitivity: float) -> str:
        """
        Clean an image according to free-text instructions.

        Args:
            encoded_image: Data URL of the source image.
            instructions: What to remove or fix; must be non-empty.
            temperature: Sampling temperature.
            sensitivity: 0..1, mapped to a Low/Medium/High descriptor.

        Returns:
            Data URL of the cleaned image.
        """
        if not instructions or not instructions.strip():
            raise ValidationError("Please provide instructions for cleaning the image.")

        image_part = prepare_image_for_gemini(encoded_image)
        prompt = app_config.PROMPT_TEMPLATES["clean"].format(
            sensitivity=sensitivity_tier(sensitivity),
            instructions=instructions,
        )
        gen_config = build_generation_config(
            temperature=temperature,
            response_modalities=["IMAGE"],
        )
        response = self._generate(app_config.MODEL_CONFIG["image_model"], [image_part, prompt], gen_config)

        for candidate in getattr(response, "candidates", None) or []:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                inline = getattr(part, "inline_data", None)
                if inline is not None and inline.data:
                    return codec.encode(inline.data, inline.mime_type or "image/png")

        raise NoImageReturnedError("AI did not return an image.")

    def extract_text(
        self,
        encoded_images: List[str],
        temperature: float,
        high_accuracy: bool,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        OCR each image in order and join the results with a blank line.

        Requests are issued one after another; on_progress receives (i + 1) / n
        after image i completes, so the last call is exactly 1.0.
        """
        on_progress = on_progress or _noop_progress
        model_name = select_model(high_accuracy)
        gen_config = build_generation_config(
            temperature=temperature,
            thinking_budget=app_config.MODEL_CONFIG["high_accuracy_thinking_budget"] if high_accuracy else None,
        )
        prompt = app_config.PROMPT_TEMPLATES["ocr"]

        total = len(encoded_images)
        logger.info(f"Starting OCR for {total} image(s) using Gemini model '{model_name}'...")
        texts = []
        for i, encoded in enumerate(encoded_images):
            logger.info(f"Processing image {i + 1}/{total}")
            image_part = prepare_image_for_gemini(encoded)
            response = self._generate(model_name, [image_part, prompt], gen_config)
            texts.append(response.text or "")
            on_progress((i + 1) / total)

        logger.info(f"OCR complete. {total} image(s) processed.")
        return "\n\n".join(texts).strip()

    def extract_table(
        self,
        encoded_image: str,
        temperature: float,
        high_accuracy: bool,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Extract one image's table and return it as CSV text."""
        on_progress = on_progress or _noop_progress
        model_name = select_model(high_accuracy)
        gen_config = build_generation_config(
            response_schema=app_config.TableExtractionSchema,
            temperature=temperature,
            thinking_budget=app_config.MODEL_CONFIG["high_accuracy_thinking_budget"] if high_accuracy else None,
        )
        image_part = prepare_image_for_gemini(encoded_image)

        on_progress(0.1)
        response = self._generate(model_name, [image_part, app_config.PROMPT_TEMPLATES["table"]], gen_config)
        on_progress(0.75)

        table = parse_table_response(response.text)
        csv_text = table_to_csv(table)
        logger.info(f"Extracted table with {len(table)} row(s).")
        on_progress(1.0)
        return csv_text
