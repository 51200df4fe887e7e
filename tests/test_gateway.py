"""Tests for the Gemini gateway, with the client mocked out."""

from unittest.mock import MagicMock

import pytest

from doc_processor import codec
from doc_processor.config import MODEL_CONFIG, PROMPT_TEMPLATES
from doc_processor.exceptions import (
    FormatError,
    GatewayError,
    NoImageReturnedError,
    SchemaError,
    ValidationError,
)


def _text_response(text: str | None) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.usage_metadata = None
    return response


def _image_response(data: bytes | None, mime_type: str = "image/png") -> MagicMock:
    text_part = MagicMock()
    text_part.inline_data = None
    image_part = MagicMock()
    image_part.inline_data.data = data
    image_part.inline_data.mime_type = mime_type
    candidate = MagicMock()
    candidate.content.parts = [text_part, image_part] if data is not None else [text_part]
    response = MagicMock()
    response.candidates = [candidate]
    response.usage_metadata = None
    return response


class TestCleanImage:
    def test_returns_first_image_part_as_data_url(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _image_response(b"cleaned", "image/jpeg")
        result = gateway.clean_image(encoded_png, "remove the stain", 0.4, 0.8)
        assert result == codec.encode(b"cleaned", "image/jpeg")

    def test_request_shape(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _image_response(b"x")
        gateway.clean_image(encoded_png, "remove the stain", 0.4, 0.8)

        kwargs = mock_client.generate_content.call_args.kwargs
        assert kwargs["model_name"] == MODEL_CONFIG["image_model"]
        assert kwargs["generation_config"]["response_modalities"] == ["IMAGE"]
        assert kwargs["generation_config"]["temperature"] == 0.4
        prompt = kwargs["contents"][1]
        assert "High (Aggressive)" in prompt
        assert '"remove the stain"' in prompt

    def test_sensitivity_tier_in_prompt(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _image_response(b"x")
        gateway.clean_image(encoded_png, "tidy", 0.5, 0.3)
        assert "Low (Conservative)" in mock_client.generate_content.call_args.kwargs["contents"][1]

    def test_no_image_part(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _image_response(None)
        with pytest.raises(NoImageReturnedError):
            gateway.clean_image(encoded_png, "tidy", 0.5, 0.5)

    def test_no_candidates(self, gateway, mock_client, encoded_png) -> None:
        response = MagicMock()
        response.candidates = []
        response.usage_metadata = None
        mock_client.generate_content.return_value = response
        with pytest.raises(NoImageReturnedError):
            gateway.clean_image(encoded_png, "tidy", 0.5, 0.5)

    def test_requires_instructions(self, gateway, mock_client, encoded_png) -> None:
        with pytest.raises(ValidationError):
            gateway.clean_image(encoded_png, "   ", 0.5, 0.5)
        mock_client.generate_content.assert_not_called()

    def test_rejects_malformed_image(self, gateway, mock_client) -> None:
        with pytest.raises(FormatError):
            gateway.clean_image("data:nonsense", "tidy", 0.5, 0.5)
        mock_client.generate_content.assert_not_called()

    def test_wraps_client_failure(self, gateway, mock_client, encoded_png) -> None:
        boom = ConnectionError("network down")
        mock_client.generate_content.side_effect = boom
        with pytest.raises(GatewayError, match="network down") as exc_info:
            gateway.clean_image(encoded_png, "tidy", 0.5, 0.5)
        assert exc_info.value.cause is boom


class TestExtractText:
    def test_joins_results_in_order(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.side_effect = [
            _text_response("page one"),
            _text_response("page two"),
            _text_response("page three\n"),
        ]
        text = gateway.extract_text([encoded_png] * 3, 0.5, False)
        assert text == "page one\n\npage two\n\npage three"

    def test_progress_is_called_once_per_image_ending_at_one(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response("t")
        progress = []
        gateway.extract_text([encoded_png] * 4, 0.5, False, progress.append)
        assert progress == [0.25, 0.5, 0.75, 1.0]
        assert all(a < b for a, b in zip(progress, progress[1:]))

    def test_requests_are_sequential(self, gateway, mock_client, encoded_png) -> None:
        events = []

        def fake_generate(**kwargs):
            events.append("request")
            return _text_response("t")

        mock_client.generate_content.side_effect = fake_generate
        gateway.extract_text([encoded_png] * 3, 0.5, False, lambda p: events.append(p))
        assert events == ["request", 1 / 3, "request", 2 / 3, "request", 1.0]

    def test_uses_ocr_prompt_and_default_model(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response("t")
        gateway.extract_text([encoded_png], 0.2, False)
        kwargs = mock_client.generate_content.call_args.kwargs
        assert kwargs["model_name"] == MODEL_CONFIG["default_model"]
        assert kwargs["contents"][1] == PROMPT_TEMPLATES["ocr"]
        assert kwargs["generation_config"]["temperature"] == 0.2
        assert "thinking_config" not in kwargs["generation_config"]

    def test_high_accuracy_switches_model_and_thinking(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response("t")
        gateway.extract_text([encoded_png], 0.2, True)
        kwargs = mock_client.generate_content.call_args.kwargs
        assert kwargs["model_name"] == MODEL_CONFIG["high_accuracy_model"]
        assert MODEL_CONFIG["high_accuracy_thinking_budget"] in kwargs["generation_config"]["thinking_config"].values()

    def test_none_text_counts_as_empty(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.side_effect = [_text_response(None), _text_response("b")]
        assert gateway.extract_text([encoded_png] * 2, 0.5, False) == "b"

    def test_failure_stops_the_run(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.side_effect = [_text_response("a"), RuntimeError("quota")]
        progress = []
        with pytest.raises(GatewayError):
            gateway.extract_text([encoded_png] * 3, 0.5, False, progress.append)
        assert progress == [1 / 3]
        assert mock_client.generate_content.call_count == 2


class TestExtractTable:
    def test_returns_csv(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response('{"table": [["Name", "City"], ["Ann", "Paris, FR"]]}')
        assert gateway.extract_table(encoded_png, 0.5, False) == 'Name,City\nAnn,"Paris, FR"'

    def test_progress_sequence(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response('{"table": [["a"]]}')
        progress = []
        gateway.extract_table(encoded_png, 0.5, False, progress.append)
        assert progress == [0.1, 0.75, 1.0]

    def test_requests_structured_output(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response('{"table": []}')
        gateway.extract_table(encoded_png, 0.5, True)
        kwargs = mock_client.generate_content.call_args.kwargs
        assert kwargs["model_name"] == MODEL_CONFIG["high_accuracy_model"]
        assert kwargs["generation_config"]["response_mime_type"] == "application/json"
        assert "table" in kwargs["generation_config"]["response_schema"]["properties"]

    def test_missing_table_is_schema_error(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.return_value = _text_response('{"rows": []}')
        progress = []
        with pytest.raises(SchemaError):
            gateway.extract_table(encoded_png, 0.5, False, progress.append)
        assert progress == [0.1, 0.75]

    def test_client_failure_before_receive(self, gateway, mock_client, encoded_png) -> None:
        mock_client.generate_content.side_effect = TimeoutError("slow")
        progress = []
        with pytest.raises(GatewayError):
            gateway.extract_table(encoded_png, 0.5, False, progress.append)
        assert progress == [0.1]
