"""Unit tests for the ResponseParser.

Covers both code-analysis conventions, label parsing, and the shape check
the gateway uses to decide whether to retry.
"""

from unittest.mock import MagicMock

import pytest
from hypothesis import given, settings, strategies as st

from src.issue_assistant.ai.models import ParsingMode
from src.issue_assistant.ai.parser import (
    MetadataNotFoundError,
    ResponseParseError,
    ResponseParser,
    split_trailing_metadata,
)


@pytest.fixture
def structured() -> ResponseParser:
    return ResponseParser(ParsingMode.STRUCTURED)


@pytest.fixture
def trailing() -> ResponseParser:
    return ResponseParser(ParsingMode.TRAILING_METADATA)


class TestTrailingMetadata:
    """Prose answer followed by a trailing JSON object."""

    def test_splits_answer_and_metadata(self, trailing: ResponseParser):
        result = trailing.parse_code_analysis(
            'Some answer text.\n{"confidence":0.8,"relevant_files":["a.go"]}'
        )

        assert result.answer == "Some answer text."
        assert result.confidence == 0.8
        assert result.relevant_files == ["a.go"]

    def test_no_brace_raises_metadata_not_found(self, trailing: ResponseParser):
        with pytest.raises(MetadataNotFoundError, match="No metadata found"):
            trailing.parse_code_analysis("An answer with no metadata at all.")

    def test_metadata_not_found_is_a_parse_error(self):
        assert issubclass(MetadataNotFoundError, ResponseParseError)

    def test_splits_at_last_brace(self, trailing: ResponseParser):
        text = (
            "Configure it like `{ retries: 3 }` in the file.\n"
            '{"confidence": 0.6}'
        )
        result = trailing.parse_code_analysis(text)

        assert result.answer == "Configure it like `{ retries: 3 }` in the file."
        assert result.confidence == 0.6
        assert result.relevant_files == []

    def test_nested_metadata_object_is_not_recoverable(
        self, trailing: ResponseParser
    ):
        with pytest.raises(ResponseParseError):
            trailing.parse_code_analysis(
                'Answer.\n{"confidence": 0.5, "extra": {"nested": true}}'
            )

    def test_missing_confidence_rejected(self, trailing: ResponseParser):
        with pytest.raises(ResponseParseError, match="confidence"):
            trailing.parse_code_analysis('Answer.\n{"relevant_files": []}')

    def test_fenced_response_tolerated(self, trailing: ResponseParser):
        result = trailing.parse_code_analysis(
            '```\nAnswer here.\n{"confidence": 1.0}\n```'
        )
        assert result.answer == "Answer here."
        assert result.confidence == 1.0

    def test_split_helper(self):
        assert split_trailing_metadata('a {"b": 1}') == ("a", '{"b": 1}')
        with pytest.raises(MetadataNotFoundError):
            split_trailing_metadata("nothing here")


class TestStructured:
    """Whole-response JSON objects."""

    def test_parses_all_fields(self, structured: ResponseParser):
        result = structured.parse_code_analysis(
            '{"answer": "Use `Retry`.", "confidence": 0.9, '
            '"relevant_files": ["pkg/retry.go"]}'
        )

        assert result.answer == "Use `Retry`."
        assert result.confidence == 0.9
        assert result.relevant_files == ["pkg/retry.go"]

    def test_relevant_files_optional(self, structured: ResponseParser):
        result = structured.parse_code_analysis('{"answer": "x", "confidence": 1}')
        assert result.relevant_files == []
        assert result.confidence == 1.0

    def test_fenced_json_tolerated(self, structured: ResponseParser):
        result = structured.parse_code_analysis(
            '```json\n{"answer": "x", "confidence": 0.3}\n```'
        )
        assert result.confidence == 0.3

    @pytest.mark.parametrize(
        "payload",
        [
            '{"confidence": 0.5}',
            '{"answer": 3, "confidence": 0.5}',
            '{"answer": "x"}',
            '{"answer": "x", "confidence": "high"}',
            '{"answer": "x", "confidence": "0.5"}',
            '{"answer": "x", "confidence": true}',
            '{"answer": "x", "confidence": 0.5, "relevant_files": "a.go"}',
            '["answer", 0.5]',
            "not json",
        ],
    )
    def test_invalid_payloads_rejected(self, structured: ResponseParser, payload: str):
        with pytest.raises(ResponseParseError):
            structured.parse_code_analysis(payload)

    @pytest.mark.parametrize("confidence", [-0.1, 1.01, 5, -3])
    def test_out_of_range_confidence_rejected(
        self, structured: ResponseParser, confidence: float
    ):
        with pytest.raises(ResponseParseError):
            structured.parse_code_analysis(
                f'{{"answer": "x", "confidence": {confidence}}}'
            )

    @given(confidence=st.floats(min_value=0.0, max_value=1.0))
    @settings(max_examples=100)
    def test_in_range_confidence_preserved(self, confidence: float):
        parser = ResponseParser(ParsingMode.STRUCTURED)
        result = parser.parse_code_analysis(
            f'{{"answer": "x", "confidence": {confidence!r}}}'
        )
        assert result.confidence == confidence


class TestValidate:
    """Shape check used by the gateway."""

    def test_structured_requires_object(self, structured: ResponseParser):
        structured.validate('{"answer": "x"}')
        with pytest.raises(ResponseParseError):
            structured.validate("[1, 2, 3]")
        with pytest.raises(ResponseParseError):
            structured.validate("Prose {\"confidence\": 0.5}")

    def test_trailing_requires_trailing_object(self, trailing: ResponseParser):
        trailing.validate('Prose.\n{"confidence": 0.5}')
        with pytest.raises(MetadataNotFoundError):
            trailing.validate("Prose only.")
        with pytest.raises(ResponseParseError):
            trailing.validate("Prose {broken")


class TestLabelShapeCheck:
    def test_accepts_object_in_every_mode(self, structured, trailing):
        structured.validate_labels('{"suggestedLabels": {}}')
        trailing.validate_labels('```json\n{"suggestedLabels": {}}\n```')

    @pytest.mark.parametrize("payload", ['["bug"]', '"bug"', "not json"])
    def test_rejects_non_objects(self, structured: ResponseParser, payload: str):
        with pytest.raises(ResponseParseError):
            structured.validate_labels(payload)


class TestInjectedLogger:
    def test_trailing_parse_logs_to_injected_logger(self):
        logger = MagicMock()
        parser = ResponseParser(ParsingMode.TRAILING_METADATA, logger=logger)

        parser.parse_code_analysis('Answer.\n{"confidence": 0.5}')

        logger.debug.assert_called_once()
        assert parser.logger is logger


class TestLabelAnalysis:
    def test_parses_labels_and_explanation(self, structured: ResponseParser):
        result = structured.parse_label_analysis(
            '{"suggestedLabels": {"bug": 0.9, "question": 0.2}, '
            '"explanation": "Crash report."}'
        )

        assert result.suggested_labels == {"bug": 0.9, "question": 0.2}
        assert result.explanation == "Crash report."

    def test_trailing_mode_still_parses_structured_labels(
        self, trailing: ResponseParser
    ):
        result = trailing.parse_label_analysis(
            '{"suggestedLabels": {}, "explanation": "Nothing fits."}'
        )
        assert result.suggested_labels == {}

    @pytest.mark.parametrize(
        "payload",
        [
            '{"explanation": "x"}',
            '{"suggestedLabels": ["bug"], "explanation": "x"}',
            '{"suggestedLabels": {"bug": "high"}, "explanation": "x"}',
            '{"suggestedLabels": {"bug": 1.5}, "explanation": "x"}',
            '{"suggestedLabels": {"bug": 0.5}}',
            '{"suggestedLabels": {"bug": 0.5}, "explanation": 7}',
        ],
    )
    def test_invalid_payloads_rejected(self, structured: ResponseParser, payload: str):
        with pytest.raises(ResponseParseError):
            structured.parse_label_analysis(payload)
