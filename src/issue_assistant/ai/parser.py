"""Parsing of raw model output into typed analysis results.

Two conventions for code-analysis responses are supported, selected by
ParsingMode:

- STRUCTURED: the whole response is one JSON object with `answer`,
  `confidence` and optional `relevant_files`.
- TRAILING_METADATA: prose followed by a trailing JSON object. The text
  is split at the LAST "{" character: everything before it (trimmed) is
  the answer, everything from it onward must parse as a JSON object with
  `confidence` and optional `relevant_files`.

Label-analysis responses are always structured, with `suggestedLabels`
and `explanation`.

Markdown code fences around the payload are tolerated in every mode.
Confidence values outside [0, 1] are rejected, never clamped.

Depends on:
- src/issue_assistant/ai/models.py (CodeAnalysis, LabelAnalysis, ParsingMode)
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from src.issue_assistant.ai.gateway import strip_code_fences
from src.issue_assistant.ai.models import CodeAnalysis, LabelAnalysis, ParsingMode


class ResponseParseError(Exception):
    """Raised when a model response does not satisfy the output contract.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class MetadataNotFoundError(ResponseParseError):
    """Raised when a trailing-metadata response has no JSON object."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _load_json_object(text: str) -> dict[str, Any]:
    """Parse text as a JSON object, raising ResponseParseError otherwise."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON response: {e}", cause=e)

    if not isinstance(data, dict):
        raise ResponseParseError(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    return data


def _require_confidence(data: dict[str, Any]) -> float:
    if "confidence" not in data:
        raise ResponseParseError("Missing required field 'confidence'")
    confidence = data["confidence"]
    if not _is_number(confidence):
        raise ResponseParseError(
            f"Field 'confidence' must be a number, got {type(confidence).__name__}"
        )
    return float(confidence)


def _optional_relevant_files(data: dict[str, Any]) -> list[str]:
    relevant_files = data.get("relevant_files")
    if relevant_files is None:
        return []
    if not isinstance(relevant_files, list):
        raise ResponseParseError("Field 'relevant_files' must be a list")
    return [str(path) for path in relevant_files if path]


def _build(model: Any, **fields: Any) -> Any:
    try:
        return model(**fields)
    except ValidationError as e:
        raise ResponseParseError(f"Response validation failed: {e}", cause=e)


def split_trailing_metadata(text: str) -> tuple[str, str]:
    """Split a trailing-metadata payload into answer text and JSON segment.

    Args:
        text: Raw model output.

    Returns:
        Tuple of (answer text, metadata segment).

    Raises:
        MetadataNotFoundError: If the text contains no "{" character.
    """
    index = text.rfind("{")
    if index < 0:
        raise MetadataNotFoundError("No metadata found in model response")
    return text[:index].strip(), text[index:].strip()


class ResponseParser:
    """Parses model output according to a parsing mode.

    Attributes:
        mode: Convention used for code-analysis responses.

    Example:
        >>> parser = ResponseParser(ParsingMode.TRAILING_METADATA)
        >>> result = parser.parse_code_analysis(
        ...     'Use the retry helper.\\n{"confidence": 0.8}'
        ... )
        >>> result.answer, result.confidence
        ('Use the retry helper.', 0.8)
    """

    def __init__(
        self,
        mode: ParsingMode = ParsingMode.STRUCTURED,
        logger: Optional[logging.Logger] = None,
    ):
        self.mode = mode
        self.logger = logger or logging.getLogger(__name__)

    def validate(self, raw_text: str) -> None:
        """Check that raw text has the shape the active mode requires.

        Used by the model gateway to decide whether a response must be
        retried. Structured responses must be a JSON object; trailing
        responses must end with a parseable JSON object.

        Raises:
            ResponseParseError: If the shape is wrong.
        """
        text = strip_code_fences(raw_text)
        if self.mode == ParsingMode.TRAILING_METADATA:
            _, metadata = split_trailing_metadata(text)
            _load_json_object(metadata)
        else:
            _load_json_object(text)

    def validate_labels(self, raw_text: str) -> None:
        """Check that a label-suggestion response is a JSON object.

        Label responses are structured in every mode.

        Raises:
            ResponseParseError: If the text is not a JSON object.
        """
        _load_json_object(strip_code_fences(raw_text))

    def parse_code_analysis(self, raw_text: str) -> CodeAnalysis:
        """Parse a code-analysis response using the active mode."""
        if self.mode == ParsingMode.TRAILING_METADATA:
            return self.parse_trailing_metadata(raw_text)
        return self.parse_structured(raw_text)

    def parse_structured(self, raw_text: str) -> CodeAnalysis:
        """Parse a response that is entirely one JSON object.

        Raises:
            ResponseParseError: If the JSON is invalid, `answer` is not a
                string, or `confidence` is missing, non-numeric or out of
                range.
        """
        data = _load_json_object(strip_code_fences(raw_text))

        answer = data.get("answer")
        if not isinstance(answer, str):
            raise ResponseParseError("Missing or non-string field 'answer'")

        return _build(
            CodeAnalysis,
            answer=answer,
            confidence=_require_confidence(data),
            relevant_files=_optional_relevant_files(data),
        )

    def parse_trailing_metadata(self, raw_text: str) -> CodeAnalysis:
        """Parse prose followed by a trailing JSON metadata object.

        Raises:
            MetadataNotFoundError: If there is no "{" in the text.
            ResponseParseError: If the trailing segment is not a valid JSON
                object or carries an invalid confidence.
        """
        answer, metadata_text = split_trailing_metadata(strip_code_fences(raw_text))
        metadata = _load_json_object(metadata_text)

        self.logger.debug(
            "Parsed trailing metadata",
            extra={"answer_length": len(answer), "metadata": metadata_text[:200]},
        )

        return _build(
            CodeAnalysis,
            answer=answer,
            confidence=_require_confidence(metadata),
            relevant_files=_optional_relevant_files(metadata),
        )

    def parse_label_analysis(self, raw_text: str) -> LabelAnalysis:
        """Parse a label-suggestion response.

        Raises:
            ResponseParseError: If `suggestedLabels` is missing or not a
                mapping of label name to number, if any confidence is out
                of range, or if `explanation` is missing or not a string.
        """
        data = _load_json_object(strip_code_fences(raw_text))

        suggested = data.get("suggestedLabels")
        if not isinstance(suggested, dict):
            raise ResponseParseError("Missing or non-object field 'suggestedLabels'")

        for name, confidence in suggested.items():
            if not _is_number(confidence):
                raise ResponseParseError(
                    f"Confidence for label '{name}' must be a number"
                )

        explanation = data.get("explanation")
        if not isinstance(explanation, str):
            raise ResponseParseError("Missing or non-string field 'explanation'")

        return _build(
            LabelAnalysis,
            suggested_labels={
                str(name): float(confidence) for name, confidence in suggested.items()
            },
            explanation=explanation,
        )
