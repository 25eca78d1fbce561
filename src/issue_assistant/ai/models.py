"""Model request and analysis result types.

This module defines the data passed to and returned from the model
provider: the two-part request, the code-analysis result and the
label-analysis result, plus the parsing mode that decides the output
contract the model is asked to follow.

Confidence values are validated, never clamped: a provider that reports a
confidence outside [0, 1] has broken the output contract and the response
is rejected.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ParsingMode(str, Enum):
    """Output convention the model is asked to follow.

    Attributes:
        STRUCTURED: The entire response is a single JSON object.
        TRAILING_METADATA: Free-form prose followed by a trailing JSON
            object carrying the metadata fields.
    """

    STRUCTURED = "structured"
    TRAILING_METADATA = "trailing_metadata"


class ModelRequest(BaseModel):
    """A single request to the model provider.

    Attributes:
        system_instruction: Optional system prompt.
        user_instruction: The user prompt.
    """

    model_config = ConfigDict(frozen=True)

    system_instruction: Optional[str] = None
    user_instruction: str = Field(..., min_length=1)


class CodeAnalysis(BaseModel):
    """Answer to an issue question, grounded in the harvested files.

    Attributes:
        answer: Markdown answer text.
        confidence: Model-reported certainty in [0, 1].
        relevant_files: Paths the model considered relevant, if reported.
    """

    answer: str = Field(..., description="Markdown answer text")

    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="Model-reported certainty (0.0-1.0)",
    )

    relevant_files: list[str] = Field(
        default_factory=list,
        description="Paths the model considered relevant",
    )


class LabelAnalysis(BaseModel):
    """Label suggestions for an issue.

    Attributes:
        suggested_labels: Mapping of label name to confidence in [0, 1].
        explanation: The model's rationale for the suggestions.
    """

    suggested_labels: dict[str, float] = Field(
        default_factory=dict,
        description="Label name to confidence (0.0-1.0)",
    )

    explanation: str = Field(
        default="",
        description="Rationale for the suggested labels",
    )

    @field_validator("suggested_labels")
    @classmethod
    def validate_label_confidences(cls, v: dict[str, float]) -> dict[str, float]:
        """Reject any label confidence outside [0, 1].

        Raises:
            ValueError: If a confidence is out of range.
        """
        for name, confidence in v.items():
            if not 0.0 <= confidence <= 1.0:
                raise ValueError(
                    f"Confidence for label '{name}' must be between 0 and 1, "
                    f"got {confidence}"
                )
        return v
