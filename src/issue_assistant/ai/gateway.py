"""Model gateway with bounded retries and response-shape validation.

The gateway sends a ModelRequest to a ChatProvider and only returns text
that passes a shape check. Each attempt:

1. Calls the provider. A provider failure is recorded and the next
   attempt starts.
2. Strips markdown code fences and surrounding whitespace.
3. Runs the validator (by default: parse as any JSON value). A validation
   failure is recorded and the next attempt starts.

The first valid response is returned immediately. After max_retries
failed attempts a ModelGatewayError reports the attempt count and the
last underlying error.

Temperature is fixed per call unless temperature_step is set, in which
case it is lowered by that step after each failed attempt, never below
min_temperature.

Depends on:
- src/issue_assistant/ai/models.py (ModelRequest)
- src/issue_assistant/ai/providers.py (OpenAIChatProvider)
"""

import json
import logging
from typing import Any, Callable, Optional, Protocol

from src.issue_assistant.ai.models import ModelRequest


DEFAULT_MAX_RETRIES = 3
DEFAULT_TEMPERATURE = 0.1

ResponseValidator = Callable[[str], Any]


class ChatProvider(Protocol):
    """A model provider accepting a system and user instruction."""

    async def complete(self, request: ModelRequest, temperature: float) -> str:
        ...


class ModelGatewayError(Exception):
    """Raised when every attempt to query the model fails.

    Attributes:
        message: Human-readable error description.
        attempts: Number of attempts made.
        last_error: The error from the final attempt.
    """

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: Optional[Exception] = None,
    ):
        self.message = message
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence and whitespace.

    Handles ```json and bare ``` openers and a closing ``` fence.

    Args:
        text: Raw text returned by the model.

    Returns:
        The text without the fence markers, trimmed.
    """
    text = text.strip()

    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]

    if text.endswith("```"):
        text = text[:-3]

    return text.strip()


def validate_json(text: str) -> None:
    """Check that text parses as a JSON value of any type."""
    json.loads(text)


class ModelGateway:
    """Queries a ChatProvider until it returns well-formed output.

    Attributes:
        provider: The model provider to call.
        max_retries: Total number of attempts before giving up.
        temperature: Sampling temperature for the first attempt.
        temperature_step: Amount subtracted from the temperature after
            each failed attempt. Zero keeps the temperature fixed.
        min_temperature: Lower bound for the temperature.
        validator: Default shape check applied to each response.

    Example:
        >>> gateway = ModelGateway(OpenAIChatProvider(api_key="sk-..."))
        >>> raw = await gateway.query(request)
    """

    def __init__(
        self,
        provider: ChatProvider,
        max_retries: int = DEFAULT_MAX_RETRIES,
        temperature: float = DEFAULT_TEMPERATURE,
        temperature_step: float = 0.0,
        min_temperature: float = 0.0,
        validator: Optional[ResponseValidator] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if temperature_step < 0:
            raise ValueError("temperature_step cannot be negative")

        self.provider = provider
        self.max_retries = max_retries
        self.temperature = temperature
        self.temperature_step = temperature_step
        self.min_temperature = min_temperature
        self.validator = validator or validate_json
        self.logger = logger or logging.getLogger(__name__)

    def _temperature_for_attempt(self, attempt: int) -> float:
        lowered = self.temperature - self.temperature_step * attempt
        return max(self.min_temperature, lowered)

    async def query(
        self,
        request: ModelRequest,
        validator: Optional[ResponseValidator] = None,
    ) -> str:
        """Send a request and return the first structurally valid response.

        Args:
            request: The request to send.
            validator: Shape check for this call, overriding the default.

        Returns:
            Response text with code fences and whitespace removed.

        Raises:
            ModelGatewayError: If all attempts fail.
        """
        check = validator or self.validator
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            temperature = self._temperature_for_attempt(attempt)

            self.logger.debug(
                "Making model request",
                extra={
                    "attempt": attempt + 1,
                    "max_retries": self.max_retries,
                    "temperature": temperature,
                },
            )

            try:
                response_text = await self.provider.complete(request, temperature)
            except Exception as e:
                self.logger.warning(
                    "Model request failed",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )
                last_error = e
                continue

            content = strip_code_fences(response_text)

            try:
                check(content)
            except Exception as e:
                self.logger.warning(
                    "Failed to validate model response",
                    extra={
                        "attempt": attempt + 1,
                        "max_retries": self.max_retries,
                        "response_preview": content[:200],
                        "error": str(e),
                    },
                )
                last_error = e
                continue

            self.logger.debug(
                "Model response accepted",
                extra={"attempt": attempt + 1, "response_length": len(content)},
            )
            return content

        self.logger.error(
            "Model query failed after all attempts",
            extra={
                "max_retries": self.max_retries,
                "last_error": str(last_error),
            },
        )
        raise ModelGatewayError(
            f"failed after {self.max_retries} attempts: {last_error}",
            attempts=self.max_retries,
            last_error=last_error,
        )
