"""Model providers and the provider registry.

Providers turn a ModelRequest into response text. The registry maps a
provider identifier (the AI_TYPE setting) to a factory, so an unknown
identifier surfaces as an UnsupportedProviderError that callers can
handle instead of terminating the process.

The OpenAI provider uses LangChain's ChatOpenAI client.

Depends on:
- src/issue_assistant/ai/gateway.py (ChatProvider)
- src/issue_assistant/config.py (ai_type, openai_api_key, ai_model)
"""

import logging
from typing import Any, Callable, Optional

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from src.issue_assistant.ai.gateway import DEFAULT_TEMPERATURE, ChatProvider
from src.issue_assistant.ai.models import ModelRequest


DEFAULT_OPENAI_MODEL = "gpt-4o-mini"

ProviderFactory = Callable[..., ChatProvider]


class ProviderError(Exception):
    """Raised when a provider returns an unusable response.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class UnsupportedProviderError(Exception):
    """Raised when no provider is registered under the requested name.

    Attributes:
        provider: The requested provider identifier.
        available: Identifiers that are registered.
    """

    def __init__(self, provider: str, available: list[str]):
        self.provider = provider
        self.available = available
        super().__init__(
            f"AI type '{provider}' is not supported "
            f"(available: {', '.join(available) or 'none'})"
        )


def build_messages(request: ModelRequest) -> list[BaseMessage]:
    """Convert a ModelRequest into LangChain chat messages."""
    messages: list[BaseMessage] = []
    if request.system_instruction:
        messages.append(SystemMessage(content=request.system_instruction))
    messages.append(HumanMessage(content=request.user_instruction))
    return messages


class OpenAIChatProvider:
    """Chat completion provider backed by the OpenAI API.

    Attributes:
        api_key: OpenAI API key.
        model_name: Chat model to use.
        max_tokens: Upper bound on generated tokens.
        timeout: Request timeout in seconds.
        base_url: Optional OpenAI-compatible endpoint.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_OPENAI_MODEL,
        max_tokens: int = 2000,
        timeout: float = 60.0,
        base_url: Optional[str] = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.base_url = base_url
        self._llm: Optional[ChatOpenAI] = None

    @property
    def llm(self) -> ChatOpenAI:
        """Get the LLM client, creating it if necessary."""
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.model_name,
                api_key=self.api_key,
                base_url=self.base_url,
                temperature=DEFAULT_TEMPERATURE,
                max_tokens=self.max_tokens,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._llm

    async def complete(self, request: ModelRequest, temperature: float) -> str:
        """Send the request and return the response text.

        Raises:
            ProviderError: If the response content is not text.
        """
        response = await self.llm.ainvoke(
            build_messages(request),
            temperature=temperature,
        )
        content = response.content

        if not isinstance(content, str):
            raise ProviderError(f"Unexpected response type: {type(content)}")

        return content


class ProviderRegistry:
    """Maps provider identifiers to provider factories.

    Example:
        >>> registry = default_registry()
        >>> provider = registry.create("openai", api_key="sk-...")
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._factories: dict[str, ProviderFactory] = {}
        self.logger = logger or logging.getLogger(__name__)

    def register(self, name: str, factory: ProviderFactory) -> None:
        """Register a factory under a case-insensitive identifier."""
        self._factories[name.strip().lower()] = factory

    def available(self) -> list[str]:
        """Return the registered identifiers, sorted."""
        return sorted(self._factories)

    def is_supported(self, name: str) -> bool:
        return name.strip().lower() in self._factories

    def create(self, name: str, **options: Any) -> ChatProvider:
        """Construct the provider registered under name.

        Args:
            name: Provider identifier, case-insensitive.
            **options: Keyword arguments passed to the factory.

        Raises:
            UnsupportedProviderError: If name is not registered.
        """
        key = name.strip().lower()
        factory = self._factories.get(key)
        if factory is None:
            raise UnsupportedProviderError(name, self.available())

        self.logger.info("Creating model provider", extra={"provider": key})
        return factory(**options)


def default_registry() -> ProviderRegistry:
    """Create a registry with the built-in providers."""
    registry = ProviderRegistry()
    registry.register("openai", OpenAIChatProvider)
    return registry
