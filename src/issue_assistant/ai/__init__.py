"""LLM-based issue analysis.

This module answers issues against harvested repository files and
suggests labels:
- Prompt construction with an explicit output contract
- A model gateway with bounded retries and shape validation
- Structured and trailing-metadata response parsing
- A provider registry for selecting the model backend
"""

from src.issue_assistant.ai.analyzer import IssueAnalyzer
from src.issue_assistant.ai.gateway import (
    ChatProvider,
    ModelGateway,
    ModelGatewayError,
    strip_code_fences,
)
from src.issue_assistant.ai.models import (
    CodeAnalysis,
    LabelAnalysis,
    ModelRequest,
    ParsingMode,
)
from src.issue_assistant.ai.parser import (
    MetadataNotFoundError,
    ResponseParseError,
    ResponseParser,
)
from src.issue_assistant.ai.prompts import PromptBuilder
from src.issue_assistant.ai.providers import (
    OpenAIChatProvider,
    ProviderError,
    ProviderRegistry,
    UnsupportedProviderError,
    default_registry,
)

__all__ = [
    "ChatProvider",
    "CodeAnalysis",
    "default_registry",
    "IssueAnalyzer",
    "LabelAnalysis",
    "MetadataNotFoundError",
    "ModelGateway",
    "ModelGatewayError",
    "ModelRequest",
    "OpenAIChatProvider",
    "ParsingMode",
    "PromptBuilder",
    "ProviderError",
    "ProviderRegistry",
    "ResponseParseError",
    "ResponseParser",
    "strip_code_fences",
    "UnsupportedProviderError",
]
