"""Command-line entry point for the issue assistant.

This module is run once per GitHub Actions workflow invocation. It loads
configuration from the environment, reads the triggering event, wires the
components together and processes the event.

Configuration errors (missing credentials, unknown provider, unreadable
event) end the process with exit code 1 before any event processing.
Capability failures are logged and do not change the exit code.
"""

import asyncio
import logging
import sys
from typing import Optional

from pydantic import ValidationError

from .ai.analyzer import IssueAnalyzer
from .ai.gateway import ChatProvider, ModelGateway
from .ai.parser import ResponseParser
from .ai.prompts import PromptBuilder
from .ai.providers import ProviderRegistry, UnsupportedProviderError, default_registry
from .config import AssistantSettings, get_settings
from .github.client import GitHubClient
from .harvest.harvester import RepositoryHarvester
from .orchestrator import IssueAssistant
from .webhook.handler import EventParseError, load_issue_event
from .webhook.models import IssueEvent

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def _redact_secret(value: str, visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: AssistantSettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Issue assistant configuration:")
    logger.info(f"  GitHub Base URL: {settings.github_base_url}")
    logger.info(f"  GitHub Token: {_redact_secret(settings.github_token)}")
    logger.info(f"  GitHub Event Path: {settings.github_event_path}")
    logger.info(f"  AI Type: {settings.ai_type}")
    logger.info(f"  AI API Key: {_redact_secret(settings.openai_api_key)}")
    logger.info(f"  AI Model: {settings.ai_model}")
    logger.info(f"  AI Temperature: {settings.ai_temperature}")
    logger.info(f"  AI Temperature Step: {settings.ai_temperature_step}")
    logger.info(f"  Parsing Mode: {settings.parsing_mode.value}")
    logger.info(
        f"  Capabilities: {', '.join(c.value for c in settings.enabled_capabilities)}"
    )
    logger.info(f"  Label Threshold: {settings.label_confidence_threshold}")
    logger.info(f"  Strict Harvest: {settings.strict_harvest}")


def create_provider(
    settings: AssistantSettings,
    registry: Optional[ProviderRegistry] = None,
) -> ChatProvider:
    """Create the model provider selected by AI_TYPE.

    Raises:
        UnsupportedProviderError: If AI_TYPE names no registered provider.
    """
    registry = registry or default_registry()
    return registry.create(
        settings.ai_type,
        api_key=settings.openai_api_key,
        model_name=settings.ai_model,
        max_tokens=settings.ai_max_tokens,
        timeout=settings.ai_timeout_seconds,
    )


def build_assistant(
    settings: AssistantSettings,
    github_client: GitHubClient,
    provider: ChatProvider,
) -> IssueAssistant:
    """Wire the issue assistant from settings and its external clients."""
    harvester = RepositoryHarvester(
        github_client,
        strict=settings.strict_harvest,
    )
    gateway = ModelGateway(
        provider,
        temperature=settings.ai_temperature,
        temperature_step=settings.ai_temperature_step,
    )
    analyzer = IssueAnalyzer(
        gateway,
        prompt_builder=PromptBuilder(settings.parsing_mode),
        parser=ResponseParser(settings.parsing_mode),
    )
    return IssueAssistant(
        github_client=github_client,
        harvester=harvester,
        analyzer=analyzer,
        capabilities=settings.enabled_capabilities,
        label_threshold=settings.label_confidence_threshold,
    )


async def run(
    settings: AssistantSettings,
    event: IssueEvent,
    provider: ChatProvider,
) -> None:
    """Process one event, closing the GitHub client afterwards."""
    async with GitHubClient(
        token=settings.github_token,
        base_url=settings.github_base_url,
    ) as github_client:
        assistant = build_assistant(settings, github_client, provider)
        try:
            await asyncio.wait_for(
                assistant.process_event(event),
                timeout=settings.run_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Issue processing timed out",
                extra={
                    "issue_id": event.issue_id,
                    "timeout": settings.run_timeout_seconds,
                },
            )


def main() -> int:
    """Run the issue assistant for the event named by GITHUB_EVENT_PATH.

    Returns:
        Process exit code: 1 for configuration errors, 0 otherwise.
    """
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    logger.info("Starting issue assistant")

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logging.getLogger().setLevel(settings.log_level)
    _log_configuration(settings)

    try:
        event = load_issue_event(settings.github_event_path)
    except EventParseError as e:
        logger.error(f"Failed to load event: {e}")
        return 1

    if not event.is_opened:
        logger.info("Event is not a new issue, skipping")
        return 0

    try:
        provider = create_provider(settings)
    except UnsupportedProviderError as e:
        logger.error(str(e))
        return 1

    asyncio.run(run(settings, event, provider))
    logger.info("Issue assistant finished")
    return 0


if __name__ == "__main__":
    sys.exit(main())
