"""Pytest configuration for all tests."""

import pytest


@pytest.fixture
def issue_payload():
    """A GitHub issues.opened payload as written to GITHUB_EVENT_PATH."""
    return {
        "action": "opened",
        "issue": {
            "number": 42,
            "title": "How do I configure retries?",
            "body": "Where is the retry policy for outgoing requests defined?",
        },
        "repository": {
            "name": "widgets",
            "owner": {"login": "acme"},
        },
    }


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable read by AssistantSettings."""
    for name in (
        "GITHUB_TOKEN",
        "GITHUB_BASE_URL",
        "GITHUB_EVENT_PATH",
        "AI_TYPE",
        "OPENAI_API_KEY",
        "AI_MODEL",
        "AI_TEMPERATURE",
        "AI_TEMPERATURE_STEP",
        "AI_MAX_TOKENS",
        "AI_TIMEOUT_SECONDS",
        "PARSING_MODE",
        "ENABLE_COMMENT",
        "ENABLE_LABEL",
        "LABEL_CONFIDENCE_THRESHOLD",
        "STRICT_HARVEST",
        "RUN_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
