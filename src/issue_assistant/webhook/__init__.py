"""GitHub issue event parsing."""

from src.issue_assistant.webhook.handler import (
    EventParseError,
    load_issue_event,
    parse_issue_event,
)
from src.issue_assistant.webhook.models import IssueAction, IssueEvent

__all__ = [
    "EventParseError",
    "IssueAction",
    "IssueEvent",
    "load_issue_event",
    "parse_issue_event",
]
