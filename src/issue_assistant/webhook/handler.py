"""Parsing of the triggering GitHub issue event.

GitHub Actions writes the webhook payload that triggered the workflow to
the file named by GITHUB_EVENT_PATH. This module reads that file and
extracts the fields the assistant needs.

GitHub Event Payload Structure (issues event):
{
  "action": "opened",
  "issue": {
    "number": 123,
    "title": "Issue title",
    "body": "Issue body"
  },
  "repository": {
    "name": "repo-name",
    "owner": {"login": "owner-name"}
  }
}
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from .models import IssueEvent

logger = logging.getLogger(__name__)


class EventParseError(Exception):
    """Raised when the event payload cannot be read or is malformed.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


def _require_dict(data: Any, field: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise EventParseError(
            f"Missing or invalid '{field}' field in payload: {type(data).__name__}"
        )
    return data


def parse_issue_event(payload: Dict[str, Any]) -> IssueEvent:
    """Parse a GitHub issue event from a webhook payload.

    A null issue body is treated as an empty string.

    Args:
        payload: The raw event payload as a dictionary.

    Returns:
        The parsed IssueEvent.

    Raises:
        EventParseError: If required fields are missing or mistyped.
    """
    payload = _require_dict(payload, "payload")

    action = payload.get("action")
    if not isinstance(action, str) or not action:
        raise EventParseError("Missing or invalid 'action' field in payload")

    issue_data = _require_dict(payload.get("issue"), "issue")
    repo_data = _require_dict(payload.get("repository"), "repository")
    owner_data = _require_dict(repo_data.get("owner"), "repository.owner")

    issue_number = issue_data.get("number")
    if not isinstance(issue_number, int) or isinstance(issue_number, bool):
        raise EventParseError(f"Invalid issue number: {issue_number!r}")

    title = issue_data.get("title") or ""
    body = issue_data.get("body") or ""
    if not isinstance(title, str) or not isinstance(body, str):
        raise EventParseError("Issue title and body must be strings")

    try:
        event = IssueEvent(
            action=action,
            issue_number=issue_number,
            title=title.strip(),
            body=body,
            owner=owner_data.get("login"),
            repository=repo_data.get("name"),
        )
    except ValidationError as e:
        raise EventParseError(f"Invalid issue event: {e}", cause=e) from e

    logger.info(
        "Parsed issue event: action=%s, issue=%s",
        event.action,
        event.issue_id,
    )
    return event


def load_issue_event(path: Union[str, Path]) -> IssueEvent:
    """Read and parse the event file written by GitHub Actions.

    Args:
        path: Path to the JSON event file.

    Returns:
        The parsed IssueEvent.

    Raises:
        EventParseError: If the file cannot be read, is not JSON, or does
            not describe an issue event.
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise EventParseError(f"Failed to read event data: {e}", cause=e) from e

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise EventParseError(f"Failed to parse event data: {e}", cause=e) from e

    return parse_issue_event(payload)
