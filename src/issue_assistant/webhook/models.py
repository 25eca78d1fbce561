"""GitHub issue event models for the issue assistant.

This module defines the issue event parsed from the GitHub Actions event
payload (the file named by GITHUB_EVENT_PATH). The event is parsed once
and is read-only afterwards.

The models use Pydantic for validation, consistent with the assistant's
configuration approach in config.py.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class IssueAction(str, Enum):
    """GitHub issue event action types the assistant acts on.

    Attributes:
        OPENED: A new issue was created. The only action that triggers
                analysis; every other action is skipped.
    """

    OPENED = "opened"


class IssueEvent(BaseModel):
    """Parsed GitHub issue event.

    Attributes:
        action: The raw event action (e.g. opened, closed, edited).
        issue_number: The issue number within the repository.
        title: The issue title text.
        body: The issue body/description text. May be empty.
        owner: The repository owner (user or organization).
        repository: The repository name (without owner prefix).
    """

    model_config = ConfigDict(frozen=True)

    action: str = Field(
        ...,
        min_length=1,
        description="The action of the issue event",
    )

    issue_number: int = Field(
        ...,
        gt=0,
        description="The issue number within the repository (positive integer)",
    )

    title: str = Field(
        default="",
        description="The issue title text",
    )

    body: str = Field(
        default="",
        description="The issue body/description text (may be empty)",
    )

    owner: str = Field(
        ...,
        min_length=1,
        description="The repository owner (user or organization)",
    )

    repository: str = Field(
        ...,
        min_length=1,
        description="The repository name without owner prefix",
    )

    @property
    def is_opened(self) -> bool:
        """True when the event reports a newly opened issue."""
        return self.action == IssueAction.OPENED.value

    @property
    def issue_id(self) -> str:
        """Generate the canonical issue identifier.

        Returns:
            str: Issue ID in format "{owner}/{repository}#{issue_number}"
        """
        return f"{self.owner}/{self.repository}#{self.issue_number}"

    @property
    def full_repository(self) -> str:
        """Generate the full repository path.

        Returns:
            str: Repository path in format "{owner}/{repository}"
        """
        return f"{self.owner}/{self.repository}"
