"""GitHub API client for issue and repository interactions.

This module provides a wrapper around the GitHub API for:
- Reading repository directories and file contents
- Creating comments on issues
- Adding labels to issues
- Listing repository labels
"""

from src.issue_assistant.github.client import (
    GitHubAPIError,
    GitHubClient,
    RateLimitError,
)
from src.issue_assistant.github.models import RepositoryLabel

__all__ = [
    "GitHubAPIError",
    "GitHubClient",
    "RateLimitError",
    "RepositoryLabel",
]
