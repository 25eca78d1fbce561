"""GitHub API models used by the issue assistant."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class RepositoryLabel(BaseModel):
    """A label defined on a repository.

    Attributes:
        name: Label name as shown on GitHub.
        description: Optional label description, empty when unset.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""

    @classmethod
    def from_github_response(cls, data: dict[str, Any]) -> "RepositoryLabel":
        """Create a RepositoryLabel from a GitHub label object."""
        description: Optional[str] = data.get("description")
        return cls(name=data["name"], description=description or "")
