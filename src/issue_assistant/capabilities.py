"""Independently toggleable behaviors of the issue assistant."""

from enum import Enum


class Capability(str, Enum):
    """A behavior the assistant can run for an opened issue.

    Attributes:
        COMMENT: Answer the issue with a code analysis comment.
        LABEL: Suggest and apply repository labels.
    """

    COMMENT = "comment"
    LABEL = "label"
