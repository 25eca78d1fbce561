"""Repository harvesting.

This module collects the repository files worth sending to a model:
- A pure allow/deny file filter
- Recursive depth-first traversal through a content source
- Strict (abort on first failure) and lenient (collect failures) modes
"""

from src.issue_assistant.harvest.filter import (
    FileFilter,
    FileKind,
    classify_file_kind,
    default_file_filter,
)
from src.issue_assistant.harvest.harvester import (
    ContentSource,
    HarvestError,
    RepositoryHarvester,
)
from src.issue_assistant.harvest.models import (
    HarvestedFile,
    HarvestFailure,
    HarvestReport,
)

__all__ = [
    "ContentSource",
    "classify_file_kind",
    "default_file_filter",
    "FileFilter",
    "FileKind",
    "HarvestedFile",
    "HarvestError",
    "HarvestFailure",
    "HarvestReport",
    "RepositoryHarvester",
]
