"""Recursive, filtered repository traversal.

This module implements the RepositoryHarvester, which walks a repository
tree depth-first through a ContentSource, keeps the files accepted by a
FileFilter, and fetches their decoded content for inclusion in a prompt.

Output order is the listing order returned by the content source; no
sorting is applied.

By default a harvest is strict: the first file that cannot be fetched or
decoded aborts the whole harvest with a HarvestError naming that path.
Lenient mode instead records the failure and keeps going.

Depends on:
- src/issue_assistant/harvest/filter.py (FileFilter)
- src/issue_assistant/github/client.py (GitHubClient as ContentSource)
"""

import logging
from typing import Any, Optional, Protocol

from src.issue_assistant.harvest.filter import (
    FileFilter,
    classify_file_kind,
    default_file_filter,
)
from src.issue_assistant.harvest.models import (
    HarvestedFile,
    HarvestFailure,
    HarvestReport,
)


_REQUIRED_ENTRY_FIELDS = ("type", "name", "path")


class ContentSource(Protocol):
    """Read-only access to repository contents."""

    async def list_directory(
        self, owner: str, repo: str, path: str = ""
    ) -> list[dict[str, Any]]:
        ...

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        ...


class HarvestError(Exception):
    """Raised when a strict harvest cannot retrieve a file.

    Attributes:
        message: Human-readable error description.
        path: Repository path that failed.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        path: str,
        cause: Optional[Exception] = None,
    ):
        self.message = message
        self.path = path
        self.cause = cause
        super().__init__(message)


class RepositoryHarvester:
    """Collects filtered file contents from a repository.

    Attributes:
        source: Backing store used to list directories and fetch files.
        file_filter: Inclusion policy applied to every file entry.
        strict: Abort on the first file failure when True, otherwise
            collect failures and continue.

    Example:
        >>> harvester = RepositoryHarvester(github_client)
        >>> files = await harvester.harvest("octo", "widgets")
        >>> [f.path for f in files]
        ['README.md', 'cmd/main.go']
    """

    def __init__(
        self,
        source: ContentSource,
        file_filter: Optional[FileFilter] = None,
        strict: bool = True,
        logger: Optional[logging.Logger] = None,
    ):
        self.source = source
        self.file_filter = file_filter or default_file_filter()
        self.strict = strict
        self.logger = logger or logging.getLogger(__name__)

    async def harvest(self, owner: str, repo: str) -> list[HarvestedFile]:
        """Harvest the accepted files of a repository.

        Args:
            owner: Repository owner (user or organization).
            repo: Repository name.

        Returns:
            Harvested files in traversal order.

        Raises:
            HarvestError: In strict mode, if any accepted file fails.
            GitHubAPIError: If a directory listing fails.
        """
        report = await self.harvest_report(owner, repo)
        return report.files

    async def harvest_report(self, owner: str, repo: str) -> HarvestReport:
        """Harvest a repository and report files alongside any failures."""
        self.logger.info(
            "Harvesting repository content",
            extra={"owner": owner, "repo": repo, "strict": self.strict},
        )

        report = HarvestReport()
        await self._traverse(owner, repo, "", report)

        self.logger.info(
            "Repository content harvested",
            extra={
                "owner": owner,
                "repo": repo,
                "files_count": len(report.files),
                "failures_count": len(report.failures),
            },
        )
        return report

    async def _traverse(
        self,
        owner: str,
        repo: str,
        path: str,
        report: HarvestReport,
    ) -> None:
        entries = await self.source.list_directory(owner, repo, path)

        for entry in entries:
            if not self._is_valid_entry(entry):
                self.logger.debug(
                    "Skipping malformed directory entry",
                    extra={"directory": path, "entry": repr(entry)[:200]},
                )
                continue

            entry_type = entry["type"]
            entry_path = entry["path"]

            if entry_type == "file":
                if self.file_filter.accepts(entry_path):
                    await self._collect_file(owner, repo, entry_path, report)
            elif entry_type == "dir":
                await self._traverse(owner, repo, entry_path, report)

    async def _collect_file(
        self,
        owner: str,
        repo: str,
        path: str,
        report: HarvestReport,
    ) -> None:
        try:
            content = await self.source.get_file_content(owner, repo, path)
        except Exception as e:
            if self.strict:
                self.logger.error(
                    "Failed to fetch file content, aborting harvest",
                    extra={"path": path, "error": str(e)},
                )
                raise HarvestError(
                    f"Failed to get file content for {path}: {e}",
                    path=path,
                    cause=e,
                ) from e

            self.logger.warning(
                "Failed to fetch file content, skipping",
                extra={"path": path, "error": str(e)},
            )
            report.failures.append(HarvestFailure(path=path, error=str(e)))
            return

        report.files.append(
            HarvestedFile(
                path=path,
                content=content,
                kind=classify_file_kind(path),
            )
        )

    @staticmethod
    def _is_valid_entry(entry: Any) -> bool:
        if not isinstance(entry, dict):
            return False
        return all(
            isinstance(entry.get(field), str) and entry.get(field)
            for field in _REQUIRED_ENTRY_FIELDS
        )
