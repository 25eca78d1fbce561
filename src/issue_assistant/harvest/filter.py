"""File inclusion policy for repository harvesting.

This module decides which repository files are worth sending to a model.
The filter is a pure predicate over repository-relative paths: it performs
no I/O and never raises, so the harvester can apply it to every directory
entry without special handling.

A path is accepted when:
- its final segment equals an allowed bare filename, or the path ends with
  an allowed extension, AND
- it does not contain any excluded path substring, AND
- its final segment does not match any excluded glob pattern.

A bare filename match skips the extension check but not the exclusions.
"""

import fnmatch
import posixpath
import re
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_ALLOWED_EXTENSIONS = frozenset(
    {
        ".go", ".js", ".ts", ".py", ".java", ".rb", ".php",
        ".md", ".txt", ".yaml", ".yml", ".json", ".rs", ".sh",
    }
)

DEFAULT_ALLOWED_FILES = frozenset({"Dockerfile", "Makefile", "README"})

DEFAULT_EXCLUDED_PATHS = frozenset({"vendor/", "node_modules/", "dist/", "build/"})

DEFAULT_EXCLUDED_GLOBS = frozenset({"*_test.go", "*.test.js", "*.spec.ts"})


class FileKind(str, Enum):
    """Informational category of a harvested file.

    Attributes:
        SOURCE: Program source code.
        DOCUMENTATION: Prose documentation such as README or markdown files.
        CONFIGURATION: Build, deployment or data configuration files.
        OTHER: Anything not covered above.
    """

    SOURCE = "source"
    DOCUMENTATION = "documentation"
    CONFIGURATION = "configuration"
    OTHER = "other"


_KIND_BY_EXTENSION = {
    ".go": FileKind.SOURCE,
    ".js": FileKind.SOURCE,
    ".ts": FileKind.SOURCE,
    ".py": FileKind.SOURCE,
    ".java": FileKind.SOURCE,
    ".rb": FileKind.SOURCE,
    ".php": FileKind.SOURCE,
    ".rs": FileKind.SOURCE,
    ".sh": FileKind.SOURCE,
    ".md": FileKind.DOCUMENTATION,
    ".txt": FileKind.DOCUMENTATION,
    ".yaml": FileKind.CONFIGURATION,
    ".yml": FileKind.CONFIGURATION,
    ".json": FileKind.CONFIGURATION,
}

_KIND_BY_NAME = {
    "README": FileKind.DOCUMENTATION,
    "Dockerfile": FileKind.CONFIGURATION,
    "Makefile": FileKind.CONFIGURATION,
}


def classify_file_kind(path: str) -> FileKind:
    """Derive the informational kind of a file from its name.

    Args:
        path: Repository-relative, slash-separated path.

    Returns:
        The FileKind for the path, FileKind.OTHER when unrecognized.
    """
    base = posixpath.basename(path)
    if base in _KIND_BY_NAME:
        return _KIND_BY_NAME[base]
    _, ext = posixpath.splitext(base)
    return _KIND_BY_EXTENSION.get(ext.lower(), FileKind.OTHER)


def _glob_matches(pattern: str, name: str) -> bool:
    # A pattern that cannot be compiled never matches.
    try:
        return fnmatch.fnmatchcase(name, pattern)
    except (re.error, TypeError):
        return False


class FileFilter(BaseModel):
    """Immutable allow/deny configuration for harvested files.

    Attributes:
        allowed_extensions: Path suffixes that make a file a candidate.
        allowed_files: Bare filenames accepted without an extension match.
        excluded_paths: Substrings that reject any path containing them.
        excluded_globs: Shell-style patterns matched against the filename.
    """

    model_config = ConfigDict(frozen=True)

    allowed_extensions: frozenset[str] = Field(
        default=DEFAULT_ALLOWED_EXTENSIONS,
        description="Path suffixes that make a file a candidate",
    )

    allowed_files: frozenset[str] = Field(
        default=DEFAULT_ALLOWED_FILES,
        description="Bare filenames accepted regardless of extension",
    )

    excluded_paths: frozenset[str] = Field(
        default=DEFAULT_EXCLUDED_PATHS,
        description="Path substrings that reject a candidate",
    )

    excluded_globs: frozenset[str] = Field(
        default=DEFAULT_EXCLUDED_GLOBS,
        description="Filename glob patterns that reject a candidate",
    )

    def accepts(self, path: str) -> bool:
        """Decide whether a repository path should be harvested.

        Args:
            path: Repository-relative, slash-separated path.

        Returns:
            True if the file passes the allow rules and no deny rule.
        """
        if not isinstance(path, str) or not path:
            return False

        base = posixpath.basename(path)

        if base not in self.allowed_files and not any(
            path.endswith(ext) for ext in self.allowed_extensions
        ):
            return False

        if any(excluded in path for excluded in self.excluded_paths):
            return False

        if any(_glob_matches(pattern, base) for pattern in self.excluded_globs):
            return False

        return True

    def with_overrides(
        self,
        allowed_extensions: Optional[Iterable[str]] = None,
        allowed_files: Optional[Iterable[str]] = None,
        excluded_paths: Optional[Iterable[str]] = None,
        excluded_globs: Optional[Iterable[str]] = None,
    ) -> "FileFilter":
        """Return a new filter with the given rule sets replaced.

        Rule sets left as None are carried over unchanged. The receiver is
        never modified.
        """
        updates = {}
        if allowed_extensions is not None:
            updates["allowed_extensions"] = frozenset(allowed_extensions)
        if allowed_files is not None:
            updates["allowed_files"] = frozenset(allowed_files)
        if excluded_paths is not None:
            updates["excluded_paths"] = frozenset(excluded_paths)
        if excluded_globs is not None:
            updates["excluded_globs"] = frozenset(excluded_globs)
        return self.model_copy(update=updates)


def default_file_filter() -> FileFilter:
    """Create the default file filter used by the harvester."""
    return FileFilter()
