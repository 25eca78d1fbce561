"""Unit tests for the RepositoryHarvester.

Uses an in-memory content source to verify traversal order, filtering,
malformed-entry handling, and strict versus lenient failure handling.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from src.issue_assistant.harvest.filter import FileKind, default_file_filter
from src.issue_assistant.harvest.harvester import HarvestError, RepositoryHarvester


def run_async(coro):
    return asyncio.run(coro)


class FakeContentSource:
    """In-memory repository tree keyed by directory path."""

    def __init__(
        self,
        tree: Dict[str, List[Dict[str, Any]]],
        contents: Dict[str, str],
        failing: Optional[set] = None,
    ):
        self.tree = tree
        self.contents = contents
        self.failing = failing or set()
        self.listed: List[str] = []
        self.fetched: List[str] = []

    async def list_directory(self, owner: str, repo: str, path: str = ""):
        self.listed.append(path)
        return self.tree.get(path, [])

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        self.fetched.append(path)
        if path in self.failing:
            raise RuntimeError(f"boom fetching {path}")
        return self.contents[path]


def _file(path: str) -> Dict[str, str]:
    return {"type": "file", "name": path.rsplit("/", 1)[-1], "path": path}


def _dir(path: str) -> Dict[str, str]:
    return {"type": "dir", "name": path.rsplit("/", 1)[-1], "path": path}


def _sample_source(failing: Optional[set] = None) -> FakeContentSource:
    tree = {
        "": [
            _file("README.md"),
            _dir("cmd"),
            _file("logo.png"),
            _dir("vendor"),
            _file("Dockerfile"),
        ],
        "cmd": [
            _file("cmd/main.go"),
            _file("cmd/main_test.go"),
            _dir("cmd/server"),
        ],
        "cmd/server": [_file("cmd/server/handler.go")],
        "vendor": [_file("vendor/lib/lib.go")],
    }
    contents = {
        "README.md": "# Widgets",
        "cmd/main.go": "package main",
        "cmd/main_test.go": "package main_test",
        "cmd/server/handler.go": "package server",
        "vendor/lib/lib.go": "package lib",
        "Dockerfile": "FROM scratch",
        "logo.png": "binary",
    }
    return FakeContentSource(tree, contents, failing)


class TestHarvest:
    """Depth-first traversal with filtering."""

    def test_harvests_only_accepted_files_in_traversal_order(self):
        source = _sample_source()
        harvester = RepositoryHarvester(source)

        files = run_async(harvester.harvest("acme", "widgets"))

        assert [f.path for f in files] == [
            "README.md",
            "cmd/main.go",
            "cmd/server/handler.go",
            "Dockerfile",
        ]
        assert all(f.content for f in files)

    def test_rejected_files_are_never_fetched(self):
        source = _sample_source()
        run_async(RepositoryHarvester(source).harvest("acme", "widgets"))

        assert "logo.png" not in source.fetched
        assert "cmd/main_test.go" not in source.fetched
        assert "vendor/lib/lib.go" not in source.fetched

    def test_directories_are_traversed_depth_first(self):
        source = _sample_source()
        run_async(RepositoryHarvester(source).harvest("acme", "widgets"))

        assert source.listed == ["", "cmd", "cmd/server", "vendor"]

    def test_kinds_are_derived_from_paths(self):
        files = run_async(RepositoryHarvester(_sample_source()).harvest("acme", "widgets"))
        kinds = {f.path: f.kind for f in files}

        assert kinds["README.md"] == FileKind.DOCUMENTATION
        assert kinds["cmd/main.go"] == FileKind.SOURCE
        assert kinds["Dockerfile"] == FileKind.CONFIGURATION

    def test_tree_of_only_directories_produces_nothing(self):
        source = FakeContentSource(
            tree={"": [_dir("a")], "a": [_dir("a/b")], "a/b": []},
            contents={},
        )
        files = run_async(RepositoryHarvester(source).harvest("acme", "widgets"))

        assert files == []
        assert source.fetched == []

    def test_entries_missing_required_fields_are_skipped(self):
        source = FakeContentSource(
            tree={
                "": [
                    {"type": "file", "path": "no_name.go"},
                    {"name": "no_type.go", "path": "no_type.go"},
                    {"type": "file", "name": "no_path.go"},
                    None,
                    "not-a-dict",
                    _file("ok.go"),
                ]
            },
            contents={"ok.go": "package ok"},
        )
        files = run_async(RepositoryHarvester(source).harvest("acme", "widgets"))

        assert [f.path for f in files] == ["ok.go"]

    def test_symlinks_and_submodules_are_ignored(self):
        source = FakeContentSource(
            tree={
                "": [
                    {"type": "symlink", "name": "link.go", "path": "link.go"},
                    {"type": "submodule", "name": "sub", "path": "sub"},
                    _file("main.go"),
                ]
            },
            contents={"main.go": "package main"},
        )
        files = run_async(RepositoryHarvester(source).harvest("acme", "widgets"))

        assert [f.path for f in files] == ["main.go"]
        assert source.listed == [""]

    def test_custom_filter_is_used(self):
        file_filter = default_file_filter().with_overrides(allowed_extensions={".png"})
        files = run_async(
            RepositoryHarvester(_sample_source(), file_filter=file_filter).harvest(
                "acme", "widgets"
            )
        )

        assert [f.path for f in files] == ["logo.png", "Dockerfile"]


class TestStrictHarvest:
    """A single file failure aborts a strict harvest."""

    def test_failure_raises_harvest_error_naming_path(self):
        source = _sample_source(failing={"cmd/main.go"})
        harvester = RepositoryHarvester(source)

        with pytest.raises(HarvestError) as exc_info:
            run_async(harvester.harvest("acme", "widgets"))

        assert exc_info.value.path == "cmd/main.go"
        assert "cmd/main.go" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_traversal_stops_at_first_failure(self):
        source = _sample_source(failing={"cmd/main.go"})

        with pytest.raises(HarvestError):
            run_async(RepositoryHarvester(source).harvest("acme", "widgets"))

        assert "cmd/server/handler.go" not in source.fetched
        assert "Dockerfile" not in source.fetched

    def test_listing_failure_propagates(self):
        class BrokenSource(FakeContentSource):
            async def list_directory(self, owner, repo, path=""):
                raise RuntimeError("listing failed")

        source = BrokenSource(tree={}, contents={})
        with pytest.raises(RuntimeError, match="listing failed"):
            run_async(RepositoryHarvester(source).harvest("acme", "widgets"))


class TestLenientHarvest:
    """Lenient mode collects per-file failures and keeps going."""

    def test_failures_are_reported_and_other_files_kept(self):
        source = _sample_source(failing={"cmd/main.go"})
        harvester = RepositoryHarvester(source, strict=False)

        report = run_async(harvester.harvest_report("acme", "widgets"))

        assert [f.path for f in report.files] == [
            "README.md",
            "cmd/server/handler.go",
            "Dockerfile",
        ]
        assert [f.path for f in report.failures] == ["cmd/main.go"]
        assert "boom" in report.failures[0].error
        assert not report.is_complete

    def test_complete_report_when_nothing_fails(self):
        report = run_async(
            RepositoryHarvester(_sample_source(), strict=False).harvest_report(
                "acme", "widgets"
            )
        )
        assert report.is_complete
        assert len(report.files) == 4
