"""Property-based tests for the harvest file filter.

This module contains property-based tests using Hypothesis to verify that
the file filter is a pure, total predicate and that its allow and deny
rules compose as documented.

Testing Configuration:
- Library: Hypothesis (Python)
- Minimum iterations: 100 per property test
"""

import pytest
from hypothesis import given, settings, strategies as st

from src.issue_assistant.harvest.filter import (
    DEFAULT_ALLOWED_EXTENSIONS,
    FileFilter,
    FileKind,
    classify_file_kind,
    default_file_filter,
)


# =============================================================================
# Hypothesis Strategies for Generating Repository Paths
# =============================================================================


@st.composite
def path_segment(draw: st.DrawFn) -> str:
    """Generate a single path segment without slashes."""
    return draw(
        st.text(
            alphabet=st.sampled_from(
                "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-_"
            ),
            min_size=1,
            max_size=20,
        )
    )


@st.composite
def clean_directory(draw: st.DrawFn) -> str:
    """Generate a directory prefix that no default exclusion matches."""
    segments = draw(st.lists(path_segment(), max_size=4))
    segments = [
        s
        for s in segments
        if not s.endswith(("vendor", "node_modules", "dist", "build"))
    ]
    return "".join(f"{s}/" for s in segments)


@st.composite
def repository_path(draw: st.DrawFn) -> str:
    """Generate an arbitrary slash-separated repository path."""
    directory = draw(clean_directory())
    name = draw(path_segment())
    ext = draw(st.sampled_from(["", ".go", ".md", ".exe", ".png", ".py", ".ts"]))
    return f"{directory}{name}{ext}"


# =============================================================================
# Property Tests
# =============================================================================


class TestFilterPurity:
    """The filter is a pure, total function of (path, config)."""

    @given(path=st.text(max_size=200))
    @settings(max_examples=200)
    def test_accepts_never_raises_and_is_deterministic(self, path: str):
        file_filter = default_file_filter()
        first = file_filter.accepts(path)
        second = file_filter.accepts(path)
        assert isinstance(first, bool)
        assert first == second

    @given(path=repository_path())
    @settings(max_examples=100)
    def test_equal_configs_agree(self, path: str):
        assert FileFilter().accepts(path) == default_file_filter().accepts(path)


class TestAllowRules:
    """A candidate needs a bare-name or extension match."""

    @given(
        directory=clean_directory(),
        name=path_segment(),
        ext=st.sampled_from(sorted(DEFAULT_ALLOWED_EXTENSIONS)),
    )
    @settings(max_examples=100)
    def test_allowed_extension_in_clean_directory_is_accepted(
        self, directory: str, name: str, ext: str
    ):
        # Avoid names that hit the default exclusion globs
        path = f"{directory}{name}x{ext}"
        assert default_file_filter().accepts(path)

    @given(directory=clean_directory(), name=path_segment())
    @settings(max_examples=100)
    def test_unknown_extension_is_rejected(self, directory: str, name: str):
        assert not default_file_filter().accepts(f"{directory}{name}.exe")

    def test_dockerfile_accepted_without_extension(self):
        assert default_file_filter().accepts("Dockerfile")
        assert default_file_filter().accepts("deploy/Dockerfile")

    def test_makefile_and_readme_accepted(self):
        assert default_file_filter().accepts("Makefile")
        assert default_file_filter().accepts("README")

    def test_bare_name_must_match_exactly(self):
        assert not default_file_filter().accepts("Dockerfile.bak")
        assert not default_file_filter().accepts("MyDockerfile")

    def test_empty_path_is_rejected(self):
        assert not default_file_filter().accepts("")


class TestDenyRules:
    """Exclusions apply after the allow rules, including to bare names."""

    @pytest.mark.parametrize(
        "path",
        [
            "vendor/pkg/foo.go",
            "web/node_modules/react/index.js",
            "dist/bundle.js",
            "cmd/build/out.json",
        ],
    )
    def test_excluded_paths_rejected(self, path: str):
        assert not default_file_filter().accepts(path)

    @pytest.mark.parametrize(
        "path",
        ["handler_test.go", "pkg/api/handler_test.go", "app.test.js", "ui/app.spec.ts"],
    )
    def test_excluded_globs_rejected(self, path: str):
        assert not default_file_filter().accepts(path)

    def test_bare_name_does_not_bypass_path_exclusion(self):
        assert not default_file_filter().accepts("vendor/lib/Makefile")
        assert not default_file_filter().accepts("node_modules/x/README")

    def test_bare_name_does_not_bypass_glob_exclusion(self):
        file_filter = default_file_filter().with_overrides(excluded_globs={"Docker*"})
        assert not file_filter.accepts("Dockerfile")

    def test_glob_matches_filename_not_directory(self):
        assert default_file_filter().accepts("handler_test.go.d/main.go")

    @given(
        directory=clean_directory(),
        name=path_segment(),
        excluded=st.sampled_from(["vendor/", "node_modules/", "dist/", "build/"]),
    )
    @settings(max_examples=100)
    def test_excluded_substring_anywhere_rejects(
        self, directory: str, name: str, excluded: str
    ):
        assert not default_file_filter().accepts(f"{directory}{excluded}{name}.go")

    @pytest.mark.parametrize("pattern", ["[", "[a-", "**[", "\\"])
    def test_malformed_glob_is_treated_as_non_matching(self, pattern: str):
        file_filter = FileFilter(excluded_globs=frozenset({pattern}))
        assert file_filter.accepts("main.go")


class TestReplaceableConfiguration:
    """Alternate configurations change the policy, not the algorithm."""

    def test_with_overrides_returns_new_filter(self):
        original = default_file_filter()
        custom = original.with_overrides(allowed_extensions={".kt"})

        assert custom.accepts("src/Main.kt")
        assert not custom.accepts("src/main.go")
        assert original.accepts("src/main.go")
        assert not original.accepts("src/Main.kt")

    def test_filter_is_frozen(self):
        file_filter = default_file_filter()
        with pytest.raises(Exception):
            file_filter.allowed_extensions = frozenset({".kt"})


class TestClassifyFileKind:
    """File kinds are derived from the filename."""

    @pytest.mark.parametrize(
        "path,kind",
        [
            ("cmd/main.go", FileKind.SOURCE),
            ("scripts/release.sh", FileKind.SOURCE),
            ("docs/guide.md", FileKind.DOCUMENTATION),
            ("README", FileKind.DOCUMENTATION),
            ("config/app.yaml", FileKind.CONFIGURATION),
            ("Dockerfile", FileKind.CONFIGURATION),
            ("Makefile", FileKind.CONFIGURATION),
            ("assets/logo.png", FileKind.OTHER),
        ],
    )
    def test_kind_by_name(self, path: str, kind: FileKind):
        assert classify_file_kind(path) == kind
