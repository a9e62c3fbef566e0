"""Tests for mdblog.diagnostics: error formatting and actionable hints."""

from __future__ import annotations

from mdblog.diagnostics import format_build_failures, format_error_with_hint, format_hint
from mdblog.errors import (
    MdblogBuildError,
    MdblogConfigError,
    MdblogError,
    MdblogManifestError,
    MdblogPostError,
)

# --- format_build_failures ---


def test_format_build_failures_empty() -> None:
    assert format_build_failures({}) == ""


def test_format_build_failures_sorted() -> None:
    result = format_build_failures(
        {"books/b.html": "Post not found: books/b.md", "books/a.html": "bad bytes"}
    )
    assert result.startswith("Failed to load 2 post(s):")
    assert result.index("books/a.html") < result.index("books/b.html")
    assert "  books/b.html: Post not found: books/b.md" in result
    assert result.endswith("\n")


# --- format_hint ---


def test_hint_for_missing_config() -> None:
    exc = MdblogConfigError("Could not find mdblog.toml by walking upward from start path.")
    assert "version = 1" in (format_hint(exc) or "")


def test_hint_for_bad_theme() -> None:
    exc = MdblogConfigError("Invalid config: site.theme must be one of dark, light (got 'x').")
    assert format_hint(exc) == 'set site.theme to "dark" or "light"'


def test_no_hint_for_generic_config_error() -> None:
    assert format_hint(MdblogConfigError("Expected version to be an integer.")) is None


def test_hint_for_missing_manifest() -> None:
    hint = format_hint(MdblogManifestError("Missing manifest at: /x/blog-manifest.json"))
    assert hint == "run `mdblog manifest` to generate it"


def test_hint_for_missing_blog_dir() -> None:
    hint = format_hint(MdblogManifestError("Blog directory does not exist: /x/blog"))
    assert hint is not None and "paths.blog_dir" in hint


def test_hint_for_post_and_build_errors() -> None:
    assert "mdblog manifest" in (format_hint(MdblogPostError("Post not found: a/b.md")) or "")
    assert "output_dir" in (format_hint(MdblogBuildError("Failed writing page: x")) or "")


def test_no_hint_for_unknown_errors() -> None:
    assert format_hint(MdblogError("x")) is None
    assert format_hint(ValueError("x")) is None


# --- format_error_with_hint ---


def test_format_error_with_hint() -> None:
    out = format_error_with_hint(MdblogManifestError("Missing manifest at: m.json"))
    assert out == "error: Missing manifest at: m.json\nhint: run `mdblog manifest` to generate it"


def test_format_error_without_hint_uses_repr_for_empty_message() -> None:
    assert format_error_with_hint(RuntimeError()) == "error: RuntimeError()"
