"""Workspace-relative path resolution."""

from __future__ import annotations

import pytest

from santoku_sync.core.paths import PathResolver, normalize_local_path


def test_resolve_returns_root_relative_posix_path() -> None:
    resolver = PathResolver("/work/project")

    assert resolver.resolve("/work/project/src/app.py") == "src/app.py"
    assert resolver.resolve("/work/project/./src/../doc.py") == "doc.py"


def test_resolve_outside_root_returns_none() -> None:
    resolver = PathResolver("/work/project")

    assert resolver.resolve("/work/other/app.py") is None
    assert resolver.resolve("/work/project-two/app.py") is None
    assert resolver.resolve("/work/project") is None


def test_resolve_without_root_returns_none() -> None:
    resolver = PathResolver(None)

    assert not resolver.is_configured
    assert resolver.resolve("/work/project/app.py") is None


def test_trailing_slash_on_root_is_ignored() -> None:
    assert PathResolver("/work/project/").resolve("/work/project/a.py") == "a.py"


def test_file_uri_root_and_paths() -> None:
    resolver = PathResolver("file:///work/my%20project")

    assert resolver.normalized_root == "/work/my project"
    assert resolver.resolve("file:///work/my%20project/a/b.py") == "a/b.py"


def test_non_local_schemes_do_not_resolve() -> None:
    resolver = PathResolver("vscode-remote://host/work")

    assert not resolver.is_configured
    assert PathResolver("/work").resolve("untitled:Untitled-1") is None


@pytest.mark.parametrize(
    "candidate, expected",
    [
        ("C:\\Users\\me\\repo", "c:/Users/me/repo"),
        ("/C:/Users/me/repo/", "c:/Users/me/repo"),
        ("relative/path.py", None),
        ("", None),
    ],
)
def test_normalize_local_path(candidate: str, expected: str | None) -> None:
    assert normalize_local_path(candidate) == expected


def test_windows_paths_resolve_against_windows_root() -> None:
    resolver = PathResolver("C:\\Users\\me\\repo")

    assert resolver.resolve("c:\\Users\\me\\repo\\pkg\\mod.py") == "pkg/mod.py"
