"""Shared test fixtures."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Iterator
from pathlib import Path

import pytest
import tomlkit

from git_semver import shell
from git_semver.errors import EmptyRepositoryError
from git_semver.models import TagRef


class FakeRepository:
    """In-memory RepositorySource.

    History is given newest first as (hash, message) pairs; HEAD is the
    first entry.
    """

    def __init__(
        self,
        history: list[tuple[str, str]],
        tags: list[TagRef] | None = None,
        dirty: bool = False,
    ) -> None:
        self.history = history
        self.tags = tags or []
        self.dirty = dirty

    def list_tags(self) -> list[TagRef]:
        return list(self.tags)

    def resolve_head(self) -> str:
        if not self.history:
            raise EmptyRepositoryError("reference not found: HEAD - is repository empty?")
        return self.history[0][0]

    def walk_history(self, from_commit: str) -> Iterator[tuple[str, str]]:
        hashes = [h for h, _ in self.history]
        yield from self.history[hashes.index(from_commit) :]

    def working_tree_dirty(self) -> bool:
        return self.dirty


@pytest.fixture(autouse=True)
def quiet_output() -> Iterator[None]:
    """Keep progress output out of test logs."""
    shell.QUIET = True
    yield
    shell.QUIET = False


@pytest.fixture
def sample_history() -> list[tuple[str, str]]:
    """Four commits, newest first, with a release tagged at the oldest."""
    return [
        ("d" * 40, "fix: correct y"),
        ("c" * 40, "feat(api): add x"),
        ("b" * 40, "chore: tidy up"),
        ("a" * 40, "feat: initial release"),
    ]


class GitRepoFactory:
    """Creates commits and tags in a throwaway repository.

    Commit and author dates are fixed and strictly increasing so that
    committer-time ordering is deterministic.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._clock = 1_700_000_000
        self._env = {
            **os.environ,
            "GIT_AUTHOR_NAME": "Test",
            "GIT_AUTHOR_EMAIL": "test@example.com",
            "GIT_COMMITTER_NAME": "Test",
            "GIT_COMMITTER_EMAIL": "test@example.com",
            "GIT_CONFIG_NOSYSTEM": "1",
            "HOME": str(root),
        }
        self.git("init", "-q")

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.root,
            env=self._env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, message: str) -> str:
        self._clock += 60
        date = f"@{self._clock} +0000"
        self._env["GIT_AUTHOR_DATE"] = date
        self._env["GIT_COMMITTER_DATE"] = date
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.git("rev-parse", "HEAD")

    def tag(self, name: str, annotated: bool = False) -> None:
        if annotated:
            self.git("tag", "-a", name, "-m", f"release {name}")
        else:
            self.git("tag", name)


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepoFactory:
    """An empty git repository in a temporary directory."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")
    repo_dir = tmp_path / "repo"
    repo_dir.mkdir()
    return GitRepoFactory(repo_dir)


@pytest.fixture
def make_repo() -> type[FakeRepository]:
    """Factory for in-memory repositories."""
    return FakeRepository


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document with a [tool.git-semver] table."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"

[tool.git-semver]
minor-types = ["feat", "feature"]
patch-types = ["fix", "refactor"]
"""
    return tomlkit.parse(content)
