"""Repository access through the git command line.

:class:`RepositorySource` is everything the version-inference code needs
from a repository. :class:`GitRepository` implements it (plus tagging and
pushing) by shelling out to ``git``.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol
from urllib.parse import urlsplit, urlunsplit

from .auth import BasicAuth, PushAuth, SSHKeyAuth
from .errors import EmptyRepositoryError, RepositoryAccessError
from .models import TagRef
from .shell import git, git_stream

# Field and record separators for `git log` output. Neither appears in a
# hash, and git refuses NUL in commit messages.
_FIELD_SEP = "%x00"
_RECORD_SEP = "%x1e"

PUSH_REFSPECS = ("+refs/heads/*:refs/heads/*", "+refs/tags/*:refs/tags/*")

# Credential helper answering "get" from GIT_SEMVER_USERNAME and
# GIT_SEMVER_PASSWORD in the push environment.
_CREDENTIAL_HELPER = (
    "!f() { test \"$1\" = get && "
    "echo username=\"$GIT_SEMVER_USERNAME\" && "
    "echo password=\"$GIT_SEMVER_PASSWORD\"; }; f"
)


class RepositorySource(Protocol):
    """Read-only view of a repository used to infer versions."""

    def list_tags(self) -> list[TagRef]:
        """Return every tag with the commit it points at."""
        ...

    def resolve_head(self) -> str:
        """Return the HEAD commit hash; raise EmptyRepositoryError if none."""
        ...

    def walk_history(self, from_commit: str) -> Iterator[tuple[str, str]]:
        """Yield (hash, message) from from_commit back, newest first."""
        ...

    def working_tree_dirty(self) -> bool:
        """Return True if the working tree differs from HEAD."""
        ...


def find_repo_root(path: Path | str) -> Path | None:
    """Find the nearest directory at or above path that holds a repository.

    ``.git`` may be a directory or, for worktrees and submodules, a file.
    """
    current = Path(path).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def open_repository(path: Path | str = ".") -> GitRepository:
    """Open the repository containing path.

    Raises:
        RepositoryAccessError: If neither path nor any parent is a repository.
    """
    root = find_repo_root(path)
    if root is None:
        raise RepositoryAccessError(f"repository does not exist: {Path(path).resolve()}")
    return GitRepository(root)


class GitRepository:
    """:class:`RepositorySource` backed by the ``git`` CLI.

    Args:
        root: Path to the repository working tree root.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def _git(self, *args: str, env: dict[str, str] | None = None) -> str:
        """Run git in the repository, translating failures."""
        try:
            return git(*args, cwd=self.root, env=env)
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
            raise RepositoryAccessError(f"git {args[0]} failed: {detail}") from exc
        except OSError as exc:
            raise RepositoryAccessError(f"cannot run git: {exc}") from exc

    def list_tags(self) -> list[TagRef]:
        """Return every tag, peeling annotated tags to their commit."""
        out = self._git(
            "for-each-ref",
            "--format=%(refname:lstrip=2)%09%(objectname)%09%(*objectname)",
            "refs/tags",
        )
        tags: list[TagRef] = []
        for line in out.splitlines():
            # The peeled column is empty for lightweight tags.
            name, _, objects = line.partition("\t")
            obj, _, peeled = objects.partition("\t")
            tags.append(TagRef(name=name, commit=peeled.strip() or obj.strip()))
        return tags

    def resolve_head(self) -> str:
        try:
            head = git("rev-parse", "--verify", "--quiet", "HEAD", cwd=self.root, check=False)
        except OSError as exc:
            raise RepositoryAccessError(f"cannot run git: {exc}") from exc
        if not head:
            raise EmptyRepositoryError(
                f"reference not found: HEAD - is repository empty? ({self.root})"
            )
        return head

    def walk_history(self, from_commit: str) -> Iterator[tuple[str, str]]:
        """Yield (hash, message) pairs in committer-time order, newest first."""
        records = git_stream(
            "log",
            "--date-order",
            f"--format=%H{_FIELD_SEP}%B{_RECORD_SEP}",
            from_commit,
            cwd=self.root,
            sep="\x1e",
        )
        for record in _translate_errors("log", records):
            record = record.strip()
            if not record:
                continue
            commit, _, message = record.partition("\x00")
            yield commit, message.strip()

    def working_tree_dirty(self) -> bool:
        return self._git("status", "--porcelain") != ""

    def remote_url(self, name: str = "origin") -> str:
        """Return the (first) URL configured for a remote."""
        return self._git("remote", "get-url", name)

    def create_tag(self, name: str) -> None:
        """Create a lightweight tag at HEAD."""
        self._git("tag", name)

    def push_refs(self, auth: PushAuth, remote: str = "origin") -> None:
        """Force-push all branches and tags to a remote.

        A single blocking round trip; retrying is left to the caller.

        Raises:
            RepositoryAccessError: If the push fails.
        """
        url = self.remote_url(remote)
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        if isinstance(auth, SSHKeyAuth):
            env["GIT_SSH_COMMAND"] = f'ssh -i "{auth.key_path}" -o IdentitiesOnly=yes'
            if auth.username:
                url = _with_ssh_user(url, auth.username)
        elif isinstance(auth, BasicAuth):
            env.update(_credential_env(auth))
        self._git("push", url, *PUSH_REFSPECS, env=env)


def _translate_errors(command: str, records: Iterator[str]) -> Iterator[str]:
    try:
        yield from records
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise RepositoryAccessError(f"git {command} failed: {detail}") from exc
    except OSError as exc:
        raise RepositoryAccessError(f"cannot run git: {exc}") from exc


def _credential_env(auth: BasicAuth) -> dict[str, str]:
    """Environment that installs the credential helper for one git call.

    The first, empty helper entry clears any helpers from the user's config.
    """
    return {
        "GIT_CONFIG_COUNT": "2",
        "GIT_CONFIG_KEY_0": "credential.helper",
        "GIT_CONFIG_VALUE_0": "",
        "GIT_CONFIG_KEY_1": "credential.helper",
        "GIT_CONFIG_VALUE_1": _CREDENTIAL_HELPER,
        "GIT_SEMVER_USERNAME": auth.username,
        "GIT_SEMVER_PASSWORD": auth.password,
    }


def _with_ssh_user(url: str, username: str) -> str:
    if "://" in url:
        parts = urlsplit(url)
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        return urlunsplit(parts._replace(netloc=f"{username}@{host}"))
    # scp-like syntax: [user@]host:path
    _, _, rest = url.rpartition("@")
    return f"{username}@{rest}"
