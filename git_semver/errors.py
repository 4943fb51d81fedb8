"""Exceptions raised by git-semver.

Collaborator failures (git could not be run, the repository has no
commits) propagate unchanged to the caller. Malformed tag names and commit
headers are never errors: they are skipped or classified as plain text.
"""

from __future__ import annotations


class GitSemverError(Exception):
    """Base class for all git-semver errors."""


class RepositoryAccessError(GitSemverError):
    """The repository cannot be opened, enumerated or written to."""


class EmptyRepositoryError(GitSemverError):
    """HEAD cannot be resolved, usually because there are no commits yet."""


class InvalidVersion(GitSemverError, ValueError):
    """A required version string is not a valid semantic version."""


class AuthError(GitSemverError):
    """Credentials for pushing to a remote cannot be set up."""
