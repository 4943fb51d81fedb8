"""Data models for git-semver.

These Pydantic models represent the values passed between the commit
classifier, the version ledger, the tag resolver and the report builder.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class Magnitude(IntEnum):
    """How large a change a commit represents.

    Ordered so that ``max()`` over a set of commits yields the bump to
    apply: INVALID < NONE < PATCH < MINOR < MAJOR.
    """

    INVALID = 0
    NONE = 1
    PATCH = 2
    MINOR = 3
    MAJOR = 4

    def __str__(self) -> str:
        return self.name.lower()

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


class CommitRules(BaseModel):
    """Commit type tables used to classify conventional commits.

    Attributes:
        major_types: Types that force a major bump.
        minor_types: Types that force a minor bump.
        patch_types: Types that force a patch bump.
        breaking_marker: Text that forces a major bump wherever it
            appears in the message, regardless of type.
    """

    model_config = ConfigDict(frozen=True)

    major_types: tuple[str, ...] = ("break",)
    minor_types: tuple[str, ...] = ("feat",)
    patch_types: tuple[str, ...] = ("fix", "ref", "perf")
    breaking_marker: str = "BREAKING CHANGE:"

    def magnitude_of(self, commit_type: str, text: str) -> Magnitude:
        """Return the magnitude for a commit type and message text."""
        if self.breaking_marker in text:
            return Magnitude.MAJOR
        if commit_type in self.major_types:
            return Magnitude.MAJOR
        if commit_type in self.minor_types:
            return Magnitude.MINOR
        if commit_type in self.patch_types:
            return Magnitude.PATCH
        return Magnitude.NONE


class ClassifiedCommit(BaseModel):
    """A single commit after conventional-commit parsing.

    Attributes:
        hash: Full commit hash; empty when classifying a bare message.
        type: Header type such as "feat" or "fix"; empty if the message
              has no conventional header.
        scope: Parenthesized header qualifier; empty if absent or "*".
        message: Text after the header, or the whole message when there
                 is no header.
        magnitude: Change magnitude derived from type and message.
    """

    model_config = ConfigDict(frozen=True)

    hash: str = ""
    type: str = ""
    scope: str = ""
    message: str
    magnitude: Magnitude

    @field_serializer("magnitude", when_used="json")
    def _magnitude_name(self, magnitude: Magnitude) -> str:
        return str(magnitude)


class TagRef(BaseModel):
    """A tag name and the commit it points at (annotated tags peeled)."""

    model_config = ConfigDict(frozen=True)

    name: str
    commit: str


class ReleaseInfo(BaseModel):
    """Consolidated release report for the current repository state.

    Attributes:
        latest_version: Highest version tag found, or "0.0.0".
        current_tag: Version describing HEAD: equal to latest_version on a
                     clean tagged commit, otherwise suffixed with the short
                     HEAD hash and/or "+dirty".
        next_version: Version after applying the largest pending bump;
                      empty when no pending commit is releasable.
        next_commits: Commits since the latest tag, newest first.
        bump: Magnitude that produced next_version.
        head: HEAD commit hash.
        dirty: True if the working tree differs from HEAD.
    """

    latest_version: str
    current_tag: str
    next_version: str = ""
    next_commits: list[ClassifiedCommit] = Field(default_factory=list)
    bump: Magnitude = Magnitude.NONE
    head: str = ""
    dirty: bool = False

    @field_serializer("bump", when_used="json")
    def _bump_name(self, bump: Magnitude) -> str:
        return str(bump)
