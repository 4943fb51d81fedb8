"""Release report: latest tag → pending commits → next version → current tag.

This module ties the pieces together:
1. Find the highest version tag and the commit it points at
2. Walk history from HEAD back to that commit, classifying each message
3. Reduce the classified commits to the next version
4. Check the working tree and describe the current state as a tag

Nothing here writes to the repository except :func:`tag_next_version`,
which is an optional action on top of the report.
"""

from __future__ import annotations

from .commits import CommitClassifier
from .errors import GitSemverError
from .models import ClassifiedCommit, CommitRules, ReleaseInfo
from .repository import GitRepository, RepositorySource
from .shell import info, step
from .tags import resolve_latest_version
from .versions import create_tag, next_version, short_hash


def commits_since(
    source: RepositorySource,
    head: str,
    stop_commit: str,
    classifier: CommitClassifier,
) -> list[ClassifiedCommit]:
    """Classify every commit from head back to stop_commit (exclusive).

    History is walked newest first in committer-time order. An empty
    stop_commit means there is no release yet, so the whole history is
    collected.
    """
    step("Collecting commits since latest version")
    commits: list[ClassifiedCommit] = []
    for commit_hash, message in source.walk_history(head):
        if commit_hash == stop_commit:
            break
        commit = classifier.classify(message, hash=commit_hash)
        commits.append(commit)
        subject = commit.message.splitlines()[0] if commit.message else ""
        info(f"{short_hash(commit_hash)} {commit.magnitude}: {subject}")
    if not commits:
        info("<none>")
    return commits


def build_release_info(
    source: RepositorySource, rules: CommitRules | None = None
) -> ReleaseInfo:
    """Build the release report for a repository's current state.

    Args:
        source: Repository to inspect.
        rules: Commit type tables; defaults to the conventional set.

    Raises:
        RepositoryAccessError: If the repository cannot be read.
        EmptyRepositoryError: If the repository has no commits.
    """
    latest, latest_commit = resolve_latest_version(source)

    head = source.resolve_head()
    commits = commits_since(source, head, latest_commit, CommitClassifier(rules))

    step("Computing next version")
    upcoming, magnitude = next_version(latest, commits)
    info(f"{latest} → {upcoming if upcoming is not None else '<unchanged>'} ({magnitude})")

    dirty = source.working_tree_dirty()
    current = create_tag(latest, head if head != latest_commit else "", dirty)

    return ReleaseInfo(
        latest_version=str(latest),
        current_tag=current,
        next_version=str(upcoming) if upcoming is not None else "",
        next_commits=commits,
        bump=magnitude,
        head=head,
        dirty=dirty,
    )


def tag_next_version(repo: GitRepository, release: ReleaseInfo, prefix: str = "") -> str:
    """Tag HEAD with the next version and return the tag name.

    Raises:
        GitSemverError: If there is nothing to release.
        RepositoryAccessError: If the tag cannot be created.
    """
    if not release.next_version:
        raise GitSemverError(
            f"no releasable commits since {release.latest_version}; nothing to tag"
        )
    tag = f"{prefix}{release.next_version}"
    step("Tagging release")
    repo.create_tag(tag)
    info(tag)
    return tag
