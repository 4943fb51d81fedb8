"""Latest-version discovery from repository tags.

Every tag whose name parses as a semantic version is a release candidate;
the highest one wins. The scan is a fold with a max operation over a
strict total order, so the result does not depend on the order in which
the repository happens to enumerate its tags.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import reduce
from typing import NamedTuple

import semver

from .errors import InvalidVersion
from .models import TagRef
from .repository import RepositorySource
from .shell import info, step
from .versions import ZERO_VERSION, parse_version


class _Candidate(NamedTuple):
    version: semver.Version
    name: str
    commit: str

    def rank(self) -> tuple[semver.Version, str, str, str]:
        # semver precedence ignores build metadata, so the remaining fields
        # break ties between e.g. "1.0.0+a", "1.0.0+b" and "v1.0.0".
        return (self.version, self.version.build or "", self.name, self.commit)


_SEED = _Candidate(ZERO_VERSION, "", "")


def parse_tag_version(name: str) -> semver.Version | None:
    """Parse a tag name as a version, or return None if it isn't one."""
    try:
        return parse_version(name)
    except InvalidVersion:
        return None


def _higher(best: _Candidate, candidate: _Candidate) -> _Candidate:
    return candidate if candidate.rank() > best.rank() else best


def highest_version(tags: Iterable[TagRef]) -> tuple[semver.Version, str]:
    """Find the highest version among tags.

    Tag names that are not versions are skipped. Only a version strictly
    above 0.0.0 replaces the implicit starting point, so a repository
    with no version tags (or only a "0.0.0" tag) reports 0.0.0 with no
    commit.

    Returns:
        Tuple of (highest version, hash of the commit it tags or "").
    """
    candidates = []
    for tag in tags:
        version = parse_tag_version(tag.name)
        if version is not None and version > ZERO_VERSION:
            candidates.append(_Candidate(version, tag.name, tag.commit))
    best = reduce(_higher, candidates, _SEED)
    return best.version, best.commit


def resolve_latest_version(source: RepositorySource) -> tuple[semver.Version, str]:
    """Find the latest released version of a repository.

    Raises:
        RepositoryAccessError: If the tags cannot be enumerated.
    """
    step("Finding latest version tag")
    version, commit = highest_version(source.list_tags())
    info(f"{version} ({commit or '<untagged>'})")
    return version, commit
