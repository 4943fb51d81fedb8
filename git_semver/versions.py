"""Version parsing, bumping and tag construction.

Handles conversion between version strings and semver objects, the
reduction of a commit list to a single bump, and the "current tag" that
describes an untagged or dirty working state.
"""

from __future__ import annotations

from collections.abc import Iterable

import semver

from .errors import InvalidVersion
from .models import ClassifiedCommit, Magnitude

ZERO_VERSION = semver.Version(0, 0, 0)
DIRTY_METADATA = "dirty"
SHORT_HASH_LENGTH = 7


def parse_version(value: str | semver.Version) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Accepts the forms commonly used for git tags:
    - "1.2.3" → 1.2.3
    - "v1.2.3" → 1.2.3
    - "1.2" → 1.2.0
    - "2-rc.1" → 2.0.0-rc.1

    Raises:
        InvalidVersion: If the value is not a semantic version.
    """
    if isinstance(value, semver.Version):
        return value
    try:
        text = value[1:] if value[:1] in ("v", "V") else value
        return semver.Version.parse(text, optional_minor_and_patch=True)
    except (TypeError, ValueError) as exc:
        raise InvalidVersion(f"{value!r} is not a valid semantic version") from exc


def bump(version: semver.Version, magnitude: Magnitude) -> semver.Version | None:
    """Apply one increment of the given magnitude.

    Pre-release and build labels are dropped. A patch bump of a
    pre-release finalizes it instead of incrementing the patch number,
    since "1.2.3" already sorts above "1.2.3-rc.1".

    Examples:
        bump(1.2.3, MAJOR) → 2.0.0
        bump(1.2.3, MINOR) → 1.3.0
        bump(1.2.3, PATCH) → 1.2.4
        bump(1.2.3-rc.1, PATCH) → 1.2.3
        bump(1.2.3, NONE) → None
    """
    if magnitude == Magnitude.MAJOR:
        return version.bump_major()
    if magnitude == Magnitude.MINOR:
        return version.bump_minor()
    if magnitude == Magnitude.PATCH:
        if version.prerelease:
            return version.finalize_version()
        return version.bump_patch()
    return None


def max_magnitude(commits: Iterable[ClassifiedCommit]) -> Magnitude:
    """Return the largest magnitude among commits, NONE if there are none.

    Every pending commit counts, not just the most recent one: a single
    breaking change anywhere since the last tag forces a major bump.
    """
    return max((c.magnitude for c in commits), default=Magnitude.NONE)


def next_version(
    base: str | semver.Version, commits: Iterable[ClassifiedCommit]
) -> tuple[semver.Version | None, Magnitude]:
    """Compute the version that follows base given the pending commits.

    Returns:
        Tuple of (next version or None when nothing is releasable, the
        magnitude that was applied).

    Raises:
        InvalidVersion: If base cannot be parsed.
    """
    version = parse_version(base)
    magnitude = max_magnitude(commits)
    return bump(version, magnitude), magnitude


def short_hash(commit: str) -> str:
    """Abbreviate a commit hash the way git does by default."""
    return commit[:SHORT_HASH_LENGTH]


def _prerelease_label(commit: str) -> str:
    label = short_hash(commit)
    # Numeric identifiers must not have leading zeros.
    if label.isdigit() and label.startswith("0"):
        label = f"g{label}"
    return label


def create_tag(
    version: str | semver.Version, commit: str = "", dirty: bool = False
) -> str:
    """Build the tag describing the current working state.

    Args:
        version: Latest released version.
        commit: HEAD hash if HEAD is not the released commit, else "".
        dirty: True if the working tree has uncommitted changes.

    Examples:
        create_tag("1.2.3") → "1.2.3"
        create_tag("1.2.3", "abcdef0123") → "1.2.3-abcdef0"
        create_tag("1.2.3", "abcdef0123", dirty=True) → "1.2.3-abcdef0+dirty"
        create_tag("1.2.3", dirty=True) → "1.2.3+dirty"
    """
    v = parse_version(version)
    if commit:
        v = v.replace(prerelease=_prerelease_label(commit))
    if dirty:
        v = v.replace(build=DIRTY_METADATA)
    return str(v)
