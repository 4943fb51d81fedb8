"""Conventional-commit classification.

A commit message is split into ``type(scope): message`` and assigned a
:class:`~git_semver.models.Magnitude` from the configured type tables.
Malformed headers are not errors; they classify as plain text with no
type, which never triggers a release on its own.
"""

from __future__ import annotations

import re

from .models import ClassifiedCommit, CommitRules

# "type(scope): rest" - rest runs to the end of the message, body included.
_SCOPED_HEADER = re.compile(r"^(\w+)\((\w+|\*)\): (.+)", re.DOTALL)
# "type: rest"
_PLAIN_HEADER = re.compile(r"^(\w+): (.+)", re.DOTALL)

WILDCARD_SCOPE = "*"


def parse_header(text: str) -> tuple[str, str, str] | None:
    """Split a commit message into (type, scope, rest).

    The header must start at the very beginning of the message. A scope of
    ``*`` means "everything" and is normalized to an empty scope.

    Examples:
        "feat(api): add x" → ("feat", "api", "add x")
        "feat(*): add x"   → ("feat", "", "add x")
        "fix: y"           → ("fix", "", "y")
        "Merge branch 'x'" → None
    """
    match = _SCOPED_HEADER.match(text)
    if match:
        commit_type, scope, rest = match.groups()
        if scope == WILDCARD_SCOPE:
            scope = ""
        return commit_type, scope, rest

    match = _PLAIN_HEADER.match(text)
    if match:
        commit_type, rest = match.groups()
        return commit_type, "", rest

    return None


class CommitClassifier:
    """Turns raw commit messages into :class:`ClassifiedCommit` records.

    Args:
        rules: Type tables to classify with. Defaults to the conventional
               set (break → major, feat → minor, fix/ref/perf → patch).
    """

    def __init__(self, rules: CommitRules | None = None) -> None:
        self.rules = rules or CommitRules()

    def classify(self, raw_message: str, hash: str = "") -> ClassifiedCommit:
        """Classify one commit message. Never raises.

        The breaking-change marker is looked for in the whole message, so
        a footer such as ``BREAKING CHANGE: removed API`` in the body
        forces a major bump whatever the header type is.
        """
        header = parse_header(raw_message)
        if header is None:
            commit_type, scope, message = "", "", raw_message
        else:
            commit_type, scope, message = header

        return ClassifiedCommit(
            hash=hash,
            type=commit_type,
            scope=scope,
            message=message,
            magnitude=self.rules.magnitude_of(commit_type, raw_message),
        )


_DEFAULT_CLASSIFIER = CommitClassifier()


def classify_commit(raw_message: str, hash: str = "") -> ClassifiedCommit:
    """Classify a message with the default rules.

    Convenience wrapper around :meth:`CommitClassifier.classify`.
    """
    return _DEFAULT_CLASSIFIER.classify(raw_message, hash=hash)
