"""Shell and git utilities.

Provides a thin wrapper around subprocess for running git, plus the
progress-output helpers used by the rest of git-semver. Progress output
goes to stderr so that stdout only ever carries the values a caller asked
for (a version string, a JSON report).
"""

from __future__ import annotations

import subprocess
import sys
from collections.abc import Iterator, Mapping
from pathlib import Path

# Toggled by the CLI's --quiet flag.
QUIET = False

_CHUNK_SIZE = 65536


def git(
    *args: str,
    cwd: Path | str | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        cwd: Directory to run git in. Defaults to the current directory.
        env: Full environment for the child process, or None to inherit.
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail (e.g., HEAD lookup
               in an empty repository).

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
        check=check,
    )
    return result.stdout.strip()


def git_stream(
    *args: str,
    cwd: Path | str | None = None,
    sep: str = "\n",
) -> Iterator[str]:
    """Run a git command and yield its stdout split on sep as it is read.

    Output is never held in memory as a whole. Closing the generator early
    closes the pipe, which stops git.

    Raises:
        subprocess.CalledProcessError: If git exits non-zero after its
            output has been consumed.
    """
    cmd = ["git", *args]
    with subprocess.Popen(
        cmd,
        cwd=cwd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    ) as proc:
        pending = ""
        for chunk in iter(lambda: proc.stdout.read(_CHUNK_SIZE), ""):
            pending += chunk
            *records, pending = pending.split(sep)
            yield from records
        if pending:
            yield pending
        stderr = proc.stderr.read()
        returncode = proc.wait()
    if returncode:
        raise subprocess.CalledProcessError(returncode, cmd, stderr=stderr)


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    if QUIET:
        return
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}", file=sys.stderr)


def info(msg: str) -> None:
    """Print an indented detail line under the current step."""
    if QUIET:
        return
    print(f"  {msg}", file=sys.stderr)

