"""CLI entry point for git-semver."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from git_semver import shell
from git_semver.auth import select_auth
from git_semver.errors import GitSemverError
from git_semver.models import ReleaseInfo
from git_semver.release import build_release_info, tag_next_version
from git_semver.repository import GitRepository, open_repository
from git_semver.toml import load_commit_rules
from git_semver.versions import short_hash


@contextmanager
def _errors() -> Iterator[None]:
    """Report git-semver failures as click errors (exit code 1)."""
    try:
        yield
    except GitSemverError as exc:
        raise click.ClickException(str(exc)) from exc


def _open(ctx: click.Context) -> GitRepository:
    return open_repository(ctx.obj["path"])


def _report(ctx: click.Context) -> tuple[GitRepository, ReleaseInfo]:
    """Open the repository and build its release report."""
    repo = _open(ctx)
    config = ctx.obj["config"] or repo.root / "pyproject.toml"
    rules = load_commit_rules(config)
    return repo, build_release_info(repo, rules)


def _push(repo: GitRepository, remote: str, user: str, password: str, key: str) -> None:
    auth = select_auth(repo.remote_url(remote), user, password, key)
    shell.step(f"Pushing branches and tags to {remote}")
    repo.push_refs(auth, remote=remote)
    shell.info("done")


def _format_info(release: ReleaseInfo) -> str:
    lines = [
        f"latest version: {release.latest_version}",
        f"current tag:    {release.current_tag}",
        f"next version:   {release.next_version or '-'}",
    ]
    if release.next_commits:
        lines.append("commits:")
        for commit in release.next_commits:
            header = commit.type
            if commit.scope:
                header += f"({commit.scope})"
            subject = commit.message.splitlines()[0] if commit.message else ""
            text = f"{header}: {subject}" if header else subject
            lines.append(f"  {short_hash(commit.hash)} {commit.magnitude:<5} {text}")
    return "\n".join(lines)


@click.group(invoke_without_command=True)
@click.version_option(package_name="git-semver")
@click.option(
    "-C",
    "--path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Repository directory (or any directory inside it).",
)
@click.option(
    "--config",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="pyproject.toml holding [tool.git-semver]. Defaults to the repository's.",
)
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress output.")
@click.pass_context
def cli(ctx: click.Context, path: Path, config: Path | None, quiet: bool) -> None:
    """Compute the next semantic version from conventional commits."""
    shell.QUIET = quiet
    ctx.ensure_object(dict)
    ctx.obj["path"] = path
    ctx.obj["config"] = config
    if ctx.invoked_subcommand is None:
        ctx.invoke(info)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON.")
@click.pass_context
def info(ctx: click.Context, as_json: bool = False) -> None:
    """Show latest version, current tag, next version and pending commits."""
    with _errors():
        _, release = _report(ctx)
    if as_json:
        click.echo(release.model_dump_json(indent=2))
    else:
        click.echo(_format_info(release))


@cli.command()
@click.pass_context
def latest(ctx: click.Context) -> None:
    """Print the latest released version."""
    with _errors():
        _, release = _report(ctx)
    click.echo(release.latest_version)


@cli.command()
@click.pass_context
def current(ctx: click.Context) -> None:
    """Print the tag describing the current working state."""
    with _errors():
        _, release = _report(ctx)
    click.echo(release.current_tag)


@cli.command(name="next")
@click.pass_context
def next_(ctx: click.Context) -> None:
    """Print the next version (nothing if no commit is releasable)."""
    with _errors():
        _, release = _report(ctx)
    if release.next_version:
        click.echo(release.next_version)


@cli.command()
@click.option("--prefix", default="", help='Tag name prefix, e.g. "v".')
@click.option(
    "--push", "push_after", is_flag=True, help="Push branches and tags afterwards."
)
@click.option("--remote", default="origin", show_default=True, help="Remote to push to.")
@click.option("--user", default="git", show_default=True, help="Remote username.")
@click.option(
    "--password",
    default="",
    envvar="GIT_SEMVER_PASSWORD",
    help="Password or token (http remotes).",
)
@click.option("--key", default="~/.ssh/id_rsa", show_default=True, help="Private key (ssh remotes).")
@click.pass_context
def tag(
    ctx: click.Context,
    prefix: str,
    push_after: bool,
    remote: str,
    user: str,
    password: str,
    key: str,
) -> None:
    """Tag HEAD with the next version."""
    with _errors():
        repo, release = _report(ctx)
        name = tag_next_version(repo, release, prefix=prefix)
        if push_after:
            _push(repo, remote, user, password, key)
    click.echo(name)


@cli.command()
@click.option("--remote", default="origin", show_default=True, help="Remote to push to.")
@click.option("--user", default="git", show_default=True, help="Remote username.")
@click.option(
    "--password",
    default="",
    envvar="GIT_SEMVER_PASSWORD",
    help="Password or token (http remotes).",
)
@click.option("--key", default="~/.ssh/id_rsa", show_default=True, help="Private key (ssh remotes).")
@click.pass_context
def push(ctx: click.Context, remote: str, user: str, password: str, key: str) -> None:
    """Push all branches and tags (experimental, for CI)."""
    with _errors():
        _push(_open(ctx), remote, user, password, key)
