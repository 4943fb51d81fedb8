"""Tests for git_semver.cli."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from git_semver import shell
from git_semver.cli import cli
from git_semver.errors import EmptyRepositoryError
from git_semver.models import ClassifiedCommit, CommitRules, Magnitude, ReleaseInfo

RELEASE = ReleaseInfo(
    latest_version="1.2.3",
    current_tag="1.2.3-abcdef0+dirty",
    next_version="1.3.0",
    next_commits=[
        ClassifiedCommit(
            hash="abcdef0123", type="feat", scope="api", message="add x", magnitude=Magnitude.MINOR
        ),
        ClassifiedCommit(hash="1234567890", message="Merge branch", magnitude=Magnitude.NONE),
    ],
    bump=Magnitude.MINOR,
    dirty=True,
)


@pytest.fixture
def runner() -> CliRunner:
    """Click test runner."""
    return CliRunner()


@pytest.fixture
def mock_repo(tmp_path: Path) -> Iterator[tuple[MagicMock, MagicMock, MagicMock]]:
    """Patch repository opening and report building."""
    repo = MagicMock()
    repo.root = tmp_path
    with (
        patch("git_semver.cli.open_repository", return_value=repo) as mock_open,
        patch("git_semver.cli.build_release_info", return_value=RELEASE) as mock_build,
    ):
        yield repo, mock_open, mock_build


class TestReportCommands:
    """Tests for the report commands: info, latest, current and next."""

    def test_default_is_info(self, runner: CliRunner, mock_repo) -> None:
        """Without a subcommand the full report is printed."""
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "latest version: 1.2.3" in result.output
        assert "current tag:    1.2.3-abcdef0+dirty" in result.output
        assert "next version:   1.3.0" in result.output
        assert "abcdef0 minor feat(api): add x" in result.output
        assert "1234567 none  Merge branch" in result.output

    @patch("git_semver.cli.short_hash", side_effect=lambda commit: commit[:4])
    def test_info_abbreviates_hashes(
        self, mock_short: MagicMock, runner: CliRunner, mock_repo
    ) -> None:
        """Commit hashes in the report are abbreviated by short_hash()."""
        result = runner.invoke(cli, ["-q", "info"])
        assert "  abcd minor feat(api): add x" in result.output
        assert mock_short.call_count == 2

    def test_info_json(self, runner: CliRunner, mock_repo) -> None:
        """--json prints the report as JSON with magnitude names."""
        result = runner.invoke(cli, ["info", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["next_version"] == "1.3.0"
        assert data["bump"] == "minor"

    @pytest.mark.parametrize(
        ("command", "expected"),
        [("latest", "1.2.3\n"), ("current", "1.2.3-abcdef0+dirty\n"), ("next", "1.3.0\n")],
    )
    def test_single_values(
        self, runner: CliRunner, mock_repo, command: str, expected: str
    ) -> None:
        """Single-value commands print exactly one line."""
        result = runner.invoke(cli, [command])
        assert result.exit_code == 0
        assert result.output == expected

    def test_next_prints_nothing_without_bump(self, runner: CliRunner, mock_repo) -> None:
        """next prints nothing when no commit is releasable."""
        _, _, mock_build = mock_repo
        mock_build.return_value = ReleaseInfo(latest_version="1.2.3", current_tag="1.2.3")
        result = runner.invoke(cli, ["next"])
        assert result.exit_code == 0
        assert result.output == ""

    def test_path_option(self, runner: CliRunner, mock_repo, tmp_path: Path) -> None:
        """-C selects the repository directory."""
        _, mock_open, _ = mock_repo
        runner.invoke(cli, ["-C", str(tmp_path), "latest"])
        mock_open.assert_called_once_with(tmp_path)

    def test_reads_config_from_repo_root(self, runner: CliRunner, mock_repo, tmp_path: Path) -> None:
        """Commit rules come from the repository's pyproject.toml by default."""
        repo, _, mock_build = mock_repo
        (tmp_path / "pyproject.toml").write_text('[tool.git-semver]\npatch-types = ["fix", "refactor"]\n')
        runner.invoke(cli, ["latest"])
        assert mock_build.call_args.args == (repo, CommitRules(patch_types=("fix", "refactor")))

    def test_config_option(self, runner: CliRunner, mock_repo, tmp_path: Path) -> None:
        """--config points at another pyproject.toml."""
        _, _, mock_build = mock_repo
        config = tmp_path / "custom.toml"
        config.write_text('[tool.git-semver]\nminor-types = ["feature"]\n')
        runner.invoke(cli, ["--config", str(config), "latest"])
        assert mock_build.call_args.args[1].minor_types == ("feature",)

    def test_error_exits_nonzero(self, runner: CliRunner, mock_repo) -> None:
        """Failures are reported as "Error: ..." with exit status 1."""
        _, _, mock_build = mock_repo
        mock_build.side_effect = EmptyRepositoryError("reference not found: HEAD - is repository empty?")
        result = runner.invoke(cli, ["next"])
        assert result.exit_code == 1
        assert "Error: reference not found: HEAD - is repository empty?" in result.output


class TestTagCommand:
    """Tests for the tag command."""

    def test_tags_next_version(self, runner: CliRunner, mock_repo) -> None:
        """With -q only the created tag name is printed."""
        repo, _, _ = mock_repo
        result = runner.invoke(cli, ["-q", "tag", "--prefix", "v"])
        assert result.exit_code == 0
        assert result.output == "v1.3.0\n"
        repo.create_tag.assert_called_once_with("v1.3.0")
        repo.push_refs.assert_not_called()

    def test_progress_shown_without_quiet(self, runner: CliRunner, mock_repo) -> None:
        """Without -q tagging progress is printed alongside the tag name."""
        result = runner.invoke(cli, ["tag", "--prefix", "v"])
        assert result.exit_code == 0
        assert "Tagging release" in result.output
        assert result.output.endswith("v1.3.0\n")

    def test_quiet_overrides_progress(self, runner: CliRunner, mock_repo) -> None:
        """-q suppresses progress even when it was enabled before the call."""
        repo, _, _ = mock_repo
        repo.remote_url.return_value = "https://example.com/org/repo.git"
        shell.QUIET = False
        result = runner.invoke(cli, ["-q", "tag", "--push", "--user", "bot"])
        assert result.exit_code == 0
        assert "Tagging release" not in result.output
        assert "Pushing" not in result.output
        assert result.output == "1.3.0\n"

    def test_nothing_to_tag(self, runner: CliRunner, mock_repo) -> None:
        """Tagging fails when there is nothing to release."""
        repo, _, mock_build = mock_repo
        mock_build.return_value = ReleaseInfo(latest_version="1.2.3", current_tag="1.2.3")
        result = runner.invoke(cli, ["tag"])
        assert result.exit_code == 1
        repo.create_tag.assert_not_called()

    def test_tag_and_push(self, runner: CliRunner, mock_repo) -> None:
        """--push pushes with credentials built from the options."""
        repo, _, _ = mock_repo
        repo.remote_url.return_value = "https://example.com/org/repo.git"
        result = runner.invoke(cli, ["tag", "--push", "--user", "bot", "--password", "tok"])
        assert result.exit_code == 0
        auth = repo.push_refs.call_args.args[0]
        assert (auth.username, auth.password) == ("bot", "tok")


class TestPushCommand:
    """Tests for the push command."""

    def test_push_uses_env_password(self, runner: CliRunner, mock_repo) -> None:
        """The password can come from GIT_SEMVER_PASSWORD."""
        repo, _, _ = mock_repo
        repo.remote_url.return_value = "https://example.com/org/repo.git"
        result = runner.invoke(
            cli, ["push", "--user", "bot"], env={"GIT_SEMVER_PASSWORD": "from-env"}
        )
        assert result.exit_code == 0
        assert repo.push_refs.call_args.args[0].password == "from-env"
        assert repo.push_refs.call_args.kwargs == {"remote": "origin"}

    def test_push_unsupported_remote(self, runner: CliRunner, mock_repo) -> None:
        """Remotes that are neither http(s) nor ssh are rejected before pushing."""
        repo, _, _ = mock_repo
        repo.remote_url.return_value = "/srv/repo.git"
        result = runner.invoke(cli, ["push"])
        assert result.exit_code == 1
        assert "unsupported remote URL" in result.output
        repo.push_refs.assert_not_called()


def test_end_to_end(runner: CliRunner, git_repo) -> None:
    """The CLI reports on a real repository."""
    git_repo.commit("feat: add x")
    git_repo.tag("v0.1.0")
    git_repo.commit("fix: correct y")

    result = runner.invoke(cli, ["-q", "-C", str(git_repo.root), "next"])

    assert result.exit_code == 0
    assert result.output == "0.1.1\n"


def test_end_to_end_progress_goes_to_stderr(runner: CliRunner, git_repo) -> None:
    """Without -q progress lands on stderr and stdout holds only the version."""
    git_repo.commit("feat: add x")

    result = runner.invoke(cli, ["-C", str(git_repo.root), "next"])

    assert result.exit_code == 0
    assert result.stdout == "0.1.0\n"
    assert "Collecting commits since latest version" in result.stderr


def test_end_to_end_quiet(runner: CliRunner, git_repo) -> None:
    """-q leaves stderr empty."""
    git_repo.commit("feat: add x")

    result = runner.invoke(cli, ["-q", "-C", str(git_repo.root), "tag"])

    assert result.exit_code == 0
    assert result.stdout == "0.1.0\n"
    assert result.stderr == ""
