"""
Tests for the GitClient infrastructure.
"""

import subprocess
from unittest.mock import patch, MagicMock

import pytest

from gitlogjson.domain import Tag, Window
from gitlogjson.infra.git_client import GitClient, GitResult, log_format


def _completed(stdout="", returncode=0, stderr=""):
    return MagicMock(stdout=stdout, returncode=returncode, stderr=stderr)


class TestLogFormat:

    def test_full_hash_default_delimiter(self):
        assert log_format() == "%H%x1f%an <%ae>%x1f%ad%x1f%s"

    def test_short_hash(self):
        assert log_format(short_hash=True).startswith("%h%x1f")

    def test_comma_delimiter(self):
        assert log_format(delimiter=",") == "%H%x2c%an <%ae>%x2c%ad%x2c%s"

    @pytest.mark.parametrize("delimiter", ["\u00a7", "\u20ac"])
    def test_non_ascii_delimiter_rejected(self, delimiter):
        with pytest.raises(ValueError, match="ASCII"):
            log_format(delimiter=delimiter)


class TestGitResult:

    def test_ok(self):
        assert GitResult(returncode=0).ok
        assert not GitResult(returncode=128).ok

    def test_detail_prefers_stderr(self):
        assert GitResult(stdout="out", stderr="fatal: bad\n", returncode=1).detail == "fatal: bad"
        assert GitResult(returncode=1).detail == "no output"


class TestGitClient:

    @patch('gitlogjson.infra.git_client.subprocess.run')
    def test_run_uses_argv_and_timeout(self, mock_run):
        mock_run.return_value = _completed(stdout="v1.0.0\n")
        client = GitClient(git="git", timeout=5)

        result = client.list_tags("/repo")

        assert result.stdout == "v1.0.0\n"
        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "tag", "--list"]
        assert kwargs['cwd'] == "/repo"
        assert kwargs['timeout'] == 5
        assert 'shell' not in kwargs

    @patch('gitlogjson.infra.git_client.subprocess.run')
    def test_stdout_not_stripped(self, mock_run):
        mock_run.return_value = _completed(stdout="a\x1fb\x1fc\x1fmsg   \n")
        result = GitClient().fetch_log("/repo", Window(to_tag=Tag.parse("v1.0.0")), "%H")
        assert result.stdout == "a\x1fb\x1fc\x1fmsg   \n"

    @patch('gitlogjson.infra.git_client.subprocess.run')
    def test_fetch_log_range(self, mock_run):
        mock_run.return_value = _completed()
        window = Window(to_tag=Tag.parse("v1.1.0"), from_tag=Tag.parse("v1.0.0"))

        GitClient().fetch_log("/repo", window, "%H")

        argv = mock_run.call_args[0][0]
        assert argv == ["git", "log", "--format=%H", "v1.0.0..v1.1.0", "--"]

    @patch('gitlogjson.infra.git_client.subprocess.run')
    def test_timeout_reported_as_failure(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=1)
        result = GitClient(timeout=1).list_tags("/repo")
        assert result.returncode == -1
        assert "timed out" in result.stderr

    @patch('gitlogjson.infra.git_client.subprocess.run')
    def test_spawn_failure_reported_as_failure(self, mock_run):
        mock_run.side_effect = FileNotFoundError("No such file: 'git'")
        result = GitClient().list_tags("/repo")
        assert not result.ok
        assert "No such file" in result.detail

    @patch('gitlogjson.infra.git_client.subprocess.run')
    def test_is_work_tree(self, mock_run):
        mock_run.return_value = _completed(stdout="true\n")
        assert GitClient().is_work_tree("/repo")

        mock_run.return_value = _completed(stderr="fatal: not a git repository", returncode=128)
        assert not GitClient().is_work_tree("/tmp")

    @patch('gitlogjson.infra.git_client.shutil.which')
    def test_is_available(self, mock_which):
        mock_which.return_value = None
        assert not GitClient(git="no-such-git").is_available()
        mock_which.assert_called_with("no-such-git")

        mock_which.return_value = "/usr/bin/git"
        assert GitClient().is_available()
