"""
Tests for ChangelogService sequencing and failure policy.
"""

import json

import pytest

from gitlogjson.config import ChangelogConfig
from gitlogjson.exit_codes import (
    ExternalToolMissing,
    LogFetchFailed,
    NotARepository,
    SerializationFailure,
    TagListUnavailable,
)
from gitlogjson.infra import GitResult
from gitlogjson.services import ChangelogService, RunState

SEP = "\x1f"


def _line(sha, message, author="A <a@x.com>", date="Mon Jan 6 10:00:00 2020 +0000"):
    return SEP.join([sha, author, date, message]) + "\n"


class FakeGitClient:
    """In-memory stand-in for GitClient."""

    def __init__(self, tags="", logs=None, available=True, work_tree=True,
                 tag_status=0, failing_ranges=()):
        self.git = "git"
        self.tags = tags
        self.logs = logs or {}
        self.available = available
        self.work_tree = work_tree
        self.tag_status = tag_status
        self.failing_ranges = set(failing_ranges)
        self.fetched = []

    def is_available(self):
        return self.available

    def is_work_tree(self, path):
        return self.work_tree

    def list_tags(self, path):
        if self.tag_status:
            return GitResult(returncode=self.tag_status, stderr="fatal: cannot list tags")
        return GitResult(stdout=self.tags)

    def fetch_log(self, path, window, format_spec):
        self.fetched.append(window.revision_range)
        if window.revision_range in self.failing_ranges:
            return GitResult(returncode=128, stderr=f"fatal: bad revision '{window.revision_range}'")
        return GitResult(stdout=self.logs.get(window.revision_range, ""))


@pytest.fixture
def history():
    return FakeGitClient(
        tags="v2.0.0\nv1.0.0\nnightly\nv1.1.0\n",
        logs={
            "v1.0.0": _line("c2", "second") + _line("c1", "initial, with commas"),
            "v1.0.0..v1.1.0": _line("c3", 'feat: "quoted" \\ slash'),
            "v1.1.0..v2.0.0": _line("c5", "breaking: ünïcode") + _line("c4", "chore"),
        },
    )


class TestRun:

    def test_windows_processed_in_order(self, history):
        service = ChangelogService(ChangelogConfig(), git_client=history)
        service.run()
        assert history.fetched == ["v1.0.0", "v1.0.0..v1.1.0", "v1.1.0..v2.0.0"]
        assert service.state == RunState.DONE

    def test_newest_first_by_default(self, history):
        changelog = ChangelogService(ChangelogConfig(), git_client=history).run()
        assert changelog.labels == ["v2.0.0", "v1.1.0", "v1.0.0"]

    def test_oldest_first(self, history):
        config = ChangelogConfig(order="oldest-first")
        changelog = ChangelogService(config, git_client=history).run()
        assert changelog.labels == ["v1.0.0", "v1.1.0", "v2.0.0"]

    def test_commits_keep_log_order(self, history):
        changelog = ChangelogService(ChangelogConfig(), git_client=history).run()
        assert [c.sha for c in changelog.commits("v1.0.0")] == ["c2", "c1"]
        assert changelog.commits("v1.0.0")[1].message == "initial, with commas"
        assert changelog.commits("v1.1.0")[0].message == 'feat: "quoted" \\ slash'

    def test_invalid_tag_is_diagnostic(self, history):
        service = ChangelogService(ChangelogConfig(), git_client=history)
        changelog = service.run()
        assert "nightly" not in changelog.labels
        assert [d.subject for d in service.diagnostics] == ["nightly"]

    def test_filter(self, history):
        config = ChangelogConfig(filter="v1.*")
        changelog = ChangelogService(config, git_client=history).run()
        assert changelog.labels == ["v1.1.0", "v1.0.0"]
        assert "v1.1.0..v2.0.0" not in history.fetched

    def test_malformed_lines_skipped(self):
        git = FakeGitClient(tags="v1.0.0\n", logs={"v1.0.0": "garbage\n" + _line("c1", "ok")})
        service = ChangelogService(ChangelogConfig(), git_client=git)
        changelog = service.run()
        assert [c.sha for c in changelog.commits("v1.0.0")] == ["c1"]
        assert service.diagnostics[0].kind == "MalformedRecord"

    def test_empty_tag_list(self):
        git = FakeGitClient(tags="")
        changelog = ChangelogService(ChangelogConfig(), git_client=git).run()
        assert len(changelog) == 0
        assert git.fetched == []


class TestFailures:

    def test_git_missing(self):
        service = ChangelogService(ChangelogConfig(), git_client=FakeGitClient(available=False))
        with pytest.raises(ExternalToolMissing):
            service.run()
        assert service.state == RunState.FAILED

    def test_not_a_repository(self):
        git = FakeGitClient(work_tree=False)
        with pytest.raises(NotARepository):
            ChangelogService(ChangelogConfig(), git_client=git).run()
        assert git.fetched == []

    def test_tag_list_unavailable(self):
        git = FakeGitClient(tag_status=128)
        with pytest.raises(TagListUnavailable) as exc_info:
            ChangelogService(ChangelogConfig(), git_client=git).run()
        assert exc_info.value.returncode == 128

    def test_fetch_failure_aborts(self, history):
        history.failing_ranges = {"v1.0.0..v1.1.0"}
        service = ChangelogService(ChangelogConfig(), git_client=history)

        with pytest.raises(LogFetchFailed) as exc_info:
            service.run()

        assert exc_info.value.revision_range == "v1.0.0..v1.1.0"
        # No window after the failing one is fetched
        assert history.fetched == ["v1.0.0", "v1.0.0..v1.1.0"]
        assert service.state == RunState.FAILED


class TestGenerate:

    def test_writes_document(self, history, tmp_path):
        dest = tmp_path / "out" / "changelog.json"
        config = ChangelogConfig(dest=str(dest))

        result = ChangelogService(config, git_client=history).generate()

        document = json.loads(dest.read_text(encoding="utf-8"))
        assert list(document) == ["v2.0.0", "v1.1.0", "v1.0.0"]
        assert document["v2.0.0"][0] == {
            "sha": "c5",
            "author": "A <a@x.com>",
            "date": "Mon Jan 6 10:00:00 2020 +0000",
            "message": "breaking: ünïcode",
        }
        assert result.commit_count == 5
        assert result.dest == str(dest)
        assert len(result.diagnostics) == 1

    def test_empty_history_writes_empty_object(self, tmp_path):
        dest = tmp_path / "changelog.json"
        ChangelogService(ChangelogConfig(dest=str(dest)), git_client=FakeGitClient()).generate()
        assert json.loads(dest.read_text()) == {}

    def test_fetch_failure_leaves_destination_untouched(self, history, tmp_path):
        dest = tmp_path / "changelog.json"
        dest.write_text('{"previous": []}\n')
        history.failing_ranges = {"v1.1.0..v2.0.0"}

        with pytest.raises(LogFetchFailed):
            ChangelogService(ChangelogConfig(dest=str(dest)), git_client=history).generate()

        assert dest.read_text() == '{"previous": []}\n'
        assert list(tmp_path.iterdir()) == [dest]

    def test_serialization_failure_persists_nothing(self, history, tmp_path, monkeypatch):
        dest = tmp_path / "changelog.json"

        def fail(self, pretty=False):
            raise SerializationFailure("boom")

        monkeypatch.setattr("gitlogjson.domain.changelog.Changelog.serialize", fail)
        service = ChangelogService(ChangelogConfig(dest=str(dest)), git_client=history)

        with pytest.raises(SerializationFailure):
            service.generate()

        assert not dest.exists()
        assert service.state == RunState.FAILED

    def test_pretty_output(self, history, tmp_path):
        dest = tmp_path / "changelog.json"
        ChangelogService(ChangelogConfig(dest=str(dest), pretty=True), git_client=history).generate()
        assert dest.read_text().startswith('{\n  "v2.0.0": [')
