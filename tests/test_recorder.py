"""
Tests for the change recorder.

Tests cover:
- Commit message formatting for single mutations and batches
- Immediate commits outside a batch
- Batch session lifecycle (begin, record, end)
- The batch() context manager
"""

import pytest

from pkgsnap.domain.mutation import MutationEvent, Operation
from pkgsnap.exit_codes import GIT_ERROR, GitCommandError
from pkgsnap.services.recorder import (
    ChangeRecorder,
    MENU_BATCH_LABEL,
    UPGRADE_BATCH_LABEL,
    commit_message_for_batch,
    commit_message_for_event,
)
from pkgsnap.services.repository import SnapshotRepository

from conftest import FakeGitClient


@pytest.fixture
def recorder(package_dir, fake_git):
    recorder = ChangeRecorder(SnapshotRepository(package_dir, git_client=fake_git))
    # Start from an initialized, clean repository
    recorder.repository.ensure_repository()
    recorder.commit("setup")
    fake_git.commits.clear()
    return recorder


class TestCommitMessages:
    """Tests for the pure message builders."""

    def test_single_subject(self):
        event = MutationEvent(Operation.INSTALL, ["foo"])
        assert commit_message_for_event(event) == "Install: foo"

    def test_multiple_subjects_joined_with_comma_space(self):
        event = MutationEvent(Operation.DELETE, ["foo", "bar", "baz"])
        assert commit_message_for_event(event) == "Delete: foo, bar, baz"

    def test_menu_execute_prefix(self):
        event = MutationEvent(Operation.MENU_EXECUTE, ["foo"])
        assert commit_message_for_event(event) == "Menu execute: foo"

    def test_upgrade_batch_lists_unique_names_in_first_seen_order(self):
        events = [
            MutationEvent(Operation.UPGRADE, ["a"]),
            MutationEvent(Operation.UPGRADE, ["b", "a"]),
            MutationEvent(Operation.UPGRADE, ["c"]),
        ]
        assert commit_message_for_batch(UPGRADE_BATCH_LABEL, events) == "Package upgrade: a, b, c"

    def test_upgrade_batch_flattens_mixed_operations(self):
        events = [
            MutationEvent(Operation.INSTALL, ["new-dep"]),
            MutationEvent(Operation.UPGRADE, ["pkg"]),
            MutationEvent(Operation.DELETE, ["new-dep", "old"]),
        ]
        assert commit_message_for_batch("Package upgrade", events) == \
            "Package upgrade: new-dep, pkg, old"

    @pytest.mark.parametrize("label", [MENU_BATCH_LABEL, "Cleanup", "package upgrade"])
    def test_other_labels_summarize(self, label):
        events = [
            MutationEvent(Operation.INSTALL, ["foo"]),
            MutationEvent(Operation.DELETE, ["bar"]),
        ]
        assert commit_message_for_batch(label, events) == f"{label}: multiple operations"

    def test_other_labels_ignore_event_contents(self):
        one = [MutationEvent(Operation.INSTALL, ["foo"])]
        many = [MutationEvent(Operation.DELETE, [str(i)]) for i in range(5)]
        assert commit_message_for_batch("Cleanup", one) == commit_message_for_batch("Cleanup", many)


class TestImmediateCommits:
    """Mutations recorded outside a batch commit right away."""

    def test_each_mutation_commits_once(self, recorder, fake_git):
        for op, names in [
            (Operation.INSTALL, ["foo"]),
            (Operation.UPGRADE, ["foo", "bar"]),
            (Operation.DELETE, ["bar"]),
        ]:
            fake_git.touch()
            assert recorder.record_mutation(op, names) is True

        assert fake_git.messages == ["Install: foo", "Upgrade: foo, bar", "Delete: bar"]

    def test_string_subject(self, recorder, fake_git):
        fake_git.touch()
        recorder.record_mutation("install", "foo")
        assert fake_git.messages == ["Install: foo"]

    def test_clean_tree_does_not_commit(self, recorder, fake_git):
        assert recorder.record_mutation(Operation.INSTALL, ["foo"]) is False
        assert fake_git.commits == []

    def test_unknown_operation_rejected(self, recorder):
        with pytest.raises(ValueError):
            recorder.record_mutation("reinstall", ["foo"])


class TestBatchSession:
    """Tests for begin_batch / end_batch."""

    def test_upgrade_batch_single_commit(self, recorder, fake_git):
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        fake_git.touch()
        assert recorder.record_mutation(Operation.UPGRADE, ["pkg-a"]) is None
        assert recorder.record_mutation(Operation.UPGRADE, ["pkg-b", "pkg-a"]) is None
        assert fake_git.commits == []

        assert recorder.end_batch() is True
        assert fake_git.messages == ["Package upgrade: pkg-a, pkg-b"]

    def test_other_batch_message(self, recorder, fake_git):
        recorder.begin_batch(MENU_BATCH_LABEL)
        fake_git.touch()
        recorder.record_mutation(Operation.INSTALL, ["foo"])
        recorder.record_mutation(Operation.DELETE, ["bar"])
        recorder.end_batch()

        assert fake_git.messages == ["Package menu execute: multiple operations"]

    def test_empty_batch_does_not_commit(self, recorder, fake_git):
        fake_git.touch()
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        assert recorder.end_batch() is False
        assert fake_git.commits == []

    def test_end_without_begin_is_noop(self, recorder, fake_git):
        fake_git.touch()
        assert recorder.end_batch() is False
        assert fake_git.commits == []

    def test_session_resets_after_end(self, recorder, fake_git):
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        recorder.record_mutation(Operation.UPGRADE, ["a"])
        fake_git.touch()
        recorder.end_batch()

        assert not recorder.batching
        assert recorder.session.label == ""
        assert recorder.session.events == []

        fake_git.touch()
        recorder.record_mutation(Operation.INSTALL, ["b"])
        assert fake_git.messages == ["Package upgrade: a", "Install: b"]

    def test_begin_while_active_discards_previous_events(self, recorder, fake_git):
        recorder.begin_batch("First")
        recorder.record_mutation(Operation.INSTALL, ["dropped"])
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        recorder.record_mutation(Operation.UPGRADE, ["kept"])
        fake_git.touch()
        recorder.end_batch()

        assert fake_git.messages == ["Package upgrade: kept"]

    def test_batch_with_clean_tree_does_not_commit(self, recorder, fake_git):
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        recorder.record_mutation(Operation.UPGRADE, ["a"])
        assert recorder.end_batch() is False
        assert fake_git.commits == []


class TestBatchContextManager:
    """Tests for the batch() context manager."""

    def test_commits_on_exit(self, recorder, fake_git):
        with recorder.batch(UPGRADE_BATCH_LABEL):
            assert recorder.batching
            fake_git.touch()
            recorder.record_mutation(Operation.UPGRADE, ["a"])
            recorder.record_mutation(Operation.UPGRADE, ["b"])

        assert not recorder.batching
        assert fake_git.messages == ["Package upgrade: a, b"]

    def test_commits_recorded_work_when_body_raises(self, recorder, fake_git):
        with pytest.raises(RuntimeError):
            with recorder.batch(UPGRADE_BATCH_LABEL):
                fake_git.touch()
                recorder.record_mutation(Operation.UPGRADE, ["a"])
                raise RuntimeError("download failed")

        assert not recorder.batching
        assert fake_git.messages == ["Package upgrade: a"]


class TestCommitFailures:
    """Git failures are not swallowed by the recorder."""

    def test_immediate_commit_failure_propagates(self, recorder, fake_git):
        fake_git.fail_commit = True
        fake_git.touch()

        with pytest.raises(GitCommandError) as exc_info:
            recorder.record_mutation(Operation.INSTALL, ["foo"])

        assert exc_info.value.exit_code == GIT_ERROR
        assert exc_info.value.command[:2] == ["git", "commit"]
        assert fake_git.commits == []

    def test_batch_commit_failure_leaves_session_idle(self, recorder, fake_git):
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        recorder.record_mutation(Operation.UPGRADE, ["a"])
        fake_git.touch()
        fake_git.fail_commit = True

        with pytest.raises(GitCommandError):
            recorder.end_batch()

        assert not recorder.batching
        assert recorder.session.events == []

        # The next mutation commits on its own once git recovers
        fake_git.fail_commit = False
        recorder.record_mutation(Operation.INSTALL, ["b"])
        assert fake_git.messages == ["Install: b"]

    def test_init_failure_propagates(self, package_dir):
        recorder = ChangeRecorder(
            SnapshotRepository(package_dir, git_client=FakeGitClient(fail_init=True))
        )

        with pytest.raises(GitCommandError) as exc_info:
            recorder.record_mutation(Operation.INSTALL, ["foo"])

        assert exc_info.value.returncode == 128


class TestManualCommit:
    """Tests for commit() bypassing the batch."""

    def test_manual_commit_during_batch(self, recorder, fake_git):
        recorder.begin_batch(UPGRADE_BATCH_LABEL)
        fake_git.touch()
        assert recorder.commit("Checkpoint") is True
        assert fake_git.messages == ["Checkpoint"]
        assert recorder.batching


def test_lazy_repository_initialization(package_dir):
    git = FakeGitClient()
    recorder = ChangeRecorder(SnapshotRepository(package_dir, git_client=git))

    recorder.record_mutation(Operation.INSTALL, ["foo"])

    assert git.calls.count('init') == 1
    assert git.messages == ["Install: foo"]
