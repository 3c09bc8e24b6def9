import sqlite3

import pytest

from models.assignment import AssignmentCreate, CompletionStatus, RecordState
from models.upstream import UpstreamRecord
from utils import reconcile as reconcile_module
from utils.assignment_store import (
    create_assignment,
    get_assignment,
    list_assignments,
    set_completion_status,
)
from utils.errors import DataIntegrityConflict
from utils.reconcile import ReconcileResult, decide_deletion, reconcile


def _record(upstream_id, title="Worksheet", graded=False):
    return UpstreamRecord(upstream_id=upstream_id, title=title, graded_signal=graded, course_name="Math")


def _linked(conn, student_id, upstream_id, title="Worksheet", status=CompletionStatus.PENDING):
    return create_assignment(
        conn,
        AssignmentCreate(
            student_id=student_id,
            title=title,
            upstream_id=upstream_id,
            completion_status=status,
        ),
    )


def _manual(conn, student_id, title="Practice piano"):
    return create_assignment(conn, AssignmentCreate(student_id=student_id, title=title))


def test_second_run_with_same_snapshot_writes_nothing(conn, student_id):
    _linked(conn, student_id, "1")
    _linked(conn, student_id, "2")
    _linked(conn, student_id, "3")
    snapshot = [_record("1", graded=True), _record("3")]

    first = reconcile(conn, student_id, snapshot)
    second = reconcile(conn, student_id, snapshot)

    assert first.deleted == 1
    assert first.completed == 1
    assert second.writes == 0


def test_vanished_then_returning_record_is_restored(conn, student_id):
    original = _linked(conn, student_id, "42")

    reconcile(conn, student_id, [])
    assert get_assignment(conn, original.id).record_state == RecordState.DELETED

    result = reconcile(conn, student_id, [_record("42")])

    assert result.restored == 1
    rows = list_assignments(conn, student_id, include_inactive=True)
    assert [a.id for a in rows if a.upstream_id == "42"] == [original.id]
    assert rows[0].is_active


def test_restore_keeps_completion_status(conn, student_id):
    done = _linked(conn, student_id, "7", status=CompletionStatus.COMPLETED)
    reconcile(conn, student_id, [])

    reconcile(conn, student_id, [_record("7", graded=True)])

    restored = get_assignment(conn, done.id)
    assert restored.is_active
    assert restored.completion_status == CompletionStatus.COMPLETED


def test_graded_signal_drives_completion_both_ways(conn, student_id):
    linked = _linked(conn, student_id, "5")
    manual = _manual(conn, student_id)
    seen = []

    for graded in (True, False, True):
        reconcile(conn, student_id, [_record("5", graded=graded)])
        seen.append(get_assignment(conn, linked.id).completion_status)

    assert seen == [CompletionStatus.COMPLETED, CompletionStatus.PENDING, CompletionStatus.COMPLETED]
    untouched = get_assignment(conn, manual.id)
    assert untouched.completion_status == CompletionStatus.PENDING
    assert untouched.version == manual.version


def test_manual_assignments_survive_empty_snapshot(conn, student_id):
    manual = _manual(conn, student_id)

    result = reconcile(conn, student_id, [])

    assert result.writes == 0
    assert get_assignment(conn, manual.id).is_active


def test_in_progress_rows_are_not_completed_or_reopened(conn, student_id):
    working = _linked(conn, student_id, "8", status=CompletionStatus.IN_PROGRESS)

    result = reconcile(conn, student_id, [_record("8", graded=True)])

    assert result.writes == 0
    assert get_assignment(conn, working.id).completion_status == CompletionStatus.IN_PROGRESS


def test_conflicting_write_is_retried_with_fresh_row(conn, student_id):
    stale = _linked(conn, student_id, "11")
    set_completion_status(conn, stale.id, CompletionStatus.IN_PROGRESS)
    result = ReconcileResult(student_id=student_id)

    updated = reconcile_module._apply(conn, stale, decide_deletion, {}, result)

    assert result.deleted == 1
    assert updated.record_state == RecordState.DELETED
    assert updated.completion_status == CompletionStatus.IN_PROGRESS


def test_repeated_conflict_skips_assignment(conn, student_id, monkeypatch):
    linked = _linked(conn, student_id, "12")

    def always_conflict(conn, assignment_id, expected_version=None):
        raise DataIntegrityConflict(assignment_id, expected_version)

    monkeypatch.setattr(reconcile_module, "soft_delete", always_conflict)

    result = reconcile(conn, student_id, [])

    assert result.skipped == [linked.id]
    assert result.deleted == 0
    assert get_assignment(conn, linked.id).is_active


def test_storage_failure_is_scoped_to_one_assignment(conn, student_id, monkeypatch):
    broken = _linked(conn, student_id, "21")
    healthy = _linked(conn, student_id, "22")
    real_set_status = reconcile_module.set_completion_status

    def flaky_set_status(conn, assignment_id, status, expected_version=None):
        if assignment_id == broken.id:
            raise sqlite3.OperationalError("database is locked")
        return real_set_status(conn, assignment_id, status, expected_version=expected_version)

    monkeypatch.setattr(reconcile_module, "set_completion_status", flaky_set_status)

    result = reconcile(conn, student_id, [_record("21", graded=True), _record("22", graded=True)])

    assert result.failed == [broken.id]
    assert result.completed == 1
    assert get_assignment(conn, healthy.id).completion_status == CompletionStatus.COMPLETED
    assert get_assignment(conn, broken.id).completion_status == CompletionStatus.PENDING


@pytest.mark.parametrize("upstream_id", [True, None, "", 3.5])
def test_upstream_record_rejects_bad_ids(upstream_id):
    with pytest.raises(ValueError):
        UpstreamRecord(upstream_id=upstream_id, title="x")


def test_upstream_record_stringifies_integer_ids():
    assert _record(123).upstream_id == "123"
