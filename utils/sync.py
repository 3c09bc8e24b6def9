from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from models.assignment import AssignmentCreate, CompletionStatus, Priority
from models.student import Student
from models.upstream import UpstreamRecord
from utils.assignment_store import create_assignment, find_by_upstream_id
from utils.canvas import CanvasClient
from utils.due_dates import infer_due_from_title
from utils.errors import UpstreamUnavailable
from utils.reconcile import ReconcileResult, reconcile
from utils.school_time import school_now, school_zone
from utils.students import list_students, upstream_account_key

logger = logging.getLogger(__name__)

IMPORTED_ESTIMATED_MINUTES = 60


def get_upstream_client(config: Dict[str, Any], account_key: str) -> CanvasClient:
    return CanvasClient.from_config(config, account_key)


def should_skip_record(record: UpstreamRecord, config: Dict[str, Any]) -> bool:
    """Administrative and in-class-only items never become schedulable work."""
    title = record.title.lower()
    sync_cfg = config.get("sync", {})
    patterns = list(sync_cfg.get("skip_title_patterns", [])) + list(sync_cfg.get("skip_in_class_patterns", []))
    if any(pattern.lower() in title for pattern in patterns):
        return True
    return "(continued)" in title


def import_new_records(
    conn,
    student_id: int,
    snapshot: Sequence[UpstreamRecord],
    config: Dict[str, Any],
    now: Optional[datetime] = None,
) -> int:
    """Create local rows for upstream ids that have never been seen.

    Rows that already exist, active or soft-deleted, are left to reconcile().
    """
    now = now or school_now(config)
    tz = school_zone(config)
    imported = 0
    for record in snapshot:
        if find_by_upstream_id(conn, student_id, record.upstream_id) is not None:
            continue
        if should_skip_record(record, config):
            logger.debug("Sync student %s: skipping %r", student_id, record.title)
            continue
        due_at = record.due_at or infer_due_from_title(record.title, now, tz)
        try:
            create_assignment(
                conn,
                AssignmentCreate(
                    student_id=student_id,
                    title=record.title,
                    subject=record.course_name,
                    course_name=record.course_name,
                    due_at=due_at,
                    completion_status=(
                        CompletionStatus.COMPLETED if record.is_graded else CompletionStatus.PENDING
                    ),
                    upstream_id=record.upstream_id,
                    upstream_course_id=record.course_id,
                    priority=Priority.B,
                    estimated_minutes=IMPORTED_ESTIMATED_MINUTES,
                ),
            )
        except (sqlite3.Error, ValueError) as exc:
            conn.rollback()
            logger.error("Sync student %s: could not import %r: %s", student_id, record.title, exc)
            continue
        imported += 1
        logger.info("Sync student %s: imported %r (upstream %s)", student_id, record.title, record.upstream_id)
    return imported


def run_reconciliation(
    conn,
    student: Student,
    config: Dict[str, Any],
    client: Optional[CanvasClient] = None,
) -> ReconcileResult:
    """Fetch the student's full snapshot, import new items, then reconcile.

    Raises UpstreamUnavailable before any write if the fetch fails.
    """
    try:
        if client is None:
            client = get_upstream_client(config, upstream_account_key(student))
        snapshot = client.fetch_snapshot()
    except UpstreamUnavailable as exc:
        exc.student_id = student.id
        logger.error("Sync student %s (%s): upstream unavailable: %s", student.id, student.name, exc)
        raise
    imported = import_new_records(conn, student.id, snapshot, config)
    result = reconcile(conn, student.id, snapshot)
    result.imported = imported
    return result


def run_reconciliation_for_all(
    conn,
    config: Dict[str, Any],
    client_factory: Optional[Callable[[Student], CanvasClient]] = None,
) -> Dict[str, Union[ReconcileResult, str]]:
    """Sync every student. One student's failure never stops the others."""
    outcomes: Dict[str, Union[ReconcileResult, str]] = {}
    students: List[Student] = list_students(conn)
    for student in students:
        try:
            client = client_factory(student) if client_factory else None
            outcomes[student.name] = run_reconciliation(conn, student, config, client=client)
        except UpstreamUnavailable as exc:
            outcomes[student.name] = exc.message
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("Sync student %s (%s) failed: %s", student.id, student.name, exc)
            outcomes[student.name] = str(exc)
    return outcomes
