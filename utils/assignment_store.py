from __future__ import annotations

import sqlite3
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from models.assignment import (
    Assignment,
    AssignmentCreate,
    AssignmentUpdate,
    CompletionStatus,
    RecordState,
)
from utils.errors import DataIntegrityConflict

SCHEDULABLE_STATUSES = (
    CompletionStatus.PENDING.value,
    CompletionStatus.IN_PROGRESS.value,
    CompletionStatus.NEEDS_MORE_TIME.value,
)


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _row_to_assignment(row: sqlite3.Row) -> Assignment:
    return Assignment.model_validate(dict(row))


def get_assignment(conn, assignment_id: int) -> Optional[Assignment]:
    cursor = conn.cursor()
    cursor.execute("SELECT * FROM assignments WHERE id = ?", (assignment_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return _row_to_assignment(row)


def list_assignments(conn, student_id: int, include_inactive: bool = False) -> List[Assignment]:
    cursor = conn.cursor()
    if include_inactive:
        cursor.execute(
            "SELECT * FROM assignments WHERE student_id = ? ORDER BY id",
            (student_id,),
        )
    else:
        cursor.execute(
            "SELECT * FROM assignments WHERE student_id = ? AND record_state = ? ORDER BY id",
            (student_id, RecordState.ACTIVE.value),
        )
    return [_row_to_assignment(row) for row in cursor.fetchall()]


def find_by_upstream_id(conn, student_id: int, upstream_id: str) -> Optional[Assignment]:
    """Find the row linked to an upstream id, whether active or soft-deleted."""
    cursor = conn.cursor()
    cursor.execute(
        "SELECT * FROM assignments WHERE student_id = ? AND upstream_id = ?",
        (student_id, str(upstream_id)),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return _row_to_assignment(row)


def list_pending_for_date(conn, student_id: int, day: date) -> List[Assignment]:
    """Active work that can still be placed on ``day``.

    Includes items scheduled on or before the day and unscheduled items.
    Stuck items wait for a parent and completed items are done, so neither is
    returned.
    """
    placeholders = ",".join("?" for _ in SCHEDULABLE_STATUSES)
    cursor = conn.cursor()
    cursor.execute(
        f"""
        SELECT *
        FROM assignments
        WHERE student_id = ?
            AND record_state = ?
            AND completion_status IN ({placeholders})
            AND (scheduled_date IS NULL OR scheduled_date <= ?)
        ORDER BY id
        """,
        (student_id, RecordState.ACTIVE.value, *SCHEDULABLE_STATUSES, day.isoformat()),
    )
    return [_row_to_assignment(row) for row in cursor.fetchall()]


def create_assignment(conn, record: AssignmentCreate) -> Assignment:
    data = record.model_dump()
    columns = list(data.keys())
    cursor = conn.cursor()
    cursor.execute(
        f"""
        INSERT INTO assignments ({", ".join(columns)})
        VALUES ({", ".join("?" for _ in columns)})
        """,
        tuple(_to_db(data[column]) for column in columns),
    )
    assignment_id = cursor.lastrowid
    conn.commit()
    return get_assignment(conn, assignment_id)


def _apply_update(
    conn,
    assignment_id: int,
    changes: Dict[str, Any],
    expected_version: Optional[int] = None,
) -> bool:
    """Write ``changes`` to one row as a single statement.

    With ``expected_version`` the write only lands if nobody else touched the
    row since it was read; otherwise DataIntegrityConflict is raised.
    Returns False when the row does not exist.
    """
    assignments_sql = ", ".join(f"{column} = ?" for column in changes)
    params: List[Any] = [_to_db(value) for value in changes.values()]
    sql = (
        f"UPDATE assignments SET {assignments_sql}, version = version + 1, "
        "updated_at = datetime('now') WHERE id = ?"
    )
    params.append(assignment_id)
    if expected_version is not None:
        sql += " AND version = ?"
        params.append(expected_version)
    cursor = conn.cursor()
    cursor.execute(sql, params)
    if cursor.rowcount == 0:
        conn.rollback()
        if expected_version is not None and get_assignment(conn, assignment_id) is not None:
            raise DataIntegrityConflict(assignment_id, expected_version)
        return False
    conn.commit()
    return True


def set_completion_status(
    conn,
    assignment_id: int,
    status: CompletionStatus,
    expected_version: Optional[int] = None,
) -> bool:
    return _apply_update(
        conn,
        assignment_id,
        {"completion_status": CompletionStatus(status)},
        expected_version,
    )


def soft_delete(conn, assignment_id: int, expected_version: Optional[int] = None) -> bool:
    return _apply_update(
        conn,
        assignment_id,
        {"record_state": RecordState.DELETED},
        expected_version,
    )


def restore(conn, assignment_id: int, expected_version: Optional[int] = None) -> bool:
    return _apply_update(
        conn,
        assignment_id,
        {"record_state": RecordState.ACTIVE},
        expected_version,
    )


def update_assignment(conn, assignment_id: int, update: AssignmentUpdate) -> Optional[Assignment]:
    changes = update.model_dump(exclude_unset=True)
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if not title:
            raise ValueError("Title is required")
        changes["title"] = title
    if changes and not _apply_update(conn, assignment_id, changes):
        return None
    return get_assignment(conn, assignment_id)


def delete_assignment(conn, assignment_id: int) -> bool:
    """Physically remove a row. Only reachable from an explicit user action."""
    cursor = conn.cursor()
    cursor.execute("DELETE FROM assignments WHERE id = ?", (assignment_id,))
    deleted = cursor.rowcount > 0
    conn.commit()
    return deleted
