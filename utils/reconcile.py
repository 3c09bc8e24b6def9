"""Bring a student's upstream-linked assignments in line with an upstream snapshot.

The snapshot must be complete. Three passes run in order: soft-delete rows
that vanished upstream, restore rows that came back, then sync completion
from the graded signal. Manual assignments (no upstream id) are never
touched, rows are never physically removed, and re-running with the same
snapshot writes nothing.
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from models.assignment import Assignment, CompletionStatus
from models.upstream import UpstreamRecord
from utils.assignment_store import (
    get_assignment,
    list_assignments,
    restore,
    set_completion_status,
    soft_delete,
)
from utils.errors import DataIntegrityConflict

logger = logging.getLogger(__name__)

# An action writes one assignment, conditioned on the version it was read at.
Action = Callable[[sqlite3.Connection, Assignment], bool]
Decision = Optional[Tuple[str, Action]]


@dataclass
class ReconcileResult:
    student_id: int
    imported: int = 0
    deleted: int = 0
    restored: int = 0
    completed: int = 0
    reopened: int = 0
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def writes(self) -> int:
        return self.imported + self.deleted + self.restored + self.completed + self.reopened


def index_snapshot(snapshot: Sequence[UpstreamRecord]) -> Dict[str, UpstreamRecord]:
    """Snapshot keyed by upstream id. A repeated id keeps its last record."""
    return {record.upstream_id: record for record in snapshot}


def decide_deletion(assignment: Assignment, upstream: Dict[str, UpstreamRecord]) -> Decision:
    if assignment.is_upstream_linked and assignment.is_active and assignment.upstream_id not in upstream:
        return "deleted", lambda conn, a: soft_delete(conn, a.id, expected_version=a.version)
    return None


def decide_restoration(assignment: Assignment, upstream: Dict[str, UpstreamRecord]) -> Decision:
    if assignment.is_upstream_linked and not assignment.is_active and assignment.upstream_id in upstream:
        return "restored", lambda conn, a: restore(conn, a.id, expected_version=a.version)
    return None


def decide_completion(assignment: Assignment, upstream: Dict[str, UpstreamRecord]) -> Decision:
    if not (assignment.is_upstream_linked and assignment.is_active):
        return None
    record = upstream.get(assignment.upstream_id)
    if record is None:
        return None
    if record.is_graded and assignment.completion_status == CompletionStatus.PENDING:
        return "completed", lambda conn, a: set_completion_status(
            conn, a.id, CompletionStatus.COMPLETED, expected_version=a.version
        )
    if not record.is_graded and assignment.completion_status == CompletionStatus.COMPLETED:
        # grade rescinded or assignment reopened upstream
        return "reopened", lambda conn, a: set_completion_status(
            conn, a.id, CompletionStatus.PENDING, expected_version=a.version
        )
    return None


def _apply(
    conn,
    assignment: Assignment,
    decide: Callable[[Assignment, Dict[str, UpstreamRecord]], Decision],
    upstream: Dict[str, UpstreamRecord],
    result: ReconcileResult,
) -> Optional[Assignment]:
    """Run one pass's decision for one assignment.

    On a version conflict the row is re-read and the decision re-made once;
    a second conflict skips the assignment. Returns the row as it now stands
    (None if it disappeared).
    """
    decision = decide(assignment, upstream)
    for attempt in range(2):
        if decision is None:
            return assignment
        outcome, action = decision
        try:
            if not action(conn, assignment):
                return None
        except DataIntegrityConflict:
            fresh = get_assignment(conn, assignment.id)
            if fresh is None:
                return None
            assignment = fresh
            decision = decide(assignment, upstream)
            continue
        setattr(result, outcome, getattr(result, outcome) + 1)
        logger.info(
            "Sync student %s: %s %r (upstream %s)",
            result.student_id,
            outcome,
            assignment.title,
            assignment.upstream_id,
        )
        return get_assignment(conn, assignment.id)
    logger.warning(
        "Sync student %s: skipped %r after repeated conflicting writes",
        result.student_id,
        assignment.title,
    )
    result.skipped.append(assignment.id)
    return assignment


def reconcile(conn, student_id: int, snapshot: Sequence[UpstreamRecord]) -> ReconcileResult:
    upstream = index_snapshot(snapshot)
    result = ReconcileResult(student_id=student_id)
    linked = [a for a in list_assignments(conn, student_id, include_inactive=True) if a.is_upstream_linked]
    current: Dict[int, Assignment] = {a.id: a for a in linked}

    for decide in (decide_deletion, decide_restoration, decide_completion):
        for assignment_id in list(current):
            assignment = current[assignment_id]
            try:
                updated = _apply(conn, assignment, decide, upstream, result)
            except sqlite3.Error as exc:
                conn.rollback()
                logger.error(
                    "Sync student %s: failed to update assignment %s: %s",
                    student_id,
                    assignment_id,
                    exc,
                )
                result.failed.append(assignment_id)
                del current[assignment_id]
                continue
            if updated is None:
                del current[assignment_id]
            else:
                current[assignment_id] = updated

    logger.info(
        "Sync student %s: %d deleted, %d restored, %d completed, %d reopened, %d skipped, %d failed",
        student_id,
        result.deleted,
        result.restored,
        result.completed,
        result.reopened,
        len(result.skipped),
        len(result.failed),
    )
    return result
