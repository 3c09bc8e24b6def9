"""Place a day's pending assignments into the student's template blocks.

``compose`` is a pure function: it never reads the database or the clock
(beyond one ``now`` read when the caller does not pass one) and never mutates
its arguments. ``compose_schedule`` is the database-backed wrapper used by the
routes.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from models.assignment import Assignment
from models.schedule import BlockType, ComposedBlock, ComposedSchedule, ScheduleTemplateBlock
from utils.assignment_store import list_pending_for_date
from utils.schedule_template import get_blocks_for_weekday
from utils.school_time import school_now, weekday_name

ASSIGNABLE_BLOCK_TYPES = frozenset({BlockType.ASSIGNMENT, BlockType.STUDY_HALL})
WORD_PATTERN = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class NearDuplicateRule:
    """Two titles are near-duplicates when they share at least
    ``min_shared_words`` words longer than ``min_word_length`` characters."""

    min_shared_words: int = 2
    min_word_length: int = 3

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "NearDuplicateRule":
        schedule_cfg = config.get("schedule", {})
        return cls(
            min_shared_words=int(schedule_cfg.get("near_duplicate_min_shared_words", 2)),
            min_word_length=int(schedule_cfg.get("near_duplicate_min_word_length", 3)),
        )

    def significant_words(self, title: Optional[str]) -> FrozenSet[str]:
        return frozenset(
            word
            for word in WORD_PATTERN.findall((title or "").lower())
            if len(word) > self.min_word_length
        )

    def is_near_duplicate(self, words: FrozenSet[str], placed: Sequence[FrozenSet[str]]) -> bool:
        return any(len(words & other) >= self.min_shared_words for other in placed)


DEFAULT_NEAR_DUPLICATE_RULE = NearDuplicateRule()


def subject_key(assignment: Assignment) -> str:
    return (assignment.subject or assignment.course_name or "").strip().lower()


def _due_sort_key(assignment: Assignment, now: datetime) -> Tuple[int, float]:
    if assignment.due_at is None:
        return (2, 0.0)
    due_ts = assignment.due_at.timestamp()
    if assignment.due_at < now:
        return (0, due_ts)
    return (1, due_ts)


def sort_pending(assignments: Sequence[Assignment], now: datetime) -> List[Assignment]:
    """Overdue first, then by due time, undated last. Stable for equal keys."""
    return sorted(assignments, key=lambda assignment: _due_sort_key(assignment, now))


def _block_sort_key(block: ScheduleTemplateBlock) -> Tuple[str, int]:
    return (block.start_time, block.block_number)


def _pick_index(
    remaining: List[Assignment],
    remaining_words: List[FrozenSet[str]],
    used_subjects: set,
    placed_words: List[FrozenSet[str]],
    rule: NearDuplicateRule,
) -> int:
    for index, assignment in enumerate(remaining):
        key = subject_key(assignment)
        # unlabeled items never count as a fresh subject
        if key and key not in used_subjects:
            return index
    for index, words in enumerate(remaining_words):
        if not rule.is_near_duplicate(words, placed_words):
            return index
    return 0


def _open_block(block: ScheduleTemplateBlock, assignment: Optional[Assignment] = None) -> ComposedBlock:
    return ComposedBlock(
        block_id=block.id,
        block_number=block.block_number,
        start_time=block.start_time,
        end_time=block.end_time,
        block_type=block.block_type,
        subject=block.subject,
        assignment=assignment,
    )


def compose(
    template_blocks: Sequence[ScheduleTemplateBlock],
    pending_assignments: Sequence[Assignment],
    now: Optional[datetime] = None,
    rule: NearDuplicateRule = DEFAULT_NEAR_DUPLICATE_RULE,
) -> ComposedSchedule:
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    remaining = sort_pending(pending_assignments, now)
    remaining_words = [rule.significant_words(assignment.title) for assignment in remaining]
    used_subjects: set = set()
    placed_words: List[FrozenSet[str]] = []
    composed: List[ComposedBlock] = []

    for block in sorted(template_blocks, key=_block_sort_key):
        if block.block_type not in ASSIGNABLE_BLOCK_TYPES or not remaining:
            composed.append(_open_block(block))
            continue
        index = _pick_index(remaining, remaining_words, used_subjects, placed_words, rule)
        chosen = remaining.pop(index)
        placed_words.append(remaining_words.pop(index))
        key = subject_key(chosen)
        if key:
            used_subjects.add(key)
        composed.append(_open_block(block, chosen))

    return ComposedSchedule(blocks=composed, unscheduled=remaining)


def compose_schedule(conn, student_id: int, day: date, config: Dict[str, Any]) -> ComposedSchedule:
    """Read the day's template and pending work, then compose."""
    blocks = get_blocks_for_weekday(conn, student_id, weekday_name(day))
    pending = list_pending_for_date(conn, student_id, day)
    return compose(
        blocks,
        pending,
        now=school_now(config),
        rule=NearDuplicateRule.from_config(config),
    )
