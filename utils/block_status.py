from __future__ import annotations

import logging
from datetime import date
from typing import Dict, FrozenSet, List, Optional

from models.block_status import BlockStatus, BlockStatusRecord
from models.schedule import BlockType, ScheduleTemplateBlock
from utils.errors import InvalidStatusTransition
from utils.schedule_template import get_blocks_for_weekday
from utils.school_time import weekday_name

logger = logging.getLogger(__name__)

BINARY = "binary"
FULL_RANGE = "full_range"

# Block types not listed here are full-range.
BLOCK_CATEGORIES: Dict[BlockType, str] = {
    BlockType.MOVEMENT: BINARY,
    BlockType.LUNCH: BINARY,
    BlockType.TRAVEL: BINARY,
    BlockType.PREP_LOAD: BINARY,
}

LEGAL_STATES: Dict[str, FrozenSet[BlockStatus]] = {
    BINARY: frozenset({BlockStatus.NOT_STARTED, BlockStatus.COMPLETE}),
    FULL_RANGE: frozenset(BlockStatus),
}

ADVANCE: Dict[str, Dict[BlockStatus, BlockStatus]] = {
    BINARY: {
        BlockStatus.NOT_STARTED: BlockStatus.COMPLETE,
        BlockStatus.COMPLETE: BlockStatus.NOT_STARTED,
    },
    FULL_RANGE: {
        BlockStatus.NOT_STARTED: BlockStatus.IN_PROGRESS,
        BlockStatus.IN_PROGRESS: BlockStatus.COMPLETE,
        BlockStatus.COMPLETE: BlockStatus.NOT_STARTED,
        BlockStatus.STUCK: BlockStatus.IN_PROGRESS,
        BlockStatus.OVERTIME: BlockStatus.COMPLETE,
    },
}

# Only reachable through set_block_status, never through advance.
SIDE_CHANNEL_STATES: FrozenSet[BlockStatus] = frozenset({BlockStatus.STUCK, BlockStatus.OVERTIME})


def block_category(block_type: BlockType) -> str:
    return BLOCK_CATEGORIES.get(BlockType(block_type), FULL_RANGE)


def next_status(block_type: BlockType, current: BlockStatus) -> BlockStatus:
    """Target of the advance action for a block in ``current``."""
    category = block_category(block_type)
    current = BlockStatus(current)
    if current not in LEGAL_STATES[category]:
        # e.g. a binary block left in-progress by an older client
        return BlockStatus.NOT_STARTED
    return ADVANCE[category][current]


def check_side_channel(block_type: BlockType, requested: BlockStatus, current: BlockStatus) -> None:
    """Validate a direct status write. Raises InvalidStatusTransition."""
    category = block_category(block_type)
    requested = BlockStatus(requested)
    if requested not in LEGAL_STATES[category]:
        raise InvalidStatusTransition(BlockType(block_type).value, BlockStatus(current).value, requested.value)


def _read_status(conn, student_id: int, day: date, block_id: int) -> BlockStatus:
    cursor = conn.cursor()
    cursor.execute(
        """
        INSERT OR IGNORE INTO daily_schedule_status (student_id, date, template_block_id, status)
        VALUES (?, ?, ?, ?)
        """,
        (student_id, day.isoformat(), block_id, BlockStatus.NOT_STARTED.value),
    )
    conn.commit()
    cursor.execute(
        """
        SELECT status FROM daily_schedule_status
        WHERE student_id = ? AND date = ? AND template_block_id = ?
        """,
        (student_id, day.isoformat(), block_id),
    )
    return BlockStatus(cursor.fetchone()["status"])


def _write_status(conn, student_id: int, day: date, block_id: int, status: BlockStatus) -> bool:
    """Last write wins. An identical write changes nothing."""
    cursor = conn.cursor()
    cursor.execute(
        """
        UPDATE daily_schedule_status
        SET status = ?, updated_at = datetime('now')
        WHERE student_id = ? AND date = ? AND template_block_id = ? AND status != ?
        """,
        (status.value, student_id, day.isoformat(), block_id, status.value),
    )
    changed = cursor.rowcount > 0
    conn.commit()
    return changed


def _record(student_id: int, day: date, block_id: int, status: BlockStatus, applied: bool = True) -> BlockStatusRecord:
    return BlockStatusRecord(
        student_id=student_id,
        date=day,
        template_block_id=block_id,
        status=status,
        applied=applied,
    )


def get_block_status(conn, student_id: int, day: date, block: ScheduleTemplateBlock) -> BlockStatusRecord:
    status = _read_status(conn, student_id, day, block.id)
    return _record(student_id, day, block.id, status)


def get_day_statuses(conn, student_id: int, day: date) -> List[BlockStatusRecord]:
    """Statuses for every block of the day's template, created on first read."""
    blocks = get_blocks_for_weekday(conn, student_id, weekday_name(day))
    return [get_block_status(conn, student_id, day, block) for block in blocks]


def check_advance(block_type: BlockType, current: BlockStatus, expected: Optional[BlockStatus]) -> BlockStatus:
    """Target of an advance. A caller-supplied ``expected`` target must match it."""
    target = next_status(block_type, current)
    if expected is None:
        return target
    expected = BlockStatus(expected)
    if expected in SIDE_CHANNEL_STATES or expected != target:
        raise InvalidStatusTransition(BlockType(block_type).value, BlockStatus(current).value, expected.value)
    return target


def advance_block_status(
    conn,
    student_id: int,
    day: date,
    block: ScheduleTemplateBlock,
    expected: Optional[BlockStatus] = None,
) -> BlockStatusRecord:
    current = _read_status(conn, student_id, day, block.id)
    try:
        target = check_advance(block.block_type, current, expected)
    except InvalidStatusTransition as exc:
        logger.info("Ignored advance for block %s on %s: %s", block.id, day, exc)
        return _record(student_id, day, block.id, current, applied=False)
    _write_status(conn, student_id, day, block.id, target)
    return _record(student_id, day, block.id, target)


def set_block_status(
    conn,
    student_id: int,
    day: date,
    block: ScheduleTemplateBlock,
    status: BlockStatus,
) -> BlockStatusRecord:
    """Direct write used for stuck/overtime and for resets.

    Illegal requests leave the stored status as it was and come back with
    ``applied`` set to False.
    """
    current = _read_status(conn, student_id, day, block.id)
    try:
        check_side_channel(block.block_type, status, current)
    except InvalidStatusTransition as exc:
        logger.info("Ignored status change for block %s on %s: %s", block.id, day, exc)
        return _record(student_id, day, block.id, current, applied=False)
    status = BlockStatus(status)
    _write_status(conn, student_id, day, block.id, status)
    return _record(student_id, day, block.id, status)
