from typing import Iterable, List, Optional

from models.schedule import ScheduleTemplateBlock, TemplateBlockCreate


def _row_to_block(row) -> ScheduleTemplateBlock:
    return ScheduleTemplateBlock.model_validate(dict(row))


def get_blocks_for_weekday(conn, student_id: int, weekday: str) -> List[ScheduleTemplateBlock]:
    """Blocks of one weekday ordered by start time, then block number."""
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, student_id, weekday, block_number, start_time, end_time, block_type, subject
        FROM schedule_template
        WHERE student_id = ? AND weekday = ?
        ORDER BY start_time, block_number
        """,
        (student_id, weekday),
    )
    return [_row_to_block(row) for row in cursor.fetchall()]


def get_template(conn, student_id: int) -> List[ScheduleTemplateBlock]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, student_id, weekday, block_number, start_time, end_time, block_type, subject
        FROM schedule_template
        WHERE student_id = ?
        ORDER BY
            CASE weekday
                WHEN 'Monday' THEN 0 WHEN 'Tuesday' THEN 1 WHEN 'Wednesday' THEN 2
                WHEN 'Thursday' THEN 3 WHEN 'Friday' THEN 4 WHEN 'Saturday' THEN 5
                ELSE 6
            END,
            start_time,
            block_number
        """,
        (student_id,),
    )
    return [_row_to_block(row) for row in cursor.fetchall()]


def get_block(conn, student_id: int, block_id: int) -> Optional[ScheduleTemplateBlock]:
    cursor = conn.cursor()
    cursor.execute(
        """
        SELECT id, student_id, weekday, block_number, start_time, end_time, block_type, subject
        FROM schedule_template
        WHERE id = ? AND student_id = ?
        """,
        (block_id, student_id),
    )
    row = cursor.fetchone()
    if not row:
        return None
    return _row_to_block(row)


def upsert_template_blocks(conn, student_id: int, blocks: Iterable[TemplateBlockCreate]) -> int:
    """Insert or replace blocks keyed by (student, weekday, block number).

    Re-uploading the same CSV keeps block ids stable so day statuses stay attached.
    """
    cursor = conn.cursor()
    count = 0
    for block in blocks:
        cursor.execute(
            """
            INSERT INTO schedule_template (
                student_id, weekday, block_number, start_time, end_time, block_type, subject
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(student_id, weekday, block_number) DO UPDATE SET
                start_time = excluded.start_time,
                end_time = excluded.end_time,
                block_type = excluded.block_type,
                subject = excluded.subject
            """,
            (
                student_id,
                block.weekday.value,
                block.block_number,
                block.start_time,
                block.end_time,
                block.block_type.value,
                block.subject,
            ),
        )
        count += 1
    conn.commit()
    return count
