from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from config import load_config
from db.database import get_db
from models.block_status import BlockAdvance, BlockStatusRecord, BlockStatusUpdate
from models.schedule import ComposedSchedule, ScheduleTemplateBlock
from utils.block_status import (
    advance_block_status,
    get_block_status,
    get_day_statuses,
    set_block_status,
)
from utils.composer import compose_schedule
from utils.schedule_template import get_block
from utils.school_time import parse_date, weekday_name
from utils.students import get_student

router = APIRouter()


def _parse_day(value: str) -> date:
    try:
        return parse_date(value)
    except ValueError:
        raise HTTPException(status_code=400, detail="Date must be YYYY-MM-DD")


def _require_student(conn, student_id: int) -> None:
    if get_student(conn, student_id) is None:
        raise HTTPException(status_code=404, detail="Student not found")


def _require_block(conn, student_id: int, block_id: int, day: date) -> ScheduleTemplateBlock:
    """The template block, only if it is on that day's weekday template."""
    block = get_block(conn, student_id, block_id)
    if block is None or block.weekday.value != weekday_name(day):
        raise HTTPException(status_code=404, detail="Schedule block not found")
    return block


@router.get("/{student_id}/{day}", response_model=ComposedSchedule)
async def composed_schedule(student_id: int, day: str, conn=Depends(get_db)):
    """The day's template blocks with pending assignments placed into them."""
    _require_student(conn, student_id)
    return compose_schedule(conn, student_id, _parse_day(day), load_config())


@router.get("/{student_id}/{day}/status", response_model=List[BlockStatusRecord])
async def day_statuses(student_id: int, day: str, conn=Depends(get_db)):
    _require_student(conn, student_id)
    return get_day_statuses(conn, student_id, _parse_day(day))


@router.get("/{student_id}/{day}/block/{block_id}/status", response_model=BlockStatusRecord)
async def block_status(student_id: int, day: str, block_id: int, conn=Depends(get_db)):
    on_day = _parse_day(day)
    block = _require_block(conn, student_id, block_id, on_day)
    return get_block_status(conn, student_id, on_day, block)


@router.post("/{student_id}/{day}/block/{block_id}/advance", response_model=BlockStatusRecord)
async def advance_block(
    student_id: int,
    day: str,
    block_id: int,
    payload: Optional[BlockAdvance] = Body(default=None),
    conn=Depends(get_db),
):
    """Cycle the block to its next status."""
    on_day = _parse_day(day)
    block = _require_block(conn, student_id, block_id, on_day)
    expected = payload.status if payload else None
    return advance_block_status(conn, student_id, on_day, block, expected=expected)


@router.put("/{student_id}/{day}/block/{block_id}/status", response_model=BlockStatusRecord)
async def update_block_status(
    student_id: int,
    day: str,
    block_id: int,
    payload: BlockStatusUpdate,
    conn=Depends(get_db),
):
    """Set a status directly (stuck / overtime flags, resets)."""
    on_day = _parse_day(day)
    block = _require_block(conn, student_id, block_id, on_day)
    return set_block_status(conn, student_id, on_day, block, payload.status)
