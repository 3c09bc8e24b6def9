from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from db.database import get_db
from models.schedule import ScheduleTemplateBlock, TemplateBlockCreate, Weekday
from utils.schedule_template import get_blocks_for_weekday, get_template, upsert_template_blocks
from utils.students import get_student

router = APIRouter()


class TemplateUpload(BaseModel):
    blocks: List[TemplateBlockCreate]


@router.get("/{student_id}", response_model=List[ScheduleTemplateBlock])
async def student_template(
    student_id: int,
    weekday: Optional[Weekday] = Query(default=None),
    conn=Depends(get_db),
):
    """Fixed blocks for a student, optionally for one weekday."""
    if get_student(conn, student_id) is None:
        raise HTTPException(status_code=404, detail="Student not found")
    if weekday is not None:
        return get_blocks_for_weekday(conn, student_id, weekday.value)
    return get_template(conn, student_id)


@router.post("/{student_id}")
async def upload_template(student_id: int, upload: TemplateUpload, conn=Depends(get_db)):
    """Bulk upload; rows with an existing (weekday, block number) are replaced."""
    if get_student(conn, student_id) is None:
        raise HTTPException(status_code=404, detail="Student not found")
    count = upsert_template_blocks(conn, student_id, upload.blocks)
    return {"uploaded": count}
