from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from db.database import get_db
from models.assignment import Assignment, AssignmentCreate, AssignmentUpdate
from utils.assignment_store import (
    create_assignment,
    delete_assignment,
    get_assignment,
    list_assignments,
    update_assignment,
)
from utils.students import get_student

router = APIRouter()


def _require_student(conn, student_id: int) -> None:
    if get_student(conn, student_id) is None:
        raise HTTPException(status_code=404, detail="Student not found")


@router.get("/student/{student_id}", response_model=List[Assignment])
async def get_student_assignments(
    student_id: int,
    include_inactive: bool = Query(default=False),
    conn=Depends(get_db),
):
    _require_student(conn, student_id)
    return list_assignments(conn, student_id, include_inactive=include_inactive)


@router.post("/", response_model=Assignment, status_code=status.HTTP_201_CREATED)
async def add_assignment(payload: AssignmentCreate, conn=Depends(get_db)):
    _require_student(conn, payload.student_id)
    # manual entries never carry upstream linkage
    record = payload.model_copy(update={"upstream_id": None, "upstream_course_id": None})
    return create_assignment(conn, record)


@router.get("/{assignment_id}", response_model=Assignment)
async def get_one_assignment(assignment_id: int, conn=Depends(get_db)):
    assignment = get_assignment(conn, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


@router.patch("/{assignment_id}", response_model=Assignment)
async def edit_assignment(assignment_id: int, update: AssignmentUpdate, conn=Depends(get_db)):
    try:
        assignment = update_assignment(conn, assignment_id, update)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


@router.delete("/{assignment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_assignment(assignment_id: int, conn=Depends(get_db)):
    """Permanently delete an assignment (user action; sync only soft-deletes)."""
    if not delete_assignment(conn, assignment_id):
        raise HTTPException(status_code=404, detail="Assignment not found")
