import sqlite3
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from db.database import get_db
from models.student import Student, StudentCreate
from utils.students import create_student, list_students

router = APIRouter()

@router.get("/", response_model=List[Student])
async def get_students(conn = Depends(get_db)):
    """List all students."""
    return list_students(conn)

@router.post("/", response_model=Student, status_code=status.HTTP_201_CREATED)
async def add_student(student: StudentCreate, conn = Depends(get_db)):
    """Create a new student."""
    try:
        return create_student(conn, student)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=400, detail="Student with this name already exists")
