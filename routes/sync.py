from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from config import load_config
from db.database import get_db
from utils.errors import UpstreamUnavailable
from utils.students import get_student
from utils.sync import run_reconciliation, run_reconciliation_for_all

router = APIRouter()

# plain def handlers: the Canvas fetch is blocking I/O

@router.post("/")
def sync_all_students(conn = Depends(get_db)):
    """Sync every student; failures are reported per student."""
    config = load_config()
    outcomes = run_reconciliation_for_all(conn, config)
    return {
        name: asdict(outcome) if not isinstance(outcome, str) else {"error": outcome}
        for name, outcome in outcomes.items()
    }

@router.post("/{student_id}")
def sync_student(student_id: int, conn = Depends(get_db)):
    """Reconcile one student's assignments with Canvas."""
    student = get_student(conn, student_id)
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found")
    config = load_config()
    try:
        result = run_reconciliation(conn, student, config)
    except UpstreamUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return asdict(result)
