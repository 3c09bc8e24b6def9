from typing import List, Optional

from models.student import Student, StudentCreate


def list_students(conn) -> List[Student]:
    cursor = conn.cursor()
    cursor.execute("SELECT id, name, canvas_account FROM students ORDER BY name")
    return [Student.model_validate(dict(row)) for row in cursor.fetchall()]


def get_student(conn, student_id: int) -> Optional[Student]:
    cursor = conn.cursor()
    cursor.execute("SELECT id, name, canvas_account FROM students WHERE id = ?", (student_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return Student.model_validate(dict(row))


def create_student(conn, student: StudentCreate) -> Student:
    """Insert a student. Raises sqlite3.IntegrityError on a duplicate name."""
    name = student.name.strip()
    if not name:
        raise ValueError("Name is required")
    cursor = conn.cursor()
    cursor.execute(
        "INSERT INTO students (name, canvas_account) VALUES (?, ?)",
        (name, student.canvas_account),
    )
    conn.commit()
    return get_student(conn, cursor.lastrowid)


def upstream_account_key(student: Student) -> str:
    """Config key of the Canvas account the student syncs from."""
    return student.canvas_account or student.name.strip().lower()
