import sqlite3
from contextlib import contextmanager
from pathlib import Path

from .schema import SCHEMA_SQL, INDEXES_SQL, SCHEMA_VERSION

CONFIG_DIR = Path.home() / ".studyflow"
DB_PATH = CONFIG_DIR / "studyflow.db"

def init_db():
    """Initialize the database by creating tables and indexes if they don't exist."""
    CONFIG_DIR.mkdir(exist_ok=True)
    with get_conn() as conn:
        conn.executescript(SCHEMA_SQL)
        ensure_assignment_version(conn)
        ensure_student_canvas_account(conn)
        conn.executescript(INDEXES_SQL)
        ensure_schema_version(conn)
        conn.commit()

def ensure_assignment_version(conn: sqlite3.Connection) -> None:
    """Ensure assignments table has the version counter used for conflict checks."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(assignments)")
    columns = {row[1] for row in cursor.fetchall()}
    if "version" not in columns:
        cursor.execute(
            "ALTER TABLE assignments ADD COLUMN version INTEGER NOT NULL DEFAULT 1"
        )

def ensure_student_canvas_account(conn: sqlite3.Connection) -> None:
    """Ensure students table has canvas_account column for existing installs."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA table_info(students)")
    columns = {row[1] for row in cursor.fetchall()}
    if "canvas_account" not in columns:
        cursor.execute("ALTER TABLE students ADD COLUMN canvas_account TEXT")

def get_schema_version(conn: sqlite3.Connection) -> int:
    """Read the SQLite schema version from PRAGMA user_version."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA user_version")
    row = cursor.fetchone()
    return int(row[0]) if row else 0

def set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    """Set the SQLite schema version via PRAGMA user_version."""
    conn.execute(f"PRAGMA user_version = {int(version)}")

def ensure_schema_version(conn: sqlite3.Connection) -> None:
    """Ensure the current schema version is written to the database."""
    current = get_schema_version(conn)
    if current != SCHEMA_VERSION:
        set_schema_version(conn, SCHEMA_VERSION)

@contextmanager
def get_conn():
    """Context manager for SQLite connection, using row_factory for dict-like rows."""
    conn = sqlite3.connect(DB_PATH, check_same_thread=False, timeout=10)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
    finally:
        conn.close()

def get_db():
    """FastAPI dependency that yields a DB connection and closes it afterwards."""
    with get_conn() as conn:
        yield conn
