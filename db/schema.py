# SQL schema for StudyFlow database

SCHEMA_VERSION = 3

SCHEMA_SQL = """
-- Students
CREATE TABLE IF NOT EXISTS students (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    canvas_account TEXT
);

-- Assignments (upstream imports and manual entries)
CREATE TABLE IF NOT EXISTS assignments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id INTEGER NOT NULL,
    title TEXT NOT NULL,
    subject TEXT,
    course_name TEXT,
    due_at TEXT,
    scheduled_date TEXT,
    completion_status TEXT NOT NULL DEFAULT 'pending' CHECK(completion_status IN ('pending', 'in_progress', 'completed', 'stuck', 'needs_more_time')),
    upstream_id TEXT,
    upstream_course_id TEXT,
    record_state TEXT NOT NULL DEFAULT 'active' CHECK(record_state IN ('active', 'deleted')),
    priority TEXT NOT NULL DEFAULT 'B' CHECK(priority IN ('A', 'B', 'C')),
    estimated_minutes INTEGER NOT NULL DEFAULT 30,
    notes TEXT,
    version INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    FOREIGN KEY (student_id) REFERENCES students (id) ON DELETE CASCADE
);

-- Fixed weekday blocks
CREATE TABLE IF NOT EXISTS schedule_template (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id INTEGER NOT NULL,
    weekday TEXT NOT NULL CHECK(weekday IN ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')),
    block_number INTEGER NOT NULL,
    start_time TEXT NOT NULL,
    end_time TEXT NOT NULL,
    block_type TEXT NOT NULL CHECK(block_type IN ('bible', 'assignment', 'travel', 'co-op', 'study-hall', 'prep/load', 'movement', 'lunch')),
    subject TEXT,
    UNIQUE (student_id, weekday, block_number),
    FOREIGN KEY (student_id) REFERENCES students (id) ON DELETE CASCADE
);

-- Per-day block progress
CREATE TABLE IF NOT EXISTS daily_schedule_status (
    student_id INTEGER NOT NULL,
    date TEXT NOT NULL,
    template_block_id INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'not-started' CHECK(status IN ('not-started', 'in-progress', 'complete', 'stuck', 'overtime')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (student_id, date, template_block_id),
    FOREIGN KEY (student_id) REFERENCES students (id) ON DELETE CASCADE,
    FOREIGN KEY (template_block_id) REFERENCES schedule_template (id) ON DELETE CASCADE
);
"""

# Indexes for performance
INDEXES_SQL = """
CREATE UNIQUE INDEX IF NOT EXISTS idx_assignments_upstream ON assignments (student_id, upstream_id) WHERE upstream_id IS NOT NULL;
CREATE INDEX IF NOT EXISTS idx_assignments_student ON assignments (student_id, record_state);
CREATE INDEX IF NOT EXISTS idx_assignments_status ON assignments (student_id, completion_status);
CREATE INDEX IF NOT EXISTS idx_assignments_scheduled ON assignments (scheduled_date);
CREATE INDEX IF NOT EXISTS idx_schedule_template_day ON schedule_template (student_id, weekday, start_time);
CREATE INDEX IF NOT EXISTS idx_daily_status_day ON daily_schedule_status (student_id, date);
"""
