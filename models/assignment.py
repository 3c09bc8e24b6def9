from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class CompletionStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    STUCK = "stuck"
    NEEDS_MORE_TIME = "needs_more_time"


class RecordState(str, Enum):
    """Soft-delete state. Deleted rows stay in the table until a user purges them."""

    ACTIVE = "active"
    DELETED = "deleted"


class Priority(str, Enum):
    A = "A"  # critical
    B = "B"
    C = "C"  # flexible


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AssignmentBase(BaseModel):
    title: str
    subject: Optional[str] = None
    course_name: Optional[str] = None
    due_at: Optional[datetime] = None
    scheduled_date: Optional[date] = None
    priority: Priority = Priority.B
    estimated_minutes: int = 30
    notes: Optional[str] = None

    @field_validator("due_at")
    @classmethod
    def due_at_is_aware(cls, v):
        return _aware(v)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Title is required")
        return v.strip()


class AssignmentCreate(AssignmentBase):
    """Payload for a new assignment. Manual entries leave the upstream fields empty."""

    student_id: int
    completion_status: CompletionStatus = CompletionStatus.PENDING
    upstream_id: Optional[str] = None
    upstream_course_id: Optional[str] = None


class AssignmentUpdate(BaseModel):
    """Explicit user edit; only fields that are set are written."""

    title: Optional[str] = None
    subject: Optional[str] = None
    course_name: Optional[str] = None
    due_at: Optional[datetime] = None
    scheduled_date: Optional[date] = None
    completion_status: Optional[CompletionStatus] = None
    priority: Optional[Priority] = None
    estimated_minutes: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("due_at")
    @classmethod
    def due_at_is_aware(cls, v):
        return _aware(v)


class Assignment(AssignmentBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int
    completion_status: CompletionStatus = CompletionStatus.PENDING
    upstream_id: Optional[str] = None
    upstream_course_id: Optional[str] = None
    record_state: RecordState = RecordState.ACTIVE
    version: int = 1

    @property
    def is_upstream_linked(self) -> bool:
        return self.upstream_id is not None

    @property
    def is_active(self) -> bool:
        return self.record_state == RecordState.ACTIVE
