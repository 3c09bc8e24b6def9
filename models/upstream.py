from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class UpstreamRecord(BaseModel):
    """One assignment as reported by the upstream source for a single student."""

    model_config = ConfigDict(frozen=True)

    upstream_id: str
    title: str
    due_at: Optional[datetime] = None
    graded_signal: Optional[bool] = None
    course_id: Optional[str] = None
    course_name: Optional[str] = None

    @field_validator("upstream_id", "course_id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        # Canvas ids are integers; local rows store them as text
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, str)):
            raise ValueError("id must be an integer or string")
        v = str(v).strip()
        if not v:
            raise ValueError("id must not be empty")
        return v

    @field_validator("due_at")
    @classmethod
    def due_at_is_aware(cls, v):
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def is_graded(self) -> bool:
        return bool(self.graded_signal)
