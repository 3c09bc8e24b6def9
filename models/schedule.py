import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from .assignment import Assignment

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")


class BlockType(str, Enum):
    BIBLE = "bible"
    ASSIGNMENT = "assignment"
    TRAVEL = "travel"
    CO_OP = "co-op"
    STUDY_HALL = "study-hall"
    PREP_LOAD = "prep/load"
    MOVEMENT = "movement"
    LUNCH = "lunch"


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"


def normalize_time(value: str) -> str:
    """Normalize '9:00', '09:00' and '09:00:00' to 'HH:MM'."""
    match = TIME_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


class TemplateBlockCreate(BaseModel):
    weekday: Weekday
    block_number: int
    start_time: str
    end_time: str
    block_type: BlockType
    subject: Optional[str] = None

    @field_validator("block_type", mode="before")
    @classmethod
    def lower_block_type(cls, v):
        # CSV uploads use "Assignment", "Prep/Load", "Study Hall"
        if isinstance(v, str):
            return v.strip().lower().replace(" ", "-")
        return v

    @field_validator("weekday", mode="before")
    @classmethod
    def title_weekday(cls, v):
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def hh_mm(cls, v):
        return normalize_time(v)


class ScheduleTemplateBlock(TemplateBlockCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    student_id: int


class ComposedBlock(BaseModel):
    """One template block in a composed day, with the assignment placed in it (if any)."""

    block_id: int
    block_number: int
    start_time: str
    end_time: str
    block_type: BlockType
    subject: Optional[str] = None
    assignment: Optional[Assignment] = None


class ComposedSchedule(BaseModel):
    blocks: List[ComposedBlock] = []
    unscheduled: List[Assignment] = []

    @computed_field
    @property
    def empty(self) -> bool:
        return not self.blocks
