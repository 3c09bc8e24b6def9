import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BlockStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"
    STUCK = "stuck"
    OVERTIME = "overtime"


class BlockStatusRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    student_id: int
    date: datetime.date
    template_block_id: int
    status: BlockStatus = BlockStatus.NOT_STARTED
    applied: bool = True


class BlockStatusUpdate(BaseModel):
    status: BlockStatus


class BlockAdvance(BaseModel):
    """Optional body for the advance action: the target the caller expects."""

    status: Optional[BlockStatus] = None
