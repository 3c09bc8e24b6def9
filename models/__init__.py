from .student import Student, StudentCreate
from .assignment import Assignment, AssignmentCreate, AssignmentUpdate, CompletionStatus, RecordState, Priority
from .schedule import BlockType, Weekday, ScheduleTemplateBlock, TemplateBlockCreate, ComposedBlock, ComposedSchedule
from .block_status import BlockAdvance, BlockStatus, BlockStatusRecord, BlockStatusUpdate
from .upstream import UpstreamRecord

__all__ = [
    'Student', 'StudentCreate',
    'Assignment', 'AssignmentCreate', 'AssignmentUpdate', 'CompletionStatus', 'RecordState', 'Priority',
    'BlockType', 'Weekday', 'ScheduleTemplateBlock', 'TemplateBlockCreate', 'ComposedBlock', 'ComposedSchedule',
    'BlockAdvance', 'BlockStatus', 'BlockStatusRecord', 'BlockStatusUpdate',
    'UpstreamRecord',
]
