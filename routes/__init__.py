# Routes package __init__.py - re-exports routers for main.py convenience
from .students import router as students_router
from .assignments import router as assignments_router
from .sync import router as sync_router
from .schedule import router as schedule_router
from .schedule_templates import router as schedule_templates_router

__all__ = [
    'students_router',
    'assignments_router',
    'sync_router',
    'schedule_router',
    'schedule_templates_router',
]
