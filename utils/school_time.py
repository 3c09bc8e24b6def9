from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Union
from zoneinfo import ZoneInfo

from config import load_config

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def school_zone(config: Optional[Dict[str, Any]] = None) -> ZoneInfo:
    if config is None:
        config = load_config()
    return ZoneInfo(config.get("schedule", {}).get("timezone", "America/New_York"))


def school_now(config: Optional[Dict[str, Any]] = None) -> datetime:
    """Current time in the school timezone (aware)."""
    return datetime.now(timezone.utc).astimezone(school_zone(config))


def parse_date(value: Union[str, date]) -> date:
    """Parse a YYYY-MM-DD path value. Raises ValueError on bad input."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.split("T")[0])

def weekday_name(value: Union[str, date]) -> str:
    """Weekday of a calendar date, e.g. 'Thursday'. Same answer on any server timezone."""
    return WEEKDAY_NAMES[parse_date(value).weekday()]
