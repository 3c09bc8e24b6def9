import re
from datetime import datetime, timedelta, tzinfo
from typing import Optional

MONTH_NAMES = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

NUMERIC_DUE = re.compile(r"\bdue(?:\s+on)?[^0-9a-z]{0,5}(\d{1,2})[/\-](\d{1,2})(?:[/\-](\d{2,4}))?", re.IGNORECASE)
NAMED_DUE = re.compile(r"\bdue(?:\s+on)?[^0-9a-z]{0,5}([a-z]{3,9})\.?\s+(\d{1,2})\b", re.IGNORECASE)

# A yearless date this far in the past belongs to next school year.
ROLLOVER_DAYS = 120


def _month_from_name(name: str) -> Optional[int]:
    name = name.lower()
    for index, month in enumerate(MONTH_NAMES):
        if month.startswith(name):
            return index + 1
    return None


def infer_due_from_title(title: str, now: datetime, tz: tzinfo) -> Optional[datetime]:
    """Read 'Due 9/15', 'Due 9-15-25' or 'Due Sep 15' from a title.

    Returns 23:59 on that day in ``tz``, or None when nothing parses.
    """
    if not title:
        return None
    text = title.replace("\u00a0", " ")
    year: Optional[int] = None
    match = NUMERIC_DUE.search(text)
    if match:
        month, day = int(match.group(1)), int(match.group(2))
        if match.group(3):
            year = int(match.group(3))
            if year < 100:
                year += 2000
    else:
        match = NAMED_DUE.search(text)
        if not match:
            return None
        month = _month_from_name(match.group(1))
        if month is None:
            return None
        day = int(match.group(2))

    local_now = now.astimezone(tz)
    try:
        due = datetime(year or local_now.year, month, day, 23, 59, tzinfo=tz)
    except ValueError:
        return None
    if year is None and due < local_now - timedelta(days=ROLLOVER_DAYS):
        try:
            due = due.replace(year=due.year + 1)
        except ValueError:
            return None
    return due
