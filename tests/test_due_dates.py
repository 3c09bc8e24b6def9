from datetime import datetime
from zoneinfo import ZoneInfo

from utils.due_dates import infer_due_from_title

TZ = ZoneInfo("America/New_York")
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=TZ)


def test_numeric_date_in_title():
    assert infer_due_from_title("Vocab Quiz due 10/24", NOW, TZ) == datetime(2026, 10, 24, 23, 59, tzinfo=TZ)


def test_numeric_date_with_two_digit_year():
    assert infer_due_from_title("Project due on 3-4-27", NOW, TZ) == datetime(2027, 3, 4, 23, 59, tzinfo=TZ)


def test_month_name_in_title():
    assert infer_due_from_title("Reading Log - Due Sep 15", NOW, TZ) == datetime(2026, 9, 15, 23, 59, tzinfo=TZ)
    assert infer_due_from_title("Essay due December 2", NOW, TZ) == datetime(2026, 12, 2, 23, 59, tzinfo=TZ)


def test_old_yearless_date_rolls_to_next_year():
    assert infer_due_from_title("Unit test due 1/10", NOW, TZ) == datetime(2027, 1, 10, 23, 59, tzinfo=TZ)


def test_unparseable_titles_return_none():
    assert infer_due_from_title("Read chapter 4", NOW, TZ) is None
    assert infer_due_from_title("Due 2/30", NOW, TZ) is None
    assert infer_due_from_title("Due Smarch 3", NOW, TZ) is None
    assert infer_due_from_title("", NOW, TZ) is None
