from datetime import datetime, timedelta, timezone

from models.assignment import Assignment
from models.schedule import BlockType, ScheduleTemplateBlock
from utils.composer import NearDuplicateRule, compose, sort_pending

NOW = datetime(2026, 10, 19, 14, 0, tzinfo=timezone.utc)


def _assignment(assignment_id, title, subject=None, due_in_days=None):
    due_at = NOW + timedelta(days=due_in_days) if due_in_days is not None else None
    return Assignment(id=assignment_id, student_id=1, title=title, subject=subject, due_at=due_at)


def _block(block_id, start, block_type=BlockType.ASSIGNMENT, number=None):
    hour = int(start.split(":")[0])
    return ScheduleTemplateBlock(
        id=block_id,
        student_id=1,
        weekday="Monday",
        block_number=number if number is not None else block_id,
        start_time=start,
        end_time=f"{hour:02d}:45",
        block_type=block_type,
    )


def _placed(schedule):
    return [block.assignment.id if block.assignment else None for block in schedule.blocks]


def test_sort_pending_overdue_then_due_then_undated_stable():
    undated_a = _assignment(1, "Undated A")
    later = _assignment(2, "Later", due_in_days=5)
    overdue = _assignment(3, "Overdue", due_in_days=-2)
    undated_b = _assignment(4, "Undated B")
    sooner = _assignment(5, "Sooner", due_in_days=1)

    ordered = sort_pending([undated_a, later, overdue, undated_b, sooner], NOW)

    assert [a.id for a in ordered] == [3, 5, 2, 1, 4]


def test_diversity_prefers_unused_subject():
    math_overdue = _assignment(1, "Fractions practice", "Math", -1)
    math_later = _assignment(2, "Decimals practice", "Math", 3)
    science = _assignment(3, "Plant cells", "Science", 1)
    blocks = [_block(10, "09:00"), _block(11, "10:00")]

    schedule = compose(blocks, [math_overdue, math_later, science], now=NOW)

    assert _placed(schedule) == [1, 3]
    assert [a.id for a in schedule.unscheduled] == [2]


def test_dedup_skips_near_duplicate_titles_before_fallback():
    first = _assignment(1, "Chapter Review Worksheet", "Math", 1)
    twin = _assignment(2, "Chapter Review Quiz", "Math", 2)
    different = _assignment(3, "Essay Draft", "Math", 3)
    blocks = [_block(10, "09:00"), _block(11, "10:00"), _block(12, "11:00")]

    schedule = compose(blocks, [first, twin, different], now=NOW)

    assert _placed(schedule) == [1, 3, 2]
    assert schedule.unscheduled == []


def test_near_duplicate_threshold_is_configurable():
    first = _assignment(1, "Chapter Review Worksheet", "Math", 1)
    twin = _assignment(2, "Chapter Review Quiz", "Math", 2)
    different = _assignment(3, "Essay Draft", "Math", 3)
    blocks = [_block(10, "09:00"), _block(11, "10:00")]
    strict = NearDuplicateRule(min_shared_words=3, min_word_length=3)

    schedule = compose(blocks, [first, twin, different], now=NOW, rule=strict)

    assert _placed(schedule) == [1, 2]


def test_unlabeled_items_are_not_diversity_candidates():
    unlabeled = _assignment(1, "Misc task", None, 1)
    history = _assignment(2, "Timeline", "History", 2)

    schedule = compose([_block(10, "09:00")], [unlabeled, history], now=NOW)

    assert _placed(schedule) == [2]
    assert [a.id for a in schedule.unscheduled] == [1]


def test_non_assignment_blocks_pass_through_in_start_order():
    blocks = [
        _block(12, "11:00", BlockType.STUDY_HALL),
        _block(10, "09:00", BlockType.BIBLE),
        _block(11, "10:00", BlockType.LUNCH),
    ]
    pending = [_assignment(1, "Essay", "English", 1)]

    schedule = compose(blocks, pending, now=NOW)

    assert [block.block_id for block in schedule.blocks] == [10, 11, 12]
    assert _placed(schedule) == [None, None, 1]


def test_blocks_without_candidates_stay_open():
    blocks = [_block(10, "09:00"), _block(11, "10:00")]

    schedule = compose(blocks, [_assignment(1, "Essay", "English", 1)], now=NOW)

    assert _placed(schedule) == [1, None]


def test_empty_template_is_an_empty_schedule():
    pending = [_assignment(1, "Essay", "English", 1)]

    schedule = compose([], pending, now=NOW)

    assert schedule.empty
    assert schedule.model_dump()["empty"] is True
    assert schedule.blocks == []
    assert [a.id for a in schedule.unscheduled] == [1]


def test_compose_is_deterministic_and_leaves_inputs_alone():
    blocks = [_block(11, "10:00"), _block(10, "09:00")]
    pending = [
        _assignment(1, "Fractions", "Math", 2),
        _assignment(2, "Poetry", "English", -1),
        _assignment(3, "Maps", None),
    ]
    blocks_before = list(blocks)
    pending_before = list(pending)

    first = compose(blocks, pending, now=NOW)
    second = compose(blocks, pending, now=NOW)

    assert first.model_dump() == second.model_dump()
    assert blocks == blocks_before
    assert pending == pending_before
    assert _placed(first) == [2, 1]
