import pytest
from datetime import timedelta

from taskplanner.scheduling.core.time_slot import TimeSlot, overlaps
from taskplanner.scheduling.core.errors import SchedulingValidationError
from conftest import at


def test_overlapping_slots():
    assert overlaps(TimeSlot(at(9), at(10)), TimeSlot(at(9, 30), at(11)))
    assert TimeSlot(at(9), at(12)).overlaps(TimeSlot(at(10), at(11)))


def test_touching_slots_do_not_overlap():
    first = TimeSlot(at(9), at(10))
    second = TimeSlot(at(10), at(11))
    assert not first.overlaps(second)
    assert not second.overlaps(first)


def test_duration_minutes():
    assert TimeSlot(at(9), at(10, 30)).duration_minutes() == 90
    assert TimeSlot(at(9), at(10, 30)).duration() == timedelta(minutes=90)


def test_trim_front_keeps_end():
    slot = TimeSlot(at(9), at(11)).trim_front(30)
    assert slot == TimeSlot(at(9, 30), at(11))


def test_take_front_carves_task_sized_piece():
    assert TimeSlot(at(9), at(12)).take_front(45) == TimeSlot(at(9), at(9, 45))


def test_take_front_longer_than_slot_is_rejected():
    with pytest.raises(SchedulingValidationError):
        TimeSlot(at(9), at(9, 30)).take_front(60)


def test_contains():
    outer = TimeSlot(at(9), at(12))
    assert outer.contains(TimeSlot(at(10), at(11)))
    assert not outer.contains(TimeSlot(at(11), at(13)))


@pytest.mark.parametrize("start,end", [(at(10), at(10)), (at(11), at(10))])
def test_empty_or_inverted_slot_is_rejected(start, end):
    with pytest.raises(SchedulingValidationError):
        TimeSlot(start, end)


def test_slots_sort_by_start():
    slots = [TimeSlot(at(13), at(14)), TimeSlot(at(9), at(10))]
    assert sorted(slots)[0].start == at(9)
