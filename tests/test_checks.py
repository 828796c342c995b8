from timetabler.models.teacher import Teacher
from timetabler.models.timetable import Timetable
from timetabler.models.timetable_slot import TimetableSlot
from timetabler.utils.checks import (
    check_hard_constraints,
    count_double_bookings,
    daily_repeat_violations,
    fill_statistics,
    hour_budget_violations,
)


def _math(teacher_id="T-1", class_name="10A"):
    return TimetableSlot.assigned("Math", class_name, teacher_id)


def test_double_booking_is_counted():
    a = Timetable(1, 2)
    a.set(0, 0, _math())
    b = Timetable(1, 2)
    b.set(0, 0, _math(class_name="10B"))
    b.set(0, 1, _math(class_name="10B"))

    assert count_double_bookings({"10A": a, "10B": b}) == 1


def test_hour_budget_overflow():
    a = Timetable(1, 3)
    for period in range(3):
        a.set(0, period, _math())

    teachers = {"T-1": Teacher("T-1", "Ada", weekly_required_hours=2)}
    assert hour_budget_violations({"10A": a}, teachers) == 1


def test_daily_repeats_and_runs():
    a = Timetable(1, 4)
    for period in range(3):
        a.set(0, period, _math())
    a.set(0, 3, TimetableSlot.free("10A"))

    # three in a day and three in a row
    assert daily_repeat_violations({"10A": a}) == 2


def test_breaks_split_runs():
    a = Timetable(1, 5)
    a.set(0, 0, TimetableSlot.assigned("Math", "10A", "T-1"))
    a.set(0, 1, TimetableSlot.assigned("Art", "10A", "T-2"))
    a.set(0, 2, TimetableSlot.break_slot())
    a.set(0, 3, TimetableSlot.assigned("Art", "10A", "T-2"))

    teachers = {"T-1": Teacher("T-1", "Ada", 5), "T-2": Teacher("T-2", "Bob", 5)}
    assert check_hard_constraints({"10A": a}, teachers) == 0


def test_fill_statistics():
    a = Timetable(1, 3)
    a.set(0, 0, _math())
    a.set(0, 1, TimetableSlot.break_slot())

    assert fill_statistics({"10A": a})["10A"] == {
        "confirmed": 1, "sub_request": 0, "free": 0, "break": 1, "empty": 1,
    }
