import pytest

from timetabler.models.class_def import ClassDef
from timetabler.models.generation_config import GenerationConfig
from timetabler.models.roster import Roster
from timetabler.models.subject import Subject
from timetabler.models.teacher import Teacher


def make_teacher(teacher_id, hours=20):
    return Teacher(id=teacher_id, name=f"Teacher {teacher_id}", weekly_required_hours=hours)


@pytest.fixture
def config():
    return GenerationConfig(working_days=5, hours_per_day=6, break_slots=[3], seed=7)


@pytest.fixture
def roster():
    """Two classes sharing their math and science teachers"""
    teachers = {t.id: t for t in [
        make_teacher("T-1", 12),
        make_teacher("T-2", 10),
        make_teacher("T-3", 15),
        make_teacher("T-4", 8),
        make_teacher("T-5", 20),
    ]}
    classes = {
        "10A": ClassDef("10A", [
            Subject("Math", 3, ["T-1", "T-2"]),
            Subject("Science", 3, ["T-3"]),
            Subject("English", 2, ["T-4", "T-5"]),
            Subject("Art", 1, ["T-5"]),
        ], ["S-1", "S-2"]),
        "10B": ClassDef("10B", [
            Subject("Math", 3, ["T-1", "T-2"]),
            Subject("Science", 2, ["T-3"]),
            Subject("History", 2, ["T-5"]),
        ], ["S-3"]),
    }
    return Roster(teachers=teachers, classes=classes)
