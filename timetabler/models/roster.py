from dataclasses import dataclass, field
from typing import Dict
from timetabler.models.class_def import ClassDef
from timetabler.models.teacher import Teacher


@dataclass()
class Roster:
    """
    Container for everything a generation cycle reads.

    Attributes:
        teachers: Map of teacher id to Teacher
        classes: Map of class name to ClassDef. Insertion order is the
                 allocation order, so earlier classes get first pick of
                 shared teachers.
    """
    teachers: Dict[str, Teacher] = field(default_factory=dict)
    classes: Dict[str, ClassDef] = field(default_factory=dict)
