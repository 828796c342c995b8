from dataclasses import dataclass, field
from typing import List, Optional
from timetabler.models.subject import Subject


@dataclass()
class ClassDef:
    """
    Represents a class (a group of students sharing one weekly timetable).

    Attributes:
        name: Unique class name (e.g., "10A")
        subjects: Ordered list of subjects the class takes
        students: Student identifiers enrolled in the class
    """
    name: str
    subjects: List[Subject] = field(default_factory=list)
    students: List[str] = field(default_factory=list)

    def find_subject(self, name: str) -> Optional[Subject]:
        for subject in self.subjects:
            if subject.name == name:
                return subject
        return None
