from dataclasses import dataclass
from typing import Optional


@dataclass()
class Teacher:
    """
    Represents a teacher and their weekly workload.

    Attributes:
        id: Unique identifier (e.g., "T-1")
        name: Teacher's full name
        weekly_required_hours: Target weekly load, also the initial budget
        hours_left: Remaining budget after the last generation cycle
        expertise: Free-text expertise, informational only
    """
    id: str
    name: str
    weekly_required_hours: int
    hours_left: Optional[int] = None
    expertise: str = ""

    def __post_init__(self):
        if self.hours_left is None:
            self.hours_left = self.weekly_required_hours
