from dataclasses import dataclass, field
from typing import Dict
from timetabler.models.timetable import Timetable


@dataclass()
class GenerationResult:
    """
    Output of one generation cycle.

    Attributes:
        timetables: Map of class name to its generated Timetable
        hours_left: Map of teacher id to remaining budget after the cycle
        dropped: Map of class name to the number of subject periods that
                 could not be placed and were left out
    """
    timetables: Dict[str, Timetable] = field(default_factory=dict)
    hours_left: Dict[str, int] = field(default_factory=dict)
    dropped: Dict[str, int] = field(default_factory=dict)

    @property
    def total_dropped(self) -> int:
        return sum(self.dropped.values())
