import json
import logging
from typing import Any, Iterator, List, Optional, Tuple
from timetabler.exceptions import StoreUnavailableError
from timetabler.models.timetable_slot import TimetableSlot

logger = logging.getLogger(__name__)


class Timetable:
    """
    Weekly grid of one class, indexed [day][period].

    A cell holds a TimetableSlot or None. None means not yet assigned and is
    treated like a Free period by every reader.
    """

    def __init__(self, working_days: int, hours_per_day: int,
                 cells: Optional[List[List[Optional[TimetableSlot]]]] = None):
        self.working_days = working_days
        self.hours_per_day = hours_per_day
        if cells is None:
            cells = [[None for _ in range(hours_per_day)] for _ in range(working_days)]
        self._cells = cells

    def get(self, day: int, period: int) -> Optional[TimetableSlot]:
        return self._cells[day][period]

    def set(self, day: int, period: int, slot: Optional[TimetableSlot]):
        self._cells[day][period] = slot

    def contains(self, day: int, period: int) -> bool:
        return 0 <= day < self.working_days and 0 <= period < self.hours_per_day

    def rows(self) -> List[List[Optional[TimetableSlot]]]:
        """Returns a copy of the grid, one list of cells per day"""
        return [list(row) for row in self._cells]

    def cells(self) -> Iterator[Tuple[int, int, Optional[TimetableSlot]]]:
        """Iterates (day, period, slot) in day-major, period-minor order"""
        for day, row in enumerate(self._cells):
            for period, slot in enumerate(row):
                yield day, period, slot

    def copy(self) -> "Timetable":
        return Timetable(self.working_days, self.hours_per_day, self.rows())

    def to_list(self) -> List[List[Optional[dict]]]:
        return [[slot.to_dict() if slot is not None else None for slot in row]
                for row in self._cells]

    def to_json(self) -> str:
        return json.dumps(self.to_list())

    @classmethod
    def from_raw(cls, raw: Any) -> "Timetable":
        """
        Builds a timetable from whatever the storage layer handed back.

        Accepts an already parsed nested list or the JSON-encoded string form.
        Rows shorter than the longest one are padded with None.

        Raises:
            StoreUnavailableError: if the data is missing or not a grid
        """
        if isinstance(raw, Timetable):
            return raw.copy()
        if raw is None:
            raise StoreUnavailableError("Timetable data is missing")
        if isinstance(raw, (str, bytes)):
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                raise StoreUnavailableError(f"Timetable data is not valid JSON: {e}")
        if not isinstance(raw, list) or not all(isinstance(row, list) for row in raw):
            raise StoreUnavailableError("Timetable data is not a [day][period] grid")

        hours_per_day = max((len(row) for row in raw), default=0)
        cells = []
        for row in raw:
            parsed_row = []
            for cell in row:
                if cell is None:
                    parsed_row.append(None)
                elif isinstance(cell, TimetableSlot):
                    parsed_row.append(cell)
                elif isinstance(cell, dict):
                    try:
                        parsed_row.append(TimetableSlot.from_dict(cell))
                    except ValueError as e:
                        raise StoreUnavailableError(f"Invalid timetable slot {cell!r}: {e}")
                else:
                    logger.warning(f"Ignoring unexpected timetable cell: {cell!r}")
                    parsed_row.append(None)
            parsed_row.extend([None] * (hours_per_day - len(parsed_row)))
            cells.append(parsed_row)

        return cls(len(cells), hours_per_day, cells)

    def __eq__(self, other):
        if not isinstance(other, Timetable):
            return NotImplemented
        return self.to_list() == other.to_list()

    def __repr__(self):
        return f"Timetable({self.working_days}x{self.hours_per_day})"
