from datetime import datetime, timedelta
from typing import List, Optional
from timetabler.models.timetable import Timetable

DEFAULT_PLACEHOLDER = "N/A"


def period_label(period: int, day_start: Optional[str] = None, period_minutes: int = 60) -> str:
    """
    Column label for a 0-based period.

    Without a day start the label is "Period N"; with one (HH:MM) it is the
    clock range of the period, e.g. "08:00-09:00".
    """
    if not day_start:
        return f"Period {period + 1}"
    start = datetime.strptime(day_start, "%H:%M") + timedelta(minutes=period * period_minutes)
    end = start + timedelta(minutes=period_minutes)
    return f"{start:%H:%M}-{end:%H:%M}"


def header_row(hours_per_day: int, day_start: Optional[str] = None,
               period_minutes: int = 60) -> List[str]:
    return ["Day/Period"] + [period_label(p, day_start, period_minutes) for p in range(hours_per_day)]


def body_rows(timetable: Timetable, placeholder: str = DEFAULT_PLACEHOLDER) -> List[List[str]]:
    """One row per day: the day label followed by each cell's subject name"""
    rows = []
    for day, row in enumerate(timetable.rows()):
        cells = [slot.subject_name if slot is not None else placeholder for slot in row]
        rows.append([f"Day {day + 1}"] + cells)
    return rows


def timetable_rows(timetable: Timetable, day_start: Optional[str] = None, period_minutes: int = 60,
                   placeholder: str = DEFAULT_PLACEHOLDER) -> List[List[str]]:
    """
    Header plus body rows, the shape every export target (spreadsheet, PDF,
    text) is rendered from.
    """
    return [header_row(timetable.hours_per_day, day_start, period_minutes)] + \
        body_rows(timetable, placeholder)


def to_tab_delimited(timetable: Timetable, day_start: Optional[str] = None, period_minutes: int = 60,
                     placeholder: str = DEFAULT_PLACEHOLDER) -> str:
    rows = timetable_rows(timetable, day_start, period_minutes, placeholder)
    return "\n".join("\t".join(row) for row in rows)
