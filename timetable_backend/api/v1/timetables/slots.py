"""
Time helpers and slot resolution for the weekly grid.

Times are "HH:MM" strings. Windows are half-open [start, end) in minutes since midnight.
When an end time is earlier than its start time, 12 hours are added to the end before
differencing, so "12:45"-"01:30" reads as a 45-minute afternoon period.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from timetable_backend.core.enums import OutlinePeriodType

HALF_DAY_MINUTES = 12 * 60


class Slot(BaseModel):
    period_number: int
    name: str
    start_time: str
    end_time: str
    type: OutlinePeriodType = OutlinePeriodType.PERIOD

    @property
    def is_break(self) -> bool:
        return self.type == OutlinePeriodType.BREAK


# Fallback grid when a class has no outline. Periods 7 and 8 are written in 12-hour time.
DEFAULT_SLOTS: List[Slot] = [
    Slot(period_number=1, name="Period 1", start_time="08:00", end_time="08:45"),
    Slot(period_number=2, name="Period 2", start_time="08:45", end_time="09:30"),
    Slot(period_number=3, name="Period 3", start_time="09:30", end_time="10:15"),
    Slot(period_number=4, name="Period 4", start_time="10:15", end_time="11:00"),
    Slot(period_number=5, name="Period 5", start_time="11:15", end_time="12:00"),
    Slot(period_number=6, name="Period 6", start_time="12:00", end_time="12:45"),
    Slot(period_number=7, name="Period 7", start_time="12:45", end_time="01:30"),
    Slot(period_number=8, name="Period 8", start_time="01:30", end_time="02:15"),
]


def parse_hhmm(value: str) -> int:
    """Parse "HH:MM" (24-hour, 00-23 / 00-59) into minutes since midnight. Raises ValueError."""
    if not isinstance(value, str):
        raise ValueError("time must be a HH:MM string")
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() and len(p) == 2 for p in parts):
        raise ValueError(f"invalid time '{value}', expected HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 23 or minutes > 59:
        raise ValueError(f"invalid time '{value}', expected HH:MM")
    return hours * 60 + minutes


def check_hhmm(v: Any) -> str:
    """field_validator helper: strip and validate a HH:MM string."""
    if not isinstance(v, str):
        raise ValueError("start_time/end_time must be a HH:MM string (e.g. 09:00)")
    v = v.strip()
    parse_hhmm(v)
    return v


def clean_room(v: Optional[str]) -> Optional[str]:
    """Rooms are compared exactly; surrounding whitespace is dropped and blank means no room."""
    if v is None:
        return None
    v = v.strip()
    return v or None


def time_window(start_time: str, end_time: str) -> Tuple[int, int]:
    start = parse_hhmm(start_time)
    end = parse_hhmm(end_time)
    if end < start:
        end += HALF_DAY_MINUTES
    return start, end


def period_duration(start_time: str, end_time: str) -> int:
    """Duration in minutes. end == start yields 0; see DESIGN.md on the wrap-around heuristic."""
    start, end = time_window(start_time, end_time)
    return end - start


def windows_overlap(a: Tuple[int, int], b: Tuple[int, int]) -> bool:
    return a[0] < b[1] and b[0] < a[1]


def times_overlap(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    return windows_overlap(time_window(start_a, end_a), time_window(start_b, end_b))


def _slots_from_periods(periods: Sequence[Mapping[str, Any]]) -> List[Slot]:
    return [
        Slot(
            period_number=index,
            name=p.get("name") or f"Period {index}",
            start_time=p["start_time"],
            end_time=p["end_time"],
            type=p.get("type") or OutlinePeriodType.PERIOD,
        )
        for index, p in enumerate(periods, start=1)
    ]


def resolve_slots(outline: Optional[Any], day: Optional[str] = None) -> List[Slot]:
    """
    Slot list for a class grid. `outline` is a TimetableOutline row (or anything with
    `periods` / `day_overrides`) or None for the default 8-period day. Period numbers are
    the 1-based position in the outline, breaks included.
    """
    if outline is None:
        return [s.model_copy() for s in DEFAULT_SLOTS]
    overrides: Dict[str, Any] = getattr(outline, "day_overrides", None) or {}
    if day is not None and overrides.get(day):
        return _slots_from_periods(overrides[day])
    return _slots_from_periods(getattr(outline, "periods", None) or [])


def find_slot(slots: Sequence[Slot], period_number: int) -> Optional[Slot]:
    for slot in slots:
        if slot.period_number == period_number:
            return slot
    return None
