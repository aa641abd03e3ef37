from enum import Enum


class Weekday(str, Enum):
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"


WEEKDAYS = [d.value for d in Weekday]


class OutlinePeriodType(str, Enum):
    PERIOD = "period"
    BREAK = "break"


class PeriodType(str, Enum):
    THEORY = "theory"
    PRACTICAL = "practical"
    LAB = "lab"
    SPORTS = "sports"
    LIBRARY = "library"


class ConflictKind(str, Enum):
    ROOM = "room_conflict"
    TEACHER = "teacher_conflict"

    @property
    def blocking(self) -> bool:
        # Teachers may take concurrent sections; only room contention blocks a write.
        return self is ConflictKind.ROOM


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    EXPERIENCED = "Experienced"
    SENIOR = "Senior"
