from timetable_backend.core.models.class_model import SchoolClass
from timetable_backend.core.models.subject import Subject
from timetable_backend.core.models.teacher import Teacher, teacher_subjects
from timetable_backend.core.models.timetable_outline import TimetableOutline
from timetable_backend.core.models.timetable import WeeklyTimetable

__all__ = [
    "SchoolClass",
    "Subject",
    "Teacher",
    "TimetableOutline",
    "WeeklyTimetable",
    "teacher_subjects",
]
