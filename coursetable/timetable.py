"""
Static school timetable.

The college has a fixed daily rhythm, so it lives here as a constant instead
of being fetched.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Schedule:
    # lessons per day
    total_lessons: int
    # minutes
    lesson_duration: int

    def lesson_numbers(self) -> range:
        return range(1, self.total_lessons + 1)


SCHOOL_SCHEDULE = Schedule(total_lessons=10, lesson_duration=45)


def get_school_schedule() -> Schedule:
    return SCHOOL_SCHEDULE
