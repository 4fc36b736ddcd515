"""
Central data model definitions used across the project.

This module defines the canonical structure of the objects returned by the
college app gateway so that:
- the client, the aggregation layer and the cache share the same field names
- data can be written to / read from JSON without ad-hoc dict handling
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class WeekInfo:
    """
    One teaching week of a semester.

    start_time is passed verbatim to the week course endpoint.
    """

    week: int
    start_time: str
    end_time: str = ""


@dataclass(frozen=True)
class Credentials:
    token: str
    student_id: str


@dataclass
class CourseInfo:
    """
    Represents one course occupying a lesson slot.
    """

    name: str
    classroom: Optional[str]
    class_name: str
    teachers: List[str]
    course_number: int
    weekday: int
    color: str
    continuous_course: int
    code: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CourseInfo":
        return cls(
            name=str(data.get("name", "")),
            classroom=data.get("classroom"),
            class_name=str(data.get("class_name", "")),
            teachers=[str(t) for t in data.get("teachers", [])],
            course_number=int(data.get("course_number", 0)),
            weekday=int(data.get("weekday", 0)),
            color=str(data.get("color", "")),
            continuous_course=int(data.get("continuous_course", 0)),
            code=str(data.get("code", "")),
        )


@dataclass
class CourseSlot:
    """
    One lesson slot of a day. course_info is None for a free slot.
    """

    course_number: int
    course_info: Optional[CourseInfo] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CourseSlot":
        info = data.get("course_info")
        return cls(
            course_number=int(data.get("course_number", 0)),
            course_info=CourseInfo.from_dict(info) if isinstance(info, dict) else None,
        )


@dataclass
class DayCourse:
    """
    All lesson slots of one weekday (1 = Monday ... 7 = Sunday).
    """

    weekday: int
    courses: List[CourseSlot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DayCourse":
        return cls(
            weekday=int(data.get("weekday", 0)),
            courses=[CourseSlot.from_dict(c) for c in data.get("courses", []) if isinstance(c, dict)],
        )


@dataclass
class SchoolYear:
    school_year: str
    semester: int
    is_current_semester: bool
    start_time: str
    end_time: str


@dataclass
class UserInfo:
    """
    Result of the ucode login. access_token is what every other endpoint needs.
    """

    access_token: str
    refresh_token: str
    student_id: str
    student_phone: str
    student_realname: str

    def credentials(self) -> Credentials:
        return Credentials(token=self.access_token, student_id=self.student_id)


def schedule_to_json(schedule: Dict[int, List[DayCourse]]) -> Dict[str, Any]:
    """
    Convert an aggregated schedule to a JSON-compatible dict (keys sorted by week).
    """
    return {str(week): [day.to_dict() for day in schedule[week]] for week in sorted(schedule)}


def schedule_from_json(data: Any) -> Dict[int, List[DayCourse]]:
    """
    Inverse of schedule_to_json. Entries with a non-numeric week key are skipped.
    """
    out: Dict[int, List[DayCourse]] = {}
    if not isinstance(data, dict):
        return out
    for key, days in data.items():
        try:
            week = int(key)
        except (TypeError, ValueError):
            continue
        if not isinstance(days, list):
            continue
        out[week] = [DayCourse.from_dict(d) for d in days if isinstance(d, dict)]
    return out
