"""
Semester-wide course aggregation.

get_all_courses() fetches the course table of every week of a semester
concurrently and merges the results into one mapping:

    {week_number: [DayCourse, ...], ...}

A week whose fetch fails is logged and left out of the mapping; the call
itself only fails when it is given malformed arguments.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from coursetable.client import get_week_course
from coursetable.errors import InvalidArgument, PeriodFetchFailure
from coursetable.log import get_logger
from coursetable.model import Credentials, DayCourse, WeekInfo

FetchFn = Callable[[str, str, str], Any]

_logger = get_logger("courses")


@dataclass
class AggregationReport:
    """
    Outcome of one aggregation.

    courses holds only weeks that were fetched successfully.
    failures holds the reason for every week that was not.
    """

    courses: Dict[int, Any] = field(default_factory=dict)
    failures: Dict[int, PeriodFetchFailure] = field(default_factory=dict)


def _validate(credentials: Any, periods: Any) -> None:
    if periods is None or isinstance(periods, (str, bytes)) or not isinstance(periods, Sequence):
        raise InvalidArgument("Semester info must be a sequence of weeks.")

    for index, item in enumerate(periods):
        week = getattr(item, "week", None)
        if isinstance(week, bool) or not isinstance(week, int) or week < 1:
            raise InvalidArgument(f"Semester entry {index} has no positive integer 'week'.")
        if getattr(item, "start_time", None) is None:
            raise InvalidArgument(f"Semester entry {index} has no 'start_time'.")

    token = getattr(credentials, "token", None)
    student_id = getattr(credentials, "student_id", None)
    if not token or not student_id:
        raise InvalidArgument("Student ID or User token must be provided.")


def collect_all_courses(
    credentials: Credentials,
    periods: Sequence[WeekInfo],
    fetch: Optional[FetchFn] = None,
    logger: Optional[logging.Logger] = None,
    max_workers: Optional[int] = None,
) -> AggregationReport:
    """
    Fetch every week in periods concurrently and report successes and failures.

    All fetches are submitted before any result is awaited, and the call
    returns only after every one of them has finished. max_workers=None runs
    one worker per week; an integer caps the number of requests in flight.

    Raises InvalidArgument (before any fetch) if periods is not a sequence or
    a credential field is empty. Never raises for a failing week.
    """
    _validate(credentials, periods)

    fetch = fetch or get_week_course
    log = logger or _logger
    weeks: List[WeekInfo] = list(periods)
    total = len(weeks)
    student_id = credentials.student_id

    report = AggregationReport()
    if total == 0:
        return report

    def fetch_week(week: WeekInfo) -> Any:
        log.info("Student %s is requesting week course. (%s / %s)", student_id, week.week, total)
        return fetch(credentials.token, student_id, week.start_time)

    workers = total if max_workers is None else max(1, min(int(max_workers), total))

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="week-course") as executor:
        futures: Dict[Future, WeekInfo] = {executor.submit(fetch_week, w): w for w in weeks}

        # merged here only, so workers never share the mapping
        for future in as_completed(futures):
            week = futures[future]
            try:
                data = future.result()
            except Exception as e:
                failure = PeriodFetchFailure(week.week, e)
                report.failures[week.week] = failure
                log.error("Student %s failed to request week %s course: %s", student_id, week.week, e)
                continue

            report.courses[week.week] = data
            log.info("Student %s requested week %s course successfully.", student_id, week.week)

    return report


def get_all_courses(
    credentials: Credentials,
    periods: Sequence[WeekInfo],
    fetch: Optional[FetchFn] = None,
    logger: Optional[logging.Logger] = None,
    max_workers: Optional[int] = None,
) -> Dict[int, List[DayCourse]]:
    """
    Fetch the course tables of all weeks of a semester.

    Returns {week: [DayCourse, ...]} for every week that succeeded; failed
    weeks are logged at ERROR level and omitted, so a missing key means
    "unknown", not "no courses". See collect_all_courses() for the details.
    """
    return collect_all_courses(credentials, periods, fetch=fetch, logger=logger, max_workers=max_workers).courses
