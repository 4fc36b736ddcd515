from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional

import requests

from coursetable.config import AppConfig
from coursetable.errors import FetchError
from coursetable.log import get_logger
from coursetable.model import CourseInfo, CourseSlot, DayCourse, SchoolYear, UserInfo, WeekInfo

logger = get_logger("client")


# ---------------------------------------------------------------------------
# Endpoints & auth
# ---------------------------------------------------------------------------

TOKEN_PATH = "/gateway/auth/oauth/token"
SCHOOL_YEAR_PATH = "/gateway/xgwork/appCourseTable/getXn"
SEMESTER_PATH = "/gateway/xgwork/appCourseTable/getSemesterbyXn"
WEEK_COURSE_PATH = "/gateway/xgwork/appCourseTable/getListByNoWeek2"

UCODE_PREFIX = "HUA_TENG-"
NO_CLASSROOM = "无"

# Static client credentials of the mobile app (observed on the gateway).
_BASIC_USER = "cat"
_BASIC_PASSWORD = "cat"


def get_basic_auth() -> str:
    raw = f"{_BASIC_USER}:{_BASIC_PASSWORD}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


def build_session() -> requests.Session:
    """
    Create a requests.Session shared by all calls of one run.
    """
    session = requests.Session()
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": "coursetable/0.1",
        }
    )
    return session


# ---------------------------------------------------------------------------
# Core logic
# ---------------------------------------------------------------------------


def _get_json(
    path: str,
    *,
    auth: str,
    params: Dict[str, str],
    session: requests.Session | None,
    config: AppConfig | None,
    what: str,
) -> Any:
    """
    GET base_url + path and decode the JSON body.

    Any transport error, non-2xx status or undecodable body becomes a FetchError.
    """
    config = config or AppConfig()
    # one-off calls go through requests.get, callers that batch pass a session
    get = session.get if session is not None else requests.get
    url = config.app_base_url + path

    try:
        resp = get(url, params=params, headers={"Authorization": auth}, timeout=config.http_timeout)
    except requests.RequestException as e:
        raise FetchError(f"Error while fetching {what}: {e}") from e

    if not resp.ok:
        logger.error("Failed to request %s. Error: %s - %s", what, resp.status_code, resp.text)
        raise FetchError(
            f"Error while fetching {what}: {resp.status_code}. Message: {resp.text}",
            status=resp.status_code,
        )

    try:
        return resp.json()
    except ValueError as e:
        raise FetchError(f"Invalid JSON while fetching {what}: {e}", status=resp.status_code) from e


def _rows(payload: Any, what: str) -> List[Any]:
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, list):
        raise FetchError(f"Unexpected response shape for {what}: missing 'data' list")
    return data


def _to_int(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0


def get_user_info(
    ucode: str,
    session: requests.Session | None = None,
    config: AppConfig | None = None,
) -> UserInfo:
    """
    Exchange a raw ucode for tokens and basic user data.
    """
    payload = _get_json(
        TOKEN_PATH,
        auth=get_basic_auth(),
        params={
            "ucode": UCODE_PREFIX + ucode,
            "state": "1",
            "grant_type": "ucode",
            "scope": "server",
        },
        session=session,
        config=config,
        what="user info",
    )

    try:
        user = payload["user_info"]
        return UserInfo(
            access_token=str(payload["access_token"]),
            refresh_token=str(payload["refresh_token"]),
            student_id=str(user["username"]),
            student_phone=str(user.get("phone", "")),
            student_realname=str(user.get("nickName", "")),
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise FetchError(f"Unexpected response shape for user info: {e}") from e


def get_school_year(
    token: str,
    session: requests.Session | None = None,
    config: AppConfig | None = None,
) -> List[SchoolYear]:
    """
    List the school years known to the system (semester start/end dates).
    """
    payload = _get_json(
        SCHOOL_YEAR_PATH,
        auth=f"Bearer {token}",
        params={},
        session=session,
        config=config,
        what="school year",
    )

    years: List[SchoolYear] = []
    for item in _rows(payload, "school year"):
        if not isinstance(item, dict):
            continue
        years.append(
            SchoolYear(
                school_year=str(item.get("xn", "")),
                semester=_to_int(item.get("xq")),
                is_current_semester=_to_int(item.get("dqxqbj")) != 0,
                start_time=str(item.get("qsrq", "")),
                end_time=str(item.get("jsrq", "")),
            )
        )
    return years


def find_current_semester(years: List[SchoolYear]) -> Optional[SchoolYear]:
    for y in years:
        if y.is_current_semester:
            return y
    return None


def get_semester(
    token: str,
    school_year: str,
    semester: str,
    session: requests.Session | None = None,
    config: AppConfig | None = None,
) -> List[WeekInfo]:
    """
    List all weeks of one semester as [week, start date, end date].
    """
    payload = _get_json(
        SEMESTER_PATH,
        auth=f"Bearer {token}",
        params={"xn": school_year, "xq": semester},
        session=session,
        config=config,
        what="semester info",
    )

    weeks: List[WeekInfo] = []
    for row in _rows(payload, "semester info"):
        if not isinstance(row, list) or not row:
            continue
        week = _to_int(row[0])
        if week < 1:
            # unparsable week numbers would all collide on the same key
            continue
        weeks.append(
            WeekInfo(
                week=week,
                start_time=str(row[1]) if len(row) > 1 else "",
                end_time=str(row[2]) if len(row) > 2 else "",
            )
        )
    return weeks


def get_week_course(
    token: str,
    student_id: str,
    start_time: str,
    session: requests.Session | None = None,
    config: AppConfig | None = None,
) -> List[DayCourse]:
    """
    Fetch the course table of the week starting at start_time.

    The gateway returns one list per weekday, each holding one encoded
    string per lesson slot (empty string = free slot).
    """
    payload = _get_json(
        WEEK_COURSE_PATH,
        auth=f"Bearer {token}",
        params={"no": student_id, "startDate": start_time},
        session=session,
        config=config,
        what="week course",
    )

    days: List[DayCourse] = []
    for day_index, day in enumerate(_rows(payload, "week course")):
        slots = day if isinstance(day, list) else []
        days.append(
            DayCourse(
                weekday=day_index + 1,
                courses=[
                    CourseSlot(course_number=i + 1, course_info=parse_course_string(str(s or "")))
                    for i, s in enumerate(slots)
                ],
            )
        )
    return days


def parse_course_string(text: str) -> Optional[CourseInfo]:
    """
    Parse one encoded lesson slot.

    Format (9 '|'-separated fields):
        name|classroom|class|teacher1;teacher2|course_number|weekday|color|continuous|code

    Returns None for empty or truncated strings.
    """
    if not text:
        return None

    parts = text.split("|")
    if len(parts) < 9:
        return None

    return CourseInfo(
        name=parts[0],
        classroom=None if parts[1] == NO_CLASSROOM else parts[1],
        class_name=parts[2],
        teachers=parts[3].split(";"),
        course_number=_to_int(parts[4]),
        weekday=_to_int(parts[5]),
        color=parts[6],
        continuous_course=_to_int(parts[7]),
        code=parts[8],
    )
