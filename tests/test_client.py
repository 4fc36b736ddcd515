"""
Tests for the college app gateway client.

No network access: a fake session returns canned responses and records
the requests it received.
"""

from __future__ import annotations

import unittest
from typing import Any
from unittest import mock

import requests

from coursetable.client import (
    find_current_semester,
    get_basic_auth,
    get_school_year,
    get_semester,
    get_user_info,
    get_week_course,
    parse_course_string,
)
from coursetable.config import AppConfig
from coursetable.errors import FetchError
from coursetable.model import SchoolYear

CONFIG = AppConfig(app_base_url="https://gateway.test", http_timeout=5.0)

COURSE = "高等数学|1号楼101|软件2401|张三;李四|1|1|#ff0000|2|MATH101"


def fake_response(payload: Any = None, status: int = 200, text: str = "") -> mock.Mock:
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def fake_session(resp: mock.Mock) -> mock.Mock:
    session = mock.Mock(spec=requests.Session)
    session.get.return_value = resp
    return session


class TestParseCourseString(unittest.TestCase):
    def test_full_record(self) -> None:
        info = parse_course_string(COURSE)
        self.assertIsNotNone(info)
        assert info is not None

        self.assertEqual(info.name, "高等数学")
        self.assertEqual(info.classroom, "1号楼101")
        self.assertEqual(info.class_name, "软件2401")
        self.assertEqual(info.teachers, ["张三", "李四"])
        self.assertEqual(info.course_number, 1)
        self.assertEqual(info.weekday, 1)
        self.assertEqual(info.color, "#ff0000")
        self.assertEqual(info.continuous_course, 2)
        self.assertEqual(info.code, "MATH101")

    def test_no_classroom_marker(self) -> None:
        info = parse_course_string("体育|无|软件2401|王五|3|2|#00ff00|2|PE1")
        assert info is not None
        self.assertIsNone(info.classroom)

    def test_bad_numbers_fall_back_to_zero(self) -> None:
        info = parse_course_string("X|A|B|T|x|y|c|z|CODE")
        assert info is not None
        self.assertEqual((info.course_number, info.weekday, info.continuous_course), (0, 0, 0))

    def test_empty_and_short_strings(self) -> None:
        self.assertIsNone(parse_course_string(""))
        self.assertIsNone(parse_course_string("a|b|c"))


class TestGetWeekCourse(unittest.TestCase):
    def test_days_and_slots_are_numbered(self) -> None:
        session = fake_session(fake_response({"data": [[COURSE, ""], [], ["", "", COURSE]]}))

        days = get_week_course("tok", "245810101", "2024-09-02", session=session, config=CONFIG)

        self.assertEqual([d.weekday for d in days], [1, 2, 3])
        self.assertEqual([s.course_number for s in days[0].courses], [1, 2])
        self.assertIsNotNone(days[0].courses[0].course_info)
        self.assertIsNone(days[0].courses[1].course_info)
        self.assertEqual(days[1].courses, [])
        self.assertEqual(days[2].courses[2].course_number, 3)

    def test_request_shape(self) -> None:
        session = fake_session(fake_response({"data": []}))

        get_week_course("tok", "245810101", "2024-09-02", session=session, config=CONFIG)

        session.get.assert_called_once_with(
            "https://gateway.test/gateway/xgwork/appCourseTable/getListByNoWeek2",
            params={"no": "245810101", "startDate": "2024-09-02"},
            headers={"Authorization": "Bearer tok"},
            timeout=5.0,
        )

    def test_http_error_raises_fetch_error(self) -> None:
        session = fake_session(fake_response(status=401, text="unauthorized"))

        with self.assertLogs("coursetable.client", level="ERROR"):
            with self.assertRaises(FetchError) as ctx:
                get_week_course("tok", "245810101", "2024-09-02", session=session, config=CONFIG)

        self.assertEqual(ctx.exception.status, 401)
        self.assertIn("unauthorized", str(ctx.exception))

    def test_without_session_uses_requests_get(self) -> None:
        with mock.patch("coursetable.client.requests.get", return_value=fake_response({"data": []})) as get, \
                mock.patch("coursetable.client.requests.Session") as session_cls:
            days = get_week_course("tok", "245810101", "2024-09-02", config=CONFIG)

        self.assertEqual(days, [])
        get.assert_called_once()
        session_cls.assert_not_called()

    def test_transport_error_raises_fetch_error(self) -> None:
        session = mock.Mock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("no route")

        with self.assertRaises(FetchError) as ctx:
            get_week_course("tok", "245810101", "2024-09-02", session=session, config=CONFIG)
        self.assertIsNone(ctx.exception.status)

    def test_invalid_json_raises_fetch_error(self) -> None:
        session = fake_session(fake_response(ValueError("not json")))
        with self.assertRaises(FetchError):
            get_week_course("tok", "245810101", "2024-09-02", session=session, config=CONFIG)

    def test_missing_data_list_raises_fetch_error(self) -> None:
        session = fake_session(fake_response({"msg": "oops"}))
        with self.assertRaises(FetchError):
            get_week_course("tok", "245810101", "2024-09-02", session=session, config=CONFIG)


class TestSemesterEndpoints(unittest.TestCase):
    def test_get_semester(self) -> None:
        payload = {"data": [["1", "2024-09-02", "2024-09-08"], ["2", "2024-09-09", "2024-09-15"], ["3"]]}
        session = fake_session(fake_response(payload))

        weeks = get_semester("tok", "2024-2025", "1", session=session, config=CONFIG)

        self.assertEqual([w.week for w in weeks], [1, 2, 3])
        self.assertEqual(weeks[0].start_time, "2024-09-02")
        self.assertEqual(weeks[1].end_time, "2024-09-15")
        self.assertEqual(weeks[2].start_time, "")
        _, kwargs = session.get.call_args
        self.assertEqual(kwargs["params"], {"xn": "2024-2025", "xq": "1"})

    def test_rows_without_a_positive_week_number_are_skipped(self) -> None:
        payload = {"data": [["x", "2024-08-26"], ["1", "2024-09-02"], ["", "2024-09-09"], ["0", "2024-09-16"], [], ["2", "2024-09-23"]]}
        session = fake_session(fake_response(payload))

        weeks = get_semester("tok", "2024-2025", "1", session=session, config=CONFIG)

        self.assertEqual([(w.week, w.start_time) for w in weeks], [(1, "2024-09-02"), (2, "2024-09-23")])

    def test_get_school_year_and_current(self) -> None:
        payload = {
            "data": [
                {"xn": "2023-2024", "xq": "2", "dqxqbj": "0", "qsrq": "2024-02-26", "jsrq": "2024-07-07"},
                {"xn": "2024-2025", "xq": "1", "dqxqbj": "1", "qsrq": "2024-09-02", "jsrq": "2025-01-19"},
            ]
        }
        session = fake_session(fake_response(payload))

        years = get_school_year("tok", session=session, config=CONFIG)

        self.assertEqual(len(years), 2)
        current = find_current_semester(years)
        self.assertEqual(current, SchoolYear("2024-2025", 1, True, "2024-09-02", "2025-01-19"))

    def test_no_current_semester(self) -> None:
        self.assertIsNone(find_current_semester([SchoolYear("2023-2024", 2, False, "", "")]))


class TestGetUserInfo(unittest.TestCase):
    def test_login_with_ucode(self) -> None:
        payload = {
            "access_token": "acc",
            "refresh_token": "ref",
            "user_info": {"username": "245810101", "phone": "138****1234", "nickName": "张三"},
        }
        session = fake_session(fake_response(payload))

        user = get_user_info("ABC123", session=session, config=CONFIG)

        self.assertEqual(user.access_token, "acc")
        self.assertEqual(user.student_id, "245810101")
        self.assertEqual(user.credentials().token, "acc")

        _, kwargs = session.get.call_args
        self.assertEqual(kwargs["params"]["ucode"], "HUA_TENG-ABC123")
        self.assertEqual(kwargs["headers"], {"Authorization": get_basic_auth()})

    def test_basic_auth_value(self) -> None:
        self.assertEqual(get_basic_auth(), "Basic Y2F0OmNhdA==")

    def test_unexpected_payload(self) -> None:
        session = fake_session(fake_response({"access_token": "acc"}))
        with self.assertRaises(FetchError):
            get_user_info("ABC123", session=session, config=CONFIG)


if __name__ == "__main__":
    unittest.main()
