"""
Exception types raised by coursetable.
"""

from __future__ import annotations

from typing import Optional


class CoursetableError(Exception):
    """Base class for all coursetable errors."""


class InvalidArgument(CoursetableError, ValueError):
    """The call itself is malformed (wrong container type, missing credentials)."""


class FetchError(CoursetableError):
    """
    A request to the college app gateway failed.

    status is the HTTP status code, or None for transport / decoding errors.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class PeriodFetchFailure(CoursetableError):
    """
    The course table of a single week could not be fetched.

    Only recorded (logged / reported), never raised out of the aggregation.
    """

    def __init__(self, week: int, reason: BaseException) -> None:
        super().__init__(f"week {week}: {reason}")
        self.week = week
        self.reason = reason
        self.__cause__ = reason
