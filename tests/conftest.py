"""
Pytest Configuration and Fixtures for delimited
===============================================

Purpose
-------
Shared fixtures for the unit suite: quiet logging, a recording predicate,
and the composite validators most tests exercise.
"""

from __future__ import annotations

import calendar

import pytest

from delimited.logging import configure_logging
from delimited.validation import (
    CheckParams,
    CompositeValidator,
    integer,
    refine_template_literal,
)


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    configure_logging(level="WARNING")


class RecordingPredicate:
    """Predicate that remembers every tuple it was called with."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.calls: list[tuple] = []

    def __call__(self, values: tuple) -> bool:
        self.calls.append(values)
        return self.answer


@pytest.fixture
def recording_predicate() -> RecordingPredicate:
    return RecordingPredicate()


def days_in_month(month: int) -> int:
    return calendar.monthrange(2023, month)[1]


@pytest.fixture
def day_month() -> CompositeValidator:
    """Day and month separated by a comma; the day must exist in that month."""
    return refine_template_literal(
        [integer(min_value=1), integer(min_value=1, max_value=12)],
        ",",
        lambda values: values[0] <= days_in_month(values[1]),
        template_params="Expected DAY,MONTH",
        check_params=CheckParams("Day is out of range for month", path=("day",)),
    )
