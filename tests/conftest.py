from datetime import datetime, timedelta

import pytest

from freetime.engine.models import Commitment, FreeInterval

MONDAY = datetime(2024, 1, 1)  # 2024-01-01 is a Monday


@pytest.fixture
def monday():
    return MONDAY


@pytest.fixture
def at():
    """at(day_offset, hour, minute=0) -> datetime relative to MONDAY"""
    def _at(day_offset, hour, minute=0):
        return MONDAY + timedelta(days=day_offset, hours=hour, minutes=minute)
    return _at


@pytest.fixture
def day_range():
    """day_range(first_day_offset, days) -> (start, end) covering whole days"""
    def _range(first, days=1):
        start = MONDAY + timedelta(days=first)
        return start, start + timedelta(days=days) - timedelta(minutes=1)
    return _range


@pytest.fixture
def commitment(at):
    """commitment(owner, day, start_hour, start_min, end_hour, end_min, recurrence=None)"""
    def _commitment(owner, day, sh, sm, eh, em, recurrence=None, title=None):
        return Commitment.create(owner, at(day, sh, sm), at(day, eh, em), recurrence=recurrence, title=title)
    return _commitment


@pytest.fixture
def slot(at):
    """slot(day, start_hour, start_min, end_hour, end_min, owner=None) -> FreeInterval"""
    def _slot(day, sh, sm, eh, em, owner=None):
        return FreeInterval(at(day, sh, sm), at(day, eh, em), owner)
    return _slot
