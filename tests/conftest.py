"""
Shared fixtures for the shift banner tests.
"""
import pytest

from shiftbanner.core.shift_clock import ShiftClock, TimezonePolicy
from tests.fakes import FakeTime, ManualDispatcher, la_time


@pytest.fixture
def fake_time():
    return FakeTime(la_time(2024, 3, 5, 13, 0, 0))


@pytest.fixture
def dispatcher():
    return ManualDispatcher()


@pytest.fixture
def reference_clock(fake_time):
    policy = TimezonePolicy(True, 'America/Los_Angeles')
    return ShiftClock(lambda: policy, time_source=fake_time)
