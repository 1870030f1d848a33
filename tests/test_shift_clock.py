"""
Shift Clock Tests
=================

Hour bucketing, the override, timezone policies and top-of-hour delays.
"""
from datetime import datetime, timedelta, timezone

import pytest

from shiftbanner.core.shift_clock import (
    Shift, ShiftClock, TimezonePolicy, resolve_shift, shift_for_hour
)
from tests.fakes import FakePreferences, la_time


REFERENCE = TimezonePolicy(True, 'America/Los_Angeles')


class TestResolveShift:

    @pytest.mark.parametrize("hour,minute,second,micro,expected", [
        (5, 59, 59, 999000, Shift.ZETASHIFT),
        (6, 0, 0, 0, Shift.DAWNGUARD),
        (11, 59, 59, 999000, Shift.DAWNGUARD),
        (12, 0, 0, 0, Shift.ALPHAFLIGHT),
        (17, 59, 59, 999000, Shift.ALPHAFLIGHT),
        (18, 0, 0, 0, Shift.NIGHTWATCH),
        (23, 59, 59, 999000, Shift.NIGHTWATCH),
        (0, 0, 0, 0, Shift.ZETASHIFT),
    ])
    def test_boundaries(self, hour, minute, second, micro, expected):
        now = la_time(2024, 6, 1, hour, minute, second, micro)
        assert resolve_shift(now, REFERENCE, False) is expected

    def test_same_hour_same_shift_regardless_of_date(self):
        dates = [la_time(2023, 1, 1, 14, 5), la_time(2024, 7, 19, 14, 45), la_time(2030, 11, 30, 14, 59)]
        assert {resolve_shift(d, REFERENCE, False) for d in dates} == {Shift.ALPHAFLIGHT}

    def test_every_hour_is_a_time_of_day_shift(self):
        for hour in range(24):
            shift = resolve_shift(la_time(2024, 2, 2, hour), REFERENCE, False)
            assert shift in (Shift.ZETASHIFT, Shift.DAWNGUARD, Shift.ALPHAFLIGHT, Shift.NIGHTWATCH)

    def test_override_wins_at_every_hour(self):
        for hour in range(24):
            assert resolve_shift(la_time(2024, 11, 9, hour), REFERENCE, True) is Shift.OMEGASHIFT

    def test_utc_instant_is_converted_to_reference_zone(self):
        # 20:00 UTC in March (PDT, UTC-7) is 13:00 in the reference zone.
        now = datetime(2024, 3, 20, 20, 0, tzinfo=timezone.utc)
        assert resolve_shift(now, REFERENCE, False) is Shift.ALPHAFLIGHT

    def test_hour_out_of_range(self):
        with pytest.raises(ValueError):
            shift_for_hour(-1)


class TestTimezonePolicy:

    def test_invalid_reference_falls_back_to_utc(self):
        policy = TimezonePolicy(True, 'Not/AZone')
        assert policy.name == 'UTC'
        now = datetime(2024, 3, 20, 7, 0, tzinfo=timezone.utc)
        assert policy.localize(now).hour == 7

    def test_local_policy_uses_system_zone(self):
        policy = TimezonePolicy(False)
        now = datetime(2024, 3, 20, 7, 0, tzinfo=timezone.utc)
        assert policy.localize(now) == now.astimezone()
        assert policy.name == 'local'


class TestShiftClock:

    def test_delay_until_next_hour(self, reference_clock):
        now = la_time(2024, 3, 5, 13, 0, 0)
        assert reference_clock.delay_until_next_hour(now) == timedelta(hours=1)

        now = la_time(2024, 3, 5, 11, 59, 59)
        assert reference_clock.delay_until_next_hour(now) == timedelta(seconds=1)

    def test_delay_across_spring_forward(self, reference_clock):
        # 01:30 PST; the next top of hour is 03:00 PDT, half an hour later.
        now = la_time(2024, 3, 10, 1, 30)
        assert reference_clock.delay_until_next_hour(now) == timedelta(minutes=30)

    def test_current_month_follows_policy(self, reference_clock):
        # 04:00 UTC on Nov 1 is still October 31 in the reference zone.
        now = datetime(2024, 11, 1, 4, 0, tzinfo=timezone.utc)
        assert reference_clock.current_month(now) == 10

    def test_from_preferences_tracks_changes(self, fake_time):
        prefs = FakePreferences(use_reference_timezone=True)
        clock = ShiftClock.from_preferences(prefs, time_source=fake_time)
        assert clock.policy.name == 'America/Los_Angeles'

        prefs.use_reference_timezone = False
        assert clock.policy.name == 'local'

    def test_now_uses_time_source(self, reference_clock, fake_time):
        assert reference_clock.now() == fake_time.now
