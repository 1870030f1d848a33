"""
Shift Clock - Time-of-day to shift resolution
Handles timezone-aware shift lookup and top-of-hour scheduling
"""
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from typing import Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .logging_service import get_logger


REFERENCE_TIMEZONE = 'America/Los_Angeles'


class Shift(Enum):
    """
    The shift currently on display.

    UNSET is internal only: it marks a surface that has not rendered anything
    yet and never stands in for a real shift.
    """
    ZETASHIFT = 'zetashift'      # 12m-6a
    DAWNGUARD = 'dawnguard'      # 6a-12n
    ALPHAFLIGHT = 'alphaflight'  # 12n-6p
    NIGHTWATCH = 'nightwatch'    # 6p-12m
    OMEGASHIFT = 'omegashift'    # whenever the override says so
    UNSET = 'unset'

    @property
    def is_real(self) -> bool:
        return self is not Shift.UNSET

    @classmethod
    def real_shifts(cls):
        """All shifts that can actually be drawn"""
        return tuple(shift for shift in cls if shift.is_real)


# (first hour, shift), closed-open on the hour
_HOUR_BUCKETS = (
    (18, Shift.NIGHTWATCH),
    (12, Shift.ALPHAFLIGHT),
    (6, Shift.DAWNGUARD),
    (0, Shift.ZETASHIFT),
)


class TimezonePolicy:
    """
    Which timezone decides the hour: the fixed reference zone or the
    system-local one.
    """

    def __init__(self, use_reference: bool = True, reference: str = REFERENCE_TIMEZONE):
        """
        Args:
            use_reference: True for the reference zone, False for system local
            reference: IANA timezone string (e.g., 'America/Los_Angeles')
        """
        self._use_reference = use_reference
        self._reference = reference
        self._tz_obj: Optional[tzinfo] = None
        if use_reference:
            self._load_timezone()

    def _load_timezone(self) -> None:
        """Load timezone object, fallback to UTC on error"""
        try:
            self._tz_obj = ZoneInfo(self._reference)
        except (ZoneInfoNotFoundError, ValueError) as e:
            get_logger().warning(f"Invalid timezone '{self._reference}', using UTC: {e}")
            self._reference = 'UTC'
            self._tz_obj = timezone.utc

    def localize(self, now: datetime) -> datetime:
        """
        Convert an aware instant into local time under this policy.

        Naive datetimes are taken to be UTC.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        if self._use_reference:
            return now.astimezone(self._tz_obj)
        return now.astimezone()

    @property
    def use_reference(self) -> bool:
        return self._use_reference

    @property
    def name(self) -> str:
        return self._reference if self._use_reference else 'local'

    def __repr__(self) -> str:
        return f"TimezonePolicy(name={self.name!r})"


def shift_for_hour(hour: int) -> Shift:
    """Bucket an hour of day (0-23) into its shift"""
    for first_hour, shift in _HOUR_BUCKETS:
        if hour >= first_hour:
            return shift
    raise ValueError(f"Hour out of range: {hour}")


def resolve_shift(now: datetime, policy: TimezonePolicy, override_active: bool) -> Shift:
    """
    Resolve the shift for an instant.

    Args:
        now: The instant to resolve
        policy: Timezone policy deciding the local hour
        override_active: Whether Omega Shift is currently called

    Returns:
        OMEGASHIFT while the override holds, otherwise the time-of-day shift
    """
    if override_active:
        return Shift.OMEGASHIFT
    return shift_for_hour(policy.localize(now).hour)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ShiftClock:
    """
    Clock service that knows about shifts.

    The timezone policy is looked up on each call so that
    toggling the reference-timezone preference applies on the next wake.
    """

    def __init__(
        self,
        policy_source: Optional[Callable[[], TimezonePolicy]] = None,
        time_source: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize shift clock.

        Args:
            policy_source: Callable returning the current timezone policy
            time_source: Callable returning the current aware instant
        """
        self._policy_source = policy_source or TimezonePolicy
        self._time_source = time_source or _utc_now

    @classmethod
    def from_preferences(cls, preferences, time_source=None) -> 'ShiftClock':
        """Build a clock whose policy follows the timezone preferences"""
        cache = {}

        def policy_source() -> TimezonePolicy:
            key = (preferences.use_reference_timezone, preferences.reference_timezone)
            if key not in cache:
                cache.clear()
                cache[key] = TimezonePolicy(*key)
            return cache[key]
        return cls(policy_source, time_source)

    @property
    def policy(self) -> TimezonePolicy:
        return self._policy_source()

    def now(self) -> datetime:
        """Current instant (timezone-aware)"""
        return self._time_source()

    def localize(self, now: datetime) -> datetime:
        return self.policy.localize(now)

    def resolve(self, now: datetime, override_active: bool) -> Shift:
        return resolve_shift(now, self.policy, override_active)

    def current_month(self, now: datetime) -> int:
        """Calendar month (1-12) of the instant under the timezone policy"""
        return self.localize(now).month

    def next_top_of_hour(self, now: datetime) -> datetime:
        """
        The next local top-of-hour after now, as a UTC instant.

        The hour is added in UTC so DST transitions don't skew the result.
        """
        local = self.localize(now)
        top = local.replace(minute=0, second=0, microsecond=0)
        return top.astimezone(timezone.utc) + timedelta(hours=1)

    def delay_until_next_hour(self, now: datetime) -> timedelta:
        """Time remaining until the next local top-of-hour"""
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return self.next_top_of_hour(now) - now.astimezone(timezone.utc)
