"""Schedule resolution - free-form date, time and zone fields to a UTC instant"""

import re
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Dict, FrozenSet, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from inkpost.utils.logging import get_logger

logger = get_logger(__name__)

_DIGITS = re.compile(r"[0-9]+")

DEFAULT_LEAD_TIME = timedelta(minutes=30)


@dataclass(frozen=True)
class ScheduleInput:
    """Raw, possibly incomplete schedule fields as typed by the user."""

    day: str = ""
    month: str = ""
    year: str = ""
    hour: str = ""
    minute: str = ""
    second: str = ""
    timezone: str = ""


@dataclass(frozen=True)
class ResolvedSchedule:
    """An unambiguous absolute instant derived from a ScheduleInput."""

    instant: datetime
    timezone: str
    local: datetime

    def to_rfc3339(self) -> str:
        """UTC instant as an RFC 3339 string."""
        return self.instant.isoformat()


@lru_cache(maxsize=1)
def _zone_keys() -> FrozenSet[str]:
    return frozenset(available_timezones())


@lru_cache(maxsize=1)
def _zone_keys_folded() -> Dict[str, str]:
    return {key.lower(): key for key in _zone_keys()}


def _parse_number(text: str, low: int, high: int) -> Optional[int]:
    text = text.strip()
    if not _DIGITS.fullmatch(text):
        return None

    value = int(text)
    if value < low or value > high:
        return None
    return value


class ScheduleResolver:
    """Resolve schedule fields against an IANA timezone."""

    @staticmethod
    def canonical_zone(name: str) -> Optional[str]:
        """Return the known zone key for a name, matching case-insensitively."""
        name = name.strip()
        if not name:
            return None

        if name in _zone_keys():
            return name
        return _zone_keys_folded().get(name.lower())

    @staticmethod
    def resolve(schedule: ScheduleInput) -> Optional[ResolvedSchedule]:
        """Resolve the input to a UTC instant.

        Returns None when any field is missing or out of range, the date does
        not exist, the zone is unknown, or the local time falls in a DST gap.
        An ambiguous local time (clocks going back) resolves to the earlier
        of its two instants.
        """
        day = _parse_number(schedule.day, 1, 31)
        month = _parse_number(schedule.month, 1, 12)
        year = _parse_number(schedule.year, 1, 9999)
        hour = _parse_number(schedule.hour, 0, 23)
        minute = _parse_number(schedule.minute, 0, 59)
        second = _parse_number(schedule.second, 0, 59)

        if None in (day, month, year, hour, minute, second):
            return None

        zone_key = ScheduleResolver.canonical_zone(schedule.timezone)
        if zone_key is None:
            return None

        try:
            zone = ZoneInfo(zone_key)
            naive = datetime(year, month, day, hour, minute, second)
        except (ValueError, ZoneInfoNotFoundError):
            return None

        # fold=0 selects the earlier instant of an ambiguous local time
        local = naive.replace(tzinfo=zone, fold=0)
        try:
            instant = local.astimezone(timezone.utc)
            round_trip = instant.astimezone(zone).replace(tzinfo=None)
        except (OverflowError, ValueError):
            return None

        if round_trip != naive:
            logger.debug(f"Local time {naive.isoformat()} does not exist in {zone_key}")
            return None

        return ResolvedSchedule(instant=instant, timezone=zone_key, local=local)

    @staticmethod
    def with_defaults(
        schedule: ScheduleInput, now: Optional[datetime] = None
    ) -> ScheduleInput:
        """Fill an untouched schedule with now + 30 minutes.

        Only applies when every date and time field is empty, so a partly
        entered schedule is left for :meth:`resolve` to reject. Uses the
        system's local zone.
        """
        fields = (
            schedule.day,
            schedule.month,
            schedule.year,
            schedule.hour,
            schedule.minute,
            schedule.second,
        )
        if any(field.strip() for field in fields):
            return schedule

        now = (now or datetime.now()).astimezone()
        future = now + DEFAULT_LEAD_TIME

        return replace(
            schedule,
            day=future.strftime("%d"),
            month=future.strftime("%m"),
            year=future.strftime("%Y"),
            hour=future.strftime("%H"),
            minute=future.strftime("%M"),
            second="00",
        )

    @staticmethod
    def filter_timezones(query: str = "") -> List[str]:
        """Sorted zone keys containing the query, case-insensitively."""
        query = query.strip().lower()
        keys = sorted(_zone_keys())

        if not query:
            return keys
        return [key for key in keys if query in key.lower()]


def resolve(schedule: ScheduleInput) -> Optional[ResolvedSchedule]:
    """Module-level shortcut for :meth:`ScheduleResolver.resolve`."""
    return ScheduleResolver.resolve(schedule)
