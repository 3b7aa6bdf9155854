"""Free-text date/time parsing for annotation timestamps."""

from __future__ import annotations

import re
import time
from types import MappingProxyType
from typing import Any, Mapping, Optional

MONTHS: Mapping[str, int] = MappingProxyType(
    {
        "Jan": 1,
        "Feb": 2,
        "Mar": 3,
        "Apr": 4,
        "May": 5,
        "Jun": 6,
        "Jul": 7,
        "Aug": 8,
        "Sep": 9,
        "Oct": 10,
        "Nov": 11,
        "Dec": 12,
    }
)

PM_MARKERS: Mapping[str, int] = MappingProxyType({"PM": 12, "下午": 12})

_CJK_DATE_RE = re.compile(r"(\d+)年(\d+)月(\d+)日")
_ISO_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_DAY_RE = re.compile(r" (\d?\d),")
_YEAR_RE = re.compile(r" (\d{4})")
_CLOCK_RE = re.compile(r"(\d+):(\d+):(\d+)")


class TimeParser:
    """Turn timestamps like ``2020-05-01 12:30:45``, ``2020年5月1日 12:30:45``
    or ``Friday, May 1, 2020 0:30:45 PM`` into local epoch seconds.

    Keyword tables are scanned in declaration order; the first hit wins.
    """

    def __init__(
        self,
        months: Mapping[str, int] = MONTHS,
        pm_markers: Mapping[str, int] = PM_MARKERS,
    ) -> None:
        self._months = MappingProxyType(dict(months))
        self._pm_markers = MappingProxyType(dict(pm_markers))

    def parse(self, text: Any) -> Optional[float]:
        if not isinstance(text, str) or not text:
            return None
        try:
            return self._parse(text)
        except (OverflowError, ValueError):
            # digit runs too long for int() or dates out of mktime's range
            return None

    def _parse(self, text: str) -> Optional[float]:
        date = self._parse_date(text)
        clock = _CLOCK_RE.search(text)
        if date is None or clock is None:
            return None
        year, month, day = date
        hour, minute, second = (int(g) for g in clock.groups())

        # Added as-is, an hour already past noon overflows into the next day.
        for marker, offset in self._pm_markers.items():
            if marker in text:
                hour += offset
                break

        return time.mktime((year, month, day, hour, minute, second, 0, 0, -1))

    def _parse_date(self, text: str) -> Optional[tuple[int, int, int]]:
        for pattern in (_CJK_DATE_RE, _ISO_DATE_RE):
            m = pattern.search(text)
            if m:
                year, month, day = (int(g) for g in m.groups())
                return year, month, day

        for keyword, month in self._months.items():
            if keyword in text:
                day_m = _DAY_RE.search(text)
                year_m = _YEAR_RE.search(text)
                if not day_m or not year_m:
                    return None
                return int(year_m.group(1)), month, int(day_m.group(1))
        return None


_default_parser = TimeParser()


def parse_time(text: Any) -> Optional[float]:
    return _default_parser.parse(text)
