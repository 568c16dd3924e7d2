"""Date and relative-time extraction for contract text.

Absolute dates are located with a fixed, ordered set of regular
expressions and parsed against a fixed, ordered list of ``strptime``
formats. Relative expressions ("within 30 days", "14 days notice") are
returned as amount/unit pairs and can be resolved against a reference
date with ``DateResolver.resolve_future_date``.

Nothing in this module raises on bad input: a string that does not parse
simply yields no date.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Callable, Optional, TypeVar, Union

from dateutil.relativedelta import relativedelta

from .models import Confidence, ExtractedDate, RelativeTime

_MONTHS = (
    r"(?:January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"
)

# Scanned in this order; a date may be reported once per pattern it matches
DATE_PATTERNS: list[re.Pattern] = [
    # ISO: 2024-01-15
    re.compile(r"\b\d{4}-\d{2}-\d{2}\b"),
    # US: 01/15/2024, 1/15/24
    re.compile(r"\b\d{1,2}/\d{1,2}/\d{2,4}\b"),
    # European: 15.01.2024
    re.compile(r"\b\d{1,2}\.\d{1,2}\.\d{4}\b"),
    # January 15, 2024 / Jan 15 2024
    re.compile(rf"\b{_MONTHS}\s+\d{{1,2}},?\s+\d{{4}}\b", re.IGNORECASE),
    # 15 January 2024
    re.compile(rf"\b\d{{1,2}}\s+{_MONTHS}\s+\d{{4}}\b", re.IGNORECASE),
]

# First format that parses wins
DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%m/%d/%y",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
)

_UNIT = r"(days?|weeks?|months?|years?)"

RELATIVE_PATTERNS: list[re.Pattern] = [
    re.compile(rf"within\s+(\d+)\s+{_UNIT}", re.IGNORECASE),
    re.compile(rf"(\d+)\s+{_UNIT}\s+notice", re.IGNORECASE),
    re.compile(rf"(\d+)\s+{_UNIT}\s+prior", re.IGNORECASE),
    re.compile(rf"no\s+(?:less|fewer)\s+than\s+(\d+)\s+{_UNIT}", re.IGNORECASE),
]

_D = TypeVar("_D", date, datetime)

# Months and years go through relativedelta so that month ends are clamped
UNIT_DELTAS: dict[str, Callable[[int], Union[timedelta, relativedelta]]] = {
    "day": lambda n: timedelta(days=n),
    "week": lambda n: timedelta(weeks=n),
    "month": lambda n: relativedelta(months=n),
    "year": lambda n: relativedelta(years=n),
}


class DateResolver:
    """Extract absolute dates and relative time expressions.

    All methods are static; the class only groups them.

    Example::

        DateResolver.extract_dates("Effective 2024-01-15.")[0].date
        # datetime.date(2024, 1, 15)
        rel = DateResolver.extract_relative_time("within 30 days")[0]
        DateResolver.resolve_future_date(rel.amount, rel.unit, date(2024, 1, 1))
        # datetime.date(2024, 1, 31)
    """

    @staticmethod
    def extract_dates(text: str) -> list[ExtractedDate]:
        """Find and parse every absolute date in ``text``.

        Every parsed date is reported with ``Confidence.HIGH``; ambiguous
        numeric forms such as ``01/02/03`` are read month-first and are
        not downgraded.
        """
        dates: list[ExtractedDate] = []
        for pattern in DATE_PATTERNS:
            for match in pattern.finditer(text):
                parsed = DateResolver.parse_date(match.group())
                if parsed is not None:
                    dates.append(
                        ExtractedDate(
                            date=parsed,
                            text=match.group(),
                            position=match.start(),
                            confidence=Confidence.HIGH,
                        )
                    )
        return dates

    @staticmethod
    def parse_date(value: str) -> Optional[date]:
        """Parse ``value`` with the first matching entry of ``DATE_FORMATS``.

        Returns:
            The calendar date, or None when no format yields a valid date.
        """
        value = " ".join(value.split())
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                continue
        return None

    @staticmethod
    def extract_relative_time(text: str) -> list[RelativeTime]:
        """Find relative time expressions, units normalized to singular."""
        results: list[RelativeTime] = []
        for pattern in RELATIVE_PATTERNS:
            for match in pattern.finditer(text):
                results.append(
                    RelativeTime(
                        amount=int(match.group(1)),
                        unit=match.group(2).lower().rstrip("s"),
                        text=match.group(),
                        position=match.start(),
                    )
                )
        return results

    @staticmethod
    def resolve_future_date(amount: int, unit: str, from_date: _D) -> Optional[_D]:
        """Add ``amount`` units to ``from_date``.

        Months and years are calendar-aware (Jan 31 + 1 month is the last
        day of February). Works for both ``date`` and ``datetime``.

        Returns:
            The shifted value, or None for an unrecognized unit or a
            result outside the supported calendar range.
        """
        make_delta = UNIT_DELTAS.get(unit.lower())
        if make_delta is None:
            return None

        try:
            return from_date + make_delta(amount)
        except (OverflowError, ValueError):
            return None
