"""Date-range and limit filtering of a user's exercise log."""

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence, Union

from .entities import Exercise
from .errors import InvalidParameterError

DATE_FORMAT = "%Y-%m-%d"

# strptime alone also accepts "2020-1-5"
_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

DateParam = Union[date, str, None]
LimitParam = Union[int, str, None]


def _is_absent(value) -> bool:
    # Query strings deliver empty values for "?from=&to="
    return value is None or (isinstance(value, str) and not value.strip())


def parse_calendar_date(value: DateParam, parameter: str = "date") -> Optional[date]:
    """Parse a ``yyyy-mm-dd`` string into a date.

    ``None`` and empty strings are treated as absent. ``date`` objects are
    returned unchanged (a ``datetime`` is truncated to its date).

    Raises:
        InvalidParameterError: If the string is not a valid calendar date
    """
    if _is_absent(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if not _DATE_PATTERN.fullmatch(text):
            raise ValueError(text)
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        raise InvalidParameterError(
            parameter, f"Invalid {parameter} '{value}'. Expected format yyyy-mm-dd"
        )


def parse_limit(value: LimitParam) -> Optional[int]:
    """Parse a non-negative entry count.

    Raises:
        InvalidParameterError: If the value is not a non-negative integer
    """
    if _is_absent(value):
        return None
    if isinstance(value, bool):
        raise InvalidParameterError("limit", f"Invalid limit '{value}'")
    try:
        limit = int(value.strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(
            "limit", f"Invalid limit '{value}'. Expected a non-negative integer"
        )
    if limit < 0:
        raise InvalidParameterError(
            "limit", f"Invalid limit '{value}'. Expected a non-negative integer"
        )
    return limit


@dataclass(frozen=True)
class LogQuery:
    """Optional ``from``/``to``/``limit`` filters for a log query.

    Each field is independently absent (``None``) or present. The
    combination selects the predicate applied to exercise dates; both
    bounds are exclusive.
    """

    from_date: Optional[date] = None
    to_date: Optional[date] = None
    limit: Optional[int] = None

    @classmethod
    def from_params(
        cls,
        from_: DateParam = None,
        to: DateParam = None,
        limit: LimitParam = None,
    ) -> "LogQuery":
        """Build a query from raw (typically query-string) values."""
        return cls(
            from_date=parse_calendar_date(from_, "from"),
            to_date=parse_calendar_date(to, "to"),
            limit=parse_limit(limit),
        )

    @property
    def is_filtered(self) -> bool:
        """True if any of from/to/limit is present."""
        return (
            self.from_date is not None
            or self.to_date is not None
            or self.limit is not None
        )

    def date_predicate(self) -> Callable[[date], bool]:
        """Select the date predicate for the bounds that are present.

        =============  ===========  ========================
        from present   to present   keep exercise dated d iff
        =============  ===========  ========================
        yes            yes          from < d < to
        yes            no           d > from
        no             yes          d < to
        no             no           always
        =============  ===========  ========================
        """
        from_date, to_date = self.from_date, self.to_date
        if from_date is not None and to_date is not None:
            return lambda d: from_date < d < to_date
        elif from_date is not None:
            return lambda d: d > from_date
        elif to_date is not None:
            return lambda d: d < to_date
        else:
            return lambda d: True

    def apply(self, exercises: Sequence[Exercise]) -> List[Exercise]:
        """Filter exercises by date, keep insertion order, then apply the limit."""
        keep = self.date_predicate()
        filtered = [exercise for exercise in exercises if keep(exercise.date)]
        if self.limit is not None and self.limit < len(filtered):
            filtered = filtered[: self.limit]
        return filtered
