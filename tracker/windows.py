from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Sequence, Union

from tracker.domain import TYPE_ALL, TransactionType, parse_date


class Frequency(str, Enum):
    LAST_7_DAYS = "7"
    LAST_30_DAYS = "30"
    LAST_90_DAYS = "90"
    LAST_365_DAYS = "365"
    CUSTOM = "custom"

    @property
    def days(self) -> Optional[int]:
        return None if self is Frequency.CUSTOM else int(self.value)


FREQUENCY_LABELS = {
    Frequency.LAST_7_DAYS: "Last 7 Days",
    Frequency.LAST_30_DAYS: "Last 30 Days",
    Frequency.LAST_90_DAYS: "Last 3 Months",
    Frequency.LAST_365_DAYS: "Last Year",
    Frequency.CUSTOM: "Custom Range",
}


@dataclass(frozen=True)
class DateInterval:
    start: date
    end: date

    def contains(self, value: Union[date, datetime]) -> bool:
        day = value.date() if isinstance(value, datetime) else value
        return self.start <= day <= self.end


def resolve_window(
    frequency: Union[Frequency, str],
    date_range: Optional[Sequence] = None,
    today: Optional[date] = None,
) -> Optional[DateInterval]:
    """Turn a frequency selector into an inclusive [start, end] interval.

    Relative windows end on ``today``. A custom range that is missing, has the
    wrong arity, cannot be parsed or is reversed yields None, meaning no date
    constraint at all.
    """
    frequency = Frequency(frequency)
    if frequency is Frequency.CUSTOM:
        if not date_range or len(date_range) != 2 or None in tuple(date_range):
            return None
        try:
            start, end = parse_date(date_range[0]), parse_date(date_range[1])
        except ValueError:
            return None
        if start > end:
            return None
        return DateInterval(start, end)

    today = today or date.today()
    return DateInterval(today - timedelta(days=frequency.days), today)


@dataclass(frozen=True)
class TransactionQuery:
    """Request shape sent to the persistence collaborator."""
    frequency: Frequency = Frequency.LAST_30_DAYS
    date_range: Optional[tuple] = None
    type: Union[TransactionType, str] = TYPE_ALL

    def interval(self, today: Optional[date] = None) -> Optional[DateInterval]:
        return resolve_window(self.frequency, self.date_range, today)

    def to_payload(self, today: Optional[date] = None) -> dict:
        interval = self.interval(today)
        type_value = self.type.value if isinstance(self.type, TransactionType) else self.type
        return {
            "frequency": Frequency(self.frequency).value,
            "selectedDate": [interval.start.isoformat(), interval.end.isoformat()] if interval else [],
            "type": type_value,
        }
