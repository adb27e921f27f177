"""
Calendar helpers shared by every stage of the feed build. All date arithmetic
and GTFS date / time formatting goes through this module.
"""

from datetime import date, datetime, time, timedelta
from typing import List
from zoneinfo import ZoneInfo

from cp_gtfs.runtime_utils.feed_exception import ArgumentException

FEED_DATE_FORMAT = "%Y-%m-%d"


def parse_feed_date(value: str) -> date:
    """
    parse a YYYY-MM-DD date given on the command line

    :raises ArgumentException: if the value is not a valid YYYY-MM-DD date
    """
    if not isinstance(value, str) or len(value) != 10:
        raise ArgumentException(f"invalid date {value!r}, must look like this: YYYY-MM-DD")
    try:
        return datetime.strptime(value, FEED_DATE_FORMAT).date()
    except ValueError as exception:
        raise ArgumentException(f"invalid date {value!r}, must look like this: YYYY-MM-DD") from exception


def validate_date_range(start_date: date, end_date: date) -> None:
    """raise if the inclusive range start_date..end_date is empty"""
    if end_date < start_date:
        raise ArgumentException(f"end date {end_date.isoformat()} cannot be before start date {start_date.isoformat()}")


def service_days(start_date: date, end_date: date, timezone: ZoneInfo) -> List[datetime]:
    """
    Given a start_date and end_date (inclusive) return the local midnight of
    every day in the range as timezone aware datetimes.

    Midnights are built from calendar dates rather than by adding 24 hours, so
    a DST change inside the range never shifts the day.
    """
    validate_date_range(start_date, end_date)

    # add 1 for inclusive
    day_count = (end_date - start_date).days + 1

    return [datetime.combine(start_date + timedelta(days=i), time(0, 0), tzinfo=timezone) for i in range(day_count)]


def service_day_of(instant: datetime, timezone: ZoneInfo) -> date:
    """calendar day of an instant in the operator timezone"""
    return instant.astimezone(timezone).date()


def format_gtfs_date(day: date) -> str:
    """YYYYMMDD representation used by calendar_dates and feed_info"""
    return day.strftime("%Y%m%d")


def format_gtfs_time(instant: datetime, reference_day: date, timezone: ZoneInfo) -> str:
    """
    Format an instant as a GTFS HH:MM:SS time relative to the reference day.

    Times after the end of the reference day keep counting hours past
    midnight (24:10:00, 49:10:00, ...) so a trip's stop times stay
    increasing. Instants on or before the reference day use the plain clock.
    """
    local = instant.astimezone(timezone)
    elapsed_days = (local.date() - reference_day).days
    hours = local.hour
    if elapsed_days > 0:
        hours += 24 * elapsed_days

    return f"{hours:02d}:{local.minute:02d}:{local.second:02d}"
