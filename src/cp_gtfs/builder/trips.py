from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence, Tuple
from zoneinfo import ZoneInfo

from cp_gtfs.common.gtfs_types import ExceptionType
from cp_gtfs.feed.channels import Feed, Row
from cp_gtfs.builder.executor import WorkUnit, provider_call, run_bounded, with_retries
from cp_gtfs.builder.progress import ProgressObserver, log_progress
from cp_gtfs.provider.client import ProviderClient
from cp_gtfs.provider.models import StopEvent, TripDetail
from cp_gtfs.runtime_utils.feed_exception import MalformedTripError
from cp_gtfs.runtime_utils.process_logger import ProcessLogger
from cp_gtfs.utils.service_calendar import format_gtfs_date, format_gtfs_time, service_day_of


@dataclass(frozen=True)
class TripRows:
    """feed rows produced by a single trip"""

    trip: Row
    calendar_date: Row
    stop_times: List[Row]


@dataclass(frozen=True)
class TripsSummary:
    """outcome of the trip detail stage"""

    written: int
    skipped: int
    stop_time_count: int


def _stop_times(trip_id: str, stop: StopEvent) -> Tuple[datetime, datetime]:
    """arrival and departure of a stop, each filling in for the other when missing"""
    arrival = stop.arrival or stop.departure
    departure = stop.departure or stop.arrival
    if arrival is None or departure is None:
        raise MalformedTripError(trip_id, f"stop {stop.stop_id} has neither arrival nor departure")
    return arrival, departure


def trip_to_gtfs(trip: TripDetail, timezone: ZoneInfo) -> TripRows:
    """
    convert a trip detail into its trips, calendar_dates and stop_times rows.

    the trip id doubles as service id and short name. every time is encoded
    relative to the service day of the first stop's departure.

    :raises MalformedTripError: the trip has no stops or a stop has no times
    """
    if not trip.stops:
        raise MalformedTripError(trip.id, "trip has no stops")

    stop_times = [_stop_times(trip.id, stop) for stop in trip.stops]
    _, first_departure = stop_times[0]
    reference_day = service_day_of(first_departure, timezone)

    trip_row: Row = [trip.line.id, trip.id, trip.id, "", trip.id, "", "", "", "", ""]
    calendar_date_row: Row = [trip.id, format_gtfs_date(reference_day), ExceptionType.ADDED.value]
    stop_time_rows: List[Row] = [
        [
            trip.id,
            format_gtfs_time(arrival, reference_day, timezone),
            format_gtfs_time(departure, reference_day, timezone),
            stop.stop_id,
            sequence,
            "",
            "",
            "",
            "",
            "",
        ]
        for sequence, (stop, (arrival, departure)) in enumerate(zip(trip.stops, stop_times))
    ]

    return TripRows(trip=trip_row, calendar_date=calendar_date_row, stop_times=stop_time_rows)


def write_trip_rows(feed: Feed, rows: TripRows) -> None:
    """push the rows of one trip to the streamed channels"""
    feed.stream("trips").push(rows.trip)
    stop_times = feed.stream("stop_times")
    for row in rows.stop_times:
        stop_times.push(row)
    feed.stream("calendar_dates").push(rows.calendar_date)


async def fetch_trips(
    trip_ids: Sequence[str],
    client: ProviderClient,
    feed: Feed,
    timezone: ZoneInfo,
    concurrency: int = 16,
    max_attempts: int = 1,
    timeout: float = 10.0,
    observer: ProgressObserver = log_progress,
) -> TripsSummary:
    """
    fetch every trip detail and push its rows to the feed as soon as the trip
    is converted, so rows arrive in completion order.

    a trip whose fetch fails or whose detail can not be converted is skipped
    and writes no rows at all.
    """
    process_logger = ProcessLogger("fetch_trips", trip_count=len(trip_ids))
    process_logger.log_start()

    total = len(trip_ids)

    def trip_unit(index: int, trip_id: str) -> WorkUnit[int]:
        async def unit() -> int:
            observer("trips", index, total)
            trip = await with_retries(
                lambda: provider_call(client.trip(trip_id)),
                max_attempts=max_attempts,
                timeout=timeout,
                process_name="trip_request",
            )
            # convert before writing so a malformed trip leaves no partial rows
            rows = trip_to_gtfs(trip, timezone)
            write_trip_rows(feed, rows)
            return len(rows.stop_times)

        return unit

    # stop time count per written trip, None for a skipped trip
    results = await run_bounded(
        [trip_unit(index, trip_id) for index, trip_id in enumerate(trip_ids, start=1)],
        concurrency=concurrency,
        process_name="fetch_trips_trip",
    )

    stop_time_counts = [result for result in results if result is not None]
    summary = TripsSummary(
        written=len(stop_time_counts),
        skipped=total - len(stop_time_counts),
        stop_time_count=sum(stop_time_counts),
    )

    process_logger.add_metadata(
        trips_written=summary.written,
        trips_skipped=summary.skipped,
        stop_times_written=summary.stop_time_count,
    )
    process_logger.log_complete()

    return summary
