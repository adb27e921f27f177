from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from cp_gtfs.builder.executor import WorkUnit, provider_call, run_bounded, with_retries
from cp_gtfs.builder.progress import ProgressObserver, log_progress
from cp_gtfs.provider.client import ProviderClient
from cp_gtfs.provider.models import Line, Station
from cp_gtfs.runtime_utils.process_logger import ProcessLogger

TripLine = Tuple[str, Line]


@dataclass(frozen=True)
class DiscoveryResult:
    """unique trip ids and lines, both in first seen order"""

    trip_ids: List[str]
    lines: List[Line]


def merge_trip_lines(results: Sequence[Optional[List[TripLine]]]) -> DiscoveryResult:
    """
    flatten per query (trip id, line) pairs into unique trip ids and unique
    lines. the first line seen for an id wins.
    """
    trip_ids: Dict[str, None] = {}
    lines: Dict[str, Line] = {}

    for pairs in results:
        for trip_id, line in pairs or []:
            trip_ids.setdefault(trip_id, None)
            lines.setdefault(line.id, line)

    return DiscoveryResult(trip_ids=list(trip_ids), lines=list(lines.values()))


async def discover_trips(
    days: Sequence[datetime],
    stations: Sequence[Station],
    client: ProviderClient,
    concurrency: int = 16,
    max_attempts: int = 3,
    timeout: float = 10.0,
    observer: ProgressObserver = log_progress,
) -> DiscoveryResult:
    """
    query stopovers for every (day, station) pair and collect the trips and
    lines serving them.

    a query that still fails after its retries contributes nothing.
    """
    process_logger = ProcessLogger("discover_trips", day_count=len(days), station_count=len(stations))
    process_logger.log_start()

    queries = [(day, station) for day in days for station in stations]
    total = len(queries)

    def query_unit(index: int, day: datetime, station: Station) -> WorkUnit[List[TripLine]]:
        async def unit() -> List[TripLine]:
            observer("discovery", index, total)
            stopovers = await with_retries(
                lambda: provider_call(client.stopovers(station, day)),
                max_attempts=max_attempts,
                timeout=timeout,
                process_name="stopovers_request",
            )
            return [(stopover.trip_id, stopover.line) for stopover in stopovers]

        return unit

    results = await run_bounded(
        [query_unit(index, day, station) for index, (day, station) in enumerate(queries, start=1)],
        concurrency=concurrency,
        fallback=list,
        process_name="discover_trips_query",
    )

    discovered = merge_trip_lines(results)

    process_logger.add_metadata(
        query_count=total,
        trip_count=len(discovered.trip_ids),
        line_count=len(discovered.lines),
    )
    process_logger.log_complete()

    return discovered
