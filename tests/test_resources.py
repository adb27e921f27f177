import asyncio
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple
from zoneinfo import ZoneInfo

from aiohttp import ClientError

from cp_gtfs.feed.channels import Channel, Row
from cp_gtfs.provider.models import Line, Station, StopEvent, Stopover, TripDetail
from cp_gtfs.runtime_utils.feed_exception import ProviderException

LISBON = ZoneInfo("Europe/Lisbon")

INTERCIDADES = Line(id="ic", name="Intercidades")
ALFA_PENDULAR = Line(id="ap", name="Alfa Pendular")

LISBOA = Station(id="9430007", name="Lisboa Santa Apolonia", latitude=38.7139, longitude=-9.1225)
COIMBRA = Station(id="9436004", name="Coimbra-B", latitude=40.2226, longitude=-8.4432)
PORTO = Station(id="9402006", name="Porto Campanha", latitude=41.1487, longitude=-8.5853, timezone="Europe/Lisbon")


def lisbon_time(year: int, month: int, day: int, hour: int, minute: int, second: int = 0) -> datetime:
    """timezone aware datetime in the operator timezone"""
    return datetime(year, month, day, hour, minute, second, tzinfo=LISBON)


def make_trip(
    trip_id: str,
    line: Line,
    stops: Iterable[Tuple[str, Optional[datetime], Optional[datetime]]],
) -> TripDetail:
    """trip detail from (stop id, arrival, departure) tuples"""
    return TripDetail(
        id=trip_id,
        line=line,
        stops=tuple(
            StopEvent(stop_id=stop_id, arrival=arrival, departure=departure) for stop_id, arrival, departure in stops
        ),
    )


def make_stopover(station: Station, trip_id: str, line: Line) -> Stopover:
    """stopover with no times, discovery only looks at trip and line"""
    return Stopover(station_id=station.id, trip_id=trip_id, line=line)


class FakeProviderClient:
    """
    in memory ProviderClient that records every request it receives.

    stopovers are keyed by (station id, service date). failing stopover keys
    raise ProviderException, failing trip ids raise aiohttp.ClientError. errors
    maps a stopover key or trip id to any other exception to raise.
    """

    def __init__(
        self,
        stations: List[Station],
        stopovers: Optional[Dict[Tuple[str, date], List[Stopover]]] = None,
        trips: Optional[Dict[str, TripDetail]] = None,
        failing_stopovers: Optional[Set[Tuple[str, date]]] = None,
        failing_trips: Optional[Set[str]] = None,
        errors: Optional[Dict[object, BaseException]] = None,
        delay: float = 0.0,
    ) -> None:
        self._stations = stations
        self._stopovers = stopovers or {}
        self._trips = trips or {}
        self.failing_stopovers = failing_stopovers or set()
        self.failing_trips = failing_trips or set()
        self.errors = errors or {}
        self.delay = delay

        self.station_calls = 0
        self.stopover_calls: List[Tuple[str, date]] = []
        self.trip_calls: List[str] = []

    async def stations(self) -> List[Station]:
        self.station_calls += 1
        return list(self._stations)

    async def stopovers(self, station: Station, when: datetime) -> List[Stopover]:
        key = (station.id, when.date())
        self.stopover_calls.append(key)
        await asyncio.sleep(self.delay)
        if key in self.errors:
            raise self.errors[key]
        if key in self.failing_stopovers:
            raise ProviderException(f"stopovers unavailable for {key}")
        return list(self._stopovers.get(key, []))

    async def trip(self, trip_id: str) -> TripDetail:
        self.trip_calls.append(trip_id)
        await asyncio.sleep(self.delay)
        if trip_id in self.errors:
            raise self.errors[trip_id]
        if trip_id in self.failing_trips:
            raise ClientError(f"trip {trip_id} unavailable")
        if trip_id not in self._trips:
            raise ProviderException(f"unknown trip {trip_id}")
        return self._trips[trip_id]


async def collect(channel: Channel) -> List[Row]:
    """every row a channel yields, header included"""
    return [row async for row in channel]
