from datetime import datetime
from types import TracebackType
from typing import Any, Dict, List, Optional, Type
from urllib.parse import quote

from aiohttp import ClientSession

from cp_gtfs.provider.models import Line, Station, StopEvent, Stopover, TripDetail
from cp_gtfs.runtime_utils.feed_exception import ProviderException


def _parse_instant(value: Optional[str]) -> Optional[datetime]:
    """parse an ISO 8601 timestamp with offset, None stays None"""
    if value is None:
        return None
    try:
        instant = datetime.fromisoformat(value)
    except (TypeError, ValueError) as exception:
        raise ProviderException(f"invalid timestamp {value!r}") from exception
    if instant.tzinfo is None:
        raise ProviderException(f"timestamp {value!r} has no utc offset")
    return instant


def parse_line(payload: Dict[str, Any]) -> Line:
    """line from a provider line object"""
    try:
        line_id = str(payload["id"])
        return Line(id=line_id, name=str(payload.get("name") or line_id))
    except (KeyError, TypeError) as exception:
        raise ProviderException(f"invalid line {payload!r}") from exception


def parse_station(payload: Dict[str, Any]) -> Station:
    """station from a provider station object"""
    try:
        location = payload["location"]
        return Station(
            id=str(payload["id"]),
            name=str(payload["name"]),
            latitude=float(location["latitude"]),
            longitude=float(location["longitude"]),
            timezone=payload.get("timezone"),
        )
    except (KeyError, TypeError, ValueError) as exception:
        raise ProviderException(f"invalid station {payload!r}") from exception


def parse_stopover(payload: Dict[str, Any], station_id: str) -> Stopover:
    """stopover from a provider station stopover object"""
    try:
        return Stopover(
            station_id=station_id,
            trip_id=str(payload["tripId"]),
            line=parse_line(payload["line"]),
            arrival=_parse_instant(payload.get("arrival")),
            departure=_parse_instant(payload.get("departure")),
        )
    except (KeyError, TypeError) as exception:
        raise ProviderException(f"invalid stopover {payload!r}") from exception


def parse_trip(payload: Dict[str, Any]) -> TripDetail:
    """trip detail from a provider trip object, stops kept in provider order"""
    try:
        stops = tuple(
            StopEvent(
                stop_id=str(stopover["stop"]["id"]),
                arrival=_parse_instant(stopover.get("arrival")),
                departure=_parse_instant(stopover.get("departure")),
            )
            for stopover in payload["stopovers"]
        )
        return TripDetail(id=str(payload["id"]), line=parse_line(payload["line"]), stops=stops)
    except (KeyError, TypeError) as exception:
        raise ProviderException(f"invalid trip {payload.get('id')!r}") from exception


class RestProviderClient:
    """
    ProviderClient for a JSON REST api exposing the operator's stations,
    station stopovers and trips.

    use as an async context manager, the client owns its aiohttp session
    unless one is passed in.
    """

    def __init__(self, base_url: str, session: Optional[ClientSession] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "RestProviderClient":
        if self._session is None:
            self._session = ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """close the session if this client created it"""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def _get_json(self, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        if self._session is None:
            raise ProviderException("RestProviderClient used outside of its context manager")

        async with self._session.get(f"{self.base_url}{path}", params=params) as response:
            response.raise_for_status()
            try:
                return await response.json()
            except ValueError as exception:
                raise ProviderException(f"invalid json body from {path}") from exception

    async def stations(self) -> List[Station]:
        payload = await self._get_json("/stations")
        if not isinstance(payload, list):
            raise ProviderException("stations response is not a list")
        return [parse_station(station) for station in payload]

    async def stopovers(self, station: Station, when: datetime) -> List[Stopover]:
        payload = await self._get_json(
            f"/stations/{quote(station.id, safe='')}/stopovers",
            params={"when": when.isoformat()},
        )
        if not isinstance(payload, list):
            raise ProviderException(f"stopovers response for station {station.id} is not a list")
        return [parse_stopover(stopover, station.id) for stopover in payload]

    async def trip(self, trip_id: str) -> TripDetail:
        payload = await self._get_json(f"/trips/{quote(trip_id, safe='')}")
        if not isinstance(payload, dict):
            raise ProviderException(f"trip response for {trip_id} is not an object")
        return parse_trip(payload)
