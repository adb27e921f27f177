from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Station:
    """a station served by the operator"""

    id: str
    name: str
    latitude: float
    longitude: float
    timezone: Optional[str] = None


@dataclass(frozen=True)
class Line:
    """a line (route) a trip belongs to"""

    id: str
    name: str


@dataclass(frozen=True)
class Stopover:
    """
    one scheduled visit of a trip to a station, as returned by a station
    query. only used to discover trip ids.
    """

    station_id: str
    trip_id: str
    line: Line
    arrival: Optional[datetime] = None
    departure: Optional[datetime] = None


@dataclass(frozen=True)
class StopEvent:
    """one stop in the ordered detail of a trip"""

    stop_id: str
    arrival: Optional[datetime] = None
    departure: Optional[datetime] = None


@dataclass(frozen=True)
class TripDetail:
    """full trip detail with its stops in travel order"""

    id: str
    line: Line
    stops: Tuple[StopEvent, ...]
