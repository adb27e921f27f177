from datetime import datetime
from typing import List, Protocol

from cp_gtfs.provider.models import Station, Stopover, TripDetail


class ProviderClient(Protocol):
    """
    Interface the feed build needs from a schedule data provider.

    Implementations raise ProviderException, aiohttp.ClientError or
    asyncio.TimeoutError for failed requests. The feed build degrades those
    into empty results or skipped trips.
    """

    async def stations(self) -> List[Station]:
        """all stations of the operator"""

    async def stopovers(self, station: Station, when: datetime) -> List[Stopover]:
        """stopovers at a station for the service day starting at when"""

    async def trip(self, trip_id: str) -> TripDetail:
        """full ordered stop detail of a trip"""
