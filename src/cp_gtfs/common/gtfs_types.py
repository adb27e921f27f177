from enum import Enum

# https://gtfs.org/documentation/schedule/reference/#routestxt
# 0 - Tram, Streetcar, Light rail. Any light rail or street level system within a metropolitan area.
# 1 - Subway, Metro. Any underground rail system within a metropolitan area.
# 2 - Rail. Used for intercity or long-distance travel.
# 3 - Bus. Used for short- and long-distance bus routes.
# 4 - Ferry. Used for short- and long-distance boat service.


class RouteType(Enum):
    """
    RouteType enums to specify allowable values for routes.txt
    """

    LIGHT_RAIL = 0
    SUBWAY_METRO = 1
    RAIL = 2
    BUS = 3
    FERRY = 4


class ExceptionType(Enum):
    """
    calendar_dates.txt exception types
    """

    ADDED = 1
    REMOVED = 2


class LocationType(Enum):
    """
    stops.txt location types
    """

    STOP = 0
    STATION = 1
