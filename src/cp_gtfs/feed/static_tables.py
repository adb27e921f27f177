from datetime import date
from typing import List, Sequence

from cp_gtfs.common.gtfs_types import LocationType, RouteType
from cp_gtfs.feed.channels import Row, StaticChannel
from cp_gtfs.feed.gtfs_schema_map import gtfs_header
from cp_gtfs.provider.models import Line, Station
from cp_gtfs.runtime_utils.config import AgencyConfig
from cp_gtfs.utils.service_calendar import format_gtfs_date


def agency_rows(agency: AgencyConfig, timezone_name: str) -> List[Row]:
    """single agency row for the operator"""
    return [
        [
            agency.agency_id,
            agency.agency_name,
            agency.agency_url,
            timezone_name,
            agency.agency_lang,
            agency.agency_phone,
            agency.agency_fare_url,
            agency.agency_email,
        ]
    ]


def stop_rows(stations: Sequence[Station]) -> List[Row]:
    """one stops row per station"""
    return [
        [
            station.id,
            "",
            station.name,
            "",
            station.latitude,
            station.longitude,
            "",
            "",
            LocationType.STOP.value,
            "",
            station.timezone or "",
            "",
        ]
        for station in stations
    ]


def route_rows(lines: Sequence[Line], agency_id: str) -> List[Row]:
    """one routes row per line, every line is operated as rail"""
    return [[line.id, agency_id, line.name, "", "", RouteType.RAIL.value, "", "", ""] for line in lines]


def feed_info_rows(agency: AgencyConfig, start_date: date, end_date: date) -> List[Row]:
    """single feed_info row covering start_date..end_date"""
    return [
        [
            agency.feed_publisher_name,
            agency.feed_publisher_url,
            agency.feed_lang,
            format_gtfs_date(start_date),
            format_gtfs_date(end_date),
            agency.feed_version,
        ]
    ]


def static_channels(
    agency: AgencyConfig,
    timezone_name: str,
    stations: Sequence[Station],
    lines: Sequence[Line],
    start_date: date,
    end_date: date,
) -> List[StaticChannel]:
    """channels fully determined by station and line data"""
    return [
        StaticChannel("agency", gtfs_header("agency"), agency_rows(agency, timezone_name)),
        StaticChannel("stops", gtfs_header("stops"), stop_rows(stations)),
        StaticChannel("routes", gtfs_header("routes"), route_rows(lines, agency.agency_id)),
        StaticChannel("feed_info", gtfs_header("feed_info"), feed_info_rows(agency, start_date, end_date)),
    ]
