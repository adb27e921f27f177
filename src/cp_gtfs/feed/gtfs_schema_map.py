from typing import Dict, List

import polars as pl

agency = {
    "agency_id": pl.String,
    "agency_name": pl.String,
    "agency_url": pl.String,
    "agency_timezone": pl.String,
    "agency_lang": pl.String,
    "agency_phone": pl.String,
    "agency_fare_url": pl.String,
    "agency_email": pl.String,
}

stops = {
    "stop_id": pl.String,
    "stop_code": pl.String,
    "stop_name": pl.String,
    "stop_desc": pl.String,
    "stop_lat": pl.Float64,
    "stop_lon": pl.Float64,
    "zone_id": pl.String,
    "stop_url": pl.String,
    "location_type": pl.Int64,
    "parent_station": pl.String,
    "stop_timezone": pl.String,
    "wheelchair_boarding": pl.Int64,
}

routes = {
    "route_id": pl.String,
    "agency_id": pl.String,
    "route_short_name": pl.String,
    "route_long_name": pl.String,
    "route_desc": pl.String,
    "route_type": pl.Int64,
    "route_url": pl.String,
    "route_color": pl.String,
    "route_text_color": pl.String,
}

trips = {
    "route_id": pl.String,
    "service_id": pl.String,
    "trip_id": pl.String,
    "trip_headsign": pl.String,
    "trip_short_name": pl.String,
    "direction_id": pl.Int64,
    "block_id": pl.String,
    "shape_id": pl.String,
    "wheelchair_accessible": pl.Int64,
    "bikes_allowed": pl.Int64,
}

# times past midnight (25:10:00) are not valid clock values, keep them as strings
stop_times = {
    "trip_id": pl.String,
    "arrival_time": pl.String,
    "departure_time": pl.String,
    "stop_id": pl.String,
    "stop_sequence": pl.Int64,
    "stop_headsign": pl.String,
    "pickup_type": pl.Int64,
    "drop_off_type": pl.Int64,
    "shape_dist_traveled": pl.Float64,
    "timepoint": pl.Int64,
}

calendar_dates = {
    "service_id": pl.String,
    "date": pl.String,
    "exception_type": pl.Int64,
}

feed_info = {
    "feed_publisher_name": pl.String,
    "feed_publisher_url": pl.String,
    "feed_lang": pl.String,
    "feed_start_date": pl.String,
    "feed_end_date": pl.String,
    "feed_version": pl.String,
}

# key order is the order tables are assembled and written in
schema_map: Dict[str, Dict] = {
    "agency.txt": agency,
    "stops.txt": stops,
    "routes.txt": routes,
    "trips.txt": trips,
    "stop_times.txt": stop_times,
    "calendar_dates.txt": calendar_dates,
    "feed_info.txt": feed_info,
}


def gtfs_schema(gtfs_table_file: str) -> Dict[str, pl.DataType]:
    """
    get schema of gtfs table file with polars datatypes

    :param gtfs_table_file: (ie. stop_times.txt or stop_times)

    :return Dict[gtfs_table_field: polars DataType]
    """
    if not gtfs_table_file.endswith(".txt"):
        gtfs_table_file = f"{gtfs_table_file}.txt"

    schema = schema_map.get(gtfs_table_file, None)
    if schema is not None:
        return schema.copy()

    raise IndexError(f"{gtfs_table_file} is not found in schema map")


def gtfs_header(gtfs_table_file: str) -> List[str]:
    """column names of a gtfs table in feed order"""
    return list(gtfs_schema(gtfs_table_file).keys())


def gtfs_schema_list() -> List[str]:
    """
    create list of all gtfs table files produced by a feed build

    :return List[gtfs table files (ie. stop_times.txt)]
    """
    return list(schema_map.keys())
