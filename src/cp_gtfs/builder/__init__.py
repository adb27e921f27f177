"""
Pipeline for building a GTFS feed over a date range. Stations are queried for
every service day to discover trips, trip details are fetched once per unique
trip and streamed into the trips, stop_times and calendar_dates tables.
"""
