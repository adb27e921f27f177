from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from cp_gtfs.feed.channels import Channel, Feed, StreamedChannel
from cp_gtfs.feed.gtfs_schema_map import gtfs_header, gtfs_schema_list
from cp_gtfs.feed.static_tables import static_channels
from cp_gtfs.builder.discovery import DiscoveryResult, discover_trips
from cp_gtfs.builder.progress import ProgressObserver, log_progress
from cp_gtfs.builder.trips import TripsSummary, fetch_trips
from cp_gtfs.provider.client import ProviderClient
from cp_gtfs.provider.models import Station
from cp_gtfs.runtime_utils.config import FeedConfig
from cp_gtfs.runtime_utils.process_logger import ProcessLogger
from cp_gtfs.utils.service_calendar import service_days, validate_date_range

STREAMED_TABLES = ("trips", "stop_times", "calendar_dates")


@dataclass
class PreparedFeed:
    """feed with static channels filled and streamed channels still open"""

    feed: Feed
    stations: List[Station]
    discovery: DiscoveryResult


class FeedBuilder:
    """
    builds a gtfs feed for start_date..end_date (inclusive) from a provider
    client in two steps:

    * prepare: stations, trip discovery and the static tables
    * populate: trip details streamed into trips, stop_times and calendar_dates
    """

    def __init__(
        self,
        start_date: date,
        end_date: date,
        client: ProviderClient,
        config: Optional[FeedConfig] = None,
        observer: ProgressObserver = log_progress,
    ) -> None:
        # reject an empty range before any provider request
        validate_date_range(start_date, end_date)

        self.start_date = start_date
        self.end_date = end_date
        self.client = client
        self.config = config if config is not None else FeedConfig()
        self.observer = observer

    async def prepare(self) -> PreparedFeed:
        """fetch stations, discover trips and assemble the feed channels"""
        process_logger = ProcessLogger(
            "prepare_feed",
            start_date=self.start_date,
            end_date=self.end_date,
            timezone=self.config.timezone_name,
        )
        process_logger.log_start()

        days = service_days(self.start_date, self.end_date, self.config.timezone)

        stations = await self.client.stations()
        process_logger.add_metadata(day_count=len(days), station_count=len(stations))

        discovery = await discover_trips(
            days,
            stations,
            self.client,
            concurrency=self.config.concurrency,
            max_attempts=self.config.max_attempts,
            timeout=self.config.request_timeout,
            observer=self.observer,
        )

        channels: List[Channel] = list(
            static_channels(
                self.config.agency,
                self.config.timezone_name,
                stations,
                discovery.lines,
                self.start_date,
                self.end_date,
            )
        )
        channels += [StreamedChannel(table, gtfs_header(table)) for table in STREAMED_TABLES]

        # keep the channels in gtfs table order
        table_order = [table_file.replace(".txt", "") for table_file in gtfs_schema_list()]
        channels.sort(key=lambda channel: table_order.index(channel.name))

        process_logger.log_complete()

        return PreparedFeed(feed=Feed(channels), stations=stations, discovery=discovery)

    async def populate(self, prepared: PreparedFeed) -> TripsSummary:
        """
        stream trip rows into the feed, then close every streamed channel
        exactly once, also when the stage fails.
        """
        try:
            return await fetch_trips(
                prepared.discovery.trip_ids,
                self.client,
                prepared.feed,
                self.config.timezone,
                concurrency=self.config.concurrency,
                timeout=self.config.request_timeout,
                observer=self.observer,
            )
        finally:
            prepared.feed.close_streams()


async def build_feed(
    start_date: date,
    end_date: date,
    client: ProviderClient,
    config: Optional[FeedConfig] = None,
    observer: ProgressObserver = log_progress,
) -> Feed:
    """
    build the complete feed. streamed channels hold all their rows and are
    closed when this returns.
    """
    builder = FeedBuilder(start_date, end_date, client, config=config, observer=observer)
    prepared = await builder.prepare()
    await builder.populate(prepared)
    return prepared.feed
