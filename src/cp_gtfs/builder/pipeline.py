#!/usr/bin/env python

import argparse
import asyncio
import logging
import os
import sys
from datetime import date
from importlib.metadata import PackageNotFoundError, version
from typing import List, Tuple

from cp_gtfs.builder.build import FeedBuilder
from cp_gtfs.builder.trips import TripsSummary
from cp_gtfs.feed.csv_writer import FeedSummary, write_feed
from cp_gtfs.provider.rest_client import RestProviderClient
from cp_gtfs.runtime_utils.config import FeedConfig
from cp_gtfs.runtime_utils.env_validation import validate_environment
from cp_gtfs.runtime_utils.feed_exception import ArgumentException
from cp_gtfs.runtime_utils.process_logger import ProcessLogger
from cp_gtfs.utils.service_calendar import parse_feed_date, validate_date_range

logging.getLogger().setLevel("INFO")

DESCRIPTION = """Build a GTFS feed of Comboios de Portugal trains for a date range"""


def package_version() -> str:
    """installed version of cp-gtfs"""
    try:
        return version("cp-gtfs")
    except PackageNotFoundError:
        return "unknown"


def feed_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates"""
    try:
        return parse_feed_date(value)
    except ArgumentException as exception:
        raise argparse.ArgumentTypeError(str(exception)) from exception


def parse_args(args: List[str]) -> argparse.Namespace:
    """parse args for running this entrypoint script"""
    parser = argparse.ArgumentParser(prog="cp-gtfs", description=DESCRIPTION)
    parser.add_argument(
        "start_date",
        type=feed_date,
        help="feed start date: YYYY-MM-DD (in the operator timezone)",
    )
    parser.add_argument(
        "end_date",
        type=feed_date,
        help="feed end date: YYYY-MM-DD (included, in the operator timezone)",
    )
    parser.add_argument(
        "directory",
        help="directory where the generated GTFS will be placed",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=package_version(),
    )

    parsed = parser.parse_args(args)
    try:
        validate_date_range(parsed.start_date, parsed.end_date)
    except ArgumentException as exception:
        parser.error(str(exception))

    return parsed


async def build_and_write(args: argparse.Namespace, config: FeedConfig) -> Tuple[TripsSummary, FeedSummary]:
    """
    build the feed and write it to disk. trip rows are written while trips
    are still being fetched.
    """
    if config.provider_base_url is None:
        raise ArgumentException("PROVIDER_BASE_URL is not configured")

    async with RestProviderClient(config.provider_base_url) as client:
        builder = FeedBuilder(args.start_date, args.end_date, client, config=config)
        prepared = await builder.prepare()
        trips_summary, feed_summary = await asyncio.gather(
            builder.populate(prepared),
            write_feed(prepared.feed, args.directory),
        )

    return trips_summary, feed_summary


def main(args: argparse.Namespace) -> None:
    """entrypoint into the feed build"""
    main_process_logger = ProcessLogger(
        "main",
        start_date=args.start_date,
        end_date=args.end_date,
        directory=os.path.abspath(args.directory),
    )
    main_process_logger.log_start()

    try:
        config = FeedConfig.from_environment()
        trips_summary, feed_summary = asyncio.run(build_and_write(args, config))
    except Exception as exception:
        main_process_logger.log_failure(exception)
        raise

    main_process_logger.add_metadata(
        files_written=len(feed_summary.files_written),
        files_removed=len(feed_summary.files_removed),
        trips_written=trips_summary.written,
        trips_skipped=trips_summary.skipped,
    )
    main_process_logger.log_complete()


def start() -> None:
    """configure and start the feed build"""
    # parse arguments from the command line, exits on --help, --version and bad dates
    parsed_args = parse_args(sys.argv[1:])

    # configure the environment
    os.environ["SERVICE_NAME"] = "cp_gtfs"

    validate_environment(
        required_variables=["PROVIDER_BASE_URL"],
        optional_variables=[
            "FEED_TIMEZONE",
            "FEED_CONCURRENCY",
            "FEED_REQUEST_TIMEOUT",
            "FEED_MAX_ATTEMPTS",
        ],
    )

    # run main method
    main(parsed_args)


if __name__ == "__main__":
    start()
