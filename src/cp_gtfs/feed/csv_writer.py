import asyncio
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TextIO

import polars as pl

from cp_gtfs.feed.channels import Channel, Feed, Row
from cp_gtfs.feed.gtfs_schema_map import gtfs_schema
from cp_gtfs.runtime_utils.process_logger import ProcessLogger


@dataclass
class FeedSummary:
    """rows written per table and the files left on disk"""

    rows: Dict[str, int] = field(default_factory=dict)
    files_written: List[str] = field(default_factory=list)
    files_removed: List[str] = field(default_factory=list)


def _frame_schema(table: str, header: List[str]) -> Dict[str, Any]:
    """polars schema for the header a channel announced"""
    table_schema = gtfs_schema(table)
    return {column: table_schema.get(column, pl.String) for column in header}


def _write_batch(file: TextIO, schema: Dict[str, Any], batch: List[Row], include_header: bool) -> None:
    # blank placeholders become nulls, which polars writes as empty fields
    frame = pl.DataFrame(
        [[None if value == "" else value for value in row] for row in batch],
        schema=schema,
        orient="row",
    )
    frame.write_csv(file, include_header=include_header)


async def write_channel(channel: Channel, path: str, batch_size: int = 1024) -> int:
    """
    consume a channel into a csv file at path, writing rows in batches

    :return number of data rows written
    """
    schema: Optional[Dict[str, Any]] = None
    batch: List[Row] = []
    row_count = 0
    header_written = False

    with open(path, "w", encoding="utf-8", newline="") as file:
        async for row in channel:
            if schema is None:
                schema = _frame_schema(channel.name, [str(column) for column in row])
                continue

            batch.append(row)
            row_count += 1
            if len(batch) >= batch_size:
                _write_batch(file, schema, batch, include_header=not header_written)
                header_written = True
                batch = []

        if schema is not None and (batch or not header_written):
            _write_batch(file, schema, batch, include_header=not header_written)

    return row_count


async def write_feed(feed: Feed, directory: str, batch_size: int = 1024, remove_empty: bool = True) -> FeedSummary:
    """
    write every channel of the feed to <directory>/<table>.txt, consuming all
    channels concurrently so streamed channels are drained while they are
    being filled. tables without data rows are removed afterwards.

    write errors are raised.
    """
    process_logger = ProcessLogger("write_feed", directory=directory, table_count=len(feed))
    process_logger.log_start()

    os.makedirs(directory, exist_ok=True)

    paths = {name: os.path.join(directory, f"{name}.txt") for name in feed}
    try:
        row_counts = await asyncio.gather(
            *(write_channel(channel, paths[name], batch_size=batch_size) for name, channel in feed.items())
        )
    except Exception as exception:
        process_logger.log_failure(exception)
        raise

    summary = FeedSummary(rows=dict(zip(feed, row_counts)))
    for name, path in paths.items():
        if remove_empty and summary.rows[name] == 0:
            os.remove(path)
            summary.files_removed.append(path)
        else:
            summary.files_written.append(path)

    process_logger.add_metadata(
        files_written=len(summary.files_written),
        files_removed=len(summary.files_removed),
        **{f"{name}_rows": count for name, count in summary.rows.items()},
    )
    process_logger.log_complete()

    return summary
