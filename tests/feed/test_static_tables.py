from datetime import date

import polars as pl
import pytest

from cp_gtfs.feed.gtfs_schema_map import gtfs_header, gtfs_schema, gtfs_schema_list
from cp_gtfs.feed.static_tables import route_rows, static_channels, stop_rows
from cp_gtfs.runtime_utils.config import AgencyConfig
from tests.test_resources import ALFA_PENDULAR, INTERCIDADES, LISBOA, PORTO, collect


def test_stop_rows() -> None:
    """It writes one stop per station with the station timezone when known."""
    rows = stop_rows([LISBOA, PORTO])

    assert rows == [
        [LISBOA.id, "", LISBOA.name, "", LISBOA.latitude, LISBOA.longitude, "", "", 0, "", "", ""],
        [PORTO.id, "", PORTO.name, "", PORTO.latitude, PORTO.longitude, "", "", 0, "", "Europe/Lisbon", ""],
    ]
    assert all(len(row) == len(gtfs_header("stops")) for row in rows)


def test_route_rows() -> None:
    """It writes every line as a rail route of the agency."""
    assert route_rows([INTERCIDADES, ALFA_PENDULAR], "cp") == [
        ["ic", "cp", "Intercidades", "", "", 2, "", "", ""],
        ["ap", "cp", "Alfa Pendular", "", "", 2, "", "", ""],
    ]


@pytest.mark.asyncio
async def test_static_channels() -> None:
    """It builds the agency, stops, routes and feed_info channels."""
    channels = static_channels(
        AgencyConfig(),
        "Europe/Lisbon",
        [LISBOA],
        [INTERCIDADES],
        date(2020, 1, 1),
        date(2020, 1, 31),
    )

    assert [channel.name for channel in channels] == ["agency", "stops", "routes", "feed_info"]
    for channel in channels:
        rows = await collect(channel)
        assert rows[0] == gtfs_header(channel.name)
        assert len(rows) == 2
        assert all(len(row) == len(rows[0]) for row in rows)

    feed_info = await collect(channels[3])
    assert feed_info[1][3:5] == ["20200101", "20200131"]


def test_gtfs_schema() -> None:
    """It returns a copy of a table schema by file or table name."""
    schema = gtfs_schema("stop_times.txt")
    schema["extra"] = pl.String

    assert gtfs_schema("stop_times") == gtfs_schema("stop_times.txt")
    assert "extra" not in gtfs_schema("stop_times")
    assert gtfs_schema("stop_times")["arrival_time"] == pl.String
    assert gtfs_schema_list()[0] == "agency.txt"

    with pytest.raises(IndexError):
        gtfs_schema("shapes.txt")
