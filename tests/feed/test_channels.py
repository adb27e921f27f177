import asyncio

import pytest

from cp_gtfs.feed.channels import Feed, StaticChannel, StreamedChannel
from cp_gtfs.runtime_utils.feed_exception import ChannelClosedError
from tests.test_resources import collect


@pytest.mark.asyncio
async def test_static_channel() -> None:
    """It yields the header then every row, and can be read again."""
    channel = StaticChannel("calendar_dates", ["service_id", "date", "exception_type"], [["123", "20200101", 1]])

    assert len(channel) == 1
    assert not channel.streamed
    assert await collect(channel) == [["service_id", "date", "exception_type"], ["123", "20200101", 1]]
    assert await collect(channel) == [["service_id", "date", "exception_type"], ["123", "20200101", 1]]


@pytest.mark.asyncio
async def test_streamed_channel() -> None:
    """It yields the header, pushed rows in push order and ends on close."""
    channel = StreamedChannel("trips", ["trip_id"])
    channel.push(["1"])
    channel.push(["2"])
    channel.close()

    assert channel.streamed
    assert channel.row_count == 2
    assert await collect(channel) == [["trip_id"], ["1"], ["2"]]


@pytest.mark.asyncio
async def test_streamed_channel_header_only() -> None:
    """It yields only the header when closed without rows."""
    channel = StreamedChannel("trips", ["trip_id"])
    channel.close()

    assert await collect(channel) == [["trip_id"]]


@pytest.mark.asyncio
async def test_streamed_channel_consumed_while_pushing() -> None:
    """It hands rows to a consumer that started before the rows were pushed."""
    channel = StreamedChannel("stop_times", ["trip_id"])
    consumer = asyncio.create_task(collect(channel))

    for trip_id in ["1", "2", "3"]:
        await asyncio.sleep(0)
        channel.push([trip_id])
    channel.close()

    assert await consumer == [["trip_id"], ["1"], ["2"], ["3"]]


def test_streamed_channel_closed_twice() -> None:
    """It refuses rows and a second close once closed."""
    channel = StreamedChannel("trips", ["trip_id"])
    channel.close()

    with pytest.raises(ChannelClosedError):
        channel.push(["1"])
    with pytest.raises(ChannelClosedError):
        channel.close()


def test_feed() -> None:
    """It keeps channels by name in the given order."""
    agency = StaticChannel("agency", ["agency_id"], [["cp"]])
    trips = StreamedChannel("trips", ["trip_id"])
    feed = Feed([agency, trips])

    assert list(feed) == ["agency", "trips"]
    assert len(feed) == 2
    assert "trips" in feed
    assert "shapes" not in feed
    assert feed["agency"] is agency
    assert feed.stream("trips") is trips
    assert feed.streamed() == [trips]

    with pytest.raises(TypeError):
        feed.stream("agency")
    with pytest.raises(KeyError):
        feed.stream("shapes")


def test_feed_duplicate_names() -> None:
    """It rejects two channels with the same name."""
    with pytest.raises(ValueError):
        Feed([StaticChannel("agency", ["agency_id"], []), StaticChannel("agency", ["agency_id"], [])])


def test_close_streams() -> None:
    """It closes only the streamed channels that are still open."""
    trips = StreamedChannel("trips", ["trip_id"])
    stop_times = StreamedChannel("stop_times", ["trip_id"])
    stop_times.close()
    feed = Feed([StaticChannel("agency", ["agency_id"], []), trips, stop_times])

    feed.close_streams()

    assert trips.closed
    assert stop_times.closed


@pytest.mark.asyncio
async def test_streamed_channel_read_after_drain() -> None:
    """It ends a read of a closed channel that was already drained instead of waiting for rows."""
    channel = StreamedChannel("trips", ["trip_id"])
    channel.push(["1"])
    channel.close()

    assert await collect(channel) == [["trip_id"], ["1"]]
    assert await asyncio.wait_for(collect(channel), 1.0) == []
    assert await asyncio.wait_for(collect(channel), 1.0) == []
