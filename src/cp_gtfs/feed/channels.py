"""
Named output channels of a feed. Each channel yields its header row followed
by its data rows to whatever sink consumes it; encoding and storage are up to
the sink.
"""

import asyncio
from typing import Any, AsyncIterator, Dict, Iterable, Iterator, List, Sequence, Tuple, Union

from cp_gtfs.runtime_utils.feed_exception import ChannelClosedError

Row = List[Any]

# marks the end of a streamed channel
_END_OF_STREAM = object()


class StaticChannel:
    """channel with a header and rows fixed at creation"""

    streamed = False

    def __init__(self, name: str, header: Sequence[str], rows: Iterable[Row]) -> None:
        self.name = name
        self.header = list(header)
        self.rows = [list(row) for row in rows]

    def __len__(self) -> int:
        return len(self.rows)

    async def __aiter__(self) -> AsyncIterator[Row]:
        yield list(self.header)
        for row in self.rows:
            yield row


class StreamedChannel:
    """
    channel whose rows are pushed while the feed is being built. the header
    is queued on creation, close() ends the stream and must be called exactly
    once after the final row.

    rows are handed out once. a read of a closed channel that was already
    drained ends without rows.
    """

    streamed = True

    def __init__(self, name: str, header: Sequence[str]) -> None:
        self.name = name
        self.header = list(header)
        self.row_count = 0
        self.closed = False
        self._queue: "asyncio.Queue[Union[Row, object]]" = asyncio.Queue()
        self._queue.put_nowait(list(self.header))

    def push(self, row: Row) -> None:
        """queue a data row for consumers"""
        if self.closed:
            raise ChannelClosedError(self.name)
        self._queue.put_nowait(list(row))
        self.row_count += 1

    def close(self) -> None:
        """end the stream"""
        if self.closed:
            raise ChannelClosedError(self.name)
        self.closed = True
        self._queue.put_nowait(_END_OF_STREAM)

    async def __aiter__(self) -> AsyncIterator[Row]:
        while True:
            item = await self._queue.get()
            if item is _END_OF_STREAM:
                # leave the end marker for any later read of the drained channel
                self._queue.put_nowait(_END_OF_STREAM)
                return
            yield item  # type: ignore[misc]


Channel = Union[StaticChannel, StreamedChannel]


class Feed:
    """ordered mapping of gtfs table name (ie. stop_times) to its channel"""

    def __init__(self, channels: Iterable[Channel]) -> None:
        self._channels: Dict[str, Channel] = {}
        for channel in channels:
            if channel.name in self._channels:
                raise ValueError(f"duplicate feed channel {channel.name}")
            self._channels[channel.name] = channel

    def __getitem__(self, name: str) -> Channel:
        return self._channels[name]

    def __contains__(self, name: object) -> bool:
        return name in self._channels

    def __iter__(self) -> Iterator[str]:
        return iter(self._channels)

    def __len__(self) -> int:
        return len(self._channels)

    def items(self) -> List[Tuple[str, Channel]]:
        """(table name, channel) pairs in feed order"""
        return list(self._channels.items())

    def stream(self, name: str) -> StreamedChannel:
        """streamed channel by table name"""
        channel = self._channels[name]
        if not isinstance(channel, StreamedChannel):
            raise TypeError(f"feed channel {name} is not streamed")
        return channel

    def streamed(self) -> List[StreamedChannel]:
        """all streamed channels in feed order"""
        return [channel for channel in self._channels.values() if isinstance(channel, StreamedChannel)]

    def close_streams(self) -> None:
        """close every streamed channel that is still open"""
        for channel in self.streamed():
            if not channel.closed:
                channel.close()
