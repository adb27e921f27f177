import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Type, TypeVar

from aiohttp import ClientError

from cp_gtfs.runtime_utils.feed_exception import FeedException, ProviderException
from cp_gtfs.runtime_utils.process_logger import ProcessLogger

T = TypeVar("T")

WorkUnit = Callable[[], Awaitable[T]]

# failures of a single provider request. anything else raised by a work unit
# fails the whole batch.
RECOVERABLE_ERRORS: Tuple[Type[BaseException], ...] = (
    ProviderException,
    ClientError,
    asyncio.TimeoutError,
)


async def provider_call(request: Awaitable[T]) -> T:
    """
    await a single provider request. a failure that is not already a feed or
    transport error (ie. a truncated json body raising ValueError) is raised
    as a ProviderException so the request degrades instead of failing the
    batch.
    """
    try:
        return await request
    except (FeedException,) + RECOVERABLE_ERRORS:
        raise
    except Exception as exception:
        raise ProviderException(f"provider request failed with {type(exception).__name__}: {exception}") from exception


async def run_bounded(
    work: Sequence[WorkUnit[T]],
    concurrency: int = 16,
    fallback: Optional[Callable[[], T]] = None,
    recoverable: Tuple[Type[BaseException], ...] = RECOVERABLE_ERRORS,
    process_name: str = "run_bounded",
) -> List[Optional[T]]:
    """
    run independent async work units with at most `concurrency` of them in
    flight at once.

    a unit raising one of the `recoverable` exceptions is logged as a warning
    and its result replaced with `fallback()` (None without a fallback).
    other exceptions cancel the remaining units and are raised.

    :return results in the order of `work`, regardless of completion order
    """
    if concurrency < 1:
        raise ValueError(f"concurrency must be at least 1, got {concurrency}")

    semaphore = asyncio.Semaphore(concurrency)

    async def settle(index: int, unit: WorkUnit[T]) -> Optional[T]:
        async with semaphore:
            try:
                return await unit()
            except recoverable as exception:
                ProcessLogger(process_name, unit_index=index, unit_count=len(work)).log_warning(exception)
                return fallback() if fallback is not None else None

    tasks = [asyncio.ensure_future(settle(index, unit)) for index, unit in enumerate(work)]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


async def with_retries(
    request: WorkUnit[T],
    max_attempts: int = 3,
    timeout: float = 10.0,
    sleep_interval: float = 0.0,
    recoverable: Tuple[Type[BaseException], ...] = RECOVERABLE_ERRORS,
    process_name: str = "with_retries",
) -> T:
    """
    run a single request with a timeout on every attempt, retrying recoverable
    failures up to `max_attempts` attempts in total. the error of the last
    attempt is raised.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            return await asyncio.wait_for(request(), timeout)
        except recoverable as exception:
            if attempt == max_attempts:
                raise
            ProcessLogger(process_name, attempt=attempt, max_attempts=max_attempts).log_warning(exception)
            await asyncio.sleep(sleep_interval)

    # unreachable, the last attempt either returns or raises
    raise AssertionError("with_retries exhausted without result")
