import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from subgraph_sql.core.errors import CancellationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_cancellable(
    awaitable: Awaitable[T], cancel_event: Optional[asyncio.Event] = None
) -> T:
    """
    Await a network call, aborting it if cancel_event gets set first.

    The caller owns the event and can set it from anywhere (a deadline
    timer, a shutdown hook, another request). An event that is already
    set aborts before anything is sent.

    Raises:
        CancellationError: the event fired before the call finished
    """
    if cancel_event is None:
        return await awaitable

    if cancel_event.is_set():
        if asyncio.iscoroutine(awaitable):
            awaitable.close()
        raise CancellationError("Request aborted before it was sent")

    request = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait(
            {request, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        # Our own task got cancelled, take both children down with it
        request.cancel()
        waiter.cancel()
        raise

    if request in done:
        waiter.cancel()
        return request.result()

    request.cancel()
    try:
        await request
    except asyncio.CancelledError:
        pass
    logger.warning("Request aborted by cancel event")
    raise CancellationError("Request aborted by cancel event")
