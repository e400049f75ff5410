# file: src/swipe_stack/source.py
import logging
from typing import Awaitable, Optional, Protocol, TypeVar

from .models import Page, Polarity, SeedRequest
from .result import Err, ErrorKind, Ok, RemoteError, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PagedSource(Protocol):
    """
    Remote paged source of swipe items.

    fetch_page(request) returns the seed page; fetch_page(request, cursor)
    continues a prior page sequence. A page with continuation=None is the last.
    submit_feedback is fire-and-forget for the caller: its value is never used,
    only its failure is reported.
    """

    async def fetch_page(self, request: SeedRequest, cursor: Optional[str] = None) -> Result[Page]: ...

    async def submit_feedback(self, item_id: str, polarity: Polarity) -> Result[None]: ...


async def call_safely(operation: str, call: Awaitable[Result[T]]) -> Result[T]:
    """
    Await a source call and make sure nothing but a Result comes out of it.
    Sources are expected to map their own failures; anything that still
    escapes is a bug in the source and is logged with traceback.
    """
    try:
        result = await call
    except Exception as e:
        logger.exception("Source call '%s' raised instead of returning Err", operation)
        return Err(RemoteError(kind=ErrorKind.UNKNOWN, message=f"{type(e).__name__}: {e}"))

    if isinstance(result, (Ok, Err)):
        return result

    logger.error("Source call '%s' returned %r instead of a Result", operation, type(result).__name__)
    return Err(RemoteError(kind=ErrorKind.UNKNOWN, message="source returned a non-Result value"))
