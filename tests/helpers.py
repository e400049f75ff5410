"""Fakes shared by the test modules."""

from typing import Any, Coroutine, List, Optional, Tuple

from swipe_stack.models import Item, Page, SeedRequest
from swipe_stack.result import Ok, Result


def make_item(item_id: str, title: Optional[str] = None) -> Item:
    return Item(id=item_id, title=title or f"Song {item_id}", artists=[], thumbnail=f"thumb{item_id}")


def make_items(*ids: str) -> List[Item]:
    return [make_item(i) for i in ids]


class FakeSource:
    """Records every call; fetch results are queued per call."""

    def __init__(self) -> None:
        self.pages: List[Result[Page]] = []
        self.feedback_results: List[Result[None]] = []
        self.fetch_calls: List[Tuple[SeedRequest, Optional[str]]] = []
        self.feedback_calls: List[Tuple[str, str]] = []

    def queue_page(self, items: List[Item], continuation: Optional[str] = None) -> None:
        self.pages.append(Ok(Page(items=items, continuation=continuation)))

    async def fetch_page(self, request: SeedRequest, cursor: Optional[str] = None) -> Result[Page]:
        self.fetch_calls.append((request, cursor))
        if self.pages:
            return self.pages.pop(0)
        return Ok(Page(items=[], continuation=None))

    async def submit_feedback(self, item_id: str, polarity: str) -> Result[None]:
        self.feedback_calls.append((item_id, polarity))
        if self.feedback_results:
            return self.feedback_results.pop(0)
        return Ok(None)


class ManualSpawner:
    """Queues background work instead of running it; tests step it explicitly."""

    def __init__(self) -> None:
        self.queue: List[Tuple[Optional[str], Coroutine[Any, Any, Any]]] = []

    @property
    def names(self) -> List[Optional[str]]:
        return [name for name, _ in self.queue]

    def spawn(self, coro: Coroutine[Any, Any, Any], name: Optional[str] = None) -> None:
        self.queue.append((name, coro))

    async def run_next(self) -> Optional[str]:
        name, coro = self.queue.pop(0)
        await coro
        return name

    async def run_all(self) -> None:
        while self.queue:
            await self.run_next()

    def cancel_all(self) -> None:
        for _, coro in self.queue:
            coro.close()
        self.queue.clear()


