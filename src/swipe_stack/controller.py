# file: src/swipe_stack/controller.py
import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .models import Item, Page, Polarity, SeedRequest
from .result import Err, RemoteError
from .source import PagedSource, call_safely
from .tasks import Spawner, TaskRunner

logger = logging.getLogger("swipe.controller")

# replenish as soon as fewer than this many cards are buffered
LOW_WATER_MARK = 5

StackListener = Callable[[Tuple[Item, ...]], None]
ErrorObserver = Callable[[str, RemoteError], None]


class StackController:
    """
    Swipe stack with finite lookahead.

    Owns the item stack, the continuation cursor of the remote source and the
    single-flight guard for replenishment. All mutations happen on the event
    loop that calls the entry points; remote calls are dispatched through the
    spawner and never awaited by on_positive/on_negative.
    """

    def __init__(
        self,
        source: PagedSource,
        seed: Optional[SeedRequest] = None,
        *,
        spawner: Optional[Spawner] = None,
        on_error: Optional[ErrorObserver] = None,
        feedback_concurrency: int = 2,
    ) -> None:
        self._source = source
        self._seed = seed or SeedRequest()
        self._spawner: Spawner = spawner or TaskRunner()
        self._on_error = on_error
        self._feedback_sema = asyncio.Semaphore(max(1, int(feedback_concurrency)))

        self._stack: List[Item] = []
        self._continuation: Optional[str] = None
        self._loading = False

        self._initialized = False
        self._closed = False
        # bumped on close(); results from an older generation are dropped
        self._generation = 0

        self._listeners: List[StackListener] = []

    @classmethod
    def create(cls, source: PagedSource, seed: Optional[SeedRequest] = None, **kwargs) -> "StackController":
        """Construct and kick off the seed fetch. Must be called on a running loop."""
        controller = cls(source, seed, **kwargs)
        controller.start()
        return controller

    def start(self) -> None:
        self._spawner.spawn(self.initialize(), name="swipe-initialize")

    # ==========
    # Read side
    # ==========

    @property
    def stack(self) -> Tuple[Item, ...]:
        return tuple(self._stack)

    @property
    def head(self) -> Optional[Item]:
        return self._stack[0] if self._stack else None

    def peek(self, n: int) -> Tuple[Item, ...]:
        return tuple(self._stack[: max(0, n)])

    @property
    def size(self) -> int:
        return len(self._stack)

    @property
    def continuation(self) -> Optional[str]:
        return self._continuation

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def has_more(self) -> bool:
        return self._continuation is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def seed(self) -> SeedRequest:
        return self._seed

    def subscribe(self, listener: StackListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.stack
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("stack listener failed")

    def _report(self, operation: str, error: RemoteError) -> None:
        logger.warning("%s failed: %s", operation, error)
        if self._on_error is None:
            return
        try:
            self._on_error(operation, error)
        except Exception:
            logger.exception("error observer failed (operation=%s)", operation)

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    # ==========
    # Seed
    # ==========

    async def initialize(self) -> bool:
        if self._initialized:
            logger.warning("initialize() called twice, ignoring")
            return False
        self._initialized = True

        generation = self._generation
        result = await call_safely("initialize", self._source.fetch_page(self._seed))

        if self._is_stale(generation):
            logger.info("Seed page arrived after close, discarded")
            return False

        if isinstance(result, Err):
            self._report("initialize", result.error)
            return False

        page: Page = result.value
        self._continuation = page.continuation
        self._stack = list(page.items)
        logger.info(
            "Seed loaded: items=%d has_more=%s playlist_id=%s",
            len(self._stack),
            self._continuation is not None,
            self._seed.playlist_id,
        )
        self._notify()
        return True

    # ==========
    # Consumption
    # ==========

    def on_positive(self, item: Item) -> None:
        self.consume_with_feedback(item, "positive")

    def on_negative(self, item: Item) -> None:
        self.consume_with_feedback(item, "negative")

    def consume_with_feedback(self, item: Item, polarity: Polarity) -> None:
        if self._closed:
            logger.warning("consume_with_feedback after close ignored (item_id=%s)", item.id)
            return

        # caller is supposed to pass the head; we do not enforce it
        head = self.head
        if head is not None and head.id != item.id:
            logger.warning("Feedback item %s is not the head (%s); removing head anyway", item.id, head.id)

        self._spawner.spawn(self._send_feedback(item.id, polarity), name=f"swipe-feedback-{item.id}")

        if self._stack:
            del self._stack[0]
            self._notify()

        if len(self._stack) < LOW_WATER_MARK:
            self._ensure_replenished()

    async def _send_feedback(self, item_id: str, polarity: Polarity) -> None:
        async with self._feedback_sema:
            result = await call_safely("feedback", self._source.submit_feedback(item_id, polarity))
        if isinstance(result, Err):
            self._report("feedback", result.error)
            return
        logger.debug("feedback sent item_id=%s polarity=%s", item_id, polarity)

    # ==========
    # Replenishment
    # ==========

    def _ensure_replenished(self) -> bool:
        if self._closed or self._loading or self._continuation is None:
            return False

        self._loading = True
        self._spawner.spawn(
            self._replenish(self._continuation, self._generation),
            name="swipe-replenish",
        )
        return True

    async def _replenish(self, cursor: str, generation: int) -> None:
        try:
            result = await call_safely("replenish", self._source.fetch_page(self._seed, cursor))
        finally:
            if generation == self._generation:
                self._loading = False

        if self._is_stale(generation):
            logger.info("Replenish page arrived after close, discarded")
            return

        if isinstance(result, Err):
            self._report("replenish", result.error)
            return

        page: Page = result.value
        self._stack.extend(page.items)
        self._continuation = page.continuation
        logger.info(
            "Replenished: +%d items (size=%d has_more=%s)",
            len(page.items),
            len(self._stack),
            self._continuation is not None,
        )
        self._notify()

    # ==========
    # Test/debug hook and teardown
    # ==========

    _KEEP = object()

    def set_stack_for_test(self, items: Sequence[Item], continuation=_KEEP) -> None:
        """Replace stack (and optionally cursor) without fetching."""
        self._stack = list(items)
        if continuation is not StackController._KEEP:
            self._continuation = continuation
        self._notify()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        self._loading = False
        self._spawner.cancel_all()
        self._listeners.clear()
        logger.info("Controller closed (stack size=%d)", len(self._stack))
