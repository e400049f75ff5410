# file: src/swipe_stack/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from supabase import Client, create_client

from .controller import LOW_WATER_MARK, StackController
from .http_source import HttpPagedSource
from .models import Item
from .result import RemoteError
from .settings import Settings, load_settings
from .source import PagedSource
from .supabase_source import SupabasePagedSource

logger = logging.getLogger("swipe.webapp")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# visible card window the UI renders
DEFAULT_VISIBLE_CARDS = 3


# ==========
# Request bodies
# ==========


class FeedbackRequest(BaseModel):
    item_id: str

    model_config = {"extra": "ignore"}


class StackOverride(BaseModel):
    items: List[Item]
    continuation: Optional[str] = None

    model_config = {"extra": "ignore"}


# ==========
# Wiring
# ==========


def build_source(settings: Settings) -> PagedSource:
    if settings.source == "supabase":
        supabase: Optional[Client] = None
        if settings.supabase_configured:
            try:
                supabase = create_client(settings.supabase_url, settings.supabase_key)
                logger.info("Supabase client initialized for swipe source")
            except Exception:
                logger.exception("Failed to init Supabase client")
                supabase = None
        else:
            logger.warning("Supabase URL/KEY are not set. Swipe stack will stay empty.")
        return SupabasePagedSource(supabase, page_size=settings.page_size, user_id=settings.user_id)

    return HttpPagedSource(
        settings.source_base_url,
        token=settings.source_token,
        timeout=settings.source_timeout_seconds,
    )


def _log_remote_error(operation: str, error: RemoteError) -> None:
    # controller already logs; keep a per-kind line for log-based alerting
    logger.info("remote_error operation=%s kind=%s status=%s", operation, error.kind.value, error.status)


def create_app(
    settings: Optional[Settings] = None,
    source_factory: Callable[[Settings], PagedSource] = build_source,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        source = source_factory(settings)
        controller = StackController(
            source,
            settings.seed,
            on_error=_log_remote_error,
            feedback_concurrency=settings.feedback_concurrency,
        )
        app.state.controller = controller
        logger.info(
            "Startup OK. source=%s seed=%s low_water_mark=%d debug_endpoints=%s",
            settings.source,
            settings.seed_playlist_id,
            LOW_WATER_MARK,
            settings.debug_endpoints,
        )
        await controller.initialize()
        try:
            yield
        finally:
            controller.close()
            close = getattr(source, "close", None)
            if callable(close):
                close()
            logger.info("Shutdown OK")

    app = FastAPI(title="Swipe Stack", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api = APIRouter(prefix="/api")

    def _controller(request: Request) -> StackController:
        return request.app.state.controller

    def _snapshot(controller: StackController, limit: int) -> Dict[str, Any]:
        return {
            "items": [item.model_dump() for item in controller.peek(limit)],
            "size": controller.size,
            "loading": controller.is_loading,
            "has_more": controller.has_more,
        }

    # ==========
    # Non-API routes
    # ==========

    @app.get("/ping")
    async def ping() -> Dict[str, Any]:
        return {"status": "ok", "service": "swipe-stack"}

    @app.get("/health")
    async def health(request: Request) -> Dict[str, Any]:
        controller = _controller(request)
        return {
            "ok": True,
            "service": "swipe-stack",
            "ts": datetime.now(timezone.utc).isoformat(),
            "source": settings.source,
            "stack_size": controller.size,
            "loading": controller.is_loading,
            "has_more": controller.has_more,
        }

    # ==========
    # API routes
    # ==========

    @api.get("/stack")
    async def api_stack(
        request: Request,
        limit: int = Query(DEFAULT_VISIBLE_CARDS, ge=1, le=50),
    ) -> Dict[str, Any]:
        return _snapshot(_controller(request), limit)

    def _consume(request: Request, payload: FeedbackRequest, positive: bool) -> Dict[str, Any]:
        controller = _controller(request)
        head = controller.head
        if head is None:
            raise HTTPException(status_code=409, detail="stack is empty")

        # feedback is reported for the card the client swiped; the head is removed either way
        item = next((i for i in controller.stack if i.id == payload.item_id), None)
        if item is None:
            item = head
        if positive:
            controller.on_positive(item)
        else:
            controller.on_negative(item)
        return _snapshot(controller, DEFAULT_VISIBLE_CARDS)

    @api.post("/stack/like")
    async def api_like(request: Request, payload: FeedbackRequest) -> Dict[str, Any]:
        return _consume(request, payload, positive=True)

    @api.post("/stack/dislike")
    async def api_dislike(request: Request, payload: FeedbackRequest) -> Dict[str, Any]:
        return _consume(request, payload, positive=False)

    @api.put("/stack")
    async def api_override_stack(request: Request, payload: StackOverride) -> Dict[str, Any]:
        if not settings.debug_endpoints:
            raise HTTPException(status_code=404, detail="Not Found")
        controller = _controller(request)
        controller.set_stack_for_test(payload.items, continuation=payload.continuation)
        logger.info("Stack overridden via debug endpoint: size=%d", controller.size)
        return _snapshot(controller, DEFAULT_VISIBLE_CARDS)

    app.include_router(api)
    return app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO), format=LOG_FORMAT)

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
