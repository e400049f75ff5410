# file: src/swipe_stack/settings.py
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .models import DEFAULT_SEED_PARAMS, DEFAULT_SEED_PLAYLIST_ID, SeedRequest

logger = logging.getLogger(__name__)

# ==============================
# ENV helpers (env is read at call time, not at import)
# ==============================


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return str(v).strip() if v is not None else default


def _env_int(name: str, default: int, min_v: Optional[int] = None, max_v: Optional[int] = None) -> int:
    try:
        v = int(os.getenv(name, str(default)))
    except Exception:
        v = default
    if min_v is not None:
        v = max(min_v, v)
    if max_v is not None:
        v = min(max_v, v)
    return v


def _env_float(name: str, default: float, min_v: Optional[float] = None, max_v: Optional[float] = None) -> float:
    try:
        v = float(os.getenv(name, str(default)))
    except Exception:
        v = default
    if min_v is not None:
        v = max(min_v, v)
    if max_v is not None:
        v = min(max_v, v)
    return v


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "on")


# ==============================
# Settings
# ==============================


class Settings(BaseModel):
    source: str = "http"  # http|supabase

    source_base_url: str = "http://127.0.0.1:8080"
    source_token: str = ""
    source_timeout_seconds: float = 12.0

    seed_playlist_id: str = DEFAULT_SEED_PLAYLIST_ID
    seed_params: str = DEFAULT_SEED_PARAMS

    page_size: int = 20
    user_id: str = ""

    supabase_url: str = ""
    supabase_key: str = ""

    feedback_concurrency: int = 2
    debug_endpoints: bool = False

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = {"extra": "ignore"}

    @property
    def seed(self) -> SeedRequest:
        return SeedRequest(playlist_id=self.seed_playlist_id or None, params=self.seed_params or None)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def load_settings(dotenv: bool = True) -> Settings:
    if dotenv:
        load_dotenv()

    source = _env("SWIPE_SOURCE", "http").lower()
    if source not in ("http", "supabase"):
        logger.warning("Unknown SWIPE_SOURCE=%r, falling back to http", source)
        source = "http"

    return Settings(
        source=source,
        source_base_url=_env("SWIPE_SOURCE_BASE_URL", "http://127.0.0.1:8080").rstrip("/"),
        source_token=_env("SWIPE_SOURCE_TOKEN", ""),
        source_timeout_seconds=_env_float("SWIPE_SOURCE_TIMEOUT_SECONDS", 12.0, 1.0, 120.0),
        seed_playlist_id=_env("SWIPE_SEED_PLAYLIST_ID", DEFAULT_SEED_PLAYLIST_ID),
        seed_params=_env("SWIPE_SEED_PARAMS", DEFAULT_SEED_PARAMS),
        page_size=_env_int("SWIPE_PAGE_SIZE", 20, 1, 50),
        user_id=_env("SWIPE_USER_ID", ""),
        supabase_url=_env("SUPABASE_URL", ""),
        supabase_key=_env("SUPABASE_KEY") or _env("SUPABASE_ANON_KEY") or _env("SUPABASE_SERVICE_KEY"),
        feedback_concurrency=_env_int("SWIPE_FEEDBACK_CONCURRENCY", 2, 1, 8),
        debug_endpoints=_env_bool("SWIPE_DEBUG_ENDPOINTS", False),
        log_level=(_env("SWIPE_LOG_LEVEL", "INFO") or "INFO").upper(),
        host=_env("SWIPE_HOST", "0.0.0.0") or "0.0.0.0",
        port=_env_int("SWIPE_PORT", 8000, 1, 65535),
    )
