# file: src/swipe_stack/supabase_source.py
import asyncio
import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from .models import POLARITIES, Page, Polarity, SeedRequest, items_from_payload
from .result import ErrorKind, Ok, Result, err

logger = logging.getLogger(__name__)

TRACKS_TABLE = "playlist_tracks"
FEEDBACK_TABLE = "track_feedback"

TRACK_COLUMNS = "id,playlist_id,position,title,artists,thumbnail"

# ===================== Cursor helpers (object cursor) =====================


def _encode_cursor_obj(obj: Dict[str, Any]) -> str:
    raw = json.dumps(obj, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _decode_cursor_obj(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if token is None:
        return None
    t = str(token).strip()
    if t == "":
        return None
    try:
        pad = "=" * (-len(t) % 4)
        raw = base64.urlsafe_b64decode((t + pad).encode("utf-8")).decode("utf-8")
        obj = json.loads(raw)
        return obj if isinstance(obj, dict) else None
    except Exception:
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _resp_data(resp: Any) -> List[Dict[str, Any]]:
    data = getattr(resp, "data", None)
    if data is None:
        data = getattr(resp, "model", None)
    return data or []


# ===================== Source =====================


class SupabasePagedSource:
    """
    Pages a playlist out of the playlist_tracks table.

    Cursor = {"mode": "pos", "playlist_id": ..., "after": <last position>}.
    One extra row is requested to know whether another page exists, so the
    last page carries continuation=None.
    """

    def __init__(self, supabase: Optional[Client], *, page_size: int = 20, user_id: str = "") -> None:
        self.supabase = supabase
        self.page_size = min(max(int(page_size), 1), 50)
        self.user_id = user_id

    # ==========
    # fetch_page
    # ==========

    def _fetch_page_sync(self, request: SeedRequest, cursor: Optional[str]) -> Result[Page]:
        if self.supabase is None:
            return err(ErrorKind.NOT_CONFIGURED, "Supabase is not configured")

        playlist_id = request.playlist_id
        after: Optional[int] = None

        if cursor is not None:
            cur_obj = _decode_cursor_obj(cursor)
            if not cur_obj or cur_obj.get("mode") != "pos":
                return err(ErrorKind.DECODE, f"bad cursor {cursor!r}")
            after = _safe_int(cur_obj.get("after"))
            if after is None:
                return err(ErrorKind.DECODE, f"cursor without position {cursor!r}")
            playlist_id = cur_obj.get("playlist_id") or playlist_id

        if not playlist_id:
            return err(ErrorKind.NOT_CONFIGURED, "seed request has no playlist_id")

        query = (
            self.supabase.table(TRACKS_TABLE)
            .select(TRACK_COLUMNS)
            .eq("playlist_id", playlist_id)
        )
        if after is not None:
            query = query.gt("position", after)

        try:
            resp = query.order("position").limit(self.page_size + 1).execute()
        except Exception as e:
            logger.exception("Error fetching %s page (playlist_id=%s after=%s)", TRACKS_TABLE, playlist_id, after)
            return err(ErrorKind.NETWORK, f"{TRACKS_TABLE} query failed: {e}")

        rows = _resp_data(resp)
        has_more = len(rows) > self.page_size
        rows = rows[: self.page_size]

        next_cursor: Optional[str] = None
        if has_more and rows:
            last_pos = _safe_int(rows[-1].get("position"))
            if last_pos is None:
                logger.warning("Last row of %s has no position; ending pagination", playlist_id)
            else:
                next_cursor = _encode_cursor_obj({"mode": "pos", "playlist_id": playlist_id, "after": last_pos})

        logger.debug(
            "Fetched %d rows from %s (playlist_id=%s after=%s has_more=%s)",
            len(rows),
            TRACKS_TABLE,
            playlist_id,
            after,
            next_cursor is not None,
        )
        return Ok(Page(items=items_from_payload(rows), continuation=next_cursor))

    async def fetch_page(self, request: SeedRequest, cursor: Optional[str] = None) -> Result[Page]:
        return await asyncio.to_thread(self._fetch_page_sync, request, cursor)

    # ==========
    # submit_feedback
    # ==========

    def _submit_feedback_sync(self, item_id: str, polarity: Polarity) -> Result[None]:
        if self.supabase is None:
            return err(ErrorKind.NOT_CONFIGURED, "Supabase is not configured")
        if polarity not in POLARITIES:
            return err(ErrorKind.UNKNOWN, f"unsupported polarity {polarity!r}")

        row = {
            "user_id": self.user_id,
            "track_id": item_id,
            "polarity": polarity,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        # upsert: swiping the same track twice keeps the latest verdict
        try:
            self.supabase.table(FEEDBACK_TABLE).upsert(row, on_conflict="user_id,track_id").execute()
        except Exception as e:
            logger.exception("Failed to upsert %s for track_id=%s", FEEDBACK_TABLE, item_id)
            return err(ErrorKind.NETWORK, f"{FEEDBACK_TABLE} upsert failed: {e}")

        return Ok(None)

    async def submit_feedback(self, item_id: str, polarity: Polarity) -> Result[None]:
        return await asyncio.to_thread(self._submit_feedback_sync, item_id, polarity)
