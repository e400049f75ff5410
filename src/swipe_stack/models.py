# file: src/swipe_stack/models.py
import logging
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# ==============================
# Feedback polarity
# ==============================

# "positive": swipe right (like)
# "negative": swipe left (dislike)
Polarity = Literal["positive", "negative"]

POLARITIES = ("positive", "negative")

# curated radio that opens a swipe session ("My Supermix")
DEFAULT_SEED_PLAYLIST_ID = "RDTMAK5uy_kset8DisdE7LSD4TNjEVvrKRTmG7a56sY"
DEFAULT_SEED_PARAMS = "wAEB"


# ==============================
# Items
# ==============================

class Artist(BaseModel):
    name: str
    id: Optional[str] = None

    model_config = {"extra": "ignore", "frozen": True}


class Item(BaseModel):
    """
    One swipeable card.

    Identity is the id: two Items with the same id compare equal even when
    their display metadata differs (a refreshed thumbnail must not look like
    a different card to the UI diff).
    """

    id: str = Field(min_length=1)
    title: str = ""
    artists: List[Artist] = Field(default_factory=list)
    thumbnail: Optional[str] = None

    model_config = {"extra": "ignore", "frozen": True}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Item):
            return self.id == other.id
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def artist_names(self) -> List[str]:
        return [a.name for a in self.artists]


class SeedRequest(BaseModel):
    """
    What the session is about: a playlist/radio plus its params.
    The same request is sent with every continuation.
    """

    playlist_id: Optional[str] = DEFAULT_SEED_PLAYLIST_ID
    params: Optional[str] = DEFAULT_SEED_PARAMS
    video_id: Optional[str] = None

    model_config = {"extra": "ignore", "frozen": True}


class Page(BaseModel):
    items: List[Item] = Field(default_factory=list)
    continuation: Optional[str] = None

    model_config = {"extra": "ignore"}


# ==============================
# Payload helpers (tolerant parsing of remote rows)
# ==============================

def _parse_artists(raw: Any) -> List[Artist]:
    if raw is None:
        return []
    if isinstance(raw, str):
        # "Artist A, Artist B"
        return [Artist(name=n.strip()) for n in raw.split(",") if n.strip()]
    if not isinstance(raw, (list, tuple)):
        return []

    out: List[Artist] = []
    for a in raw:
        if isinstance(a, str):
            if a.strip():
                out.append(Artist(name=a.strip()))
        elif isinstance(a, dict):
            name = str(a.get("name") or "").strip()
            if not name:
                continue
            aid = a.get("id") or a.get("browseId")
            out.append(Artist(name=name, id=str(aid) if aid else None))
    return out


def _parse_thumbnail(row: Dict[str, Any]) -> Optional[str]:
    thumb = row.get("thumbnail")
    if isinstance(thumb, str) and thumb.strip():
        return thumb.strip()

    thumbs = row.get("thumbnails")
    if isinstance(thumbs, list):
        for t in thumbs:
            if isinstance(t, dict) and t.get("url"):
                return str(t["url"])
            if isinstance(t, str) and t.strip():
                return t.strip()
    return None


def item_from_payload(row: Any) -> Optional[Item]:
    """
    Build an Item from a remote row. Returns None when the row has no usable id.
    Accepts both `id` and `videoId` naming.
    """
    if not isinstance(row, dict):
        return None

    raw_id = row.get("id")
    if raw_id is None:
        raw_id = row.get("videoId") or row.get("video_id")
    if raw_id is None or str(raw_id).strip() == "":
        return None

    return Item(
        id=str(raw_id).strip(),
        title=str(row.get("title") or ""),
        artists=_parse_artists(row.get("artists")),
        thumbnail=_parse_thumbnail(row),
    )


def items_from_payload(rows: Any) -> List[Item]:
    if not isinstance(rows, list):
        return []

    out: List[Item] = []
    skipped = 0
    for row in rows:
        item = item_from_payload(row)
        if item is None:
            skipped += 1
            continue
        out.append(item)

    if skipped:
        logger.warning("Skipped %d item rows without id (kept=%d)", skipped, len(out))
    return out
