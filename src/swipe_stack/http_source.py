# file: src/swipe_stack/http_source.py
import asyncio
import logging
from typing import Any, Dict, Optional

import requests

from .models import Page, Polarity, SeedRequest, items_from_payload
from .result import ErrorKind, Ok, Result, err

logger = logging.getLogger(__name__)

USER_AGENT = "swipe-stack/0.1 (+requests)"

# polarity -> endpoint
FEEDBACK_PATHS: Dict[str, str] = {
    "positive": "/like",
    "negative": "/dislike",
}


class HttpPagedSource:
    """
    Remote source speaking a small JSON API:

      GET  {base}/next?playlistId=..&params=..      -> {"items": [...], "continuation": "..."}
      GET  {base}/next?continuation=..              -> next page
      POST {base}/like     {"videoId": ".."}
      POST {base}/dislike  {"videoId": ".."}

    requests is blocking, so every call runs in a worker thread.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str = "",
        timeout: float = 12.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    # ==========
    # fetch_page
    # ==========

    @staticmethod
    def _page_params(request: SeedRequest, cursor: Optional[str]) -> Dict[str, str]:
        if cursor is not None:
            # the continuation token already encodes the seed on the server side
            return {"continuation": cursor}

        params: Dict[str, str] = {}
        if request.playlist_id:
            params["playlistId"] = request.playlist_id
        if request.params:
            params["params"] = request.params
        if request.video_id:
            params["videoId"] = request.video_id
        return params

    def _fetch_page_sync(self, request: SeedRequest, cursor: Optional[str]) -> Result[Page]:
        url = self.base_url + "/next"
        params = self._page_params(request, cursor)

        try:
            resp = self.session.get(url, headers=self._headers(), params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout:
            return err(ErrorKind.TIMEOUT, f"GET {url} timed out after {self.timeout}s")
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            return err(ErrorKind.HTTP_STATUS, f"GET {url} failed", status=status)
        except requests.RequestException as e:
            return err(ErrorKind.NETWORK, f"GET {url}: {e}")

        try:
            data = resp.json()
        except ValueError:
            return err(ErrorKind.DECODE, f"GET {url}: response is not JSON")

        return _page_from_json(data)

    async def fetch_page(self, request: SeedRequest, cursor: Optional[str] = None) -> Result[Page]:
        return await asyncio.to_thread(self._fetch_page_sync, request, cursor)

    # ==========
    # submit_feedback
    # ==========

    def _submit_feedback_sync(self, item_id: str, polarity: Polarity) -> Result[None]:
        path = FEEDBACK_PATHS.get(polarity)
        if path is None:
            return err(ErrorKind.UNKNOWN, f"unsupported polarity {polarity!r}")

        url = self.base_url + path
        try:
            resp = self.session.post(url, headers=self._headers(), json={"videoId": item_id}, timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout:
            return err(ErrorKind.TIMEOUT, f"POST {url} timed out after {self.timeout}s")
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            return err(ErrorKind.HTTP_STATUS, f"POST {url} failed for item {item_id}", status=status)
        except requests.RequestException as e:
            return err(ErrorKind.NETWORK, f"POST {url}: {e}")

        return Ok(None)

    async def submit_feedback(self, item_id: str, polarity: Polarity) -> Result[None]:
        return await asyncio.to_thread(self._submit_feedback_sync, item_id, polarity)

    def close(self) -> None:
        self.session.close()


def _page_from_json(data: Any) -> Result[Page]:
    if not isinstance(data, dict):
        return err(ErrorKind.DECODE, f"page payload must be an object, got {type(data).__name__}")

    rows = data.get("items")
    if rows is None:
        rows = []
    if not isinstance(rows, list):
        return err(ErrorKind.DECODE, "page payload 'items' must be a list")

    continuation = data.get("continuation")
    if continuation is not None:
        continuation = str(continuation).strip() or None

    return Ok(Page(items=items_from_payload(rows), continuation=continuation))
