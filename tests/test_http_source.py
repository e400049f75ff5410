"""Tests for HttpPagedSource."""

from unittest.mock import MagicMock

import pytest
import requests

from swipe_stack.http_source import HttpPagedSource
from swipe_stack.models import SeedRequest
from swipe_stack.result import Err, ErrorKind, Ok


def _response(payload=None, status_code=200, bad_json=False):
    resp = MagicMock()
    resp.status_code = status_code
    if bad_json:
        resp.json.side_effect = ValueError("Expecting value")
    else:
        resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error", response=resp)
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def http_source(session):
    return HttpPagedSource("http://music.local/api/", token="secret", timeout=5.0, session=session)


@pytest.mark.asyncio
async def test_seed_page_sends_playlist_and_params(http_source, session):
    session.get.return_value = _response(
        {
            "items": [
                {"id": "v1", "title": "Song 1", "artists": ["Artist A"], "thumbnail": "t1"},
                {"videoId": "v2", "title": "Song 2", "artists": [{"name": "Artist B", "id": "UC2"}]},
            ],
            "continuation": "C1",
        }
    )

    result = await http_source.fetch_page(SeedRequest())

    assert isinstance(result, Ok)
    page = result.value
    assert [i.id for i in page.items] == ["v1", "v2"]
    assert page.items[0].artist_names == ["Artist A"]
    assert page.items[1].artists[0].id == "UC2"
    assert page.continuation == "C1"

    args, kwargs = session.get.call_args
    assert args[0] == "http://music.local/api/next"
    assert kwargs["params"] == {
        "playlistId": "RDTMAK5uy_kset8DisdE7LSD4TNjEVvrKRTmG7a56sY",
        "params": "wAEB",
    }
    assert kwargs["timeout"] == 5.0
    assert kwargs["headers"]["Authorization"] == "Bearer secret"


@pytest.mark.asyncio
async def test_continuation_page_sends_only_cursor(http_source, session):
    session.get.return_value = _response({"items": [], "continuation": None})

    result = await http_source.fetch_page(SeedRequest(), "C1")

    assert isinstance(result, Ok)
    assert result.value.items == []
    assert result.value.continuation is None
    assert session.get.call_args.kwargs["params"] == {"continuation": "C1"}


@pytest.mark.asyncio
async def test_rows_without_id_are_skipped(http_source, session):
    session.get.return_value = _response(
        {"items": [{"title": "no id"}, {"id": "v3", "thumbnails": [{"url": "https://img/3.jpg"}]}, "junk"]}
    )

    result = await http_source.fetch_page(SeedRequest())

    assert [i.id for i in result.value.items] == ["v3"]
    assert result.value.items[0].thumbnail == "https://img/3.jpg"


@pytest.mark.asyncio
async def test_blank_continuation_means_last_page(http_source, session):
    session.get.return_value = _response({"items": [{"id": "v1"}], "continuation": "  "})

    result = await http_source.fetch_page(SeedRequest(), "C5")

    assert result.value.continuation is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "side_effect, kind",
    [
        (requests.Timeout("read timed out"), ErrorKind.TIMEOUT),
        (requests.ConnectionError("connection refused"), ErrorKind.NETWORK),
    ],
)
async def test_transport_errors_map_to_err(http_source, session, side_effect, kind):
    session.get.side_effect = side_effect

    result = await http_source.fetch_page(SeedRequest())

    assert isinstance(result, Err)
    assert result.error.kind == kind


@pytest.mark.asyncio
async def test_http_status_error_keeps_status(http_source, session):
    session.get.return_value = _response({}, status_code=503)

    result = await http_source.fetch_page(SeedRequest(), "C1")

    assert isinstance(result, Err)
    assert result.error.kind == ErrorKind.HTTP_STATUS
    assert result.error.status == 503


@pytest.mark.asyncio
async def test_non_json_body_is_decode_error(http_source, session):
    session.get.return_value = _response(bad_json=True)

    result = await http_source.fetch_page(SeedRequest())

    assert isinstance(result, Err)
    assert result.error.kind == ErrorKind.DECODE


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [["not", "an", "object"], {"items": "nope"}])
async def test_malformed_page_is_decode_error(http_source, session, payload):
    session.get.return_value = _response(payload)

    result = await http_source.fetch_page(SeedRequest())

    assert isinstance(result, Err)
    assert result.error.kind == ErrorKind.DECODE


@pytest.mark.asyncio
async def test_like_and_dislike_endpoints(http_source, session):
    session.post.return_value = _response({"ok": True})

    assert isinstance(await http_source.submit_feedback("v1", "positive"), Ok)
    assert isinstance(await http_source.submit_feedback("v2", "negative"), Ok)

    calls = session.post.call_args_list
    assert calls[0].args[0] == "http://music.local/api/like"
    assert calls[0].kwargs["json"] == {"videoId": "v1"}
    assert calls[1].args[0] == "http://music.local/api/dislike"
    assert calls[1].kwargs["json"] == {"videoId": "v2"}


@pytest.mark.asyncio
async def test_feedback_http_error(http_source, session):
    session.post.return_value = _response({}, status_code=401)

    result = await http_source.submit_feedback("v1", "positive")

    assert isinstance(result, Err)
    assert result.error.status == 401


@pytest.mark.asyncio
async def test_feedback_unknown_polarity(http_source, session):
    result = await http_source.submit_feedback("v1", "meh")

    assert isinstance(result, Err)
    session.post.assert_not_called()


def test_no_token_no_auth_header(session):
    source = HttpPagedSource("http://music.local", session=session)

    assert "Authorization" not in source._headers()
