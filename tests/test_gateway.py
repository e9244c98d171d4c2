"""
Tests for the request gateway.
"""

import httpx
import pytest

from notionrecords.api import RequestGateway
from notionrecords.cache import ResponseCache
from notionrecords.config import CACHE_DISABLED
from notionrecords.errors import RemoteRequestFailed


def make_gateway(handler, lifetime=0):
    cache = ResponseCache(":memory:", lifetime=lifetime)
    cache.connect()
    gateway = RequestGateway(
        "https://workspace.test/api/v3",
        "secret-token",
        cache,
        transport=httpx.MockTransport(handler),
    )
    return gateway, cache


def test_post_sends_json_with_session_cookie():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    gateway, cache = make_gateway(handler)
    with gateway:
        assert gateway.post("loadPageChunk", {"pageId": "abc"}) == {"ok": True}

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v3/loadPageChunk"
    assert request.headers["content-type"].startswith("application/json")
    assert "token_v2=secret-token" in request.headers["cookie"]
    assert request.content == b'{"pageId": "abc"}'
    cache.disconnect()


def test_empty_body_is_sent_as_empty_object():
    bodies = []

    def handler(request):
        bodies.append(request.content)
        return httpx.Response(200, json={})

    gateway, cache = make_gateway(handler)
    gateway.post("loadUserContent")
    gateway.post("loadUserContent", {})

    assert bodies == [b"{}", b"{}"]
    gateway.close()
    cache.disconnect()


def test_execute_replays_cached_response():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"n": len(calls)})

    gateway, cache = make_gateway(handler)

    assert gateway.execute("key", "getRecordValues", {"requests": []}) == {"n": 1}
    assert gateway.execute("key", "getRecordValues", {"requests": []}) == {"n": 1}
    assert gateway.execute("other", "getRecordValues", {"requests": []}) == {"n": 2}
    assert len(calls) == 2
    gateway.close()
    cache.disconnect()


def test_execute_with_caching_disabled_always_hits_network():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"n": len(calls)})

    gateway, cache = make_gateway(handler, lifetime=CACHE_DISABLED)

    assert gateway.execute("key", "loadPageChunk") == {"n": 1}
    assert gateway.execute("key", "loadPageChunk") == {"n": 2}
    gateway.close()


def test_http_error_raises_remote_request_failed():
    gateway, cache = make_gateway(lambda request: httpx.Response(401, json={"errorId": "unauthorized"}))

    with pytest.raises(RemoteRequestFailed) as excinfo:
        gateway.execute("key", "loadPageChunk", {"pageId": "x"})

    assert excinfo.value.operation == "loadPageChunk"
    assert excinfo.value.status_code == 401
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)
    # Failures are not cached
    assert not cache.has("key")
    gateway.close()
    cache.disconnect()


def test_transport_error_raises_remote_request_failed():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    gateway, cache = make_gateway(handler)

    with pytest.raises(RemoteRequestFailed) as excinfo:
        gateway.post("saveTransactions", {"transactions": []})

    assert excinfo.value.operation == "saveTransactions"
    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
    gateway.close()
    cache.disconnect()


def test_non_json_response_raises_remote_request_failed():
    gateway, cache = make_gateway(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(RemoteRequestFailed) as excinfo:
        gateway.post("loadPageChunk", {"pageId": "x"})

    assert excinfo.value.status_code == 200
    gateway.close()
    cache.disconnect()


def test_non_object_json_raises_remote_request_failed():
    gateway, cache = make_gateway(lambda request: httpx.Response(200, json=[1, 2]))

    with pytest.raises(RemoteRequestFailed):
        gateway.post("loadPageChunk", {"pageId": "x"})
    gateway.close()
    cache.disconnect()


def test_empty_response_body_decodes_to_empty_dict():
    gateway, cache = make_gateway(lambda request: httpx.Response(200, content=b""))

    assert gateway.post("submitTransaction", {"operations": []}) == {}
    gateway.close()
    cache.disconnect()
