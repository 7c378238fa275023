"""Unit tests for providers/remote.py"""

import httpx
import pytest

from blogpub.providers.remote import HttpRemoteProvider, RemoteUnavailable


def _provider(handler):
    return HttpRemoteProvider("http://admin.test/", timeout=1.0, transport=httpx.MockTransport(handler))


def test_fetch_returns_envelope():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"success": True, "posts": [{"slug": "a"}]})

    data = _provider(handler).fetch("/posts", {"status": "published", "tag": "python"})
    assert data["posts"] == [{"slug": "a"}]
    assert requests[0].url.path == "/api/posts"
    assert requests[0].url.params["status"] == "published"
    assert requests[0].url.params["tag"] == "python"


def test_fetch_without_success_key():
    data = _provider(lambda r: httpx.Response(200, json={"categories": []})).fetch("/categories")
    assert data == {"categories": []}


@pytest.mark.parametrize("response", [
    httpx.Response(500, json={"success": False}),
    httpx.Response(404, text="not found"),
    httpx.Response(200, json={"success": False, "error": "db down"}),
    httpx.Response(200, text="<html>oops</html>"),
    httpx.Response(200, json=["not", "an", "object"]),
])
def test_fetch_unusable_response_raises(response):
    with pytest.raises(RemoteUnavailable):
        _provider(lambda r: response).fetch("/posts")


def test_fetch_error_message_from_envelope():
    provider = _provider(lambda r: httpx.Response(200, json={"success": False, "error": "db down"}))
    with pytest.raises(RemoteUnavailable, match="db down"):
        provider.fetch("/posts")


def test_fetch_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteUnavailable, match="connection refused"):
        _provider(handler).fetch("/posts")


def test_fetch_timeout_raises():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RemoteUnavailable):
        _provider(handler).fetch("/posts")
