import httpx
import pytest
import respx

from azstore._http import (
    AsyncTransport,
    BlockingTransport,
    RequestDescriptor,
    StreamBody,
    iter_coroutine,
)

URL = "https://acct.blob.core.windows.net/c/b"


@respx.mock
def test_query_in_url_and_params_are_merged() -> None:
    route = respx.get(URL).mock(return_value=httpx.Response(200))
    request = RequestDescriptor.build("GET", f"{URL}?comp=list", params={"prefix": "x"})

    transport = BlockingTransport(httpx.Client())
    resp = iter_coroutine(transport.send(request))
    transport.close()

    assert resp.status_code == 200
    params = route.calls.last.request.url.params
    assert params["comp"] == "list"
    assert params["prefix"] == "x"


@respx.mock
def test_error_statuses_are_returned_not_raised() -> None:
    respx.delete(URL).mock(return_value=httpx.Response(404))

    transport = BlockingTransport(httpx.Client())
    resp = iter_coroutine(transport.send(RequestDescriptor.build("DELETE", URL)))
    transport.close()

    assert resp.status_code == 404


@respx.mock
def test_stream_with_known_length_sends_content_length() -> None:
    route = respx.put(URL).mock(return_value=httpx.Response(201))
    request = RequestDescriptor.build("PUT", URL, body=StreamBody([b"ab", b"cd"], length=4))

    transport = BlockingTransport(httpx.Client())
    iter_coroutine(transport.send(request))
    transport.close()

    headers = route.calls.last.request.headers
    assert headers["content-length"] == "4"
    assert "transfer-encoding" not in headers


@respx.mock
def test_stream_with_unknown_length_is_chunked() -> None:
    route = respx.put(URL).mock(return_value=httpx.Response(201))
    request = RequestDescriptor.build("PUT", URL, body=StreamBody([b"ab", b"cd"]))

    transport = BlockingTransport(httpx.Client())
    iter_coroutine(transport.send(request))
    transport.close()

    headers = route.calls.last.request.headers
    assert headers["transfer-encoding"] == "chunked"
    assert "content-length" not in headers


@respx.mock
@pytest.mark.asyncio
async def test_async_transport_sends_headers() -> None:
    route = respx.put(URL).mock(return_value=httpx.Response(201))
    request = RequestDescriptor.build("PUT", URL, headers={"x-ms-blob-type": "BlockBlob"}, body=b"abc")

    transport = AsyncTransport(httpx.AsyncClient())
    await transport.send(request)
    await transport.aclose()

    sent = route.calls.last.request
    assert sent.headers["x-ms-blob-type"] == "BlockBlob"
    assert sent.content == b"abc"
