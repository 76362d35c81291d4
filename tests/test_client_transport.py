import httpx
import pytest

from rpcwire.client.transport import CONTENT_TYPE, AsyncHttpTransport, AsyncTransport, HttpTransport, Transport
from rpcwire.core.errors import (
    BodyReadFailed,
    ConnectionFailed,
    HttpStatusError,
    RequestTimeout,
    is_temporary,
    is_timeout,
)

ENDPOINT = "http://rpc.test/RPC2"


def _sync_transport(handler, **kwargs) -> HttpTransport:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpTransport(ENDPOINT, http_client=client, **kwargs)


def _async_transport(handler, **kwargs) -> AsyncHttpTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return AsyncHttpTransport(ENDPOINT, http_client=client, **kwargs)


class _ExplodingStream(httpx.SyncByteStream):
    def __iter__(self):
        yield b"<method"
        raise httpx.ReadError("connection reset")


def test_transports_satisfy_protocols() -> None:
    assert isinstance(HttpTransport(ENDPOINT), Transport)
    assert isinstance(AsyncHttpTransport(ENDPOINT), AsyncTransport)


def test_send_posts_payload_with_xml_headers() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(200, content=b"<ok/>")

    transport = _sync_transport(handler, user_agent="rpcwire-test", headers={"X-Trace": "1"})
    assert transport.send(b"<payload/>") == b"<ok/>"
    assert seen["method"] == "POST"
    assert seen["url"] == ENDPOINT
    assert seen["body"] == b"<payload/>"
    assert seen["headers"]["content-type"] == CONTENT_TYPE
    assert seen["headers"]["user-agent"] == "rpcwire-test"
    assert seen["headers"]["x-trace"] == "1"


@pytest.mark.parametrize("status", [404, 500, 302])
def test_non_2xx_status_is_an_error(status) -> None:
    transport = _sync_transport(lambda request: httpx.Response(status, content=b"nope"))
    with pytest.raises(HttpStatusError) as exc:
        transport.send(b"<x/>")
    assert exc.value.status_code == status
    assert exc.value.temporary is (status >= 500)


def test_timeout_is_mapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RequestTimeout) as exc:
        _sync_transport(handler).send(b"<x/>")
    assert is_timeout(exc.value)
    assert isinstance(exc.value.__cause__, httpx.ReadTimeout)


def test_connection_error_is_mapped() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ConnectionFailed) as exc:
        _sync_transport(handler).send(b"<x/>")
    assert is_temporary(exc.value)
    assert not is_timeout(exc.value)


def test_body_read_failure_is_mapped() -> None:
    transport = _sync_transport(lambda request: httpx.Response(200, stream=_ExplodingStream()))
    with pytest.raises(BodyReadFailed):
        transport.send(b"<x/>")


def test_close_failure_is_reported_through_hook() -> None:
    logged = []

    class _Response:
        def close(self):
            raise RuntimeError("socket gone")

    transport = HttpTransport(ENDPOINT, log_error=logged.append)
    transport._close_response(_Response())
    assert logged == ["response body closing failed: socket gone"]


def test_close_keeps_caller_owned_client_open() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    transport = HttpTransport(ENDPOINT, http_client=client)
    transport.close()
    assert not client.is_closed


def test_send_after_close_reuses_caller_owned_client() -> None:
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"<ok/>")))
    transport = HttpTransport(ENDPOINT, http_client=client)
    transport.close()
    assert transport.send(b"<x/>") == b"<ok/>"
    assert transport._http_client is client
    client.close()


def test_close_shuts_down_owned_client() -> None:
    transport = HttpTransport(ENDPOINT)
    client = transport._get_http_client()
    transport.close()
    assert client.is_closed


@pytest.mark.asyncio
async def test_async_send_returns_body() -> None:
    transport = _async_transport(lambda request: httpx.Response(200, content=b"<done/>"))
    assert await transport.send(b"<x/>") == b"<done/>"
    await transport.close()


@pytest.mark.asyncio
async def test_async_status_and_timeout_mapping() -> None:
    with pytest.raises(HttpStatusError):
        await _async_transport(lambda request: httpx.Response(503)).send(b"<x/>")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("slow", request=request)

    with pytest.raises(RequestTimeout):
        await _async_transport(handler).send(b"<x/>")


@pytest.mark.asyncio
async def test_async_close_keeps_caller_owned_client() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"<ok/>")))
    transport = AsyncHttpTransport(ENDPOINT, http_client=client)
    await transport.close()
    assert not client.is_closed
    assert await transport.send(b"<x/>") == b"<ok/>"
    assert transport._http_client is client
    await client.aclose()
