"""HTTP transports that carry encoded XML-RPC payloads (httpx)."""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

import httpx
from loguru import logger

from rpcwire.core.errors import (
    BodyReadFailed,
    ConnectionFailed,
    HttpStatusError,
    RequestPreparationFailed,
    RequestTimeout,
    TransportError,
)

LogErrorFunc = Callable[[str], None]

CONTENT_TYPE = "text/xml"
DEFAULT_TIMEOUT_SECONDS = 30.0


def default_log_error(message: str) -> None:
    logger.error(message)


@runtime_checkable
class Transport(Protocol):
    def send(self, payload: bytes) -> bytes: ...


@runtime_checkable
class AsyncTransport(Protocol):
    async def send(self, payload: bytes) -> bytes: ...


def _request_headers(headers: dict[str, str] | None, user_agent: str | None) -> dict[str, str]:
    out = {"Content-Type": CONTENT_TYPE, "Accept": CONTENT_TYPE}
    if user_agent:
        out["User-Agent"] = user_agent
    if headers:
        out.update(headers)
    return out


def _map_request_error(exc: httpx.HTTPError, endpoint: str) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeout(f"request to {endpoint} timed out: {exc}")
    return ConnectionFailed(f"connection error: {exc}", details={"endpoint": endpoint})


def _map_read_error(exc: httpx.HTTPError) -> TransportError:
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeout(f"response body read timed out: {exc}")
    return BodyReadFailed(f"response body read failed: {exc}")


class _HttpTransportBase:
    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        user_agent: str | None = None,
        verify: bool = True,
        log_error: LogErrorFunc | None = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self.verify = verify
        self.headers = _request_headers(headers, user_agent)
        self.log_error = log_error or default_log_error

    def _check_status(self, response: httpx.Response) -> None:
        if response.status_code // 100 != 2:
            raise HttpStatusError(response.status_code)


class HttpTransport(_HttpTransportBase):
    """Blocking POST of request bytes; returns the raw response body."""

    def __init__(self, endpoint: str, *, http_client: httpx.Client | None = None, **kwargs: Any):
        super().__init__(endpoint, **kwargs)
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_http_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(timeout=self.timeout, verify=self.verify)
        return self._http_client

    def _build_request(self, client: httpx.Client, payload: bytes) -> httpx.Request:
        try:
            return client.build_request("POST", self.endpoint, content=payload, headers=self.headers)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as exc:
            raise RequestPreparationFailed(f"request preparation failed: {exc}") from exc

    def send(self, payload: bytes) -> bytes:
        client = self._get_http_client()
        request = self._build_request(client, payload)
        logger.debug(f"POST {self.endpoint} ({len(payload)} bytes)")
        try:
            response = client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise _map_request_error(exc, self.endpoint) from exc
        try:
            logger.debug(f"response status {response.status_code} from {self.endpoint}")
            self._check_status(response)
            try:
                return response.read()
            except httpx.HTTPError as exc:
                raise _map_read_error(exc) from exc
        finally:
            self._close_response(response)

    def _close_response(self, response: httpx.Response) -> None:
        try:
            response.close()
        except Exception as exc:
            self.log_error(f"response body closing failed: {exc}")

    def close(self) -> None:
        if self._http_client is not None and self._owns_client:
            self._http_client.close()
            self._http_client = None


class AsyncHttpTransport(_HttpTransportBase):
    """asyncio variant; cancelling the awaiting task aborts the exchange."""

    def __init__(self, endpoint: str, *, http_client: httpx.AsyncClient | None = None, **kwargs: Any):
        super().__init__(endpoint, **kwargs)
        self._http_client = http_client
        self._owns_client = http_client is None

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout, verify=self.verify)
        return self._http_client

    def _build_request(self, client: httpx.AsyncClient, payload: bytes) -> httpx.Request:
        try:
            return client.build_request("POST", self.endpoint, content=payload, headers=self.headers)
        except (httpx.InvalidURL, httpx.UnsupportedProtocol, ValueError, TypeError) as exc:
            raise RequestPreparationFailed(f"request preparation failed: {exc}") from exc

    async def send(self, payload: bytes) -> bytes:
        client = self._get_http_client()
        request = self._build_request(client, payload)
        logger.debug(f"POST {self.endpoint} ({len(payload)} bytes)")
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise _map_request_error(exc, self.endpoint) from exc
        try:
            logger.debug(f"response status {response.status_code} from {self.endpoint}")
            self._check_status(response)
            try:
                return await response.aread()
            except httpx.HTTPError as exc:
                raise _map_read_error(exc) from exc
        finally:
            await self._close_response(response)

    async def _close_response(self, response: httpx.Response) -> None:
        try:
            await response.aclose()
        except Exception as exc:
            self.log_error(f"response body closing failed: {exc}")

    async def close(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None
