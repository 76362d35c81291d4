"""XML-RPC clients: encode, transmit, decode."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from rpcwire.client.transport import (
    DEFAULT_TIMEOUT_SECONDS,
    AsyncHttpTransport,
    AsyncTransport,
    HttpTransport,
    LogErrorFunc,
    Transport,
    default_log_error,
)
from rpcwire.core.decoder import decode
from rpcwire.core.errors import RequestFailed, RpcWireError, TransportError
from rpcwire.core.serialization import encode
from rpcwire.core.values import Result

if TYPE_CHECKING:
    from rpcwire.config.schema import Config


def _settings_from_config(config: Config) -> dict[str, Any]:
    client_cfg = config.client
    return {
        "timeout": client_cfg.timeout_seconds,
        "headers": dict(client_cfg.headers),
        "user_agent": client_cfg.user_agent,
        "verify": client_cfg.verify_tls,
    }


class _ClientBase:
    def __init__(self, endpoint: str, log_error: LogErrorFunc | None):
        self.endpoint = endpoint
        self._log_error = log_error or default_log_error

    def _report(self, method_name: str, exc: RpcWireError) -> None:
        self._log_error(f"XML-RPC call {method_name} to {self.endpoint} failed: {exc}")

    def _prepare(self, method_name: str, args: tuple[Any, ...]) -> bytes:
        try:
            payload = encode(method_name, *args)
        except RpcWireError as exc:
            self._report(method_name, exc)
            raise
        logger.debug(f"calling {method_name} with {len(args)} argument(s)")
        return payload

    def _finish(self, method_name: str, body: bytes) -> Result:
        try:
            result = decode(body)
        except RpcWireError as exc:
            self._report(method_name, exc)
            raise
        logger.debug(f"{method_name} returned {result.kind.name}")
        return result

    def _request_failed(self, method_name: str, exc: TransportError) -> RequestFailed:
        self._report(method_name, exc)
        return RequestFailed(f"request failed: {exc.message}")


class XmlRpcClient(_ClientBase):
    """
    Blocking XML-RPC client.

    Usage:
        with XmlRpcClient("http://127.0.0.1:8000/RPC2") as client:
            result = client.call("pow", 2, 9)
            result.int_value  # 512
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        transport: Transport | None = None,
        log_error: LogErrorFunc | None = None,
        **transport_kwargs: Any,
    ):
        super().__init__(endpoint, log_error)
        self.transport = transport or HttpTransport(
            endpoint, timeout=timeout, headers=headers, log_error=log_error, **transport_kwargs
        )

    @classmethod
    def from_config(cls, config: Config, *, log_error: LogErrorFunc | None = None) -> XmlRpcClient:
        return cls(config.client.endpoint, log_error=log_error, **_settings_from_config(config))

    def call(self, method_name: str, *args: Any) -> Result:
        """Invoke ``method_name`` remotely; faults raise RemoteFault."""
        payload = self._prepare(method_name, args)
        try:
            body = self.transport.send(payload)
        except TransportError as exc:
            raise self._request_failed(method_name, exc) from exc
        return self._finish(method_name, body)

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> XmlRpcClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class AsyncXmlRpcClient(_ClientBase):
    """asyncio XML-RPC client over httpx.AsyncClient."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        headers: dict[str, str] | None = None,
        transport: AsyncTransport | None = None,
        log_error: LogErrorFunc | None = None,
        **transport_kwargs: Any,
    ):
        super().__init__(endpoint, log_error)
        self.transport = transport or AsyncHttpTransport(
            endpoint, timeout=timeout, headers=headers, log_error=log_error, **transport_kwargs
        )

    @classmethod
    def from_config(cls, config: Config, *, log_error: LogErrorFunc | None = None) -> AsyncXmlRpcClient:
        return cls(config.client.endpoint, log_error=log_error, **_settings_from_config(config))

    async def call(self, method_name: str, *args: Any) -> Result:
        payload = self._prepare(method_name, args)
        try:
            body = await self.transport.send(payload)
        except TransportError as exc:
            raise self._request_failed(method_name, exc) from exc
        return self._finish(method_name, body)

    async def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if callable(close):
            await close()

    async def __aenter__(self) -> AsyncXmlRpcClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
