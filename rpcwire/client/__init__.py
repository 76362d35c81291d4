"""XML-RPC clients and HTTP transports."""

from .client import AsyncXmlRpcClient, XmlRpcClient
from .transport import AsyncHttpTransport, AsyncTransport, HttpTransport, LogErrorFunc, Transport

__all__ = [
    "AsyncHttpTransport",
    "AsyncTransport",
    "AsyncXmlRpcClient",
    "HttpTransport",
    "LogErrorFunc",
    "Transport",
    "XmlRpcClient",
]
