"""rpcwire - XML-RPC codec and client."""

from loguru import logger

from rpcwire.client import AsyncXmlRpcClient, XmlRpcClient
from rpcwire.core import (
    Kind,
    RemoteFault,
    Result,
    RpcWireError,
    ToWireValue,
    decode,
    encode,
    find_error,
    has_error,
    is_temporary,
    is_timeout,
)

__version__ = "0.1.0"

# Library is silent until an application opts in (the CLI does).
logger.disable("rpcwire")

__all__ = [
    "AsyncXmlRpcClient",
    "Kind",
    "RemoteFault",
    "Result",
    "RpcWireError",
    "ToWireValue",
    "XmlRpcClient",
    "__version__",
    "decode",
    "encode",
    "find_error",
    "has_error",
    "is_temporary",
    "is_timeout",
]
