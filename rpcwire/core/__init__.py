"""XML-RPC codec: value model, converter, serializer, parser and decoder."""

from .convert import ToWireValue, convert_arguments, to_wire_value
from .decoder import decode, decode_document
from .document import XmlDocument, parse_document
from .errors import (
    ArgumentConversionFailed,
    InvalidArgumentType,
    RemoteFault,
    RpcWireError,
    find_error,
    has_error,
    is_temporary,
    is_timeout,
)
from .serialization import encode, encode_request
from .values import (
    Kind,
    Result,
    WireArray,
    WireBase64,
    WireBool,
    WireDateTime,
    WireDouble,
    WireInt,
    WireString,
    WireStruct,
    WireValue,
)

__all__ = [
    "ArgumentConversionFailed",
    "InvalidArgumentType",
    "Kind",
    "RemoteFault",
    "Result",
    "RpcWireError",
    "ToWireValue",
    "WireArray",
    "WireBase64",
    "WireBool",
    "WireDateTime",
    "WireDouble",
    "WireInt",
    "WireString",
    "WireStruct",
    "WireValue",
    "XmlDocument",
    "convert_arguments",
    "decode",
    "decode_document",
    "encode",
    "encode_request",
    "find_error",
    "has_error",
    "is_temporary",
    "is_timeout",
    "parse_document",
    "to_wire_value",
]
