"""
Error taxonomy for the XML-RPC codec and its client.

Provides:
- A base exception carrying a stable code, the stage that failed and a category
- One subclass per failure kind (conversion, serialization, parsing, decoding, transport)
- Helpers to walk the ``__cause__`` chain and test for a specific leaf kind
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, TypeVar

E = TypeVar("E", bound=BaseException)


class ErrorStage(Enum):
    """Pipeline stage that produced an error."""
    CONVERSION = "conversion"
    SERIALIZATION = "serialization"
    PARSING = "parsing"
    DECODING = "decoding"
    TRANSPORT = "transport"


class ErrorCategory(Enum):
    """Error categories for classification."""
    FATAL = "fatal"
    VALIDATION = "validation"
    RETRYABLE = "retryable"
    TIMEOUT = "timeout"
    REMOTE = "remote"


class RpcWireError(Exception):
    """Base exception for all rpcwire errors."""

    code: str = "RPCWIRE_ERROR"
    stage: ErrorStage | None = None
    category: ErrorCategory = ErrorCategory.FATAL

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "stage": self.stage.value if self.stage else None,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# --- conversion stage ---


class ConversionError(RpcWireError):
    stage = ErrorStage.CONVERSION
    category = ErrorCategory.VALIDATION


class InvalidArgumentType(ConversionError):
    """A native value has no XML-RPC representation."""

    code = "INVALID_ARGUMENT_TYPE"

    def __init__(self, type_name: str, reason: str | None = None):
        message = f"invalid type {type_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"type_name": type_name})
        self.type_name = type_name


class ArgumentConversionFailed(ConversionError):
    """Converting one argument (or one nested item of it) failed."""

    code = "ARGUMENT_CONVERSION_FAILED"

    def __init__(self, type_name: str, *, location: str | None = None, cause: BaseException | None = None):
        message = f"cannot convert {type_name}"
        if location:
            message += f" at {location}"
        if cause is not None:
            message += f": {_plain(cause)}"
        super().__init__(message, details={"type_name": type_name, "location": location})
        self.type_name = type_name
        self.location = location


class PayloadPreparationFailed(ConversionError):
    code = "PAYLOAD_PREPARATION_FAILED"


# --- serialization stage ---


class SerializationFailed(RpcWireError):
    """The request document could not be written."""

    code = "SERIALIZATION_FAILED"
    stage = ErrorStage.SERIALIZATION


# --- parsing stage ---


class MalformedDocument(RpcWireError):
    """Response bytes are not well-formed XML."""

    code = "MALFORMED_DOCUMENT"
    stage = ErrorStage.PARSING
    category = ErrorCategory.VALIDATION


# --- decoding stage ---


class DecodeError(RpcWireError):
    stage = ErrorStage.DECODING
    category = ErrorCategory.VALIDATION


class ResponseDecodeFailed(DecodeError):
    code = "RESPONSE_DECODE_FAILED"


class UnrecognizedResponseShape(DecodeError):
    code = "UNRECOGNIZED_RESPONSE_SHAPE"


class MalformedValue(DecodeError):
    code = "MALFORMED_VALUE"


class UnrecognizedTag(DecodeError):
    code = "UNRECOGNIZED_TAG"

    def __init__(self, tag: str):
        super().__init__(f"cannot recognize tag '{tag}'", details={"tag": tag})
        self.tag = tag


class ScalarConversionFailed(DecodeError):
    """Text of a scalar element does not parse as its declared type."""

    target = "value"

    def __init__(self, text: str, reason: str | None = None):
        message = f"cannot convert '{text}' to {self.target}"
        if reason:
            message += f": {reason}"
        super().__init__(message, details={"text": text})
        self.text = text


class IntegerConversionFailed(ScalarConversionFailed):
    code = "INTEGER_CONVERSION_FAILED"
    target = "integer"


class BooleanConversionFailed(ScalarConversionFailed):
    code = "BOOLEAN_CONVERSION_FAILED"
    target = "boolean"


class DoubleConversionFailed(ScalarConversionFailed):
    code = "DOUBLE_CONVERSION_FAILED"
    target = "floating point number"


class DateTimeConversionFailed(ScalarConversionFailed):
    code = "DATETIME_CONVERSION_FAILED"
    target = "a date"


class Base64ConversionFailed(ScalarConversionFailed):
    code = "BASE64_CONVERSION_FAILED"
    target = "bytes (base64)"


class EmptyArrayNotAllowed(DecodeError):
    code = "EMPTY_ARRAY_NOT_ALLOWED"


class EmptyStructNotAllowed(DecodeError):
    code = "EMPTY_STRUCT_NOT_ALLOWED"


class MissingMemberName(DecodeError):
    code = "MISSING_MEMBER_NAME"


class MissingMemberValue(DecodeError):
    code = "MISSING_MEMBER_VALUE"


class DuplicateMemberName(DecodeError):
    code = "DUPLICATE_MEMBER_NAME"

    def __init__(self, name: str):
        super().__init__(f"struct member '{name}' found multiple times", details={"name": name})
        self.name = name


class UnrecognizedFaultShape(DecodeError):
    code = "UNRECOGNIZED_FAULT_SHAPE"


class RemoteFault(DecodeError):
    """The server answered with a well-formed fault."""

    code = "REMOTE_FAULT"
    category = ErrorCategory.REMOTE

    def __init__(self, fault_code: int, fault_string: str):
        super().__init__(
            f"XML-RPC fault {fault_code}: {fault_string}",
            details={"fault_code": fault_code, "fault_string": fault_string},
        )
        self.fault_code = fault_code
        self.fault_string = fault_string


# --- transport stage ---


class TransportError(RpcWireError):
    code = "TRANSPORT_ERROR"
    stage = ErrorStage.TRANSPORT
    temporary = False
    timeout = False


class RequestPreparationFailed(TransportError):
    code = "REQUEST_PREPARATION_FAILED"
    category = ErrorCategory.VALIDATION


class ConnectionFailed(TransportError):
    code = "CONNECTION_FAILED"
    category = ErrorCategory.RETRYABLE
    temporary = True


class RequestTimeout(TransportError):
    code = "REQUEST_TIMEOUT"
    category = ErrorCategory.TIMEOUT
    temporary = True
    timeout = True


class HttpStatusError(TransportError):
    code = "HTTP_STATUS_ERROR"

    def __init__(self, status_code: int):
        super().__init__(f"response error: code {status_code}", details={"status_code": status_code})
        self.status_code = status_code
        if _is_retryable_status(status_code):
            self.category = ErrorCategory.RETRYABLE
            self.temporary = True


class BodyReadFailed(TransportError):
    code = "BODY_READ_FAILED"


class RequestFailed(TransportError):
    code = "REQUEST_FAILED"


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in {408, 429}


def _plain(exc: BaseException) -> str:
    return exc.message if isinstance(exc, RpcWireError) else str(exc)


def iter_error_chain(exc: BaseException | None) -> Iterator[BaseException]:
    """Yield ``exc`` and then every explicit or implicit cause below it."""
    seen: set[int] = set()
    while exc is not None and id(exc) not in seen:
        seen.add(id(exc))
        yield exc
        exc = exc.__cause__ or exc.__context__


def find_error(exc: BaseException | None, kind: type[E]) -> E | None:
    """Return the first error of ``kind`` in the chain, or None."""
    for err in iter_error_chain(exc):
        if isinstance(err, kind):
            return err
    return None


def has_error(exc: BaseException | None, kind: type[BaseException]) -> bool:
    return find_error(exc, kind) is not None


def root_cause(exc: BaseException) -> BaseException:
    last = exc
    for err in iter_error_chain(exc):
        last = err
    return last


def is_timeout(exc: BaseException | None) -> bool:
    """True when any error in the chain reports a timeout."""
    return any(getattr(err, "timeout", False) is True for err in iter_error_chain(exc))


def is_temporary(exc: BaseException | None) -> bool:
    """True when any error in the chain reports a temporary condition."""
    return any(getattr(err, "temporary", False) is True for err in iter_error_chain(exc))
