"""
Response decoding: element tree to Result, or a fault error.

Every nesting level is validated on its own and the first failure aborts the
whole decode; partial results are never returned.
"""

from __future__ import annotations

import base64
import binascii
import math
import re
from datetime import datetime, timedelta, timezone
from typing import Callable

from lxml import etree

from . import tags
from .document import XmlDocument, children, parse_document, text_of
from .errors import (
    Base64ConversionFailed,
    BooleanConversionFailed,
    DateTimeConversionFailed,
    DecodeError,
    DoubleConversionFailed,
    DuplicateMemberName,
    EmptyArrayNotAllowed,
    EmptyStructNotAllowed,
    IntegerConversionFailed,
    MalformedDocument,
    MalformedValue,
    MissingMemberName,
    MissingMemberValue,
    RemoteFault,
    ResponseDecodeFailed,
    UnrecognizedFaultShape,
    UnrecognizedResponseShape,
    UnrecognizedTag,
)
from .values import INT64_MAX, INT64_MIN, Result

_INT_RE = re.compile(r"[+-]?[0-9]+")
_DATETIME_RE = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(Z|[+-]\d{2}:?\d{2})",
    re.ASCII,
)
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


# --- scalar parsers ---


def parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise IntegerConversionFailed(text, "invalid syntax")
    number = int(text)
    if not INT64_MIN <= number <= INT64_MAX:
        raise IntegerConversionFailed(text, "value out of range")
    return number


def parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise BooleanConversionFailed(text, "invalid syntax")


def parse_double(text: str) -> float:
    if not text or not text.isascii() or text != text.strip() or "_" in text:
        raise DoubleConversionFailed(text, "invalid syntax")
    try:
        number = float(text)
    except ValueError as exc:
        raise DoubleConversionFailed(text, "invalid syntax") from exc
    if math.isinf(number) and "inf" not in text.lower():
        raise DoubleConversionFailed(text, "value out of range")
    return number


def parse_datetime(text: str) -> datetime:
    """RFC 3339 timestamps; the offset may also be written without a colon."""
    match = _DATETIME_RE.fullmatch(text)
    if not match:
        raise DateTimeConversionFailed(text, "not an RFC 3339 timestamp")
    year, month, day, hour, minute, second, fraction, offset = match.groups()
    if offset == "Z":
        tz = timezone.utc
    else:
        digits = offset[1:].replace(":", "")
        hours, minutes = int(digits[:2]), int(digits[2:])
        if hours > 23 or minutes > 59:
            raise DateTimeConversionFailed(text, "offset out of range")
        delta = timedelta(hours=hours, minutes=minutes)
        tz = timezone(-delta if offset[0] == "-" else delta)
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), microsecond, tzinfo=tz
        )
    except ValueError as exc:
        raise DateTimeConversionFailed(text, str(exc)) from exc


def parse_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise Base64ConversionFailed(text, str(exc)) from exc


_SCALAR_DECODERS: dict[str, Callable[[str], Result]] = {
    tags.STRING: Result.of_string,
    tags.INT: lambda text: Result.of_int(parse_int(text)),
    tags.I4: lambda text: Result.of_int(parse_int(text)),
    tags.BOOLEAN: lambda text: Result.of_bool(parse_bool(text)),
    tags.DOUBLE: lambda text: Result.of_double(parse_double(text)),
    tags.DATETIME: lambda text: Result.of_datetime(parse_datetime(text)),
    tags.BASE64: lambda text: Result.of_base64(parse_base64(text)),
}


# --- tree walk ---


def _only_child(value: etree._Element) -> etree._Element:
    found = children(value)
    if len(found) != 1:
        raise MalformedValue(f"'value' tag doesn't contain exactly one child tag (found {len(found)})")
    return found[0]


def decode_value(value: etree._Element) -> Result:
    """Decode a ``<value>`` element holding exactly one typed child."""
    return decode_element(_only_child(value))


def decode_element(element: etree._Element) -> Result:
    tag = element.tag
    scalar = _SCALAR_DECODERS.get(tag)
    if scalar is not None:
        return scalar(text_of(element))
    if tag == tags.ARRAY:
        return Result.of_array(decode_array(element))
    if tag == tags.STRUCT:
        return Result.of_struct(decode_struct(element))
    raise UnrecognizedTag(str(tag))


def decode_array(element: etree._Element) -> list[Result]:
    items = [decode_value(value) for value in element.findall(tags.ARRAY_VALUE_PATH)]
    if not items:
        raise EmptyArrayNotAllowed("no values found in array")
    return items


def decode_struct(element: etree._Element) -> dict[str, Result]:
    members: dict[str, Result] = {}
    for member in element.findall(tags.MEMBER):
        names = member.findall(tags.NAME)
        values = member.findall(tags.VALUE)
        if len(names) != 1:
            raise MissingMemberName(f"struct member needs exactly one 'name' tag, found {len(names)}")
        if len(values) != 1:
            raise MissingMemberValue(f"struct member needs exactly one 'value' tag, found {len(values)}")
        name = text_of(names[0])
        if name in members:
            raise DuplicateMemberName(name)
        members[name] = decode_value(values[0])
    if not members:
        raise EmptyStructNotAllowed("no members found in struct")
    return members


def decode_fault(fault: etree._Element) -> RemoteFault:
    """Validate a ``<fault>`` element and build the error it stands for."""
    members = fault.findall(tags.FAULT_MEMBERS_PATH)
    if len(members) != 2:
        raise UnrecognizedFaultShape(f"fault struct must have exactly two members, found {len(members)}")

    code_el: etree._Element | None = None
    message_el: etree._Element | None = None
    for member in members:
        name_el = member.find(tags.NAME)
        if name_el is None:
            raise UnrecognizedFaultShape("fault member has no 'name' tag")
        name = text_of(name_el)
        if name == tags.FAULT_CODE:
            code_el = member.find(f"{tags.VALUE}/{tags.INT}")
            if code_el is None:
                code_el = member.find(f"{tags.VALUE}/{tags.I4}")
        elif name == tags.FAULT_STRING:
            message_el = member.find(f"{tags.VALUE}/{tags.STRING}")

    if code_el is None or message_el is None:
        raise UnrecognizedFaultShape("fault needs an integer faultCode and a string faultString")
    try:
        code = parse_int(text_of(code_el))
    except IntegerConversionFailed as exc:
        raise UnrecognizedFaultShape(f"faultCode is not an integer: {exc.message}") from exc
    return RemoteFault(code, text_of(message_el))


def decode_document(doc: XmlDocument) -> Result:
    """
    Decode a parsed response.

    Raises:
        RemoteFault: the response is a well-formed fault.
        DecodeError: any structural or scalar validation failure.
    """
    value = doc.find(tags.RESPONSE_VALUE_PATH)
    fault = doc.find(tags.RESPONSE_FAULT_PATH)
    if (value is None) == (fault is None):
        raise UnrecognizedResponseShape("failed to recognize XML-RPC response")
    if fault is not None:
        raise decode_fault(fault)
    return decode_value(value)


def decode(data: bytes | bytearray | str) -> Result:
    """Parse and decode response bytes; failures other than faults are wrapped."""
    try:
        doc = parse_document(data)
        return decode_document(doc)
    except RemoteFault:
        raise
    except (MalformedDocument, DecodeError) as exc:
        raise ResponseDecodeFailed(f"cannot parse response: {exc.message}") from exc
