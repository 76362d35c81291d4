"""Serialization of method calls into XML-RPC request documents."""

from __future__ import annotations

import base64
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from lxml import etree

from . import tags
from .convert import convert_arguments
from .errors import ConversionError, PayloadPreparationFailed, SerializationFailed
from .values import (
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

XML_DECLARATION = b'<?xml version="1.0" encoding="UTF-8"?>\n'


def format_int(value: int) -> str:
    return str(value)


def format_bool(value: bool) -> str:
    return "1" if value else "0"


def format_double(value: float) -> str:
    """Shortest round-trip digits in plain decimal notation."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_datetime(value: datetime) -> str:
    """UTC, second precision, offset without a colon (``+0000``)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    utc = value.astimezone(timezone.utc)
    return (
        f"{utc.year:04d}-{utc.month:02d}-{utc.day:02d}"
        f"T{utc.hour:02d}:{utc.minute:02d}:{utc.second:02d}+0000"
    )


def format_base64(value: bytes) -> str:
    return base64.b64encode(value).decode("ascii")


_SCALARS: dict[type, tuple[str, Any]] = {
    WireInt: (tags.INT, format_int),
    WireBool: (tags.BOOLEAN, format_bool),
    WireString: (tags.STRING, str),
    WireDouble: (tags.DOUBLE, format_double),
    WireDateTime: (tags.DATETIME, format_datetime),
    WireBase64: (tags.BASE64, format_base64),
}


def _scalar_form(wire: WireValue) -> tuple[str, Any] | None:
    for cls, form in _SCALARS.items():
        if isinstance(wire, cls):
            return form
    return None


def _set_text(element: etree._Element, text: str) -> None:
    try:
        element.text = text
    except ValueError as exc:
        raise SerializationFailed(f"cannot write text of <{element.tag}>: {exc}") from exc


def build_value(parent: etree._Element, wire: WireValue) -> etree._Element:
    """Append ``<value>`` holding ``wire`` under ``parent``."""
    value = etree.SubElement(parent, tags.VALUE)
    scalar = _scalar_form(wire)
    if scalar is not None:
        tag, fmt = scalar
        _set_text(etree.SubElement(value, tag), fmt(wire.value))
    elif isinstance(wire, WireArray):
        data = etree.SubElement(etree.SubElement(value, tags.ARRAY), tags.DATA)
        for item in wire.items:
            build_value(data, item)
    elif isinstance(wire, WireStruct):
        struct = etree.SubElement(value, tags.STRUCT)
        for name, item in wire.members:
            member = etree.SubElement(struct, tags.MEMBER)
            _set_text(etree.SubElement(member, tags.NAME), name)
            build_value(member, item)
    else:
        raise SerializationFailed(f"unsupported wire value {type(wire).__name__}")
    return value


def build_request(method_name: str, params: Iterable[WireValue]) -> etree._Element:
    root = etree.Element(tags.METHOD_CALL)
    _set_text(etree.SubElement(root, tags.METHOD_NAME), method_name)
    params_el = etree.SubElement(root, tags.PARAMS)
    for wire in params:
        build_value(etree.SubElement(params_el, tags.PARAM), wire)
    return root


def encode_request(method_name: str, params: Iterable[WireValue]) -> bytes:
    """Serialize an already converted parameter list."""
    root = build_request(method_name, params)
    try:
        body = etree.tostring(root, encoding="UTF-8", xml_declaration=False)
    except (ValueError, etree.SerialisationError) as exc:
        raise SerializationFailed(f"write to buffer failed: {exc}") from exc
    return XML_DECLARATION + body


def encode(method_name: str, *args: Any) -> bytes:
    """Convert ``args`` and serialize the call to ``method_name``."""
    try:
        params = convert_arguments(args)
    except ConversionError as exc:
        raise PayloadPreparationFailed(f"payload preparation failed: {exc.message}") from exc
    return encode_request(method_name, params)
