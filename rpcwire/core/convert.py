"""Conversion of native Python call arguments into wire values."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterable, Protocol, runtime_checkable

from .errors import ArgumentConversionFailed, ConversionError, InvalidArgumentType
from .values import (
    INT64_MAX,
    INT64_MIN,
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


@runtime_checkable
class ToWireValue(Protocol):
    """Objects that know their own XML-RPC representation."""

    def to_wire_value(self) -> WireValue: ...


def _type_name(value: Any) -> str:
    return type(value).__name__


def to_wire_value(value: Any) -> WireValue:
    """
    Convert one native value into a wire value.

    Raises:
        InvalidArgumentType: the value (or a mapping key) has no XML-RPC form, or a
            container holds a reference to itself.
        ArgumentConversionFailed: a nested item failed; the cause chain holds the leaf error.
    """
    return _convert(value, set())


def _convert(value: Any, active: set[int]) -> WireValue:
    if isinstance(value, WireValue):
        return value
    if isinstance(value, bool):
        return WireBool(value)
    if isinstance(value, int):
        if not INT64_MIN <= value <= INT64_MAX:
            raise InvalidArgumentType(_type_name(value), f"{value} does not fit in 64 bits")
        return WireInt(int(value))
    if isinstance(value, float):
        return WireDouble(float(value))
    if isinstance(value, str):
        return WireString(str(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return WireBase64(bytes(value))
    if isinstance(value, datetime):
        return WireDateTime(value)
    if isinstance(value, Mapping):
        with _visiting(value, active):
            return _construct_struct(value, active)
    if isinstance(value, (list, tuple)):
        with _visiting(value, active):
            return _construct_array(value, active)
    if isinstance(value, ToWireValue):
        converted = value.to_wire_value()
        if not isinstance(converted, WireValue):
            raise InvalidArgumentType(_type_name(value), "to_wire_value() did not return a WireValue")
        return converted
    raise InvalidArgumentType(_type_name(value))


@contextmanager
def _visiting(container: Any, active: set[int]) -> Iterator[None]:
    """Mark ``container`` as being converted; meeting it again below itself is a cycle."""
    marker = id(container)
    if marker in active:
        raise InvalidArgumentType(_type_name(container), "recursive reference")
    active.add(marker)
    try:
        yield
    finally:
        active.discard(marker)


def _construct_array(values: list[Any] | tuple[Any, ...], active: set[int]) -> WireArray:
    items: list[WireValue] = []
    for index, item in enumerate(values):
        try:
            items.append(_convert(item, active))
        except ConversionError as exc:
            raise ArgumentConversionFailed(_type_name(values), location=f"item {index}", cause=exc) from exc
    return WireArray(tuple(items))


def _construct_struct(mapping: Mapping[Any, Any], active: set[int]) -> WireStruct:
    members: list[tuple[str, WireValue]] = []
    for key, item in mapping.items():
        if not isinstance(key, str):
            raise InvalidArgumentType(_type_name(key), "struct member names must be strings")
        try:
            members.append((key, _convert(item, active)))
        except ConversionError as exc:
            raise ArgumentConversionFailed(_type_name(mapping), location=f"member '{key}'", cause=exc) from exc
    return WireStruct(tuple(members))


def convert_arguments(args: Iterable[Any]) -> list[WireValue]:
    """Convert call arguments in order; the first failure aborts the whole call."""
    values: list[WireValue] = []
    for index, arg in enumerate(args):
        try:
            values.append(to_wire_value(arg))
        except ConversionError as exc:
            raise ArgumentConversionFailed(_type_name(arg), location=f"argument {index}", cause=exc) from exc
        except RecursionError as exc:
            raise ArgumentConversionFailed(
                _type_name(arg), location=f"argument {index}", cause=RecursionError("nested too deeply")
            ) from exc
    return values
