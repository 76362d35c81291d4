"""XML-RPC value model shared by the encoder and the decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any

from .errors import InvalidArgumentType

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Zero value returned by Result.datetime_value for non-datetime results.
ZERO_DATETIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class Kind(IntEnum):
    """XML-RPC data types."""
    INVALID = 0
    ARRAY = 1
    BASE64 = 2
    BOOL = 3
    DATETIME = 4
    DOUBLE = 5
    INT = 6
    STRING = 7
    STRUCT = 8


# ---------------------------------------------------------------------------
# Encode side: wire values handed to the serializer
# ---------------------------------------------------------------------------


class WireValue:
    """Base of the encode-side value tree."""

    __slots__ = ()
    kind: Kind = Kind.INVALID


@dataclass(frozen=True, slots=True)
class WireInt(WireValue):
    value: int
    kind = Kind.INT

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise InvalidArgumentType("int", f"{self.value} does not fit in 64 bits")


@dataclass(frozen=True, slots=True)
class WireBool(WireValue):
    value: bool
    kind = Kind.BOOL


@dataclass(frozen=True, slots=True)
class WireString(WireValue):
    value: str
    kind = Kind.STRING


@dataclass(frozen=True, slots=True)
class WireDouble(WireValue):
    value: float
    kind = Kind.DOUBLE


@dataclass(frozen=True, slots=True)
class WireDateTime(WireValue):
    value: datetime
    kind = Kind.DATETIME


@dataclass(frozen=True, slots=True)
class WireBase64(WireValue):
    value: bytes
    kind = Kind.BASE64


@dataclass(frozen=True, slots=True)
class WireArray(WireValue):
    items: tuple[WireValue, ...] = ()
    kind = Kind.ARRAY


@dataclass(frozen=True, slots=True)
class WireStruct(WireValue):
    """Struct members in insertion order; names must be unique."""

    members: tuple[tuple[str, WireValue], ...] = ()
    kind = Kind.STRUCT

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for name, _ in self.members:
            if name in seen:
                raise InvalidArgumentType("struct", f"member '{name}' given more than once")
            seen.add(name)


# ---------------------------------------------------------------------------
# Decode side: results returned to callers
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class Result:
    """
    Return value of an XML-RPC call.

    Exactly one payload field is meaningful, selected by ``kind``. Reading an
    accessor that does not match ``kind`` returns that accessor's zero value.
    """

    kind: Kind = Kind.INVALID
    _int: int = 0
    _bool: bool = False
    _string: str = ""
    _double: float = 0.0
    _datetime: datetime = ZERO_DATETIME
    _base64: bytes = b""
    _array: list[Result] = field(default_factory=list)
    _struct: dict[str, Result] = field(default_factory=dict)

    @classmethod
    def of_int(cls, value: int) -> Result:
        return cls(kind=Kind.INT, _int=value)

    @classmethod
    def of_bool(cls, value: bool) -> Result:
        return cls(kind=Kind.BOOL, _bool=value)

    @classmethod
    def of_string(cls, value: str) -> Result:
        return cls(kind=Kind.STRING, _string=value)

    @classmethod
    def of_double(cls, value: float) -> Result:
        return cls(kind=Kind.DOUBLE, _double=value)

    @classmethod
    def of_datetime(cls, value: datetime) -> Result:
        return cls(kind=Kind.DATETIME, _datetime=value)

    @classmethod
    def of_base64(cls, value: bytes) -> Result:
        return cls(kind=Kind.BASE64, _base64=value)

    @classmethod
    def of_array(cls, items: list[Result]) -> Result:
        return cls(kind=Kind.ARRAY, _array=list(items))

    @classmethod
    def of_struct(cls, members: dict[str, Result]) -> Result:
        return cls(kind=Kind.STRUCT, _struct=dict(members))

    @property
    def int_value(self) -> int:
        return self._int

    @property
    def bool_value(self) -> bool:
        return self._bool

    @property
    def string_value(self) -> str:
        return self._string

    @property
    def double_value(self) -> float:
        return self._double

    @property
    def datetime_value(self) -> datetime:
        return self._datetime

    @property
    def base64_value(self) -> bytes:
        return self._base64

    @property
    def array_value(self) -> list[Result]:
        return self._array

    @property
    def struct_value(self) -> dict[str, Result]:
        return self._struct

    def to_python(self) -> Any:
        """Unwrap into plain Python values (lists, dicts, scalars); INVALID gives None."""
        if self.kind is Kind.ARRAY:
            return [item.to_python() for item in self._array]
        if self.kind is Kind.STRUCT:
            return {key: item.to_python() for key, item in self._struct.items()}
        return _SCALAR_GETTERS.get(self.kind, lambda _: None)(self)

    def __repr__(self) -> str:
        if self.kind is Kind.INVALID:
            return "Result(kind=INVALID)"
        return f"Result(kind={self.kind.name}, value={self.to_python()!r})"


_SCALAR_GETTERS = {
    Kind.INT: lambda r: r._int,
    Kind.BOOL: lambda r: r._bool,
    Kind.STRING: lambda r: r._string,
    Kind.DOUBLE: lambda r: r._double,
    Kind.DATETIME: lambda r: r._datetime,
    Kind.BASE64: lambda r: r._base64,
}
