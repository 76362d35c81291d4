from datetime import datetime, timedelta, timezone

import pytest
from lxml import etree

from rpcwire.core.decoder import (
    decode,
    decode_document,
    parse_base64,
    parse_bool,
    parse_datetime,
    parse_double,
    parse_int,
)
from rpcwire.core.document import parse_document
from rpcwire.core.errors import (
    Base64ConversionFailed,
    BooleanConversionFailed,
    DateTimeConversionFailed,
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
    find_error,
    has_error,
)
from rpcwire.core.serialization import encode
from rpcwire.core.values import Kind


def _response(value_xml: str) -> bytes:
    return (
        '<?xml version="1.0"?><methodResponse><params><param>'
        f"<value>{value_xml}</value>"
        "</param></params></methodResponse>"
    ).encode("utf-8")


def _fault(members_xml: str) -> bytes:
    return (
        "<methodResponse><fault><value><struct>"
        f"{members_xml}"
        "</struct></value></fault></methodResponse>"
    ).encode("utf-8")


def _member(name: str, value_xml: str) -> str:
    return f"<member><name>{name}</name><value>{value_xml}</value></member>"


def _echo(*args):
    """Encode args as a request, then decode its first param as a response."""
    request = etree.fromstring(encode("echo", *args).split(b"\n", 1)[1])
    value = request.find("params/param/value")
    return decode(_response("".join(etree.tostring(child, encoding="unicode") for child in value)))


def test_decode_pow_result() -> None:
    result = decode(_response("<int>512</int>"))
    assert result.kind is Kind.INT
    assert result.int_value == 512


def test_decode_accepts_i4() -> None:
    assert decode(_response("<i4>-7</i4>")).int_value == -7


def test_decode_fault_raises_remote_fault() -> None:
    body = _fault(_member("faultCode", "<int>4</int>") + _member("faultString", "<string>bad args</string>"))
    with pytest.raises(RemoteFault) as exc:
        decode(body)
    assert exc.value.fault_code == 4
    assert exc.value.fault_string == "bad args"


def test_decode_fault_member_order_does_not_matter() -> None:
    body = _fault(_member("faultString", "<string>nope</string>") + _member("faultCode", "<i4>-32601</i4>"))
    with pytest.raises(RemoteFault) as exc:
        decode(body)
    assert exc.value.fault_code == -32601


@pytest.mark.parametrize(
    "members",
    [
        _member("faultCode", "<int>4</int>"),
        _member("faultCode", "<int>4</int>") + _member("faultString", "<string>x</string>") + _member("extra", "<int>1</int>"),
        _member("faultCode", "<string>4</string>") + _member("faultString", "<string>x</string>"),
        _member("faultCode", "<int>four</int>") + _member("faultString", "<string>x</string>"),
        _member("code", "<int>4</int>") + _member("faultString", "<string>x</string>"),
    ],
)
def test_decode_rejects_unrecognized_fault_shapes(members) -> None:
    with pytest.raises(ResponseDecodeFailed) as exc:
        decode(_fault(members))
    assert has_error(exc.value, UnrecognizedFaultShape)
    assert not has_error(exc.value, RemoteFault)


@pytest.mark.parametrize(
    "body",
    [
        b"<methodResponse><params><param><value><int>1</int></value></param></params>"
        b"<fault><value><struct/></value></fault></methodResponse>",
        b"<methodResponse><params/></methodResponse>",
        b"<methodCall><params><param><value><int>1</int></value></param></params></methodCall>",
    ],
)
def test_decode_requires_exactly_one_response_shape(body) -> None:
    with pytest.raises(ResponseDecodeFailed) as exc:
        decode(body)
    assert has_error(exc.value, UnrecognizedResponseShape)


def test_decode_wraps_malformed_documents() -> None:
    with pytest.raises(ResponseDecodeFailed) as exc:
        decode(b"<methodResponse>")
    assert exc.value.message.startswith("cannot parse response")
    assert has_error(exc.value, MalformedDocument)


def test_empty_array_is_rejected() -> None:
    with pytest.raises(EmptyArrayNotAllowed):
        decode_document(parse_document(_response("<array><data></data></array>")))
    with pytest.raises(ResponseDecodeFailed) as exc:
        decode(_response("<array><data></data></array>"))
    assert has_error(exc.value, EmptyArrayNotAllowed)


def test_array_preserves_order() -> None:
    result = decode(_response(
        "<array><data><value><int>1</int></value><value><string>two</string></value>"
        "<value><boolean>1</boolean></value></data></array>"
    ))
    assert result.kind is Kind.ARRAY
    assert result.to_python() == [1, "two", True]


def test_struct_members_are_decoded() -> None:
    result = decode(_response("<struct>" + _member("a", "<int>1</int>") + _member("b", "<string>x</string>") + "</struct>"))
    assert result.kind is Kind.STRUCT
    assert result.struct_value["a"].int_value == 1
    assert result.struct_value["b"].string_value == "x"


@pytest.mark.parametrize(
    "value_xml,leaf",
    [
        ("<struct>" + _member("a", "<int>1</int>") + _member("a", "<int>2</int>") + "</struct>", DuplicateMemberName),
        ("<struct></struct>", EmptyStructNotAllowed),
        ("<struct><member><value><int>1</int></value></member></struct>", MissingMemberName),
        ("<struct><member><name>a</name></member></struct>", MissingMemberValue),
        ("<struct><member><name>a</name><name>b</name><value><int>1</int></value></member></struct>", MissingMemberName),
        ("<nil/>", UnrecognizedTag),
        ("<int>1</int><int>2</int>", MalformedValue),
        ("", MalformedValue),
        ("<array><data><value></value></data></array>", MalformedValue),
        ("<int>1.5</int>", IntegerConversionFailed),
        ("<boolean>yes</boolean>", BooleanConversionFailed),
        ("<double>abc</double>", DoubleConversionFailed),
        ("<dateTime.iso8601>yesterday</dateTime.iso8601>", DateTimeConversionFailed),
        ("<base64>!!!</base64>", Base64ConversionFailed),
    ],
)
def test_structural_and_scalar_failures(value_xml, leaf) -> None:
    with pytest.raises(ResponseDecodeFailed) as exc:
        decode(_response(value_xml))
    assert find_error(exc.value, leaf) is not None


def test_duplicate_member_error_names_the_member() -> None:
    body = _response("<struct>" + _member("id", "<int>1</int>") + _member("id", "<int>2</int>") + "</struct>")
    with pytest.raises(ResponseDecodeFailed) as exc:
        decode(body)
    dup = find_error(exc.value, DuplicateMemberName)
    assert dup.name == "id"


def test_nested_failure_discards_partial_result() -> None:
    body = _response(
        "<array><data><value><int>1</int></value>"
        "<value><array><data></data></array></value></data></array>"
    )
    with pytest.raises(ResponseDecodeFailed):
        decode(body)


def test_empty_string_element_decodes_to_empty_string() -> None:
    result = decode(_response("<string/>"))
    assert result.kind is Kind.STRING
    assert result.string_value == ""


def test_round_trip_scalars() -> None:
    when = datetime(2021, 6, 7, 8, 9, 10, tzinfo=timezone.utc)
    assert _echo(42).int_value == 42
    assert _echo(True).bool_value is True
    assert _echo("héllo <&>").string_value == "héllo <&>"
    assert _echo(0.1).double_value == 0.1
    assert _echo(when).datetime_value == when
    assert _echo(b"\x00\xffbytes").base64_value == b"\x00\xffbytes"


def test_round_trip_collections() -> None:
    value = {"ids": [1, 2, 3], "meta": {"ok": False, "name": "x"}}
    assert _echo(value).to_python() == value


@pytest.mark.parametrize("text,expected", [("0", 0), ("+12", 12), ("-9223372036854775808", -(2**63))])
def test_parse_int(text, expected) -> None:
    assert parse_int(text) == expected


@pytest.mark.parametrize("text", ["", " 1", "1_000", "0x10", "9223372036854775808"])
def test_parse_int_rejects(text) -> None:
    with pytest.raises(IntegerConversionFailed):
        parse_int(text)


@pytest.mark.parametrize("text,expected", [("1", True), ("true", True), ("T", True), ("0", False), ("FALSE", False)])
def test_parse_bool(text, expected) -> None:
    assert parse_bool(text) is expected


def test_parse_double_special_values() -> None:
    assert parse_double("+Inf") == float("inf")
    assert parse_double("-1.5e3") == -1500.0
    with pytest.raises(DoubleConversionFailed):
        parse_double("1e999")
    with pytest.raises(DoubleConversionFailed):
        parse_double(" 1.0")


@pytest.mark.parametrize("text", ["１.５", "٣", "1.٥"])
def test_parse_double_rejects_non_ascii_digits(text) -> None:
    with pytest.raises(DoubleConversionFailed):
        parse_double(text)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("2024-01-02T03:04:05+0000", datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)),
        ("2024-01-02T03:04:05Z", datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)),
        (
            "2024-01-02T03:04:05.25-05:30",
            datetime(2024, 1, 2, 3, 4, 5, 250000, tzinfo=timezone(-timedelta(hours=5, minutes=30))),
        ),
    ],
)
def test_parse_datetime(text, expected) -> None:
    assert parse_datetime(text) == expected


@pytest.mark.parametrize(
    "text", ["20240102T03:04:05", "2024-13-02T03:04:05Z", "2024-01-02T03:04:05", "٢٠٢٤-01-02T03:04:05Z"]
)
def test_parse_datetime_rejects(text) -> None:
    with pytest.raises(DateTimeConversionFailed):
        parse_datetime(text)


def test_parse_base64_ignores_line_breaks() -> None:
    assert parse_base64("aGVs\r\nbG8=") == b"hello"
