import pytest

from procmetrics.util import (
    ValueParser,
    parse_bool,
    parse_uint32s,
    parse_uint64s,
    read_uint_from_file,
    sys_read_file,
)


@pytest.mark.parametrize(
    "value, method, expected",
    [
        ("1", "pint64", 1),
        ("0xff", "pint64", 255),
        ("1", "puint64", 1),
        ("0xff", "puint64", 255),
    ],
)
def test_value_parser_ok(value, method, expected):
    parser = ValueParser(value)
    assert getattr(parser, method)() == expected
    assert parser.err is None


@pytest.mark.parametrize(
    "value, method",
    [
        ("hello", "pint64"),
        ("0xhello", "pint64"),
        ("-42", "puint64"),
        ("0xhello", "puint64"),
    ],
)
def test_value_parser_bad(value, method):
    parser = ValueParser(value)
    assert getattr(parser, method)() is None
    assert isinstance(parser.err, ValueError)


def test_value_parser_negative_int64():
    assert ValueParser("-42").pint64() == -42


def test_value_parser_leading_zero_is_octal():
    assert ValueParser("010").pint64() == 8


def test_value_parser_remembers_error():
    parser = ValueParser("hello")
    parser.pint64()
    first = parser.err
    assert parser.puint64() is None
    assert parser.err is first


def test_value_parser_int64_out_of_range():
    parser = ValueParser("0x8000000000000000")
    assert parser.pint64() is None
    assert isinstance(parser.err, ValueError)
    assert ValueParser("0x8000000000000000").puint64() == 1 << 63


def test_parse_uint32s():
    assert parse_uint32s(["0", "1", "4294967295"]) == [0, 1, 4294967295]


def test_parse_uint32s_out_of_range():
    with pytest.raises(ValueError):
        parse_uint32s(["4294967296"])


def test_parse_uint64s():
    assert parse_uint64s(["18446744073709551615", "7"]) == [18446744073709551615, 7]


@pytest.mark.parametrize("bad", ["-1", "+1", "abc", "", "1.5", "18446744073709551616"])
def test_parse_uint64s_invalid(bad):
    with pytest.raises(ValueError):
        parse_uint64s([bad])


def test_read_uint_from_file(tmp_path):
    target = tmp_path / "read_mbytes"
    target.write_text("10325\n")
    assert read_uint_from_file(target) == 10325


def test_read_uint_from_file_invalid(tmp_path):
    target = tmp_path / "read_mbytes"
    target.write_text("ten\n")
    with pytest.raises(ValueError):
        read_uint_from_file(target)


def test_read_uint_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_uint_from_file(tmp_path / "missing")


@pytest.mark.parametrize(
    "text, expected",
    [("enabled", True), ("disabled", False), ("on", None), ("", None)],
)
def test_parse_bool(text, expected):
    assert parse_bool(text) is expected


def test_sys_read_file_trims(tmp_path):
    target = tmp_path / "temp1_input"
    target.write_text("  42000 \n")
    assert sys_read_file(target) == "42000"


def test_sys_read_file_reads_at_most_128_bytes(tmp_path):
    target = tmp_path / "big"
    target.write_text("a" * 200)
    assert sys_read_file(target) == "a" * 128


def test_sys_read_file_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        sys_read_file(tmp_path / "missing")