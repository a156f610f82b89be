import logging

import pytest

from streamhist.parse import MissingField, NotANumber, ParseFailed, parse_field, read_values


def test_parse_field():
    assert parse_field("0.00001", 0) == 0.00001
    assert parse_field("3.14 25.13 31 42", 0) == 3.14
    assert parse_field("3.14\t25.13  31 42", 3) == 42.0
    assert parse_field("  -1e3  ", 0) == -1000.0


@pytest.mark.parametrize(
    "line, index, error",
    [
        ("", 0, MissingField),
        ("", 5, MissingField),
        ("1 2 3", 5, MissingField),
        ("NaN", 0, NotANumber),
        ("inf", 0, NotANumber),
        ("-inf", 0, NotANumber),
        ("1 2 3efg7", 2, ParseFailed),
        ("1_000", 0, ParseFailed),
        ("\u0661\u0662", 0, ParseFailed),
    ],
)
def test_parse_field_errors(line, index, error):
    with pytest.raises(error):
        parse_field(line, index)


def test_read_values_skips_bad_lines(caplog):
    lines = ["1.5 a", "oops b", "2.5 c", "", "nan d", "4 e"]
    with caplog.at_level(logging.WARNING, logger="streamhist.parse"):
        values = list(read_values(lines, 0))
    assert values == [1.5, 2.5, 4.0]
    messages = [r.getMessage() for r in caplog.records]
    assert messages[0].startswith("line 2:")
    assert messages[1].startswith("line 4:")
    assert messages[2].startswith("line 5:")


def test_read_values_field():
    assert list(read_values(["a 1", "b 2"], 1)) == [1.0, 2.0]
