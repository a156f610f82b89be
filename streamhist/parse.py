"""
Reading numeric values from whitespace separated text.
"""

import logging
from collections.abc import Iterable, Iterator
from math import isfinite

from .utils.exceptions import StreamHistError

logger = logging.getLogger(__name__)


class ParsingError(StreamHistError):
    """Base exception for lines that do not yield a value."""

    pass


class MissingField(ParsingError):
    """The line has fewer fields than requested."""

    pass


class ParseFailed(ParsingError):
    """The field is not a number."""

    pass


class NotANumber(ParsingError):
    """The field parses to NaN or an infinity."""

    pass


def parse_field(line: str, index: int) -> float:
    """
    Parse the field at `index` of `line` as a float.

    Args:
        line: Text with whitespace separated fields.
        index: 0-based field index.

    Raises:
        MissingField: If there is no field at `index`.
        ParseFailed: If the field is not a plain decimal or exponent literal.
        NotANumber: If the field is NaN or infinite.
    """
    fields = line.split()
    if index >= len(fields):
        raise MissingField("nothing to read")
    field = fields[index]
    # float() also takes digit separators and non-ASCII digits
    if "_" in field or not field.isascii():
        raise ParseFailed(f"parsing {field} failed")
    try:
        value = float(field)
    except ValueError:
        raise ParseFailed(f"parsing {field} failed") from None
    if not isfinite(value):
        raise NotANumber(f"{value} is not a number")
    return value


def read_values(lines: Iterable[str], field: int = 0) -> Iterator[float]:
    """
    Yield the numeric `field` of every line, skipping lines that fail to parse.

    Skipped lines are reported as warnings with their 1-based line number.
    """
    for number, line in enumerate(lines, start=1):
        try:
            yield parse_field(line, field)
        except ParsingError as e:
            logger.warning(f"line {number}: {e}")
