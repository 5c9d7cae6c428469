"""
Delimited-text codec for the export tables.

Writing quotes a field only when it contains the delimiter or the quote
character, doubling embedded quotes. Reading treats the quote character
as a toggle, collapses a doubled quote inside a quoted span into one
literal quote, and ignores the delimiter while inside a quoted span, so
``parse_line(format_line(values)) == values`` for any string values
without line breaks.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, List, Optional

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from ...core.constants import CSV_DELIMITER, CSV_LINE_TERMINATOR, CSV_QUOTE, NO, YES
from ...core.exceptions import CSVParseError


def format_value(value: Any) -> str:
    """Render a record attribute as export text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return YES if value else NO
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (datetime, date)):
        text = value.isoformat()
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value)
    # one row per line
    if "\n" in text or "\r" in text:
        text = " ".join(text.splitlines())
    # control characters cannot be stored in a worksheet
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def quote_field(
    text: str,
    delimiter: str = CSV_DELIMITER,
    quote: str = CSV_QUOTE,
) -> str:
    if delimiter in text or quote in text:
        return quote + text.replace(quote, quote * 2) + quote
    return text


def format_line(
    values: Iterable[str],
    delimiter: str = CSV_DELIMITER,
    quote: str = CSV_QUOTE,
) -> str:
    return delimiter.join(quote_field(v, delimiter, quote) for v in values)


def parse_line(
    line: str,
    delimiter: str = CSV_DELIMITER,
    quote: str = CSV_QUOTE,
    expected_fields: Optional[int] = None,
) -> List[str]:
    """
    Split one delimited line into its fields.

    Raises:
        CSVParseError: the line ends inside a quoted span, or the field
            count differs from ``expected_fields``
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == quote:
            if in_quotes and i + 1 < length and line[i + 1] == quote:
                current.append(quote)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    if in_quotes:
        raise CSVParseError("Unbalanced quote in line", line=line)

    fields.append("".join(current))

    if expected_fields is not None and len(fields) != expected_fields:
        raise CSVParseError(
            f"Expected {expected_fields} fields, found {len(fields)}", line=line
        )
    return fields


def split_lines(content: str) -> List[str]:
    """Non-blank lines of a file body, line terminators removed."""
    lines = []
    for raw in content.split(CSV_LINE_TERMINATOR):
        line = raw.rstrip("\r")
        if line.strip():
            lines.append(line)
    return lines


def join_lines(lines: Iterable[str]) -> str:
    return "".join(line + CSV_LINE_TERMINATOR for line in lines)
