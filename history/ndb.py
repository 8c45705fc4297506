"""Attribute-record text format used by the history file.

A record is one or more lines. A line whose first character is not whitespace starts a
new record; a line starting with a space or tab continues the current one. Blank lines
and lines whose first non-blank character is ``#`` are ignored, and ``#`` at a token
boundary starts a comment running to end of line.

Each line holds whitespace-separated tuples::

    attr                      value is ""
    attr=bare                 value runs to the next whitespace
    attr="double quoted"      backslash escapes, see below
    attr='plan 9 quoted'      no escapes, '' stands for a single quote

Escapes inside double quotes: ``\\\\ \\" \\' \\a \\b \\f \\n \\r \\t \\v``, ``\\xHH``,
``\\uHHHH`` and ``\\UHHHHHHHH`` (code points) and ``\\OOO`` (three octal digits, code point).

The writer double-quotes every non-empty value, escapes backslash, double quote, newline,
carriage return and tab by name, writes other non-printable characters as ``\\x``/``\\u``/
``\\U`` code points and leaves printable text (including non-ASCII) as is, so a record
always fits on one line and reads back unchanged.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from errors import HistoryFormatError

Record = tuple[tuple[str, str], ...]

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}
_HEX_WIDTHS = {"x": 2, "u": 4, "U": 8}
_OCTAL_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"

_QUOTE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_BLANK = " \t"
_ATTR_STOP = " \t=\"'"


def quote(value: str) -> str:
    """Return value as a double-quoted, escaped token."""
    out = ['"']
    for ch in value:
        if ch in _QUOTE_ESCAPES:
            out.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        else:
            code = ord(ch)
            if code < 0x100:
                out.append(f"\\x{code:02x}")
            elif code < 0x10000:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
    out.append('"')
    return "".join(out)


def _check_attr(attr: str) -> None:
    if not attr or any(ch in _ATTR_STOP or not ch.isprintable() for ch in attr):
        raise ValueError(f"invalid attribute name: {attr!r}")


def format_record(record: Iterable[tuple[str, str]]) -> str:
    """Serialize one record as a single newline-terminated line."""
    parts = []
    for attr, value in record:
        _check_attr(attr)
        parts.append(f"{attr}={quote(value)}" if value else attr)
    if not parts:
        raise ValueError("cannot format an empty record")
    return " ".join(parts) + "\n"


def _read_double(line: str, i: int, lineno: int) -> tuple[str, int]:
    n = len(line)
    chars: list[str] = []
    i += 1
    while i < n:
        ch = line[i]
        if ch == '"':
            return "".join(chars), i + 1
        if ch != "\\":
            chars.append(ch)
            i += 1
            continue
        i += 1
        if i >= n:
            break
        esc = line[i]
        if esc in _SIMPLE_ESCAPES:
            chars.append(_SIMPLE_ESCAPES[esc])
            i += 1
        elif esc in _HEX_WIDTHS:
            width = _HEX_WIDTHS[esc]
            digits = line[i + 1 : i + 1 + width]
            if len(digits) != width or any(d not in _HEX_DIGITS for d in digits):
                raise HistoryFormatError(lineno, f"bad \\{esc} escape at column {i}")
            code = int(digits, 16)
            if code > 0x10FFFF:
                raise HistoryFormatError(lineno, f"code point out of range at column {i}")
            chars.append(chr(code))
            i += 1 + width
        elif esc in _OCTAL_DIGITS:
            digits = line[i : i + 3]
            if len(digits) != 3 or any(d not in _OCTAL_DIGITS for d in digits):
                raise HistoryFormatError(lineno, f"bad octal escape at column {i}")
            chars.append(chr(int(digits, 8)))
            i += 3
        else:
            raise HistoryFormatError(lineno, f"unknown escape \\{esc} at column {i}")
    raise HistoryFormatError(lineno, "unterminated double-quoted value")


def _read_single(line: str, i: int, lineno: int) -> tuple[str, int]:
    n = len(line)
    chars: list[str] = []
    i += 1
    while i < n:
        if line[i] == "'":
            if i + 1 < n and line[i + 1] == "'":
                chars.append("'")
                i += 2
                continue
            return "".join(chars), i + 1
        chars.append(line[i])
        i += 1
    raise HistoryFormatError(lineno, "unterminated single-quoted value")


def _read_value(line: str, i: int, lineno: int) -> tuple[str, int]:
    n = len(line)
    if i >= n or line[i] in _BLANK:
        return "", i
    if line[i] == '"':
        return _read_double(line, i, lineno)
    if line[i] == "'":
        return _read_single(line, i, lineno)
    start = i
    while i < n and line[i] not in _BLANK:
        i += 1
    return line[start:i], i


def parse_line(line: str, lineno: int = 1) -> list[tuple[str, str]]:
    """Split one line (without its newline) into (attr, value) tuples."""
    tuples: list[tuple[str, str]] = []
    n = len(line)
    i = 0
    while i < n:
        ch = line[i]
        if ch in _BLANK:
            i += 1
            continue
        if ch == "#":
            break
        start = i
        while i < n and line[i] not in _ATTR_STOP:
            i += 1
        attr = line[start:i]
        if not attr:
            raise HistoryFormatError(lineno, f"expected attribute name at column {start + 1}")
        value = ""
        if i < n and line[i] == "=":
            value, i = _read_value(line, i + 1, lineno)
            if i < n and line[i] not in _BLANK:
                raise HistoryFormatError(lineno, f"junk after value at column {i + 1}")
        tuples.append((attr, value))
    return tuples


def parse_records(lines: Iterable[str]) -> Iterator[Record]:
    """Yield records in file order. Raises HistoryFormatError on the first bad line."""
    current: list[tuple[str, str]] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        stripped = line.lstrip(_BLANK)
        if not stripped or stripped.startswith("#"):
            continue
        tuples = parse_line(line, lineno)
        if line[0] in _BLANK:
            if not current:
                raise HistoryFormatError(lineno, "continuation line outside a record")
            current.extend(tuples)
            continue
        if current:
            yield tuple(current)
        current = tuples
    if current:
        yield tuple(current)


def last_value(record: Record, attr: str) -> str | None:
    """Value of attr in record; when attr repeats the last occurrence wins."""
    value = None
    for name, val in record:
        if name == attr:
            value = val
    return value
