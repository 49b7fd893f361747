"""Reading and writing of ``.properties`` files.

The line format is the one used by Java ``.properties`` files so that files
seeded by other CIAO tooling stay readable:

- blank lines and lines starting with ``#`` or ``!`` are ignored
- a key ends at the first unescaped ``=``, ``:`` or whitespace
- a line ending in an odd number of backslashes continues on the next line
- only ``\\r\\n``, ``\\r`` and ``\\n`` end a line
- ``\\t \\n \\r \\f \\uXXXX`` are decoded, any other escaped char is literal

On write, other non-printable BMP characters are escaped as ``\\uXXXX``.

Files are read and written as UTF-8.
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_DECODE = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ENCODE = {"\\": "\\\\", "\t": "\\t", "\n": "\\n", "\r": "\\r", "\f": "\\f"}


def _continues(line: str) -> bool:
    trailing = len(line) - len(line.rstrip("\\"))
    return trailing % 2 == 1


def _logical_lines(text: str) -> Iterator[str]:
    buffer: list[str] = []
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if not buffer and (not line or line[0] in "#!"):
            continue
        if _continues(line):
            buffer.append(line[:-1])
            continue
        buffer.append(line)
        yield "".join(buffer)
        buffer = []
    if buffer:
        yield "".join(buffer)


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text
    out: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char != "\\":
            out.append(char)
            index += 1
            continue
        index += 1
        if index >= len(text):
            break
        char = text[index]
        if char == "u":
            digits = text[index + 1:index + 5]
            if len(digits) != 4 or any(d not in _HEX_DIGITS for d in digits):
                raise ValueError(f"Malformed \\uXXXX escape in {text!r}")
            out.append(chr(int(digits, 16)))
            index += 5
            continue
        out.append(_DECODE.get(char, char))
        index += 1
    return "".join(out)


def _split_entry(line: str) -> tuple[str, str]:
    index = 0
    while index < len(line):
        char = line[index]
        if char == "\\":
            index += 2
            continue
        if char in _SEPARATORS or char in _WHITESPACE:
            break
        index += 1
    key = line[:index]
    rest = line[index:].lstrip(_WHITESPACE)
    if rest[:1] and rest[0] in _SEPARATORS:
        rest = rest[1:].lstrip(_WHITESPACE)
    return _unescape(key), _unescape(rest)


def parse_properties(text: str) -> dict[str, str]:
    """Parse ``.properties`` text.  Later duplicates of a key win."""
    entries: dict[str, str] = {}
    for line in _logical_lines(text):
        key, value = _split_entry(line)
        entries[key] = value
    return entries


def _escape(text: str, *, is_key: bool) -> str:
    out: list[str] = []
    for index, char in enumerate(text):
        if char in _ENCODE:
            out.append(_ENCODE[char])
        elif char in "=:#!":
            out.append("\\" + char)
        elif not char.isprintable() and ord(char) <= 0xFFFF:
            out.append(f"\\u{ord(char):04x}")
        elif char == " " and (is_key or index == 0):
            out.append("\\ ")
        else:
            out.append(char)
    return "".join(out)


def format_properties(
    entries: Mapping[str, str], comments: Iterable[str] = (),
) -> str:
    """Render entries as ``.properties`` text, keys sorted."""
    lines = [f"#{comment}" for comment in comments]
    for key in sorted(entries):
        lines.append(f"{_escape(key, is_key=True)}={_escape(entries[key], is_key=False)}")
    return "\n".join(lines) + "\n"


def read_properties(path: Path) -> dict[str, str]:
    with open(path, encoding="utf-8") as f:
        return parse_properties(f.read())


def write_properties(
    path: Path, entries: Mapping[str, str], comments: Iterable[str] = (),
) -> None:
    """Replace *path* with the rendered entries.

    The text is written to a sibling temporary file first, so a failed write
    never leaves a truncated file in place of *path*.
    """
    payload = format_properties(entries, comments).encode("utf-8")
    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "wb") as f:
            f.write(payload)
        os.replace(tmp, path)
    finally:
        tmp.unlink(missing_ok=True)
