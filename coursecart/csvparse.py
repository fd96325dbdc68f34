"""
CSV parsing (text -> rows of string cells).

The catalog is usually a spreadsheet exported to CSV by hand, so this parser
is tolerant rather than strict:
- blank lines are skipped
- quotes toggle quoted mode, "" inside quotes is one literal quote
- an unterminated quote simply runs to the end of the line
- nothing here ever raises

Quoted fields cannot span lines: input is split into lines first.
"""

from __future__ import annotations

import re

from coursecart.model import Header, RawRow


_LINE_BREAK = re.compile(r"\r\n|\r|\n")

_BOM = "\ufeff"


def _finish_field(chars: list[tuple[str, bool]]) -> str:
    """
    Join accumulated characters, trimming whitespace that was read outside quotes.

    Each entry is (char, was_quoted). Whitespace inside a quoted section is
    content and is kept.
    """
    start = 0
    end = len(chars)
    while start < end and not chars[start][1] and chars[start][0].isspace():
        start += 1
    while end > start and not chars[end - 1][1] and chars[end - 1][0].isspace():
        end -= 1
    return "".join(ch for ch, _ in chars[start:end])


def parse_line(line: str) -> RawRow:
    """
    Split one CSV line into fields.
    """
    fields: RawRow = []
    current: list[tuple[str, bool]] = []
    quoted = False

    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            # "" inside a quoted section is an escaped quote
            if quoted and i + 1 < n and line[i + 1] == '"':
                current.append(('"', True))
                i += 2
                continue
            quoted = not quoted
        elif ch == "," and not quoted:
            fields.append(_finish_field(current))
            current = []
        else:
            current.append((ch, quoted))
        i += 1

    fields.append(_finish_field(current))
    return fields


def parse_csv(text: str) -> list[RawRow]:
    """
    Parse CSV text into rows. Empty input (or only blank lines) gives [].
    """
    if not text:
        return []

    rows: list[RawRow] = []
    for line in _LINE_BREAK.split(text):
        if not line.strip():
            continue
        rows.append(parse_line(line))
    return rows


def parse_table(text: str) -> tuple[Header, list[RawRow]]:
    """
    Parse CSV text whose first row is the header.

    Every data row is aligned to the header width: short rows are padded
    with "", extra cells are dropped.
    """
    rows = parse_csv(text)
    if not rows:
        return [], []

    header = rows[0]
    if header and header[0].startswith(_BOM):
        header[0] = header[0][len(_BOM):].strip()

    width = len(header)
    data: list[RawRow] = []
    for row in rows[1:]:
        if len(row) < width:
            row = row + [""] * (width - len(row))
        data.append(row[:width])

    return header, data
