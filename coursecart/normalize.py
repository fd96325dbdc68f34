"""
Header normalization (raw rows -> CourseRecord).

Catalog sheets are edited by hand, so column names and order drift
("Course" vs "COURSE", Term before or after Section, extra columns, ...).
Instead of guessing per row, we build one lookup table per header:

    build_field_map(["Course", "TERM", "Room"]) -> {"course": 0, "term": 1}

and read every row through it.
"""

from __future__ import annotations

from coursecart.model import CANONICAL_FIELDS, CourseRecord, Header, RawRow


# Used when a source or a rendered table comes without a header row
DEFAULT_HEADER: Header = ["Course", "Section", "Instructor", "Units", "Days", "Time", "Location"]


def _clean(name: str) -> str:
    return name.strip().lower()


def build_field_map(header: Header) -> dict[str, int]:
    """
    Map each canonical field name to its column index in `header`.

    Matching ignores case and surrounding whitespace. If a name appears twice,
    the first column wins. Canonical fields without a column are left out.
    """
    wanted = set(CANONICAL_FIELDS)
    positions: dict[str, int] = {}
    for idx, name in enumerate(header):
        key = _clean(name)
        if key in wanted and key not in positions:
            positions[key] = idx
    return positions


def record_from_row(field_map: dict[str, int], row: RawRow) -> CourseRecord:
    values: dict[str, str] = {}
    for name, idx in field_map.items():
        values[name] = row[idx] if idx < len(row) else ""
    return CourseRecord(**values)


def normalize(header: Header, row: RawRow) -> CourseRecord:
    """
    Normalize one raw row against its header.
    """
    return record_from_row(build_field_map(header), row)


def normalize_rows(header: Header, rows: list[RawRow]) -> list[CourseRecord]:
    """
    Normalize many rows; the field map is built once for the header.
    """
    field_map = build_field_map(header)
    return [record_from_row(field_map, row) for row in rows]


def display_header(header: Header) -> Header:
    """
    Return a copy of `header` with the term column moved right after course.

    Display only: the field map is always built from the original header,
    so this never changes which cell feeds which field.
    """
    out = list(header)
    lowered = [_clean(h) for h in out]
    if "course" not in lowered or "term" not in lowered:
        return out

    course_idx = lowered.index("course")
    term_idx = lowered.index("term")
    if abs(course_idx - term_idx) == 1:
        return out

    term_name = out.pop(term_idx)
    # popping an earlier column shifts course one to the left
    if term_idx < course_idx:
        course_idx -= 1
    out.insert(course_idx + 1, term_name)
    return out
