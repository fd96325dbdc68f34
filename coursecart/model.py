"""
Central data model definitions used across the project.

This module defines the canonical structure of course rows so that:
- all modules share the same eight field names
- the CSV loader, the HTML hydrator, the renderer and the cart agree on one shape
- cart snapshots stay independent from the catalog they were copied from
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping


# Canonical field order. Also used as the column order when a record is
# serialized back to CSV or JSON.
CANONICAL_FIELDS: tuple[str, ...] = (
    "course",
    "term",
    "section",
    "instructor",
    "units",
    "days",
    "time",
    "location",
)

# Raw parser output: cells positionally aligned to a header
RawRow = list[str]
Header = list[str]


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class CourseRecord:
    """
    One normalized catalog row (also used as the cart item snapshot).

    Frozen: once a row is copied into the cart it is never mutated.
    """

    course: str = ""
    term: str = ""
    section: str = ""
    instructor: str = ""
    units: str = ""
    days: str = ""
    time: str = ""
    location: str = ""

    @property
    def key(self) -> tuple[str, str]:
        return (self.course, self.section)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CourseRecord":
        """
        Build a record from a stored mapping.

        Stored carts carry no schema version, so older items may lack fields
        (e.g. "term") or hold nulls. Anything that is not a string becomes "".
        """
        return cls(**{name: _as_text(data.get(name)) for name in CANONICAL_FIELDS})


@dataclass(frozen=True)
class RenderedRow:
    """
    Presentation projection of one record for a single render pass.
    """

    record: CourseRecord
    in_cart: bool
    term_label: str

    @property
    def action_label(self) -> str:
        return "Added" if self.in_cart else "Add"


@dataclass(frozen=True)
class FilterState:
    """
    Current filter inputs (selected term + search text). Never persisted.
    """

    term: str = ""
    text: str = ""
