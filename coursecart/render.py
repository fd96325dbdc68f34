"""
Rendering (records -> rows ready for display).

render() is a pure projection: it decides, per row, whether the course is
already in the cart and which term label to show. Printing the rows (rich
table, HTML buttons, ...) is up to the caller.

The cart is read once per render pass. If the cart changes afterwards the
rows are simply stale until the next render.
"""

from __future__ import annotations

from coursecart.model import CANONICAL_FIELDS, CourseRecord, Header, RawRow, RenderedRow
from coursecart.normalize import build_field_map, display_header, normalize_rows
from coursecart.storage import CartStore


def render_records(
    records: list[CourseRecord],
    cart: CartStore,
    selected_term: str = "",
) -> list[RenderedRow]:
    """
    Render already-normalized records against a snapshot of the cart.
    """
    in_cart = {item.key for item in cart.list()}
    term = selected_term.strip()

    return [
        RenderedRow(
            record=rec,
            in_cart=rec.key in in_cart,
            term_label=term or rec.term,
        )
        for rec in records
    ]


def render(
    header: Header,
    rows: list[RawRow],
    cart: CartStore,
    selected_term: str = "",
) -> list[RenderedRow]:
    """
    Normalize raw rows through the header and render them.
    """
    return render_records(normalize_rows(header, rows), cart, selected_term)


def display_columns(header: Header) -> list[tuple[str, str]]:
    """
    Column layout for display: (label, canonical field) pairs.

    Follows the source header order (with term moved next to course) and
    keeps only columns that map to a canonical field. Without a usable
    header all eight fields are shown.
    """
    field_map = build_field_map(header)
    columns: list[tuple[str, str]] = []
    seen: set[str] = set()
    for label in display_header(header):
        name = label.strip().lower()
        if name in field_map and name not in seen:
            columns.append((label.strip(), name))
            seen.add(name)

    if not columns:
        columns = [(name.capitalize(), name) for name in CANONICAL_FIELDS]
    return columns


def row_cells(row: RenderedRow, columns: list[tuple[str, str]]) -> list[str]:
    return [getattr(row.record, field) for _, field in columns]
