"""
Hydrating an already-rendered course table (HTML).

Last resort when no CSV source loads: the page that hosts the catalog often
already contains a server-rendered <table id="courseTable">. We read that
table back into header + rows, and we can decorate it in place with an
"Add" column whose buttons reflect the current cart.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from coursecart import config
from coursecart.model import Header, RawRow
from coursecart.normalize import DEFAULT_HEADER, build_field_map, record_from_row
from coursecart.storage import CartStore


ACTION_HEADER = "Add"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _find_table(soup: BeautifulSoup, table_id: str) -> Tag | None:
    return soup.find("table", id=table_id)


def _header_cells(table: Tag) -> list[str]:
    thead = table.find("thead")
    if not thead:
        return []
    return [th.get_text(strip=True) for th in thead.find_all("th")]


def _body_rows(table: Tag) -> list[Tag]:
    tbody = table.find("tbody")
    if tbody:
        return tbody.find_all("tr", recursive=False)
    # no <tbody>: every row that is not inside <thead>
    return [tr for tr in table.find_all("tr") if tr.find_parent("thead") is None]


def _data_cells(tr: Tag) -> list[Tag]:
    """Cells of a body row, without a trailing action (button) cell."""
    tds = tr.find_all("td", recursive=False)
    if tds and tds[-1].find("button") is not None:
        tds = tds[:-1]
    return tds


def _has_action_column(cells: list[str]) -> bool:
    return bool(cells) and cells[-1] == ACTION_HEADER


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_table(html: str, table_id: str = config.TABLE_ID) -> tuple[Header, list[RawRow]]:
    """
    Read header and data rows from a rendered course table.

    Missing <thead> -> DEFAULT_HEADER. A trailing "Add" column (from an
    earlier decoration) is ignored. Missing table -> ([], []).
    """
    soup = BeautifulSoup(html, "html.parser")
    table = _find_table(soup, table_id)
    if table is None:
        return [], []

    cells = _header_cells(table)
    if _has_action_column(cells):
        cells = cells[:-1]
    header = cells if cells else list(DEFAULT_HEADER)

    rows: list[RawRow] = []
    for tr in _body_rows(table):
        values = [td.get_text(strip=True) for td in _data_cells(tr)]
        if not values:
            continue
        rows.append(values[: len(header)])

    return header, rows


def decorate_table(html: str, cart: CartStore, table_id: str = config.TABLE_ID) -> str:
    """
    Add an "Add" column to a rendered course table.

    Rows already in the cart get a disabled "Added" button. Existing cells
    are left as they are. HTML without the table is returned unchanged.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = _find_table(soup, table_id)
    if table is None:
        return html

    cells = _header_cells(table)
    decorated = _has_action_column(cells)
    if decorated:
        cells = cells[:-1]
    header = cells if cells else list(DEFAULT_HEADER)
    field_map = build_field_map(header)

    if not decorated:
        thead = table.find("thead")
        if thead is None:
            thead = soup.new_tag("thead")
            table.insert(0, thead)
        head_row = thead.find("tr")
        if head_row is None:
            head_row = soup.new_tag("tr")
            thead.append(head_row)
            if not cells:
                for name in header:
                    th = soup.new_tag("th")
                    th.string = name
                    head_row.append(th)
        th = soup.new_tag("th")
        th.string = ACTION_HEADER
        head_row.append(th)

    in_cart = {item.key for item in cart.list()}

    for tr in _body_rows(table):
        all_tds = tr.find_all("td", recursive=False)
        tds = _data_cells(tr)
        if not tds:
            continue
        if len(all_tds) > len(tds):
            # stale action cell from an earlier pass, rebuilt below
            all_tds[-1].decompose()

        record = record_from_row(field_map, [td.get_text(strip=True) for td in tds])
        added = record.key in in_cart

        btn = soup.new_tag("button", type="button")
        btn.string = "Added" if added else "Add"
        if added:
            btn["disabled"] = "disabled"
        btn["data-course"] = record.course
        btn["data-section"] = record.section

        td = soup.new_tag("td")
        td.append(btn)
        tr.append(td)

    return str(soup)
