"""
Catalog loading pipeline.

    sources -> CSV parse -> normalize -> render        (normal path)
    pre-rendered HTML table -> normalize -> render     (degraded path)

load_catalog() never raises for missing data: when no source yields rows it
falls back to the HTML table, and without one it returns an empty view.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from coursecart.errors import NoDataAvailable
from coursecart.hydrate import extract_table
from coursecart.model import CourseRecord, Header, RenderedRow
from coursecart.normalize import normalize_rows
from coursecart.render import render_records
from coursecart.sources import CatalogSource, resolve
from coursecart.storage import CartStore


log = logging.getLogger(__name__)

FALLBACK_LABEL = "rendered table"


@dataclass
class CatalogView:
    header: Header
    records: list[CourseRecord]
    rows: list[RenderedRow]
    source_label: str
    degraded: bool = False
    notice: str = ""


def _read_fallback(fallback_html: str | Path | None) -> str:
    if fallback_html is None:
        return ""
    try:
        return Path(fallback_html).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Could not read fallback table %s: %s", fallback_html, exc)
        return ""


def _usable(records: list[CourseRecord]) -> list[CourseRecord]:
    # blank spreadsheet rows come through with an empty course
    return [r for r in records if r.course]


async def load_catalog(
    sources: Iterable[CatalogSource],
    cart: CartStore,
    fallback_html: str | Path | None = None,
    selected_term: str = "",
) -> CatalogView:
    try:
        resolved = await resolve(sources)
    except NoDataAvailable as exc:
        log.warning("%s", exc)
        return _hydrate_existing(fallback_html, cart, selected_term)

    records = _usable(normalize_rows(resolved.header, resolved.rows))
    return CatalogView(
        header=resolved.header,
        records=records,
        rows=render_records(records, cart, selected_term),
        source_label=resolved.source_label,
    )


def _hydrate_existing(fallback_html: str | Path | None, cart: CartStore, selected_term: str) -> CatalogView:
    html = _read_fallback(fallback_html)
    header, raw_rows = extract_table(html) if html else ([], [])

    if not raw_rows:
        return CatalogView(
            header=[],
            records=[],
            rows=[],
            source_label="none",
            degraded=True,
            notice="No catalog data available.",
        )

    records = _usable(normalize_rows(header, raw_rows))
    return CatalogView(
        header=header,
        records=records,
        rows=render_records(records, cart, selected_term),
        source_label=FALLBACK_LABEL,
        degraded=True,
        notice="Catalog sources unavailable; showing the existing table.",
    )


def load_catalog_sync(
    sources: Iterable[CatalogSource],
    cart: CartStore,
    fallback_html: str | Path | None = None,
    selected_term: str = "",
) -> CatalogView:
    """Blocking wrapper used by the CLI."""
    return asyncio.run(load_catalog(sources, cart, fallback_html, selected_term))
