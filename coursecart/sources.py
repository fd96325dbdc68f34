"""
Catalog source resolution.

The catalog can come from several places, tried in a fixed order:

    1. the published Google Sheet (remote CSV)
    2. the bundled local CSV file
    3. nothing -> NoDataAvailable (caller hydrates an existing HTML table)

A source counts only if it loads AND parses to at least one data row.
Each source is tried exactly once per resolve() call (no retries).

Fetching is blocking (requests / file reads), so it runs in a worker thread
and resolve() can be awaited without blocking the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

import requests

from coursecart import config
from coursecart.csvparse import parse_table
from coursecart.errors import NoDataAvailable, SourceUnavailable
from coursecart.model import Header, RawRow


log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class CatalogSource(Protocol):
    label: str

    async def fetch_text(self) -> str:
        ...


class RemoteSource:
    """
    CSV published over HTTP(S). Any non-2xx status or transport error fails.
    """

    def __init__(self, url: str, timeout: float = config.REQUEST_TIMEOUT, label: str = "remote") -> None:
        self.url = url
        self.timeout = timeout
        self.label = label

    def _get(self) -> str:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise SourceUnavailable(self.label, str(exc)) from exc
        return resp.text

    async def fetch_text(self) -> str:
        return await asyncio.to_thread(self._get)


class LocalSource:
    """
    CSV file on disk. Relative paths are resolved against the data directory.
    """

    def __init__(self, path: str | Path, base_dir: Path = config.DATA_DIR, label: str = "local") -> None:
        p = Path(path)
        self.path = p if p.is_absolute() else base_dir / p
        self.label = label

    def _read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable(self.label, str(exc)) from exc

    async def fetch_text(self) -> str:
        return await asyncio.to_thread(self._read)


def build_sources(sheet_url: str | None = None, local_csv: str | Path | None = None) -> list[CatalogSource]:
    """
    Build the source list in priority order from configuration.

    The remote source is left out when no sheet URL is configured.
    """
    url = config.SHEET_CSV_URL if sheet_url is None else sheet_url.strip()
    csv_path = config.LOCAL_CSV if local_csv is None else local_csv

    sources: list[CatalogSource] = []
    if url:
        sources.append(RemoteSource(url))
    else:
        log.debug("No sheet URL configured, skipping remote source")
    sources.append(LocalSource(csv_path))
    return sources


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass
class ResolvedCatalog:
    header: Header
    rows: list[RawRow]
    source_label: str


async def _try_source(source: CatalogSource) -> ResolvedCatalog:
    text = await source.fetch_text()
    header, rows = parse_table(text)
    if not rows:
        raise SourceUnavailable(source.label, "no data rows")
    return ResolvedCatalog(header=header, rows=rows, source_label=source.label)


async def resolve(sources: Iterable[CatalogSource]) -> ResolvedCatalog:
    """
    Return the first source that yields rows.

    Raises NoDataAvailable when every source failed.
    """
    failures: list[SourceUnavailable] = []
    for source in sources:
        try:
            resolved = await _try_source(source)
        except SourceUnavailable as exc:
            log.warning("Catalog source unavailable, falling back: %s", exc)
            failures.append(exc)
            continue
        log.info("Loaded %d catalog rows from %s", len(resolved.rows), resolved.source_label)
        return resolved

    raise NoDataAvailable(failures)
