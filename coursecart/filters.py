"""
Filtering rendered rows by term and free text.

Both filters are case-insensitive and combine with AND: the text search only
looks at rows that already passed the term filter. Empty inputs mean
"no filter". Row order is never changed.
"""

from __future__ import annotations

from coursecart.model import CANONICAL_FIELDS, RenderedRow


def _haystack(row: RenderedRow) -> str:
    rec = row.record
    return " ".join(getattr(rec, name) for name in CANONICAL_FIELDS).lower()


def filter_rows(rows: list[RenderedRow], term: str = "", text: str = "") -> list[RenderedRow]:
    wanted_term = (term or "").strip().lower()
    query = (text or "").lower()

    out = rows
    if wanted_term:
        out = [r for r in out if r.record.term.strip().lower() == wanted_term]
    if query:
        out = [r for r in out if query in _haystack(r)]
    return list(out)


def available_terms(rows: list[RenderedRow]) -> list[str]:
    """
    Distinct non-empty terms in first-seen order (for a term selector).
    """
    seen: set[str] = set()
    terms: list[str] = []
    for r in rows:
        t = r.record.term.strip()
        if t and t.lower() not in seen:
            seen.add(t.lower())
            terms.append(t)
    return terms
