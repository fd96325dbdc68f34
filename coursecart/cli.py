"""
CLI (Command Line Interface).

Quick terminal commands, e.g.:

    coursecart browse --term "Fall 2025" --search math
    coursecart terms
    coursecart add "MATH 101" 001
    coursecart cart
    coursecart clear
    coursecart hydrate page.html -o page.html
    coursecart interactive

Source and storage locations come from coursecart.config and can be
overridden per command (--sheet-url, --local-csv, --cart-file, --fallback-html).

Note:
- The interactive menu lives in coursecart/interactive.py
- Logging goes to stderr, tables go to stdout
"""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from coursecart import config
from coursecart.catalog import CatalogView, load_catalog_sync
from coursecart.errors import StorageWriteFailure
from coursecart.filters import available_terms, filter_rows
from coursecart.hydrate import decorate_table
from coursecart.log_config import setup_logging
from coursecart.model import CANONICAL_FIELDS, CourseRecord, RenderedRow
from coursecart.render import display_columns, row_cells
from coursecart.sources import build_sources
from coursecart.storage import CartStore, JsonFileCartStore, add_if_absent


console = Console()


# ---------------------------------------------------------------------------
# Shared helpers (also used by interactive.py)
# ---------------------------------------------------------------------------


def open_cart(args: argparse.Namespace) -> CartStore:
    return JsonFileCartStore(args.cart_file)


def load_view(args: argparse.Namespace, cart: CartStore, selected_term: str = "") -> CatalogView:
    sources = build_sources(sheet_url=args.sheet_url, local_csv=args.local_csv)
    return load_catalog_sync(sources, cart, fallback_html=args.fallback_html, selected_term=selected_term)


def print_source(view: CatalogView) -> None:
    if view.degraded:
        console.print(f"[yellow]{escape(view.notice)}[/]")
    else:
        console.print(f"Source: [bold]{escape(view.source_label)}[/] ({len(view.records)} courses)")


def print_rows(rows: list[RenderedRow], view: CatalogView, title: str = "Courses", numbered: bool = False) -> None:
    """
    Print catalog rows as a table with the Add/Added column.
    """
    columns = display_columns(view.header)

    table = Table(title=title, box=box.SIMPLE)
    if numbered:
        table.add_column("#", justify="right")
    for label, _ in columns:
        table.add_column(label)
    table.add_column("Add")

    for i, row in enumerate(rows, start=1):
        action = "[green]Added[/]" if row.in_cart else row.action_label
        cells = [escape(c) for c in row_cells(row, columns)] + [action]
        if numbered:
            cells = [str(i)] + cells
        table.add_row(*cells)

    console.print(table)


def print_cart(items: list[CourseRecord]) -> None:
    if not items:
        console.print("Cart is empty.")
        return

    table = Table(title=f"Cart ({len(items)})", box=box.SIMPLE)
    for name in CANONICAL_FIELDS:
        table.add_column(name.capitalize())
    for item in items:
        table.add_row(*[escape(getattr(item, name)) for name in CANONICAL_FIELDS])
    console.print(table)


def find_record(view: CatalogView, course: str, section: str, term: str = "") -> CourseRecord | None:
    """
    Look up a catalog row by course + section (optionally narrowed by term).

    Course/section compare case-insensitively here because this is user input;
    the cart itself matches exactly.
    """
    c = course.strip().lower()
    s = section.strip().lower()
    rows = filter_rows(view.rows, term=term)
    for row in rows:
        rec = row.record
        if rec.course.lower() == c and rec.section.lower() == s:
            return rec
    return None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_browse(args: argparse.Namespace) -> int:
    cart = open_cart(args)
    view = load_view(args, cart, selected_term=args.term)
    print_source(view)
    if not view.rows:
        return 0

    rows = filter_rows(view.rows, args.term, args.search)
    if not rows:
        console.print("No results.")
        return 0

    print_rows(rows, view, title=f"Courses ({len(rows)} of {len(view.rows)})")
    return 0


def _cmd_terms(args: argparse.Namespace) -> int:
    cart = open_cart(args)
    view = load_view(args, cart)
    terms = available_terms(view.rows)
    if not terms:
        console.print("No terms found.")
        return 0
    for t in terms:
        console.print(escape(t))
    return 0


def _cmd_add(args: argparse.Namespace) -> int:
    """
    Add one catalog row to the cart (at most once per course + section).
    """
    course = (args.course or "").strip()
    section = (args.section or "").strip()
    if not course:
        console.print("Please provide a course.")
        return 1

    cart = open_cart(args)
    view = load_view(args, cart)
    record = find_record(view, course, section, term=args.term)
    if record is None:
        console.print(escape(f"Not found in catalog: {course} {section}".rstrip()))
        return 1

    try:
        added = add_if_absent(cart, record)
    except StorageWriteFailure as exc:
        console.print(f"[red]Could not save cart:[/] {escape(str(exc))}")
        return 1

    if not added:
        console.print(escape(f"Already in cart: {record.course} {record.section}"))
        return 0

    console.print(escape(f"Added: {record.course} {record.section} (cart: {len(cart.list())})"))
    return 0


def _cmd_cart(args: argparse.Namespace) -> int:
    print_cart(open_cart(args).list())
    return 0


def _cmd_clear(args: argparse.Namespace) -> int:
    try:
        open_cart(args).clear()
    except StorageWriteFailure as exc:
        console.print(f"[red]Could not clear cart:[/] {escape(str(exc))}")
        return 1
    console.print("Cart cleared.")
    return 0


def _cmd_hydrate(args: argparse.Namespace) -> int:
    """
    Decorate a pre-rendered HTML course table with Add/Added buttons.
    """
    src = Path(args.html)
    try:
        html = src.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        console.print(escape(f"Cannot read {src}: {exc}"))
        return 1

    out_html = decorate_table(html, open_cart(args), table_id=args.table_id)

    if not args.out:
        print(out_html)
        return 0

    out = Path(args.out)
    try:
        out.write_text(out_html, encoding="utf-8")
    except OSError as exc:
        console.print(escape(f"Cannot write {out}: {exc}"))
        return 1
    console.print(escape(f"Written: {out}"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="coursecart", description="Course catalog browser + cart")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only warnings and errors")
    parser.add_argument("--sheet-url", type=str, default=None, help="Published sheet CSV URL")
    parser.add_argument("--local-csv", type=Path, default=None, help="Local catalog CSV")
    parser.add_argument("--cart-file", type=Path, default=None, help="Shared cart storage file")
    parser.add_argument(
        "--fallback-html",
        type=Path,
        default=config.FALLBACK_HTML,
        help="Rendered HTML table used when no CSV source loads",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_browse = sub.add_parser("browse", help="Show the catalog")
    p_browse.add_argument("--term", "-t", type=str, default="", help="Only this term (e.g. 'Fall 2025')")
    p_browse.add_argument("--search", "-s", type=str, default="", help="Search text")

    sub.add_parser("terms", help="List terms in the catalog")

    p_add = sub.add_parser("add", help="Add a course section to the cart")
    p_add.add_argument("course", type=str, help="Course (e.g. 'MATH 101')")
    p_add.add_argument("section", type=str, help="Section (e.g. 001)")
    p_add.add_argument("--term", "-t", type=str, default="", help="Term, if the section exists in several")

    sub.add_parser("cart", help="Show the cart")
    sub.add_parser("clear", help="Empty the cart")

    p_hydrate = sub.add_parser("hydrate", help="Add cart buttons to a rendered HTML table")
    p_hydrate.add_argument("html", type=str, help="HTML file containing the course table")
    p_hydrate.add_argument("--out", "-o", type=str, default="", help="Output file (default: stdout)")
    p_hydrate.add_argument("--table-id", type=str, default=config.TABLE_ID, help="id of the <table>")

    sub.add_parser("interactive", help="Interactive menu mode")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, quiet=args.quiet)

    if args.command == "browse":
        raise SystemExit(_cmd_browse(args))
    if args.command == "terms":
        raise SystemExit(_cmd_terms(args))
    if args.command == "add":
        raise SystemExit(_cmd_add(args))
    if args.command == "cart":
        raise SystemExit(_cmd_cart(args))
    if args.command == "clear":
        raise SystemExit(_cmd_clear(args))
    if args.command == "hydrate":
        raise SystemExit(_cmd_hydrate(args))

    if args.command == "interactive":
        from coursecart.interactive import run_interactive

        raise SystemExit(run_interactive(args))

    raise SystemExit(2)
