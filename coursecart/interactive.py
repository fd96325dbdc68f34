from __future__ import annotations

import argparse
from dataclasses import replace

from rich.markup import escape

from coursecart.catalog import CatalogView
from coursecart.cli import console, load_view, open_cart, print_cart, print_rows, print_source
from coursecart.errors import StorageWriteFailure
from coursecart.filters import available_terms, filter_rows
from coursecart.model import FilterState, RenderedRow
from coursecart.render import render_records
from coursecart.storage import CartStore, add_if_absent


MAX_ROWS = 50


def _prompt(msg: str) -> str:
    # prompts are plain text: "[blank = back]" must not be read as markup
    return console.input(escape(msg))


def run_interactive(args: argparse.Namespace) -> int:
    """
    Interactive menu loop.

    The catalog is loaded once. Changing the term or the search text only
    re-filters; adding to the cart re-renders from the cart snapshot.
    """
    cart = open_cart(args)
    view = load_view(args, cart)
    state = FilterState()

    while True:
        _print_header(view, cart, state)

        choice = _prompt(
            "\n[1] Show courses\n"
            "[2] Choose term\n"
            "[3] Search\n"
            "[4] Add course to cart\n"
            "[5] View cart\n"
            "[6] Clear cart\n"
            "[7] Reload catalog\n"
            "[0] Exit\n"
            "Select: "
        ).strip()

        if choice == "0":
            console.print("Bye.")
            return 0

        if choice == "1":
            _flow_show(view, state)
        elif choice == "2":
            state = _flow_term(view, state)
            view = _rerender(view, cart, state)
        elif choice == "3":
            state = replace(state, text=_prompt("Search text [blank = no search]: "))
        elif choice == "4":
            view = _flow_add(view, cart, state)
        elif choice == "5":
            print_cart(cart.list())
        elif choice == "6":
            view = _flow_clear(view, cart, state)
        elif choice == "7":
            view = load_view(args, cart, selected_term=state.term)
            console.print("Catalog reloaded.")
        else:
            console.print("Invalid choice.")


def _print_header(view: CatalogView, cart: CartStore, state: FilterState) -> None:
    console.print("\n=== Course cart (interactive) ===")
    print_source(view)
    term = state.term or "(all terms)"
    search = state.text or "(none)"
    console.print(escape(f"Term: {term} | Search: {search} | In cart: {len(cart.list())}"))


def _visible(view: CatalogView, state: FilterState) -> list[RenderedRow]:
    return filter_rows(view.rows, state.term, state.text)


def _rerender(view: CatalogView, cart: CartStore, state: FilterState) -> CatalogView:
    return replace(view, rows=render_records(view.records, cart, state.term))


def _flow_show(view: CatalogView, state: FilterState) -> list[RenderedRow]:
    rows = _visible(view, state)
    if not rows:
        console.print("No results.")
        return rows

    shown = rows[:MAX_ROWS]
    print_rows(shown, view, title=f"Courses ({len(rows)} of {len(view.rows)})", numbered=True)
    if len(rows) > MAX_ROWS:
        console.print(f"... and {len(rows) - MAX_ROWS} more (narrow with term/search)")
    return shown


def _flow_term(view: CatalogView, state: FilterState) -> FilterState:
    terms = available_terms(view.rows)
    if not terms:
        console.print("No terms in catalog.")
        return state

    console.print("0) All terms")
    for i, t in enumerate(terms, start=1):
        console.print(escape(f"{i}) {t}"))

    pick = _prompt("Choose term number [blank = keep]: ").strip()
    if not pick:
        return state
    if not pick.isdigit() or not (0 <= int(pick) <= len(terms)):
        console.print("Out of range.")
        return state

    term = "" if pick == "0" else terms[int(pick) - 1]
    return replace(state, term=term)


def _flow_add(view: CatalogView, cart: CartStore, state: FilterState) -> CatalogView:
    """
    Show the filtered rows and add picked ones until the user stops.
    """
    while True:
        shown = _flow_show(view, state)
        if not shown:
            return view

        pick = _prompt("Enter number to add [blank = back]: ").strip()
        if not pick:
            return view
        if not pick.isdigit():
            console.print("Not a number.")
            continue

        i = int(pick)
        if not (1 <= i <= len(shown)):
            console.print("Out of range.")
            continue

        record = shown[i - 1].record
        try:
            added = add_if_absent(cart, record)
        except StorageWriteFailure as exc:
            console.print(f"[red]Could not save cart:[/] {escape(str(exc))}")
            return view

        if added:
            console.print(escape(f"Added: {record.course} {record.section}"))
            view = _rerender(view, cart, state)
        else:
            console.print(escape(f"Already in cart: {record.course} {record.section}"))

        more = _prompt("Add another course? [Y/n]: ").strip().lower()
        if more == "n":
            return view


def _flow_clear(view: CatalogView, cart: CartStore, state: FilterState) -> CatalogView:
    if not cart.list():
        console.print("Cart is empty.")
        return view

    confirm = _prompt("Remove all courses from the cart? [y/N]: ").strip().lower()
    if confirm != "y":
        return view

    try:
        cart.clear()
    except StorageWriteFailure as exc:
        console.print(f"[red]Could not clear cart:[/] {escape(str(exc))}")
        return view

    console.print("Cart cleared.")
    return _rerender(view, cart, state)
