"""
Configuration for catalog sources and cart storage.

Every setting has a package-relative default and can be overridden with an
environment variable (and again per command with the CLI flags):

    COURSECART_SHEET_URL      published Google Sheet CSV link (empty = skip remote)
    COURSECART_LOCAL_CSV      bundled/local catalog CSV
    COURSECART_CART_FILE      shared storage file holding the cart
    COURSECART_FALLBACK_HTML  pre-rendered HTML page used when no CSV loads
"""

from __future__ import annotations

import os
from pathlib import Path


# PACKAGE_DIR always points to the folder where this file is located
PACKAGE_DIR = Path(__file__).resolve().parent
DATA_DIR = PACKAGE_DIR / "data"

# "File > Share > Publish to web > CSV" link of the catalog sheet,
# e.g. https://docs.google.com/spreadsheets/d/e/<id>/pub?output=csv
SHEET_CSV_URL = os.environ.get("COURSECART_SHEET_URL", "").strip()

LOCAL_CSV = Path(os.environ.get("COURSECART_LOCAL_CSV") or DATA_DIR / "courses.csv")

CART_PATH = Path(os.environ.get("COURSECART_CART_FILE") or DATA_DIR / "storage.json")

_fallback = os.environ.get("COURSECART_FALLBACK_HTML", "").strip()
FALLBACK_HTML = Path(_fallback) if _fallback else None

# Storage key shared by every session that uses the same storage file
STORAGE_KEY = "wlacZtcCartV1"

# id of the course table inside a pre-rendered HTML page
TABLE_ID = "courseTable"

REQUEST_TIMEOUT = 30  # seconds
