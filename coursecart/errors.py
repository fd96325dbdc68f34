"""
Exception types.

None of these is fatal for the application:
- SourceUnavailable   -> the resolver moves on to the next source
- NoDataAvailable     -> the catalog falls back to hydrating an existing table
- StorageReadCorrupt  -> the cart is treated as empty
- StorageWriteFailure -> reported to the user; the add/clear did not happen
"""

from __future__ import annotations


class CourseCartError(Exception):
    """Base class for all coursecart errors."""


class SourceUnavailable(CourseCartError):
    def __init__(self, label: str, reason: str) -> None:
        super().__init__(f"{label}: {reason}")
        self.label = label
        self.reason = reason


class NoDataAvailable(CourseCartError):
    def __init__(self, failures: list[SourceUnavailable] | None = None) -> None:
        self.failures = list(failures or [])
        detail = "; ".join(str(f) for f in self.failures) or "no sources configured"
        super().__init__(f"No catalog data available ({detail})")


class StorageReadCorrupt(CourseCartError):
    pass


class StorageWriteFailure(CourseCartError):
    pass
