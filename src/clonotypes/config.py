"""Static configuration for reading clonotype tables from disk."""

from __future__ import annotations

from typing import TypedDict


class ColumnLayout(TypedDict):
    count: str
    freq: str
    cdr3nt: str
    cdr3aa: str
    v: str
    d: str
    j: str


# Tab-separated VDJtools layout: count, freq, cdr3nt, cdr3aa, v, d, j.
VDJTOOLS_COLUMNS: ColumnLayout = {
    "count": "count",
    "freq": "freq",
    "cdr3nt": "cdr3nt",
    "cdr3aa": "cdr3aa",
    "v": "v",
    "d": "d",
    "j": "j",
}

# MiXCR clone export with default column names.
MIXCR_COLUMNS: ColumnLayout = {
    "count": "cloneCount",
    "freq": "cloneFraction",
    "cdr3nt": "nSeqCDR3",
    "cdr3aa": "aaSeqCDR3",
    "v": "allVHitsWithScore",
    "d": "allDHitsWithScore",
    "j": "allJHitsWithScore",
}

# Columns that may be absent; missing values fall back to "." for genes or are derived for freq.
OPTIONAL_FIELDS = ("freq", "d")

MISSING_SEGMENT = "."


__all__ = [
    "ColumnLayout",
    "MISSING_SEGMENT",
    "MIXCR_COLUMNS",
    "OPTIONAL_FIELDS",
    "VDJTOOLS_COLUMNS",
]
