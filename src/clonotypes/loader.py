from __future__ import annotations

import re
from pathlib import Path
from typing import Any, List, Optional, Sequence

import pandas as pd

from .config import MISSING_SEGMENT, OPTIONAL_FIELDS, VDJTOOLS_COLUMNS, ColumnLayout
from .records import Clonotype, Sample

_HIT_SCORE = re.compile(r"\(.*?\)$")


def normalize_segment(value: Any) -> str:
    """Reduce a segment call such as `TRBV5-1*00(1234),TRBV5-4*00(900)` to `TRBV5-1`."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return MISSING_SEGMENT
    text = str(value).strip()
    if not text:
        return MISSING_SEGMENT
    best_hit = text.split(",")[0].strip()
    best_hit = _HIT_SCORE.sub("", best_hit)
    return best_hit.split("*")[0] or MISSING_SEGMENT


def to_count(value: Any) -> int:
    """Convert table counts (sometimes written as floats) to ints."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        raise ValueError("Expected a clonotype count, received an empty cell")
    try:
        return int(round(float(value)))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Cannot convert {value!r} to a clonotype count") from exc


def read_table(path: Path, columns: ColumnLayout = VDJTOOLS_COLUMNS) -> pd.DataFrame:
    """Read a clonotype table and validate that the required columns are present."""
    frame = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False, na_values=[""])
    required = [column for field, column in columns.items() if field not in OPTIONAL_FIELDS]
    missing = [column for column in required if column not in frame.columns]
    if missing:
        raise ValueError(f"File {path} missing columns {missing}. Columns={list(frame.columns)}")
    return frame


def load_sample(
    path: Path,
    columns: ColumnLayout = VDJTOOLS_COLUMNS,
    sample_id: Optional[str] = None,
) -> Sample:
    """Load one tab-separated clonotype table into a `Sample`.

    Frequencies are taken from the frequency column when the table has one, otherwise they are
    derived from counts.
    """
    path = Path(path)
    frame = read_table(path, columns)
    counts = [to_count(value) for value in frame[columns["count"]]]
    total = sum(counts)

    if columns["freq"] in frame.columns:
        freqs = pd.to_numeric(frame[columns["freq"]], errors="raise").astype(float).tolist()
    else:
        freqs = [count / total if total > 0 else 0.0 for count in counts]

    cdr3nt = frame[columns["cdr3nt"]].fillna("").tolist()
    cdr3aa = frame[columns["cdr3aa"]].fillna("").tolist()
    v_calls = frame[columns["v"]].tolist()
    d_calls = frame[columns["d"]].tolist() if columns["d"] in frame.columns else [None] * len(frame)
    j_calls = frame[columns["j"]].tolist()

    clonotypes: List[Clonotype] = []
    for idx, count in enumerate(counts):
        clonotypes.append(
            Clonotype(
                count=count,
                freq=float(freqs[idx]),
                cdr3nt=str(cdr3nt[idx]),
                cdr3aa=str(cdr3aa[idx]),
                v=normalize_segment(v_calls[idx]),
                d=normalize_segment(d_calls[idx]),
                j=normalize_segment(j_calls[idx]),
            )
        )
    return Sample(clonotypes, sample_id=sample_id or path.name.split(".")[0])


def load_samples(paths: Sequence[Path], columns: ColumnLayout = VDJTOOLS_COLUMNS) -> List[Sample]:
    """Load several clonotype tables, keeping the input order as the sample slot order."""
    samples: List[Sample] = []
    for path in paths:
        sample = load_sample(Path(path), columns)
        print(f"[samples] Loaded {sample.sample_id} ({sample.diversity} clonotypes) from {path}")
        samples.append(sample)
    return samples


__all__ = ["load_sample", "load_samples", "normalize_segment", "read_table", "to_count"]
