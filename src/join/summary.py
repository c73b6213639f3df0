"""Tabular views over a finished joint table."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional, Sequence, Set

import pandas as pd

from .joint_sample import JointSample

OVERLAP_COLUMNS = ["sample1", "sample2", "div1", "div2", "div12", "freq1", "freq2", "freq12"]


def sample_labels(joint_sample: JointSample) -> List[str]:
    """Use `sample_id` where samples carry one, otherwise the slot index.

    Labels shared by several samples get the slot index appended, e.g. `s.0` and `s.1`.
    """
    raw: List[str] = []
    for idx, sample in enumerate(joint_sample.samples):
        sample_id = getattr(sample, "sample_id", None)
        raw.append(str(sample_id) if sample_id is not None else str(idx))

    counts = Counter(raw)
    used: Set[str] = {label for label in raw if counts[label] == 1}
    labels: List[str] = []
    for idx, label in enumerate(raw):
        if counts[label] > 1:
            candidate = f"{label}.{idx}"
            while candidate in used:
                candidate = f"{candidate}.{idx}"
            used.add(candidate)
            label = candidate
        labels.append(label)
    return labels


def _resolve_labels(joint_sample: JointSample, labels: Optional[Sequence[str]]) -> List[str]:
    if labels is None:
        return sample_labels(joint_sample)
    names = list(labels)
    if len(names) != joint_sample.number_of_samples:
        raise ValueError(
            f"Expected {joint_sample.number_of_samples} sample labels, received {len(names)}."
        )
    duplicates = sorted(label for label, count in Counter(names).items() if count > 1)
    if duplicates:
        raise ValueError(f"Sample labels must be unique, repeated: {', '.join(duplicates)}")
    return names


def overlap_table(joint_sample: JointSample, labels: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """One row per unordered sample pair with single-sample and shared diversity/frequency."""
    names = _resolve_labels(joint_sample, labels)

    rows: List[Dict[str, object]] = []
    n = joint_sample.number_of_samples
    for i in range(n):
        for j in range(i + 1, n):
            rows.append(
                {
                    "sample1": names[i],
                    "sample2": names[j],
                    "div1": joint_sample.intersection_div(i),
                    "div2": joint_sample.intersection_div(j),
                    "div12": joint_sample.intersection_div(i, j),
                    "freq1": joint_sample.intersection_freq(i),
                    "freq2": joint_sample.intersection_freq(j),
                    "freq12": joint_sample.intersection_freq(i, j),
                }
            )
    return pd.DataFrame(rows, columns=OVERLAP_COLUMNS)


def joint_table(joint_sample: JointSample, labels: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """One row per joint clonotype in sorted order, with per-sample frequency columns."""
    names = _resolve_labels(joint_sample, labels)
    freq_columns = [f"freq.{name}" for name in names]
    rows: List[Dict[str, object]] = []
    for joint_clonotype in joint_sample:
        row: Dict[str, object] = {
            "key": joint_clonotype.key,
            "occurrences": joint_clonotype.occurrences,
            "geomean_freq": joint_clonotype.geomean_freq,
            "base_freq": joint_clonotype.base_freq,
        }
        for idx, column in enumerate(freq_columns):
            row[column] = joint_clonotype.freq(idx)
        rows.append(row)
    return pd.DataFrame(rows, columns=["key", "occurrences", "geomean_freq", "base_freq", *freq_columns])


__all__ = ["OVERLAP_COLUMNS", "joint_table", "overlap_table", "sample_labels"]
