"""Shared data records for clonotype samples."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, Tuple, overload

import numpy as np


@dataclass(frozen=True)
class Clonotype:
    """Single clonotype observation within one sample."""

    count: int
    freq: float
    cdr3nt: str
    cdr3aa: str
    v: str
    d: str = "."
    j: str = "."

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Clonotype count must be non-negative, received {self.count}.")
        if not np.isfinite(self.freq) or not 0.0 <= self.freq <= 1.0:
            raise ValueError(f"Clonotype frequency must fall within [0, 1], received {self.freq}.")


class Sample(Sequence[Clonotype]):
    """Ordered, read-only collection of clonotypes from one repertoire.

    Equality is object identity: two `Sample` instances holding the same rows are
    still two distinct samples.
    """

    def __init__(self, clonotypes: Iterable[Clonotype], sample_id: Optional[str] = None) -> None:
        self._clonotypes: Tuple[Clonotype, ...] = tuple(clonotypes)
        self.sample_id = sample_id

    @classmethod
    def from_counts(
        cls,
        rows: Iterable[Tuple[int, str, str, str, str, str]],
        sample_id: Optional[str] = None,
    ) -> "Sample":
        """Build a sample from `(count, cdr3nt, cdr3aa, v, d, j)` rows, deriving frequencies."""
        row_list = list(rows)
        total = sum(int(row[0]) for row in row_list)
        clonotypes = []
        for count, cdr3nt, cdr3aa, v, d, j in row_list:
            freq = int(count) / total if total > 0 else 0.0
            clonotypes.append(Clonotype(int(count), freq, cdr3nt, cdr3aa, v, d, j))
        return cls(clonotypes, sample_id=sample_id)

    @property
    def diversity(self) -> int:
        """Number of clonotype entries in the sample."""
        return len(self._clonotypes)

    @property
    def total_count(self) -> int:
        return sum(clonotype.count for clonotype in self._clonotypes)

    @property
    def total_freq(self) -> float:
        return float(sum(clonotype.freq for clonotype in self._clonotypes))

    def __len__(self) -> int:
        return len(self._clonotypes)

    @overload
    def __getitem__(self, index: int) -> Clonotype: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Clonotype]: ...

    def __getitem__(self, index):
        return self._clonotypes[index]

    def __iter__(self) -> Iterator[Clonotype]:
        return iter(self._clonotypes)

    def __repr__(self) -> str:
        return f"Sample(sample_id={self.sample_id!r}, diversity={self.diversity})"
