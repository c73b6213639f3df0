"""Joint table aligning clonotypes from several samples by identity key."""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from src.clonotypes.keys import KeyFunction
from src.clonotypes.records import Clonotype

from .join_filter import JoinFilter, OccurrenceJoinFilter
from .joint_clonotype import JointClonotype, JointClonotypeBuilder


class JointSample:
    """Clonotypes of several samples merged by identity key, with overlap statistics.

    Construction runs the whole pipeline: every clonotype of every sample is attached to the
    joint clonotype for its key, `join_filter` is evaluated once per fully merged joint
    clonotype, statistics are accumulated over the survivors and the survivors are sorted by
    descending geometric mean frequency (ties by key). The table is read-only afterwards.

    `key_fn` must be deterministic and total; it is not checked.

    Args:
        samples: Ordered samples; the position of a sample is its slot index.
        key_fn: Maps a clonotype to its identity key.
        join_filter: Inclusion policy, defaults to `OccurrenceJoinFilter()` which keeps everything.
    """

    def __init__(
        self,
        samples: Sequence[Iterable[Clonotype]],
        key_fn: KeyFunction,
        join_filter: Optional[JoinFilter] = None,
    ) -> None:
        self._samples: Tuple[Iterable[Clonotype], ...] = tuple(samples)
        self._key_fn = key_fn
        self._join_filter: JoinFilter = join_filter if join_filter is not None else OccurrenceJoinFilter()
        n = len(self._samples)
        self._number_of_samples = n
        self._totals: Optional[Tuple[float, float]] = None

        builders: Dict[str, JointClonotypeBuilder] = {}
        for sample_index, sample in enumerate(self._samples):
            for clonotype in sample:
                key = key_fn(clonotype)
                builder = builders.get(key)
                if builder is None:
                    builder = builders[key] = JointClonotypeBuilder(key, n)
                builder.add_variant(clonotype, sample_index)

        intersection_freq = np.zeros(n, dtype=float)
        intersection_div = np.zeros(n, dtype=np.int64)
        intersection_freq_matrix = np.zeros((n, n), dtype=float)
        intersection_div_matrix = np.zeros((n, n), dtype=np.int64)
        total_mean_freq = 0.0
        min_mean_freq = 1.0

        survivors: List[JointClonotype] = []
        for builder in builders.values():
            joint_clonotype = builder.build(self)
            if not self._join_filter.passes(joint_clonotype):
                continue
            survivors.append(joint_clonotype)

            mean_freq = joint_clonotype.geomean_freq
            total_mean_freq += mean_freq
            min_mean_freq = min(min_mean_freq, mean_freq)

            for i in range(n):
                if not joint_clonotype.presence[i]:
                    continue
                freq1 = joint_clonotype.freqs[i]
                intersection_freq[i] += freq1
                intersection_div[i] += 1
                for j in range(i + 1, n):
                    if joint_clonotype.presence[j]:
                        freq2 = joint_clonotype.freqs[j]
                        intersection_freq_matrix[i, j] += np.sqrt(freq1 * freq2)
                        intersection_div_matrix[i, j] += 1

        survivors.sort()

        self._joint_clonotypes: Tuple[JointClonotype, ...] = tuple(survivors)
        self._intersection_freq = intersection_freq
        self._intersection_div = intersection_div
        self._intersection_freq_matrix = intersection_freq_matrix
        self._intersection_div_matrix = intersection_div_matrix
        self._totals = (float(total_mean_freq), float(min_mean_freq))
        for array in (intersection_freq, intersection_div, intersection_freq_matrix, intersection_div_matrix):
            array.setflags(write=False)

    # ------------------------------------------------------------------
    # Index validation

    def _check_sample_index(self, sample_index: int) -> int:
        if not 0 <= sample_index < self._number_of_samples:
            raise IndexError(
                f"Sample index {sample_index} out of range for {self._number_of_samples} samples."
            )
        return sample_index

    def _pair_cell(self, sample_index1: int, sample_index2: int) -> Tuple[int, int]:
        """Validate a sample pair and return its upper-triangle cell, smaller index first."""
        first = self._check_sample_index(sample_index1)
        second = self._check_sample_index(sample_index2)
        return (first, second) if first <= second else (second, first)

    def _require_totals(self) -> Tuple[float, float]:
        if self._totals is None:
            raise RuntimeError("Table-wide totals are not available while the joint sample is being built.")
        return self._totals

    # ------------------------------------------------------------------
    # Samples

    @property
    def number_of_samples(self) -> int:
        return self._number_of_samples

    @property
    def samples(self) -> Tuple[Iterable[Clonotype], ...]:
        return self._samples

    def get_sample(self, sample_index: int) -> Iterable[Clonotype]:
        return self._samples[self._check_sample_index(sample_index)]

    @property
    def key_function(self) -> KeyFunction:
        return self._key_fn

    @property
    def join_filter(self) -> JoinFilter:
        return self._join_filter

    # ------------------------------------------------------------------
    # Joint clonotypes

    def size(self) -> int:
        """Number of joint clonotypes that passed the filter."""
        return len(self._joint_clonotypes)

    def get_at(self, index: int) -> JointClonotype:
        """Joint clonotype at `index` in sorted order."""
        if not 0 <= index < len(self._joint_clonotypes):
            raise IndexError(f"Index {index} out of range for {len(self._joint_clonotypes)} joint clonotypes.")
        return self._joint_clonotypes[index]

    def __len__(self) -> int:
        return self.size()

    def __getitem__(self, index: int) -> JointClonotype:
        return self.get_at(index)

    def __iter__(self) -> Iterator[JointClonotype]:
        return iter(self._joint_clonotypes)

    # ------------------------------------------------------------------
    # Statistics

    def intersection_div(self, sample_index1: int, sample_index2: Optional[int] = None) -> int:
        """Number of joint clonotypes present in one sample, or in both samples of a pair.

        Pairwise cells exist only for distinct samples, so a sample paired with itself reports 0.
        """
        if sample_index2 is None:
            return int(self._intersection_div[self._check_sample_index(sample_index1)])
        i, j = self._pair_cell(sample_index1, sample_index2)
        return int(self._intersection_div_matrix[i, j])

    def intersection_freq(self, sample_index1: int, sample_index2: Optional[int] = None) -> float:
        """Summed frequency of joint clonotypes present in one sample or in a pair.

        For a pair each shared clonotype contributes the geometric mean `sqrt(f1 * f2)` of its
        frequencies in the two samples. A sample paired with itself reports 0.
        """
        if sample_index2 is None:
            return float(self._intersection_freq[self._check_sample_index(sample_index1)])
        i, j = self._pair_cell(sample_index1, sample_index2)
        return float(self._intersection_freq_matrix[i, j])

    @property
    def total_mean_freq(self) -> float:
        """Sum of geometric mean frequencies over the joint clonotypes."""
        return self._require_totals()[0]

    @property
    def min_mean_freq(self) -> float:
        """Smallest geometric mean frequency, 1.0 when the table is empty."""
        return self._require_totals()[1]

    # ------------------------------------------------------------------
    # Identity

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, JointSample):
            return NotImplemented
        return len(self._samples) == len(other._samples) and all(
            mine is theirs for mine, theirs in zip(self._samples, other._samples)
        )

    def __hash__(self) -> int:
        return hash(tuple(id(sample) for sample in self._samples))

    def __repr__(self) -> str:
        return f"JointSample(number_of_samples={self._number_of_samples}, size={self.size()})"


__all__ = ["JointSample"]
