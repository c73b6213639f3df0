"""Merged clonotype record spanning every sample of a joint table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Tuple

import numpy as np

from src.clonotypes.records import Clonotype

if TYPE_CHECKING:
    from .joint_sample import JointSample


class JointClonotypeBuilder:
    """Mutable accumulator used while samples are being merged."""

    def __init__(self, key: str, number_of_samples: int) -> None:
        self.key = key
        self.number_of_samples = number_of_samples
        self._variants: List[List[Clonotype]] = [[] for _ in range(number_of_samples)]
        self._freqs = np.zeros(number_of_samples, dtype=float)
        self._counts = np.zeros(number_of_samples, dtype=np.int64)

    def add_variant(self, clonotype: Clonotype, sample_index: int) -> None:
        """Attach `clonotype` to the slot of the sample it was read from."""
        self._variants[sample_index].append(clonotype)
        self._freqs[sample_index] += clonotype.freq
        self._counts[sample_index] += clonotype.count

    def build(self, parent: "JointSample") -> "JointClonotype":
        """Freeze the accumulated variants into an immutable `JointClonotype`."""
        variants = tuple(tuple(bucket) for bucket in self._variants)
        present = tuple(bool(bucket) for bucket in variants)
        occurrences = sum(present)
        if occurrences == 0:
            raise RuntimeError(f"Joint clonotype '{self.key}' has no variants in any sample.")

        freqs = tuple(float(value) for value in self._freqs)
        present_freqs = np.asarray([freq for freq, flag in zip(freqs, present) if flag], dtype=float)
        # Averaged in log space; a product of many small frequencies underflows.
        if np.any(present_freqs == 0.0):
            geomean = 0.0
        else:
            geomean = float(np.exp(np.mean(np.log(present_freqs))))

        return JointClonotype(
            key=self.key,
            parent=parent,
            variants_by_sample=variants,
            freqs=freqs,
            counts=tuple(int(value) for value in self._counts),
            presence=present,
            occurrences=occurrences,
            geomean_freq=geomean,
        )


@dataclass(frozen=True, eq=False)
class JointClonotype:
    """All clonotypes sharing one identity key, grouped by sample slot.

    Instances are created by `JointSample` and are read-only afterwards. `parent` is the
    joint table the clonotype belongs to and is only used for table-wide normalization.
    """

    key: str
    parent: "JointSample"
    variants_by_sample: Tuple[Tuple[Clonotype, ...], ...]
    freqs: Tuple[float, ...]
    counts: Tuple[int, ...]
    presence: Tuple[bool, ...]
    occurrences: int
    geomean_freq: float

    @property
    def number_of_samples(self) -> int:
        return len(self.variants_by_sample)

    def _check_index(self, sample_index: int) -> int:
        if not 0 <= sample_index < self.number_of_samples:
            raise IndexError(
                f"Sample index {sample_index} out of range for {self.number_of_samples} samples."
            )
        return sample_index

    def variants(self, sample_index: int) -> Tuple[Clonotype, ...]:
        """Clonotypes from sample `sample_index` that map to this key."""
        return self.variants_by_sample[self._check_index(sample_index)]

    def present(self, sample_index: int) -> bool:
        return self.presence[self._check_index(sample_index)]

    def freq(self, sample_index: int) -> float:
        """Summed frequency of the variants observed in sample `sample_index`."""
        return self.freqs[self._check_index(sample_index)]

    def count(self, sample_index: int) -> int:
        return self.counts[self._check_index(sample_index)]

    @property
    def variant_count(self) -> int:
        return sum(len(bucket) for bucket in self.variants_by_sample)

    @property
    def representative(self) -> Clonotype:
        """Most frequent variant across all samples; the first one seen wins ties."""
        return max(
            (clonotype for bucket in self.variants_by_sample for clonotype in bucket),
            key=lambda clonotype: clonotype.freq,
        )

    @property
    def base_freq(self) -> float:
        """Geometric mean frequency normalized by the table's total mean frequency."""
        total = self.parent.total_mean_freq
        return self.geomean_freq / total if total > 0 else 0.0

    @property
    def base_count(self) -> int:
        """Abundance expressed in units of the rarest joint clonotype in the table."""
        minimum = self.parent.min_mean_freq
        return int(round(self.geomean_freq / minimum)) if minimum > 0 else 0

    @property
    def sort_key(self) -> Tuple[float, str]:
        return (-self.geomean_freq, self.key)

    def __lt__(self, other: "JointClonotype") -> bool:
        if not isinstance(other, JointClonotype):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __repr__(self) -> str:
        return (
            f"JointClonotype(key={self.key!r}, occurrences={self.occurrences}, "
            f"geomean_freq={self.geomean_freq:.6g})"
        )


__all__ = ["JointClonotype", "JointClonotypeBuilder"]
