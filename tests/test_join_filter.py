"""Unit tests for joint clonotype inclusion policies."""

from __future__ import annotations

from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.clonotypes.records import Clonotype, Sample
from src.join.join_filter import CompositeJoinFilter, JoinFilter, OccurenceJoinFilter, OccurrenceJoinFilter
from src.join.joint_clonotype import JointClonotype
from src.join.joint_sample import JointSample


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


def _clone(cdr3aa: str, freq: float) -> Clonotype:
    return Clonotype(count=1, freq=freq, cdr3nt=cdr3aa.lower(), cdr3aa=cdr3aa, v="TRBV1")


def _joint() -> JointSample:
    samples = [
        Sample([_clone("A", 0.5), _clone("B", 0.3), _clone("C", 0.2)]),
        Sample([_clone("A", 0.4), _clone("B", 0.6)]),
        Sample([_clone("A", 0.9), _clone("D", 0.1)]),
    ]
    return JointSample(samples, lambda clonotype: clonotype.cdr3aa)


def _by_key(joint: JointSample) -> dict[str, JointClonotype]:
    return {clonotype.key: clonotype for clonotype in joint}


class MinFreqFilter:
    """JoinFilter keeping joint clonotypes above a geometric mean frequency."""

    def __init__(self, min_freq: float) -> None:
        self.min_freq = min_freq

    def passes(self, clonotype: JointClonotype) -> bool:
        return clonotype.geomean_freq >= self.min_freq


# ---------------------------------------------------------------------------
# Occurrence filter


def test_occurrence_filter_defaults_to_pass_through() -> None:
    policy = OccurrenceJoinFilter()
    assert policy.occurrence_threshold == 1
    assert all(policy.passes(clonotype) for clonotype in _joint())


@pytest.mark.parametrize(
    ("threshold", "expected"),
    [(1, {"A", "B", "C", "D"}), (2, {"A", "B"}), (3, {"A"}), (4, set())],
)
def test_occurrence_filter_thresholds(threshold: int, expected: set[str]) -> None:
    clonotypes = _by_key(_joint())
    policy = OccurrenceJoinFilter(threshold)
    assert {key for key, clonotype in clonotypes.items() if policy.passes(clonotype)} == expected


def test_occurrence_filter_rejects_non_positive_threshold() -> None:
    with pytest.raises(ValueError):
        OccurrenceJoinFilter(0)
    with pytest.raises(ValueError):
        OccurrenceJoinFilter(-2)


def test_occurence_alias_refers_to_same_filter() -> None:
    assert OccurenceJoinFilter is OccurrenceJoinFilter


def test_occurrence_filter_is_pure() -> None:
    clonotype = _by_key(_joint())["B"]
    policy = OccurrenceJoinFilter(2)
    assert [policy.passes(clonotype) for _ in range(3)] == [True, True, True]


# ---------------------------------------------------------------------------
# Composite and custom filters


def test_composite_filter_requires_all_members() -> None:
    clonotypes = _by_key(_joint())
    policy = CompositeJoinFilter(OccurrenceJoinFilter(2), MinFreqFilter(0.5))
    kept = {key for key, clonotype in clonotypes.items() if policy.passes(clonotype)}
    # A: (0.5 * 0.4 * 0.9) ** (1/3) ~= 0.565, B: sqrt(0.3 * 0.6) ~= 0.424
    assert kept == {"A"}


def test_composite_filter_needs_members() -> None:
    with pytest.raises(ValueError):
        CompositeJoinFilter()


def test_custom_filter_is_applied_by_joint_sample() -> None:
    samples = [Sample([_clone("A", 0.5), _clone("B", 0.05)]), Sample([_clone("A", 0.5)])]
    policy: JoinFilter = MinFreqFilter(0.1)
    joint = JointSample(samples, lambda clonotype: clonotype.cdr3aa, policy)

    assert [clonotype.key for clonotype in joint] == ["A"]
    assert joint.intersection_div(0) == 1
    assert joint.intersection_freq(0) == pytest.approx(0.5)
    assert joint.min_mean_freq == pytest.approx(0.5)


def test_filter_cannot_read_table_totals_during_build() -> None:
    class BaseFreqFilter:
        def passes(self, clonotype: JointClonotype) -> bool:
            return clonotype.base_freq > 0.1

    samples = [Sample([_clone("A", 0.5)])]
    with pytest.raises(RuntimeError):
        JointSample(samples, lambda clonotype: clonotype.cdr3aa, BaseFreqFilter())
