"""Configuration for building joint tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from src.clonotypes.keys import IntersectionType, KeyFunction, key_function, parse_intersection_type
from src.clonotypes.records import Clonotype

from .join_filter import JoinFilter, OccurrenceJoinFilter
from .joint_sample import JointSample

DEFAULT_INTERSECTION_TYPE: IntersectionType = "aaV"
DEFAULT_OCCURRENCE_THRESHOLD = 1


@dataclass(frozen=True)
class JoinConfig:
    """How clonotypes are matched across samples and which joint clonotypes are kept."""

    intersection_type: IntersectionType = DEFAULT_INTERSECTION_TYPE
    occurrence_threshold: int = DEFAULT_OCCURRENCE_THRESHOLD

    def validate(self) -> None:
        parse_intersection_type(self.intersection_type)
        if self.occurrence_threshold < 1:
            raise ValueError("occurrence_threshold must be at least 1.")

    def key_function(self) -> KeyFunction:
        return key_function(self.intersection_type)

    def join_filter(self) -> JoinFilter:
        return OccurrenceJoinFilter(self.occurrence_threshold)


def build_joint_sample(samples: Sequence[Iterable[Clonotype]], config: JoinConfig | None = None) -> JointSample:
    """Join `samples` using the key function and filter described by `config`."""
    cfg = config or JoinConfig()
    cfg.validate()
    return JointSample(samples, cfg.key_function(), cfg.join_filter())


__all__ = ["DEFAULT_INTERSECTION_TYPE", "DEFAULT_OCCURRENCE_THRESHOLD", "JoinConfig", "build_joint_sample"]
