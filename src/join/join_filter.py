"""Inclusion policies deciding which joint clonotypes make it into a joint table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Tuple

if TYPE_CHECKING:
    from .joint_clonotype import JointClonotype


class JoinFilter(Protocol):
    """Predicate over a fully merged joint clonotype.

    Implementations must depend only on the clonotype passed in, so the surviving set does
    not depend on the order in which clonotypes are visited.
    """

    def passes(self, clonotype: "JointClonotype") -> bool:
        """Return True if the joint clonotype should be kept."""
        return True


@dataclass(frozen=True)
class OccurrenceJoinFilter:
    """Keeps joint clonotypes detected in at least `occurrence_threshold` samples.

    The default threshold of 1 keeps every joint clonotype.
    """

    occurrence_threshold: int = 1

    def __post_init__(self) -> None:
        if self.occurrence_threshold < 1:
            raise ValueError("Occurrence threshold must be at least 1.")

    def passes(self, clonotype: "JointClonotype") -> bool:
        return clonotype.occurrences >= self.occurrence_threshold


class CompositeJoinFilter:
    """Keeps joint clonotypes accepted by every member filter."""

    def __init__(self, *filters: JoinFilter) -> None:
        if not filters:
            raise ValueError("CompositeJoinFilter needs at least one member filter.")
        self.filters: Tuple[JoinFilter, ...] = tuple(filters)

    def passes(self, clonotype: "JointClonotype") -> bool:
        return all(join_filter.passes(clonotype) for join_filter in self.filters)


OccurenceJoinFilter = OccurrenceJoinFilter


__all__ = ["CompositeJoinFilter", "JoinFilter", "OccurenceJoinFilter", "OccurrenceJoinFilter"]
