"""Joining clonotype samples by identity key and computing overlap statistics."""

from .config import JoinConfig, build_joint_sample
from .join_filter import CompositeJoinFilter, JoinFilter, OccurenceJoinFilter, OccurrenceJoinFilter
from .joint_clonotype import JointClonotype, JointClonotypeBuilder
from .joint_sample import JointSample
from .summary import joint_table, overlap_table

__all__ = [
    "CompositeJoinFilter",
    "JoinConfig",
    "JoinFilter",
    "JointClonotype",
    "JointClonotypeBuilder",
    "JointSample",
    "OccurenceJoinFilter",
    "OccurrenceJoinFilter",
    "build_joint_sample",
    "joint_table",
    "overlap_table",
]
