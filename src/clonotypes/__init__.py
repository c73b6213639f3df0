"""Clonotype records, sample containers, identity keys and table loading."""

from .keys import ALL_INTERSECTION_TYPES, IntersectionType, KeyFunction, generate_key, key_function
from .loader import load_sample, load_samples
from .records import Clonotype, Sample

__all__ = [
    "ALL_INTERSECTION_TYPES",
    "Clonotype",
    "IntersectionType",
    "KeyFunction",
    "Sample",
    "generate_key",
    "key_function",
    "load_sample",
    "load_samples",
]
