"""Identity key strategies deciding which clonotypes count as the same across samples."""

from __future__ import annotations

from typing import Callable, Dict, Literal, Tuple, cast

from .records import Clonotype

IntersectionType = Literal["nt", "ntV", "ntVJ", "aa", "aaV", "aaVJ", "strict"]
ALL_INTERSECTION_TYPES: Tuple[IntersectionType, ...] = ("nt", "ntV", "ntVJ", "aa", "aaV", "aaVJ", "strict")

KeyFunction = Callable[[Clonotype], str]

KEY_SEPARATOR = "|"

# Clonotype fields that make up the key for each intersection type, in key order.
KEY_FIELDS: Dict[IntersectionType, Tuple[str, ...]] = {
    "nt": ("cdr3nt",),
    "ntV": ("cdr3nt", "v"),
    "ntVJ": ("cdr3nt", "v", "j"),
    "aa": ("cdr3aa",),
    "aaV": ("cdr3aa", "v"),
    "aaVJ": ("cdr3aa", "v", "j"),
    "strict": ("cdr3nt", "cdr3aa", "v", "d", "j"),
}


def parse_intersection_type(name: str) -> IntersectionType:
    """Validate a user-supplied intersection type name."""
    if name not in KEY_FIELDS:
        choices = ", ".join(ALL_INTERSECTION_TYPES)
        raise ValueError(f"Unknown intersection type '{name}'. Expected one of: {choices}")
    return cast(IntersectionType, name)


def generate_key(clonotype: Clonotype, intersection_type: IntersectionType = "aaV") -> str:
    """Build the identity key of `clonotype` under `intersection_type`."""
    fields = KEY_FIELDS[parse_intersection_type(intersection_type)]
    return KEY_SEPARATOR.join(str(getattr(clonotype, name)) for name in fields)


def key_function(intersection_type: IntersectionType = "aaV") -> KeyFunction:
    """Return a single-argument key function bound to `intersection_type`."""
    fields = KEY_FIELDS[parse_intersection_type(intersection_type)]

    def _key(clonotype: Clonotype) -> str:
        return KEY_SEPARATOR.join(str(getattr(clonotype, name)) for name in fields)

    return _key


__all__ = [
    "ALL_INTERSECTION_TYPES",
    "IntersectionType",
    "KEY_FIELDS",
    "KEY_SEPARATOR",
    "KeyFunction",
    "generate_key",
    "key_function",
    "parse_intersection_type",
]
