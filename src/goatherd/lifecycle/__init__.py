"""Lifecycle module - zootechnic category classification."""

from goatherd.lifecycle.classifier import (
    GROWTH_CATEGORIES,
    Category,
    ProgenyIndex,
    category_counts,
    classify,
    classify_herd,
    has_productive_evidence,
)

__all__ = [
    "Category",
    "GROWTH_CATEGORIES",
    "ProgenyIndex",
    "classify",
    "classify_herd",
    "category_counts",
    "has_productive_evidence",
]
