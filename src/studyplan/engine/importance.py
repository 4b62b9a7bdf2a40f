"""Importance tiers and their integer weights."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any

DEFAULT_IMPORTANCE = "medium"

IMPORTANCE_WEIGHTS = MappingProxyType({"low": 1, "medium": 2, "high": 3})


def normalize_importance(tier: Any) -> str:
    """Return a known tier name, falling back to ``medium``."""
    if isinstance(tier, str) and tier.strip().lower() in IMPORTANCE_WEIGHTS:
        return tier.strip().lower()
    return DEFAULT_IMPORTANCE


def weight_of(tier: Any) -> int:
    return IMPORTANCE_WEIGHTS[normalize_importance(tier)]
