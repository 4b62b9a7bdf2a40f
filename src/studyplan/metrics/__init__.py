"""Draft metrics."""

from .collector import collect_draft_metrics

__all__ = ["collect_draft_metrics"]
