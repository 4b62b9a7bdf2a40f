"""Distribution engine."""

from .allocator import allocate_draft, compute_goal_hours, round_half_up
from .draft import Draft, toggle_draft_cell
from .importance import IMPORTANCE_WEIGHTS, weight_of
from .random_source import RandomSource, SeededRandomSource
from .runner import generate_draft, plan_capacity, regenerate_draft, run_distribution
from .slot_builder import build_month_capacity

__all__ = [
    "IMPORTANCE_WEIGHTS",
    "Draft",
    "RandomSource",
    "SeededRandomSource",
    "allocate_draft",
    "build_month_capacity",
    "compute_goal_hours",
    "generate_draft",
    "plan_capacity",
    "regenerate_draft",
    "round_half_up",
    "run_distribution",
    "toggle_draft_cell",
    "weight_of",
]
