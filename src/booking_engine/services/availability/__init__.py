"""Availability & assignment engine."""

from .anchor import resolve_anchor
from .assignment import CustomerDetails, book_slot
from .feasibility import evaluate_slot
from .grid import build_grid, summarize_grid
from .policy import LEGACY_POLICY, STANDARD_POLICY, AnchorRule, DrivePolicy

__all__ = [
    "AnchorRule",
    "CustomerDetails",
    "DrivePolicy",
    "LEGACY_POLICY",
    "STANDARD_POLICY",
    "book_slot",
    "build_grid",
    "evaluate_slot",
    "resolve_anchor",
    "summarize_grid",
]
