"""Boundary validation and layout quality scoring."""

from canvasfit.constraints.boundary import BoundaryValidator, check_placement_ids
from canvasfit.constraints.quality import LayoutQualityScorer

__all__ = [
    "BoundaryValidator",
    "LayoutQualityScorer",
    "check_placement_ids",
]
