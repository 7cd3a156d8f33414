"""
proportional_strategy.py — Uniform proportional rescale.

Pattern: every element keeps its relative offset inside the canvas and
is scaled by the smaller of the two axis ratios, so aspect ratios survive.
"""

from typing import Optional, Sequence

from .base_strategy import BaseLayoutStrategy, StrategyResult
from ...dsl.schema import Bounds, ElementBase, SuggestedPlacement


class ProportionalStrategy(BaseLayoutStrategy):
    """Reproduce the old layout at a uniform scale."""

    name = "proportional"

    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """Compute positions for a proportional resize."""
        if not elements:
            return StrategyResult(warnings=["No elements to layout"])

        width_ratio = new_bounds.width / old_bounds.width
        height_ratio = new_bounds.height / old_bounds.height
        uniform = min(width_ratio, height_ratio)

        placements = []
        for element in elements:
            # Offsets map per axis; an unchanged canvas leaves them untouched
            left = new_bounds.left + (element.left - old_bounds.left) * width_ratio
            top = new_bounds.top + (element.top - old_bounds.top) * height_ratio
            placements.append(self._place(
                element,
                left,
                top,
                element.scale_x * uniform,
                element.scale_y * uniform,
            ))

        return StrategyResult(placements=placements)
