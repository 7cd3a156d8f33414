"""
reflow_strategy.py — Shelf-packing reflow strategy.

Pattern: largest elements first, packed left to right along shelves,
wrapping to a new shelf when the current one is full.
"""

from typing import Optional, Sequence

from .base_strategy import BaseLayoutStrategy, StrategyResult, calculate_optimal_spacing
from ...dsl.schema import Bounds, ElementBase, SuggestedPlacement


class ReflowStrategy(BaseLayoutStrategy):
    """Re-pack elements into rows that fit the new canvas width."""

    name = "reflow"

    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """Compute positions for a shelf reflow."""
        if not elements:
            return StrategyResult(warnings=["No elements to layout"])

        max_ratio = self.settings.strategies.reflow_max_ratio
        spacing = calculate_optimal_spacing(new_bounds.width, new_bounds.height, len(elements))

        shelf_right = new_bounds.right - spacing
        current_x = new_bounds.left + spacing
        current_y = new_bounds.top + spacing
        shelf_height = 0.0

        placements = []
        for element in self._ordered(elements):
            factor = self._fit_factor(
                element,
                new_bounds.width * max_ratio,
                new_bounds.height * max_ratio,
            )
            scale_x, scale_y = self._scaled(
                element, element.scale_x * factor, element.scale_y * factor
            )
            width = element.width * scale_x
            height = element.height * scale_y

            # Wrap unless this is the first element on the shelf
            if current_x + width > shelf_right and shelf_height > 0:
                current_x = new_bounds.left + spacing
                current_y += shelf_height + spacing
                shelf_height = 0.0

            placements.append(self._place(element, current_x, current_y, scale_x, scale_y))

            current_x += width + spacing
            shelf_height = max(shelf_height, height)

        return StrategyResult(placements=placements)
