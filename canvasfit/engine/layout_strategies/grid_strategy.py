"""
grid_strategy.py — Grid-based resize strategy.

Pattern: elements arranged in rows and columns sized to the new canvas
aspect ratio, largest first, each centred in its cell.
"""

import logging
import math
from typing import Optional, Sequence, Tuple

from .base_strategy import BaseLayoutStrategy, StrategyResult, calculate_optimal_spacing
from ...dsl.schema import Bounds, ElementBase, SuggestedPlacement

logger = logging.getLogger(__name__)


class GridStrategy(BaseLayoutStrategy):
    """
    Grid layout for a resize.

    Key features:
    - Column count follows the canvas aspect ratio
    - Spacing never below the configured minimum
    - Elements shrink to a fraction of their cell for clear separation
    """

    name = "grid"

    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """Compute positions for grid layout."""
        if not elements:
            return StrategyResult(warnings=["No elements to layout"])

        params = self.settings.strategies
        count = len(elements)

        columns, rows = self._calculate_grid(count, new_bounds)

        spacing = max(
            params.min_grid_spacing,
            calculate_optimal_spacing(new_bounds.width, new_bounds.height, count),
        )
        spacing = self._fit_spacing(spacing, columns, rows, new_bounds)

        cell_width = (new_bounds.width - spacing * (columns + 1)) / columns
        cell_height = (new_bounds.height - spacing * (rows + 1)) / rows

        logger.debug(
            f"Grid layout: {columns} columns x {rows} rows, "
            f"cell {cell_width:.1f}x{cell_height:.1f}, spacing {spacing:.1f}"
        )

        placements = []
        for index, element in enumerate(self._ordered(elements)):
            col = index % columns
            row = index // columns

            x = new_bounds.left + spacing + col * (cell_width + spacing)
            y = new_bounds.top + spacing + row * (cell_height + spacing)

            factor = self._fit_factor(element, cell_width, cell_height) * params.grid_fill_ratio
            placements.append(self._place_centered(
                element,
                x + cell_width / 2,
                y + cell_height / 2,
                element.scale_x * factor,
                element.scale_y * factor,
                rationale=f"grid cell ({row}, {col})",
            ))

        return StrategyResult(placements=placements)

    @staticmethod
    def _calculate_grid(count: int, bounds: Bounds) -> Tuple[int, int]:
        """Columns and rows for ``count`` cells on a canvas of this shape."""
        columns = max(1, math.ceil(math.sqrt(count * bounds.aspect_ratio)))
        columns = min(columns, count)
        rows = math.ceil(count / columns)
        return columns, rows

    @staticmethod
    def _fit_spacing(spacing: float, columns: int, rows: int, bounds: Bounds) -> float:
        """Shrink spacing so that cells keep a positive size."""
        max_h = bounds.width / (columns + 1)
        max_v = bounds.height / (rows + 1)
        # Gutters take at most half of each axis
        return min(spacing, max_h / 2, max_v / 2)
