"""
orientation_strategy.py — Orientation-aware resize strategy.

Used for: landscape <-> portrait flips, where reproducing relative offsets
squeezes everything into one band of the new canvas.
Pattern:
- Landscape -> portrait: vertical stack, centred, text first
- Portrait -> landscape: grid of at most three columns
- Same orientation: conservative proportional rescale
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from .base_strategy import BaseLayoutStrategy, StrategyResult
from ...dsl.schema import Bounds, ContentCategory, ElementBase, SuggestedPlacement

logger = logging.getLogger(__name__)


class OrientationStrategy(BaseLayoutStrategy):
    """Re-arrange content when the canvas changes orientation."""

    name = "orientation"

    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """Compute positions for an orientation-aware resize."""
        if not elements:
            return StrategyResult(warnings=["No elements to layout"])

        ratio = min(new_bounds.width / old_bounds.width, new_bounds.height / old_bounds.height)

        if old_bounds.is_landscape and not new_bounds.is_landscape:
            logger.debug("Orientation change: landscape -> portrait")
            return self._stack_vertically(elements, new_bounds, ratio)

        if not old_bounds.is_landscape and new_bounds.is_landscape:
            logger.debug("Orientation change: portrait -> landscape")
            return self._arrange_columns(elements, new_bounds, ratio)

        return self._rescale(elements, old_bounds, new_bounds, ratio)

    # =========================================================================
    # LAYOUTS
    # =========================================================================

    def _stack_vertically(
        self,
        elements: Sequence[ElementBase],
        bounds: Bounds,
        ratio: float,
    ) -> StrategyResult:
        params = self.settings.strategies
        margin = params.orientation_margin
        base = ratio * params.orientation_base_factor
        usable_width = bounds.width - 2 * margin

        placements = []
        warnings = []
        current_y = bounds.top + margin

        for group in self._groups(elements):
            for element in group:
                factor = base
                if element.category == ContentCategory.TEXT:
                    factor = max(base, params.orientation_text_min_scale)
                scale_x, scale_y = self._scaled(
                    element, element.scale_x * factor, element.scale_y * factor
                )
                width = element.width * scale_x
                height = element.height * scale_y

                left = bounds.left + margin + max(0.0, (usable_width - width) / 2)
                placements.append(self._place(
                    element, left, current_y, scale_x, scale_y, rationale="portrait stack"
                ))
                current_y += height + margin * 0.5

            current_y += margin * 0.5

        if current_y > bounds.bottom - margin:
            warnings.append("Portrait stack exceeds canvas height")

        return StrategyResult(placements=placements, warnings=warnings)

    def _arrange_columns(
        self,
        elements: Sequence[ElementBase],
        bounds: Bounds,
        ratio: float,
    ) -> StrategyResult:
        params = self.settings.strategies
        margin = params.orientation_margin
        base = ratio * params.orientation_base_factor

        ordered = [e for group in self._groups(elements) for e in group]
        columns = min(params.orientation_max_columns, math.ceil(math.sqrt(len(ordered))))
        rows = math.ceil(len(ordered) / columns)

        cell_width = (bounds.width - 2 * margin) / columns
        cell_height = (bounds.height - 2 * margin) / rows

        placements = []
        for index, element in enumerate(ordered):
            col = index % columns
            row = index // columns

            factor_x, factor_y = self._cell_factors(element, base, cell_width, cell_height)
            placements.append(self._place_centered(
                element,
                bounds.left + margin + col * cell_width + cell_width / 2,
                bounds.top + margin + row * cell_height + cell_height / 2,
                element.scale_x * factor_x,
                element.scale_y * factor_y,
                rationale=f"landscape cell ({row}, {col})",
            ))

        return StrategyResult(placements=placements)

    def _rescale(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        ratio: float,
    ) -> StrategyResult:
        factor = ratio * self.settings.strategies.same_orientation_factor
        width_ratio = new_bounds.width / old_bounds.width
        height_ratio = new_bounds.height / old_bounds.height

        placements = [
            self._place(
                element,
                new_bounds.left + (element.left - old_bounds.left) * width_ratio,
                new_bounds.top + (element.top - old_bounds.top) * height_ratio,
                element.scale_x * factor,
                element.scale_y * factor,
                rationale="orientation kept",
            )
            for element in elements
        ]
        return StrategyResult(placements=placements)

    # =========================================================================
    # HELPERS
    # =========================================================================

    @staticmethod
    def _groups(elements: Sequence[ElementBase]) -> List[List[ElementBase]]:
        """Text first, then images, then everything else, input order within."""
        text = [e for e in elements if e.category == ContentCategory.TEXT]
        images = [e for e in elements if e.category == ContentCategory.IMAGE]
        rest = [
            e for e in elements
            if e.category not in (ContentCategory.TEXT, ContentCategory.IMAGE)
        ]
        return [text, images, rest]

    def _cell_factors(
        self,
        element: ElementBase,
        base: float,
        cell_width: float,
        cell_height: float,
    ) -> Tuple[float, float]:
        """Per-axis factors clipping the element to the cell's usable fraction."""
        params = self.settings.strategies
        fill = params.orientation_cell_fill

        factor_x = base
        factor_y = base
        if element.scaled_width * base > cell_width * fill:
            factor_x = cell_width * fill / element.scaled_width
        if element.scaled_height * base > cell_height * fill:
            factor_y = cell_height * fill / element.scaled_height

        if element.constraints.aspect_ratio_locked:
            factor_x = factor_y = min(factor_x, factor_y)

        if element.category == ContentCategory.TEXT:
            factor_x = max(factor_x, params.orientation_text_min_scale)
            factor_y = max(factor_y, params.orientation_text_min_scale)

        return factor_x, factor_y
