"""
center_focus_strategy.py — Centre-anchored radial strategy.

Pattern: the element closest to the canvas centre stays centred at full
scale; the others sit evenly on a circle around it at a reduced scale.
"""

import math
from typing import Optional, Sequence

from .base_strategy import BaseLayoutStrategy, StrategyResult
from ...dsl.schema import Bounds, ElementBase, SuggestedPlacement


class CenterFocusStrategy(BaseLayoutStrategy):
    """Keep the focal element centred and orbit the rest around it."""

    name = "center-focus"

    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """Compute positions for a centre-focus layout."""
        if not elements:
            return StrategyResult(warnings=["No elements to layout"])

        params = self.settings.strategies
        ordered = self._ordered(elements)

        # Nearest to the old centre; ties go to the larger element
        focal = min(
            ordered,
            key=lambda e: math.hypot(
                e.center_x - old_bounds.center_x,
                e.center_y - old_bounds.center_y,
            ),
        )

        placements = [self._place_centered(
            focal,
            new_bounds.center_x,
            new_bounds.center_y,
            1.0,
            1.0,
            rationale="center-focus anchor",
        )]

        satellites = [e for e in ordered if e.id != focal.id]
        if satellites:
            radius = min(new_bounds.width, new_bounds.height) * params.center_radius_ratio
            angle_step = 2 * math.pi / len(satellites)
            for index, element in enumerate(satellites):
                angle = index * angle_step
                placements.append(self._place_centered(
                    element,
                    new_bounds.center_x + math.cos(angle) * radius,
                    new_bounds.center_y + math.sin(angle) * radius,
                    params.satellite_scale,
                    params.satellite_scale,
                    rationale=f"center-focus satellite {index}",
                ))

        return StrategyResult(placements=placements)
