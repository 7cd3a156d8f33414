"""
tiered_strategy.py — Strategy adapter over the tiered placement engine.

Lets the orchestrator select importance-tiered placement by name like any
other strategy, optionally seeded by external suggestions.
"""

from typing import Optional, Sequence

from .base_strategy import BaseLayoutStrategy, StrategyResult
from ..tiered_placement import TieredPlacementEngine
from ...dsl.schema import Bounds, ElementBase, SuggestedPlacement


class TieredStrategy(BaseLayoutStrategy):
    """Place high, then medium, then low importance elements."""

    name = "tiered"
    accepts_suggestions = True

    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """Compute positions with the tiered placement engine."""
        if not elements:
            return StrategyResult(warnings=["No elements to layout"])

        tiered = TieredPlacementEngine(self.settings).place(
            elements, old_bounds, new_bounds, suggestions
        )

        warnings = []
        if tiered.fallback_ids:
            warnings.append(f"Corner fallback used for: {', '.join(tiered.fallback_ids)}")
        if tiered.collision_ids:
            warnings.append(f"Overlapping high-tier positions kept for: {', '.join(tiered.collision_ids)}")

        return StrategyResult(
            placements=tiered.placements,
            fallback_ids=tiered.fallback_ids,
            collision_ids=tiered.collision_ids,
            warnings=warnings,
        )
