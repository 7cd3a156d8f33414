"""
base_strategy.py — Abstract base class for resize strategies.

All strategies inherit from BaseLayoutStrategy and implement compute()
to map (elements, old bounds, new bounds) to candidate placements.
Strategies are pure: no element is mutated and the same input always
yields the same output.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ...config import EngineSettings, get_settings
from ...dsl.schema import Bounds, ElementBase, Placement, SuggestedPlacement
from ..geometry import clamp_scale, layout_order


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class StrategyResult:
    """
    Result from strategy computation.

    Placements come back in the order the strategy laid elements out,
    which need not match the input order.
    """
    placements: List[Placement] = field(default_factory=list)

    # Elements placed by an exhausted search; allowed to collide
    fallback_ids: List[str] = field(default_factory=list)

    # Elements kept at a position that overlaps an earlier placement
    collision_ids: List[str] = field(default_factory=list)

    warnings: List[str] = field(default_factory=list)

    def get_placement(self, element_id: str) -> Optional[Placement]:
        """Find a placement by element ID."""
        for placement in self.placements:
            if placement.id == element_id:
                return placement
        return None


def calculate_optimal_spacing(width: float, height: float, count: int) -> float:
    """
    Gap between elements for a canvas of the given size.

    Two percent of the canvas' geometric mean side, reduced by 10% per extra
    element down to half, and never below 10 units.
    """
    base_spacing = math.sqrt(width * height) * 0.02
    count_factor = max(0.5, 1 - (count - 1) * 0.1)
    return max(10.0, base_spacing * count_factor)


# =============================================================================
# BASE STRATEGY
# =============================================================================

class BaseLayoutStrategy(ABC):
    """
    Abstract base class for resize strategies.

    Subclasses set ``name`` (the registry key) and implement compute().
    Strategies that read external suggestions set ``accepts_suggestions``.
    """

    name: str = ""
    accepts_suggestions: bool = False

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()

    @abstractmethod
    def compute(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> StrategyResult:
        """
        Compute placements for the new canvas bounds.

        Args:
            elements: Elements as they sit on the old canvas
            old_bounds: Canvas before the resize
            new_bounds: Canvas after the resize
            suggestions: Optional externally proposed placements; only
                strategies that consume suggestions look at them

        Returns:
            StrategyResult with one placement per element
        """
        pass

    # =========================================================================
    # HELPER METHODS (Available to all strategies)
    # =========================================================================

    def _ordered(self, elements: Sequence[ElementBase]) -> List[ElementBase]:
        """Elements by descending scaled area, then input order."""
        return [elements[i] for i in layout_order(elements)]

    def _scaled(
        self,
        element: ElementBase,
        scale_x: float,
        scale_y: float,
    ) -> Tuple[float, float]:
        """Clamp a proposed absolute scale into the element's effective range."""
        return (
            clamp_scale(scale_x, element, self.settings),
            clamp_scale(scale_y, element, self.settings),
        )

    def _place(
        self,
        element: ElementBase,
        left: float,
        top: float,
        scale_x: float,
        scale_y: float,
        confidence: float = 1.0,
        rationale: str = "",
    ) -> Placement:
        """Build a placement with its scale clamped into range."""
        scale_x, scale_y = self._scaled(element, scale_x, scale_y)
        return Placement(
            id=element.id,
            left=left,
            top=top,
            scale_x=scale_x,
            scale_y=scale_y,
            confidence=confidence,
            rationale=rationale or self.name,
        )

    def _place_centered(
        self,
        element: ElementBase,
        center_x: float,
        center_y: float,
        scale_x: float,
        scale_y: float,
        confidence: float = 1.0,
        rationale: str = "",
    ) -> Placement:
        """Build a placement whose scaled box is centred on a point."""
        scale_x, scale_y = self._scaled(element, scale_x, scale_y)
        return Placement(
            id=element.id,
            left=center_x - element.width * scale_x / 2,
            top=center_y - element.height * scale_y / 2,
            scale_x=scale_x,
            scale_y=scale_y,
            confidence=confidence,
            rationale=rationale or self.name,
        )

    @staticmethod
    def _fit_factor(element: ElementBase, max_width: float, max_height: float) -> float:
        """Largest factor <= 1 that fits the scaled box into max_width x max_height."""
        factor = 1.0
        if element.scaled_width > 0:
            factor = min(factor, max_width / element.scaled_width)
        if element.scaled_height > 0:
            factor = min(factor, max_height / element.scaled_height)
        return max(factor, 0.0)
