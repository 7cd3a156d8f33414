"""
tiered_placement.py — Importance-tiered placement for canvas resizes.

Places elements in three passes so that important content keeps its
position while less important content moves out of its way:

1. High tier: relative-offset mapping with padding, never searched
2. Medium tier: relative mapping, grid-step search on collision
3. Low tier: grid-step search at a reduced scale

The random fallback positions of earlier engines are replaced by a
deterministic grid-step search; an exhausted search pins the element to
the top-left corner and flags it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from ..config import EngineSettings, get_settings
from ..dsl.schema import (
    Bounds,
    ElementBase,
    ImportanceTier,
    Margins,
    Placement,
    PositionStrictness,
    SuggestedPlacement,
    tier_for,
)
from .geometry import Rect, clamp_scale, fits_within, rects_collide, scaled_rect

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIDENCE LEVELS
# =============================================================================

HIGH_CONFIDENCE = 0.9
MEDIUM_RELATIVE_CONFIDENCE = 0.7
MEDIUM_SEARCH_CONFIDENCE = 0.6
LOW_CONFIDENCE = 0.5
FALLBACK_CONFIDENCE = 0.2

TIER_ORDER = (ImportanceTier.HIGH, ImportanceTier.MEDIUM, ImportanceTier.LOW)

_NO_MARGINS = Margins.uniform(0)


@dataclass
class TieredPlacementResult:
    """Placements from one tiered pass plus what the pass had to give up on."""
    placements: List[Placement] = field(default_factory=list)

    # Elements pinned by an exhausted search; these may collide
    fallback_ids: List[str] = field(default_factory=list)

    # High-tier placements whose padded relative position overlaps an
    # earlier placement; high-tier elements are never searched
    collision_ids: List[str] = field(default_factory=list)

    # Elements that used an external suggestion
    suggested_ids: List[str] = field(default_factory=list)

    tier_counts: Dict[str, int] = field(default_factory=dict)


class TieredPlacementEngine:
    """
    Places elements tier by tier against the placements made so far.

    One engine instance holds no per-call state; place() may be called
    concurrently for different documents.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()
        self.policy = self.settings.tiers

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def tier_of(self, element: ElementBase) -> ImportanceTier:
        """Tier used for placement; strict elements always take the high path."""
        if element.constraints.position_strictness == PositionStrictness.STRICT:
            return ImportanceTier.HIGH
        return tier_for(element.importance, self.policy.high_threshold, self.policy.medium_threshold)

    def place(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> TieredPlacementResult:
        """
        Compute placements for every element.

        Args:
            elements: Elements on the old canvas
            old_bounds: Canvas before the resize
            new_bounds: Canvas after the resize
            suggestions: Optional external placements keyed by element id

        Returns:
            TieredPlacementResult with one placement per element. Only ids
            in fallback_ids or collision_ids may overlap earlier placements.
        """
        result = TieredPlacementResult()
        if not elements:
            return result

        by_id = {s.id: s for s in suggestions or []}
        tiers = self._split_tiers(elements)
        result.tier_counts = {tier.value: len(members) for tier, members in tiers.items()}

        logger.info(
            f"Tiered placement: {result.tier_counts[ImportanceTier.HIGH.value]} high, "
            f"{result.tier_counts[ImportanceTier.MEDIUM.value]} medium, "
            f"{result.tier_counts[ImportanceTier.LOW.value]} low"
        )

        placed: List[Rect] = []

        for tier in TIER_ORDER:
            for element in tiers[tier]:
                placement = None

                suggestion = by_id.get(element.id)
                if suggestion is not None:
                    placement = self._try_suggestion(element, suggestion, new_bounds, placed)
                    if placement is not None:
                        result.suggested_ids.append(element.id)

                if placement is None:
                    if tier == ImportanceTier.HIGH:
                        placement = self._place_high(element, old_bounds, new_bounds)
                    elif tier == ImportanceTier.MEDIUM:
                        placement = self._place_medium(element, old_bounds, new_bounds, placed)
                    else:
                        placement = self._place_low(element, new_bounds, placed)

                rect = scaled_rect(element, placement)
                if placement.fallback:
                    result.fallback_ids.append(element.id)
                elif any(rects_collide(rect, other) for other in placed):
                    result.collision_ids.append(element.id)

                logger.debug(
                    f"{tier.value} {element.id}: ({placement.left:.0f}, {placement.top:.0f}) "
                    f"scale {placement.scale_x:.2f}, confidence {placement.confidence:.1f}"
                )
                result.placements.append(placement)
                placed.append(rect)

        if result.fallback_ids:
            logger.warning(f"Grid search exhausted for {len(result.fallback_ids)} elements: {result.fallback_ids}")
        if result.collision_ids:
            logger.warning(f"Kept overlapping high-tier positions for: {result.collision_ids}")

        return result

    # =========================================================================
    # TIER PATHS
    # =========================================================================

    def _place_high(
        self,
        element: ElementBase,
        old_bounds: Bounds,
        new_bounds: Bounds,
        confidence: float = HIGH_CONFIDENCE,
        rationale: str = "high tier: relative position kept",
    ) -> Placement:
        """Map the relative offset, scale by the smaller ratio, pad inside the edges."""
        width_ratio = new_bounds.width / old_bounds.width
        height_ratio = new_bounds.height / old_bounds.height
        ratio = min(width_ratio, height_ratio)

        scale_x = clamp_scale(element.scale_x * ratio, element, self.settings)
        scale_y = clamp_scale(element.scale_y * ratio, element, self.settings)

        # Never grow while the canvas shrinks
        if width_ratio < 1 or height_ratio < 1:
            scale_x = clamp_scale(min(scale_x, self.policy.shrink_scale_cap), element, self.settings)
            scale_y = clamp_scale(min(scale_y, self.policy.shrink_scale_cap), element, self.settings)

        left = new_bounds.left + (element.left - old_bounds.left) * width_ratio
        top = new_bounds.top + (element.top - old_bounds.top) * height_ratio

        padding = self.policy.padding
        width = element.width * scale_x
        height = element.height * scale_y
        left = max(new_bounds.left + padding, min(left, new_bounds.right - width - padding))
        top = max(new_bounds.top + padding, min(top, new_bounds.bottom - height - padding))

        return Placement(
            id=element.id,
            left=left,
            top=top,
            scale_x=scale_x,
            scale_y=scale_y,
            confidence=confidence,
            rationale=rationale,
        )

    def _place_medium(
        self,
        element: ElementBase,
        old_bounds: Bounds,
        new_bounds: Bounds,
        placed: Sequence[Rect],
    ) -> Placement:
        """Relative mapping unless it collides, then grid-step search."""
        base = self._place_high(
            element,
            old_bounds,
            new_bounds,
            confidence=MEDIUM_RELATIVE_CONFIDENCE,
            rationale="medium tier: relative position kept",
        )
        rect = scaled_rect(element, base)
        if not any(rects_collide(rect, other, self.policy.collision_buffer) for other in placed):
            return base

        logger.debug(f"Medium tier {element.id}: relative position collides, searching")
        return self._search(element, new_bounds, placed, self._search_scale(new_bounds), MEDIUM_SEARCH_CONFIDENCE)

    def _place_low(
        self,
        element: ElementBase,
        new_bounds: Bounds,
        placed: Sequence[Rect],
    ) -> Placement:
        """Grid-step search at a scale capped for low-importance content."""
        scale = min(self._search_scale(new_bounds), self.policy.low_tier_scale_cap)
        return self._search(element, new_bounds, placed, scale, LOW_CONFIDENCE)

    def _try_suggestion(
        self,
        element: ElementBase,
        suggestion: SuggestedPlacement,
        new_bounds: Bounds,
        placed: Sequence[Rect],
    ) -> Optional[Placement]:
        """Suggested placement when it stays on the canvas and clear of others."""
        scale_x = clamp_scale(suggestion.scale_x, element, self.settings)
        scale_y = clamp_scale(suggestion.scale_y, element, self.settings)
        rect = Rect(suggestion.left, suggestion.top, element.width * scale_x, element.height * scale_y)

        if not fits_within(rect, new_bounds.safe_area(_NO_MARGINS)):
            logger.debug(f"Suggestion for {element.id} leaves the canvas, ignored")
            return None
        if any(rects_collide(rect, other, self.policy.collision_buffer) for other in placed):
            logger.debug(f"Suggestion for {element.id} collides, ignored")
            return None

        confidence = suggestion.confidence
        if confidence is None:
            confidence = self.policy.suggestion_confidence

        return Placement(
            id=element.id,
            left=suggestion.left,
            top=suggestion.top,
            scale_x=scale_x,
            scale_y=scale_y,
            confidence=confidence,
            rationale="external suggestion",
        )

    # =========================================================================
    # SEARCH
    # =========================================================================

    def _search_scale(self, bounds: Bounds) -> float:
        """Absolute scale for searched elements, smaller on small canvases."""
        reference = self.policy.search_scale_reference
        factor = min(self.policy.search_max_scale, bounds.width / reference, bounds.height / reference)
        return max(self.policy.search_min_scale, factor)

    def _search(
        self,
        element: ElementBase,
        bounds: Bounds,
        placed: Sequence[Rect],
        scale: float,
        confidence: float,
    ) -> Placement:
        """
        Scan candidate positions row by row from the top-left corner.

        The first position that keeps the element inside the canvas inset
        and clear of every placed box wins. When none does, the element is
        pinned near the top-left corner at half the search scale and
        flagged as a fallback.
        """
        policy = self.policy
        scale_x, scale_y = self._scaled(element, scale)
        width = element.width * scale_x
        height = element.height * scale_y

        y = bounds.top + policy.search_inset
        while y < bounds.bottom - policy.search_tail:
            x = bounds.left + policy.search_inset
            while x < bounds.right - policy.search_tail:
                rect = Rect(x, y, width, height)
                if (
                    rect.right <= bounds.right - policy.search_inset and
                    rect.bottom <= bounds.bottom - policy.search_inset and
                    not any(rects_collide(rect, other, policy.search_buffer) for other in placed)
                ):
                    return Placement(
                        id=element.id,
                        left=x,
                        top=y,
                        scale_x=scale_x,
                        scale_y=scale_y,
                        confidence=confidence,
                        rationale="grid-step search",
                    )
                x += policy.search_step
            y += policy.search_step

        fallback_x, fallback_y = self._scaled(element, max(policy.fallback_min_scale, scale * 0.5))
        return Placement(
            id=element.id,
            left=bounds.left + policy.fallback_offset,
            top=bounds.top + policy.fallback_offset,
            scale_x=fallback_x,
            scale_y=fallback_y,
            confidence=FALLBACK_CONFIDENCE,
            rationale="search exhausted: corner fallback",
            fallback=True,
        )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _scaled(self, element: ElementBase, scale: float) -> Tuple[float, float]:
        """Absolute search scale, clamped into the element range on each axis."""
        value = clamp_scale(scale, element, self.settings)
        return value, value

    def _split_tiers(self, elements: Sequence[ElementBase]) -> Dict[ImportanceTier, List[ElementBase]]:
        """Group by tier; each tier by importance, then scaled area, then input order."""
        indexed = sorted(
            enumerate(elements),
            key=lambda item: (-item[1].importance, -item[1].area, item[0]),
        )
        tiers: Dict[ImportanceTier, List[ElementBase]] = {tier: [] for tier in TIER_ORDER}
        for _, element in indexed:
            tiers[self.tier_of(element)].append(element)
        return tiers
