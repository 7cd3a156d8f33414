"""
layout_engine.py — Resize orchestrator.

The LayoutEngine coordinates one canvas resize:
1. Checks the input and classifies the resize
2. Optionally asks an external provider for suggestions (time-bounded)
3. Runs the selected strategy to get raw placements
4. Validates and corrects them against the new safe area
5. Scores the result, and optionally tries every strategy when it scores low

The engine never mutates elements; the caller applies the returned
placements to its own scene.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config import EngineSettings, get_settings
from ..constraints.boundary import BoundaryValidator
from ..constraints.quality import LayoutQualityScorer
from ..dsl.schema import (
    Bounds,
    ElementBase,
    Margins,
    Placement,
    QualityScore,
    SuggestedPlacement,
    ValidationResult,
)
from ..errors import InputError
from .analyzer import ResizeProfile, describe_resize
from .layout_strategies import STRATEGIES, StrategyResult, get_strategy
from .suggestions import SuggestionProvider, SuggestionRequest, accept_suggestions, fetch_suggestions

logger = logging.getLogger(__name__)


# =============================================================================
# INPUT CHECKS
# =============================================================================

def _check_bounds(*bounds: Bounds) -> None:
    for b in bounds:
        if b.width <= 0 or b.height <= 0:
            raise InputError(
                "Canvas bounds must be positive",
                context={"width": b.width, "height": b.height},
            )


def _check_elements(elements: Sequence[ElementBase]) -> None:
    seen = set()
    for element in elements:
        if element.id in seen:
            raise InputError("Duplicate element id", context={"id": element.id})
        seen.add(element.id)
        if element.width <= 0 or element.height <= 0:
            raise InputError(
                "Element size must be positive",
                context={"id": element.id, "width": element.width, "height": element.height},
            )
        values = (element.left, element.top, element.width, element.height)
        if not all(math.isfinite(v) for v in values):
            raise InputError("Element geometry must be finite", context={"id": element.id})


# =============================================================================
# LAYOUT ENGINE
# =============================================================================

@dataclass
class LayoutResult:
    """Result of one resize."""
    placements: List[Placement]
    validation: ValidationResult
    quality: QualityScore
    strategy_used: str
    profile: ResizeProfile
    fallback_ids: List[str] = field(default_factory=list)
    collision_ids: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.validation.is_valid

    def get_placement(self, element_id: str) -> Optional[Placement]:
        """Find a placement by element ID."""
        for placement in self.placements:
            if placement.id == element_id:
                return placement
        return None


class LayoutEngine:
    """
    Main resize orchestrator.

    Holds only its settings, so one instance can serve concurrent resizes
    of different documents.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()

    # =========================================================================
    # COMPONENT ENTRY POINTS
    # =========================================================================

    def compute_layout(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        strategy: str = "proportional",
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
    ) -> List[Placement]:
        """Raw strategy placements, before boundary correction."""
        _check_bounds(old_bounds, new_bounds)
        _check_elements(elements)
        return self._run_strategy(elements, old_bounds, new_bounds, strategy, suggestions).placements

    def validate_and_correct(
        self,
        elements: Sequence[ElementBase],
        canvas: Bounds,
        margins: Optional[Margins] = None,
        placements: Optional[Sequence[Placement]] = None,
    ) -> ValidationResult:
        """Correct placements (or the elements' own geometry) to fit ``canvas``."""
        _check_bounds(canvas)
        _check_elements(elements)
        validator = BoundaryValidator(canvas, margins, self.settings)
        return validator.validate_and_correct(elements, placements)

    def score_layout(
        self,
        elements: Sequence[ElementBase],
        placements: Optional[Sequence[Placement]] = None,
        canvas: Optional[Bounds] = None,
    ) -> QualityScore:
        """Aesthetic quality of a placement set."""
        return LayoutQualityScorer(canvas).score(elements, placements)

    # =========================================================================
    # RESIZE PIPELINE
    # =========================================================================

    def resize(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        strategy: str = "proportional",
        suggestions: Optional[Sequence[SuggestedPlacement]] = None,
        suggestion_provider: Optional[SuggestionProvider] = None,
        margins: Optional[Margins] = None,
        optimize: bool = False,
    ) -> LayoutResult:
        """
        Resize a layout from ``old_bounds`` to ``new_bounds``.

        Args:
            elements: Elements as they sit on the old canvas
            old_bounds: Canvas before the resize
            new_bounds: Canvas after the resize
            strategy: Registry name of the strategy to run
            suggestions: Precomputed external placements
            suggestion_provider: Callable asked for suggestions when none are
                given and the strategy consumes them
            margins: Safe-area margins on the new canvas
            optimize: Compare every strategy when the result scores below
                ``settings.quality_threshold``

        Returns:
            LayoutResult with validated placements in element order
        """
        _check_bounds(old_bounds, new_bounds)
        _check_elements(elements)
        implementation = get_strategy(strategy, self.settings)

        profile = describe_resize(old_bounds, new_bounds)
        logger.info(
            f"Resize {old_bounds.width:g}x{old_bounds.height:g} -> "
            f"{new_bounds.width:g}x{new_bounds.height:g}: {profile.scale_direction}, "
            f"aspect ratio {profile.aspect_ratio_change}"
        )

        warnings: List[str] = []
        if suggestions is not None:
            suggestions = accept_suggestions(suggestions, elements)
        elif suggestion_provider is not None and not implementation.accepts_suggestions:
            logger.debug(f"Strategy {implementation.name} ignores suggestions, provider not called")
        elif suggestion_provider is not None:
            request = SuggestionRequest(elements=elements, old_bounds=old_bounds, new_bounds=new_bounds)
            suggestions = fetch_suggestions(
                suggestion_provider, request, self.settings.suggestion_timeout_seconds
            )
            if suggestions is None:
                fallback = self.settings.suggestion_fallback_strategy
                warnings.append(f"Suggestion provider failed; using {fallback} strategy")
                logger.warning(f"Suggestion provider failed, falling back to {fallback}")
                strategy = fallback

        result = self._run(elements, old_bounds, new_bounds, strategy, suggestions, margins, profile)
        result.warnings = warnings + result.warnings

        if optimize and result.quality.composite < self.settings.quality_threshold:
            logger.info(
                f"Quality {result.quality.composite:.1f} below {self.settings.quality_threshold:g}, "
                "comparing strategies"
            )
            ranked = self.compare_strategies(elements, old_bounds, new_bounds, margins=margins)
            best = ranked[0]
            if best.quality.composite > result.quality.composite:
                best.warnings = result.warnings + [
                    f"Replaced {result.strategy_used} ({result.quality.composite:.1f}) "
                    f"with {best.strategy_used} ({best.quality.composite:.1f})"
                ] + best.warnings
                result = best

        logger.info(
            f"Resize done with {result.strategy_used}: valid={result.is_valid}, "
            f"quality {result.quality.composite:.1f}"
        )
        return result

    def compare_strategies(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        strategies: Optional[Sequence[str]] = None,
        margins: Optional[Margins] = None,
    ) -> List[LayoutResult]:
        """
        Run several strategies and rank their results.

        Ranked by composite quality, then validation score, then the order
        the strategies were given in (registry order by default).
        """
        _check_bounds(old_bounds, new_bounds)
        _check_elements(elements)

        names = list(strategies) if strategies is not None else list(STRATEGIES)
        profile = describe_resize(old_bounds, new_bounds)

        results = [
            self._run(elements, old_bounds, new_bounds, name, None, margins, profile)
            for name in names
        ]
        ranked = sorted(
            enumerate(results),
            key=lambda item: (-item[1].quality.composite, -item[1].validation.quality_score, item[0]),
        )
        for _, result in ranked:
            logger.debug(f"{result.strategy_used}: quality {result.quality.composite:.1f}")
        return [result for _, result in ranked]

    def layout_info(self, elements: Sequence[ElementBase], bounds: Bounds) -> Dict[str, Any]:
        """Summary figures for a layout on a canvas."""
        _check_bounds(bounds)
        total_area = sum(e.area for e in elements)
        count = len(elements)
        return {
            "element_count": count,
            "total_area": total_area,
            "average_area": total_area / count if count else 0.0,
            "canvas_area": bounds.area,
            "coverage": total_area / bounds.area,
        }

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _run_strategy(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        strategy: str,
        suggestions: Optional[Sequence[SuggestedPlacement]],
    ) -> StrategyResult:
        implementation = get_strategy(strategy, self.settings)
        if suggestions and not implementation.accepts_suggestions:
            logger.debug(f"Strategy {implementation.name} ignores {len(suggestions)} suggestions")
        result = implementation.compute(elements, old_bounds, new_bounds, suggestions)
        logger.info(f"Strategy {implementation.name} placed {len(result.placements)} elements")
        return result

    def _run(
        self,
        elements: Sequence[ElementBase],
        old_bounds: Bounds,
        new_bounds: Bounds,
        strategy: str,
        suggestions: Optional[Sequence[SuggestedPlacement]],
        margins: Optional[Margins],
        profile: ResizeProfile,
    ) -> LayoutResult:
        raw = self._run_strategy(elements, old_bounds, new_bounds, strategy, suggestions)

        validator = BoundaryValidator(new_bounds, margins, self.settings)
        validation = validator.validate_and_correct(elements, raw.placements)
        quality = LayoutQualityScorer(new_bounds).score(elements, validation.placements)

        warnings = list(raw.warnings) if elements else []
        for violation in validation.violations:
            warnings.append(f"{violation.element_id}: {violation.reason}")

        return LayoutResult(
            placements=list(validation.placements),
            validation=validation,
            quality=quality,
            strategy_used=get_strategy(strategy, self.settings).name,
            profile=profile,
            fallback_ids=list(raw.fallback_ids),
            collision_ids=list(raw.collision_ids),
            warnings=warnings,
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def compute_layout(
    elements: Sequence[ElementBase],
    old_bounds: Bounds,
    new_bounds: Bounds,
    strategy: str = "proportional",
    suggestions: Optional[Sequence[SuggestedPlacement]] = None,
) -> List[Placement]:
    """Raw placements from one strategy; pure."""
    return LayoutEngine().compute_layout(elements, old_bounds, new_bounds, strategy, suggestions)


def validate_and_correct(
    elements: Sequence[ElementBase],
    canvas: Bounds,
    margins: Optional[Margins] = None,
    placements: Optional[Sequence[Placement]] = None,
) -> ValidationResult:
    """Validate placements against a canvas and correct any overflow."""
    return LayoutEngine().validate_and_correct(elements, canvas, margins, placements)


def score_layout(
    elements: Sequence[ElementBase],
    placements: Optional[Sequence[Placement]] = None,
    canvas: Optional[Bounds] = None,
) -> QualityScore:
    """Aesthetic quality of a placement set."""
    return LayoutEngine().score_layout(elements, placements, canvas)


def resize(
    elements: Sequence[ElementBase],
    old_bounds: Bounds,
    new_bounds: Bounds,
    strategy: str = "proportional",
    **kwargs: Any,
) -> LayoutResult:
    """Full resize pipeline with default settings."""
    return LayoutEngine().resize(elements, old_bounds, new_bounds, strategy, **kwargs)
