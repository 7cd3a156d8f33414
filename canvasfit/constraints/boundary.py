"""Boundary validation and escalating overflow correction."""

import logging
import math
from typing import Sequence

from canvasfit.config import EngineSettings, get_settings
from canvasfit.dsl.schema import (
    Bounds,
    Correction,
    CorrectionAction,
    ElementBase,
    ImportanceLevel,
    Margins,
    OverflowAxis,
    OverflowReport,
    OverflowSeverity,
    Placement,
    UnresolvedOverflow,
    ValidationResult,
)
from canvasfit.engine.geometry import (
    Rect,
    axis_overflow,
    clamp_position,
    clamp_scale,
    scale_range,
    scaled_rect,
)
from canvasfit.errors import InputError

logger = logging.getLogger(__name__)

# Overflow below this distance is floating-point noise from clamping
OVERFLOW_TOLERANCE = 1e-6

ESCALATION = {
    OverflowSeverity.MINOR: OverflowSeverity.MODERATE,
    OverflowSeverity.MODERATE: OverflowSeverity.SEVERE,
}


def check_placement_ids(elements: Sequence[ElementBase], placements: Sequence[Placement]) -> None:
    """Reject placement sets that are not a bijection onto the elements.

    Args:
        elements: Elements being validated.
        placements: One placement per element.

    Raises:
        InputError: On duplicate ids, a count mismatch or unmatched ids.
    """
    element_ids = [e.id for e in elements]
    placement_ids = [p.id for p in placements]

    if len(set(element_ids)) != len(element_ids):
        raise InputError("Duplicate element ids", context={"ids": element_ids})
    if len(placements) != len(elements):
        raise InputError(
            "Element and placement counts differ",
            context={"elements": len(elements), "placements": len(placements)},
        )
    if len(set(placement_ids)) != len(placement_ids) or set(placement_ids) != set(element_ids):
        missing = sorted(set(element_ids) - set(placement_ids))
        unknown = sorted(set(placement_ids) - set(element_ids))
        raise InputError(
            "Placement ids do not match element ids",
            context={"missing": missing, "unknown": unknown},
        )


class BoundaryValidator:
    """Keeps every element inside the canvas safe area.

    Corrections escalate within one call: minor overflow is fixed by
    repositioning, moderate by per-element scale reduction, severe by
    shrinking secondary content and re-laying everything into a compact
    grid. Elements too large for the safe area even at their minimum
    scale are reported as violations instead of raising.
    """

    def __init__(
        self,
        canvas: Bounds,
        margins: Margins | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        """Initialize the validator.

        Args:
            canvas: Target canvas bounds.
            margins: Safe-area margins; defaults to ``settings.margin`` on every edge.
            settings: Engine settings; defaults to the cached settings.
        """
        self.settings = settings or get_settings()
        if canvas.width <= 0 or canvas.height <= 0:
            raise InputError(
                "Canvas bounds must be positive",
                context={"width": canvas.width, "height": canvas.height},
            )
        self.canvas = canvas
        self.margins = margins or Margins.uniform(self.settings.margin)
        self.safe_area = canvas.safe_area(self.margins)
        if self.safe_area.width <= 0 or self.safe_area.height <= 0:
            raise InputError(
                "Margins leave no safe area",
                context={"canvas": canvas.model_dump(), "margins": self.margins.model_dump()},
            )

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_overflow(
        self,
        elements: Sequence[ElementBase],
        placements: Sequence[Placement] | None = None,
    ) -> OverflowReport:
        """Classify how badly a placement set leaves the safe area.

        Args:
            elements: Elements in input order.
            placements: Matching placements; defaults to each element's own geometry.

        Returns:
            OverflowReport with severity, axis, affected ids and raw metrics.
        """
        if placements is None:
            placements = [e.to_placement() for e in elements]

        affected: list[str] = []
        horizontal_any = False
        vertical_any = False
        total_area = 0.0
        max_distance = 0.0

        for element, placement in zip(elements, placements):
            rect = scaled_rect(element, placement)
            horizontal, vertical = self._overflow(rect)
            if horizontal == 0 and vertical == 0:
                continue

            affected.append(element.id)
            horizontal_any = horizontal_any or horizontal > 0
            vertical_any = vertical_any or vertical > 0
            total_area += horizontal * rect.height + vertical * rect.width
            max_distance = max(max_distance, horizontal, vertical)

        if not affected:
            return OverflowReport()

        ratio = len(affected) / len(elements)
        area_ratio = total_area / self.canvas.area
        severity = self._classify(ratio, area_ratio, max_distance)

        if horizontal_any and vertical_any:
            axis = OverflowAxis.BOTH
        elif horizontal_any:
            axis = OverflowAxis.HORIZONTAL
        else:
            axis = OverflowAxis.VERTICAL

        return OverflowReport(
            has_overflow=True,
            axis=axis,
            severity=severity,
            affected_elements=affected,
            recommended_actions=self._recommend(severity, axis, ratio),
            overflow_ratio=ratio,
            area_ratio=area_ratio,
            max_distance=max_distance,
        )

    def _overflow(self, rect: Rect) -> tuple[float, float]:
        horizontal, vertical = axis_overflow(rect, self.safe_area)
        if horizontal < OVERFLOW_TOLERANCE:
            horizontal = 0.0
        if vertical < OVERFLOW_TOLERANCE:
            vertical = 0.0
        return horizontal, vertical

    def _classify(self, ratio: float, area_ratio: float, distance: float) -> OverflowSeverity:
        thresholds = self.settings.severity
        if (
            ratio > thresholds.severe_ratio
            or area_ratio > thresholds.severe_area_ratio
            or distance > thresholds.severe_distance
        ):
            return OverflowSeverity.SEVERE
        if (
            ratio > thresholds.moderate_ratio
            or area_ratio > thresholds.moderate_area_ratio
            or distance > thresholds.moderate_distance
        ):
            return OverflowSeverity.MODERATE
        return OverflowSeverity.MINOR

    @staticmethod
    def _recommend(severity: OverflowSeverity, axis: OverflowAxis, ratio: float) -> list[str]:
        actions = []
        if severity == OverflowSeverity.SEVERE:
            actions.append("reduce content density")
            actions.append("aggressive scaling of decorative elements")
            if ratio > 0.8:
                actions.append("layout restructuring required")

        if axis == OverflowAxis.HORIZONTAL:
            actions.append("horizontal compression and vertical stacking")
        elif axis == OverflowAxis.VERTICAL:
            actions.append("vertical compression and horizontal arrangement")
        elif axis == OverflowAxis.BOTH:
            actions.append("grid-based arrangement")
        return actions

    # ------------------------------------------------------------------
    # Validate and correct
    # ------------------------------------------------------------------

    def validate_and_correct(
        self,
        elements: Sequence[ElementBase],
        placements: Sequence[Placement] | None = None,
    ) -> ValidationResult:
        """Analyze a placement set and correct it until it fits.

        Args:
            elements: Elements in input order.
            placements: Candidate placements; defaults to each element's own geometry.

        Returns:
            ValidationResult whose placements follow the element order.

        Raises:
            InputError: If placements and elements are not a bijection.
        """
        if placements is None:
            placements = [e.to_placement() for e in elements]
        check_placement_ids(elements, placements)

        by_id = {p.id: p for p in placements}
        corrections: list[Correction] = []
        current = self._clamp_scales(elements, [by_id[e.id] for e in elements], corrections)

        before = self.analyze_overflow(elements, current)
        if not before.has_overflow:
            logger.debug(f"No overflow across {len(elements)} elements")
            return ValidationResult(
                is_valid=True,
                overflow=before,
                residual_overflow=before,
                corrections=corrections,
                placements=current,
                quality_score=self._score(elements, corrections),
            )

        logger.info(
            f"Overflow {before.severity.value} on {before.axis.value} axis: "
            f"{len(before.affected_elements)}/{len(elements)} elements"
        )

        report = before
        level = before.severity

        while True:
            if level == OverflowSeverity.MINOR:
                current = self._correct_minor(elements, current, report, corrections)
            elif level == OverflowSeverity.MODERATE:
                current = self._correct_moderate(elements, current, report, corrections)
            else:
                current = self._correct_severe(elements, current, corrections)

            report = self.analyze_overflow(elements, current)
            if not report.has_overflow or level == OverflowSeverity.SEVERE:
                break

            level = ESCALATION[level]
            logger.info(f"Overflow remains, escalating to {level.value} correction")

        violations = self._unresolved(elements, current, report)

        score = self._score(elements, corrections)
        logger.info(f"Applied {len(corrections)} corrections, score {score:.1f}")

        return ValidationResult(
            is_valid=not report.has_overflow,
            overflow=before,
            residual_overflow=report,
            corrections=corrections,
            placements=current,
            quality_score=score,
            violations=violations,
        )

    # ------------------------------------------------------------------
    # Correction levels
    # ------------------------------------------------------------------

    def _clamp_scales(
        self,
        elements: Sequence[ElementBase],
        placements: list[Placement],
        corrections: list[Correction],
    ) -> list[Placement]:
        """Bring every scale into the global and element ranges."""
        result = []
        for element, placement in zip(elements, placements):
            scale_x = clamp_scale(placement.scale_x, element, self.settings)
            scale_y = clamp_scale(placement.scale_y, element, self.settings)
            if (scale_x, scale_y) != (placement.scale_x, placement.scale_y):
                clamped = placement.model_copy(update={"scale_x": scale_x, "scale_y": scale_y})
                corrections.append(Correction(
                    element_id=element.id,
                    action=CorrectionAction.SCALE,
                    before=placement,
                    after=clamped,
                    reasoning="Scale clamped into the allowed range",
                ))
                placement = clamped
            result.append(placement)
        return result

    def _correct_minor(
        self,
        elements: Sequence[ElementBase],
        placements: list[Placement],
        report: OverflowReport,
        corrections: list[Correction],
    ) -> list[Placement]:
        """Pull affected elements back inside without resizing them."""
        affected = set(report.affected_elements)
        result = []
        for element, placement in zip(elements, placements):
            if element.id in affected:
                placement = self._reposition(
                    element,
                    placement,
                    corrections,
                    "Precise positioning adjustment to resolve minor boundary violation",
                )
            result.append(placement)
        return result

    def _correct_moderate(
        self,
        elements: Sequence[ElementBase],
        placements: list[Placement],
        report: OverflowReport,
        corrections: list[Correction],
    ) -> list[Placement]:
        """Shrink affected elements to the space left from their clamped position."""
        safe = self.safe_area
        affected = set(report.affected_elements)
        result = []

        for element, placement in zip(elements, placements):
            if element.id not in affected:
                result.append(placement)
                continue

            rect = scaled_rect(element, placement)
            left, top = clamp_position(rect, safe)
            reduction = 1.0
            if rect.width > 0:
                reduction = min(reduction, (safe.right - left) / rect.width)
            if rect.height > 0:
                reduction = min(reduction, (safe.bottom - top) / rect.height)

            if reduction < 1:
                scale_x = clamp_scale(placement.scale_x * reduction, element, self.settings)
                scale_y = clamp_scale(placement.scale_y * reduction, element, self.settings)
                if element.constraints.aspect_ratio_locked:
                    scale_x = scale_y = min(scale_x, scale_y)
                scaled = placement.model_copy(update={"scale_x": scale_x, "scale_y": scale_y})
                if scaled != placement:
                    corrections.append(Correction(
                        element_id=element.id,
                        action=CorrectionAction.SCALE,
                        before=placement,
                        after=scaled,
                        reasoning=(
                            "Proportional scaling to fit within boundaries "
                            f"(reduction: {(1 - reduction) * 100:.0f}%)"
                        ),
                    ))
                    placement = scaled

            if any(self._overflow(scaled_rect(element, placement))):
                placement = self._reposition(
                    element,
                    placement,
                    corrections,
                    "Repositioned after scaling to stay inside the safe area",
                )
            result.append(placement)

        return result

    def _correct_severe(
        self,
        elements: Sequence[ElementBase],
        placements: list[Placement],
        corrections: list[Correction],
    ) -> list[Placement]:
        """Shrink non-primary content, then re-lay everything in a compact grid."""
        factor = self.settings.severe_scale_factor
        shrunk = []
        for element, placement in zip(elements, placements):
            if element.level != ImportanceLevel.PRIMARY:
                low, _ = scale_range(element, self.settings)
                scale_x = clamp_scale(max(placement.scale_x * factor, low), element, self.settings)
                scale_y = clamp_scale(max(placement.scale_y * factor, low), element, self.settings)
                scaled = placement.model_copy(update={"scale_x": scale_x, "scale_y": scale_y})
                if scaled != placement:
                    corrections.append(Correction(
                        element_id=element.id,
                        action=CorrectionAction.SCALE,
                        before=placement,
                        after=scaled,
                        reasoning="Aggressive scaling of non-primary content for severe overflow",
                    ))
                    placement = scaled
            shrunk.append(placement)

        return self._compact_grid(elements, shrunk, corrections)

    def _compact_grid(
        self,
        elements: Sequence[ElementBase],
        placements: list[Placement],
        corrections: list[Correction],
    ) -> list[Placement]:
        safe = self.safe_area
        count = len(elements)
        columns = math.ceil(math.sqrt(count))
        rows = math.ceil(count / columns)
        cell_width = safe.width / columns
        cell_height = safe.height / rows
        fill = self.settings.compact_cell_fill

        def sort_key(index: int) -> tuple:
            element = elements[index]
            placement = placements[index]
            area = element.width * placement.scale_x * element.height * placement.scale_y
            return (-element.level.rank, -area, index)

        result = list(placements)
        for cell, index in enumerate(sorted(range(count), key=sort_key)):
            element = elements[index]
            placement = placements[index]
            col = cell % columns
            row = cell // columns

            scale_x = placement.scale_x
            scale_y = placement.scale_y
            if element.width * scale_x > cell_width * fill and element.width > 0:
                scale_x = cell_width * fill / element.width
            if element.height * scale_y > cell_height * fill and element.height > 0:
                scale_y = cell_height * fill / element.height
            if element.constraints.aspect_ratio_locked:
                scale_x = scale_y = min(scale_x, scale_y)
            scale_x = clamp_scale(scale_x, element, self.settings)
            scale_y = clamp_scale(scale_y, element, self.settings)

            width = element.width * scale_x
            height = element.height * scale_y
            center_x = safe.left + col * cell_width + cell_width / 2
            center_y = safe.top + row * cell_height + cell_height / 2
            left, top = clamp_position(
                Rect(center_x - width / 2, center_y - height / 2, width, height), safe
            )

            after = placement.model_copy(update={
                "left": left,
                "top": top,
                "scale_x": scale_x,
                "scale_y": scale_y,
            })
            corrections.append(Correction(
                element_id=element.id,
                action=CorrectionAction.LAYOUT_COMPRESS,
                before=placement,
                after=after,
                reasoning=f"Compact grid layout arrangement ({col + 1}, {row + 1}) to resolve severe overflow",
            ))
            result[index] = after

        return result

    def _reposition(
        self,
        element: ElementBase,
        placement: Placement,
        corrections: list[Correction],
        reasoning: str,
    ) -> Placement:
        left, top = clamp_position(scaled_rect(element, placement), self.safe_area)
        if left == placement.left and top == placement.top:
            return placement
        moved = placement.model_copy(update={"left": left, "top": top})
        corrections.append(Correction(
            element_id=element.id,
            action=CorrectionAction.REPOSITION,
            before=placement,
            after=moved,
            reasoning=reasoning,
        ))
        return moved

    # ------------------------------------------------------------------
    # Residual overflow and scoring
    # ------------------------------------------------------------------

    def _unresolved(
        self,
        elements: Sequence[ElementBase],
        placements: Sequence[Placement],
        report: OverflowReport,
    ) -> list[UnresolvedOverflow]:
        if not report.has_overflow:
            return []

        affected = set(report.affected_elements)
        violations = []
        for element, placement in zip(elements, placements):
            if element.id not in affected:
                continue
            horizontal, vertical = self._overflow(scaled_rect(element, placement))
            if horizontal and vertical:
                axis = OverflowAxis.BOTH
            elif horizontal:
                axis = OverflowAxis.HORIZONTAL
            else:
                axis = OverflowAxis.VERTICAL
            violations.append(UnresolvedOverflow(
                element_id=element.id,
                axis=axis,
                distance=max(horizontal, vertical),
                reason="Element exceeds the safe area even at its minimum scale",
            ))
            logger.warning(
                f"Unresolved overflow for {element.id}: {max(horizontal, vertical):.1f} on {axis.value} axis"
            )
        return violations

    def _score(self, elements: Sequence[ElementBase], corrections: Sequence[Correction]) -> float:
        """Start at 100, deduct per correction, reward untouched primary content."""
        penalties = self.settings.penalties
        score = 100.0

        for correction in corrections:
            if correction.action == CorrectionAction.REPOSITION:
                score -= penalties.reposition
            elif correction.action == CorrectionAction.SCALE:
                delta = max(
                    abs(correction.before.scale_x - correction.after.scale_x),
                    abs(correction.before.scale_y - correction.after.scale_y),
                )
                score -= delta * penalties.scale_factor
            elif correction.action == CorrectionAction.PRIORITY_SWAP:
                score -= penalties.priority_swap
            elif correction.action == CorrectionAction.LAYOUT_COMPRESS:
                score -= penalties.layout_compress

        primary_ids = {e.id for e in elements if e.level == ImportanceLevel.PRIMARY}
        if not any(c.element_id in primary_ids for c in corrections):
            score += penalties.untouched_primary_bonus

        return max(0.0, min(100.0, score))
