"""Aesthetic quality metrics for a placement set."""

import logging
import math
from itertools import combinations
from typing import Sequence

from canvasfit.dsl.schema import Bounds, ElementBase, Placement, QualityScore
from canvasfit.engine.geometry import Rect, bounding_box, edge_gap, rects_collide, scaled_rect

logger = logging.getLogger(__name__)

# Composite weights; alignment is reported but not weighted
BALANCE_WEIGHT = 0.3
SPACING_WEIGHT = 0.2
HIERARCHY_WEIGHT = 0.3
COLLISION_WEIGHT = 0.2

ALIGNMENT_TOLERANCE = 10.0
SUGGESTION_THRESHOLD = 70.0

SUGGESTIONS = {
    "visual_balance": "Distribute visual weight more evenly across the canvas quadrants",
    "spacing_consistency": "Use consistent gaps between neighbouring elements",
    "hierarchy_preservation": "Give important elements more size or a more central position",
    "collision_avoidance": "Separate overlapping elements",
    "alignment": "Align element edges or centres with each other",
}


class LayoutQualityScorer:
    """Scores placement sets independently of the strategy that produced them."""

    def __init__(self, canvas: Bounds | None = None) -> None:
        """Initialize the scorer.

        Args:
            canvas: Canvas the placements live on; defaults to the placements'
                bounding box at scoring time.
        """
        self.canvas = canvas

    def score(
        self,
        elements: Sequence[ElementBase],
        placements: Sequence[Placement] | None = None,
    ) -> QualityScore:
        """Score a placement set.

        Args:
            elements: Elements in input order.
            placements: Placements to score; defaults to each element's own geometry.

        Returns:
            QualityScore with every metric on a 0-100 scale.
        """
        if not elements:
            return QualityScore()

        if placements is None:
            rects = [scaled_rect(e) for e in elements]
        else:
            by_id = {p.id: p for p in placements}
            rects = [scaled_rect(e, by_id.get(e.id)) for e in elements]

        canvas = self._canvas_rect(rects)
        importances = [e.importance for e in elements]

        balance = self._visual_balance(rects, importances, canvas)
        spacing = self._spacing_consistency(rects)
        hierarchy = self._hierarchy_preservation(rects, importances, canvas)
        collisions = self._collision_count(rects)
        collision = self._collision_avoidance(collisions, len(rects))
        alignment = self._alignment(rects)

        composite = (
            balance * BALANCE_WEIGHT
            + spacing * SPACING_WEIGHT
            + hierarchy * HIERARCHY_WEIGHT
            + collision * COLLISION_WEIGHT
        )

        metrics = {
            "visual_balance": balance,
            "spacing_consistency": spacing,
            "hierarchy_preservation": hierarchy,
            "collision_avoidance": collision,
            "alignment": alignment,
        }
        suggestions = [
            SUGGESTIONS[name] for name, value in metrics.items() if value < SUGGESTION_THRESHOLD
        ]

        logger.debug(f"Quality composite {composite:.1f} over {len(elements)} elements")

        return QualityScore(
            visual_balance=balance,
            spacing_consistency=spacing,
            hierarchy_preservation=hierarchy,
            collision_avoidance=collision,
            alignment=alignment,
            collision_count=collisions,
            composite=max(0.0, min(100.0, composite)),
            suggestions=suggestions,
        )

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def _canvas_rect(self, rects: list[Rect]) -> Rect:
        if self.canvas is not None:
            return Rect(self.canvas.left, self.canvas.top, self.canvas.width, self.canvas.height)
        return bounding_box(rects)

    @staticmethod
    def _visual_balance(rects: list[Rect], importances: list[float], canvas: Rect) -> float:
        """Evenness of visual weight over the four quadrants.

        Weight is scaled area times (0.5 + importance). The score falls
        linearly with the coefficient of variation, reaching 0 when all
        weight sits in one quadrant.
        """
        quadrants = [0.0, 0.0, 0.0, 0.0]
        for rect, importance in zip(rects, importances):
            index = (2 if rect.center_y >= canvas.center_y else 0) + (
                1 if rect.center_x >= canvas.center_x else 0
            )
            quadrants[index] += rect.area * (0.5 + importance)

        mean = sum(quadrants) / 4
        if mean <= 0:
            return 100.0
        variance = sum((q - mean) ** 2 for q in quadrants) / 4
        cv = math.sqrt(variance) / mean
        return max(0.0, 100.0 * (1 - cv / math.sqrt(3)))

    @staticmethod
    def _spacing_consistency(rects: list[Rect]) -> float:
        """Evenness of nearest-neighbour edge gaps."""
        if len(rects) < 2:
            return 100.0

        gaps = []
        for i, rect in enumerate(rects):
            gaps.append(min(edge_gap(rect, other) for j, other in enumerate(rects) if j != i))

        mean = sum(gaps) / len(gaps)
        if mean <= 0:
            return 100.0
        variance = sum((g - mean) ** 2 for g in gaps) / len(gaps)
        cv = math.sqrt(variance) / mean
        return max(0.0, 100.0 - 50.0 * cv)

    @staticmethod
    def _hierarchy_preservation(rects: list[Rect], importances: list[float], canvas: Rect) -> float:
        """Share of importance-ordered pairs whose prominence is ordered the same way."""
        max_area = max(r.area for r in rects)
        max_distance = math.hypot(canvas.width / 2, canvas.height / 2)

        prominence = []
        for rect in rects:
            relative_area = rect.area / max_area if max_area > 0 else 0.0
            if max_distance > 0:
                distance = math.hypot(rect.center_x - canvas.center_x, rect.center_y - canvas.center_y)
                centrality = max(0.0, 1 - distance / max_distance)
            else:
                centrality = 1.0
            prominence.append(0.7 * relative_area + 0.3 * centrality)

        pairs = 0
        concordant = 0
        for i, j in combinations(range(len(rects)), 2):
            if importances[i] == importances[j]:
                continue
            pairs += 1
            high, low = (i, j) if importances[i] > importances[j] else (j, i)
            if prominence[high] >= prominence[low]:
                concordant += 1

        if pairs == 0:
            return 100.0
        return 100.0 * concordant / pairs

    @staticmethod
    def _collision_count(rects: list[Rect]) -> int:
        return sum(1 for a, b in combinations(rects, 2) if rects_collide(a, b))

    @staticmethod
    def _collision_avoidance(collisions: int, count: int) -> float:
        max_pairs = count * (count - 1) / 2
        if max_pairs == 0:
            return 100.0
        return 100.0 * (1 - collisions / max_pairs)

    @staticmethod
    def _alignment(rects: list[Rect]) -> float:
        """Share of pairs sharing an edge or centre line within tolerance."""
        pairs = list(combinations(rects, 2))
        if not pairs:
            return 100.0

        aligned = 0
        for a, b in pairs:
            lines = (
                (a.left, b.left),
                (a.center_x, b.center_x),
                (a.right, b.right),
                (a.top, b.top),
                (a.center_y, b.center_y),
                (a.bottom, b.bottom),
            )
            if any(abs(p - q) <= ALIGNMENT_TOLERANCE for p, q in lines):
                aligned += 1
        return 100.0 * aligned / len(pairs)
