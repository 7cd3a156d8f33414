"""
geometry.py — Rectangle arithmetic shared by strategies and validators.

Everything here works on scaled boxes: an element's pre-scale size times
the scale of the placement being evaluated.
"""

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config import EngineSettings
from ..dsl.schema import ElementBase, Placement, SafeArea


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in canvas units."""
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2

    @property
    def area(self) -> float:
        return self.width * self.height


def scaled_rect(element: ElementBase, placement: Optional[Placement] = None) -> Rect:
    """Scaled box of ``element`` at ``placement`` (or at its own geometry)."""
    if placement is None:
        return Rect(element.left, element.top, element.scaled_width, element.scaled_height)
    return Rect(
        placement.left,
        placement.top,
        element.width * placement.scale_x,
        element.height * placement.scale_y,
    )


def rects_collide(r1: Rect, r2: Rect, buffer: float = 0.0) -> bool:
    """True when the boxes, kept ``buffer`` apart, intersect on both axes."""
    return not (
        r1.right + buffer <= r2.left or
        r2.right + buffer <= r1.left or
        r1.bottom + buffer <= r2.top or
        r2.bottom + buffer <= r1.top
    )


def overlap_area(r1: Rect, r2: Rect) -> float:
    """Area of the intersection of two boxes (0 when disjoint)."""
    dx = min(r1.right, r2.right) - max(r1.left, r2.left)
    dy = min(r1.bottom, r2.bottom) - max(r1.top, r2.top)
    if dx <= 0 or dy <= 0:
        return 0.0
    return dx * dy


def edge_gap(r1: Rect, r2: Rect) -> float:
    """Shortest distance between two box edges (0 when touching or overlapping)."""
    dx = max(0.0, max(r1.left, r2.left) - min(r1.right, r2.right))
    dy = max(0.0, max(r1.top, r2.top) - min(r1.bottom, r2.bottom))
    return math.hypot(dx, dy)


def axis_overflow(rect: Rect, safe: SafeArea) -> Tuple[float, float]:
    """Horizontal and vertical distance by which ``rect`` leaves ``safe``."""
    horizontal = max(0.0, rect.right - safe.right) + max(0.0, safe.left - rect.left)
    vertical = max(0.0, rect.bottom - safe.bottom) + max(0.0, safe.top - rect.top)
    return horizontal, vertical


def fits_within(rect: Rect, safe: SafeArea, tolerance: float = 1e-6) -> bool:
    """True when ``rect`` lies entirely inside ``safe``."""
    return (
        rect.left >= safe.left - tolerance and
        rect.top >= safe.top - tolerance and
        rect.right <= safe.right + tolerance and
        rect.bottom <= safe.bottom + tolerance
    )


def clamp_position(rect: Rect, safe: SafeArea) -> Tuple[float, float]:
    """Top-left corner that pulls ``rect`` inside ``safe``.

    A box larger than the safe area is pinned to the safe area's
    top/left edge.
    """
    left = min(rect.left, safe.right - rect.width)
    top = min(rect.top, safe.bottom - rect.height)
    return max(left, safe.left), max(top, safe.top)


def scale_range(element: ElementBase, settings: EngineSettings) -> Tuple[float, float]:
    """Intersection of the global scale range and the element's own range."""
    low = max(settings.min_scale, element.constraints.min_scale)
    high = min(settings.max_scale, element.constraints.max_scale)
    if low > high:
        # Disjoint ranges: the element's own range wins
        return element.constraints.min_scale, element.constraints.max_scale
    return low, high


def clamp_scale(value: float, element: ElementBase, settings: EngineSettings) -> float:
    """Clamp ``value`` into the element's effective scale range."""
    low, high = scale_range(element, settings)
    return max(low, min(high, value))


def layout_order(elements: Sequence[ElementBase]) -> List[int]:
    """Indices ordered by descending scaled area, then input order."""
    return sorted(range(len(elements)), key=lambda i: (-elements[i].area, i))


def bounding_box(rects: Iterable[Rect]) -> Optional[Rect]:
    """Smallest box containing every rect, or None for no rects."""
    rects = list(rects)
    if not rects:
        return None
    left = min(r.left for r in rects)
    top = min(r.top for r in rects)
    right = max(r.right for r in rects)
    bottom = max(r.bottom for r in rects)
    return Rect(left, top, right - left, bottom - top)
