"""
analyzer.py — Element importance scoring and constraint derivation.

Turns read-only ElementSnapshots from the host canvas into typed Elements:
1. Infers a content category from the host object kind and its size
2. Scores importance from size, centrality, category and contrast
3. Derives per-category layout constraints

Also classifies a canvas resize (direction, aspect-ratio change) for
logging and for the orientation-aware strategy.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..config import EngineSettings, get_settings
from ..errors import InputError
from ..dsl.schema import (
    ELEMENT_CLASSES,
    Bounds,
    ContentCategory,
    ElementBase,
    ElementSnapshot,
    LayoutConstraints,
    PositionStrictness,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

CATEGORY_WEIGHTS = {
    ContentCategory.LOGO: 0.40,
    ContentCategory.TEXT: 0.35,
    ContentCategory.IMAGE: 0.30,
    ContentCategory.SHAPE: 0.20,
    ContentCategory.DECORATION: 0.10,
    ContentCategory.UNKNOWN: 0.15,
}

SIZE_WEIGHT = 0.30
CENTRALITY_WEIGHT = 0.25
CONTRAST_WEIGHT = 0.15

TEXT_KINDS = {"text", "textbox", "i-text"}
IMAGE_KINDS = {"image"}
SHAPE_KINDS = {"rect", "circle", "triangle", "polygon", "ellipse"}
LINE_KINDS = {"line"}
PATH_KINDS = {"path"}

LOGO_MAX_AREA = 10000
DECORATION_MAX_AREA = 5000
ICON_MAX_SIDE = 100

TRANSPARENT_CONTRAST = 0.3
UNPARSED_CONTRAST = 0.5


# =============================================================================
# CATEGORY & SCORING
# =============================================================================

def categorize(snapshot: ElementSnapshot) -> ContentCategory:
    """Infer the content category of a host object."""
    kind = (snapshot.kind or "").lower()
    area = snapshot.width * snapshot.height

    if kind in TEXT_KINDS:
        if snapshot.text and "logo" in snapshot.text.lower():
            return ContentCategory.LOGO
        return ContentCategory.TEXT

    if kind in IMAGE_KINDS:
        # Small images are most often brand marks
        if area < LOGO_MAX_AREA:
            return ContentCategory.LOGO
        return ContentCategory.IMAGE

    if kind in SHAPE_KINDS:
        return ContentCategory.SHAPE

    if kind in LINE_KINDS:
        return ContentCategory.DECORATION

    if kind in PATH_KINDS and snapshot.width < ICON_MAX_SIDE and snapshot.height < ICON_MAX_SIDE:
        return ContentCategory.DECORATION

    if area < DECORATION_MAX_AREA:
        return ContentCategory.DECORATION

    return ContentCategory.UNKNOWN


def luminance_contrast(fill: Optional[str]) -> float:
    """Distance of the fill's gray level from mid-gray, in [0, 1]."""
    if not fill or fill == "transparent":
        return TRANSPARENT_CONTRAST

    if fill.startswith("#") and len(fill) >= 7:
        try:
            r = int(fill[1:3], 16)
            g = int(fill[3:5], 16)
            b = int(fill[5:7], 16)
        except ValueError:
            return UNPARSED_CONTRAST
        grayscale = (r + g + b) / 3
        return abs(grayscale - 128) / 128

    return UNPARSED_CONTRAST


def score_importance(
    snapshot: ElementSnapshot,
    category: ContentCategory,
    canvas: Bounds,
) -> float:
    """
    Score how visually important an element is.

    Saturating sum capped at 1.0 (not renormalized) of:
    - size ratio of the scaled box to the canvas (max 0.30)
    - centrality, the inverse normalized distance from the canvas center (max 0.25)
    - a fixed per-category weight
    - luminance contrast against mid-gray (max 0.15)
    """
    importance = 0.0

    width = snapshot.scaled_width
    height = snapshot.scaled_height

    size_ratio = (width * height) / canvas.area
    importance += min(size_ratio * 2, SIZE_WEIGHT)

    center_x = snapshot.left + width / 2
    center_y = snapshot.top + height / 2
    distance = math.hypot(center_x - canvas.center_x, center_y - canvas.center_y)
    max_distance = math.hypot(canvas.width / 2, canvas.height / 2)
    centrality = max(0.0, 1 - distance / max_distance)
    importance += centrality * CENTRALITY_WEIGHT

    importance += CATEGORY_WEIGHTS[category]

    importance += luminance_contrast(snapshot.fill) * CONTRAST_WEIGHT

    return min(importance, 1.0)


def derive_constraints(category: ContentCategory, importance: float) -> LayoutConstraints:
    """Layout constraints for a category at a given importance."""
    if category == ContentCategory.LOGO:
        return LayoutConstraints(
            aspect_ratio_locked=True,
            min_scale=0.5,
            max_scale=1.5,
            position_strictness=(
                PositionStrictness.STRICT if importance > 0.7 else PositionStrictness.RELATIVE
            ),
        )

    if category == ContentCategory.TEXT:
        # Text boxes may stretch
        return LayoutConstraints(
            aspect_ratio_locked=False,
            min_scale=0.7,
            max_scale=1.5,
            position_strictness=(
                PositionStrictness.RELATIVE if importance > 0.6 else PositionStrictness.FLEXIBLE
            ),
        )

    if category == ContentCategory.IMAGE:
        return LayoutConstraints(
            aspect_ratio_locked=True,
            min_scale=0.4,
            max_scale=2.0,
            position_strictness=(
                PositionStrictness.STRICT if importance > 0.8 else PositionStrictness.FLEXIBLE
            ),
        )

    if category == ContentCategory.DECORATION:
        return LayoutConstraints(
            aspect_ratio_locked=False,
            min_scale=0.1,
            max_scale=3.0,
            position_strictness=PositionStrictness.FLEXIBLE,
        )

    return LayoutConstraints()


# =============================================================================
# RESIZE PROFILE
# =============================================================================

@dataclass(frozen=True)
class ResizeProfile:
    """Qualitative description of a canvas resize."""
    width_ratio: float
    height_ratio: float
    scale_direction: str
    aspect_ratio_change: str
    orientation_change: bool


def describe_resize(old_bounds: Bounds, new_bounds: Bounds) -> ResizeProfile:
    """Classify how the canvas changes between two bounds."""
    width_ratio = new_bounds.width / old_bounds.width
    height_ratio = new_bounds.height / old_bounds.height

    if width_ratio > 1.2 and height_ratio > 1.2:
        direction = "significant enlargement"
    elif width_ratio < 0.8 and height_ratio < 0.8:
        direction = "significant reduction"
    elif width_ratio > height_ratio + 0.3:
        direction = "width expansion"
    elif height_ratio > width_ratio + 0.3:
        direction = "height expansion"
    else:
        direction = "proportional adjustment"

    ratio_change = abs(new_bounds.aspect_ratio - old_bounds.aspect_ratio) / old_bounds.aspect_ratio
    if ratio_change > 0.5:
        aspect = "dramatic"
    elif ratio_change > 0.2:
        aspect = "moderate"
    elif ratio_change > 0.1:
        aspect = "slight"
    else:
        aspect = "preserved"

    return ResizeProfile(
        width_ratio=width_ratio,
        height_ratio=height_ratio,
        scale_direction=direction,
        aspect_ratio_change=aspect,
        orientation_change=old_bounds.is_landscape != new_bounds.is_landscape,
    )


# =============================================================================
# ANALYZER
# =============================================================================

class ElementAnalyzer:
    """
    Builds typed Elements from host snapshots.

    Stateless apart from its settings; safe to share between threads.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings()

    def analyze_one(self, snapshot: ElementSnapshot, canvas: Bounds) -> ElementBase:
        """Categorize, score and constrain a single snapshot."""
        category = categorize(snapshot)
        importance = score_importance(snapshot, category, canvas)
        constraints = derive_constraints(category, importance)

        element_class = ELEMENT_CLASSES[category]
        fields = dict(
            id=snapshot.id,
            left=snapshot.left,
            top=snapshot.top,
            width=snapshot.width,
            height=snapshot.height,
            scale_x=snapshot.scale_x,
            scale_y=snapshot.scale_y,
            importance=importance,
            constraints=constraints,
            fill=snapshot.fill,
        )
        if category == ContentCategory.TEXT:
            fields["text"] = snapshot.text

        logger.debug(f"Analyzed {snapshot.id}: {category.value}, importance {importance:.2f}")
        return element_class(**fields)

    def analyze(self, snapshots: Sequence[ElementSnapshot], canvas: Bounds) -> List[ElementBase]:
        """Analyze every snapshot against the current canvas bounds."""
        if canvas.width <= 0 or canvas.height <= 0:
            raise InputError(
                "Canvas bounds must be positive",
                context={"width": canvas.width, "height": canvas.height},
            )

        elements = [self.analyze_one(snapshot, canvas) for snapshot in snapshots]
        logger.info(f"Analyzed {len(elements)} elements")
        return elements
