"""Pydantic v2 models for the resize engine's data model.

All coordinates are canvas units (pixels). ``left``/``top`` always name the
top-left corner of an element's scaled box; ``width``/``height`` are the
pre-scale size. Models are frozen: the engine returns corrected copies and
never mutates caller state.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


# ============================================================================
# Enums
# ============================================================================


class ContentCategory(str, Enum):
    """Content category of an element."""

    TEXT = "text"
    IMAGE = "image"
    SHAPE = "shape"
    DECORATION = "decoration"
    LOGO = "logo"
    UNKNOWN = "unknown"


class PositionStrictness(str, Enum):
    """How closely an element must keep its original position."""

    STRICT = "strict"
    RELATIVE = "relative"
    FLEXIBLE = "flexible"


class ImportanceTier(str, Enum):
    """Placement tier derived from the importance score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ImportanceLevel(str, Enum):
    """Four-level importance used by the boundary validator."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"
    DECORATIVE = "decorative"

    @property
    def rank(self) -> int:
        """Higher rank means more important."""
        return {
            ImportanceLevel.PRIMARY: 4,
            ImportanceLevel.SECONDARY: 3,
            ImportanceLevel.TERTIARY: 2,
            ImportanceLevel.DECORATIVE: 1,
        }[self]


class OverflowAxis(str, Enum):
    """Axis along which elements leave the safe area."""

    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"


class OverflowSeverity(str, Enum):
    """Severity of a placement set's boundary violations."""

    NONE = "none"
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def rank(self) -> int:
        """Ordinal for comparing severities."""
        return {
            OverflowSeverity.NONE: 0,
            OverflowSeverity.MINOR: 1,
            OverflowSeverity.MODERATE: 2,
            OverflowSeverity.SEVERE: 3,
        }[self]


class CorrectionAction(str, Enum):
    """Kinds of boundary correction."""

    REPOSITION = "reposition"
    SCALE = "scale"
    PRIORITY_SWAP = "priority-swap"
    LAYOUT_COMPRESS = "layout-compress"


def tier_for(importance: float, high: float = 0.7, medium: float = 0.4) -> ImportanceTier:
    """Map an importance score to its placement tier."""
    if importance > high:
        return ImportanceTier.HIGH
    if importance > medium:
        return ImportanceTier.MEDIUM
    return ImportanceTier.LOW


def level_for(importance: float) -> ImportanceLevel:
    """Map an importance score to its validator importance level."""
    if importance > 0.7:
        return ImportanceLevel.PRIMARY
    if importance > 0.4:
        return ImportanceLevel.SECONDARY
    if importance > 0.2:
        return ImportanceLevel.TERTIARY
    return ImportanceLevel.DECORATIVE


# ============================================================================
# Geometry Models
# ============================================================================


class Margins(BaseModel):
    """Safe-area margins on each canvas edge."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    top: float = Field(default=20.0, ge=0)
    right: float = Field(default=20.0, ge=0)
    bottom: float = Field(default=20.0, ge=0)
    left: float = Field(default=20.0, ge=0)

    @classmethod
    def uniform(cls, value: float) -> "Margins":
        """Same margin on all four edges."""
        return cls(top=value, right=value, bottom=value, left=value)


class SafeArea(BaseModel):
    """Canvas bounds shrunk by the margins."""

    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        """Usable width (may be negative for degenerate canvases)."""
        return self.right - self.left

    @property
    def height(self) -> float:
        """Usable height."""
        return self.bottom - self.top


class Bounds(BaseModel):
    """Axis-aligned rectangle describing a canvas."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    width: float = Field(description="Canvas width")
    height: float = Field(description="Canvas height")
    left: float = Field(default=0.0, description="Left edge")
    top: float = Field(default=0.0, description="Top edge")

    @property
    def right(self) -> float:
        """Right edge position."""
        return self.left + self.width

    @property
    def bottom(self) -> float:
        """Bottom edge position."""
        return self.top + self.height

    @property
    def center_x(self) -> float:
        """Horizontal center."""
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        """Vertical center."""
        return self.top + self.height / 2

    @property
    def area(self) -> float:
        """Canvas area."""
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width over height."""
        return self.width / self.height

    @property
    def is_landscape(self) -> bool:
        """True when wider than tall."""
        return self.width > self.height

    def safe_area(self, margins: Optional[Margins] = None) -> SafeArea:
        """Bounds shrunk by ``margins`` on all four edges."""
        margins = margins or Margins()
        return SafeArea(
            left=self.left + margins.left,
            top=self.top + margins.top,
            right=self.right - margins.right,
            bottom=self.bottom - margins.bottom,
        )


# ============================================================================
# Element Models
# ============================================================================


class LayoutConstraints(BaseModel):
    """Per-element layout constraints."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    min_scale: float = Field(default=0.3, gt=0)
    max_scale: float = Field(default=2.0, gt=0)
    aspect_ratio_locked: bool = True
    position_strictness: PositionStrictness = PositionStrictness.FLEXIBLE


class ElementSnapshot(BaseModel):
    """Read-only geometry snapshot of one object on the host canvas."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    kind: str = Field(default="unknown", description="Host object type (textbox, image, rect...)")
    left: float
    top: float
    width: float = Field(ge=0, description="Pre-scale width")
    height: float = Field(ge=0, description="Pre-scale height")
    scale_x: float = Field(default=1.0, gt=0)
    scale_y: float = Field(default=1.0, gt=0)
    fill: Optional[str] = Field(default=None, description="Fill colour, e.g. '#1A2B3C'")
    text: Optional[str] = None

    @property
    def scaled_width(self) -> float:
        return self.width * self.scale_x

    @property
    def scaled_height(self) -> float:
        return self.height * self.scale_y


class ElementBase(BaseModel):
    """Fields shared by every element category."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    left: float
    top: float
    width: float = Field(ge=0, description="Pre-scale width")
    height: float = Field(ge=0, description="Pre-scale height")
    scale_x: float = Field(default=1.0, gt=0)
    scale_y: float = Field(default=1.0, gt=0)
    importance: float = Field(default=0.5, ge=0.0, le=1.0)
    constraints: LayoutConstraints = Field(default_factory=LayoutConstraints)
    fill: Optional[str] = None

    @property
    def scaled_width(self) -> float:
        """Width after scaling."""
        return self.width * self.scale_x

    @property
    def scaled_height(self) -> float:
        """Height after scaling."""
        return self.height * self.scale_y

    @property
    def area(self) -> float:
        """Scaled area, the primary tie-break key."""
        return self.scaled_width * self.scaled_height

    @property
    def center_x(self) -> float:
        return self.left + self.scaled_width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.scaled_height / 2

    @property
    def tier(self) -> ImportanceTier:
        """Placement tier with the default thresholds."""
        return tier_for(self.importance)

    @property
    def level(self) -> ImportanceLevel:
        """Validator importance level."""
        return level_for(self.importance)

    def to_placement(self, confidence: float = 1.0, rationale: str = "") -> "Placement":
        """Current geometry as a placement."""
        return Placement(
            id=self.id,
            left=self.left,
            top=self.top,
            scale_x=self.scale_x,
            scale_y=self.scale_y,
            confidence=confidence,
            rationale=rationale,
        )

    def at(self, placement: "Placement") -> "ElementBase":
        """Copy of this element moved and scaled to ``placement``."""
        return self.model_copy(
            update={
                "left": placement.left,
                "top": placement.top,
                "scale_x": placement.scale_x,
                "scale_y": placement.scale_y,
            }
        )


class TextElement(ElementBase):
    """Text box."""

    category: Literal[ContentCategory.TEXT] = ContentCategory.TEXT
    text: Optional[str] = None


class ImageElement(ElementBase):
    """Raster image."""

    category: Literal[ContentCategory.IMAGE] = ContentCategory.IMAGE


class ShapeElement(ElementBase):
    """Geometric shape."""

    category: Literal[ContentCategory.SHAPE] = ContentCategory.SHAPE


class DecorationElement(ElementBase):
    """Line, flourish or other small ornament."""

    category: Literal[ContentCategory.DECORATION] = ContentCategory.DECORATION


class LogoElement(ElementBase):
    """Brand mark."""

    category: Literal[ContentCategory.LOGO] = ContentCategory.LOGO


class UnknownElement(ElementBase):
    """Anything the analyzer could not classify."""

    category: Literal[ContentCategory.UNKNOWN] = ContentCategory.UNKNOWN


Element = Annotated[
    Union[
        TextElement,
        ImageElement,
        ShapeElement,
        DecorationElement,
        LogoElement,
        UnknownElement,
    ],
    Field(discriminator="category"),
]

ELEMENT_CLASSES: dict[ContentCategory, type[ElementBase]] = {
    ContentCategory.TEXT: TextElement,
    ContentCategory.IMAGE: ImageElement,
    ContentCategory.SHAPE: ShapeElement,
    ContentCategory.DECORATION: DecorationElement,
    ContentCategory.LOGO: LogoElement,
    ContentCategory.UNKNOWN: UnknownElement,
}

_ELEMENT_ADAPTER = TypeAdapter(Element)


def parse_element(data: dict[str, Any]) -> ElementBase:
    """Build the right element class from a plain dict keyed by ``category``."""
    return _ELEMENT_ADAPTER.validate_python(data)


# ============================================================================
# Placement Models
# ============================================================================


class Placement(BaseModel):
    """Computed position and scale for one element."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    left: float
    top: float
    scale_x: float = Field(gt=0)
    scale_y: float = Field(gt=0)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    rationale: str = ""
    fallback: bool = Field(default=False, description="Placed by the exhausted-search fallback")


class SuggestedPlacement(BaseModel):
    """A placement proposed by an external suggestion source."""

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str
    left: float
    top: float
    scale_x: float = Field(default=1.0, gt=0)
    scale_y: float = Field(default=1.0, gt=0)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


# ============================================================================
# Validation Models
# ============================================================================


class OverflowReport(BaseModel):
    """Overflow analysis of a whole placement set."""

    model_config = ConfigDict(frozen=True)

    has_overflow: bool = False
    axis: OverflowAxis = OverflowAxis.NONE
    severity: OverflowSeverity = OverflowSeverity.NONE
    affected_elements: list[str] = Field(default_factory=list)
    recommended_actions: list[str] = Field(default_factory=list)
    overflow_ratio: float = 0.0
    area_ratio: float = 0.0
    max_distance: float = 0.0


class Correction(BaseModel):
    """One change the validator made to one element."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    action: CorrectionAction
    before: Placement
    after: Placement
    reasoning: str


class UnresolvedOverflow(BaseModel):
    """An element that cannot fit the safe area even at its minimum scale."""

    model_config = ConfigDict(frozen=True)

    element_id: str
    axis: OverflowAxis
    distance: float
    reason: str


class ValidationResult(BaseModel):
    """Outcome of validate-and-correct."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    overflow: OverflowReport = Field(description="Analysis before correction")
    residual_overflow: OverflowReport = Field(description="Analysis after correction")
    corrections: list[Correction] = Field(default_factory=list)
    placements: list[Placement] = Field(default_factory=list)
    quality_score: float = Field(default=100.0, ge=0.0, le=100.0)
    violations: list[UnresolvedOverflow] = Field(default_factory=list)


class QualityScore(BaseModel):
    """Aesthetic metrics of a placement set, each on a 0-100 scale."""

    model_config = ConfigDict(frozen=True)

    visual_balance: float = 100.0
    spacing_consistency: float = 100.0
    hierarchy_preservation: float = 100.0
    collision_avoidance: float = 100.0
    alignment: float = 100.0
    collision_count: int = 0
    composite: float = Field(default=100.0, ge=0.0, le=100.0)
    suggestions: list[str] = Field(default_factory=list)
