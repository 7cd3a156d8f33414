"""canvasfit: adaptive layout resize engine.

Recomputes position and scale for the elements of a visual design when
the canvas changes size, keeping important content prominent, avoiding
overlaps and keeping everything inside the canvas margins.
"""

from canvasfit.config import EngineSettings, configure_logging, get_settings
from canvasfit.errors import (
    CanvasFitError,
    ExternalSuggestionFailure,
    InputError,
    SuggestionTimeout,
)
from canvasfit.dsl.schema import (
    Bounds,
    ContentCategory,
    Correction,
    CorrectionAction,
    Element,
    ElementSnapshot,
    ImportanceLevel,
    ImportanceTier,
    LayoutConstraints,
    Margins,
    OverflowAxis,
    OverflowReport,
    OverflowSeverity,
    Placement,
    PositionStrictness,
    QualityScore,
    SuggestedPlacement,
    UnresolvedOverflow,
    ValidationResult,
    parse_element,
)
from canvasfit.engine.analyzer import ElementAnalyzer, ResizeProfile, describe_resize
from canvasfit.engine.layout_strategies import STRATEGIES, get_strategy
from canvasfit.engine.tiered_placement import TieredPlacementEngine, TieredPlacementResult
from canvasfit.constraints import BoundaryValidator, LayoutQualityScorer
from canvasfit.engine.suggestions import SuggestionRequest, fetch_suggestions
from canvasfit.engine.layout_engine import (
    LayoutEngine,
    LayoutResult,
    compute_layout,
    resize,
    score_layout,
    validate_and_correct,
)

__version__ = "0.1.0"

__all__ = [
    # Config
    "EngineSettings",
    "configure_logging",
    "get_settings",
    # Errors
    "CanvasFitError",
    "ExternalSuggestionFailure",
    "InputError",
    "SuggestionTimeout",
    # Data model
    "Bounds",
    "ContentCategory",
    "Correction",
    "CorrectionAction",
    "Element",
    "ElementSnapshot",
    "ImportanceLevel",
    "ImportanceTier",
    "LayoutConstraints",
    "Margins",
    "OverflowAxis",
    "OverflowReport",
    "OverflowSeverity",
    "Placement",
    "PositionStrictness",
    "QualityScore",
    "SuggestedPlacement",
    "UnresolvedOverflow",
    "ValidationResult",
    "parse_element",
    # Components
    "BoundaryValidator",
    "ElementAnalyzer",
    "LayoutQualityScorer",
    "ResizeProfile",
    "STRATEGIES",
    "SuggestionRequest",
    "TieredPlacementEngine",
    "TieredPlacementResult",
    "describe_resize",
    "fetch_suggestions",
    "get_strategy",
    # Orchestration
    "LayoutEngine",
    "LayoutResult",
    "compute_layout",
    "resize",
    "score_layout",
    "validate_and_correct",
]
