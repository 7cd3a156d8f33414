"""Engine configuration and tuning constants.

Values load from environment variables prefixed with ``CANVASFIT_``;
nested groups use ``__`` (e.g. ``CANVASFIT_SEVERITY__SEVERE_DISTANCE=250``).
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SeverityThresholds(BaseModel):
    """Cut-offs for classifying overflow severity."""

    # Share of elements overflowing
    severe_ratio: float = 0.7
    moderate_ratio: float = 0.4

    # Aggregate overflow area / canvas area
    severe_area_ratio: float = 0.3
    moderate_area_ratio: float = 0.15

    # Largest single overflow distance in canvas units
    severe_distance: float = 200.0
    moderate_distance: float = 100.0


class CorrectionPenalties(BaseModel):
    """Quality-score deductions applied per boundary correction."""

    reposition: float = 5.0
    scale_factor: float = 20.0  # multiplied by |delta scale|
    priority_swap: float = 15.0
    layout_compress: float = 25.0
    untouched_primary_bonus: float = 10.0


class TierPolicy(BaseModel):
    """Parameters of the tiered placement engine."""

    high_threshold: float = 0.7
    medium_threshold: float = 0.4

    padding: float = 20.0
    shrink_scale_cap: float = 0.8
    collision_buffer: float = 20.0

    search_step: float = 30.0
    search_inset: float = 15.0
    search_tail: float = 50.0
    search_buffer: float = 10.0
    search_scale_reference: float = 400.0
    search_min_scale: float = 0.3
    search_max_scale: float = 0.7
    fallback_min_scale: float = 0.2
    fallback_offset: float = 20.0
    low_tier_scale_cap: float = 0.6

    suggestion_confidence: float = 0.8


class StrategyParams(BaseModel):
    """Parameters shared by the layout strategy library."""

    min_grid_spacing: float = 20.0
    grid_fill_ratio: float = 0.7
    reflow_max_ratio: float = 0.4
    center_radius_ratio: float = 0.3
    satellite_scale: float = 0.8
    orientation_base_factor: float = 0.7
    orientation_margin: float = 30.0
    orientation_text_min_scale: float = 0.8
    orientation_max_columns: int = 3
    orientation_cell_fill: float = 0.8
    same_orientation_factor: float = 0.8


class EngineSettings(BaseSettings):
    """Top-level settings for the resize engine."""

    model_config = SettingsConfigDict(
        env_prefix="CANVASFIT_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Safe-area margin applied on every edge when none is given
    margin: float = 20.0

    # Global scale range every placement is clamped into
    min_scale: float = Field(default=0.05, gt=0)
    max_scale: float = Field(default=5.0, gt=0)

    tiers: TierPolicy = Field(default_factory=TierPolicy)
    strategies: StrategyParams = Field(default_factory=StrategyParams)
    severity: SeverityThresholds = Field(default_factory=SeverityThresholds)
    penalties: CorrectionPenalties = Field(default_factory=CorrectionPenalties)

    # Severe-path correction
    severe_scale_factor: float = 0.6
    compact_cell_fill: float = 0.8

    # Composite quality below which resize(optimize=True) compares strategies
    quality_threshold: float = 60.0

    # External suggestion source
    suggestion_timeout_seconds: float = 2.0
    suggestion_fallback_strategy: str = "tiered"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


@lru_cache()
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()


def configure_logging(level: str | None = None) -> logging.Logger:
    """Apply the configured level to the package logger.

    Handlers are left to the hosting application.

    Args:
        level: Explicit level name; defaults to ``settings.log_level``.

    Returns:
        The ``canvasfit`` logger.
    """
    logger = logging.getLogger("canvasfit")
    logger.setLevel(level or get_settings().log_level)
    return logger
