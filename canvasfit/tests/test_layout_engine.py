"""Tests for the resize orchestrator."""

from typing import Callable

import pytest

from canvasfit.config import EngineSettings
from canvasfit.dsl.schema import (
    Bounds,
    ContentCategory,
    ElementBase,
    LayoutConstraints,
    Margins,
    OverflowSeverity,
)
from canvasfit.engine.geometry import fits_within, scaled_rect
from canvasfit.engine.layout_engine import LayoutEngine, compute_layout, resize, score_layout, validate_and_correct
from canvasfit.engine.layout_strategies import STRATEGIES
from canvasfit.errors import InputError

PORTRAIT = Bounds(width=400, height=1200)


def assert_inside_safe_area(elements, placements, bounds: Bounds, margins: Margins | None = None) -> None:
    safe = bounds.safe_area(margins)
    by_id = {e.id: e for e in elements}
    for placement in placements:
        assert fits_within(scaled_rect(by_id[placement.id], placement), safe), placement.id


class TestResizeScenarios:
    """End-to-end resizes."""

    def test_logo_enlargement(
        self,
        engine: LayoutEngine,
        make_element: Callable[..., ElementBase],
        logo_constraints: LayoutConstraints,
        landscape: Bounds,
    ) -> None:
        """A logo keeps its relative position and grows by the smaller ratio."""
        logo = make_element("logo", 100, 100, 200, 150, 0.9, ContentCategory.LOGO, constraints=logo_constraints)
        new_bounds = Bounds(width=1200, height=800)
        result = engine.resize([logo], landscape, new_bounds)

        placement = result.get_placement("logo")
        assert placement.left == pytest.approx(150)
        assert placement.top == pytest.approx(133.333, abs=0.01)
        assert placement.scale_x == pytest.approx(4 / 3)
        assert result.is_valid
        assert result.validation.corrections == []
        assert result.strategy_used == "proportional"
        assert_inside_safe_area([logo], result.placements, new_bounds)

    def test_portrait_flip(self, engine: LayoutEngine, mixed_elements: list[ElementBase]) -> None:
        """Landscape content on a portrait canvas is corrected into a valid layout."""
        result = engine.validate_and_correct(mixed_elements, PORTRAIT)

        assert result.overflow.severity.rank >= OverflowSeverity.MODERATE.rank
        assert result.is_valid
        assert result.quality_score < 100

    def test_no_elements(self, engine: LayoutEngine, landscape: Bounds) -> None:
        """Zero elements is a valid, uncorrected layout."""
        assert engine.compute_layout([], landscape, PORTRAIT) == []

        validation = engine.validate_and_correct([], landscape)
        assert validation.is_valid
        assert validation.quality_score == 100.0
        assert validation.corrections == []

        result = engine.resize([], landscape, PORTRAIT)
        assert result.placements == []
        assert result.is_valid

    def test_unchanged_canvas(self, engine: LayoutEngine, twenty_elements: list[ElementBase], landscape: Bounds) -> None:
        """Resizing to the same bounds reproduces every element exactly."""
        result = engine.resize(twenty_elements, landscape, landscape, strategy="proportional")

        assert result.validation.corrections == []
        for element, placement in zip(twenty_elements, result.placements):
            assert placement.id == element.id
            assert (placement.left, placement.top) == (element.left, element.top)
            assert (placement.scale_x, placement.scale_y) == (1.0, 1.0)

    @pytest.mark.parametrize("strategy", sorted(STRATEGIES))
    def test_every_strategy_fits_portrait(
        self,
        strategy: str,
        engine: LayoutEngine,
        mixed_elements: list[ElementBase],
        landscape: Bounds,
    ) -> None:
        """Every strategy ends in one in-bounds placement per element."""
        result = engine.resize(mixed_elements, landscape, PORTRAIT, strategy=strategy)

        assert [p.id for p in result.placements] == [e.id for e in mixed_elements]
        assert result.is_valid
        assert_inside_safe_area(mixed_elements, result.placements, PORTRAIT)
        assert 0 <= result.quality.composite <= 100

    def test_custom_margins(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Placements respect the margins passed in."""
        margins = Margins.uniform(50)
        result = engine.resize(mixed_elements, landscape, Bounds(width=900, height=700), margins=margins)
        assert result.is_valid
        assert_inside_safe_area(mixed_elements, result.placements, Bounds(width=900, height=700), margins)

    def test_resize_does_not_mutate(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Input elements keep their geometry."""
        before = [e.model_dump() for e in mixed_elements]
        engine.resize(mixed_elements, landscape, PORTRAIT, strategy="grid")
        assert [e.model_dump() for e in mixed_elements] == before

    def test_profile_attached(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Each result describes the resize it came from."""
        result = engine.resize(mixed_elements, landscape, PORTRAIT)
        assert result.profile.orientation_change
        assert result.profile.aspect_ratio_change == "dramatic"

    def test_deterministic(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Repeated resizes give identical placements."""
        first = engine.resize(mixed_elements, landscape, PORTRAIT, strategy="tiered")
        second = engine.resize(mixed_elements, landscape, PORTRAIT, strategy="tiered")
        assert first.placements == second.placements

    def test_overlapping_high_tier_reported(
        self,
        engine: LayoutEngine,
        make_element: Callable[..., ElementBase],
        landscape: Bounds,
    ) -> None:
        """Overlaps the tiered strategy keeps are named in the result."""
        elements = [
            make_element("a", 100, 100, 100, 100, 0.9),
            make_element("b", 150, 150, 100, 100, 0.8),
        ]
        result = engine.resize(elements, landscape, landscape, strategy="tiered")

        assert result.collision_ids == ["b"]
        assert any("Overlapping high-tier positions kept for: b" in w for w in result.warnings)


class TestInputErrors:
    """Tests for rejected inputs."""

    def test_unknown_strategy(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Unknown strategy names fail before any work is done."""
        with pytest.raises(InputError, match="Unknown strategy"):
            engine.resize(mixed_elements, landscape, PORTRAIT, strategy="spiral")

    def test_duplicate_ids(self, engine: LayoutEngine, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """Element ids must be unique."""
        elements = [make_element("a", 0, 0, 10, 10), make_element("a", 50, 50, 10, 10)]
        with pytest.raises(InputError, match="Duplicate"):
            engine.compute_layout(elements, landscape, PORTRAIT)

    def test_zero_size_element(self, engine: LayoutEngine, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """Elements need a positive size."""
        with pytest.raises(InputError, match="size"):
            engine.resize([make_element("flat", 0, 0, 100, 0)], landscape, PORTRAIT)

    @pytest.mark.parametrize("bounds", [Bounds(width=0, height=600), Bounds(width=800, height=-1)])
    def test_non_positive_bounds(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds, bounds: Bounds) -> None:
        """Both canvases need a positive size."""
        with pytest.raises(InputError):
            engine.resize(mixed_elements, bounds, landscape)
        with pytest.raises(InputError):
            engine.resize(mixed_elements, landscape, bounds)

    def test_input_error_is_value_error(self, engine: LayoutEngine, landscape: Bounds) -> None:
        """Callers may catch input problems as ValueError."""
        with pytest.raises(ValueError):
            engine.validate_and_correct([], Bounds(width=0, height=0))


class TestStrategyComparison:
    """Tests for compare_strategies and optimize."""

    def test_ranked_by_composite(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Every strategy runs once and results are best first."""
        ranked = engine.compare_strategies(mixed_elements, landscape, PORTRAIT)

        assert sorted(r.strategy_used for r in ranked) == sorted(STRATEGIES)
        composites = [r.quality.composite for r in ranked]
        assert composites == sorted(composites, reverse=True)

    def test_subset(self, engine: LayoutEngine, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Only the named strategies run."""
        ranked = engine.compare_strategies(mixed_elements, landscape, PORTRAIT, strategies=["grid", "reflow"])
        assert {r.strategy_used for r in ranked} == {"grid", "reflow"}

    def test_optimize_picks_best(self, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """With an unreachable threshold the best-scoring strategy wins."""
        engine = LayoutEngine(EngineSettings(quality_threshold=100.1))
        result = engine.resize(mixed_elements, landscape, PORTRAIT, optimize=True)
        best = engine.compare_strategies(mixed_elements, landscape, PORTRAIT)[0]

        assert result.quality.composite == pytest.approx(best.quality.composite)
        assert result.is_valid

    def test_optimize_skipped_above_threshold(self, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Results above the threshold are kept as they are."""
        engine = LayoutEngine(EngineSettings(quality_threshold=0))
        result = engine.resize(mixed_elements, landscape, PORTRAIT, strategy="grid", optimize=True)
        assert result.strategy_used == "grid"


class TestHelpers:
    """Tests for the smaller entry points."""

    def test_layout_info(self, engine: LayoutEngine, twenty_elements: list[ElementBase], landscape: Bounds) -> None:
        """Summary figures for a layout."""
        info = engine.layout_info(twenty_elements, landscape)
        assert info["element_count"] == 20
        assert info["total_area"] == pytest.approx(160000)
        assert info["average_area"] == pytest.approx(8000)
        assert info["canvas_area"] == 480000
        assert info["coverage"] == pytest.approx(1 / 3)

    def test_layout_info_empty(self, engine: LayoutEngine, landscape: Bounds) -> None:
        """An empty layout has zero coverage."""
        info = engine.layout_info([], landscape)
        assert info["element_count"] == 0
        assert info["average_area"] == 0.0

    def test_score_layout(self, engine: LayoutEngine, twenty_elements: list[ElementBase], landscape: Bounds) -> None:
        """Scoring delegates to the quality scorer."""
        score = engine.score_layout(twenty_elements, canvas=landscape)
        assert score.collision_count == 0

    def test_module_functions(self, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Module-level shortcuts run with the cached settings."""
        placements = compute_layout(mixed_elements, landscape, PORTRAIT, strategy="grid")
        assert len(placements) == len(mixed_elements)

        validation = validate_and_correct(mixed_elements, PORTRAIT, placements=placements)
        assert validation.is_valid

        assert score_layout(mixed_elements, validation.placements, PORTRAIT).composite <= 100

        result = resize(mixed_elements, landscape, PORTRAIT, "reflow", margins=Margins.uniform(10))
        assert result.strategy_used == "reflow"
