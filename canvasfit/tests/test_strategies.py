"""Tests for the layout strategy library."""

import math
from itertools import combinations
from typing import Callable

import pytest

from canvasfit.config import EngineSettings
from canvasfit.dsl.schema import Bounds, ContentCategory, ElementBase, LayoutConstraints
from canvasfit.engine.geometry import rects_collide, scaled_rect
from canvasfit.engine.layout_strategies import (
    STRATEGIES,
    CenterFocusStrategy,
    GridStrategy,
    OrientationStrategy,
    ProportionalStrategy,
    ReflowStrategy,
    TieredStrategy,
    calculate_optimal_spacing,
    get_strategy,
)
from canvasfit.errors import InputError


class TestRegistry:
    """Tests for strategy lookup."""

    def test_registered_names(self) -> None:
        """Every strategy is registered under its name."""
        assert set(STRATEGIES) == {"proportional", "grid", "reflow", "center-focus", "tiered", "orientation"}
        for name, strategy_class in STRATEGIES.items():
            assert strategy_class.name == name

    def test_lookup_is_case_insensitive(self, settings: EngineSettings) -> None:
        """Names are matched case-insensitively."""
        assert isinstance(get_strategy("GRID", settings), GridStrategy)

    def test_unknown_strategy(self) -> None:
        """Unknown names fail fast."""
        with pytest.raises(InputError, match="Unknown strategy"):
            get_strategy("spiral")


class TestOptimalSpacing:
    """Tests for calculate_optimal_spacing."""

    def test_single_element(self) -> None:
        """Two percent of the geometric mean side for one element."""
        assert calculate_optimal_spacing(800, 600, 1) == pytest.approx(math.sqrt(480000) * 0.02)

    def test_minimum(self) -> None:
        """Never below 10 units."""
        assert calculate_optimal_spacing(800, 600, 10) == 10
        assert calculate_optimal_spacing(100, 100, 1) == 10


class TestProportionalStrategy:
    """Tests for the proportional strategy."""

    def test_scales_by_smaller_ratio(
        self,
        settings: EngineSettings,
        make_element: Callable[..., ElementBase],
        logo_constraints: LayoutConstraints,
    ) -> None:
        """Offsets map per axis; scale follows the smaller ratio."""
        logo = make_element("logo", 100, 100, 200, 150, 0.9, ContentCategory.LOGO, constraints=logo_constraints)
        result = ProportionalStrategy(settings).compute(
            [logo], Bounds(width=800, height=600), Bounds(width=1200, height=800)
        )
        placement = result.placements[0]
        assert placement.left == pytest.approx(150)
        assert placement.top == pytest.approx(133.333, abs=0.01)
        assert placement.scale_x == pytest.approx(4 / 3)
        assert placement.scale_y == pytest.approx(4 / 3)

    def test_identity(self, settings: EngineSettings, twenty_elements: list[ElementBase], landscape: Bounds) -> None:
        """An unchanged canvas reproduces the input exactly."""
        result = ProportionalStrategy(settings).compute(twenty_elements, landscape, landscape)
        for element, placement in zip(twenty_elements, result.placements):
            assert (placement.left, placement.top) == (element.left, element.top)
            assert (placement.scale_x, placement.scale_y) == (1.0, 1.0)

    def test_scale_clamped_to_element_range(
        self,
        settings: EngineSettings,
        make_element: Callable[..., ElementBase],
        logo_constraints: LayoutConstraints,
    ) -> None:
        """A large enlargement stops at the element's maximum scale."""
        logo = make_element("logo", 100, 100, 50, 50, 0.9, ContentCategory.LOGO, constraints=logo_constraints)
        result = ProportionalStrategy(settings).compute(
            [logo], Bounds(width=100, height=100), Bounds(width=1000, height=1000)
        )
        assert result.placements[0].scale_x == 1.5


class TestGridStrategy:
    """Tests for the grid strategy."""

    def test_four_elements(self, settings: EngineSettings, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """Four squares on 800x600 use three columns and 70% cell fill."""
        elements = [make_element(f"e{i}", 0, 0, 100, 100) for i in range(4)]
        result = GridStrategy(settings).compute(elements, landscape, landscape)

        assert len(result.placements) == 4
        assert all(p.scale_x == pytest.approx(0.7) for p in result.placements)

        # First cell spans x 20..260 and y 20..290; the box is centred in it
        first = result.placements[0]
        assert first.left == pytest.approx(105)
        assert first.top == pytest.approx(120)

    def test_no_overlaps(self, settings: EngineSettings, twenty_elements: list[ElementBase], landscape: Bounds) -> None:
        """Cells never overlap, so neither do their contents."""
        result = GridStrategy(settings).compute(twenty_elements, landscape, landscape)
        by_id = {e.id: e for e in twenty_elements}
        rects = [scaled_rect(by_id[p.id], p) for p in result.placements]
        assert not any(rects_collide(a, b) for a, b in combinations(rects, 2))

    def test_largest_first(self, settings: EngineSettings, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """The largest element takes the first cell."""
        elements = [make_element("small", 0, 0, 50, 50), make_element("big", 0, 0, 200, 200)]
        result = GridStrategy(settings).compute(elements, landscape, landscape)
        assert result.placements[0].id == "big"


class TestReflowStrategy:
    """Tests for the reflow strategy."""

    def test_wraps_onto_new_shelf(self, settings: EngineSettings, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """Wide elements are capped at 40% of the width and wrap."""
        elements = [make_element(f"bar{i}", 0, 0, 500, 100) for i in range(3)]
        result = ReflowStrategy(settings).compute(elements, landscape, landscape)

        first, second, third = result.placements
        assert first.scale_x == pytest.approx(0.64)
        assert second.top == first.top
        assert second.left > first.left
        assert third.left == first.left
        # Next shelf starts below the 64-unit tall first shelf
        assert third.top > first.top + 64

    def test_elements_capped(self, settings: EngineSettings, twenty_elements: list[ElementBase]) -> None:
        """No element exceeds 40% of either canvas dimension."""
        bounds = Bounds(width=300, height=300)
        result = ReflowStrategy(settings).compute(twenty_elements, Bounds(width=800, height=600), bounds)
        by_id = {e.id: e for e in twenty_elements}
        for placement in result.placements:
            rect = scaled_rect(by_id[placement.id], placement)
            assert rect.width <= 120 + 1e-9
            assert rect.height <= 120 + 1e-9


class TestCenterFocusStrategy:
    """Tests for the centre-focus strategy."""

    def test_anchor_and_satellites(self, settings: EngineSettings, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """The central element is centred at full scale; others orbit it."""
        elements = [
            make_element("left", 50, 250, 100, 100),
            make_element("middle", 350, 250, 100, 100),
            make_element("right", 650, 250, 100, 100),
        ]
        new_bounds = Bounds(width=1000, height=1000)
        result = CenterFocusStrategy(settings).compute(elements, landscape, new_bounds)

        anchor = result.get_placement("middle")
        assert anchor.scale_x == 1.0
        assert anchor.left == pytest.approx(450)
        assert anchor.top == pytest.approx(450)

        for element_id in ("left", "right"):
            satellite = result.get_placement(element_id)
            assert satellite.scale_x == pytest.approx(0.8)
            center_x = satellite.left + 100 * 0.8 / 2
            center_y = satellite.top + 100 * 0.8 / 2
            assert math.hypot(center_x - 500, center_y - 500) == pytest.approx(300)


class TestOrientationStrategy:
    """Tests for the orientation-aware strategy."""

    def test_portrait_stacks_text_first(
        self,
        settings: EngineSettings,
        make_element: Callable[..., ElementBase],
        text_constraints: LayoutConstraints,
        landscape: Bounds,
    ) -> None:
        """Landscape to portrait stacks text above images, keeping text readable."""
        elements = [
            make_element("photo", 400, 100, 300, 200, 0.6, ContentCategory.IMAGE),
            make_element("title", 50, 400, 300, 60, 0.8, ContentCategory.TEXT, constraints=text_constraints),
        ]
        result = OrientationStrategy(settings).compute(elements, landscape, Bounds(width=400, height=1200))

        title = result.get_placement("title")
        photo = result.get_placement("photo")
        assert title.top < photo.top
        assert title.scale_x == pytest.approx(0.8)
        # min(0.5, 2) * 0.7
        assert photo.scale_x == pytest.approx(0.35)
        # Centred horizontally within the 30-unit margins
        assert photo.left == pytest.approx(30 + (340 - 300 * 0.35) / 2)

    def test_landscape_uses_columns(self, settings: EngineSettings, make_element: Callable[..., ElementBase]) -> None:
        """Portrait to landscape lays out at most three columns."""
        elements = [make_element(f"e{i}", 20, 20 + i * 100, 100, 80) for i in range(9)]
        result = OrientationStrategy(settings).compute(
            elements, Bounds(width=400, height=1200), Bounds(width=1200, height=400)
        )
        lefts = sorted({round(p.left, 6) for p in result.placements})
        assert len(lefts) == 3

    def test_same_orientation(self, settings: EngineSettings, make_element: Callable[..., ElementBase], landscape: Bounds) -> None:
        """Without a flip the layout is rescaled conservatively."""
        element = make_element("e", 100, 100, 100, 100)
        result = OrientationStrategy(settings).compute([element], landscape, Bounds(width=1600, height=1200))
        placement = result.placements[0]
        assert placement.scale_x == pytest.approx(1.6)
        assert placement.left == pytest.approx(200)


class TestStrategyContract:
    """Properties every strategy shares."""

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_one_placement_per_element(self, name: str, settings: EngineSettings, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Placement ids are exactly the element ids."""
        result = get_strategy(name, settings).compute(mixed_elements, landscape, Bounds(width=400, height=1200))
        assert sorted(p.id for p in result.placements) == sorted(e.id for e in mixed_elements)

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_deterministic(self, name: str, settings: EngineSettings, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """The same input always yields the same placements."""
        strategy = get_strategy(name, settings)
        first = strategy.compute(mixed_elements, landscape, Bounds(width=1000, height=500))
        second = strategy.compute(mixed_elements, landscape, Bounds(width=1000, height=500))
        assert first.placements == second.placements

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_scales_within_ranges(self, name: str, settings: EngineSettings, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """Every scale lies in both the global and the element range."""
        result = get_strategy(name, settings).compute(mixed_elements, landscape, Bounds(width=300, height=900))
        by_id = {e.id: e for e in mixed_elements}
        for placement in result.placements:
            constraints = by_id[placement.id].constraints
            for scale in (placement.scale_x, placement.scale_y):
                assert max(settings.min_scale, constraints.min_scale) - 1e-9 <= scale
                assert scale <= min(settings.max_scale, constraints.max_scale) + 1e-9

    @pytest.mark.parametrize("name", sorted(STRATEGIES))
    def test_empty_input(self, name: str, settings: EngineSettings, landscape: Bounds) -> None:
        """No elements, no placements."""
        assert get_strategy(name, settings).compute([], landscape, landscape).placements == []

    def test_tiered_adapter(self, settings: EngineSettings, mixed_elements: list[ElementBase], landscape: Bounds) -> None:
        """The tiered strategy exposes the engine's fallback ids."""
        result = TieredStrategy(settings).compute(mixed_elements, landscape, Bounds(width=1200, height=900))
        assert result.fallback_ids == []
        assert len(result.placements) == len(mixed_elements)
