"""Pytest configuration and fixtures."""

from typing import Callable

import pytest

from canvasfit.config import EngineSettings
from canvasfit.dsl.schema import (
    ELEMENT_CLASSES,
    Bounds,
    ContentCategory,
    ElementBase,
    LayoutConstraints,
    PositionStrictness,
)
from canvasfit.engine.layout_engine import LayoutEngine


@pytest.fixture
def settings() -> EngineSettings:
    """Default settings, independent of the cached instance."""
    return EngineSettings()


@pytest.fixture
def engine(settings: EngineSettings) -> LayoutEngine:
    """Layout engine with default settings."""
    return LayoutEngine(settings)


@pytest.fixture
def landscape() -> Bounds:
    """800x600 canvas."""
    return Bounds(width=800, height=600)


@pytest.fixture
def make_element() -> Callable[..., ElementBase]:
    """Factory building an element of any category."""

    def _make(
        element_id: str,
        left: float,
        top: float,
        width: float,
        height: float,
        importance: float = 0.5,
        category: ContentCategory = ContentCategory.SHAPE,
        scale: float = 1.0,
        constraints: LayoutConstraints | None = None,
    ) -> ElementBase:
        return ELEMENT_CLASSES[category](
            id=element_id,
            left=left,
            top=top,
            width=width,
            height=height,
            scale_x=scale,
            scale_y=scale,
            importance=importance,
            constraints=constraints or LayoutConstraints(),
        )

    return _make


@pytest.fixture
def logo_constraints() -> LayoutConstraints:
    """Constraints the analyzer derives for an important logo."""
    return LayoutConstraints(
        min_scale=0.5,
        max_scale=1.5,
        aspect_ratio_locked=True,
        position_strictness=PositionStrictness.STRICT,
    )


@pytest.fixture
def text_constraints() -> LayoutConstraints:
    """Constraints the analyzer derives for body text."""
    return LayoutConstraints(min_scale=0.7, max_scale=1.5, aspect_ratio_locked=False)


@pytest.fixture
def twenty_elements(make_element: Callable[..., ElementBase]) -> list[ElementBase]:
    """Twenty 100x80 elements on a 5x4 grid, all inside the 800x600 safe area."""
    elements = []
    for i in range(20):
        col = i % 5
        row = i // 5
        elements.append(make_element(
            f"el-{i}",
            40 + col * 150,
            40 + row * 140,
            100,
            80,
            importance=0.1 + 0.04 * i,
        ))
    return elements


@pytest.fixture
def mixed_elements(
    make_element: Callable[..., ElementBase],
    logo_constraints: LayoutConstraints,
    text_constraints: LayoutConstraints,
) -> list[ElementBase]:
    """Six elements of mixed categories laid out on an 800x600 canvas."""
    return [
        make_element("logo", 40, 40, 120, 80, 0.9, ContentCategory.LOGO, constraints=logo_constraints),
        make_element("headline", 200, 40, 500, 80, 0.8, ContentCategory.TEXT, constraints=text_constraints),
        make_element(
            "photo", 60, 160, 300, 250, 0.6, ContentCategory.IMAGE,
            constraints=LayoutConstraints(min_scale=0.4, max_scale=2.0),
        ),
        make_element("panel", 420, 160, 320, 250, 0.5, ContentCategory.SHAPE),
        make_element("body", 60, 450, 480, 60, 0.5, ContentCategory.TEXT, constraints=text_constraints),
        make_element(
            "divider", 600, 520, 150, 40, 0.1, ContentCategory.DECORATION,
            constraints=LayoutConstraints(min_scale=0.1, max_scale=3.0, aspect_ratio_locked=False),
        ),
    ]
