"""
layout_strategies — Pluggable resize strategies.

Every strategy maps (elements, old bounds, new bounds) to one placement
per element and is deterministic:

- ProportionalStrategy: uniform rescale keeping relative offsets
- GridStrategy: rows/columns sized to the new aspect ratio
- ReflowStrategy: shelf packing, largest first
- CenterFocusStrategy: focal element centred, others on a circle
- TieredStrategy: importance-tiered placement, accepts suggestions
- OrientationStrategy: stacking or columns on an orientation flip

Strategies are looked up by name through get_strategy().
"""

from typing import Optional

from .base_strategy import BaseLayoutStrategy, StrategyResult, calculate_optimal_spacing
from .proportional_strategy import ProportionalStrategy
from .grid_strategy import GridStrategy
from .reflow_strategy import ReflowStrategy
from .center_focus_strategy import CenterFocusStrategy
from .tiered_strategy import TieredStrategy
from .orientation_strategy import OrientationStrategy
from ...config import EngineSettings
from ...errors import InputError

__all__ = [
    'BaseLayoutStrategy',
    'StrategyResult',
    'calculate_optimal_spacing',
    'ProportionalStrategy',
    'GridStrategy',
    'ReflowStrategy',
    'CenterFocusStrategy',
    'TieredStrategy',
    'OrientationStrategy',
    'get_strategy',
    'STRATEGIES',
]


# Strategy registry for lookup by name
STRATEGIES = {
    'proportional': ProportionalStrategy,
    'grid': GridStrategy,
    'reflow': ReflowStrategy,
    'center-focus': CenterFocusStrategy,
    'tiered': TieredStrategy,
    'orientation': OrientationStrategy,
}


def get_strategy(strategy_name: str, settings: Optional[EngineSettings] = None) -> BaseLayoutStrategy:
    """Get a strategy instance by name."""
    strategy_class = STRATEGIES.get(strategy_name.lower())
    if not strategy_class:
        raise InputError(
            f"Unknown strategy: {strategy_name}. Available: {list(STRATEGIES.keys())}",
            context={"strategy": strategy_name},
        )
    return strategy_class(settings)
