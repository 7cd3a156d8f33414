"""
suggestions.py — Time-bounded adapter for external placement suggestions.

A suggestion provider is any callable taking a SuggestionRequest and
returning SuggestedPlacements (or plain dicts with the same fields).
Providers are treated as unreliable: they run on a worker thread with a
timeout, and any failure is logged and turned into ``None`` so the caller
can fall back to a deterministic strategy.
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from pydantic import ValidationError

from ..dsl.schema import Bounds, ElementBase, SuggestedPlacement
from ..errors import ExternalSuggestionFailure, SuggestionTimeout

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SuggestionRequest:
    """Everything a provider needs to propose placements."""
    elements: Sequence[ElementBase]
    old_bounds: Bounds
    new_bounds: Bounds


SuggestionProvider = Callable[[SuggestionRequest], Sequence[Any]]


def _call_provider(
    provider: SuggestionProvider,
    request: SuggestionRequest,
    timeout: float,
) -> Sequence[Any]:
    """Run the provider on a worker thread; raise on timeout or failure."""
    executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(provider, request)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as e:
            future.cancel()
            raise SuggestionTimeout(
                f"Suggestion provider did not answer within {timeout}s",
                cause=e,
                context={"timeout": timeout},
            )
        except Exception as e:
            raise ExternalSuggestionFailure("Suggestion provider raised", cause=e)
    finally:
        # Do not block on a provider that is still running
        executor.shutdown(wait=False)


def _coerce(raw: Sequence[Any]) -> List[SuggestedPlacement]:
    """Validate provider output into SuggestedPlacements."""
    if raw is None:
        raise ExternalSuggestionFailure("Suggestion provider returned nothing")
    try:
        return [
            item if isinstance(item, SuggestedPlacement) else SuggestedPlacement.model_validate(item)
            for item in raw
        ]
    except (ValidationError, TypeError) as e:
        raise ExternalSuggestionFailure("Suggestion provider returned malformed placements", cause=e)


def fetch_suggestions(
    provider: SuggestionProvider,
    request: SuggestionRequest,
    timeout: float,
) -> Optional[List[SuggestedPlacement]]:
    """
    Ask a provider for suggestions without ever failing the caller.

    Suggestions for ids that are not in the request, and repeated
    suggestions for the same id, are dropped with a warning.

    Returns:
        Validated suggestions, or None when the provider timed out, raised,
        or returned malformed data
    """
    try:
        suggestions = _coerce(_call_provider(provider, request, timeout))
    except ExternalSuggestionFailure as e:
        logger.warning(f"Suggestions unavailable, falling back: {e}")
        return None

    accepted = accept_suggestions(suggestions, request.elements)
    logger.info(f"Received {len(accepted)} usable suggestions")
    return accepted


def accept_suggestions(
    suggestions: Sequence[SuggestedPlacement],
    elements: Sequence[ElementBase],
) -> List[SuggestedPlacement]:
    """Keep the first suggestion per known element id."""
    known_ids = {element.id for element in elements}
    accepted: List[SuggestedPlacement] = []
    seen = set()
    for suggestion in suggestions:
        if suggestion.id not in known_ids:
            logger.warning(f"Dropping suggestion for unknown element {suggestion.id}")
            continue
        if suggestion.id in seen:
            logger.warning(f"Dropping repeated suggestion for element {suggestion.id}")
            continue
        seen.add(suggestion.id)
        accepted.append(suggestion)
    return accepted
