"""
Exception hierarchy for the resize engine.

Input problems fail fast with InputError. Failures of the optional
suggestion source are raised and caught inside the suggestion adapter
only; callers of the engine never see them.
"""

from typing import Any, Dict, Optional


class CanvasFitError(Exception):
    """Base exception for all engine errors"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [super().__str__()]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


# === Input exceptions ===

class InputError(CanvasFitError, ValueError):
    """Invalid elements, bounds or strategy name; no partial result is produced"""
    pass


# === Suggestion source exceptions ===

class ExternalSuggestionFailure(CanvasFitError):
    """External placement suggestion source failed or returned garbage"""
    pass


class SuggestionTimeout(ExternalSuggestionFailure):
    """External placement suggestion source did not answer in time"""
    pass
