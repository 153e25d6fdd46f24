"""Mega-Sena draw analysis and number recommendation engine."""

from megasena_ai.predictor import (
    DEFAULT_SETTINGS,
    InputError,
    analyze_results,
    quick_recommendation,
    validate_settings,
)

__version__ = "3.0.0"

__all__ = [
    "DEFAULT_SETTINGS",
    "InputError",
    "analyze_results",
    "quick_recommendation",
    "validate_settings",
]
