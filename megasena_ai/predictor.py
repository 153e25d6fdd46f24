"""
Recommendation Pipeline for Mega-Sena

Runs the full analysis on a draw history and returns one recommended board:
frequency statistics -> recent patterns + cyclical analysis -> number
scoring -> genetic search -> insights. Also provides the lightweight
tiered recommendation and the next-draw calendar helper.
"""
import math
import traceback
import warnings
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone

import numpy as np
import pandas as pd

from megasena_ai.analysis import frequency_statistics, hot_numbers, recent_first
from megasena_ai.data_loader import validate_draws
from megasena_ai.insights import build_heatmap, detect_patterns, generate_insights
from megasena_ai.models.cyclical import analyze_cycles
from megasena_ai.models.genetic_search import GeneticSearch
from megasena_ai.models.number_scorer import score_numbers
from megasena_ai.models.pattern_extractor import extract_recent_patterns

ANALYSIS_VERSION = "3.0"

DEFAULT_SETTINGS = {
    "use_historical_patterns": True,
    "use_frequency_analysis": True,
    "use_sum_analysis": True,
    "use_parity_analysis": True,
    "balance_hot_cold": True,
    "randomness_factor": 0.3,
    "use_fibonacci_patterns": False,
    "use_cluster_analysis": True,
    "iteration_depth": 15000,
}

RANDOMNESS_RANGE = (0.0, 1.0)
ITERATION_RANGE = (1000, 30000)

# Setting names used by the dashboard front end
SETTING_ALIASES = {
    "useHistoricalPatterns": "use_historical_patterns",
    "useFrequencyAnalysis": "use_frequency_analysis",
    "useSumAnalysis": "use_sum_analysis",
    "useParityAnalysis": "use_parity_analysis",
    "balanceHotCold": "balance_hot_cold",
    "randomnessFactor": "randomness_factor",
    "useFibonacciPatterns": "use_fibonacci_patterns",
    "useClusterAnalysis": "use_cluster_analysis",
    "iterationDepth": "iteration_depth",
}

DRAW_WEEKDAYS = {1: "Tuesday", 3: "Thursday", 5: "Saturday"}
DRAW_HOUR = 20


class InputError(ValueError):
    """Draw history or statistics missing or empty."""


# ── Settings ─────────────────────────────────────────────────────────────

FALSE_STRINGS = ("false", "0", "no", "off", "")


def _as_bool(value):
    """bool() that also reads front-end strings such as "false" or "0"."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


def _as_float(value, default):
    """Float or `default` for anything unparseable or NaN."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        return default
    return default if math.isnan(value) else value


def validate_settings(settings=None):
    """
    Merge user settings onto the defaults and clamp them.
    Out-of-range values are clamped, unknown keys are ignored and a
    settings value that is not a mapping falls back to the defaults.
    """
    merged = dict(DEFAULT_SETTINGS)
    if settings is not None and not isinstance(settings, Mapping):
        warnings.warn(f"Ignoring settings of type {type(settings).__name__}; using defaults")
        settings = None
    for key, value in (settings or {}).items():
        key = SETTING_ALIASES.get(key, key)
        if key in merged and value is not None:
            merged[key] = value

    for key, default in DEFAULT_SETTINGS.items():
        if isinstance(default, bool):
            merged[key] = _as_bool(merged[key])

    randomness = _as_float(merged["randomness_factor"], DEFAULT_SETTINGS["randomness_factor"])
    lo, hi = RANDOMNESS_RANGE
    merged["randomness_factor"] = min(hi, max(lo, randomness))

    # Clamp before int() so infinities land on the range bounds
    depth = _as_float(merged["iteration_depth"], DEFAULT_SETTINGS["iteration_depth"])
    lo, hi = ITERATION_RANGE
    merged["iteration_depth"] = int(min(hi, max(lo, depth)))

    return merged


# ── Input checks ─────────────────────────────────────────────────────────

def prepare_history(df):
    """Validate and order the draw history most recent first."""
    if df is None or len(df) == 0:
        raise InputError("No draw results available for analysis.")
    history = recent_first(df)
    validate_draws(history)
    return history


def _check_statistics(statistics):
    if not statistics:
        raise InputError("Statistics are not available for analysis.")


def _confidence(fitness):
    return int(min(99, math.floor(fitness * 100 + 0.5)))


def _empty_result(message):
    return {
        "recommended_numbers": [],
        "confidence_score": 0,
        "insights": [message],
        "patterns": [],
        "heatmap": [],
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "analysis_version": ANALYSIS_VERSION,
    }


# ── Main pipeline ────────────────────────────────────────────────────────

def _run_pipeline(history, statistics, settings, rng, cancel_event, verbose):
    patterns = extract_recent_patterns(history)
    cycles = analyze_cycles(history)

    scored = score_numbers(history, statistics, settings, rng=rng,
                           patterns=patterns, cycles=cycles, verbose=verbose)
    hot = hot_numbers(history)
    cyclical = list(cycles["predictions"].keys())

    engine = GeneticSearch(scored["rankings"], hot, cyclical, settings, rng=rng)
    best = engine.run(cancel_event=cancel_event, verbose=verbose)
    numbers = sorted(best["numbers"])

    return {
        "recommended_numbers": numbers,
        "confidence_score": _confidence(best["fitness"]),
        "insights": generate_insights(numbers, statistics, cycles, hot, len(history)),
        "patterns": detect_patterns(numbers, settings),
        "heatmap": build_heatmap(scored["rankings"]),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "analysis_version": ANALYSIS_VERSION,
    }


def analyze_results(df, statistics=None, settings=None, rng=None, cancel_event=None,
                    verbose=False):
    """
    Recommend one 6-number board from the draw history.

    Never raises: empty input or any failure during the analysis produces a
    result with no numbers, zero confidence and a single explanatory insight.

    Parameters
    ----------
    df : pd.DataFrame
        Draw history (any order; sorted most recent first internally).
    statistics : list of dict, optional
        Frequency statistics for the caller's filtered window. Computed from
        `df` when omitted.
    settings : dict, optional
        Overrides for DEFAULT_SETTINGS (snake_case or dashboard camelCase).
    rng : np.random.RandomState, optional
        Seed it to make a run reproducible.
    cancel_event : object with is_set(), optional
        Checked once per generation of the search.

    Returns
    -------
    dict with recommended_numbers, confidence_score, insights, patterns,
    heatmap, timestamp, analysis_version.
    """
    if rng is None:
        rng = np.random.RandomState()

    try:
        settings = validate_settings(settings)
        history = prepare_history(df)
        if statistics is None:
            statistics = frequency_statistics(history)
        _check_statistics(statistics)

        if verbose:
            print("\n" + "=" * 60)
            print("MEGA-SENA RECOMMENDATION ENGINE")
            print("=" * 60)
            print(f"  Total draws in dataset: {len(history)}")
            print(f"  Randomness: {settings['randomness_factor']:.2f} | "
                  f"Iteration depth: {settings['iteration_depth']}")

        result = _run_pipeline(history, statistics, settings, rng, cancel_event, verbose)

        if verbose:
            print(f"\n  Recommended: {result['recommended_numbers']} "
                  f"(confidence {result['confidence_score']})")
            print("=" * 60)
        return result

    except InputError as e:
        print(f"  [Predictor] Analysis unavailable: {e}")
        return _empty_result(str(e))
    except Exception as e:
        print(f"  [Predictor] ERROR during analysis: {e}")
        traceback.print_exc()
        return _empty_result("The analysis failed. Please try again.")


# ── Quick Recommendation ─────────────────────────────────────────────────

def quick_recommendation(statistics, rng=None):
    """
    Lightweight pick without the genetic search: rank by
    0.7 * frequency + 0.3 * last_appearance, split into three tiers of 20
    and take 3 high, 2 medium and 1 low number.
    """
    _check_statistics(statistics)
    if rng is None:
        rng = np.random.RandomState()

    ranked = sorted(
        statistics,
        key=lambda s: s["frequency"] * 0.7 + s["last_appearance"] * 0.3,
        reverse=True,
    )
    numbers = [s["number"] for s in ranked]
    tiers = [(numbers[:20], 3), (numbers[20:40], 2), (numbers[40:60], 1)]

    picks = []
    for pool, count in tiers:
        count = min(count, len(pool))
        if count:
            picks.extend(int(n) for n in rng.choice(pool, size=count, replace=False))
    return sorted(picks)


# ── Next Draw ────────────────────────────────────────────────────────────

def next_draw_info(now=None):
    """Next Mega-Sena draw (Tuesday, Thursday or Saturday at 20:00)."""
    now = pd.Timestamp(now).to_pydatetime() if now is not None else datetime.now()
    for days_ahead in range(0, 8):
        candidate = now.date() + timedelta(days=days_ahead)
        if candidate.weekday() not in DRAW_WEEKDAYS:
            continue
        if days_ahead == 0 and now.hour >= DRAW_HOUR:
            continue
        return {
            "date": candidate.strftime("%Y-%m-%d"),
            "day": DRAW_WEEKDAYS[candidate.weekday()],
        }
    raise RuntimeError("No draw day found within a week")
