"""
Cyclical Pattern Analyzer for Mega-Sena

For every number, looks at the gaps between its successive appearances in
the last 200 draws. Numbers whose gaps are regular (coefficient of
variation below 0.4, at least 3 gaps) are cyclical. A cyclical number whose
projected next appearance falls within 5 draws becomes a prediction with a
strength and a proximity factor; the rest are dropped from the prediction
set.
"""

import math

import numpy as np
from scipy import stats

from megasena_ai.analysis import ALL_NUMBERS, draws_matrix

CYCLE_WINDOW = 200
MIN_INTERVALS = 3
CV_THRESHOLD = 0.4
PROXIMITY_WINDOW = 5


def _round_half_up(x):
    return int(math.floor(x + 0.5))


def interval_stats(intervals):
    """
    Regularity of a gap sequence.

    Returns dict with intervals, average_interval, std_dev (population),
    is_cyclical and cycle_strength (1 - cv, clamped to [0, 1]).
    """
    intervals = [int(i) for i in intervals]
    if not intervals:
        return {
            "intervals": [],
            "average_interval": 0.0,
            "std_dev": 0.0,
            "is_cyclical": False,
            "cycle_strength": 0.0,
        }

    arr = np.array(intervals, dtype=float)
    avg = float(arr.mean())
    std = float(arr.std())

    if avg > 0:
        cv = float(stats.variation(arr))
        is_cyclical = len(intervals) >= MIN_INTERVALS and cv < CV_THRESHOLD
        strength = min(1.0, max(0.0, 1.0 - cv))
    else:
        is_cyclical = False
        strength = 0.0

    return {
        "intervals": intervals,
        "average_interval": avg,
        "std_dev": std,
        "is_cyclical": is_cyclical,
        "cycle_strength": strength,
    }


def lunar_hot_numbers(df):
    """Hook for lunar-phase hot numbers. Not modelled; always empty."""
    return []


def seasonal_hot_numbers(df):
    """Hook for seasonal hot numbers. Not modelled; always empty."""
    return []


def analyze_cycles(df, window=CYCLE_WINDOW):
    """
    Parameters
    ----------
    df : pd.DataFrame
        Draw history, most recent first.
    window : int
        Number of recent draws scanned for intervals.

    Returns
    -------
    dict with:
        'cycles': {number: CycleRecord} for every number with >= 3 intervals
        'predictions': {number: {'cycle_strength', 'proximity_factor',
                        'average_interval', 'next_draw_index'}}
        'lunar_hot_numbers', 'seasonal_hot_numbers': lists (empty)
        'window_size': int
    """
    all_draws = draws_matrix(df)
    draws = all_draws[:window]

    occurrences = {n: [] for n in ALL_NUMBERS}
    for idx, nums in enumerate(draws):
        for n in nums:
            occurrences[int(n)].append(idx)

    # Most recent appearance over the whole history
    last_occurrence = {}
    for idx, nums in enumerate(all_draws):
        for n in nums:
            last_occurrence.setdefault(int(n), idx)
        if len(last_occurrence) == len(ALL_NUMBERS):
            break

    cycles = {}
    predictions = {}
    for n in ALL_NUMBERS:
        idxs = occurrences[n]
        intervals = [b - a for a, b in zip(idxs, idxs[1:])]
        if len(intervals) < MIN_INTERVALS:
            continue

        record = interval_stats(intervals)
        record["proximity_factor"] = 0.0
        cycles[n] = record

        if not record["is_cyclical"] or n not in last_occurrence:
            continue

        next_draw = last_occurrence[n] + _round_half_up(record["average_interval"])
        distance = abs(next_draw)
        if distance <= PROXIMITY_WINDOW:
            proximity = 1.0 - distance / PROXIMITY_WINDOW
            record["proximity_factor"] = proximity
            predictions[n] = {
                "cycle_strength": record["cycle_strength"],
                "proximity_factor": proximity,
                "average_interval": record["average_interval"],
                "next_draw_index": next_draw,
            }

    return {
        "cycles": cycles,
        "predictions": predictions,
        "lunar_hot_numbers": lunar_hot_numbers(df),
        "seasonal_hot_numbers": seasonal_hot_numbers(df),
        "window_size": len(draws),
    }
