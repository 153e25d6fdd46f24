"""
Mega-Sena - Statistical Analysis Helpers

Frequency statistics, hot-number detection and temporal distributions over
historical draw data, plus the constant number clusters shared by the
scoring and search models.

Data schema expected:
    draw_number, date, num1-num6 (other columns are ignored)

Numbers range 1-60. Unless stated otherwise every function treats the most
recent draw as index 0.
"""

from collections import Counter

import numpy as np
import pandas as pd
from scipy import stats


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

NUM_COLS = [f"num{i}" for i in range(1, 7)]
NUM_RANGE = 60
ALL_NUMBERS = list(range(1, NUM_RANGE + 1))

# Ten hand-defined clusters. A number may sit in several; attribution uses
# the first match, and the five residue classes cover every number.
NUMBER_CLUSTERS = (
    (1, 6, 11, 16, 21, 26, 31, 36, 41, 46, 51, 56),
    (2, 7, 12, 17, 22, 27, 32, 37, 42, 47, 52, 57),
    (3, 8, 13, 18, 23, 28, 33, 38, 43, 48, 53, 58),
    (4, 9, 14, 19, 24, 29, 34, 39, 44, 49, 54, 59),
    (5, 10, 15, 20, 25, 30, 35, 40, 45, 50, 55, 60),
    (1, 3, 8, 21, 55),                      # modified Fibonacci
    (2, 4, 16, 36, 49),                     # bounded perfect squares
    (3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41, 43, 47, 53, 59),  # primes
    (6, 12, 18, 24, 30, 36, 42, 48, 54, 60),  # multiples of 6
    (10, 20, 30, 40, 50, 60),               # multiples of 10
)

CLUSTER_NAMES = (
    "residue 1 (mod 5)",
    "residue 2 (mod 5)",
    "residue 3 (mod 5)",
    "residue 4 (mod 5)",
    "multiples of 5",
    "Fibonacci",
    "perfect squares",
    "primes",
    "multiples of 6",
    "multiples of 10",
)

_CLUSTER_OF = {}
for _idx, _members in enumerate(NUMBER_CLUSTERS):
    for _n in _members:
        _CLUSTER_OF.setdefault(_n, _idx)

HOT_WINDOW = 30
HOT_SPLIT = 10
HOT_TOP_N = 15

FREQUENCY_COLORS = ("#313695", "#4575B4", "#74ADD1", "#F46D43", "#A50026")


def cluster_index(number: int) -> int:
    """Index of the first cluster containing *number* (-1 if none)."""
    return _CLUSTER_OF.get(int(number), -1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def recent_first(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy ordered most recent draw first, with a fresh 0..n-1 index."""
    if "draw_number" in df.columns:
        df = df.sort_values("draw_number", ascending=False)
    elif "date" in df.columns:
        df = df.sort_values("date", ascending=False)
    return df.reset_index(drop=True)


def draws_matrix(df: pd.DataFrame) -> np.ndarray:
    """(n_draws, 6) integer array of drawn numbers, row order preserved."""
    if len(df) == 0:
        return np.zeros((0, 6), dtype=int)
    return df[NUM_COLS].to_numpy(dtype=int)


# ===================================================================
# 1. Frequency Statistics
# ===================================================================

def frequency_statistics(df: pd.DataFrame) -> list:
    """
    Per-number aggregate over the given window (most recent first).

    Returns
    -------
    list of 60 dicts, one per number in ascending order:
        number          : int
        frequency       : draws containing the number
        percentage      : frequency / window size * 100 (0 for an empty window)
        last_appearance : index of the most recent draw containing it,
                          window size if absent
    """
    draws = draws_matrix(df)
    window = len(draws)

    frequency = Counter()
    last_seen = {}
    for idx, nums in enumerate(draws):
        for n in nums:
            n = int(n)
            frequency[n] += 1
            if n not in last_seen:
                last_seen[n] = idx

    records = []
    for n in ALL_NUMBERS:
        freq = frequency.get(n, 0)
        records.append({
            "number": n,
            "frequency": freq,
            "percentage": (freq / window * 100.0) if window > 0 else 0.0,
            "last_appearance": last_seen.get(n, window),
        })
    return records


def frequency_ranking(statistics: list) -> list:
    """(number, frequency) pairs sorted by frequency, most frequent first."""
    ranked = sorted(statistics, key=lambda s: s["frequency"], reverse=True)
    return [(s["number"], s["frequency"]) for s in ranked]


def frequency_color(frequency: float, max_frequency: float) -> str:
    """Five-bucket heat colour for a frequency relative to the window maximum."""
    ratio = frequency / max_frequency if max_frequency > 0 else 0.0
    for color, limit in zip(FREQUENCY_COLORS, (0.2, 0.4, 0.6, 0.8)):
        if ratio < limit:
            return color
    return FREQUENCY_COLORS[-1]


# ===================================================================
# 2. Hot Numbers
# ===================================================================

def hot_number_scores(df: pd.DataFrame, window: int = HOT_WINDOW,
                      split: int = HOT_SPLIT) -> dict:
    """
    Score every number by recent frequency and growth trend.

    The window is split into the most recent `split` draws and the rest;
    growth compares their per-draw rates. A number only seen in the recent
    part gets the capped growth of 2.
    """
    draws = draws_matrix(df)[:window]

    recent_freq = {n: 0.0 for n in ALL_NUMBERS}
    very_recent = Counter()
    less_recent = Counter()

    for idx, nums in enumerate(draws):
        weight = 0.95 ** idx
        for n in nums:
            n = int(n)
            # Raw count plus a gently decayed count
            recent_freq[n] += 1 + weight
            if idx < split:
                very_recent[n] += 1
            else:
                less_recent[n] += 1

    older_span = max(window - split, 1)
    scores = {}
    for n in ALL_NUMBERS:
        rate_recent = very_recent.get(n, 0) / split
        rate_older = less_recent.get(n, 0) / older_span
        if rate_older > 0:
            growth = (rate_recent - rate_older) / rate_older
        elif rate_recent > 0:
            growth = 2.0
        else:
            growth = 0.0
        scores[n] = recent_freq[n] * 0.6 + max(0.0, growth) * 0.4
    return scores


def hot_numbers(df: pd.DataFrame, window: int = HOT_WINDOW,
                top_n: int = HOT_TOP_N) -> list:
    """Top `top_n` numbers by hot score (ties keep ascending number order)."""
    scores = hot_number_scores(df, window=window)
    ranked = sorted(scores.items(), key=lambda x: x[1], reverse=True)
    return [n for n, _ in ranked[:top_n]]


# ===================================================================
# 3. Temporal Distribution
# ===================================================================

def temporal_distribution(df: pd.DataFrame, window: int = 200) -> dict:
    """
    Weekday, month and day-of-month counts for the most recent `window` draws.

    Returns
    -------
    dict with keys:
        weekday_counts      : list[7], Monday=0
        month_counts        : list[12]
        day_of_month_counts : list[31]
        weekday_probability : list[7]
        weekday_uniformity_p: chi-square p-value over weekdays that had draws
        total_draws         : int
    """
    recent = recent_first(df).head(window)
    if "date" in recent.columns:
        dates = pd.to_datetime(recent["date"]).dropna()
    else:
        dates = []
    total = len(dates)

    weekday_counts = [0] * 7
    month_counts = [0] * 12
    dom_counts = [0] * 31
    for d in dates:
        weekday_counts[d.weekday()] += 1
        month_counts[d.month - 1] += 1
        dom_counts[d.day - 1] += 1

    observed = [c for c in weekday_counts if c > 0]
    if len(observed) > 1:
        p_value = float(stats.chisquare(observed).pvalue)
    else:
        p_value = 1.0

    return {
        "weekday_counts": weekday_counts,
        "month_counts": month_counts,
        "day_of_month_counts": dom_counts,
        "weekday_probability": [c / total if total else 0.0 for c in weekday_counts],
        "weekday_uniformity_p": round(p_value, 4),
        "total_draws": total,
    }
