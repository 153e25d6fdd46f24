"""
Number Scorer for Mega-Sena

Scores all 60 numbers by adding four groups of factors:
- Recent draws (last 30, exp(-0.1*i) decay):           0.35 per draw
- Global statistics (Gaussian frequency + logistic recency): 0.25 + 0.20
- Cyclical predictions (strength * proximity) + lunar/seasonal hooks:
                                                        0.30 + 0.15 + 0.10
- Recent patterns (cluster share, repeat Gaussian, Fibonacci stub):
                                                        0.15 + 0.15 + 0.10

Raw scores are normalized by the maximum and optionally jittered with
Box-Muller noise scaled by the randomness factor.
"""

import math

import numpy as np

from megasena_ai.analysis import ALL_NUMBERS, cluster_index, draws_matrix
from megasena_ai.models.cyclical import analyze_cycles
from megasena_ai.models.pattern_extractor import extract_recent_patterns


# Weight configuration
WEIGHTS = {
    "recent_draw": 0.35,
    "frequency_gauss": 0.25,
    "recency_logistic": 0.20,
    "cycle": 0.30,
    "lunar": 0.15,
    "seasonal": 0.10,
    "cluster_share": 0.15,
    "repeat_gauss": 0.15,
    "fibonacci": 0.10,
}

RECENT_DRAWS = 30
RECENT_DECAY = 0.1
OPTIMAL_FREQUENCY = 0.65
OPTIMAL_REPEAT = 1.5
RECENCY_SCALE = 30.0
FIBONACCI_ADJUSTMENT = 0.1
JITTER_AMPLITUDE = 0.1


def _recent_draw_scores(draws):
    """Decayed membership in the most recent draws."""
    scores = {n: 0.0 for n in ALL_NUMBERS}
    for idx, nums in enumerate(draws[:RECENT_DRAWS]):
        weight = WEIGHTS["recent_draw"] * math.exp(-RECENT_DECAY * idx)
        for n in nums:
            scores[int(n)] += weight
    return scores


def _global_statistic_scores(statistics):
    """
    Gaussian bonus peaking at 65% of the frequency range plus a logistic
    bonus on draws since last appearance (midpoint at 22.5 draws).
    """
    freqs = [s["frequency"] for s in statistics]
    min_f, max_f = min(freqs), max(freqs)
    freq_range = max_f - min_f

    freq_scores = {n: 0.0 for n in ALL_NUMBERS}
    recency_scores = {n: 0.0 for n in ALL_NUMBERS}
    for stat in statistics:
        n = stat["number"]
        if n not in freq_scores:
            continue
        norm = (stat["frequency"] - min_f) / freq_range if freq_range > 0 else 0.5
        freq_scores[n] = WEIGHTS["frequency_gauss"] * math.exp(-((norm - OPTIMAL_FREQUENCY) ** 2) / 0.1)

        ratio = stat["last_appearance"] / RECENCY_SCALE
        recency_scores[n] = WEIGHTS["recency_logistic"] / (1.0 + math.exp(-(4.0 * ratio - 3.0)))
    return freq_scores, recency_scores


def _cyclical_scores(cycle_data):
    scores = {n: 0.0 for n in ALL_NUMBERS}
    for n, pred in cycle_data["predictions"].items():
        scores[n] += WEIGHTS["cycle"] * pred["cycle_strength"] * pred["proximity_factor"]
    for n in cycle_data.get("lunar_hot_numbers", []):
        scores[n] += WEIGHTS["lunar"]
    for n in cycle_data.get("seasonal_hot_numbers", []):
        scores[n] += WEIGHTS["seasonal"]
    return scores


def _pattern_scores(patterns, use_fibonacci):
    """Cluster share, repeat-count Gaussian and the flat Fibonacci adjustment."""
    distribution = patterns["cluster_distribution"]
    total = max(1, sum(distribution))
    shares = [w / total for w in distribution]

    scores = {n: 0.0 for n in ALL_NUMBERS}
    for n in ALL_NUMBERS:
        idx = cluster_index(n)
        if idx >= 0:
            scores[n] += WEIGHTS["cluster_share"] * shares[idx]

        repeat = patterns["repeat_counts"].get(n, 0)
        scores[n] += WEIGHTS["repeat_gauss"] * math.exp(-((repeat - OPTIMAL_REPEAT) ** 2) / 1.5)

        if use_fibonacci:
            scores[n] += WEIGHTS["fibonacci"] * FIBONACCI_ADJUSTMENT
    return scores


def _box_muller(rng):
    """One standard-normal sample from two uniforms."""
    u1 = 1.0 - rng.random_sample()  # (0, 1]
    u2 = rng.random_sample()
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def apply_jitter(score, randomness, rng):
    """Blend a score with a noisy copy of itself; amplitude 0.1 * randomness."""
    noise = _box_muller(rng) * JITTER_AMPLITUDE * randomness
    blended = score * (1 - randomness / 2) + score * (1 + noise) * (randomness / 2)
    return max(0.0, min(1.0, blended))


def score_numbers(df, statistics, settings, rng=None, patterns=None, cycles=None,
                  verbose=False):
    """
    Score every number 1-60.

    Parameters
    ----------
    df : pd.DataFrame
        Draw history, most recent first.
    statistics : list of dict
        Frequency statistics for the caller's analysis window.
    settings : dict
        Validated settings (see megasena_ai.predictor.validate_settings).
    rng : np.random.RandomState, optional
        Random source for jitter. Only drawn from when randomness_factor > 0.
    patterns, cycles : dict, optional
        Precomputed extractor / cyclical output; computed when omitted.

    Returns
    -------
    dict with:
        'rankings': list of (number, score) sorted by score descending
        'scores': {number: score}
        'component_scores': {component: {number: raw contribution}}
    """
    if verbose:
        print("  [Scorer] Scoring 60 numbers...")

    draws = draws_matrix(df)
    if patterns is None:
        patterns = extract_recent_patterns(df)
    if cycles is None:
        cycles = analyze_cycles(df)

    components = {}
    components["recent_draws"] = _recent_draw_scores(draws)
    components["frequency"], components["recency"] = _global_statistic_scores(statistics)
    components["cyclical"] = _cyclical_scores(cycles)
    if settings.get("use_historical_patterns", True):
        components["patterns"] = _pattern_scores(patterns, settings.get("use_fibonacci_patterns", False))

    raw = {n: sum(comp[n] for comp in components.values()) for n in ALL_NUMBERS}
    max_score = max(max(raw.values()), 0.001)

    randomness = settings.get("randomness_factor", 0.0)
    if randomness > 0 and rng is None:
        rng = np.random.RandomState()

    final = {}
    for n in ALL_NUMBERS:
        s = min(1.0, max(0.0, raw[n] / max_score))
        if randomness > 0:
            s = apply_jitter(s, randomness, rng)
        final[n] = s

    rankings = sorted(final.items(), key=lambda x: x[1], reverse=True)

    if verbose:
        top = ", ".join(f"{n}({s:.3f})" for n, s in rankings[:6])
        print(f"  [Scorer] Top 6: {top}")
        print(f"  [Scorer] Cyclical predictions: {len(cycles['predictions'])}")

    return {
        "rankings": rankings,
        "scores": final,
        "component_scores": components,
        "model_name": "NumberScorer",
    }
