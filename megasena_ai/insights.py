"""
Insight & Pattern Reporter

Turns the winning board and the intermediate analysis data into
human-readable insights, pattern confidence records and the 60-number
score heatmap.
"""

from megasena_ai.analysis import cluster_index
from megasena_ai.filters import (
    SUM_ZONE,
    check_cluster_spread,
    check_distribution,
    check_parity,
    check_sum,
    decade_counts,
    gaps,
    golden_pattern_score,
)

ORDINALS = ("1st", "2nd", "3rd", "4th", "5th", "6th")


def generate_insights(numbers, statistics, cycle_data, hot_numbers, total_draws):
    """Natural-language notes on the recommended board."""
    insights = []
    if not numbers:
        return insights

    odd = sum(1 for n in numbers if n % 2 == 1)
    insights.append(f"The combination has {odd} odd and {len(numbers) - odd} even numbers.")

    total = sum(numbers)
    lo, hi = SUM_ZONE
    if total < lo:
        position = "below"
    elif total > hi:
        position = "above"
    else:
        position = "inside"
    insights.append(f"The numbers add up to {total}, {position} the most frequent {lo}-{hi} range.")

    decades = decade_counts(numbers)
    used = [(i, c) for i, c in enumerate(decades) if c > 0]
    coverage = ", ".join(f"{c} in the {ORDINALS[i]}" for i, c in used)
    insights.append(f"The combination covers {len(used)} of the 6 decade ranges ({coverage}).")

    hot_selected = [n for n in numbers if n in set(hot_numbers)]
    if hot_selected:
        listed = ", ".join(str(n) for n in hot_selected)
        insights.append(
            f"It includes {len(hot_selected)} hot numbers ({listed}) that have been "
            f"appearing more often in recent draws."
        )

    predictions = cycle_data.get("predictions", {}) if cycle_data else {}
    cyclical_selected = [n for n in numbers if n in predictions]
    if cyclical_selected:
        listed = ", ".join(str(n) for n in cyclical_selected)
        insights.append(
            f"{len(cyclical_selected)} numbers ({listed}) follow a regular repetition "
            f"cycle and are due soon."
        )

    d = gaps(numbers)
    avg_gap = sum(d) / len(d) if d else 0.0
    spread = "tight" if avg_gap < 8 else "wide"
    insights.append(
        f"The average gap between consecutive numbers is {avg_gap:.1f}, a {spread} "
        f"spread across 1-60."
    )

    clusters = {cluster_index(n) for n in numbers}
    if len(clusters) <= 3:
        insights.append(f"The combination is concentrated in {len(clusters)} numeric clusters.")
    else:
        insights.append(f"The combination is spread across {len(clusters)} distinct numeric clusters.")

    insights.append(f"This analysis used all {total_draws} available historical draws.")

    by_number = {s["number"]: s for s in statistics}
    freqs = [by_number.get(n, {}).get("frequency", 0) for n in numbers]
    pcts = [by_number.get(n, {}).get("percentage", 0.0) for n in numbers]
    insights.append(
        f"On average these numbers were drawn {sum(freqs) / len(freqs):.1f} times "
        f"({sum(pcts) / len(pcts):.2f}% of draws)."
    )
    return insights


def detect_patterns(numbers, settings):
    """One confidence record per enabled analysis dimension."""
    if not numbers:
        return []

    patterns = [{
        "description": "Spread across decades",
        "numbers": list(numbers),
        "confidence": 0.85 if check_distribution(numbers) else 0.5,
    }]
    if settings.get("use_parity_analysis", True):
        patterns.append({
            "description": "Odd/even balance",
            "numbers": list(numbers),
            "confidence": 0.75 if check_parity(numbers) else 0.45,
        })
    if settings.get("use_sum_analysis", True):
        patterns.append({
            "description": "Total sum in the ideal range",
            "numbers": list(numbers),
            "confidence": 0.8 if check_sum(numbers) else 0.4,
        })
    if settings.get("use_cluster_analysis", True):
        patterns.append({
            "description": "Spread across clusters",
            "numbers": list(numbers),
            "confidence": 0.75 if check_cluster_spread(numbers) else 0.5,
        })
    if settings.get("use_fibonacci_patterns", False):
        patterns.append({
            "description": "Golden ratio and Fibonacci patterns",
            "numbers": list(numbers),
            "confidence": golden_pattern_score(numbers),
        })
    return patterns


def build_heatmap(rankings):
    """All 60 scores, rounded to 3 decimals, in ranking order."""
    return [{"number": int(n), "score": round(float(s), 3)} for n, s in rankings]
