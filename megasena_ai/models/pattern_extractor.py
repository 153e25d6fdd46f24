"""
Recent Pattern Extractor for Mega-Sena

Describes the most recent draws (20 by default): cluster distribution,
repeat counts, exponentially decayed frequency, sum and parity
distributions, consecutive-pair counts and gap statistics.
"""

import numpy as np
from collections import Counter

from megasena_ai.analysis import ALL_NUMBERS, NUMBER_CLUSTERS, cluster_index, draws_matrix

RECENT_LIMIT = 20
DECAY_RATE = 0.15


def _most_common_key(counter):
    """Key with the highest count; first inserted wins ties."""
    best_key, best_count = 0, 0
    for key, count in counter.items():
        if count > best_count:
            best_key, best_count = key, count
    return best_key


def extract_recent_patterns(df, limit=RECENT_LIMIT):
    """
    Parameters
    ----------
    df : pd.DataFrame
        Draw history, most recent first.
    limit : int
        Size of the trailing sub-window.

    Returns
    -------
    dict with:
        'cluster_distribution': list of counts, one per cluster
        'repeat_counts': {number: occurrences in the sub-window}
        'recent_frequencies': {number: decayed frequency}
        'sum_distribution', 'odd_distribution': value -> count
        'most_frequent_sum', 'most_frequent_odd_count': int
        'consecutive_pairs': {(a, b): count}
        'top_consecutive_pairs': five most common pairs
        'distance_stats': {'average', 'min', 'max'}
        'window_size': int
    """
    draws = draws_matrix(df)[:limit]

    cluster_distribution = [0] * len(NUMBER_CLUSTERS)
    repeat_counts = Counter()
    sum_distribution = Counter()
    odd_distribution = Counter()
    consecutive_pairs = Counter()
    all_gaps = []

    for nums in draws:
        nums = sorted(int(n) for n in nums)
        for a, b in zip(nums, nums[1:]):
            consecutive_pairs[(a, b)] += 1
            all_gaps.append(b - a)
        sum_distribution[sum(nums)] += 1
        odd_distribution[sum(1 for n in nums if n % 2 == 1)] += 1
        for n in nums:
            repeat_counts[n] += 1
            idx = cluster_index(n)
            if idx >= 0:
                cluster_distribution[idx] += 1

    recent_frequencies = {n: 0.0 for n in ALL_NUMBERS}
    for idx, nums in enumerate(draws):
        weight = np.exp(-DECAY_RATE * idx)
        for n in nums:
            recent_frequencies[int(n)] += weight

    if all_gaps:
        distance_stats = {
            "average": float(np.mean(all_gaps)),
            "min": int(min(all_gaps)),
            "max": int(max(all_gaps)),
        }
    else:
        distance_stats = {"average": 0.0, "min": 0, "max": 0}

    return {
        "cluster_distribution": cluster_distribution,
        "repeat_counts": dict(repeat_counts),
        "recent_frequencies": recent_frequencies,
        "sum_distribution": dict(sum_distribution),
        "most_frequent_sum": _most_common_key(sum_distribution),
        "odd_distribution": dict(odd_distribution),
        "most_frequent_odd_count": _most_common_key(odd_distribution),
        "consecutive_pairs": dict(consecutive_pairs),
        "top_consecutive_pairs": consecutive_pairs.most_common(5),
        "distance_stats": distance_stats,
        "window_size": len(draws),
    }
