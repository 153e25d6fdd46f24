"""
Structural Checks for Mega-Sena Combinations

Boolean and graded checks on a 6-number board. The genetic search uses them
as fitness bonuses and the reporter turns them into pattern confidences.
"""
import numpy as np

from megasena_ai.analysis import NUMBER_CLUSTERS, cluster_index

SUM_ZONE = (150, 220)
GOLDEN_RATIO = 1.618
FIBONACCI_NUMBERS = (1, 2, 3, 5, 8, 13, 21, 34, 55)
FIBONACCI_PAIRS = ((1, 2), (2, 3), (3, 5), (5, 8), (8, 13), (13, 21), (21, 34), (34, 55))


def decade_counts(board):
    """Counts per decade bucket 1-10, 11-20, ..., 51-60."""
    counts = [0] * 6
    for n in board:
        counts[(n - 1) // 10] += 1
    return counts


def cluster_counts(board):
    counts = [0] * len(NUMBER_CLUSTERS)
    for n in board:
        idx = cluster_index(n)
        if idx >= 0:
            counts[idx] += 1
    return counts


def gaps(board):
    s = sorted(board)
    return [s[i + 1] - s[i] for i in range(len(s) - 1)]


def check_distribution(board):
    """At least 4 decades used and no decade holding more than 2 numbers."""
    counts = decade_counts(board)
    used = sum(1 for c in counts if c > 0)
    return used >= 4 and max(counts) <= 2


def check_parity(board):
    """2, 3 or 4 odd numbers."""
    odd = sum(1 for n in board if n % 2 == 1)
    return odd in (2, 3, 4)


def check_sum(board):
    """Board sum inside the 150-220 zone."""
    lo, hi = SUM_ZONE
    return lo <= sum(board) <= hi


def check_cluster_spread(board):
    """At least 3 clusters represented and none with more than 2 members."""
    counts = cluster_counts(board)
    used = sum(1 for c in counts if c > 0)
    return used >= 3 and max(counts) <= 2


def golden_pattern_score(board):
    """
    Graded [0, 1] score for golden-ratio and Fibonacci structure.

    Every pair ratio near phi adds 0.4 / 0.2 / 0.1 (distance < 0.05 / 0.1 / 0.2),
    each consecutive Fibonacci pair present adds 0.25 and each Fibonacci
    number adds 0.1.
    """
    s = sorted(board)
    score = 0.0
    for i in range(len(s)):
        for j in range(i + 1, len(s)):
            distance = abs(s[j] / s[i] - GOLDEN_RATIO)
            if distance < 0.05:
                score += 0.4
            elif distance < 0.1:
                score += 0.2
            elif distance < 0.2:
                score += 0.1

    present = set(board)
    for a, b in FIBONACCI_PAIRS:
        if a in present and b in present:
            score += 0.25
    score += 0.1 * sum(1 for n in board if n in FIBONACCI_NUMBERS)

    return min(1.0, score)


def distance_pattern_score(board):
    """
    Graded [0, 1] spacing quality from the gaps between sorted numbers:
    low gap variance, a minimum gap of 2-3 and no gap wider than 15-20.
    """
    if len(board) < 2:
        return 0.0
    d = np.array(gaps(board), dtype=float)
    variance = float(np.var(d))

    if variance < 10:
        score = 1.0
    elif variance < 20:
        score = 0.7
    elif variance < 30:
        score = 0.4
    else:
        score = 0.2

    min_gap = d.min()
    if min_gap >= 3:
        score += 0.5
    elif min_gap >= 2:
        score += 0.3

    max_gap = d.max()
    if max_gap <= 15:
        score += 0.5
    elif max_gap <= 20:
        score += 0.3

    return score / 3.0


def run_all_filters(board):
    """
    Run every structural check on a board.
    Returns: dict with 'passed_count', 'total', 'results' list, 'all_passed' bool.
    """
    odd = sum(1 for n in board if n % 2 == 1)
    lo, hi = SUM_ZONE
    decades = decade_counts(board)
    clusters = cluster_counts(board)
    d = gaps(board)
    results = [
        {
            "name": "Decade Distribution",
            "passed": check_distribution(board),
            "detail": f"Decades used={sum(1 for c in decades if c)}, max per decade={max(decades)}",
        },
        {
            "name": "Odd/Even Balance",
            "passed": check_parity(board),
            "detail": f"Odd={odd}, Even={len(board) - odd}",
        },
        {
            "name": "Sum Zone",
            "passed": check_sum(board),
            "detail": f"Sum={sum(board)}, zone=[{lo},{hi}]",
        },
        {
            "name": "Cluster Spread",
            "passed": check_cluster_spread(board),
            "detail": f"Clusters used={sum(1 for c in clusters if c)}, max per cluster={max(clusters)}",
        },
        {
            "name": "Spacing",
            "passed": distance_pattern_score(board) >= 0.5,
            "detail": f"Gaps={d}",
        },
    ]
    passed = sum(1 for r in results if r["passed"])
    return {
        "passed_count": passed,
        "total": len(results),
        "all_passed": passed == len(results),
        "results": results,
        "confidence": f"{passed}/{len(results)}",
    }


def get_board_stats(board):
    """Calculate summary stats for a board."""
    sorted_board = sorted(board)
    odd = sum(1 for n in board if n % 2 == 1)
    decades = decade_counts(board)
    clusters = {i for i in (cluster_index(n) for n in board) if i >= 0}
    d = gaps(board)

    return {
        "numbers": sorted_board,
        "sum": sum(board),
        "odd_even": f"{odd}/{len(board) - odd}",
        "decades": {f"{10 * i + 1}-{10 * i + 10}": c for i, c in enumerate(decades) if c},
        "decade_count": sum(1 for c in decades if c),
        "cluster_count": len(clusters),
        "gaps": d,
        "average_gap": round(sum(d) / len(d), 2) if d else 0.0,
    }
