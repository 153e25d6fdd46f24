#!/usr/bin/env python3
"""
Standalone prediction script.
Loads the draw history (or a synthetic one when no data file exists),
runs the recommendation engine and prints the full report.
"""
import argparse
import os
import sys

import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from megasena_ai.analysis import frequency_statistics, recent_first, temporal_distribution
from megasena_ai.data_loader import CSV_PATH, filter_by_date, generate_synthetic_data, load_data
from megasena_ai.filters import get_board_stats, run_all_filters
from megasena_ai.predictor import analyze_results, next_draw_info, quick_recommendation


def parse_args():
    parser = argparse.ArgumentParser(description="Mega-Sena number recommendation")
    parser.add_argument("--data", default=CSV_PATH, help="CSV or results-API JSON file")
    parser.add_argument("--start", help="first draw date to include (YYYY-MM-DD)")
    parser.add_argument("--end", help="last draw date to include (YYYY-MM-DD)")
    parser.add_argument("--randomness", type=float, default=0.3)
    parser.add_argument("--depth", type=int, default=15000, help="search iteration budget")
    parser.add_argument("--fibonacci", action="store_true", help="enable golden ratio patterns")
    parser.add_argument("--seed", type=int, help="seed for a reproducible run")
    return parser.parse_args()


def main():
    args = parse_args()

    print("Loading data...")
    if os.path.exists(args.data):
        df = load_data(args.data)
    else:
        print(f"[!] {args.data} not found; using a synthetic history for demonstration.")
        df = generate_synthetic_data(n_draws=500, seed=args.seed)
    if args.start or args.end:
        df = filter_by_date(df, args.start, args.end)
    df = recent_first(df)
    print(f"Loaded {len(df)} draws")

    stats = frequency_statistics(df)
    rng = np.random.RandomState(args.seed)
    settings = {
        "randomness_factor": args.randomness,
        "iteration_depth": args.depth,
        "use_fibonacci_patterns": args.fibonacci,
    }
    result = analyze_results(df, stats, settings, rng=rng, verbose=True)

    nxt = next_draw_info()
    print(f"\nNEXT DRAW: {nxt['date']} ({nxt['day']})")

    if not result["recommended_numbers"]:
        print(f"\nAnalysis unavailable: {result['insights'][0]}")
        return 1

    board = result["recommended_numbers"]
    board_stats = get_board_stats(board)
    checks = run_all_filters(board)
    print(f"\nRecommended: {', '.join(str(n) for n in board)}")
    print(f"  Confidence: {result['confidence_score']}%  (checks {checks['confidence']})")
    print(f"  Sum: {board_stats['sum']} | Odd/Even: {board_stats['odd_even']} | "
          f"Decades: {board_stats['decade_count']} | Avg gap: {board_stats['average_gap']}")
    for f in checks["results"]:
        status = "PASS" if f["passed"] else "FAIL"
        print(f"    [{status}] {f['name']}: {f['detail']}")

    print("\nInsights:")
    for line in result["insights"]:
        print(f"  - {line}")

    print("\nPatterns:")
    for p in result["patterns"]:
        print(f"  - {p['description']}: {p['confidence']:.0%}")

    print(f"\n{'='*60}")
    print("HEATMAP - TOP 15")
    print(f"{'='*60}")
    for i, entry in enumerate(result["heatmap"][:15]):
        print(f"  #{i+1:2d}. Number {entry['number']:2d} - Score: {entry['score']:.3f}")

    quick = quick_recommendation(stats, rng=rng)
    print(f"\nQuick pick (frequency tiers): {', '.join(str(n) for n in quick)}")

    temporal = temporal_distribution(df)
    print(f"Weekday uniformity p-value (last {temporal['total_draws']} draws): "
          f"{temporal['weekday_uniformity_p']}")

    print(f"\n{'='*60}")
    print("DISCLAIMER: Mega-Sena is a random lottery. No analysis improves the odds")
    print("of 1 in 50,063,860. Play responsibly.")
    print(f"{'='*60}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
