import math

import pytest

from conftest import make_history
from megasena_ai.analysis import recent_first
from megasena_ai.models.pattern_extractor import extract_recent_patterns


def test_window_limited_to_twenty(synthetic_history):
    patterns = extract_recent_patterns(recent_first(synthetic_history))
    assert patterns["window_size"] == 20
    assert sum(patterns["cluster_distribution"]) == 20 * 6
    assert sum(patterns["repeat_counts"].values()) == 20 * 6
    assert sum(patterns["sum_distribution"].values()) == 20
    assert sum(patterns["odd_distribution"].values()) == 20


def test_short_history_shrinks_window():
    df = make_history([[1, 2, 3, 4, 5, 6], [10, 20, 30, 40, 50, 60]])
    patterns = extract_recent_patterns(df)
    assert patterns["window_size"] == 2
    assert patterns["repeat_counts"][1] == 1


def test_empty_history():
    patterns = extract_recent_patterns(make_history([]))
    assert patterns["window_size"] == 0
    assert patterns["distance_stats"] == {"average": 0.0, "min": 0, "max": 0}
    assert patterns["top_consecutive_pairs"] == []


def test_decayed_frequency_weights():
    df = make_history([[1, 2, 3, 4, 5, 6], [1, 7, 8, 9, 10, 11]])
    freqs = extract_recent_patterns(df)["recent_frequencies"]
    assert freqs[1] == pytest.approx(1.0 + math.exp(-0.15))
    assert freqs[7] == pytest.approx(math.exp(-0.15))
    assert freqs[60] == 0.0


def test_sum_parity_pairs_and_gaps():
    df = make_history([[1, 2, 3, 4, 5, 6]] * 3 + [[10, 20, 30, 40, 50, 60]])
    patterns = extract_recent_patterns(df)

    assert patterns["most_frequent_sum"] == 21
    assert patterns["most_frequent_odd_count"] == 3
    assert patterns["consecutive_pairs"][(1, 2)] == 3
    assert patterns["top_consecutive_pairs"][0][1] == 3
    assert len(patterns["top_consecutive_pairs"]) == 5
    assert patterns["distance_stats"]["min"] == 1
    assert patterns["distance_stats"]["max"] == 10
    assert patterns["distance_stats"]["average"] == pytest.approx((15 * 1 + 5 * 10) / 20)


def test_first_match_cluster_attribution():
    # 6 counts toward the residue class of 1 only, not the multiples of 6
    df = make_history([[1, 2, 3, 4, 5, 6]])
    distribution = extract_recent_patterns(df)["cluster_distribution"]
    assert distribution[:5] == [2, 1, 1, 1, 1]
    assert distribution[8] == 0


def test_extractor_is_pure(synthetic_history):
    df = recent_first(synthetic_history)
    assert extract_recent_patterns(df) == extract_recent_patterns(df)
