import threading

import numpy as np
import pandas as pd
import pytest

from conftest import make_history
from megasena_ai.analysis import frequency_statistics
from megasena_ai.predictor import (
    ANALYSIS_VERSION,
    DEFAULT_SETTINGS,
    InputError,
    analyze_results,
    next_draw_info,
    quick_recommendation,
    validate_settings,
)

RESULT_KEYS = {
    "recommended_numbers",
    "confidence_score",
    "insights",
    "patterns",
    "heatmap",
    "timestamp",
    "analysis_version",
}


def _assert_degraded(result):
    assert set(result) == RESULT_KEYS
    assert result["recommended_numbers"] == []
    assert result["confidence_score"] == 0
    assert len(result["insights"]) == 1
    assert result["patterns"] == []
    assert result["heatmap"] == []


# ── Settings ─────────────────────────────────────────────────────────────

def test_defaults():
    assert validate_settings() == DEFAULT_SETTINGS
    assert validate_settings(None)["randomness_factor"] == 0.3
    assert validate_settings({})["iteration_depth"] == 15000


@pytest.mark.parametrize("given,expected", [(5, 1.0), (-1, 0.0), (0.25, 0.25),
                                            (float("nan"), 0.3), ("abc", 0.3)])
def test_randomness_is_clamped(given, expected):
    assert validate_settings({"randomness_factor": given})["randomness_factor"] == expected


@pytest.mark.parametrize("given,expected", [(10, 1000), (99999, 30000), (5000, 5000),
                                            ("bad", 15000)])
def test_iteration_depth_is_clamped(given, expected):
    assert validate_settings({"iteration_depth": given})["iteration_depth"] == expected


def test_camel_case_aliases_and_unknown_keys():
    settings = validate_settings({
        "randomnessFactor": 0.5,
        "iterationDepth": 2000,
        "useFibonacciPatterns": True,
        "colour": "blue",
    })
    assert settings["randomness_factor"] == 0.5
    assert settings["iteration_depth"] == 2000
    assert settings["use_fibonacci_patterns"] is True
    assert "colour" not in settings


@pytest.mark.parametrize("given,expected", [(float("inf"), 30000), (float("-inf"), 1000),
                                            (float("nan"), 15000), (2500.7, 2500)])
def test_iteration_depth_non_finite_values(given, expected):
    depth = validate_settings({"iterationDepth": given})["iteration_depth"]
    assert depth == expected
    assert isinstance(depth, int)


def test_infinite_randomness_is_clamped():
    assert validate_settings({"randomnessFactor": float("inf")})["randomness_factor"] == 1.0


@pytest.mark.parametrize("given,expected", [("false", False), ("0", False), ("No", False),
                                            ("true", True), ("1", True), (0, False), (1, True)])
def test_flag_strings_are_read(given, expected):
    assert validate_settings({"useSumAnalysis": given})["use_sum_analysis"] is expected


def test_non_mapping_settings_fall_back_to_defaults():
    with pytest.warns(UserWarning, match="list"):
        settings = validate_settings(["randomnessFactor", 0.9])
    assert settings == DEFAULT_SETTINGS


# ── Error boundary ───────────────────────────────────────────────────────

def test_empty_history_is_degraded_not_raised():
    result = analyze_results(make_history([]))
    _assert_degraded(result)
    assert result["analysis_version"] == ANALYSIS_VERSION


def test_none_history_is_degraded():
    _assert_degraded(analyze_results(None))


def test_empty_statistics_are_degraded(synthetic_history):
    _assert_degraded(analyze_results(synthetic_history, statistics=[]))


def test_malformed_draw_is_degraded(capsys):
    df = make_history([[1, 2, 3, 4, 5, 6], [7, 7, 8, 9, 10, 11]])
    result = analyze_results(df)
    _assert_degraded(result)
    assert result["insights"] == ["The analysis failed. Please try again."]
    assert "[Predictor]" in capsys.readouterr().out


def test_out_of_range_number_is_degraded():
    df = make_history([[1, 2, 3, 4, 5, 61]])
    _assert_degraded(analyze_results(df))


def test_infinite_depth_does_not_escape_entry_point():
    df = make_history([[1, 2, 3, 4, 5, 6], [7, 8, 9, 10, 11, 12]])
    result = analyze_results(df, settings={"iterationDepth": float("-inf")},
                             rng=np.random.RandomState(3))
    assert len(result["recommended_numbers"]) == 6

    event = threading.Event()
    event.set()
    result = analyze_results(df, settings={"iterationDepth": float("inf")},
                             rng=np.random.RandomState(3), cancel_event=event)
    assert len(result["recommended_numbers"]) == 6


def test_non_mapping_settings_do_not_escape_entry_point(synthetic_history):
    event = threading.Event()
    event.set()
    with pytest.warns(UserWarning):
        result = analyze_results(synthetic_history, settings="fast", cancel_event=event,
                                 rng=np.random.RandomState(3))
    assert len(result["recommended_numbers"]) == 6


# ── Full pipeline ────────────────────────────────────────────────────────

def test_full_analysis_result(synthetic_history):
    result = analyze_results(synthetic_history, settings={"iteration_depth": 1000},
                             rng=np.random.RandomState(21))

    assert set(result) == RESULT_KEYS
    numbers = result["recommended_numbers"]
    assert len(numbers) == 6
    assert len(set(numbers)) == 6
    assert numbers == sorted(numbers)
    assert all(1 <= n <= 60 for n in numbers)
    assert isinstance(result["confidence_score"], int)
    assert 0 <= result["confidence_score"] <= 99
    assert len(result["heatmap"]) == 60
    assert {h["number"] for h in result["heatmap"]} == set(range(1, 61))
    assert len(result["patterns"]) == 4
    assert result["insights"]
    assert result["analysis_version"] == "3.0"
    assert pd.Timestamp(result["timestamp"]).tzinfo is not None


def test_seeded_runs_are_reproducible(synthetic_history):
    settings = {"iteration_depth": 1000}
    a = analyze_results(synthetic_history, settings=settings, rng=np.random.RandomState(4))
    b = analyze_results(synthetic_history, settings=settings, rng=np.random.RandomState(4))
    assert a["recommended_numbers"] == b["recommended_numbers"]
    assert a["confidence_score"] == b["confidence_score"]
    assert a["heatmap"] == b["heatmap"]


def test_history_order_does_not_matter(synthetic_history):
    settings = {"iteration_depth": 1000, "randomness_factor": 0}
    shuffled = synthetic_history.sample(frac=1.0, random_state=0)
    a = analyze_results(synthetic_history, settings=settings, rng=np.random.RandomState(9))
    b = analyze_results(shuffled, settings=settings, rng=np.random.RandomState(9))
    assert a["recommended_numbers"] == b["recommended_numbers"]


def test_caller_statistics_window_is_used(synthetic_history):
    window_stats = frequency_statistics(synthetic_history.head(50))
    result = analyze_results(synthetic_history, statistics=window_stats,
                             settings={"iteration_depth": 1000},
                             rng=np.random.RandomState(2))
    assert len(result["recommended_numbers"]) == 6


def test_constant_history(constant_history):
    result = analyze_results(constant_history,
                             settings={"randomness_factor": 0, "iteration_depth": 15000},
                             rng=np.random.RandomState(17))

    top_six = result["heatmap"][:6]
    assert {h["number"] for h in top_six} == {1, 2, 3, 4, 5, 6}
    # 1 and 6 share a residue class, so their cluster share is a notch higher
    scores = {h["number"]: h["score"] for h in top_six}
    assert scores[1] == 1.0
    assert scores[6] == 1.0
    assert min(scores.values()) >= 0.99
    assert len(set(result["recommended_numbers"]) & {1, 2, 3, 4, 5, 6}) >= 2
    assert result["confidence_score"] >= 60


def test_cancelled_analysis_still_recommends(synthetic_history):
    event = threading.Event()
    event.set()
    result = analyze_results(synthetic_history, rng=np.random.RandomState(6),
                             cancel_event=event)
    assert len(result["recommended_numbers"]) == 6


# ── Quick recommendation ─────────────────────────────────────────────────

def test_quick_recommendation_tiers(synthetic_history):
    stats = frequency_statistics(synthetic_history)
    ranked = sorted(stats, key=lambda s: s["frequency"] * 0.7 + s["last_appearance"] * 0.3,
                    reverse=True)
    order = [s["number"] for s in ranked]

    picks = quick_recommendation(stats, rng=np.random.RandomState(0))
    assert len(picks) == 6
    assert len(set(picks)) == 6
    assert picks == sorted(picks)
    assert sum(1 for n in picks if n in order[:20]) == 3
    assert sum(1 for n in picks if n in order[20:40]) == 2
    assert sum(1 for n in picks if n in order[40:]) == 1


def test_quick_recommendation_requires_statistics():
    with pytest.raises(InputError):
        quick_recommendation([])


# ── Next draw ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("now,date,day", [
    ("2024-06-29 10:00", "2024-06-29", "Saturday"),
    ("2024-06-29 21:00", "2024-07-02", "Tuesday"),
    ("2024-07-01 08:00", "2024-07-02", "Tuesday"),
    ("2024-07-03 19:59", "2024-07-04", "Thursday"),
])
def test_next_draw_info(now, date, day):
    assert next_draw_info(now) == {"date": date, "day": day}
