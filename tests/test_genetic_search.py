import threading

import numpy as np
import pytest

from megasena_ai.models.genetic_search import (
    GeneticSearch,
    evaluate_board,
    search,
    search_budget,
    split_tiers,
)

RANKINGS = [(n, 1.0 - n / 100.0) for n in range(1, 61)]
HOT = list(range(1, 16))


class CountingEvent:
    """Reports set after a fixed number of checks."""

    def __init__(self, trip_after):
        self.trip_after = trip_after
        self.calls = 0

    def is_set(self):
        self.calls += 1
        return self.calls >= self.trip_after


def _valid(board):
    return (
        len(board) == 6
        and len(set(board)) == 6
        and board == sorted(board)
        and all(1 <= n <= 60 for n in board)
    )


def test_split_tiers_sizes():
    high, medium, low = split_tiers(RANKINGS)
    assert (len(high), len(medium), len(low)) == (15, 24, 21)
    assert high[0] == 1
    assert low[-1] == 60


@pytest.mark.parametrize("depth,expected", [
    (None, (40, 100)),
    (1000, (10, 100)),
    (15000, (100, 150)),
    (30000, (100, 300)),
])
def test_search_budget(depth, expected):
    assert search_budget(depth) == expected


@pytest.mark.parametrize("depth", [1000, 30000])
def test_search_returns_valid_board(depth):
    result = search(RANKINGS, HOT, [7, 8], {"iteration_depth": depth},
                    rng=np.random.RandomState(3))
    assert _valid(result["numbers"])
    assert 0.0 <= result["fitness"] <= 1.0
    assert result["cancelled"] is False
    assert result["generations_run"] == search_budget(depth)[1]


def test_best_fitness_never_decreases():
    result = search(RANKINGS, HOT, [], {"iteration_depth": 3000},
                    rng=np.random.RandomState(11))
    history = result["history"]
    assert all(b >= a for a, b in zip(history, history[1:]))
    assert result["fitness"] == history[-1]


def test_same_seed_same_board():
    a = search(RANKINGS, HOT, [20], {"iteration_depth": 2000}, rng=np.random.RandomState(5))
    b = search(RANKINGS, HOT, [20], {"iteration_depth": 2000}, rng=np.random.RandomState(5))
    assert a["numbers"] == b["numbers"]
    assert a["history"] == b["history"]


def test_cancel_before_start_stops_after_first_generation():
    event = threading.Event()
    event.set()
    result = search(RANKINGS, HOT, [], {"iteration_depth": 30000},
                    rng=np.random.RandomState(1), cancel_event=event)
    assert result["cancelled"] is True
    assert result["generations_run"] == 1
    assert _valid(result["numbers"])


def test_cancel_midway():
    event = CountingEvent(trip_after=4)
    result = search(RANKINGS, HOT, [], {"iteration_depth": 10000},
                    rng=np.random.RandomState(1), cancel_event=event)
    assert result["cancelled"] is True
    assert result["generations_run"] == 4


def test_initial_population_is_unique_and_valid():
    engine = GeneticSearch(RANKINGS, HOT, [30, 31, 32], {"iteration_depth": 5000},
                           rng=np.random.RandomState(8))
    population = engine.initial_population()
    assert len(population) == engine.population_size
    assert len({tuple(b) for b in population}) == len(population)
    assert all(_valid(b) for b in population)


def test_repair_pads_and_deduplicates():
    engine = GeneticSearch(RANKINGS, HOT, [], {}, rng=np.random.RandomState(2))
    board = engine._repair([4, 4, 9, 9])
    assert _valid(board)
    assert {4, 9} <= set(board)


def test_evaluate_board_rejects_invalid_boards():
    scores = dict(RANKINGS)
    assert evaluate_board([1, 1, 2, 3, 4, 5], scores, set(HOT)) == 0.0
    assert evaluate_board([1, 2, 3, 4, 5], scores, set(HOT)) == 0.0
    assert evaluate_board(None, scores, set(HOT)) == 0.0


def test_cluster_term_follows_setting():
    scores = dict(RANKINGS)
    # passes the cluster spread check
    board = [5, 16, 27, 38, 49, 60]
    with_clusters = evaluate_board(board, scores, set(HOT), use_cluster_analysis=True)
    without = evaluate_board(board, scores, set(HOT), use_cluster_analysis=False)
    assert with_clusters - without == pytest.approx(0.10)
