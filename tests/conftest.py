import numpy as np
import pandas as pd
import pytest

from megasena_ai.data_loader import generate_synthetic_data


def make_history(draws, start_draw=1000):
    """Build a draw frame from lists of numbers given most recent first."""
    n = len(draws)
    dates = pd.date_range(end="2024-06-29", periods=n, freq="2D")[::-1]
    rows = []
    for i, nums in enumerate(draws):
        row = {"draw_number": start_draw + n - i, "date": dates[i]}
        for j, v in enumerate(sorted(nums)):
            row[f"num{j + 1}"] = v
        rows.append(row)
    return pd.DataFrame(rows)


def history_with_appearances(target, indices, n_draws):
    """
    History of `n_draws` draws where `target` appears exactly at `indices`
    (0 = most recent). Filler numbers rotate through the rest of 1-60.
    """
    others = [n for n in range(1, 61) if n != target]
    draws = []
    for i in range(n_draws):
        start = (i * 5) % len(others)
        filler = [others[(start + k) % len(others)] for k in range(6)]
        if i in indices:
            filler = filler[:5] + [target]
        draws.append(filler)
    return make_history(draws)


@pytest.fixture
def synthetic_history():
    return generate_synthetic_data(n_draws=250, seed=7, end_date="2024-06-29")


@pytest.fixture
def constant_history():
    return make_history([[1, 2, 3, 4, 5, 6]] * 50)


@pytest.fixture
def seeded_rng():
    return np.random.RandomState(1234)
