"""
Mega-Sena Historical Data Loader

Reads historical Mega-Sena results from a local CSV or a JSON dump of the
public results API and normalizes them to the draw schema used everywhere
else in the package. Can also generate a synthetic history for demos.

Draw schema:
    draw_number, date, day_of_week, num1-num6, prize, winners,
    accumulated, is_synthetic

Numbers range 1-60. Draws occur Tuesday, Thursday and Saturday.
"""
import json
import os
import random
import warnings
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

DATA_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "data")
CSV_PATH = os.path.join(DATA_DIR, "megasena_results.csv")

NUM_COLS = [f"num{i}" for i in range(1, 7)]
NUM_RANGE = 60
DRAW_WEEKDAYS = (1, 3, 5)  # Tuesday, Thursday, Saturday


def _parse_br_date(value):
    """Parse a DD/MM/YYYY string; fall back to pandas for anything else."""
    if isinstance(value, str) and value.count("/") == 2:
        return pd.to_datetime(value, format="%d/%m/%Y")
    return pd.to_datetime(value)


def normalize_api_records(records):
    """
    Convert results-API shaped dicts to the draw DataFrame.

    Each record looks like::

        {"concurso": 2700, "data": "15/03/2024",
         "dezenas": ["04", "15", "23", "34", "47", "58"],
         "premiacoes": [{"faixa": 1, "ganhadores": 0, "valorPremio": 0.0}],
         "acumulou": true}
    """
    rows = []
    for rec in records:
        dezenas = rec.get("dezenas") or []
        nums = sorted(int(d) for d in dezenas)
        if len(nums) != 6:
            warnings.warn(
                f"Skipping draw {rec.get('concurso')}: expected 6 numbers, got {len(nums)}"
            )
            continue

        premiacoes = rec.get("premiacoes") or []
        top_tier = premiacoes[0] if premiacoes else {}
        winners = int(top_tier.get("ganhadores", 0) or 0)
        prize = float(top_tier.get("valorPremio", 0) or 0)
        accumulated = rec.get("acumulou")
        if accumulated is None:
            accumulated = winners == 0

        date = _parse_br_date(rec.get("data"))
        row = {
            "draw_number": int(rec["concurso"]),
            "date": date,
            "day_of_week": date.day_name(),
            "prize": prize,
            "winners": winners,
            "accumulated": bool(accumulated),
            "is_synthetic": False,
        }
        for i, n in enumerate(nums):
            row[f"num{i + 1}"] = n
        rows.append(row)

    df = pd.DataFrame(rows)
    if len(df) == 0:
        return pd.DataFrame(columns=["draw_number", "date", "day_of_week"] + NUM_COLS)
    return df.sort_values("draw_number", ascending=False).reset_index(drop=True)


def _normalize_csv_df(df):
    """Map loosely named CSV columns onto our schema."""
    df = df.copy()
    df.columns = df.columns.str.lower().str.strip()

    if not all(c in df.columns for c in NUM_COLS):
        # Try common alternative spellings
        for prefix in ("bola", "dezena", "n", "number"):
            alt = [f"{prefix}{i}" for i in range(1, 7)]
            if all(c in df.columns for c in alt):
                df = df.rename(columns=dict(zip(alt, NUM_COLS)))
                break
        else:
            raise ValueError(f"Could not find six number columns in {list(df.columns)}")

    if "draw_number" not in df.columns:
        for c in ("concurso", "draw", "draw_no", "drawno"):
            if c in df.columns:
                df = df.rename(columns={c: "draw_number"})
                break
        else:
            df["draw_number"] = range(1, len(df) + 1)

    if "date" not in df.columns and "data" in df.columns:
        df = df.rename(columns={"data": "date"})
    if "date" in df.columns:
        df["date"] = df["date"].apply(_parse_br_date)
        df["day_of_week"] = df["date"].dt.day_name()

    for c in NUM_COLS:
        df[c] = df[c].astype(int)
    df["draw_number"] = df["draw_number"].astype(int)
    if "is_synthetic" not in df.columns:
        df["is_synthetic"] = False

    return df.sort_values("draw_number", ascending=False).reset_index(drop=True)


def validate_draws(df):
    """
    Check every draw holds exactly 6 distinct numbers in [1, 60].
    Raises ValueError naming the first offending draw.
    """
    missing = [c for c in NUM_COLS if c not in df.columns]
    if missing:
        raise ValueError(f"Draw data is missing columns: {missing}")

    values = df[NUM_COLS].to_numpy()
    for row_idx, nums in enumerate(values):
        draw_id = df["draw_number"].iloc[row_idx] if "draw_number" in df.columns else row_idx
        if pd.isnull(nums).any():
            raise ValueError(f"Draw {draw_id} has missing numbers")
        nums = [int(n) for n in nums]
        if len(set(nums)) != 6:
            raise ValueError(f"Draw {draw_id} has repeated numbers: {nums}")
        if min(nums) < 1 or max(nums) > NUM_RANGE:
            raise ValueError(f"Draw {draw_id} has numbers outside 1-{NUM_RANGE}: {nums}")
    return True


def filter_by_date(df, start_date=None, end_date=None):
    """Keep draws between start_date and end_date (inclusive). Either bound may be None."""
    df = df.copy()
    if not pd.api.types.is_datetime64_any_dtype(df["date"]):
        df["date"] = pd.to_datetime(df["date"])
    mask = pd.Series(True, index=df.index)
    if start_date is not None:
        mask &= df["date"] >= pd.Timestamp(start_date)
    if end_date is not None:
        mask &= df["date"] <= pd.Timestamp(end_date)
    return df[mask].reset_index(drop=True)


def generate_synthetic_data(n_draws=300, seed=None, end_date=None):
    """
    Generate a uniform random Mega-Sena history of `n_draws` draws,
    most recent first. Dates fall on Tuesday/Thursday/Saturday going back
    from `end_date` (today by default).
    """
    rng = np.random.RandomState(seed)
    py_rng = random.Random(seed)
    if end_date is None:
        end_date = datetime.now()
    current = pd.Timestamp(end_date).date()

    dates = []
    while len(dates) < n_draws:
        if current.weekday() in DRAW_WEEKDAYS:
            dates.append(current)
        current -= timedelta(days=1)

    rows = []
    for i, d in enumerate(dates):
        nums = sorted(int(n) for n in rng.choice(np.arange(1, NUM_RANGE + 1), size=6, replace=False))
        winners = py_rng.choices([0, 1, 2, 3], weights=[70, 22, 6, 2])[0]
        row = {
            "draw_number": n_draws - i,
            "date": pd.Timestamp(d),
            "day_of_week": pd.Timestamp(d).day_name(),
            "prize": float(py_rng.choice([3_000_000, 10_000_000, 35_000_000, 60_000_000, 100_000_000])),
            "winners": winners,
            "accumulated": winners == 0,
            "is_synthetic": True,
        }
        for j, n in enumerate(nums):
            row[f"num{j + 1}"] = n
        rows.append(row)

    return pd.DataFrame(rows)


def load_data(path=CSV_PATH):
    """
    Load the Mega-Sena dataset from a CSV or a JSON dump of the results API.
    Returns draws ordered most recent first.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"No results file at {path}")

    if path.lower().endswith(".json"):
        with open(path, encoding="utf-8") as fh:
            records = json.load(fh)
        if not isinstance(records, list):
            raise ValueError("Expected a JSON list of draw records")
        df = normalize_api_records(records)
    else:
        df = _normalize_csv_df(pd.read_csv(path))

    print(f"[Loader] Loaded {len(df)} draws from {os.path.basename(path)}")
    return df


def save_data(df, path=CSV_PATH):
    """Write draws to CSV, creating the data directory if needed."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    out = df.copy()
    out["date"] = pd.to_datetime(out["date"]).dt.strftime("%Y-%m-%d")
    out.to_csv(path, index=False)
    print(f"[Loader] Saved {len(out)} draws to {path}")
    return path
