#!/usr/bin/env python3
"""Load, clean, and split the heights dataset into train and test halves."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Tuple
import sys

CURRENT_DIR = Path(__file__).resolve().parent
REPO_ROOT = CURRENT_DIR.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from heights_classifier import DEFAULT_POSITIVE, SEX_LEVELS, height_summary, prepare_frame
from metrics_utils import safe_makedirs, set_seed


RAW_DIR = Path("data/raw")
INTERIM_DIR = Path("data/interim")
PROCESSED_DIR = Path("data/processed")
DEFAULT_SEED = 2
TEST_SIZE = 0.5

# Published summary of the reference heights table (self-reported, inches).
SIMULATION_PARAMS = {
    "Female": {"n": 238, "mean": 64.94, "sd": 3.76},
    "Male": {"n": 812, "mean": 69.31, "sd": 3.61},
}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed for the partition.")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--source",
        type=str,
        default="",
        help="Path or URL of a CSV with 'sex' and 'height' columns.",
    )
    source.add_argument(
        "--simulate",
        action="store_true",
        help="Draw a synthetic heights table with the reference group sizes, means and sds.",
    )
    parser.add_argument(
        "--positive",
        choices=list(SEX_LEVELS),
        default=DEFAULT_POSITIVE,
        help="Class encoded as y=1.",
    )
    return parser.parse_args()


def ensure_dirs() -> None:
    for directory in (RAW_DIR, INTERIM_DIR, PROCESSED_DIR):
        safe_makedirs(directory)


def simulate_heights(seed: int = DEFAULT_SEED) -> pd.DataFrame:
    """Normal draws per sex, rounded to a tenth of an inch."""

    rng = np.random.default_rng(seed)
    frames = []
    for sex, params in SIMULATION_PARAMS.items():
        heights = rng.normal(params["mean"], params["sd"], size=params["n"])
        frames.append(pd.DataFrame({"sex": sex, "height": np.round(heights, 1)}))
    df = pd.concat(frames, ignore_index=True)
    return df.sample(frac=1, random_state=seed).reset_index(drop=True)


def load_source(source: str) -> pd.DataFrame:
    """Read a heights CSV from a local path or URL."""

    is_url = source.startswith(("http://", "https://"))
    if not is_url and not Path(source).exists():
        raise FileNotFoundError(f"Could not find heights CSV at {source}.")
    df = pd.read_csv(source, encoding="utf-8", encoding_errors="replace")
    df.columns = [str(column).strip().lower() for column in df.columns]
    return df


def split_heights(
    df: pd.DataFrame,
    seed: int = DEFAULT_SEED,
    test_size: float = TEST_SIZE,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Split into train/test halves stratified on sex."""

    train, test = train_test_split(
        df,
        test_size=test_size,
        stratify=df["sex"],
        random_state=seed,
    )
    return train.reset_index(drop=True), test.reset_index(drop=True)


def main() -> None:
    args = parse_args()
    set_seed(args.seed)
    ensure_dirs()

    if args.simulate:
        print(f"Simulating heights table (seed={args.seed})...")
        raw_df = simulate_heights(args.seed)
        raw_path = RAW_DIR / "heights_simulated.csv"
    else:
        print(f"Reading heights table from '{args.source}'...")
        raw_df = load_source(args.source)
        raw_path = RAW_DIR / "heights.csv"
    raw_df.to_csv(raw_path, index=False)
    print(f"Raw data copied to {raw_path}")

    print("Cleaning data...")
    df = prepare_frame(raw_df, positive=args.positive)

    total = len(df)
    class_counts = df["sex"].value_counts().to_dict()
    formatted_counts = {cls: f"{count} ({count / total:.1%})" for cls, count in class_counts.items()}
    print(f"Total rows: {total}")
    print("Class distribution:", formatted_counts)
    for sex, stats in height_summary(df).iterrows():
        print(f"  - {sex}: mean {stats['mean']:.2f} in | sd {stats['std']:.2f} in")

    interim_path = INTERIM_DIR / "cleaned.csv"
    df.to_csv(interim_path, index=False)
    print(f"Saved cleaned data to {interim_path}")

    train_df, test_df = split_heights(df, args.seed)
    for name, split in [("train", train_df), ("test", test_df)]:
        out_path = PROCESSED_DIR / f"{name}.csv"
        split.to_csv(out_path, index=False)
        pos = split["y"].mean()
        print(f"{name.title()} split -> {len(split)} rows | {args.positive} ratio: {pos:.2%} (saved to {out_path})")


if __name__ == "__main__":
    main()
