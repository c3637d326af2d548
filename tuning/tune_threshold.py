#!/usr/bin/env python3
"""Interactive and automated height cutoff tuner."""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Sequence
import sys

CURRENT_DIR = Path(__file__).resolve().parent
REPO_ROOT = CURRENT_DIR.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import numpy as np
import pandas as pd

from heights_classifier import (
    DEFAULT_CUTOFFS,
    DEFAULT_POSITIVE,
    SEX_LEVELS,
    best_cutoff,
    classification_metrics,
    predict_by_cutoff,
    print_metrics,
    sweep_cutoffs,
)
from metrics_utils import safe_makedirs, save_json
from tuning.evaluate_dataset import PROCESSED_DIR, load_split


SWEEP_PATH = Path("artifacts/metrics/cutoff_sweep_train.csv")
CHOSEN_PATH = Path("artifacts/metrics/chosen_cutoff.json")
DEFAULT_AUTO_METRIC = "accuracy"
TUNABLE_METRICS = ("accuracy", "f1", "f_beta", "balanced_accuracy", "youden_j")


def cutoff_metrics(
    df: pd.DataFrame,
    cutoff: float,
    positive: str = DEFAULT_POSITIVE,
    beta: float = 1.0,
) -> Dict[str, float]:
    y_pred = predict_by_cutoff(df["height"], cutoff)
    metrics = {"cutoff": cutoff}
    metrics.update(classification_metrics(df["sex"].to_numpy(), y_pred, positive, beta))
    return metrics


def confusion_matrix_raw(metrics: Dict[str, float]) -> np.ndarray:
    return np.array([[metrics["tn"], metrics["fp"]], [metrics["fn"], metrics["tp"]]])


def confusion_matrix_normalized(cm: np.ndarray) -> np.ndarray:
    norm = cm.astype(float)
    for i in range(norm.shape[0]):
        total = norm[i].sum()
        norm[i] = norm[i] / total if total else 0
    return norm


def print_confusion(metrics: Dict[str, float]) -> None:
    cm = confusion_matrix_raw(metrics)
    cm_norm = confusion_matrix_normalized(cm)
    print("  Confusion matrix (raw, negative class first):")
    print(f"    [[{cm[0,0]}, {cm[0,1]}], [{cm[1,0]}, {cm[1,1]}]]")
    print("  Confusion matrix (normalized by true label):")
    print(f"    [[{cm_norm[0,0]:.3f}, {cm_norm[0,1]:.3f}], [{cm_norm[1,0]:.3f}, {cm_norm[1,1]:.3f}]]")


def load_sweep(path: Path = SWEEP_PATH) -> Optional[pd.DataFrame]:
    if not path.exists():
        return None
    return pd.read_csv(path)


def sweep_matches(sweep_df: pd.DataFrame, positive: str, beta: float, cutoffs) -> bool:
    """True when a cached sweep was produced with the same positive class, beta and grid."""

    if sweep_df.empty or "positive" not in sweep_df.columns or "beta" not in sweep_df.columns:
        return False
    if not (sweep_df["positive"] == positive).all():
        return False
    if not np.allclose(sweep_df["beta"].to_numpy(dtype=float), beta):
        return False
    return sorted(sweep_df["cutoff"].astype(float)) == sorted(float(cutoff) for cutoff in cutoffs)


def maybe_compute_sweep(
    df: pd.DataFrame,
    positive: str = DEFAULT_POSITIVE,
    path: Path = SWEEP_PATH,
    beta: float = 1.0,
    cutoffs: Sequence[float] = DEFAULT_CUTOFFS,
) -> pd.DataFrame:
    existing = load_sweep(path)
    if existing is not None and sweep_matches(existing, positive, beta, cutoffs):
        return existing

    if existing is None:
        print("No cutoff sweep found; computing quickly for reference...")
    else:
        print(f"[WARN] Cached sweep at {path} was built with other settings; recomputing...")
    sweep_df = sweep_cutoffs(df["sex"].to_numpy(), df["height"], cutoffs, positive=positive, beta=beta, progress=True)
    safe_makedirs(path.parent)
    sweep_df.to_csv(path, index=False)
    return sweep_df


def show_grid(df: pd.DataFrame, metric: str, label: str) -> None:
    subset = df.sort_values(by=metric, ascending=False).head(10)
    print(f"Top {len(subset)} cutoffs by {label}:")
    for _, row in subset.iterrows():
        print(f"  cutoff={row['cutoff']:g} in -> {row[metric]:.4f}")


def save_cutoff(cutoff: float, metric: str, source: str, path: Path = CHOSEN_PATH) -> None:
    payload = {
        "cutoff": cutoff,
        "metric": metric,
        "created_utc": datetime.now(timezone.utc).isoformat(),
        "source": source,
    }
    save_json(path, payload)
    print(f"Saved cutoff to {path}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--auto", action="store_true", help="Run in non-interactive auto-tuning mode.")
    parser.add_argument(
        "--metric",
        choices=list(TUNABLE_METRICS),
        default=DEFAULT_AUTO_METRIC,
        help="Metric to maximize when --auto is provided.",
    )
    parser.add_argument(
        "--positive",
        choices=list(SEX_LEVELS),
        default=DEFAULT_POSITIVE,
        help="Class treated as positive.",
    )
    parser.add_argument("--beta", type=float, default=1.0, help="Beta used for the f_beta metric.")
    parser.add_argument(
        "--apply-test",
        action="store_true",
        help="When --auto, also score the test split at the chosen cutoff.",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Persist the auto-selected cutoff to artifacts/metrics.",
    )
    return parser.parse_args()


def auto_mode(
    metric: str,
    positive: str,
    apply_test: bool,
    save_choice: bool,
    beta: float = 1.0,
    processed_dir: Path = PROCESSED_DIR,
    sweep_path: Path = SWEEP_PATH,
    chosen_path: Path = CHOSEN_PATH,
) -> float:
    train_df = load_split("train", positive, processed_dir)
    sweep_df = maybe_compute_sweep(train_df, positive, sweep_path, beta=beta)

    cutoff, metric_value = best_cutoff(sweep_df, metric)
    print(f"[AUTO] Selecting cutoff {cutoff:g} in maximizing {metric}={metric_value:.4f}")
    train_metrics = cutoff_metrics(train_df, cutoff, positive, beta)
    print_metrics("TRAIN", train_metrics)
    print_confusion(train_metrics)

    if apply_test:
        test_df = load_split("test", positive, processed_dir)
        test_metrics = cutoff_metrics(test_df, cutoff, positive, beta)
        print_metrics("TEST", test_metrics)
        print_confusion(test_metrics)

    if save_choice:
        save_cutoff(cutoff, metric, "auto", chosen_path)
    return cutoff


def interactive_mode(
    positive: str,
    beta: float = 1.0,
    processed_dir: Path = PROCESSED_DIR,
    sweep_path: Path = SWEEP_PATH,
    chosen_path: Path = CHOSEN_PATH,
) -> None:
    train_df = load_split("train", positive, processed_dir)
    test_df = load_split("test", positive, processed_dir)
    sweep_df = maybe_compute_sweep(train_df, positive, sweep_path, beta=beta)
    low, high = float(train_df["height"].min()), float(train_df["height"].max())

    print("\nInteractive cutoff tuner ready. Press Ctrl+C to exit any time.")

    while True:
        try:
            user_input = input("Enter a cutoff in inches (or 'grid' to show top suggestions, or 'quit'): ").strip()
        except KeyboardInterrupt:
            print("\nExiting tuner.")
            break

        if not user_input:
            continue
        if user_input.lower() == "quit":
            print("Goodbye!")
            break
        if user_input.lower() == "grid":
            show_grid(sweep_df, "accuracy", "accuracy")
            show_grid(sweep_df, "f1", "F1")
            continue

        try:
            cutoff = float(user_input)
        except ValueError:
            print("Please enter a numeric cutoff, 'grid', or 'quit'.")
            continue

        if not low <= cutoff <= high:
            print(f"Cutoff must be within the observed heights ({low:g}-{high:g} in).")
            continue

        train_metrics = cutoff_metrics(train_df, cutoff, positive, beta)
        print_metrics("TRAIN", train_metrics)
        print_confusion(train_metrics)

        try:
            apply_test = input("Apply to TEST? (y/n): ").strip().lower()
        except KeyboardInterrupt:
            print("\nExiting tuner.")
            break
        if apply_test in {"y", "yes"}:
            test_metrics = cutoff_metrics(test_df, cutoff, positive, beta)
            print_metrics("TEST", test_metrics)
            print_confusion(test_metrics)

        try:
            save_choice = input("Save chosen cutoff? (y/n): ").strip().lower()
        except KeyboardInterrupt:
            print("\nExiting tuner.")
            break
        if save_choice in {"y", "yes"}:
            save_cutoff(cutoff, "manual", "analyst", chosen_path)


if __name__ == "__main__":
    args = parse_args()
    if args.auto:
        auto_mode(args.metric, args.positive, args.apply_test, args.save, beta=args.beta)
    else:
        interactive_mode(args.positive, beta=args.beta)
