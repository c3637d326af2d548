#!/usr/bin/env python3
"""Height cutoff classifier and evaluation metrics.

Predicts sex from height with a single cutoff rule (``Male`` when the height
is strictly above the cutoff, ``Female`` otherwise) and scores predictions
with confusion-matrix statistics: accuracy, sensitivity, specificity,
precision, F1 / F-beta, balanced accuracy and Youden's J.  Sweeps over cutoffs
and guessing probabilities provide the points for ROC and precision-recall
curves.  By default ``Female`` is the positive class.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    average_precision_score,
    confusion_matrix,
    roc_auc_score,
)
from tqdm import tqdm


# ---------------------------------------------------------------------------
# Helper data
# ---------------------------------------------------------------------------

SEX_LEVELS: Tuple[str, str] = ("Female", "Male")
DEFAULT_POSITIVE = "Female"
DEFAULT_CUTOFFS: List[int] = list(range(61, 71))
ROC_CUTOFFS: List[int] = [50] + list(range(60, 76)) + [80]
GUESS_PROBABILITIES: np.ndarray = np.round(np.linspace(0, 1, 11), 2)

LABEL_NORMALIZATION = {
    "female": "Female",
    "f": "Female",
    "woman": "Female",
    "women": "Female",
    "male": "Male",
    "m": "Male",
    "man": "Male",
    "men": "Male",
}


# ---------------------------------------------------------------------------
# Data preparation
# ---------------------------------------------------------------------------


def other_level(positive: str) -> str:
    """Return the negative class for ``positive``."""

    if positive not in SEX_LEVELS:
        raise ValueError(f"Positive class must be one of {SEX_LEVELS}, got {positive!r}.")
    return SEX_LEVELS[1] if positive == SEX_LEVELS[0] else SEX_LEVELS[0]


def normalize_sex(values: pd.Series) -> pd.Series:
    labels = values.astype(str).str.strip().str.lower()
    return labels.map(LABEL_NORMALIZATION)


def prepare_frame(df: pd.DataFrame, positive: str = DEFAULT_POSITIVE) -> pd.DataFrame:
    """Validate and clean a raw heights table.

    Labels are normalised to ``Female``/``Male``; rows with unknown labels or
    non-numeric heights are dropped.  A numeric ``y`` column marks the
    positive class.
    """

    missing = [column for column in ("sex", "height") if column not in df.columns]
    if missing:
        raise ValueError(f"Expected columns 'sex' and 'height'; missing {missing}.")

    other_level(positive)
    df = df[["sex", "height"]].copy()
    df["sex"] = normalize_sex(df["sex"])
    df["height"] = pd.to_numeric(df["height"], errors="coerce")

    before = len(df)
    df = df.dropna(subset=["sex", "height"])
    dropped = before - len(df)
    if dropped:
        print(f"[WARN] Dropped {dropped} rows with unknown sex or non-numeric height.")

    df["y"] = (df["sex"] == positive).astype(int)
    return df.reset_index(drop=True)


def height_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Mean, standard deviation and count of height by sex."""

    return df.groupby("sex")["height"].agg(["mean", "std", "count"])


# ---------------------------------------------------------------------------
# Prediction rules
# ---------------------------------------------------------------------------


def predict_by_cutoff(heights: Iterable[float], cutoff: float) -> np.ndarray:
    heights = np.asarray(heights, dtype=float)
    return np.where(heights > cutoff, "Male", "Female")


def guess_sex(
    n: int,
    p_male: float = 0.5,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Guess ``n`` labels, each ``Male`` with probability ``p_male``."""

    if not 0 <= p_male <= 1:
        raise ValueError(f"p_male must be between 0 and 1, got {p_male}.")
    rng = rng if rng is not None else np.random.default_rng()
    return np.where(rng.random(n) < p_male, "Male", "Female")


@dataclass
class HeightCutoffClassifier:
    """Predicts ``Male`` for heights strictly above ``cutoff``."""

    cutoff: float

    def predict(self, heights: Iterable[float]) -> np.ndarray:
        return predict_by_cutoff(heights, self.cutoff)

    @classmethod
    def from_two_sd_rule(cls, df: pd.DataFrame, round_to_inch: bool = True) -> "HeightCutoffClassifier":
        """Cut two standard deviations below the average male height."""

        male_heights = df.loc[df["sex"] == "Male", "height"]
        if male_heights.empty:
            raise ValueError("Two-sd rule needs at least one male height.")
        cutoff = float(male_heights.mean() - 2 * male_heights.std())
        if round_to_inch:
            cutoff = float(round(cutoff))
        return cls(cutoff=cutoff)


# ---------------------------------------------------------------------------
# Metric calculator
# ---------------------------------------------------------------------------


def confusion_counts(
    y_true: Iterable[str],
    y_pred: Iterable[str],
    positive: str = DEFAULT_POSITIVE,
) -> Dict[str, int]:
    negative = other_level(positive)
    cm = confusion_matrix(np.asarray(y_true), np.asarray(y_pred), labels=[negative, positive])
    tn, fp, fn, tp = cm.ravel()
    return {"tp": int(tp), "fp": int(fp), "tn": int(tn), "fn": int(fn)}


def confusion_table(y_true: Iterable[str], y_pred: Iterable[str]) -> pd.DataFrame:
    """Cross tab of predictions (rows) against reference labels (columns)."""

    prediction = pd.Categorical(np.asarray(y_pred), categories=list(SEX_LEVELS))
    reference = pd.Categorical(np.asarray(y_true), categories=list(SEX_LEVELS))
    return pd.crosstab(
        prediction,
        reference,
        rownames=["Prediction"],
        colnames=["Reference"],
        dropna=False,
    )


def f_beta(precision: float, recall: float, beta: float = 1.0) -> float:
    """Weighted harmonic mean of precision and recall."""

    if precision <= 0 or recall <= 0:
        return 0.0
    weight = beta ** 2
    return 1.0 / (weight / (1 + weight) / recall + 1 / (1 + weight) / precision)


def prevalence(y_true: Iterable[str], positive: str = DEFAULT_POSITIVE) -> float:
    y_true = np.asarray(y_true)
    return float(np.mean(y_true == positive)) if len(y_true) else 0.0


def accuracy_by_sex(y_true: Iterable[str], y_pred: Iterable[str]) -> Dict[str, float]:
    """Accuracy computed separately within each reference class."""

    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    results: Dict[str, float] = {}
    for level in SEX_LEVELS:
        mask = y_true == level
        if mask.any():
            results[level] = float(np.mean(y_pred[mask] == level))
    return results


def classification_metrics(
    y_true: Iterable[str],
    y_pred: Iterable[str],
    positive: str = DEFAULT_POSITIVE,
    beta: float = 1.0,
) -> Dict[str, float]:
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    counts = confusion_counts(y_true, y_pred, positive)
    tp, fp, tn, fn = counts["tp"], counts["fp"], counts["tn"], counts["fn"]

    sensitivity = tp / (tp + fn) if (tp + fn) else 0.0
    specificity = tn / (tn + fp) if (tn + fp) else 0.0
    precision = tp / (tp + fp) if (tp + fp) else 0.0

    metrics = {
        "accuracy": float(accuracy_score(y_true, y_pred)) if len(y_true) else 0.0,
        "sensitivity": sensitivity,
        "specificity": specificity,
        "precision": precision,
        "f1": f_beta(precision, sensitivity, 1.0),
        "f_beta": f_beta(precision, sensitivity, beta),
        "beta": beta,
        "balanced_accuracy": (sensitivity + specificity) / 2,
        "youden_j": sensitivity + specificity - 1,
        "prevalence": prevalence(y_true, positive),
    }
    metrics.update(counts)
    return metrics


def print_metrics(name: str, metrics: Dict[str, float]) -> None:
    cutoff = metrics.get("cutoff")
    header = f"{name} metrics" + (f" @ cutoff {cutoff:.1f} in" if cutoff is not None else "")
    print(f"{header}:")
    print(
        f"  Accuracy={metrics['accuracy']:.3f} | Sensitivity={metrics['sensitivity']:.3f} | "
        f"Specificity={metrics['specificity']:.3f} | Precision={metrics['precision']:.3f}"
    )
    print(
        f"  F1={metrics['f1']:.3f} | Balanced Acc={metrics['balanced_accuracy']:.3f} | "
        f"Youden's J={metrics['youden_j']:.3f} | Prevalence={metrics['prevalence']:.3f}"
    )
    print(f"  TP={metrics['tp']} FP={metrics['fp']} TN={metrics['tn']} FN={metrics['fn']}")


def print_rule_comparison(
    y_true: Iterable[str],
    predictions: Dict[str, Iterable[str]],
    positive: str = DEFAULT_POSITIVE,
) -> pd.DataFrame:
    """Print a side-by-side metric table for several prediction rules."""

    table = pd.DataFrame(
        {name: classification_metrics(y_true, y_pred, positive) for name, y_pred in predictions.items()}
    ).T
    columns = ["accuracy", "sensitivity", "specificity", "precision", "f1"]

    print(f"{'Rule':<22} | " + " | ".join(f"{column:>11}" for column in columns))
    print("-" * (25 + 14 * len(columns)))
    for name, row in table.iterrows():
        print(f"{name:<22} | " + " | ".join(f"{row[column]:>11.3f}" for column in columns))
    return table[columns]


# ---------------------------------------------------------------------------
# Sweeps and curves
# ---------------------------------------------------------------------------


def sweep_cutoffs(
    y_true: Iterable[str],
    heights: Iterable[float],
    cutoffs: Optional[Sequence[float]] = None,
    positive: str = DEFAULT_POSITIVE,
    beta: float = 1.0,
    progress: bool = False,
) -> pd.DataFrame:
    """Score the cutoff rule at every cutoff."""

    cutoffs = DEFAULT_CUTOFFS if cutoffs is None else cutoffs
    y_true = np.asarray(y_true)
    heights = np.asarray(heights, dtype=float)
    records = []
    for cutoff in tqdm(cutoffs, desc="Sweeping cutoffs", disable=not progress):
        y_pred = predict_by_cutoff(heights, cutoff)
        record = {"cutoff": float(cutoff), "positive": positive}
        record.update(classification_metrics(y_true, y_pred, positive, beta))
        records.append(record)
    return pd.DataFrame(records)


def best_cutoff(sweep_df: pd.DataFrame, metric: str) -> Tuple[float, float]:
    """Cutoff maximising ``metric``; ties go to the smallest cutoff."""

    if sweep_df.empty:
        raise ValueError("Cutoff sweep produced no rows to evaluate.")
    if metric not in sweep_df.columns:
        raise ValueError(f"Metric '{metric}' unavailable in sweep results.")
    ordered = sweep_df.sort_values(by=[metric, "cutoff"], ascending=[False, True])
    row = ordered.iloc[0]
    return float(row["cutoff"]), float(row[metric])


def roc_points_by_cutoff(
    y_true: Iterable[str],
    heights: Iterable[float],
    cutoffs: Optional[Sequence[float]] = None,
    positive: str = DEFAULT_POSITIVE,
) -> pd.DataFrame:
    cutoffs = ROC_CUTOFFS if cutoffs is None else cutoffs
    heights = np.asarray(heights, dtype=float)
    records = []
    for cutoff in cutoffs:
        metrics = classification_metrics(y_true, predict_by_cutoff(heights, cutoff), positive)
        records.append(
            {
                "method": "Height cutoff",
                "cutoff": float(cutoff),
                "fpr": 1 - metrics["specificity"],
                "tpr": metrics["sensitivity"],
            }
        )
    return pd.DataFrame(records)


def roc_points_by_guessing(
    y_true: Iterable[str],
    probs: Optional[Sequence[float]] = None,
    positive: str = DEFAULT_POSITIVE,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    probs = GUESS_PROBABILITIES if probs is None else probs
    y_true = np.asarray(y_true)
    rng = rng if rng is not None else np.random.default_rng()
    records = []
    for p_male in probs:
        metrics = classification_metrics(y_true, guess_sex(len(y_true), p_male, rng), positive)
        records.append(
            {
                "method": "Guessing",
                "p_male": float(p_male),
                "fpr": 1 - metrics["specificity"],
                "tpr": metrics["sensitivity"],
            }
        )
    return pd.DataFrame(records)


def _pr_record(
    method: str,
    key: str,
    value: float,
    y_true: np.ndarray,
    y_pred: np.ndarray,
    positive: str,
) -> Optional[Dict[str, float]]:
    metrics = classification_metrics(y_true, y_pred, positive)
    # precision is undefined without positive predictions
    if metrics["tp"] + metrics["fp"] == 0:
        return None
    return {
        "method": method,
        key: float(value),
        "recall": metrics["sensitivity"],
        "precision": metrics["precision"],
    }


def pr_points_by_cutoff(
    y_true: Iterable[str],
    heights: Iterable[float],
    cutoffs: Optional[Sequence[float]] = None,
    positive: str = DEFAULT_POSITIVE,
) -> pd.DataFrame:
    cutoffs = ROC_CUTOFFS if cutoffs is None else cutoffs
    y_true = np.asarray(y_true)
    heights = np.asarray(heights, dtype=float)
    records = [
        _pr_record("Height cutoff", "cutoff", cutoff, y_true, predict_by_cutoff(heights, cutoff), positive)
        for cutoff in cutoffs
    ]
    return pd.DataFrame([record for record in records if record is not None])


def pr_points_by_guessing(
    y_true: Iterable[str],
    probs: Optional[Sequence[float]] = None,
    positive: str = DEFAULT_POSITIVE,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    probs = GUESS_PROBABILITIES if probs is None else probs
    y_true = np.asarray(y_true)
    rng = rng if rng is not None else np.random.default_rng()
    records = [
        _pr_record("Guessing", "p_male", p_male, y_true, guess_sex(len(y_true), p_male, rng), positive)
        for p_male in probs
    ]
    return pd.DataFrame([record for record in records if record is not None])


def height_scores(heights: Iterable[float], positive: str = DEFAULT_POSITIVE) -> np.ndarray:
    """Continuous score that grows with the likelihood of ``positive``."""

    heights = np.asarray(heights, dtype=float)
    other_level(positive)
    return -heights if positive == "Female" else heights


def score_auc(
    y_true: Iterable[str],
    heights: Iterable[float],
    positive: str = DEFAULT_POSITIVE,
) -> Dict[str, float]:
    y_binary = (np.asarray(y_true) == positive).astype(int)
    if len(np.unique(y_binary)) < 2:
        return {"roc_auc": float("nan"), "average_precision": float("nan")}
    scores = height_scores(heights, positive)
    return {
        "roc_auc": float(roc_auc_score(y_binary, scores)),
        "average_precision": float(average_precision_score(y_binary, scores)),
    }


# ---------------------------------------------------------------------------
# Command line
# ---------------------------------------------------------------------------


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify heights (inches) with a cutoff rule.")
    parser.add_argument("heights", nargs="*", type=float, help="Heights in inches to classify.")
    parser.add_argument("--cutoff", type=float, default=64.0, help="Predict Male above this height.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    classifier = HeightCutoffClassifier(cutoff=args.cutoff)

    if args.heights:
        for height, label in zip(args.heights, classifier.predict(args.heights)):
            print(f"{height:6.1f} in -> {label}")
        return

    print(f"Height cutoff classifier (Male above {classifier.cutoff:.1f} in). Enter 'quit' to exit.")
    while True:
        try:
            user_input = input("Height in inches: ").strip()
        except KeyboardInterrupt:
            print("\nGoodbye!")
            break
        if user_input.lower() == "quit":
            break
        try:
            height = float(user_input)
        except ValueError:
            print("Please enter a numeric height or 'quit'.")
            continue
        print(f"  -> {classifier.predict([height])[0]}")


if __name__ == "__main__":
    main()
