#!/usr/bin/env python3
"""Train and evaluate a logistic regression on height as a baseline for the cutoff rule."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict
import sys

CURRENT_DIR = Path(__file__).resolve().parent
REPO_ROOT = CURRENT_DIR.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import joblib
import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import roc_auc_score
from sklearn.model_selection import StratifiedKFold, cross_validate
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from heights_classifier import (
    DEFAULT_POSITIVE,
    SEX_LEVELS,
    classification_metrics,
    other_level,
    print_metrics,
)
from metrics_utils import save_json
from tuning.evaluate_dataset import load_split


ARTIFACTS_DIR = Path("artifacts/metrics")
DEFAULT_SEED = 2


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed for the classifier.")
    parser.add_argument(
        "--positive",
        choices=list(SEX_LEVELS),
        default=DEFAULT_POSITIVE,
        help="Class modelled as y=1.",
    )
    parser.add_argument(
        "--c",
        type=float,
        default=1.0,
        help="Inverse regularization strength for logistic regression.",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.5,
        help="Probability above which the positive class is predicted.",
    )
    parser.add_argument(
        "--cv-folds",
        type=int,
        default=0,
        help="When >0, perform StratifiedKFold cross-validation with the specified number of folds.",
    )
    parser.add_argument(
        "--save-model",
        type=str,
        default="",
        help="Optional path to persist the trained pipeline (e.g., artifacts/models/logreg.joblib).",
    )
    return parser.parse_args()


def prepare_matrix(df: pd.DataFrame) -> tuple[np.ndarray, np.ndarray]:
    X = df[["height"]].to_numpy(dtype=float)
    y = df["y"].to_numpy(dtype=int)
    return X, y


def build_pipeline(c_value: float, seed: int) -> Pipeline:
    clf = LogisticRegression(C=c_value, max_iter=200, random_state=seed)
    return Pipeline(
        [
            ("scaler", StandardScaler(with_mean=True, with_std=True)),
            ("clf", clf),
        ]
    )


def train_model(X: np.ndarray, y: np.ndarray, c_value: float, seed: int) -> Pipeline:
    pipeline = build_pipeline(c_value, seed)
    pipeline.fit(X, y)
    return pipeline


def run_cross_validation(X: np.ndarray, y: np.ndarray, c_value: float, seed: int, folds: int) -> Dict[str, float]:
    if folds <= 1:
        return {}
    print(f"\nRunning {folds}-fold StratifiedKFold cross-validation...")
    skf = StratifiedKFold(n_splits=folds, shuffle=True, random_state=seed)
    scoring = {
        "accuracy": "accuracy",
        "precision": "precision",
        "recall": "recall",
        "f1": "f1",
        "roc_auc": "roc_auc",
    }
    results = cross_validate(
        build_pipeline(c_value, seed),
        X,
        y,
        cv=skf,
        scoring=scoring,
        return_train_score=False,
    )
    summary = {}
    for metric, scores in results.items():
        if not metric.startswith("test_"):
            continue
        name = metric.replace("test_", "")
        summary[name] = float(np.mean(scores))
        print(f"  {name:>9}: {np.mean(scores):.4f} ± {np.std(scores):.4f}")
    return summary


def equivalent_cutoff(model: Pipeline, threshold: float = 0.5) -> float:
    """Height at which the predicted probability crosses ``threshold``."""

    scaler = model.named_steps["scaler"]
    clf = model.named_steps["clf"]
    coef = float(clf.coef_[0][0])
    if coef == 0:
        return float("nan")
    logit = np.log(threshold / (1 - threshold))
    z = (logit - float(clf.intercept_[0])) / coef
    return float(z * scaler.scale_[0] + scaler.mean_[0])


def evaluate_model(
    model: Pipeline,
    df: pd.DataFrame,
    split: str,
    positive: str = DEFAULT_POSITIVE,
    threshold: float = 0.5,
) -> Dict[str, float]:
    X, y = prepare_matrix(df)
    prob = model.predict_proba(X)[:, 1]
    y_pred = np.where(prob >= threshold, positive, other_level(positive))
    metrics = classification_metrics(df["sex"].to_numpy(), y_pred, positive)
    metrics["roc_auc"] = float(roc_auc_score(y, prob)) if len(np.unique(y)) > 1 else float("nan")
    print()
    print_metrics(f"[{split}] logistic regression", metrics)
    print(f"  ROC-AUC={metrics['roc_auc']:.3f}")
    return metrics


def main() -> None:
    args = parse_args()
    train_df = load_split("train", args.positive)
    test_df = load_split("test", args.positive)
    X_train, y_train = prepare_matrix(train_df)
    print(f"Loaded train split with {X_train.shape[0]} rows.")

    cv_summary = run_cross_validation(X_train, y_train, args.c, args.seed, args.cv_folds)

    model = train_model(X_train, y_train, c_value=args.c, seed=args.seed)
    cutoff = equivalent_cutoff(model, args.threshold)
    print(f"\nProbability {args.threshold:.2f} corresponds to a height of {cutoff:.2f} in.")

    results = {
        "positive": args.positive,
        "threshold": args.threshold,
        "equivalent_cutoff": cutoff,
        "cross_validation": cv_summary,
        "train": evaluate_model(model, train_df, "train", args.positive, args.threshold),
        "test": evaluate_model(model, test_df, "test", args.positive, args.threshold),
    }
    save_json(ARTIFACTS_DIR / "logistic_baseline.json", results)

    if args.save_model:
        model_path = Path(args.save_model)
        model_path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump({"model": model, "positive": args.positive}, model_path)
        print(f"\nSaved trained pipeline to {model_path}")


if __name__ == "__main__":
    main()
