#!/usr/bin/env python3
"""Walk through cutoff-based evaluation of predicting sex from height."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, NamedTuple, Optional
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
    HeightCutoffClassifier,
    accuracy_by_sex,
    best_cutoff,
    classification_metrics,
    confusion_table,
    guess_sex,
    height_scores,
    height_summary,
    other_level,
    pr_points_by_cutoff,
    pr_points_by_guessing,
    prepare_frame,
    print_metrics,
    print_rule_comparison,
    roc_points_by_cutoff,
    roc_points_by_guessing,
    score_auc,
    sweep_cutoffs,
)
from metrics_utils import (
    plot_cm,
    plot_height_distribution,
    plot_metric_vs_cutoff,
    plot_pr,
    plot_pr_points,
    plot_roc,
    plot_roc_points,
    safe_makedirs,
    save_json,
    set_seed,
)


PROCESSED_DIR = Path("data/processed")
ARTIFACTS_PLOTS = Path("artifacts/plots")
ARTIFACTS_METRICS = Path("artifacts/metrics")
CUTOFF_SWEEP_PATH = ARTIFACTS_METRICS / "cutoff_sweep_train.csv"
DEFAULT_SEED = 2


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed for guessing baselines.")
    parser.add_argument(
        "--positive",
        choices=list(SEX_LEVELS),
        default=DEFAULT_POSITIVE,
        help="Class treated as positive for sensitivity, precision and F1.",
    )
    parser.add_argument("--beta", type=float, default=1.0, help="Beta for the F-beta sweep column.")
    parser.add_argument(
        "--cutoffs",
        type=float,
        nargs="+",
        default=DEFAULT_CUTOFFS,
        help="Cutoffs (inches) swept on the train split.",
    )
    return parser.parse_args()


def load_split(name: str, positive: str = DEFAULT_POSITIVE, processed_dir: Path = PROCESSED_DIR) -> pd.DataFrame:
    path = Path(processed_dir) / f"{name}.csv"
    if not path.exists():
        raise FileNotFoundError(f"Expected split at {path}. Run tuning.dataset_fetch first.")
    df = pd.read_csv(path, encoding="utf-8", encoding_errors="replace")
    return prepare_frame(df, positive=positive)


@dataclass
class Walkthrough:
    """State shared by the evaluation steps."""

    train: pd.DataFrame
    test: pd.DataFrame
    positive: str = DEFAULT_POSITIVE
    beta: float = 1.0
    seed: int = DEFAULT_SEED
    cutoffs: List[float] = field(default_factory=lambda: list(DEFAULT_CUTOFFS))
    plots_dir: Path = ARTIFACTS_PLOTS
    metrics_dir: Path = ARTIFACTS_METRICS
    progress: bool = False
    results: Dict[str, object] = field(default_factory=dict)
    plots: Dict[str, Path] = field(default_factory=dict)
    sweep: Optional[pd.DataFrame] = None

    def __post_init__(self) -> None:
        self.rng = np.random.default_rng(self.seed)
        self.plots_dir = Path(self.plots_dir)
        self.metrics_dir = Path(self.metrics_dir)

    @property
    def y_test(self) -> np.ndarray:
        return self.test["sex"].to_numpy()

    @property
    def y_train(self) -> np.ndarray:
        return self.train["sex"].to_numpy()

    def plot_path(self, name: str) -> Path:
        path = self.plots_dir / name
        self.plots[path.stem] = path
        return path


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def step_split(wt: Walkthrough) -> None:
    for name, df in (("train", wt.train), ("test", wt.test)):
        ratio = df["y"].mean() if len(df) else float("nan")
        print(f"{name.title():<5} split: {len(df)} rows | {wt.positive} prevalence {ratio:.3f}")
    wt.results["rows"] = {"train": int(len(wt.train)), "test": int(len(wt.test))}
    plot_height_distribution(wt.train, wt.plot_path("height_distribution_train.png"), "Height by sex (train)")


def step_guessing(wt: Walkthrough) -> None:
    y_hat = guess_sex(len(wt.test), 0.5, wt.rng)
    accuracy = float(np.mean(y_hat == wt.y_test))
    print(f"Guessing with p(Male)=0.5 -> test accuracy {accuracy:.3f}")
    wt.results["guessing_accuracy"] = accuracy


def step_summary(wt: Walkthrough) -> None:
    summary = height_summary(wt.train)
    print(summary.round(2).to_string())
    wt.results["height_summary"] = {
        sex: {key: float(value) for key, value in row.items()} for sex, row in summary.iterrows()
    }


def step_two_sd_rule(wt: Walkthrough) -> None:
    classifier = HeightCutoffClassifier.from_two_sd_rule(wt.train)
    y_hat = classifier.predict(wt.test["height"])
    accuracy = float(np.mean(y_hat == wt.y_test))
    print(f"Two-sd rule: predict Male above {classifier.cutoff:g} in -> test accuracy {accuracy:.3f}")
    print()
    print_rule_comparison(
        wt.y_test,
        {
            "Guess p=0.5": guess_sex(len(wt.test), 0.5, wt.rng),
            f"Cutoff {classifier.cutoff:g} in": y_hat,
        },
        wt.positive,
    )
    wt.results["two_sd_rule"] = {"cutoff": classifier.cutoff, "test_accuracy": accuracy}


def _ensure_sweep(wt: Walkthrough) -> pd.DataFrame:
    if wt.sweep is None:
        wt.sweep = sweep_cutoffs(
            wt.y_train,
            wt.train["height"],
            wt.cutoffs,
            positive=wt.positive,
            beta=wt.beta,
            progress=wt.progress,
        )
        sweep_path = wt.metrics_dir / CUTOFF_SWEEP_PATH.name
        safe_makedirs(sweep_path.parent)
        wt.sweep.to_csv(sweep_path, index=False)
    return wt.sweep


def _evaluate_on_test(wt: Walkthrough, label: str, cutoff: float) -> Dict[str, float]:
    y_hat = HeightCutoffClassifier(cutoff).predict(wt.test["height"])
    metrics = {"cutoff": cutoff}
    metrics.update(classification_metrics(wt.y_test, y_hat, wt.positive, wt.beta))
    save_json(wt.metrics_dir / f"test_eval_{label}.json", metrics)
    wt.results.setdefault("test_cutoffs", {})[label] = metrics
    return metrics


def step_accuracy_sweep(wt: Walkthrough) -> None:
    sweep = _ensure_sweep(wt)
    for _, row in sweep.iterrows():
        print(f"  cutoff={row['cutoff']:g} -> accuracy {row['accuracy']:.3f}")
    cutoff, score = best_cutoff(sweep, "accuracy")
    print(f"Best train accuracy {score:.3f} at cutoff {cutoff:g} in")
    metrics = _evaluate_on_test(wt, "accuracy_max", cutoff)
    print(f"Test accuracy at cutoff {cutoff:g} in: {metrics['accuracy']:.3f}")
    wt.results["accuracy_cutoff"] = {"cutoff": cutoff, "train_accuracy": score}
    plot_metric_vs_cutoff(
        sweep, "accuracy", wt.plot_path("accuracy_vs_cutoff.png"), "Accuracy by cutoff (train)", best=cutoff
    )


def step_confusion(wt: Walkthrough) -> None:
    cutoff = wt.results["accuracy_cutoff"]["cutoff"]
    y_hat = HeightCutoffClassifier(cutoff).predict(wt.test["height"])
    print(f"Confusion table at cutoff {cutoff:g} in (test):")
    print(confusion_table(wt.y_test, y_hat).to_string())
    print()
    per_sex = accuracy_by_sex(wt.y_test, y_hat)
    for sex, accuracy in per_sex.items():
        print(f"Accuracy among {sex.lower()}s: {accuracy:.3f}")
    train_prevalence = float(wt.train["y"].mean())
    print(f"{wt.positive} prevalence (train): {train_prevalence:.3f}")
    wt.results["accuracy_by_sex"] = per_sex
    wt.results["train_prevalence"] = train_prevalence
    plot_cm(
        wt.y_test, y_hat, wt.plot_path("cm_test_accuracy_max_raw.png"), f"Test confusion matrix ({cutoff:g} in, raw)"
    )
    plot_cm(
        wt.y_test,
        y_hat,
        wt.plot_path("cm_test_accuracy_max_norm.png"),
        f"Test confusion matrix ({cutoff:g} in, normalized)",
        normalize=True,
    )


def step_sensitivity_specificity(wt: Walkthrough) -> None:
    metrics = wt.results["test_cutoffs"]["accuracy_max"]
    print_metrics(f"TEST ({wt.positive} positive)", metrics)


def step_f1_sweep(wt: Walkthrough) -> None:
    sweep = _ensure_sweep(wt)
    for _, row in sweep.iterrows():
        print(f"  cutoff={row['cutoff']:g} -> F1 {row['f1']:.3f}")
    cutoff, score = best_cutoff(sweep, "f1")
    print(f"Best train F1 {score:.3f} at cutoff {cutoff:g} in")
    metrics = _evaluate_on_test(wt, "f1_max", cutoff)
    print_metrics("TEST", metrics)
    wt.results["f1_cutoff"] = {"cutoff": cutoff, "train_f1": score}
    if wt.beta != 1.0:
        fb_cutoff, fb_score = best_cutoff(sweep, "f_beta")
        print(f"Best train F-beta (beta={wt.beta:g}) {fb_score:.3f} at cutoff {fb_cutoff:g} in")
        _evaluate_on_test(wt, "f_beta_max", fb_cutoff)
        wt.results["f_beta_cutoff"] = {"cutoff": fb_cutoff, "train_f_beta": fb_score, "beta": wt.beta}
    plot_metric_vs_cutoff(sweep, "f1", wt.plot_path("f1_vs_cutoff.png"), "F1 by cutoff (train)", best=cutoff)


def step_roc(wt: Walkthrough) -> None:
    points = pd.concat(
        [
            roc_points_by_guessing(wt.y_test, positive=wt.positive, rng=wt.rng),
            roc_points_by_cutoff(wt.y_test, wt.test["height"], positive=wt.positive),
        ],
        ignore_index=True,
    )
    print(points.round(3).to_string(index=False))
    wt.results["roc_points"] = points.to_dict("records")
    plot_roc_points(points, wt.plot_path("roc_guess_vs_cutoff.png"), "ROC: guessing vs height cutoff (test)")


def step_precision_recall(wt: Walkthrough) -> None:
    for positive in (wt.positive, other_level(wt.positive)):
        points = pd.concat(
            [
                pr_points_by_guessing(wt.y_test, positive=positive, rng=wt.rng),
                pr_points_by_cutoff(wt.y_test, wt.test["height"], positive=positive),
            ],
            ignore_index=True,
        )
        print(f"Precision-recall points with {positive} positive:")
        print(points.round(3).to_string(index=False))
        print()
        wt.results.setdefault("pr_points", {})[positive] = points.to_dict("records")
        plot_pr_points(
            points,
            wt.plot_path(f"pr_guess_vs_cutoff_{positive.lower()}.png"),
            f"Precision-recall, {positive} positive (test)",
        )


def step_auc(wt: Walkthrough) -> None:
    scores = score_auc(wt.y_test, wt.test["height"], wt.positive)
    print(f"Height as a score for {wt.positive}: ROC-AUC {scores['roc_auc']:.3f} | "
          f"average precision {scores['average_precision']:.3f}")
    wt.results["auc"] = scores
    if len(np.unique(wt.test["y"])) > 1:
        y_score = height_scores(wt.test["height"], wt.positive)
        plot_roc(wt.test["y"], y_score, wt.plot_path("roc_height_score.png"), "ROC curve, height score (test)")
        plot_pr(wt.test["y"], y_score, wt.plot_path("pr_height_score.png"), "PR curve, height score (test)")


class Step(NamedTuple):
    key: str
    title: str
    description: str
    run: Callable[[Walkthrough], None]


STEPS: List[Step] = [
    Step(
        "split",
        "Train/test split",
        "The table is partitioned once into equal train and test halves, stratified on sex.",
        step_split,
    ),
    Step(
        "guessing",
        "Guessing baseline",
        "Guess each label with equal probability. Any useful rule has to beat this accuracy.",
        step_guessing,
    ),
    Step(
        "summary",
        "Height by sex",
        "Males are taller on average, so height carries signal about sex.",
        step_summary,
    ),
    Step(
        "two_sd",
        "Two standard deviation rule",
        "Predict Male unless the height is more than two standard deviations below the average male.",
        step_two_sd_rule,
    ),
    Step(
        "accuracy_sweep",
        "Choosing the cutoff by accuracy",
        "Score every cutoff on the train split and keep the most accurate one, then check it on test.",
        step_accuracy_sweep,
    ),
    Step(
        "confusion",
        "Confusion matrix",
        "Overall accuracy hides that most females are misclassified: the data are mostly male.",
        step_confusion,
    ),
    Step(
        "sens_spec",
        "Sensitivity and specificity",
        "Confusion-matrix statistics at the accuracy-maximising cutoff.",
        step_sensitivity_specificity,
    ),
    Step(
        "f1",
        "Choosing the cutoff by F1",
        "The F1-score balances precision and recall, and picks a higher cutoff than accuracy does.",
        step_f1_sweep,
    ),
    Step(
        "roc",
        "ROC curve",
        "Sensitivity against 1 - specificity for guessing and for a range of height cutoffs.",
        step_roc,
    ),
    Step(
        "pr",
        "Precision-recall curves",
        "Precision depends on prevalence, so the curve changes when the positive class is switched.",
        step_precision_recall,
    ),
    Step(
        "auc",
        "Areas under the curves",
        "Treat height as a continuous score and summarise both curves with a single number.",
        step_auc,
    ),
]


def run_walkthrough(wt: Walkthrough, steps: Optional[List[Step]] = None) -> Dict[str, object]:
    for step in steps or STEPS:
        print(f"\n=== {step.title} ===")
        step.run(wt)
    return wt.results


def build_summary(wt: Walkthrough) -> Dict[str, object]:
    summary = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "seed": wt.seed,
        "positive": wt.positive,
        "beta": wt.beta,
        "cutoffs": [float(cutoff) for cutoff in wt.cutoffs],
        "plots": {name: str(path) for name, path in wt.plots.items()},
    }
    summary.update(wt.results)
    return summary


def main() -> None:
    args = parse_args()
    set_seed(args.seed)

    wt = Walkthrough(
        train=load_split("train", args.positive),
        test=load_split("test", args.positive),
        positive=args.positive,
        beta=args.beta,
        seed=args.seed,
        cutoffs=args.cutoffs,
        progress=True,
    )
    run_walkthrough(wt)

    report_path = ARTIFACTS_METRICS / "report.json"
    save_json(report_path, build_summary(wt))
    print(f"\nCutoff sweep saved to {ARTIFACTS_METRICS / CUTOFF_SWEEP_PATH.name}")
    print(f"Summary report saved to {report_path}")


if __name__ == "__main__":
    main()
