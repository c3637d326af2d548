#!/usr/bin/env python3
"""Shared helpers for seeding, artefact persistence and evaluation plots."""

from __future__ import annotations

import json
import os
import random
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.metrics import (
    auc,
    confusion_matrix,
    precision_recall_curve,
    roc_curve,
)

from heights_classifier import SEX_LEVELS


def set_seed(seed: int = 2) -> None:
    """Seed python and numpy RNGs for reproducibility."""

    random.seed(seed)
    np.random.seed(seed)


def safe_makedirs(path: os.PathLike | str) -> None:
    """Create directories recursively if missing."""

    Path(path).mkdir(parents=True, exist_ok=True)


def save_json(path: os.PathLike | str, obj: Any) -> None:
    """Persist JSON to disk with helpful defaults."""

    target = Path(path)
    safe_makedirs(target.parent)
    with target.open("w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, sort_keys=True, default=_json_default)


def _json_default(value: Any) -> Any:
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, np.floating):
        return float(value)
    if isinstance(value, np.ndarray):
        return value.tolist()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _save_figure(fig: plt.Figure, out_path: os.PathLike | str) -> None:
    fig.tight_layout()
    out_path = Path(out_path)
    safe_makedirs(out_path.parent)
    fig.savefig(out_path)
    plt.close(fig)


def plot_roc(
    y_true: Iterable[int],
    y_score: Iterable[float],
    out_path: os.PathLike | str,
    title: str,
) -> float:
    """Plot ROC curve from continuous scores and return the computed AUC."""

    fpr, tpr, _ = roc_curve(y_true, y_score)
    auc_score = float(auc(fpr, tpr))

    fig, ax = plt.subplots(figsize=(6, 5))
    ax.plot(fpr, tpr, label=f"AUC = {auc_score:.3f}")
    ax.plot([0, 1], [0, 1], linestyle="--", color="gray")
    ax.set_xlim([0, 1])
    ax.set_ylim([0, 1])
    ax.set_xlabel("False Positive Rate")
    ax.set_ylabel("True Positive Rate")
    ax.set_title(title)
    ax.legend(loc="lower right")
    _save_figure(fig, out_path)

    return auc_score


def plot_pr(
    y_true: Iterable[int],
    y_score: Iterable[float],
    out_path: os.PathLike | str,
    title: str,
) -> float:
    """Plot precision-recall curve and return area under curve."""

    precision, recall, _ = precision_recall_curve(y_true, y_score)
    auc_score = float(auc(recall, precision))

    fig, ax = plt.subplots(figsize=(6, 5))
    ax.plot(recall, precision, label=f"Area = {auc_score:.3f}")
    ax.set_xlim([0, 1])
    ax.set_ylim([0, 1])
    ax.set_xlabel("Recall")
    ax.set_ylabel("Precision")
    ax.set_title(title)
    ax.legend(loc="lower left")
    _save_figure(fig, out_path)

    return auc_score


def plot_metric_vs_cutoff(
    sweep_df: pd.DataFrame,
    metric: str,
    out_path: os.PathLike | str,
    title: str,
    best: Optional[float] = None,
) -> None:
    """Plot one sweep metric against the height cutoff."""

    fig, ax = plt.subplots(figsize=(6, 4))
    ax.plot(sweep_df["cutoff"], sweep_df[metric], marker="o")
    if best is not None:
        ax.axvline(best, linestyle="--", color="gray", label=f"best = {best:g} in")
        ax.legend(loc="lower right")
    ax.set_xlabel("Cutoff (inches)")
    ax.set_ylabel(metric.replace("_", " ").title())
    ax.set_title(title)
    _save_figure(fig, out_path)


def plot_roc_points(
    points: pd.DataFrame,
    out_path: os.PathLike | str,
    title: str,
    annotate: str = "cutoff",
) -> None:
    """Plot TPR against FPR for each ``method`` in ``points``."""

    fig, ax = plt.subplots(figsize=(6, 5))
    for method, group in points.groupby("method", sort=False):
        ax.plot(group["fpr"], group["tpr"], marker="o", label=method)
        if annotate in group.columns and group[annotate].notna().any():
            for _, row in group.iterrows():
                ax.annotate(
                    f"{row[annotate]:g}",
                    (row["fpr"], row["tpr"]),
                    textcoords="offset points",
                    xytext=(4, -8),
                    fontsize=7,
                )
    ax.plot([0, 1], [0, 1], linestyle="--", color="gray")
    ax.set_xlim([0, 1])
    ax.set_ylim([0, 1])
    ax.set_xlabel("1 - Specificity (FPR)")
    ax.set_ylabel("Sensitivity (TPR)")
    ax.set_title(title)
    ax.legend(loc="lower right")
    _save_figure(fig, out_path)


def plot_pr_points(
    points: pd.DataFrame,
    out_path: os.PathLike | str,
    title: str,
) -> None:
    """Plot precision against recall for each ``method`` in ``points``."""

    fig, ax = plt.subplots(figsize=(6, 5))
    for method, group in points.groupby("method", sort=False):
        ordered = group.sort_values("recall")
        ax.plot(ordered["recall"], ordered["precision"], marker="o", label=method)
    ax.set_xlim([0, 1])
    ax.set_ylim([0, 1])
    ax.set_xlabel("Recall")
    ax.set_ylabel("Precision")
    ax.set_title(title)
    ax.legend(loc="lower left")
    _save_figure(fig, out_path)


def plot_height_distribution(
    df: pd.DataFrame,
    out_path: os.PathLike | str,
    title: str,
    cutoff: Optional[float] = None,
) -> None:
    """Overlayed height histograms per sex, optionally marking a cutoff."""

    fig, ax = plt.subplots(figsize=(6, 4))
    bins = np.arange(np.floor(df["height"].min()), np.ceil(df["height"].max()) + 1)
    for level in SEX_LEVELS:
        heights = df.loc[df["sex"] == level, "height"]
        if not heights.empty:
            ax.hist(heights, bins=bins, alpha=0.5, label=level)
    if cutoff is not None:
        ax.axvline(cutoff, linestyle="--", color="black", label=f"cutoff = {cutoff:g} in")
    ax.set_xlabel("Height (inches)")
    ax.set_ylabel("Count")
    ax.set_title(title)
    ax.legend(loc="upper left")
    _save_figure(fig, out_path)


def plot_cm(
    y_true: Iterable[str],
    y_pred: Iterable[str],
    out_path: os.PathLike | str,
    title: str,
    normalize: bool = False,
    labels: Sequence[str] = SEX_LEVELS,
) -> None:
    """Plot confusion matrix heatmap."""

    cm = confusion_matrix(np.asarray(y_true), np.asarray(y_pred), labels=list(labels))
    if normalize:
        cm = cm.astype(float)
        row_sums = cm.sum(axis=1, keepdims=True)
        with np.errstate(invalid="ignore"):
            cm = np.divide(cm, row_sums, out=np.zeros_like(cm), where=row_sums != 0)

    fig, ax = plt.subplots(figsize=(5, 4))
    im = ax.imshow(cm, interpolation="nearest", cmap="Blues")
    ax.figure.colorbar(im, ax=ax)
    ax.set_xlabel("Predicted label")
    ax.set_ylabel("True label")
    ax.set_title(title)
    ax.set_xticks(range(len(labels)))
    ax.set_yticks(range(len(labels)))
    ax.set_xticklabels(labels)
    ax.set_yticklabels(labels)

    fmt = ".2f" if normalize else "d"
    thresh = cm.max() / 2 if cm.size else 0
    for i in range(cm.shape[0]):
        for j in range(cm.shape[1]):
            value = format(cm[i, j], fmt)
            color = "white" if cm[i, j] > thresh else "black"
            ax.text(j, i, value, ha="center", va="center", color=color)

    _save_figure(fig, out_path)


__all__ = [
    "plot_cm",
    "plot_height_distribution",
    "plot_metric_vs_cutoff",
    "plot_pr",
    "plot_pr_points",
    "plot_roc",
    "plot_roc_points",
    "safe_makedirs",
    "save_json",
    "set_seed",
]
