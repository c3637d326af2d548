#!/usr/bin/env python3
"""One-click pipeline runner for preparing data, evaluating cutoffs, and rendering the report."""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import List

CURRENT_DIR = Path(__file__).resolve().parent
REPO_ROOT = CURRENT_DIR.parent


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=2, help="Random seed shared across all steps.")
    parser.add_argument(
        "--source",
        default="",
        help="Path or URL of the heights CSV. When omitted, a simulated table is used.",
    )
    parser.add_argument(
        "--positive",
        choices=["Female", "Male"],
        default="Female",
        help="Class treated as positive in every step.",
    )
    parser.add_argument(
        "--tune-metric",
        choices=["accuracy", "f1", "f_beta", "balanced_accuracy", "youden_j"],
        default="accuracy",
        help="Metric that the auto tuner will maximize.",
    )
    parser.add_argument("--skip-tune", action="store_true", help="Skip the cutoff tuning step.")
    parser.add_argument("--skip-linear", action="store_true", help="Skip the logistic regression baseline.")
    parser.add_argument("--run-tests", action="store_true", help="Run unit tests after the report.")
    parser.add_argument(
        "--tests-target",
        default="tests",
        help="Test module or discovery target passed to unittest when --run-tests is enabled.",
    )
    return parser.parse_args()


def run_step(title: str, command: List[str]) -> None:
    print(f"\n[orchestrator] {title}")
    print(f"[orchestrator] Running: {' '.join(command)}")
    subprocess.run(command, check=True, cwd=REPO_ROOT)


def build_commands(args: argparse.Namespace, python_exe: str) -> List[tuple]:
    common = ["--seed", str(args.seed), "--positive", args.positive]

    fetch_cmd = [python_exe, "-m", "tuning.dataset_fetch", "--seed", str(args.seed), "--positive", args.positive]
    fetch_cmd.extend(["--source", args.source] if args.source else ["--simulate"])
    steps = [
        ("Preparing heights dataset...", fetch_cmd),
        ("Evaluating cutoff rules...", [python_exe, "-m", "tuning.evaluate_dataset", *common]),
    ]

    if not args.skip_tune:
        steps.append(
            (
                f"Auto-tuning cutoff (metric={args.tune_metric})...",
                [
                    python_exe,
                    "-m",
                    "tuning.tune_threshold",
                    "--auto",
                    "--metric",
                    args.tune_metric,
                    "--positive",
                    args.positive,
                    "--apply-test",
                    "--save",
                ],
            )
        )

    if not args.skip_linear:
        steps.append(
            ("Fitting logistic regression baseline...", [python_exe, "-m", "tuning.train_linear", *common])
        )

    steps.append(("Rendering Markdown report...", [python_exe, "-m", "tuning.render_report", *common]))

    if args.run_tests:
        steps.append(("Running regression tests...", [python_exe, "-m", "unittest", args.tests_target, "-v"]))
    return steps


def main() -> None:
    args = parse_args()
    for title, command in build_commands(args, sys.executable):
        run_step(title, command)
    if args.skip_tune:
        print("[orchestrator] Tuning step skipped as requested.")
    print("\n[orchestrator] Workflow complete.")


if __name__ == "__main__":
    main()
