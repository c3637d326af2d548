#!/usr/bin/env python3
"""Render the evaluation walk-through as a Markdown notebook with captured output and plots."""

from __future__ import annotations

import argparse
import inspect
import os
from contextlib import redirect_stdout
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path
from typing import List, Optional
import sys

CURRENT_DIR = Path(__file__).resolve().parent
REPO_ROOT = CURRENT_DIR.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from heights_classifier import DEFAULT_CUTOFFS, DEFAULT_POSITIVE, SEX_LEVELS
from metrics_utils import safe_makedirs, save_json, set_seed
from tuning.evaluate_dataset import (
    ARTIFACTS_METRICS,
    ARTIFACTS_PLOTS,
    DEFAULT_SEED,
    STEPS,
    Step,
    Walkthrough,
    build_summary,
    load_split,
)


REPORT_PATH = Path("artifacts/report.md")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed for guessing baselines.")
    parser.add_argument(
        "--positive",
        choices=list(SEX_LEVELS),
        default=DEFAULT_POSITIVE,
        help="Class treated as positive.",
    )
    parser.add_argument("--beta", type=float, default=1.0, help="Beta for the F-beta sweep column.")
    parser.add_argument(
        "--cutoffs",
        type=float,
        nargs="+",
        default=DEFAULT_CUTOFFS,
        help="Cutoffs (inches) swept on the train split.",
    )
    parser.add_argument("--out", type=str, default=str(REPORT_PATH), help="Where to write the Markdown report.")
    return parser.parse_args()


def render_step(step: Step, wt: Walkthrough, report_dir: Path) -> List[str]:
    """Run one step and return its Markdown: the step source, its captured output and new plots."""

    plots_before = set(wt.plots)
    buffer = StringIO()
    with redirect_stdout(buffer):
        step.run(wt)
    output = buffer.getvalue().rstrip()

    lines = [f"## {step.title}", "", step.description, ""]
    lines.extend(["```python", inspect.getsource(step.run).rstrip(), "```", ""])
    if output:
        lines.extend(["```text", output, "```", ""])
    for name, path in wt.plots.items():
        if name in plots_before:
            continue
        relative = Path(os.path.relpath(path, report_dir)).as_posix()
        lines.extend([f"![{name}]({relative})", ""])
    return lines


def render_report(
    wt: Walkthrough,
    out_path: Path = REPORT_PATH,
    steps: Optional[List[Step]] = None,
) -> Path:
    out_path = Path(out_path)
    safe_makedirs(out_path.parent)

    lines = [
        "# Predicting sex from height: evaluating cutoff rules",
        "",
        f"_Generated {datetime.now(timezone.utc):%Y-%m-%d %H:%M} UTC | seed {wt.seed} | "
        f"positive class {wt.positive}_",
        "",
    ]
    for step in steps or STEPS:
        lines.extend(render_step(step, wt, out_path.parent))

    out_path.write_text("\n".join(lines), encoding="utf-8")
    return out_path


def main() -> None:
    args = parse_args()
    set_seed(args.seed)

    wt = Walkthrough(
        train=load_split("train", args.positive),
        test=load_split("test", args.positive),
        positive=args.positive,
        beta=args.beta,
        seed=args.seed,
        cutoffs=list(args.cutoffs),
        plots_dir=ARTIFACTS_PLOTS,
        metrics_dir=ARTIFACTS_METRICS,
    )
    out_path = render_report(wt, Path(args.out))
    save_json(ARTIFACTS_METRICS / "report.json", build_summary(wt))
    print(f"Report written to {out_path}")


if __name__ == "__main__":
    main()
