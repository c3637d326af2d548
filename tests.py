#!/usr/bin/env python3
"""
Test Suite for the Height Cutoff Evaluation Toolkit
Covers the cutoff rule, the metric calculator, sweeps, curves and the report pipeline.
"""

import argparse
import json
import os
import sys
import tempfile
import unittest
from contextlib import redirect_stdout
from io import StringIO
from pathlib import Path
from unittest import mock

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
from sklearn.metrics import f1_score

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import heights_classifier
from heights_classifier import (
    DEFAULT_CUTOFFS,
    HeightCutoffClassifier,
    accuracy_by_sex,
    best_cutoff,
    classification_metrics,
    confusion_counts,
    confusion_table,
    f_beta,
    guess_sex,
    height_summary,
    other_level,
    pr_points_by_cutoff,
    pr_points_by_guessing,
    predict_by_cutoff,
    prepare_frame,
    print_rule_comparison,
    roc_points_by_cutoff,
    roc_points_by_guessing,
    score_auc,
    sweep_cutoffs,
)
from metrics_utils import plot_cm, plot_roc_points, save_json
from tuning.dataset_fetch import load_source, simulate_heights, split_heights
from tuning.evaluate_dataset import STEPS, Walkthrough, build_summary, load_split, run_walkthrough
from tuning.orchestrator import build_commands
from tuning.render_report import parse_args as parse_report_args
from tuning.render_report import render_report
from tuning.train_linear import equivalent_cutoff, evaluate_model, prepare_matrix, train_model
from tuning.tune_threshold import (
    auto_mode,
    confusion_matrix_normalized,
    cutoff_metrics,
    interactive_mode,
    maybe_compute_sweep,
    save_cutoff,
)


class TestSamples:
    """Small hand-checked samples."""

    # Cutoff 64 -> TP=2 FN=1 FP=1 TN=4 with Female positive
    SEX = np.array(["Female", "Female", "Female", "Male", "Male", "Male", "Male", "Male"])
    HEIGHTS = np.array([60.0, 62.0, 66.0, 63.0, 68.0, 70.0, 72.0, 65.0])

    SEPARABLE_SEX = np.array(["Female", "Female", "Male", "Male"])
    SEPARABLE_HEIGHTS = np.array([60.0, 61.0, 70.0, 71.0])

    RAW_TABLE = pd.DataFrame(
        {
            "sex": ["female", " M ", "Man", "x", "F"],
            "height": ["60", "70", "abc", 65, 62.5],
        }
    )


def quiet(func, *args, **kwargs):
    """Call ``func`` with stdout captured."""

    with redirect_stdout(StringIO()):
        return func(*args, **kwargs)


class TestCutoffRule(unittest.TestCase):
    """The threshold classifier and guessing baseline."""

    def test_cutoff_is_strict(self):
        predictions = predict_by_cutoff([63.9, 64.0, 64.1], 64)
        self.assertEqual(list(predictions), ["Female", "Female", "Male"])

    def test_classifier_matches_rule(self):
        classifier = HeightCutoffClassifier(cutoff=64)
        np.testing.assert_array_equal(
            classifier.predict(TestSamples.HEIGHTS),
            predict_by_cutoff(TestSamples.HEIGHTS, 64),
        )

    def test_two_sd_rule_rounds_to_inch(self):
        df = pd.DataFrame({"sex": ["Male", "Male", "Male", "Female"], "height": [68.0, 70.0, 72.0, 50.0]})
        self.assertEqual(HeightCutoffClassifier.from_two_sd_rule(df).cutoff, 66.0)

    def test_two_sd_rule_without_rounding(self):
        df = pd.DataFrame({"sex": ["Male", "Male", "Male"], "height": [69.0, 70.5, 71.0]})
        classifier = HeightCutoffClassifier.from_two_sd_rule(df, round_to_inch=False)
        expected = df["height"].mean() - 2 * df["height"].std()
        self.assertAlmostEqual(classifier.cutoff, expected)

    def test_two_sd_rule_needs_males(self):
        df = pd.DataFrame({"sex": ["Female"], "height": [60.0]})
        with self.assertRaises(ValueError):
            HeightCutoffClassifier.from_two_sd_rule(df)

    def test_guessing_extremes(self):
        rng = np.random.default_rng(0)
        self.assertTrue((guess_sex(50, 0.0, rng) == "Female").all())
        self.assertTrue((guess_sex(50, 1.0, rng) == "Male").all())

    def test_guessing_is_reproducible(self):
        first = guess_sex(100, 0.5, np.random.default_rng(2))
        second = guess_sex(100, 0.5, np.random.default_rng(2))
        np.testing.assert_array_equal(first, second)

    def test_guessing_rejects_bad_probability(self):
        with self.assertRaises(ValueError):
            guess_sex(10, 1.5)

    def test_command_line_classifies_heights(self):
        output = StringIO()
        argv = ["heights_classifier.py", "--cutoff", "64", "63", "65"]
        with mock.patch.object(sys, "argv", argv), redirect_stdout(output):
            heights_classifier.main()
        lines = output.getvalue().splitlines()
        self.assertEqual(lines, ["  63.0 in -> Female", "  65.0 in -> Male"])

    def test_command_line_prompt_loop(self):
        output = StringIO()
        with mock.patch.object(sys, "argv", ["heights_classifier.py"]), mock.patch(
            "builtins.input", side_effect=["tall", "70", "quit"]
        ), redirect_stdout(output):
            heights_classifier.main()
        self.assertIn("Please enter a numeric height", output.getvalue())
        self.assertIn("  -> Male", output.getvalue())


class TestMetricCalculator(unittest.TestCase):
    """Confusion-matrix statistics against hand-computed values."""

    def setUp(self):
        self.y_pred = predict_by_cutoff(TestSamples.HEIGHTS, 64)

    def test_confusion_counts_female_positive(self):
        counts = confusion_counts(TestSamples.SEX, self.y_pred, "Female")
        self.assertEqual(counts, {"tp": 2, "fp": 1, "tn": 4, "fn": 1})

    def test_confusion_counts_male_positive(self):
        counts = confusion_counts(TestSamples.SEX, self.y_pred, "Male")
        self.assertEqual(counts, {"tp": 4, "fp": 1, "tn": 2, "fn": 1})

    def test_classification_metrics(self):
        metrics = classification_metrics(TestSamples.SEX, self.y_pred, "Female")
        self.assertAlmostEqual(metrics["accuracy"], 0.75)
        self.assertAlmostEqual(metrics["sensitivity"], 2 / 3)
        self.assertAlmostEqual(metrics["specificity"], 0.8)
        self.assertAlmostEqual(metrics["precision"], 2 / 3)
        self.assertAlmostEqual(metrics["f1"], 2 / 3)
        self.assertAlmostEqual(metrics["balanced_accuracy"], (2 / 3 + 0.8) / 2)
        self.assertAlmostEqual(metrics["youden_j"], 2 / 3 + 0.8 - 1)
        self.assertAlmostEqual(metrics["prevalence"], 3 / 8)

    def test_f1_agrees_with_sklearn(self):
        for positive in ("Female", "Male"):
            metrics = classification_metrics(TestSamples.SEX, self.y_pred, positive)
            expected = f1_score(TestSamples.SEX, self.y_pred, pos_label=positive)
            self.assertAlmostEqual(metrics["f1"], expected)

    def test_f_beta(self):
        self.assertAlmostEqual(f_beta(0.5, 1.0, 1.0), 2 / 3)
        self.assertAlmostEqual(f_beta(0.5, 1.0, 2.0), 5 * 0.5 / (4 * 0.5 + 1.0))
        self.assertEqual(f_beta(0.0, 1.0), 0.0)

    def test_undefined_ratios_are_zero(self):
        all_male = np.array(["Male"] * len(TestSamples.SEX))
        metrics = classification_metrics(TestSamples.SEX, all_male, "Female")
        self.assertEqual(metrics["precision"], 0.0)
        self.assertEqual(metrics["sensitivity"], 0.0)
        self.assertEqual(metrics["f1"], 0.0)
        self.assertEqual(metrics["specificity"], 1.0)

    def test_confusion_table_layout(self):
        table = confusion_table(TestSamples.SEX, self.y_pred)
        self.assertEqual(table.loc["Female", "Female"], 2)
        self.assertEqual(table.loc["Female", "Male"], 1)
        self.assertEqual(table.loc["Male", "Female"], 1)
        self.assertEqual(table.loc["Male", "Male"], 4)

    def test_accuracy_by_sex(self):
        per_sex = accuracy_by_sex(TestSamples.SEX, self.y_pred)
        self.assertAlmostEqual(per_sex["Female"], 2 / 3)
        self.assertAlmostEqual(per_sex["Male"], 0.8)

    def test_other_level(self):
        self.assertEqual(other_level("Female"), "Male")
        self.assertEqual(other_level("Male"), "Female")
        with self.assertRaises(ValueError):
            other_level("Other")

    def test_rule_comparison_table(self):
        table = quiet(
            print_rule_comparison,
            TestSamples.SEX,
            {"cutoff 64": self.y_pred, "all male": np.array(["Male"] * 8)},
        )
        self.assertEqual(list(table.index), ["cutoff 64", "all male"])
        self.assertAlmostEqual(table.loc["all male", "accuracy"], 5 / 8)


class TestDataPreparation(unittest.TestCase):
    """Cleaning, simulation and splitting."""

    def test_prepare_frame_normalises_and_drops(self):
        output = StringIO()
        with redirect_stdout(output):
            df = prepare_frame(TestSamples.RAW_TABLE)
        self.assertEqual(list(df["sex"]), ["Female", "Male", "Female"])
        self.assertEqual(list(df["y"]), [1, 0, 1])
        self.assertIn("[WARN] Dropped 2 rows", output.getvalue())

    def test_prepare_frame_male_positive(self):
        df = quiet(prepare_frame, TestSamples.RAW_TABLE, positive="Male")
        self.assertEqual(list(df["y"]), [0, 1, 0])

    def test_prepare_frame_requires_columns(self):
        with self.assertRaises(ValueError):
            prepare_frame(pd.DataFrame({"sex": ["Male"]}))

    def test_simulation_sizes_and_reproducibility(self):
        df = simulate_heights(2)
        self.assertEqual(len(df), 1050)
        self.assertEqual(df["sex"].value_counts().to_dict(), {"Male": 812, "Female": 238})
        pd.testing.assert_frame_equal(df, simulate_heights(2))

    def test_height_summary(self):
        summary = height_summary(simulate_heights(2))
        self.assertGreater(summary.loc["Male", "mean"], summary.loc["Female", "mean"])
        self.assertEqual(int(summary.loc["Female", "count"]), 238)

    def test_stratified_half_split(self):
        df = quiet(prepare_frame, simulate_heights(2))
        train, test = split_heights(df, seed=2)
        self.assertEqual(len(train), 525)
        self.assertEqual(len(test), 525)
        self.assertEqual(int((test["sex"] == "Female").sum()), 119)
        train_again, _ = split_heights(df, seed=2)
        pd.testing.assert_frame_equal(train, train_again)

    def test_missing_split_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_split("train", processed_dir=Path(tmp))

    def test_missing_source_raises(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                load_source(str(Path(tmp) / "missing.csv"))


class TestSweepsAndCurves(unittest.TestCase):
    """Cutoff sweeps, best-cutoff selection and curve points."""

    def test_sweep_columns(self):
        sweep = sweep_cutoffs(TestSamples.SEX, TestSamples.HEIGHTS, [61, 64, 67])
        self.assertEqual(list(sweep["cutoff"]), [61.0, 64.0, 67.0])
        for column in ("accuracy", "sensitivity", "specificity", "precision", "f1", "tp", "fn"):
            self.assertIn(column, sweep.columns)

    def test_best_cutoff_ties_go_to_smallest(self):
        sweep = sweep_cutoffs(TestSamples.SEX, TestSamples.HEIGHTS, [61, 64, 67])
        cutoff, score = best_cutoff(sweep, "accuracy")
        self.assertEqual(cutoff, 61.0)
        self.assertAlmostEqual(score, 0.75)

    def test_best_cutoff_by_f1(self):
        sweep = sweep_cutoffs(TestSamples.SEX, TestSamples.HEIGHTS, [61, 64, 67])
        cutoff, score = best_cutoff(sweep, "f1")
        self.assertEqual(cutoff, 67.0)
        self.assertAlmostEqual(score, 0.75)

    def test_best_cutoff_errors(self):
        sweep = sweep_cutoffs(TestSamples.SEX, TestSamples.HEIGHTS, [64])
        with self.assertRaises(ValueError):
            best_cutoff(sweep, "auc")
        with self.assertRaises(ValueError):
            best_cutoff(sweep.iloc[0:0], "accuracy")

    def test_default_cutoffs(self):
        self.assertEqual(DEFAULT_CUTOFFS, list(range(61, 71)))

    def test_roc_points_by_cutoff_endpoints(self):
        points = roc_points_by_cutoff(TestSamples.SEX, TestSamples.HEIGHTS, [50, 80])
        self.assertEqual(list(points["tpr"]), [0.0, 1.0])
        self.assertEqual(list(points["fpr"]), [0.0, 1.0])
        self.assertTrue((points["method"] == "Height cutoff").all())

    def test_roc_points_by_guessing_endpoints(self):
        points = roc_points_by_guessing(TestSamples.SEX, [0.0, 1.0], rng=np.random.default_rng(1))
        self.assertEqual(list(points["tpr"]), [1.0, 0.0])
        self.assertEqual(list(points["fpr"]), [1.0, 0.0])

    def test_pr_points_drop_undefined_precision(self):
        points = pr_points_by_cutoff(TestSamples.SEX, TestSamples.HEIGHTS, [50, 64, 80])
        self.assertEqual(list(points["cutoff"]), [64.0, 80.0])
        last = points.iloc[-1]
        self.assertAlmostEqual(last["precision"], 3 / 8)
        self.assertAlmostEqual(last["recall"], 1.0)

    def test_pr_points_male_positive(self):
        points = pr_points_by_guessing(TestSamples.SEX, [0.0, 1.0], positive="Male", rng=np.random.default_rng(1))
        self.assertEqual(list(points["p_male"]), [1.0])
        self.assertAlmostEqual(points.iloc[0]["precision"], 5 / 8)

    def test_score_auc_separable(self):
        scores = score_auc(TestSamples.SEPARABLE_SEX, TestSamples.SEPARABLE_HEIGHTS, "Female")
        self.assertAlmostEqual(scores["roc_auc"], 1.0)
        self.assertAlmostEqual(scores["average_precision"], 1.0)
        scores = score_auc(TestSamples.SEPARABLE_SEX, TestSamples.SEPARABLE_HEIGHTS, "Male")
        self.assertAlmostEqual(scores["roc_auc"], 1.0)

    def test_score_auc_single_class(self):
        scores = score_auc(["Male", "Male"], [60.0, 70.0])
        self.assertTrue(np.isnan(scores["roc_auc"]))


class TestArtifacts(unittest.TestCase):
    """Plots, JSON persistence and the tuner helpers."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_plot_helpers_write_files(self):
        y_pred = predict_by_cutoff(TestSamples.HEIGHTS, 64)
        plot_cm(TestSamples.SEX, y_pred, self.root / "cm.png", "cm", normalize=True)
        points = roc_points_by_cutoff(TestSamples.SEX, TestSamples.HEIGHTS, [60, 64, 68])
        plot_roc_points(points, self.root / "nested" / "roc.png", "roc")
        self.assertTrue((self.root / "cm.png").exists())
        self.assertTrue((self.root / "nested" / "roc.png").exists())

    def test_save_json_handles_numpy(self):
        save_json(self.root / "out.json", {"count": np.int64(3), "rate": np.float64(0.5)})
        payload = json.loads((self.root / "out.json").read_text(encoding="utf-8"))
        self.assertEqual(payload, {"count": 3, "rate": 0.5})

    def test_tuner_sweep_is_cached(self):
        df = pd.DataFrame({"sex": TestSamples.SEX, "height": TestSamples.HEIGHTS})
        path = self.root / "sweep.csv"
        first = quiet(maybe_compute_sweep, df, "Female", path)
        self.assertTrue(path.exists())
        second = maybe_compute_sweep(df, "Female", path)
        self.assertEqual(len(first), len(second))

    def test_tuner_recomputes_sweep_for_other_positive_class(self):
        df = pd.DataFrame({"sex": TestSamples.SEX, "height": TestSamples.HEIGHTS})
        path = self.root / "sweep.csv"
        sweep_cutoffs(df["sex"], df["height"], positive="Male").to_csv(path, index=False)

        sweep = quiet(maybe_compute_sweep, df, "Female", path)
        expected = sweep_cutoffs(df["sex"], df["height"], positive="Female")
        self.assertTrue((sweep["positive"] == "Female").all())
        np.testing.assert_allclose(sweep["f1"], expected["f1"])
        self.assertTrue((pd.read_csv(path)["positive"] == "Female").all())

    def test_tuner_recomputes_sweep_for_other_beta_or_grid(self):
        df = pd.DataFrame({"sex": TestSamples.SEX, "height": TestSamples.HEIGHTS})
        path = self.root / "sweep.csv"
        quiet(maybe_compute_sweep, df, "Female", path)

        output = StringIO()
        with redirect_stdout(output):
            sweep = maybe_compute_sweep(df, "Female", path, beta=2.0)
        self.assertIn("recomputing", output.getvalue())
        np.testing.assert_allclose(sweep["beta"], 2.0)

        sweep = quiet(maybe_compute_sweep, df, "Female", path, beta=2.0, cutoffs=[62, 64])
        self.assertEqual(list(sweep["cutoff"]), [62.0, 64.0])

    def write_processed_splits(self):
        df = quiet(prepare_frame, simulate_heights(2))
        train, test = split_heights(df, seed=2)
        processed = self.root / "processed"
        processed.mkdir()
        train[["sex", "height"]].to_csv(processed / "train.csv", index=False)
        test[["sex", "height"]].to_csv(processed / "test.csv", index=False)
        return processed

    def test_auto_mode_selects_and_saves_cutoff(self):
        processed = self.write_processed_splits()
        chosen_path = self.root / "metrics" / "chosen_cutoff.json"
        output = StringIO()
        with redirect_stdout(output):
            cutoff = auto_mode(
                "accuracy",
                "Female",
                apply_test=True,
                save_choice=True,
                processed_dir=processed,
                sweep_path=self.root / "metrics" / "sweep.csv",
                chosen_path=chosen_path,
            )
        self.assertIn(cutoff, [float(value) for value in DEFAULT_CUTOFFS])
        self.assertIn("[AUTO] Selecting cutoff", output.getvalue())
        self.assertIn("TEST", output.getvalue())

        payload = json.loads(chosen_path.read_text(encoding="utf-8"))
        self.assertEqual(payload["cutoff"], cutoff)
        self.assertEqual(payload["metric"], "accuracy")
        self.assertEqual(payload["source"], "auto")
        self.assertIn("created_utc", payload)

    def test_interactive_mode_rejects_out_of_range_cutoff(self):
        processed = self.write_processed_splits()
        output = StringIO()
        with mock.patch("builtins.input", side_effect=["40", "quit"]), redirect_stdout(output):
            interactive_mode(
                "Female",
                processed_dir=processed,
                sweep_path=self.root / "metrics" / "sweep.csv",
                chosen_path=self.root / "metrics" / "chosen_cutoff.json",
            )
        self.assertIn("Cutoff must be within the observed heights", output.getvalue())
        self.assertNotIn("TRAIN", output.getvalue())
        self.assertFalse((self.root / "metrics" / "chosen_cutoff.json").exists())

    def test_tuner_metrics_and_normalized_confusion(self):
        df = pd.DataFrame({"sex": TestSamples.SEX, "height": TestSamples.HEIGHTS})
        metrics = cutoff_metrics(df, 64)
        self.assertEqual(metrics["cutoff"], 64)
        norm = confusion_matrix_normalized(np.array([[4, 1], [0, 0]]))
        np.testing.assert_allclose(norm, [[0.8, 0.2], [0.0, 0.0]])

    def test_save_cutoff(self):
        path = self.root / "chosen.json"
        quiet(save_cutoff, 64.0, "accuracy", "auto", path)
        payload = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(payload["cutoff"], 64.0)
        self.assertEqual(payload["source"], "auto")


class TestWalkthrough(unittest.TestCase):
    """End-to-end run on simulated data."""

    @classmethod
    def setUpClass(cls):
        df = quiet(prepare_frame, simulate_heights(2))
        cls.train, cls.test = split_heights(df, seed=2)

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def make_walkthrough(self, **kwargs):
        return Walkthrough(
            train=self.train,
            test=self.test,
            plots_dir=self.root / "plots",
            metrics_dir=self.root / "metrics",
            **kwargs,
        )

    def test_full_walkthrough(self):
        wt = self.make_walkthrough()
        results = quiet(run_walkthrough, wt)

        accuracy_cutoff = results["accuracy_cutoff"]["cutoff"]
        self.assertIn(accuracy_cutoff, [float(cutoff) for cutoff in DEFAULT_CUTOFFS])
        self.assertGreater(results["test_cutoffs"]["accuracy_max"]["accuracy"], results["guessing_accuracy"])
        self.assertIn("f1_max", results["test_cutoffs"])
        self.assertGreater(results["auc"]["roc_auc"], 0.5)
        self.assertEqual(set(results["pr_points"]), {"Female", "Male"})

        self.assertTrue((self.root / "metrics" / "cutoff_sweep_train.csv").exists())
        self.assertTrue((self.root / "metrics" / "test_eval_accuracy_max.json").exists())
        for path in wt.plots.values():
            self.assertTrue(path.exists(), f"Missing plot {path}")

        summary = build_summary(wt)
        self.assertEqual(summary["positive"], "Female")
        json.dumps(summary, default=str)

    def test_f_beta_step(self):
        wt = self.make_walkthrough(beta=2.0)
        results = quiet(run_walkthrough, wt)
        self.assertIn("f_beta_max", results["test_cutoffs"])

    def test_rendered_report(self):
        wt = self.make_walkthrough()
        out_path = render_report(wt, self.root / "report.md")
        text = out_path.read_text(encoding="utf-8")
        for step in STEPS:
            self.assertIn(f"## {step.title}", text)
        self.assertIn("```python", text)
        self.assertIn("def step_roc(wt", text)
        self.assertIn("```text", text)
        self.assertIn("![roc_guess_vs_cutoff](plots/roc_guess_vs_cutoff.png)", text)

    def test_report_cutoff_flag(self):
        with mock.patch.object(sys, "argv", ["render_report.py", "--cutoffs", "62", "63.5"]):
            args = parse_report_args()
        self.assertEqual(args.cutoffs, [62.0, 63.5])
        with mock.patch.object(sys, "argv", ["render_report.py"]):
            self.assertEqual(list(parse_report_args().cutoffs), list(DEFAULT_CUTOFFS))

    def test_rendered_report_uses_walkthrough_cutoffs(self):
        wt = self.make_walkthrough(cutoffs=[62.0, 66.0])
        render_report(wt, self.root / "report.md")
        sweep = pd.read_csv(self.root / "metrics" / "cutoff_sweep_train.csv")
        self.assertEqual(list(sweep["cutoff"]), [62.0, 66.0])

    def test_logistic_baseline(self):
        X, y = prepare_matrix(self.train)
        model = train_model(X, y, c_value=1.0, seed=2)
        self.assertTrue(55 < equivalent_cutoff(model) < 70)
        metrics = quiet(evaluate_model, model, self.test, "test")
        self.assertGreater(metrics["roc_auc"], 0.7)


class TestOrchestrator(unittest.TestCase):
    """Command assembly for the one-click runner."""

    def make_args(self, **overrides):
        values = {
            "seed": 2,
            "source": "",
            "positive": "Female",
            "tune_metric": "accuracy",
            "skip_tune": False,
            "skip_linear": False,
            "run_tests": False,
            "tests_target": "tests",
        }
        values.update(overrides)
        return argparse.Namespace(**values)

    def test_simulated_source_by_default(self):
        commands = build_commands(self.make_args(), "python")
        fetch = commands[0][1]
        self.assertIn("--simulate", fetch)
        self.assertEqual(commands[-1][1][2], "tuning.render_report")

    def test_skip_flags(self):
        commands = build_commands(self.make_args(skip_tune=True, skip_linear=True, source="h.csv"), "python")
        modules = [command[2] for _, command in commands]
        self.assertEqual(modules, ["tuning.dataset_fetch", "tuning.evaluate_dataset", "tuning.render_report"])
        self.assertIn("h.csv", commands[0][1])


def main():
    """Run all tests and print a short summary."""
    print("🧪 HEIGHT CUTOFF TOOLKIT - TEST SUITE")
    print("=" * 60)

    test_loader = unittest.TestLoader()
    test_suite = unittest.TestSuite()
    test_classes = [
        TestCutoffRule,
        TestMetricCalculator,
        TestDataPreparation,
        TestSweepsAndCurves,
        TestArtifacts,
        TestWalkthrough,
        TestOrchestrator,
    ]
    for test_class in test_classes:
        test_suite.addTests(test_loader.loadTestsFromTestCase(test_class))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(test_suite)

    print(f"\n📋 TEST RESULTS SUMMARY")
    print("=" * 30)
    print(f"Tests run: {result.testsRun}")
    print(f"Failures: {len(result.failures)}")
    print(f"Errors: {len(result.errors)}")

    if result.wasSuccessful():
        print(f"\n✅ ALL TESTS PASSED!")
        return 0
    print(f"\n❌ Some tests failed. Please review the output above.")
    return 1


if __name__ == "__main__":
    sys.exit(main())
