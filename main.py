from __future__ import annotations

"""
CLI entrypoint: load a CSV (or generate a synthetic data set), train a basis
model, a logistic classifier or a layered network, and print its evaluation.
"""

import argparse
from pathlib import Path

import numpy as np

from basislearn import LayeredNetwork, linear_regressor, logistic_classifier
from basislearn.basis import ACTIVATIONS
from basislearn.constants import DEFAULT_LEARNING_RATE, DEFAULT_MAX_ITER, DEFAULT_TOL
from basislearn.data_prep import load_binary_classification_data, make_synthetic_dataset, sequential_split
from basislearn.errors import BasisLearnError
from basislearn.metrics import compute_classification_metrics, roc_curve
from basislearn.plotting import plot_roc_curve


def describe_data(X_train: np.ndarray, y_train: np.ndarray, X_test: np.ndarray):
    """Print a short summary of dataset size and balance."""
    print(f"Train size: {len(X_train)}, Test size: {len(X_test)}, features: {X_train.shape[1]}")
    if len(y_train):
        print(f"Positive rate (train): {float(np.mean(y_train)):.3f}")


def print_metrics(label: str, metrics: dict):
    """Nicely format the metric dict produced by compute_classification_metrics."""
    cm = metrics["confusion_matrix"]
    print(
        f"[{label}] Acc {metrics['accuracy']:.3f} | "
        f"Prec {metrics['precision']:.3f} | Rec {metrics['recall']:.3f} | "
        f"F1 {metrics['f1']:.3f} | ROC-AUC {metrics['roc_auc']:.3f}"
    )
    print(f"    Confusion matrix [[TN, FP], [FN, TP]]: {cm.tolist()}")


def _int_list(text: str) -> list[int]:
    return [int(part.strip()) for part in text.split(",") if part.strip()]


def build_arg_parser():
    """CLI parser with knobs for the data source, the model and its training."""
    parser = argparse.ArgumentParser(
        description="Train a basis-function model and evaluate it as a binary classifier."
    )
    parser.add_argument("--csv-path", type=Path, default=None, help="Omit to use synthetic data.")
    parser.add_argument(
        "--classes",
        type=str,
        default="0,1",
        help="Comma-separated label values mapped to classes 0 and 1.",
    )
    parser.add_argument("--skip", type=int, default=0, help="Leading columns to ignore.")
    parser.add_argument("--split", type=float, default=80.0, help="Percent of rows used for training.")
    parser.add_argument("--label-at-start", action="store_true", help="Label is the first column.")
    parser.add_argument("--clean", action="store_true", help="Replace zero features by the column median.")
    parser.add_argument("--scale", action="store_true", help="Min-max scale the features.")
    parser.add_argument("--samples", type=int, default=500, help="Synthetic data set size.")
    parser.add_argument("--features", type=int, default=4, help="Synthetic feature count.")
    parser.add_argument(
        "--model",
        choices=["logistic", "linear", "network"],
        default="logistic",
        help=(
            "Model to train. Linear outputs are unbounded; the report clips them "
            "into the label range and the ROC/AUC treats them as probabilities."
        ),
    )
    parser.add_argument(
        "--basis",
        type=str,
        default="constant,identity",
        help="Comma-separated basis function names; the first one is the bias.",
    )
    parser.add_argument("--activation", choices=sorted(ACTIVATIONS), default="sigmoid")
    parser.add_argument("--lr", type=float, default=DEFAULT_LEARNING_RATE, help="Learning rate for GD.")
    parser.add_argument("--max-iter", type=int, default=DEFAULT_MAX_ITER, help="Max steps for GD.")
    parser.add_argument("--tol", type=float, default=DEFAULT_TOL, help="Tolerance for early stop in GD.")
    parser.add_argument("--depth", type=int, default=1, help="Hidden layers of the network.")
    parser.add_argument(
        "--widths",
        type=str,
        default="2,2,1",
        help="Comma-separated widths: input, hidden..., output.",
    )
    parser.add_argument("--random-state", type=int, default=42)
    parser.add_argument("--save-model", type=Path, default=None, help="Write trained weights as JSON.")
    parser.add_argument("--roc-plot", type=Path, default=None, help="Save the ROC curve as an image.")
    parser.add_argument("--verbose", action="store_true", help="Print GD progress.")
    return parser


def load_data(args: argparse.Namespace):
    if args.csv_path is None:
        X, y = make_synthetic_dataset(args.samples, args.features, random_state=args.random_state)
        return sequential_split(X, y, args.split)
    classes = [c.strip() for c in args.classes.split(",")]
    return load_binary_classification_data(
        args.csv_path,
        classes,
        skip=args.skip,
        split=args.split,
        label_at_start=args.label_at_start,
        clean=args.clean,
        scale=args.scale,
    )


def build_model(args: argparse.Namespace):
    common = dict(
        learning_rate=args.lr,
        basis=args.basis,
        max_iter=args.max_iter,
        tol=args.tol,
        verbose=args.verbose,
    )
    if args.model == "network":
        return LayeredNetwork(
            args.depth,
            _int_list(args.widths),
            activation=args.activation,
            random_state=args.random_state,
            **common,
        )
    if args.model == "linear":
        return linear_regressor(**common)
    return logistic_classifier(**common)


def run(args: argparse.Namespace):
    X_train, y_train, X_test, y_test = load_data(args)
    describe_data(X_train, y_train, X_test)

    model = build_model(args)
    model.train(X_train, y_train)
    if hasattr(model, "n_iter_"):
        print(f"    GD steps: {model.n_iter_} (converged: {model.converged_})")

    outputs = model.predict_many(X_test)
    print_metrics(args.model, compute_classification_metrics(y_test, outputs))
    print()
    model.print_report(X_test, y_test)

    if args.save_model is not None:
        if not hasattr(model, "save"):
            raise BasisLearnError("Only single basis models can be saved.")
        model.save(args.save_model)
        print(f"\nSaved model to {args.save_model}")

    if args.roc_plot is not None:
        curve = roc_curve(y_test, outputs)
        plot_roc_curve(curve, args.roc_plot, title=f"ROC Curve: {args.model}")
        print(f"Saved ROC curve to {args.roc_plot}")
    return model


def main(args: argparse.Namespace | None = None):
    """Parse flags and run; library errors exit with their message."""
    args = args or build_arg_parser().parse_args()
    try:
        return run(args)
    except BasisLearnError as exc:
        raise SystemExit(f"error: {exc}") from exc


if __name__ == "__main__":
    main()
