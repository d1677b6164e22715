from __future__ import annotations

"""
Evaluation helpers for binary classifiers: confusion matrices, scalar metrics,
ROC curves with trapezoidal AUC and a printable classification report.

Class ids are assumed to be contiguous integers starting at 0. Ratios whose
denominator is zero raise NumericError instead of being reported as 0; the
report table shows them as NaN.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from .constants import ROC_THRESHOLDS
from .errors import NumericError, ValidationError


def _as_column(values, name: str) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.ndim == 2 and arr.shape[1] == 1:
        arr = arr[:, 0]
    if arr.ndim != 1:
        raise ValidationError(f"The {name} data set must have exactly one column.")
    return arr


def _paired_columns(exact, approx) -> tuple[np.ndarray, np.ndarray]:
    exact_arr = _as_column(exact, "exact")
    approx_arr = _as_column(approx, "approximate")
    if exact_arr.shape[0] != approx_arr.shape[0]:
        raise ValidationError(
            f"The data sets must be the same length ({exact_arr.shape[0]} != {approx_arr.shape[0]})."
        )
    return exact_arr, approx_arr


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5).astype(int)


def _ratio(numerator: float, denominator: float, what: str) -> float:
    if denominator == 0:
        raise NumericError(f"{what} is undefined: the denominator is zero.")
    return float(numerator) / float(denominator)


def _or_nan(metric, cm: np.ndarray) -> float:
    try:
        return metric(cm)
    except NumericError:
        return float("nan")


def _check_square(cm: np.ndarray) -> np.ndarray:
    cm = np.asarray(cm)
    if cm.ndim != 2 or cm.shape[0] != cm.shape[1]:
        raise ValidationError(f"A confusion matrix must be square, got shape {cm.shape}.")
    return cm


def _check_binary(cm: np.ndarray) -> np.ndarray:
    cm = _check_square(cm)
    if cm.shape != (2, 2):
        raise ValidationError(f"The confusion matrix must be 2x2, got {cm.shape}.")
    return cm


def mean_squared(exact, approx) -> float:
    """Mean squared error between two equally long single-column data sets."""
    exact_arr, approx_arr = _paired_columns(exact, approx)
    if exact_arr.size == 0:
        raise NumericError("Mean squared error of an empty data set is undefined.")
    return float(np.mean((exact_arr - approx_arr) ** 2))


def count_classes(y) -> int:
    """Number of distinct labels after rounding to the nearest integer."""
    return int(np.unique(_round_half_up(_as_column(y, "label"))).size)


def confusion_matrix(exact, approx) -> np.ndarray:
    """
    Count (actual, predicted) pairs. Both inputs are rounded to the nearest
    class; the matrix is sized by the number of classes seen in `exact`.
    """
    exact_arr, approx_arr = _paired_columns(exact, approx)
    actual = _round_half_up(exact_arr)
    predicted = _round_half_up(approx_arr)
    n_classes = count_classes(exact_arr)

    for name, labels in (("exact", actual), ("approximate", predicted)):
        outside = labels[(labels < 0) | (labels >= n_classes)]
        if outside.size:
            raise ValidationError(
                f"Class {outside[0]} in the {name} data set is outside 0..{n_classes - 1}; "
                "classes must be contiguous integers starting at 0."
            )

    cm = np.zeros((n_classes, n_classes), dtype=int)
    np.add.at(cm, (actual, predicted), 1)
    return cm


def accuracy(cm) -> float:
    """Fraction of samples on the diagonal."""
    cm = _check_square(cm)
    return _ratio(np.trace(cm), cm.sum(), "Accuracy")


def precision(cm) -> float:
    """TP / (TP + FP) with class 1 as the positive class."""
    cm = _check_binary(cm)
    return _ratio(cm[1, 1], cm[0, 1] + cm[1, 1], "Precision")


def recall(cm) -> float:
    """TP / (TP + FN) with class 1 as the positive class."""
    cm = _check_binary(cm)
    return _ratio(cm[1, 1], cm[1, 0] + cm[1, 1], "Recall")


def f_measure(cm) -> float:
    """Harmonic mean of precision and recall."""
    p = precision(cm)
    r = recall(cm)
    return _ratio(2 * p * r, p + r, "F1")


@dataclass(frozen=True)
class RocCurve:
    thresholds: np.ndarray
    fpr: np.ndarray
    tpr: np.ndarray

    def auc(self) -> float:
        return auc(self.fpr, self.tpr)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"threshold": self.thresholds, "fpr": self.fpr, "tpr": self.tpr})


def _binary_confusion(actual: np.ndarray, predicted: np.ndarray) -> np.ndarray:
    return np.bincount(actual * 2 + predicted, minlength=4).reshape(2, 2)


def roc_curve(y_true, probs, thresholds=ROC_THRESHOLDS) -> RocCurve:
    """
    Sweep decision thresholds in ascending order. A sample is predicted
    positive iff its probability is >= the threshold, so a probability of
    exactly 1.0 is still positive at threshold 1.00 and the last point is
    then not (0, 0). `auc` anchors the curve at both corners.
    """
    y_arr, p_arr = _paired_columns(y_true, probs)
    actual = _round_half_up(y_arr)
    if not np.isin(actual, (0, 1)).all():
        raise ValidationError("ROC curves need binary labels in {0, 1}.")
    thresholds = np.asarray(thresholds, dtype=float)

    fpr = np.empty(len(thresholds))
    tpr = np.empty(len(thresholds))
    for i, threshold in enumerate(thresholds):
        cm = _binary_confusion(actual, (p_arr >= threshold).astype(int))
        tpr[i] = _ratio(cm[1, 1], cm[1, 1] + cm[1, 0], "True positive rate")
        fpr[i] = _ratio(cm[0, 1], cm[0, 1] + cm[0, 0], "False positive rate")

    return RocCurve(thresholds=thresholds, fpr=fpr, tpr=tpr)


def auc(fpr, tpr) -> float:
    """
    Trapezoidal area under a ROC curve. Points are visited by non-decreasing
    FPR (ties by TPR), so every trapezoid width is non-negative. The curve is
    closed with (0, 0) and (1, 1) when those corners are missing.
    """
    fpr_arr = np.asarray(fpr, dtype=float).ravel()
    tpr_arr = np.asarray(tpr, dtype=float).ravel()
    if fpr_arr.shape != tpr_arr.shape:
        raise ValidationError("FPR and TPR must have the same length.")
    if fpr_arr.size < 2:
        raise ValidationError("At least two curve points are needed for an area.")

    order = np.lexsort((tpr_arr, fpr_arr))
    fpr_arr, tpr_arr = fpr_arr[order], tpr_arr[order]
    if (fpr_arr[0], tpr_arr[0]) != (0.0, 0.0):
        fpr_arr = np.concatenate([[0.0], fpr_arr])
        tpr_arr = np.concatenate([[0.0], tpr_arr])
    if (fpr_arr[-1], tpr_arr[-1]) != (1.0, 1.0):
        fpr_arr = np.concatenate([fpr_arr, [1.0]])
        tpr_arr = np.concatenate([tpr_arr, [1.0]])
    widths = np.diff(fpr_arr)
    heights = (tpr_arr[:-1] + tpr_arr[1:]) / 2.0
    return float(np.sum(widths * heights))


def roc_auc(y_true, probs) -> float:
    return roc_curve(y_true, probs).auc()


@dataclass
class ClassificationReport:
    confusion_matrix: np.ndarray
    accuracy: float
    precision: float
    recall: float
    table: pd.DataFrame

    def to_text(self) -> str:
        cm = self.confusion_matrix
        lines = ["Classification Report", "---------------------", "Confusion Matrix:"]
        for i, row in enumerate(cm):
            lines.append(f"Actual {i} - {row.tolist()}")
        lines.append("Predicted:   " + "  ".join(str(i) for i in range(cm.shape[1])))
        lines.append("")
        lines.append(f"Accuracy: {self.accuracy:.4f}")
        lines.append(f"Precision: {self.precision:.4f}")
        lines.append(f"Recall: {self.recall:.4f}")
        lines.append("")
        lines.append(self.table.to_string(float_format="{:.2f}".format))
        lines.append(f"accuracy {self.accuracy:.2f} over {int(cm.sum())} samples")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_text()


def _safe_divide(numerator: np.ndarray, denominator: np.ndarray) -> np.ndarray:
    out = np.full(numerator.shape, np.nan)
    np.divide(numerator, denominator, out=out, where=denominator != 0)
    return out


def classification_report(exact, approx) -> ClassificationReport:
    """
    Per-class precision/recall/F1/support plus macro and support-weighted
    averages for a binary problem.
    """
    cm = _check_binary(confusion_matrix(exact, approx))
    diag = np.diag(cm).astype(float)
    support = cm.sum(axis=1)

    per_precision = _safe_divide(diag, cm.sum(axis=0).astype(float))
    per_recall = _safe_divide(diag, support.astype(float))
    per_f1 = _safe_divide(2 * per_precision * per_recall, per_precision + per_recall)

    scores = np.column_stack([per_precision, per_recall, per_f1])
    rows = [*scores, scores.mean(axis=0), np.average(scores, axis=0, weights=support)]
    table = pd.DataFrame(
        rows,
        index=[str(i) for i in range(cm.shape[0])] + ["macro avg", "weighted avg"],
        columns=["precision", "recall", "f1-score"],
    )
    table["support"] = [*support.tolist(), int(support.sum()), int(support.sum())]

    return ClassificationReport(
        confusion_matrix=cm,
        accuracy=accuracy(cm),
        precision=_or_nan(precision, cm),
        recall=_or_nan(recall, cm),
        table=table,
    )


def print_classification_report(exact, approx) -> ClassificationReport:
    report = classification_report(exact, approx)
    print(report)
    return report


def compute_classification_metrics(y_true, probs, threshold: float = 0.5) -> dict:
    """Standard binary metrics given probabilities and a threshold."""
    y_arr, p_arr = _paired_columns(y_true, probs)
    actual = _round_half_up(y_arr)
    if not np.isin(actual, (0, 1)).all():
        raise ValidationError("Binary metrics need labels in {0, 1}.")
    cm = _binary_confusion(actual, (p_arr >= threshold).astype(int))
    try:
        auc_value = roc_auc(y_arr, p_arr)
    except NumericError:
        auc_value = float("nan")

    return {
        "accuracy": accuracy(cm),
        "precision": _or_nan(precision, cm),
        "recall": _or_nan(recall, cm),
        "f1": _or_nan(f_measure, cm),
        "roc_auc": auc_value,
        "confusion_matrix": cm,
    }


def quick_model_eval(model, X, y) -> dict[str, float]:
    """Accuracy and AUC of a probabilistic model on (X, y)."""
    probs = model.predict_many(X)
    result = {
        "accuracy": accuracy(confusion_matrix(y, probs)),
        "auc": roc_auc(y, probs),
    }
    print(f"Accuracy: {result['accuracy']:.4f} | AUC: {result['auc']:.4f}")
    return result
