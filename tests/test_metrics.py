import numpy as np
import pandas as pd
import pytest
from sklearn import metrics as skm

from basislearn.constants import ROC_THRESHOLDS
from basislearn.errors import NumericError, ValidationError
from basislearn.metrics import (
    accuracy,
    auc,
    classification_report,
    compute_classification_metrics,
    confusion_matrix,
    count_classes,
    f_measure,
    mean_squared,
    precision,
    print_classification_report,
    quick_model_eval,
    recall,
    roc_auc,
    roc_curve,
)


def test_worked_example():
    cm = confusion_matrix([0, 0, 1, 1], [0, 1, 1, 1])

    assert cm.tolist() == [[1, 1], [0, 2]]
    assert accuracy(cm) == pytest.approx(0.75)
    assert precision(cm) == pytest.approx(2 / 3)
    assert recall(cm) == pytest.approx(1.0)
    assert f_measure(cm) == pytest.approx(0.8)


def test_accuracy_is_trace_over_total():
    rng = np.random.default_rng(0)
    for _ in range(20):
        cm = rng.integers(0, 10, size=(3, 3)) + 1
        assert accuracy(cm) == pytest.approx(np.trace(cm) / cm.sum())


def test_all_correct_predictions():
    labels = [0, 1, 2, 2, 1, 0, 2]
    cm = confusion_matrix(labels, labels)

    assert accuracy(cm) == 1.0
    assert (cm[~np.eye(3, dtype=bool)] == 0).all()


def test_confusion_matrix_matches_sklearn():
    rng = np.random.default_rng(1)
    exact = rng.integers(0, 3, size=200)
    approx = rng.integers(0, 3, size=200)

    assert np.array_equal(confusion_matrix(exact, approx), skm.confusion_matrix(exact, approx))


def test_confusion_matrix_rounds_half_up_and_accepts_columns():
    exact = np.array([[0.0], [1.0], [1.0]])
    approx = np.array([[0.49], [0.5], [0.97]])

    assert confusion_matrix(exact, approx).tolist() == [[1, 0], [0, 2]]
    assert count_classes([0.2, 0.9, 1.1, 1.6]) == 3


def test_confusion_matrix_validation():
    with pytest.raises(ValidationError):
        confusion_matrix(np.ones((3, 2)), [0, 1, 1])
    with pytest.raises(ValidationError):
        confusion_matrix([0, 1, 1], [0, 1])
    with pytest.raises(ValidationError):
        confusion_matrix([0, 0], [0, 1])


def test_zero_denominators_raise():
    with pytest.raises(NumericError):
        precision(np.array([[2, 0], [1, 0]]))
    with pytest.raises(NumericError):
        recall(np.array([[1, 1], [0, 0]]))
    with pytest.raises(NumericError):
        accuracy(np.zeros((2, 2)))


def test_shape_checks():
    with pytest.raises(ValidationError):
        precision(np.ones((3, 3)))
    with pytest.raises(ValidationError):
        accuracy(np.ones((2, 3)))


def test_mean_squared():
    assert mean_squared([1, 2, 3], [1, 2, 4]) == pytest.approx(1 / 3)
    with pytest.raises(ValidationError):
        mean_squared([1, 2], [1, 2, 3])


def test_roc_curve_endpoints():
    y = np.array([0, 0, 1, 1, 0, 1])
    probs = np.array([0.1, 0.4, 0.35, 0.8, 0.3, 0.6])

    curve = roc_curve(y, probs)

    assert len(curve.thresholds) == 101
    assert np.array_equal(curve.thresholds, ROC_THRESHOLDS)
    assert (curve.fpr[0], curve.tpr[0]) == (1.0, 1.0)
    assert (curve.fpr[-1], curve.tpr[-1]) == (0.0, 0.0)
    assert (np.diff(curve.fpr) <= 0).all()


def test_auc_of_perfect_and_constant_classifiers():
    y = np.array([0, 0, 0, 1, 1, 1])

    assert roc_auc(y, [0.1, 0.2, 0.3, 0.7, 0.8, 0.9]) == pytest.approx(1.0)
    assert roc_auc(y, np.full(6, 0.5)) == pytest.approx(0.5)


def test_auc_matches_sklearn_on_grid_scores():
    rng = np.random.default_rng(2)
    y = rng.integers(0, 2, size=300)
    probs = np.clip(rng.integers(0, 100, size=300) / 100 + 0.2 * y, 0, 0.99)
    probs = np.round(probs, 2)

    assert roc_auc(y, probs) == pytest.approx(skm.roc_auc_score(y, probs), abs=1e-9)


def test_saturated_probabilities_stay_positive_at_the_top_threshold():
    y = np.array([0, 1, 0, 1])
    probs = np.array([1.0, 1.0, 0.0, 0.0])

    curve = roc_curve(y, probs)

    assert (curve.fpr[-1], curve.tpr[-1]) == (0.5, 0.5)
    assert roc_auc(y, probs) == pytest.approx(0.5)
    assert roc_auc(y, probs) == pytest.approx(skm.roc_auc_score(y, probs))


def test_auc_with_saturated_scores_matches_sklearn():
    y = np.array([0, 0, 1, 1, 0, 1])
    probs = np.array([0.0, 1.0, 1.0, 1.0, 0.0, 0.3])

    assert roc_auc(y, probs) == pytest.approx(7 / 9)
    assert roc_auc(y, probs) == pytest.approx(skm.roc_auc_score(y, probs))


def test_auc_is_independent_of_point_order():
    fpr = np.array([1.0, 0.5, 0.0])
    tpr = np.array([1.0, 1.0, 0.0])

    assert auc(fpr, tpr) == pytest.approx(0.75)
    assert auc(fpr[::-1], tpr[::-1]) == pytest.approx(0.75)
    with pytest.raises(ValidationError):
        auc([0.0], [0.0])


def test_roc_needs_both_classes():
    with pytest.raises(NumericError):
        roc_curve([1, 1, 1], [0.2, 0.5, 0.9])
    with pytest.raises(ValidationError):
        roc_curve([0, 2, 1], [0.2, 0.5, 0.9])


def test_roc_frame():
    frame = roc_curve([0, 1], [0.3, 0.7]).to_frame()

    assert isinstance(frame, pd.DataFrame)
    assert list(frame.columns) == ["threshold", "fpr", "tpr"]
    assert len(frame) == 101


def test_classification_report_table():
    report = classification_report([0, 0, 1, 1], [0, 1, 1, 1])
    table = report.table

    assert list(table.index) == ["0", "1", "macro avg", "weighted avg"]
    assert table.loc["0", "precision"] == pytest.approx(1.0)
    assert table.loc["0", "recall"] == pytest.approx(0.5)
    assert table.loc["1", "precision"] == pytest.approx(2 / 3)
    assert table.loc["1", "recall"] == pytest.approx(1.0)
    assert table.loc["macro avg", "precision"] == pytest.approx((1.0 + 2 / 3) / 2)
    assert table.loc["weighted avg", "recall"] == pytest.approx(0.75)
    assert table["support"].tolist() == [2, 2, 4, 4]
    assert report.accuracy == pytest.approx(0.75)


def test_classification_report_matches_sklearn_weighted_average():
    rng = np.random.default_rng(3)
    exact = rng.integers(0, 2, size=100)
    approx = rng.integers(0, 2, size=100)

    table = classification_report(exact, approx).table
    p, r, f, _ = skm.precision_recall_fscore_support(exact, approx, average="weighted")

    assert table.loc["weighted avg", "precision"] == pytest.approx(p)
    assert table.loc["weighted avg", "recall"] == pytest.approx(r)
    assert table.loc["weighted avg", "f1-score"] == pytest.approx(f)


def test_classification_report_marks_undefined_entries():
    report = classification_report([0, 1], [1, 1])

    assert np.isnan(report.table.loc["0", "precision"])
    assert report.precision == pytest.approx(0.5)


def test_classification_report_is_binary_only():
    with pytest.raises(ValidationError):
        classification_report([0, 1, 2], [0, 1, 2])


def test_printed_report(capsys):
    print_classification_report([0, 0, 1, 1], [0, 1, 1, 1])
    out = capsys.readouterr().out

    assert "Classification Report" in out
    assert "Actual 0 - [1, 1]" in out
    assert "Accuracy: 0.7500" in out
    assert "weighted avg" in out


def test_compute_classification_metrics():
    result = compute_classification_metrics([0, 0, 1, 1], [0.2, 0.6, 0.7, 0.9])

    assert result["confusion_matrix"].tolist() == [[1, 1], [0, 2]]
    assert result["accuracy"] == pytest.approx(0.75)
    assert result["roc_auc"] == pytest.approx(1.0)


class _FixedModel:
    def __init__(self, outputs):
        self.outputs = np.asarray(outputs)

    def predict_many(self, X):
        return self.outputs


def test_quick_model_eval(capsys):
    result = quick_model_eval(_FixedModel([0.1, 0.4, 0.6, 0.9]), np.zeros((4, 1)), [0, 0, 1, 1])

    assert result == {"accuracy": 1.0, "auc": pytest.approx(1.0)}
    assert "AUC: 1.0000" in capsys.readouterr().out
