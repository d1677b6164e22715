import numpy as np
import pandas as pd
import pytest

from basislearn.data_prep import (
    impute_zeros_with_median,
    load_binary_classification_data,
    make_synthetic_dataset,
    min_max_scale,
    sequential_split,
)
from basislearn.errors import ValidationError


@pytest.fixture
def csv_path(tmp_path):
    df = pd.DataFrame(
        {
            "id": range(6),
            "radius": [10.0, 0.0, 14.0, 20.0, 18.0, 11.0],
            "texture": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
            "diagnosis": ["B", "M", "X", "M", "B", "M"],
        }
    )
    path = tmp_path / "cells.csv"
    df.to_csv(path, index=False)
    return path


def test_load_keeps_two_classes_and_splits_in_order(csv_path):
    X_train, y_train, X_test, y_test = load_binary_classification_data(
        csv_path, ["B", "M"], skip=1, split=60
    )

    assert X_train.shape == (3, 2)
    assert X_test.shape == (2, 2)
    assert y_train.tolist() == [0.0, 1.0, 1.0]
    assert y_test.tolist() == [0.0, 1.0]
    assert X_train[:, 0].tolist() == [10.0, 0.0, 20.0]


def test_load_with_cleaning_and_scaling(csv_path):
    X_train, _, X_test, _ = load_binary_classification_data(
        csv_path, ["B", "M"], skip=1, split=100, clean=True, scale=True
    )

    assert X_test.shape == (0, 2)
    assert X_train.min() == 0.0
    assert X_train.max() == 1.0
    # zero radius replaced by the median of the remaining radii (14.5)
    assert X_train[1, 0] == pytest.approx((14.5 - 10.0) / (20.0 - 10.0))


def test_label_at_start(tmp_path):
    path = tmp_path / "label_first.csv"
    pd.DataFrame({"label": ["yes", "no", "yes"], "x": [1.0, 2.0, 3.0]}).to_csv(path, index=False)

    X_train, y_train, _, _ = load_binary_classification_data(
        path, ["no", "yes"], label_at_start=True, split=100
    )

    assert y_train.tolist() == [1.0, 0.0, 1.0]
    assert X_train[:, 0].tolist() == [1.0, 2.0, 3.0]


@pytest.mark.parametrize("split", [-1, 100.5])
def test_split_must_be_a_percentage(csv_path, split):
    with pytest.raises(ValidationError):
        load_binary_classification_data(csv_path, ["B", "M"], skip=1, split=split)
    with pytest.raises(ValidationError):
        sequential_split(np.zeros((4, 1)), np.zeros(4), split)


def test_sequential_split_sizes():
    X = np.arange(20, dtype=float).reshape(10, 2)
    y = np.arange(10, dtype=float)

    X_train, y_train, X_test, y_test = sequential_split(X, y, 70)

    assert len(X_train) == len(y_train) == 7
    assert len(X_test) == len(y_test) == 3
    assert y_test.tolist() == [7.0, 8.0, 9.0]


def test_impute_does_not_mutate_input():
    df = pd.DataFrame({"a": [0.0, 2.0, 4.0, 6.0], "b": [0.0, 0.0, 0.0, 0.0]})

    cleaned = impute_zeros_with_median(df)

    assert cleaned["a"].tolist() == [4.0, 2.0, 4.0, 6.0]
    assert cleaned["b"].tolist() == [0.0] * 4
    assert df["a"].tolist() == [0.0, 2.0, 4.0, 6.0]


def test_min_max_scale_handles_constant_columns():
    scaled = min_max_scale(pd.DataFrame({"a": [2.0, 4.0, 6.0], "b": [3.0, 3.0, 3.0]}))

    assert scaled["a"].tolist() == [0.0, 0.5, 1.0]
    assert scaled["b"].tolist() == [0.0, 0.0, 0.0]


def test_synthetic_dataset():
    X, y = make_synthetic_dataset(n_samples=50, n_features=3, random_state=0)

    assert X.shape == (50, 3)
    assert set(np.unique(y)) == {0.0, 1.0}
    assert X.min() >= 0.0 and X.max() <= 1.0
