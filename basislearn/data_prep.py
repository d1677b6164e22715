from __future__ import annotations

"""
Data preparation for binary classification experiments: CSV ingestion,
zero imputation, min-max scaling and an ordered train/test split.
"""

from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.datasets import make_classification

from .errors import ValidationError

ZERO_TOL = 1e-6


def impute_zeros_with_median(features: pd.DataFrame, tol: float = ZERO_TOL) -> pd.DataFrame:
    """
    Replace (near) zero entries by the median of the column's non-zero values.
    Columns that are entirely zero are left alone.
    """
    cleaned = features.copy()
    for col in cleaned.columns:
        is_zero = cleaned[col].abs() < tol
        non_zero = cleaned.loc[~is_zero, col]
        if is_zero.any() and not non_zero.empty:
            cleaned.loc[is_zero, col] = non_zero.median()
    return cleaned


def min_max_scale(features: pd.DataFrame) -> pd.DataFrame:
    """Scale each column to [0, 1]; constant columns become 0."""
    col_min = features.min()
    span = features.max() - col_min
    span = span.where(span != 0, 1.0)
    return (features - col_min) / span


def sequential_split(X: np.ndarray, y: np.ndarray, split: float):
    """First `split` percent of rows for training, the rest for testing."""
    if not 0 <= split <= 100:
        raise ValidationError(f"Split must be between 0 and 100, got {split}.")
    if len(X) != len(y):
        raise ValidationError("The data does not have one sample for each label.")
    mid = int(len(X) * (split / 100.0))
    return X[:mid], y[:mid], X[mid:], y[mid:]


def load_binary_classification_data(
    csv_path: Path,
    class_labels: Sequence[str],
    skip: int = 0,
    split: float = 80.0,
    label_at_start: bool = False,
    clean: bool = False,
    scale: bool = False,
):
    """
    Read a CSV table into (X_train, y_train, X_test, y_test).

    The first `skip` columns are ignored. The label sits in the first remaining
    column when `label_at_start` is set, otherwise in the last one. Only rows
    labelled with one of the two `class_labels` are kept; they map to 0 and 1
    in the given order.
    """
    if not 0 <= split <= 100:
        raise ValidationError(f"Split must be between 0 and 100, got {split}.")
    if len(class_labels) != 2:
        raise ValidationError("Exactly two class labels are needed.")

    df = pd.read_csv(csv_path)
    df = df.iloc[:, skip:]
    if df.shape[1] < 2:
        raise ValidationError("The table needs a label column and at least one feature.")

    label_col = df.columns[0] if label_at_start else df.columns[-1]
    labels = df[label_col].astype(str).str.strip()
    mapping = {str(class_labels[0]): 0, str(class_labels[1]): 1}
    keep = labels.isin(list(mapping))

    features = (
        df.loc[keep]
        .drop(columns=[label_col])
        .apply(pd.to_numeric, errors="coerce")
        .fillna(0)
        .astype(float)
    )
    if clean:
        features = impute_zeros_with_median(features)
    if scale:
        features = min_max_scale(features)

    y = labels[keep].map(mapping).to_numpy(dtype=float)
    return sequential_split(features.to_numpy(), y, split)


def make_synthetic_dataset(n_samples: int = 500, n_features: int = 4, random_state: int = 42):
    """Two well separated classes with min-max scaled features."""
    X, y = make_classification(
        n_samples=n_samples,
        n_features=n_features,
        n_informative=min(2, n_features),
        n_redundant=0,
        n_repeated=0,
        n_clusters_per_class=1,
        class_sep=1.5,
        random_state=random_state,
    )
    X = min_max_scale(pd.DataFrame(X)).to_numpy()
    return X, y.astype(float)
