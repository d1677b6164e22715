from __future__ import annotations

"""
Train/predict/report lifecycle for basis-expanded models.

A model is untrained until `train` succeeds and goes back to untrained when its
learning rate or basis functions change. Concrete models differ only in their
ModelVariant: the activation applied after the expansion, the objective that
fits the weights and how the initial weights are drawn.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np

from .basis import BasisSet, as_2d, expand, n_weights, resolve_activation
from .constants import (
    DEFAULT_BASIS,
    DEFAULT_LEARNING_RATE,
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    INIT_WEIGHT_RANGE,
)
from .errors import StateError, ValidationError
from .metrics import ClassificationReport, classification_report, count_classes
from .optim import least_squares, logistic_regression

OPTIMIZERS = {
    "logistic": logistic_regression,
    "least_squares": least_squares,
}
INIT_POLICIES = ("zeros", "uniform")


@runtime_checkable
class Model(Protocol):
    """What every trainable model (including the layered network) provides."""

    @property
    def is_trained(self) -> bool: ...

    def train(self, X, y): ...

    def predict(self, sample) -> float: ...

    def predict_many(self, X) -> np.ndarray: ...

    def generate_initial_weights(self, n: int) -> np.ndarray: ...

    def report(self, X, y) -> ClassificationReport: ...


@dataclass(frozen=True)
class ModelVariant:
    name: str
    activation: str
    objective: str
    init: str

    def __post_init__(self):
        resolve_activation(self.activation)
        if self.objective not in OPTIMIZERS:
            raise ValidationError(f"Unknown objective {self.objective!r}.")
        if self.init not in INIT_POLICIES:
            raise ValidationError(f"Unknown initial weight policy {self.init!r}.")


LINEAR_REGRESSION = ModelVariant("linear_regression", "identity", "least_squares", "zeros")
LOGISTIC_CLASSIFIER = ModelVariant("logistic_classifier", "sigmoid", "logistic", "zeros")


def node_variant(activation: str = "sigmoid") -> ModelVariant:
    """Network nodes start from random weights and fit the logistic objective."""
    return ModelVariant("network_node", activation, "logistic", "uniform")


def _check_learning_rate(learning_rate: float) -> float:
    if not learning_rate > 0:
        raise ValidationError("Learning rate must be greater than 0.")
    return float(learning_rate)


def as_labels(y) -> np.ndarray:
    """Labels as a 1-D float array; a single-column matrix is flattened."""
    y_arr = np.array(y, dtype=float)
    if y_arr.ndim == 2 and y_arr.shape[1] == 1:
        y_arr = y_arr[:, 0]
    if y_arr.ndim != 1:
        raise ValidationError("Labels must be a vector or a single-column matrix.")
    return y_arr


def as_sample(sample) -> np.ndarray:
    """A single sample given as a flat sequence, one row or one column."""
    arr = np.asarray(sample, dtype=float)
    if arr.ndim == 2:
        if arr.shape[0] != 1 and arr.shape[1] != 1:
            raise ValidationError(
                f"Ambiguous shape {arr.shape}: more than one sample was provided."
            )
        arr = arr.ravel()
    elif arr.ndim != 1:
        raise ValidationError(f"A sample must be 1-D or a single row/column, got {arr.ndim}-D.")
    return arr


class BasisModel:
    """
    Linear-in-parameters model over a basis expansion of the features.

    Trained weights are only meaningful together with the basis they were fitted
    with; `to_dict` stores both.
    """

    def __init__(
        self,
        variant: ModelVariant,
        learning_rate: float = DEFAULT_LEARNING_RATE,
        basis=DEFAULT_BASIS,
        max_iter: int = DEFAULT_MAX_ITER,
        tol: float = DEFAULT_TOL,
        random_state: int | None = None,
        verbose: bool = False,
    ):
        self.variant = variant
        self._learning_rate = _check_learning_rate(learning_rate)
        self._basis = BasisSet.from_names(basis)
        self.max_iter = max_iter
        self.tol = tol
        self.random_state = random_state
        self.verbose = verbose
        self._rng = np.random.default_rng(random_state)
        self._activation = resolve_activation(variant.activation)
        self.reset()

    def reset(self):
        """Drop trained state; the model must be retrained before predicting."""
        self.weights_: np.ndarray | None = None
        self.n_features_: int | None = None
        self.n_iter_: int = 0
        self.converged_: bool = False
        self.loss_history_: list[float] = []

    def __repr__(self) -> str:
        state = "trained" if self.is_trained else "untrained"
        return (
            f"BasisModel({self.variant.name}, lr={self._learning_rate}, "
            f"basis={list(self._basis.names)}, {state})"
        )

    @property
    def is_trained(self) -> bool:
        return self.weights_ is not None

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float):
        self._learning_rate = _check_learning_rate(value)
        self.reset()

    @property
    def basis(self) -> BasisSet:
        return self._basis

    @basis.setter
    def basis(self, value):
        self._basis = BasisSet.from_names(value)
        self.reset()

    def generate_initial_weights(self, n: int) -> np.ndarray:
        if self.variant.init == "uniform":
            low, high = INIT_WEIGHT_RANGE
            return self._rng.uniform(low, high, size=n)
        return np.zeros(n)

    def train(self, X, y):
        """Fit the weights on (X, y); replaces any previously trained weights."""
        X_arr = as_2d(X)
        y_arr = as_labels(y)
        if X_arr.shape[0] != y_arr.shape[0]:
            raise ValidationError(
                f"The data does not have one sample for each label "
                f"({X_arr.shape[0]} samples, {y_arr.shape[0]} labels)."
            )
        if X_arr.shape[0] == 0:
            raise ValidationError("Cannot train on an empty data set.")

        w0 = self.generate_initial_weights(n_weights(X_arr.shape[1], self._basis))
        optimizer = OPTIMIZERS[self.variant.objective]
        result = optimizer(
            X_arr,
            y_arr,
            w0,
            self._learning_rate,
            self._basis,
            max_iter=self.max_iter,
            tol=self.tol,
            verbose=self.verbose,
        )

        weights = result.weights.copy()
        weights.setflags(write=False)
        self.weights_ = weights
        self.n_features_ = X_arr.shape[1]
        self.n_iter_ = result.n_iter
        self.converged_ = result.converged
        self.loss_history_ = result.loss_history
        return self

    def _require_trained(self):
        if not self.is_trained:
            raise StateError("The model is not trained.")

    def _check_features(self, n_features: int):
        if n_features != self.n_features_:
            raise ValidationError(
                f"Model was trained on {self.n_features_} features, got {n_features}."
            )

    def _forward(self, X_arr: np.ndarray) -> np.ndarray:
        return self._activation(expand(X_arr, self.weights_, self._basis))

    def predict(self, sample) -> float:
        """Prediction for one sample (flat sequence, single row or single column)."""
        self._require_trained()
        arr = as_sample(sample)
        self._check_features(arr.shape[0])
        return float(self._forward(arr.reshape(1, -1))[0])

    def predict_many(self, X) -> np.ndarray:
        self._require_trained()
        X_arr = as_2d(X)
        self._check_features(X_arr.shape[1])
        return self._forward(X_arr)

    def report(self, X, y) -> ClassificationReport:
        self._require_trained()
        y_arr = as_labels(y)
        preds = np.clip(self.predict_many(X), 0, count_classes(y_arr) - 1)
        return classification_report(y_arr, preds)

    def print_report(self, X, y) -> ClassificationReport:
        report = self.report(X, y)
        print(report)
        return report

    def to_dict(self) -> dict:
        return {
            "variant": self.variant.name,
            "activation": self.variant.activation,
            "objective": self.variant.objective,
            "init": self.variant.init,
            "learning_rate": self._learning_rate,
            "basis": list(self._basis.names),
            "max_iter": self.max_iter,
            "tol": self.tol,
            "n_features": self.n_features_,
            "weights": None if self.weights_ is None else self.weights_.tolist(),
        }

    @classmethod
    def from_dict(cls, state: dict) -> BasisModel:
        variant = ModelVariant(
            state["variant"], state["activation"], state["objective"], state["init"]
        )
        model = cls(
            variant,
            learning_rate=state["learning_rate"],
            basis=state["basis"],
            max_iter=state.get("max_iter", DEFAULT_MAX_ITER),
            tol=state.get("tol", DEFAULT_TOL),
        )
        if state.get("weights") is not None:
            weights = np.asarray(state["weights"], dtype=float)
            expected = n_weights(int(state["n_features"]), model.basis)
            if weights.shape != (expected,):
                raise ValidationError(
                    f"Stored weights have shape {weights.shape}, the basis needs {expected}."
                )
            weights.setflags(write=False)
            model.weights_ = weights
            model.n_features_ = int(state["n_features"])
        return model

    def save(self, path: str | Path):
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(cls, path: str | Path) -> BasisModel:
        return cls.from_dict(json.loads(Path(path).read_text()))


def linear_regressor(**kwargs) -> BasisModel:
    """Identity activation, zero initial weights, squared-error objective."""
    return BasisModel(LINEAR_REGRESSION, **kwargs)


def logistic_classifier(**kwargs) -> BasisModel:
    """Sigmoid activation, zero initial weights, cross-entropy objective."""
    return BasisModel(LOGISTIC_CLASSIFIER, **kwargs)


def network_node(activation: str = "sigmoid", **kwargs) -> BasisModel:
    return BasisModel(node_variant(activation), **kwargs)
