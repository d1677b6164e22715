from __future__ import annotations

"""
Batch gradient descent over a basis-expanded design matrix.

Both optimizers stop once a step moves the weights by less than `tol` or after
`max_iter` steps. Hitting the cap is not an error: the last weights are
returned, `converged` is False and a ConvergenceWarning is emitted.
"""

import warnings
from dataclasses import dataclass, field
from typing import Callable

import numpy as np
from sklearn.exceptions import ConvergenceWarning

from .basis import BasisSet, design_matrix, sigmoid
from .constants import DEFAULT_MAX_ITER, DEFAULT_TOL, LOG_EVERY
from .errors import NumericError, ValidationError


@dataclass
class OptimizeResult:
    weights: np.ndarray
    n_iter: int
    converged: bool
    loss: float
    loss_history: list[float] = field(default_factory=list)


def log_loss(y: np.ndarray, probs: np.ndarray) -> float:
    """Mean binary cross-entropy."""
    return float(
        -np.mean(y * np.log(probs + 1e-12) + (1 - y) * np.log(1 - probs + 1e-12))
    )


def mean_squared_loss(y: np.ndarray, preds: np.ndarray) -> float:
    return float(np.mean((preds - y) ** 2))


def _prepare(X, y, w0, basis: BasisSet, learning_rate: float, max_iter: int):
    Phi = design_matrix(X, basis)
    y_arr = np.asarray(y, dtype=float).ravel()
    w = np.array(w0, dtype=float).ravel()

    if Phi.shape[0] != y_arr.shape[0]:
        raise ValidationError(
            f"Got {Phi.shape[0]} samples but {y_arr.shape[0]} labels."
        )
    if w.shape[0] != Phi.shape[1]:
        raise ValidationError(
            f"Initial weights have length {w.shape[0]}, expected {Phi.shape[1]}."
        )
    if learning_rate <= 0:
        raise ValidationError("Learning rate must be positive.")
    if max_iter < 1:
        raise ValidationError("max_iter must be at least 1.")
    return Phi, y_arr, w


def _descend(
    w: np.ndarray,
    gradient: Callable[[np.ndarray], np.ndarray],
    loss: Callable[[np.ndarray], float],
    learning_rate: float,
    max_iter: int,
    tol: float,
    verbose: bool,
    log_every: int,
) -> OptimizeResult:
    history: list[float] = []
    converged = False
    n_iter = 0

    for step in range(1, max_iter + 1):
        new_weights = w - learning_rate * gradient(w)
        if not np.all(np.isfinite(new_weights)):
            raise NumericError(
                f"Weights became non-finite at step {step}; try a smaller learning rate."
            )
        delta = np.linalg.norm(new_weights - w)
        w = new_weights
        n_iter = step

        if step % log_every == 0:
            current = loss(w)
            history.append(current)
            if verbose:
                print(f"[GD] step={step}, loss={current:.4f}")

        if delta < tol:
            converged = True
            break

    if not converged:
        warnings.warn(
            f"Gradient descent stopped at max_iter={max_iter} before reaching tol={tol}.",
            ConvergenceWarning,
            stacklevel=3,
        )

    return OptimizeResult(
        weights=w,
        n_iter=n_iter,
        converged=converged,
        loss=loss(w),
        loss_history=history,
    )


def logistic_regression(
    X,
    y,
    w0,
    learning_rate: float,
    basis: BasisSet,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
    verbose: bool = False,
    log_every: int = LOG_EVERY,
) -> OptimizeResult:
    """Minimise the cross-entropy of sigmoid(Phi @ w) against labels in {0, 1}."""
    Phi, y_arr, w = _prepare(X, y, w0, basis, learning_rate, max_iter)
    if not np.isin(y_arr, (0.0, 1.0)).all():
        raise ValidationError("Logistic regression needs labels in {0, 1}.")
    n = len(y_arr)

    def gradient(weights):
        residual = sigmoid(Phi @ weights) - y_arr
        return (Phi.T @ residual) / n

    def loss(weights):
        return log_loss(y_arr, sigmoid(Phi @ weights))

    return _descend(w, gradient, loss, learning_rate, max_iter, tol, verbose, log_every)


def least_squares(
    X,
    y,
    w0,
    learning_rate: float,
    basis: BasisSet,
    max_iter: int = DEFAULT_MAX_ITER,
    tol: float = DEFAULT_TOL,
    verbose: bool = False,
    log_every: int = LOG_EVERY,
) -> OptimizeResult:
    """Minimise the mean squared error of Phi @ w against continuous targets."""
    Phi, y_arr, w = _prepare(X, y, w0, basis, learning_rate, max_iter)
    n = len(y_arr)

    def gradient(weights):
        residual = Phi @ weights - y_arr
        return 2.0 * (Phi.T @ residual) / n

    def loss(weights):
        return mean_squared_loss(y_arr, Phi @ weights)

    return _descend(w, gradient, loss, learning_rate, max_iter, tol, verbose, log_every)
