from __future__ import annotations

"""
Named basis functions and the expansion of raw features into a linear model.

Basis functions are referred to by name so that a trained weight vector can be
stored next to the exact transforms that produced it.
"""

from dataclasses import dataclass
from typing import Callable, Iterable

import numpy as np

from .errors import ValidationError

ArrayFn = Callable[[np.ndarray], np.ndarray]


def sigmoid(z) -> np.ndarray:
    z = np.clip(np.asarray(z, dtype=float), -500, 500)
    return 1.0 / (1.0 + np.exp(-z))


BASIS_FUNCTIONS: dict[str, ArrayFn] = {
    "constant": lambda x: np.ones_like(x, dtype=float),
    "identity": lambda x: np.asarray(x, dtype=float),
    "square": lambda x: np.square(x),
    "cube": lambda x: np.power(x, 3),
    "sqrt_abs": lambda x: np.sqrt(np.abs(x)),
    "sin": np.sin,
    "cos": np.cos,
    "exp": np.exp,
    "log1p_abs": lambda x: np.log1p(np.abs(x)),
    "tanh": np.tanh,
    "sigmoid": sigmoid,
}

ACTIVATIONS: dict[str, ArrayFn] = {
    "identity": lambda z: np.asarray(z, dtype=float),
    "sigmoid": sigmoid,
    "tanh": np.tanh,
    "relu": lambda z: np.maximum(z, 0.0),
}


def resolve_function(name: str) -> ArrayFn:
    try:
        return BASIS_FUNCTIONS[name]
    except KeyError:
        raise ValidationError(
            f"Unknown basis function {name!r}; choose from {sorted(BASIS_FUNCTIONS)}"
        ) from None


def resolve_activation(name: str) -> ArrayFn:
    try:
        return ACTIVATIONS[name]
    except KeyError:
        raise ValidationError(
            f"Unknown activation {name!r}; choose from {sorted(ACTIVATIONS)}"
        ) from None


@dataclass(frozen=True)
class BasisSet:
    """
    Ordered basis functions. The first one is evaluated at the constant 1 and
    acts as the bias; the rest are applied to every feature.
    """

    names: tuple[str, ...]

    def __post_init__(self):
        if not self.names:
            raise ValidationError("A basis set needs at least one function.")
        for name in self.names:
            resolve_function(name)

    @classmethod
    def from_names(cls, names: str | Iterable[str]) -> BasisSet:
        """Build from a list of names or a comma-separated string."""
        if isinstance(names, BasisSet):
            return names
        if isinstance(names, str):
            names = [n.strip() for n in names.split(",") if n.strip()]
        return cls(tuple(names))

    @property
    def functions(self) -> list[ArrayFn]:
        return [BASIS_FUNCTIONS[name] for name in self.names]

    def __len__(self) -> int:
        return len(self.names)


def as_2d(X) -> np.ndarray:
    """Float copy of X with one row per sample; a 1-D input is a single sample."""
    X_arr = np.array(X, dtype=float)
    if X_arr.ndim == 1:
        X_arr = X_arr.reshape(1, -1)
    if X_arr.ndim != 2:
        raise ValidationError(f"Expected a 2-D feature matrix, got {X_arr.ndim} dimensions.")
    return X_arr


def n_weights(n_features: int, basis: BasisSet) -> int:
    return n_features * (len(basis) - 1) + 1


def design_matrix(X, basis: BasisSet) -> np.ndarray:
    """
    Expand X into Phi so that predictions are Phi @ w.

    Column 0 is basis[0](1). Feature j under basis function k >= 1 lands in
    column j * (len(basis) - 1) + k.
    """
    X_arr = as_2d(X)
    n_samples, n_features = X_arr.shape
    fncs = basis.functions

    columns = [np.broadcast_to(fncs[0](np.ones(n_samples)), (n_samples,))]
    for j in range(n_features):
        for fn in fncs[1:]:
            columns.append(fn(X_arr[:, j]))
    return np.column_stack(columns).astype(float)


def expand(X, weights, basis: BasisSet) -> np.ndarray:
    """Evaluate the weighted basis expansion for every row of X."""
    Phi = design_matrix(X, basis)
    w = np.asarray(weights, dtype=float).ravel()
    if w.shape[0] != Phi.shape[1]:
        raise ValidationError(
            f"Expected {Phi.shape[1]} weights for this basis and feature count, got {w.shape[0]}."
        )
    return Phi @ w
