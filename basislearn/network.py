from __future__ import annotations

"""
Feed-forward network built from independently trained basis-model nodes.

Nodes live in one flat list; each layer is a slice of that list. Inference
feeds the features through every layer and reduces the last layer's outputs to
the output with the largest magnitude.

There is no end-to-end credit assignment. `train` fits every node on its own:
nodes in layer i learn the final labels from the outputs of layer i - 1 (the
raw features for the first layer). `train_node` fits a single node.
"""

import numpy as np

from .basis import BasisSet, as_2d
from .constants import (
    DEFAULT_BASIS,
    DEFAULT_LEARNING_RATE,
    DEFAULT_MAX_ITER,
    DEFAULT_TOL,
    INIT_WEIGHT_RANGE,
)
from .errors import StateError, ValidationError
from .metrics import ClassificationReport, classification_report, count_classes
from .models import BasisModel, as_labels, as_sample, network_node


def _validate_shape(depth: int, widths) -> tuple[int, ...]:
    if depth < 1:
        raise ValidationError("Depth must be greater than 0.")
    widths = tuple(int(w) for w in widths)
    if len(widths) != depth + 2:
        raise ValidationError(
            f"Each layer must have a width: expected {depth + 2} entries "
            f"(input, {depth} hidden, output), got {len(widths)}."
        )
    if any(w < 1 for w in widths):
        raise ValidationError("Every layer's width must be greater than 0.")
    return widths


class LayeredNetwork:
    def __init__(
        self,
        depth: int,
        widths,
        activation: str = "sigmoid",
        learning_rate: float = DEFAULT_LEARNING_RATE,
        basis=DEFAULT_BASIS,
        max_iter: int = DEFAULT_MAX_ITER,
        tol: float = DEFAULT_TOL,
        random_state: int | None = None,
        verbose: bool = False,
    ):
        self.depth = depth
        self.widths = _validate_shape(depth, widths)
        self.activation = activation
        self._rng = np.random.default_rng(random_state)

        self.nodes: list[BasisModel] = []
        self.layer_slices: list[slice] = []
        start = 0
        for width in self.widths:
            self.layer_slices.append(slice(start, start + width))
            for _ in range(width):
                self.nodes.append(
                    network_node(
                        activation,
                        learning_rate=learning_rate,
                        basis=basis,
                        max_iter=max_iter,
                        tol=tol,
                        random_state=int(self._rng.integers(0, 2**32 - 1)),
                        verbose=verbose,
                    )
                )
            start += width

    def __repr__(self) -> str:
        return f"LayeredNetwork(widths={list(self.widths)}, activation={self.activation!r})"

    @property
    def n_layers(self) -> int:
        return len(self.layer_slices)

    def layer(self, index: int) -> list[BasisModel]:
        if not 0 <= index < self.n_layers:
            raise ValidationError(f"Layer {index} does not exist (0..{self.n_layers - 1}).")
        return self.nodes[self.layer_slices[index]]

    def node(self, layer: int, position: int) -> BasisModel:
        nodes = self.layer(layer)
        if not 0 <= position < len(nodes):
            raise ValidationError(f"Layer {layer} has no node at position {position}.")
        return nodes[position]

    @property
    def is_trained(self) -> bool:
        return all(node.is_trained for node in self.nodes)

    @property
    def learning_rate(self) -> float:
        return self.nodes[0].learning_rate

    @learning_rate.setter
    def learning_rate(self, value: float):
        for node in self.nodes:
            node.learning_rate = value

    @property
    def basis(self) -> BasisSet:
        return self.nodes[0].basis

    @basis.setter
    def basis(self, value):
        basis = BasisSet.from_names(value)
        for node in self.nodes:
            node.basis = basis

    def generate_initial_weights(self, n: int) -> np.ndarray:
        """
        Uniform draw from the node initialisation range. Nodes draw their own
        starting weights when trained; this satisfies the Model protocol for
        callers that seed a network-sized weight vector themselves.
        """
        low, high = INIT_WEIGHT_RANGE
        return self._rng.uniform(low, high, size=n)

    def _fan_in(self, layer: int) -> int | None:
        if layer > 0:
            return self.widths[layer - 1]
        trained = [node.n_features_ for node in self.layer(0) if node.is_trained]
        return trained[0] if trained else None

    def train_node(self, layer: int, position: int, X, y) -> BasisModel:
        """Train one node on inputs of its layer's fan-in."""
        node = self.node(layer, position)
        X_arr = as_2d(X)
        expected = self._fan_in(layer)
        if expected is not None and X_arr.shape[1] != expected:
            raise ValidationError(
                f"Layer {layer} expects {expected} inputs per sample, got {X_arr.shape[1]}."
            )
        return node.train(X_arr, y)

    def _fire(self, layer: int, inputs: np.ndarray) -> np.ndarray:
        return np.column_stack([node.predict_many(inputs) for node in self.layer(layer)])

    def train(self, X, y):
        """Greedy layer-wise training; every node is fitted independently."""
        X_arr = as_2d(X)
        y_arr = as_labels(y)
        if X_arr.shape[0] != y_arr.shape[0]:
            raise ValidationError(
                f"The data does not have one sample for each label "
                f"({X_arr.shape[0]} samples, {y_arr.shape[0]} labels)."
            )

        for node in self.nodes:
            node.reset()

        inputs = X_arr
        for index in range(self.n_layers):
            for node in self.layer(index):
                node.train(inputs, y_arr)
            inputs = self._fire(index, inputs)
        return self

    def _require_trained(self):
        if not self.is_trained:
            raise StateError("The network is not trained.")

    def forward(self, X) -> np.ndarray:
        """Outputs of the last layer, one row per sample."""
        self._require_trained()
        outputs = as_2d(X)
        for index in range(self.n_layers):
            outputs = self._fire(index, outputs)
        return outputs

    @staticmethod
    def _largest_magnitude(outputs: np.ndarray) -> np.ndarray:
        picked = np.argmax(np.abs(outputs), axis=1)
        return outputs[np.arange(outputs.shape[0]), picked]

    def predict(self, sample) -> float:
        self._require_trained()
        arr = as_sample(sample)
        return float(self.predict_many(arr.reshape(1, -1))[0])

    def predict_many(self, X) -> np.ndarray:
        return self._largest_magnitude(self.forward(X))

    def report(self, X, y) -> ClassificationReport:
        self._require_trained()
        y_arr = as_labels(y)
        preds = np.clip(self.predict_many(X), 0, count_classes(y_arr) - 1)
        return classification_report(y_arr, preds)

    def print_report(self, X, y) -> ClassificationReport:
        report = self.report(X, y)
        print(report)
        return report
