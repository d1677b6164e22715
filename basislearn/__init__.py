"""
Basis-function models trained by gradient descent, plus evaluation helpers for
binary classifiers (confusion matrices, ROC curves, AUC and reports).
"""

from .basis import BasisSet, design_matrix, expand
from .errors import BasisLearnError, NumericError, StateError, ValidationError
from .metrics import (
    accuracy,
    auc,
    classification_report,
    compute_classification_metrics,
    confusion_matrix,
    f_measure,
    mean_squared,
    precision,
    recall,
    roc_curve,
)
from .models import (
    BasisModel,
    Model,
    ModelVariant,
    linear_regressor,
    logistic_classifier,
    network_node,
)
from .network import LayeredNetwork

__all__ = [
    "BasisSet",
    "design_matrix",
    "expand",
    "BasisLearnError",
    "NumericError",
    "StateError",
    "ValidationError",
    "accuracy",
    "auc",
    "classification_report",
    "compute_classification_metrics",
    "confusion_matrix",
    "f_measure",
    "mean_squared",
    "precision",
    "recall",
    "roc_curve",
    "BasisModel",
    "Model",
    "ModelVariant",
    "linear_regressor",
    "logistic_classifier",
    "network_node",
    "LayeredNetwork",
]
