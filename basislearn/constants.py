from __future__ import annotations

"""
Shared defaults for training and evaluation.
"""

import numpy as np

DEFAULT_LEARNING_RATE = 0.1
DEFAULT_MAX_ITER = 5000
DEFAULT_TOL = 1e-6
LOG_EVERY = 500

# Uniform range for randomly initialised network node weights.
INIT_WEIGHT_RANGE = (-10.0, 10.0)

DEFAULT_BASIS = ("constant", "identity")

# Decision thresholds swept for ROC curves: 0.00, 0.01, ..., 1.00.
ROC_THRESHOLDS = np.round(np.linspace(0.0, 1.0, 101), 2)
ROC_THRESHOLDS.setflags(write=False)
