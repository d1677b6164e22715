from __future__ import annotations

"""
ROC curve rendering.
"""

from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from .metrics import RocCurve


def plot_roc_curve(curve: RocCurve, path: str | Path, title: str = "Receiver Operating Characteristic"):
    """Save FPR vs TPR with the chance diagonal and the AUC in the legend."""
    roc_auc = curve.auc()

    plt.figure(figsize=(8, 6))
    plt.plot(curve.fpr, curve.tpr, color="darkorange", lw=2, label=f"ROC curve (AUC = {roc_auc:.3f})")
    plt.plot([0, 1], [0, 1], color="navy", lw=2, linestyle="--")
    plt.xlim([0.0, 1.0])
    plt.ylim([0.0, 1.05])
    plt.xlabel("False Positive Rate")
    plt.ylabel("True Positive Rate")
    plt.title(title)
    plt.legend(loc="lower right")
    plt.grid(True)
    plt.tight_layout()
    plt.savefig(path)
    plt.close()
    return Path(path)
