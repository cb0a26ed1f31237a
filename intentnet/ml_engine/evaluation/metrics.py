# intentnet/ml_engine/evaluation/metrics.py
"""
Metrics for evaluating intent classifiers
Top-1 accuracy plus per-intent precision / recall / F1
"""

from dataclasses import dataclass

import numpy as np
from loguru import logger
from sklearn.metrics import accuracy_score, precision_recall_fscore_support


@dataclass
class MeasureResult:
    """Top-1 hits over a measured set"""

    good: int = 0
    total: int = 0

    @property
    def accuracy(self) -> float:
        return self.good / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, int]:
        return {"good": self.good, "total": self.total}


class IntentMetrics:
    """
    Calculate classification metrics from expected and predicted intents

    Includes:
    - Top-1 accuracy
    - Per-intent precision, recall, F1 and support
    - Macro and weighted averages
    """

    @staticmethod
    def calculate_all_metrics(
        y_true: list[str],
        y_pred: list[str],
        labels: list[str] | None = None,
    ) -> dict[str, object]:
        """
        Calculate all available metrics

        Args:
            y_true: Expected intents
            y_pred: Top predicted intents
            labels: Intents to report on (defaults to those seen in y_true)

        Returns:
            Dictionary with ``accuracy``, ``macro``, ``weighted`` and ``per_intent``
        """
        if len(y_true) == 0:
            logger.warning("No samples for metrics calculation")
            return {}

        if labels is None:
            labels = list(dict.fromkeys(y_true))

        metrics: dict[str, object] = {"accuracy": float(accuracy_score(y_true, y_pred))}

        for average in ("macro", "weighted"):
            precision, recall, f1, _ = precision_recall_fscore_support(
                y_true, y_pred, labels=labels, average=average, zero_division=0
            )
            metrics[average] = {
                "precision": float(precision),
                "recall": float(recall),
                "f1": float(f1),
            }

        metrics["per_intent"] = IntentMetrics.per_intent_metrics(y_true, y_pred, labels)
        return metrics

    @staticmethod
    def per_intent_metrics(
        y_true: list[str], y_pred: list[str], labels: list[str]
    ) -> dict[str, dict[str, float]]:
        precision, recall, f1, support = precision_recall_fscore_support(
            y_true, y_pred, labels=labels, average=None, zero_division=0
        )
        return {
            label: {
                "precision": float(precision[i]),
                "recall": float(recall[i]),
                "f1": float(f1[i]),
                "support": int(support[i]),
            }
            for i, label in enumerate(labels)
        }

    @staticmethod
    def worst_intents(
        per_intent: dict[str, dict[str, float]], top_n: int = 5
    ) -> list[tuple[str, float]]:
        """Intents with the lowest F1, worst first"""
        names = list(per_intent)
        scores = np.array([per_intent[name]["f1"] for name in names])
        order = np.argsort(scores, kind="stable")[:top_n]
        return [(names[i], float(scores[i])) for i in order]
