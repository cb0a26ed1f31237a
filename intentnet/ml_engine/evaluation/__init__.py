# intentnet/ml_engine/evaluation/__init__.py
"""
Evaluation Module for intentnet

MeasureResult:
- Top-1 hit count over a validation split or measurement corpus

IntentMetrics:
- Accuracy
- Per-intent precision, recall, F1
- Macro and weighted averages
"""

from intentnet.ml_engine.evaluation.metrics import IntentMetrics, MeasureResult

__all__ = [
    "IntentMetrics",
    "MeasureResult",
]
